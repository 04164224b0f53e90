# puntoventa/shared/exports/csv_export.py
import csv
import io
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

CSV_HEADERS = ["ID", "Fecha", "Cliente", "Total", "Método de Pago"]
DATE_FORMAT = "%d/%m/%Y %H:%M:%S"


def format_fecha(value: Any) -> str:
    if not isinstance(value, datetime):
        value = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return value.strftime(DATE_FORMAT)


def format_total(value: Any) -> str:
    return f"{Decimal(str(value)):.2f}"


def sales_csv(ventas: Iterable[Dict[str, Any]]) -> str:
    """
    CSV del historial de ventas.

    Cada venta lleva opcionalmente 'cliente' ({"nombre": ...}); sin cliente
    se escribe "Cliente general".
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for venta in ventas:
        cliente = venta.get("cliente") or {}
        writer.writerow([
            venta["id"],
            format_fecha(venta["created_at"]),
            cliente.get("nombre") or "Cliente general",
            format_total(venta["total"]),
            venta["metodo_pago"],
        ])
    return buffer.getvalue()


def export_filename(prefix: str, periodo: str, extension: str, today: Optional[date] = None) -> str:
    """ventas_mes_2024-05-01.csv, reporte_hoy_2024-05-01.pdf"""
    today = today or date.today()
    return f"{prefix}_{periodo}_{today.isoformat()}.{extension}"
