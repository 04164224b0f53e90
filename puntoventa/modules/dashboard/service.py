# puntoventa/modules/dashboard/service.py
import logging
from datetime import date, datetime, time
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional, Tuple

from puntoventa.shared.exports.csv_export import export_filename, format_total
from puntoventa.shared.exports.pdf_export import report_pdf
from puntoventa.shared.services.view_cache import ViewCache
from puntoventa.shared.store import RemoteStore
from puntoventa.modules.ventas.cart import to_decimal
from .repository import DashboardRepository

logger = logging.getLogger(__name__)


def goal_progress(ventas_mes: Decimal, monto_objetivo: Decimal) -> Dict[str, Decimal]:
    objetivo = to_decimal(monto_objetivo)
    progreso = (ventas_mes * 100 / objetivo).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP) if objetivo else Decimal("0")
    return {
        "monto_objetivo": objetivo,
        "progreso": progreso,
        "faltante": max(objetivo - ventas_mes, Decimal("0")),
    }


class DashboardService:
    """Métricas del panel: ventas de hoy y del mes, stock bajo, clientes y meta"""

    def __init__(self, store: RemoteStore, views: ViewCache):
        self.repository = DashboardRepository(store)
        self.views = views

    async def get_dashboard(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or datetime.now()
        today = datetime.combine(now.date(), time.min)
        month_start = today.replace(day=1)

        ventas_hoy = self.views.get(("ventasHoy", today.date()), lambda: self.repository.sum_sales_since(today))
        ventas_mes = self.views.get(("ventasMes", month_start.date()), lambda: self.repository.sum_sales_since(month_start))
        stock_bajo = self.views.get(("stockBajo",), self.repository.get_low_stock_products)
        clientes = self.views.get(("clientesActivos",), self.repository.count_clients)
        meta = self.views.get(("meta", month_start.date()), lambda: self.repository.get_goal(month_start.date()))

        return {
            "ventas_hoy": ventas_hoy,
            "ventas_mes": ventas_mes,
            "stock_bajo": stock_bajo,
            "stock_bajo_count": len(stock_bajo),
            "clientes_activos": clientes,
            "meta": dict(mes=month_start.date(), **goal_progress(ventas_mes, meta["monto_objetivo"])) if meta else None,
        }

    async def set_goal(self, monto_objetivo: Decimal, mes: Optional[date] = None) -> Dict[str, Any]:
        """Crear o actualizar la meta de ventas del mes"""
        mes = (mes or date.today()).replace(day=1)
        meta = self.repository.get_goal(mes)
        if meta:
            rows = self.repository.update_goal(meta["id"], monto_objetivo)
            meta = rows[0] if rows else dict(meta, monto_objetivo=monto_objetivo)
        else:
            meta = self.repository.create_goal(mes, monto_objetivo)
        self.views.invalidate("meta")
        logger.info(f"Meta de {mes.strftime('%m/%Y')}: {monto_objetivo}")
        return meta

    async def export_pdf(self) -> Tuple[str, bytes]:
        data = await self.get_dashboard()
        stats = [
            ("Ventas hoy", f"${format_total(data['ventas_hoy'])}"),
            ("Ventas del mes", f"${format_total(data['ventas_mes'])}"),
            ("Productos con stock bajo", data["stock_bajo_count"]),
            ("Clientes activos", data["clientes_activos"]),
        ]
        if data["meta"]:
            stats.append(("Meta del mes", f"${format_total(data['meta']['monto_objetivo'])} ({data['meta']['progreso']}%)"))
        content = report_pdf(
            "Resumen del Negocio",
            ["ID", "Producto", "SKU", "Stock actual", "Stock mínimo"],
            [
                [p["id"], p["nombre"], p.get("sku") or "-", p["stock_actual"], p["stock_minimo"]]
                for p in data["stock_bajo"]
            ],
            stats=stats
        )
        return export_filename("reporte", "dashboard", "pdf"), content
