import asyncio
from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from puntoventa.core.exceptions import NotFoundError, SagaError, ValidationError
from puntoventa.modules.historial.periods import period_range
from puntoventa.modules.historial.service import HistorialService, compute_stats
from puntoventa.shared.exports.csv_export import export_filename, sales_csv
from puntoventa.shared.store import eq
from tests.conftest import FailingStore, add_sale, fail_when

NOW = datetime(2024, 5, 15, 14, 30, 0)


# ==================== PERIODOS ====================

def test_hoy_covers_whole_day():
    inicio, fin = period_range("hoy", NOW)
    assert inicio == datetime(2024, 5, 15, 0, 0, 0)
    assert fin.date() == date(2024, 5, 15)
    assert fin.hour == 23 and fin.minute == 59


def test_relative_periods_count_back_from_now():
    assert period_range("semana", NOW) == (datetime(2024, 5, 8, 14, 30), NOW)
    assert period_range("mes", NOW) == (datetime(2024, 4, 15, 14, 30), NOW)
    assert period_range("año", NOW) == (datetime(2023, 5, 15, 14, 30), NOW)


def test_mes_clamps_end_of_month():
    inicio, _ = period_range("mes", datetime(2024, 3, 31, 10, 0))
    assert inicio == datetime(2024, 2, 29, 10, 0)


def test_personalizado_includes_last_day():
    inicio, fin = period_range("personalizado", NOW, date(2024, 5, 1), date(2024, 5, 3))
    assert inicio == datetime(2024, 5, 1, 0, 0, 0)
    assert fin == datetime(2024, 5, 3, 23, 59, 59)


@pytest.mark.parametrize("args", [
    ("personalizado", NOW, None, date(2024, 5, 3)),
    ("personalizado", NOW, date(2024, 5, 3), date(2024, 5, 1)),
    ("trimestre", NOW, None, None),
])
def test_invalid_period_is_rejected(args):
    with pytest.raises(ValidationError):
        period_range(*args)


# ==================== ESTADÍSTICAS Y CSV ====================

def test_compute_stats():
    ventas = [
        {"total": Decimal("10.00"), "metodo_pago": "efectivo"},
        {"total": Decimal("5.50"), "metodo_pago": "tarjeta"},
        {"total": "4.50", "metodo_pago": "efectivo"},
    ]
    stats = compute_stats(ventas)
    assert stats["total_ventas"] == Decimal("20.00")
    assert stats["cantidad_ventas"] == 3
    assert stats["promedio_venta"] == Decimal("6.67")
    assert stats["ventas_efectivo"] == 2
    assert stats["ventas_tarjeta"] == 1


def test_compute_stats_empty():
    stats = compute_stats([])
    assert stats["promedio_venta"] == Decimal("0")
    assert stats["cantidad_ventas"] == 0


def test_sales_csv_format():
    ventas = [
        {"id": 12, "created_at": datetime(2024, 5, 1, 9, 5, 3), "cliente": {"nombre": "Ana Torres"},
         "total": Decimal("25.5"), "metodo_pago": "tarjeta"},
        {"id": 11, "created_at": "2024-04-30T18:00:00Z", "cliente": None,
         "total": 3, "metodo_pago": "efectivo"},
    ]
    lines = sales_csv(ventas).splitlines()
    assert lines == [
        "ID,Fecha,Cliente,Total,Método de Pago",
        "12,01/05/2024 09:05:03,Ana Torres,25.50,tarjeta",
        "11,30/04/2024 18:00:00,Cliente general,3.00,efectivo",
    ]


def test_export_filename():
    assert export_filename("ventas", "mes", "csv", today=date(2024, 5, 1)) == "ventas_mes_2024-05-01.csv"
    assert export_filename("reporte", "hoy", "pdf", today=date(2024, 5, 1)) == "reporte_hoy_2024-05-01.pdf"


# ==================== CONSULTAS ====================

def test_history_filters_by_period_and_method(store, views, catalog):
    ana = catalog["clientes"]["ana"]["id"]
    add_sale(store, "10.00", "efectivo", ana)
    add_sale(store, "5.50", "tarjeta")
    add_sale(store, "99.00", "efectivo", created_at=datetime.now() - timedelta(days=40))
    service = HistorialService(store, views)

    mes = asyncio.run(service.get_history("mes"))
    assert mes["stats"]["cantidad_ventas"] == 2
    assert mes["stats"]["total_ventas"] == Decimal("15.50")
    clientes = {v["cliente"]["nombre"] if v["cliente"] else None for v in mes["ventas"]}
    assert clientes == {"Ana Torres", None}

    tarjeta = asyncio.run(service.get_history("año", metodo_pago="tarjeta"))
    assert [Decimal(str(v["total"])) for v in tarjeta["ventas"]] == [Decimal("5.50")]

    por_cliente = asyncio.run(service.get_history("año", cliente_id=ana))
    assert len(por_cliente["ventas"]) == 1


def test_history_is_newest_first(store, views):
    old = add_sale(store, "1.00", created_at=datetime.now() - timedelta(hours=5))
    new = add_sale(store, "2.00", created_at=datetime.now() - timedelta(hours=1))
    service = HistorialService(store, views)

    ventas = asyncio.run(service.get_history("semana"))["ventas"]
    assert [v["id"] for v in ventas] == [new["id"], old["id"]]


def test_history_cache_follows_computed_range(store, views):
    now = datetime.now()
    add_sale(store, "8.00", created_at=now - timedelta(days=10))
    service = HistorialService(store, views)

    actual = asyncio.run(service.get_history("semana", now=now))
    anterior = asyncio.run(service.get_history("semana", now=now - timedelta(days=5)))

    # mismo periodo con otro "ahora" es otro rango, no la vista en caché
    assert actual["ventas"] == []
    assert len(anterior["ventas"]) == 1


def test_export_csv_uses_current_filters(store, views):
    add_sale(store, "7.25", "tarjeta", created_at=datetime.now())
    service = HistorialService(store, views)

    filename, content = asyncio.run(service.export_csv(periodo="hoy"))

    assert filename == f"ventas_hoy_{date.today().isoformat()}.csv"
    assert "Cliente general,7.25,tarjeta" in content


def test_export_pdf(store, views):
    add_sale(store, "7.25", "tarjeta")
    service = HistorialService(store, views)

    filename, content = asyncio.run(service.export_pdf(periodo="mes"))

    assert filename.startswith("reporte_mes_")
    assert content.startswith(b"%PDF")


# ==================== ANULACIÓN ====================

def sale_with_items(store, catalog):
    pastel = catalog["productos"]["pastel"]
    galleta = catalog["productos"]["galleta"]
    return add_sale(store, "25.50", items=[(pastel["id"], 2, "10.00"), (galleta["id"], 1, "5.50")])


def test_annul_sale_returns_stock_and_deletes(store, views, catalog):
    venta = sale_with_items(store, catalog)
    service = HistorialService(store, views)

    result = asyncio.run(service.annul_sale(venta["id"]))

    assert result.items_count == 2
    assert result.productos_omitidos == []
    assert store.count("ventas") == 0
    assert store.count("venta_items") == 0
    assert store.select_one("productos", [eq("id", catalog["productos"]["pastel"]["id"])])["stock_actual"] == 12
    assert store.select_one("productos", [eq("id", catalog["productos"]["galleta"]["id"])])["stock_actual"] == 4

    movimientos = store.select("movimientos_inventario")
    assert {m["tipo_movimiento"] for m in movimientos} == {"devolucion"}
    assert sorted(m["cantidad"] for m in movimientos) == [1, 2]
    assert all(m["justificacion"] == f"Anulación de venta #{venta['id']}" for m in movimientos)


class MissingProductStore(FailingStore):
    """Store donde algunos productos ya no existen"""

    def __init__(self, inner, missing):
        super().__init__(inner)
        self.missing = set(missing)

    def select(self, table, filters=(), order=(), limit=None, columns=None):
        rows = super().select(table, filters=filters, order=order, limit=limit, columns=columns)
        if table == "productos":
            rows = [r for r in rows if r["id"] not in self.missing]
        return rows


def test_annul_sale_skips_missing_products(store, views, catalog):
    venta = sale_with_items(store, catalog)
    galleta = catalog["productos"]["galleta"]["id"]
    service = HistorialService(MissingProductStore(store, [galleta]), views)

    result = asyncio.run(service.annul_sale(venta["id"]))

    assert result.productos_omitidos == [galleta]
    assert result.productos_devueltos == [catalog["productos"]["pastel"]["id"]]
    assert store.count("ventas") == 0
    assert store.select_one("productos", [eq("id", galleta)])["stock_actual"] == 3


def test_annul_failure_reverts_returned_stock(store, views, catalog):
    venta = sale_with_items(store, catalog)
    failing = FailingStore(store, fail_on=fail_when("delete", "venta_items"))
    service = HistorialService(failing, views)

    with pytest.raises(SagaError) as exc_info:
        asyncio.run(service.annul_sale(venta["id"]))

    assert exc_info.value.failed_step == "eliminar_items"
    assert store.count("ventas") == 1
    assert store.count("venta_items") == 2
    assert store.select_one("productos", [eq("id", catalog["productos"]["pastel"]["id"])])["stock_actual"] == 10
    assert store.select_one("productos", [eq("id", catalog["productos"]["galleta"]["id"])])["stock_actual"] == 3


def test_annul_movement_failure_restores_stock(store, views, catalog):
    venta = sale_with_items(store, catalog)
    pastel = catalog["productos"]["pastel"]["id"]
    failing = FailingStore(store, fail_on=fail_when("insert", "movimientos_inventario"))
    service = HistorialService(failing, views)

    with pytest.raises(SagaError) as exc_info:
        asyncio.run(service.annul_sale(venta["id"]))

    assert exc_info.value.failed_step.startswith("registrar_movimiento:")
    assert exc_info.value.fully_compensated
    assert store.count("ventas") == 1
    assert store.count("venta_items") == 2
    assert store.select_one("productos", [eq("id", pastel)])["stock_actual"] == 10
    assert store.count("movimientos_inventario") == 0


def test_annul_unknown_sale(store, views):
    with pytest.raises(NotFoundError):
        asyncio.run(HistorialService(store, views).annul_sale(999))


def test_sale_detail_joins_products(store, views, catalog):
    venta = sale_with_items(store, catalog)
    detalle = asyncio.run(HistorialService(store, views).get_sale_detail(venta["id"]))

    nombres = [i["producto_nombre"] for i in detalle["items"]]
    assert nombres == ["Pastel de chocolate", "Galleta de avena"]
    assert Decimal(str(detalle["items"][0]["subtotal"])) == Decimal("20.00")
