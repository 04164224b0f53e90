import asyncio
from datetime import date, timedelta
from decimal import Decimal

import pytest

from puntoventa.core.exceptions import NotFoundError, SagaError, ValidationError
from puntoventa.modules.cotizaciones.cart import QuotationCart
from puntoventa.modules.cotizaciones.service import CotizacionesService, filter_quotations
from puntoventa.modules.cotizaciones.state import CotizacionesPageState
from puntoventa.shared.store import eq
from tests.conftest import FailingStore, USER_ID, fail_when

HARINA = {"id": 1, "nombre": "Harina", "unidad_medida": "kg", "precio_unitario": "0.80"}
AZUCAR = {"id": 2, "nombre": "Azúcar", "unidad_medida": "kg", "precio_unitario": "1.20"}
PASTEL = {"id": 7, "nombre": "Pastel", "precio_venta": "10.00"}


# ==================== FORMULARIO ====================

def test_estandar_drops_product_lines():
    cart = QuotationCart()
    cart.add_product(PASTEL)
    cart.add_ingredient(HARINA)

    cart.set_tipo("estandar")

    assert cart.products == []
    assert len(cart.ingredients) == 1
    with pytest.raises(ValidationError):
        cart.add_product(PASTEL)


def test_header_fields_depend_on_tipo():
    cart = QuotationCart()
    cart.update_header(cliente_id=3, valida_hasta=date(2026, 12, 31))
    with pytest.raises(ValidationError):
        cart.update_header(nombre_producto="Torta")

    cart.set_tipo("estandar")
    cart.update_header(nombre_producto="Torta")
    with pytest.raises(ValidationError):
        cart.update_header(cliente_id=3)


def test_quantities_have_lower_bounds():
    cart = QuotationCart()
    cart.add_product(PASTEL)
    cart.add_product(PASTEL)
    assert cart.find_product(7).cantidad == 2
    assert cart.update_product_quantity(7, 0).cantidad == 1

    cart.add_ingredient(HARINA)
    assert cart.find_ingredient(1).cantidad == Decimal("1")
    assert cart.update_ingredient_quantity(1, "0.01").cantidad == Decimal("0.1")
    assert cart.update_ingredient_quantity(1, "2.5").cantidad == Decimal("2.5")


def test_total_sums_products_and_ingredients():
    cart = QuotationCart()
    cart.add_product(PASTEL)
    cart.add_ingredient(HARINA)
    cart.update_ingredient_quantity(1, "2.5")

    assert cart.products_total() == Decimal("10.00")
    assert cart.ingredients_total() == Decimal("2.000")
    assert cart.total() == Decimal("12.00")


def test_ingredient_quantity_keeps_three_decimals():
    cart = QuotationCart()
    cart.add_ingredient(HARINA)

    line = cart.update_ingredient_quantity(1, "0.1234")

    assert line.cantidad == Decimal("0.123")
    assert cart.ingredients_total() == Decimal("0.0984")
    assert cart.update_ingredient_quantity(1, "1.2345").cantidad == Decimal("1.235")


@pytest.mark.parametrize("tipo,setup,missing", [
    ("personalizada", {}, "cliente_id, valida_hasta"),
    ("personalizada", {"cliente_id": 1}, "valida_hasta"),
    ("estandar", {}, "nombre_producto"),
    ("estandar", {"nombre_producto": "   "}, "nombre_producto"),
])
def test_validate_reports_missing_header_fields(tipo, setup, missing):
    cart = QuotationCart(tipo)
    cart.add_ingredient(HARINA)
    cart.update_header(**setup)

    with pytest.raises(ValidationError, match=f"Faltan datos de la cotización: {missing}"):
        cart.validate()


def test_validate_requires_lines():
    cart = QuotationCart("estandar")
    cart.update_header(nombre_producto="Cake")
    with pytest.raises(ValidationError, match="ingrediente"):
        cart.validate()

    cart = QuotationCart()
    cart.update_header(cliente_id=1, valida_hasta=date(2026, 12, 31))
    with pytest.raises(ValidationError):
        cart.validate()


def test_clear_keeps_tipo():
    cart = QuotationCart("estandar")
    cart.update_header(nombre_producto="Cake")
    cart.add_ingredient(AZUCAR)

    cart.clear()

    assert cart.tipo == "estandar"
    assert cart.header.nombre_producto == ""
    assert cart.is_empty


def test_filter_quotations_by_client_or_product_name():
    rows = [
        {"id": 1, "cliente": {"nombre": "Ana Torres"}, "nombre_producto": None},
        {"id": 2, "cliente": None, "nombre_producto": "Cake de boda"},
    ]
    assert [r["id"] for r in filter_quotations(rows, "ana")] == [1]
    assert [r["id"] for r in filter_quotations(rows, "BODA")] == [2]
    assert len(filter_quotations(rows, "  ")) == 2


# ==================== REGISTRO ====================

def make_service(store, views, state=None):
    return CotizacionesService(store, views, state or CotizacionesPageState())


def test_commit_estandar_quotation(store, views, catalog):
    state = CotizacionesPageState()
    service = make_service(store, views, state)
    harina = catalog["ingredientes"]["harina"]["id"]
    azucar = catalog["ingredientes"]["azucar"]["id"]

    asyncio.run(service.set_tipo("estandar"))
    asyncio.run(service.update_header({"nombre_producto": "Cake"}))
    asyncio.run(service.add_ingredient(harina))
    asyncio.run(service.update_ingredient(harina, cantidad=Decimal("2.5"), notas="sin gluten"))
    asyncio.run(service.add_ingredient(azucar))

    result = asyncio.run(service.commit(usuario_id=USER_ID))

    assert result.total == Decimal("3.20")
    assert result.tipo == "estandar"
    assert result.ingredientes_count == 2

    cotizacion = store.select_one("cotizaciones", [eq("id", result.cotizacion_id)])
    assert cotizacion["nombre_producto"] == "Cake"
    assert cotizacion["cliente_id"] is None
    assert cotizacion["estado"] == "pendiente"
    assert Decimal(str(cotizacion["total"])) == Decimal("3.20")

    lines = store.select("cotizacion_ingredientes", [eq("cotizacion_id", result.cotizacion_id)])
    assert len(lines) == 2
    assert {l["notas"] for l in lines} == {"sin gluten", None}
    assert store.count("cotizacion_items") == 0

    # el formulario vuelve a estar vacío, del mismo tipo
    assert state.cart.is_empty
    assert state.cart.tipo == "estandar"
    assert result.form.success_message == "Cotización creada"


def test_commit_personalizada_quotation(store, views, catalog):
    service = make_service(store, views)
    pastel = catalog["productos"]["pastel"]["id"]
    cliente = catalog["clientes"]["ana"]["id"]
    valida = date.today() + timedelta(days=15)

    asyncio.run(service.update_header({"cliente_id": cliente, "valida_hasta": valida}))
    asyncio.run(service.add_product(pastel))
    asyncio.run(service.update_product_quantity(pastel, 3))
    asyncio.run(service.add_ingredient(catalog["ingredientes"]["azucar"]["id"]))

    result = asyncio.run(service.commit())

    assert result.total == Decimal("31.20")
    cotizacion = store.select_one("cotizaciones", [eq("id", result.cotizacion_id)])
    assert cotizacion["tipo"] == "personalizada"
    assert cotizacion["valida_hasta"] == valida
    assert cotizacion["nombre_producto"] is None
    items = store.select("cotizacion_items", [eq("cotizacion_id", result.cotizacion_id)])
    assert [(i["producto_id"], i["cantidad"]) for i in items] == [(pastel, 3)]
    # una cotización no mueve stock
    assert store.select_one("productos", [eq("id", pastel)])["stock_actual"] == 10


def test_update_header_rejects_unknown_client(store, views, catalog):
    state = CotizacionesPageState()
    service = make_service(store, views, state)
    ana = catalog["clientes"]["ana"]["id"]
    asyncio.run(service.update_header({"cliente_id": ana}))

    with pytest.raises(NotFoundError):
        asyncio.run(service.update_header({"cliente_id": 9999, "valida_hasta": date(2026, 12, 31)}))

    # el encabezado queda como estaba
    assert state.cart.header.cliente_id == ana
    assert state.cart.header.valida_hasta is None


def test_commit_invalid_form_makes_no_store_calls(store, views):
    failing = FailingStore(store)
    state = CotizacionesPageState()
    state.cart.add_ingredient(HARINA)
    service = make_service(failing, views, state)

    with pytest.raises(ValidationError, match="Faltan datos"):
        asyncio.run(service.commit())

    assert failing.calls == []
    assert len(state.cart.ingredients) == 1


def test_commit_failure_removes_header(store, views, catalog):
    failing = FailingStore(store, fail_on=fail_when("insert", "cotizacion_ingredientes"))
    state = CotizacionesPageState()
    service = make_service(failing, views, state)
    asyncio.run(service.set_tipo("estandar"))
    asyncio.run(service.update_header({"nombre_producto": "Cake"}))
    asyncio.run(service.add_ingredient(catalog["ingredientes"]["harina"]["id"]))

    with pytest.raises(SagaError) as exc_info:
        asyncio.run(service.commit())

    assert exc_info.value.failed_step == "insertar_ingredientes"
    assert exc_info.value.compensated_steps == ["insertar_cotizacion"]
    assert store.count("cotizaciones") == 0
    assert not state.cart.is_empty


def test_add_inactive_ingredient_is_rejected(store, views, catalog):
    harina = catalog["ingredientes"]["harina"]["id"]
    store.update("ingredientes", [eq("id", harina)], {"activo": False})
    service = make_service(store, views)

    with pytest.raises(NotFoundError):
        asyncio.run(service.add_ingredient(harina))


# ==================== ESTADO Y ELIMINACIÓN ====================

def insert_quotation(store, tipo="personalizada", estado="pendiente", **extra):
    return store.insert("cotizaciones", dict({"tipo": tipo, "total": Decimal("10.00"), "estado": estado}, **extra))


@pytest.mark.parametrize("estado", ["aceptada", "rechazada"])
def test_pending_quotation_can_be_resolved(store, views, estado):
    cotizacion = insert_quotation(store)
    service = make_service(store, views)

    updated = asyncio.run(service.update_status(cotizacion["id"], estado))

    assert updated["estado"] == estado
    assert store.select_one("cotizaciones", [eq("id", cotizacion["id"])])["estado"] == estado


def test_resolved_quotation_cannot_change_again(store, views):
    cotizacion = insert_quotation(store, estado="aceptada")
    service = make_service(store, views)

    with pytest.raises(ValidationError):
        asyncio.run(service.update_status(cotizacion["id"], "rechazada"))


def test_estandar_quotation_has_no_status_actions(store, views):
    cotizacion = insert_quotation(store, tipo="estandar", nombre_producto="Cake")
    service = make_service(store, views)

    with pytest.raises(ValidationError):
        asyncio.run(service.update_status(cotizacion["id"], "aceptada"))


def test_list_refreshes_after_status_change(store, views, catalog):
    cotizacion = insert_quotation(store, cliente_id=catalog["clientes"]["ana"]["id"])
    service = make_service(store, views)

    pendientes = asyncio.run(service.list_quotations("pendiente"))
    assert [c["id"] for c in pendientes] == [cotizacion["id"]]
    assert pendientes[0]["cliente"]["nombre"] == "Ana Torres"

    asyncio.run(service.update_status(cotizacion["id"], "aceptada"))

    assert asyncio.run(service.list_quotations("pendiente")) == []
    assert len(asyncio.run(service.list_quotations("todos"))) == 1


def test_delete_quotation_removes_lines(store, views, catalog):
    cotizacion = insert_quotation(store)
    store.insert("cotizacion_items", {
        "cotizacion_id": cotizacion["id"], "producto_id": catalog["productos"]["pastel"]["id"],
        "cantidad": 1, "precio_unitario": Decimal("10.00"),
    })
    service = make_service(store, views)

    detalle = asyncio.run(service.get_quotation_detail(cotizacion["id"]))
    assert detalle["items"][0]["producto_nombre"] == "Pastel de chocolate"

    asyncio.run(service.delete_quotation(cotizacion["id"]))

    assert store.count("cotizaciones") == 0
    assert store.count("cotizacion_items") == 0
    with pytest.raises(NotFoundError):
        asyncio.run(service.get_quotation_detail(cotizacion["id"]))
