# puntoventa/modules/cotizaciones/service.py
import logging
from typing import Any, Dict, List, Optional

from puntoventa.config.settings import settings
from puntoventa.core.exceptions import NotFoundError, ValidationError
from puntoventa.shared.services.saga import Saga
from puntoventa.shared.services.view_cache import ViewCache
from puntoventa.shared.store import RemoteStore
from .cart import QuotationCart
from .repository import CotizacionesRepository
from .schemas import (
    QuotationFormResponse, ProductLineResponse, IngredientLineResponse,
    QuotationCommitResponse
)
from .state import CotizacionesPageState

logger = logging.getLogger(__name__)

ESTADOS = ("pendiente", "aceptada", "rechazada")
TRANSICIONES = {"pendiente": ("aceptada", "rechazada")}


def filter_quotations(rows: List[Dict[str, Any]], term: Optional[str]) -> List[Dict[str, Any]]:
    """Filtro local de la lista por nombre del cliente o producto cotizado"""
    term = (term or "").strip().lower()
    if not term:
        return rows
    result = []
    for row in rows:
        cliente = row.get("cliente") or {}
        haystack = " ".join([cliente.get("nombre") or "", row.get("nombre_producto") or "", str(row["id"])])
        if term in haystack.lower():
            result.append(row)
    return result


class CotizacionesService:
    """Lista, detalle, formulario y registro de cotizaciones"""

    def __init__(self, store: RemoteStore, views: ViewCache, state: Optional[CotizacionesPageState] = None):
        self.store = store
        self.repository = CotizacionesRepository(store)
        self.views = views
        self.state = state

    # ==================== LISTA Y DETALLE ====================

    async def list_quotations(self, estado: Optional[str] = None, term: Optional[str] = None) -> List[Dict[str, Any]]:
        if estado in (None, "", "todos"):
            estado = None
        elif estado not in ESTADOS:
            raise ValidationError(f"Estado inválido: {estado}")

        rows = self.views.get(("cotizaciones", "lista", estado), lambda: self._fetch_list(estado))
        return filter_quotations(rows, term)

    def _fetch_list(self, estado: Optional[str]) -> List[Dict[str, Any]]:
        rows = self.repository.list_quotations(estado)
        clientes = self.repository.get_clients_by_ids([r["cliente_id"] for r in rows if r.get("cliente_id")])
        return [dict(row, cliente=clientes.get(row.get("cliente_id"))) for row in rows]

    async def get_quotation_detail(self, cotizacion_id: int) -> Dict[str, Any]:
        return self.views.get(("cotizaciones", "detalle", cotizacion_id), lambda: self._fetch_detail(cotizacion_id))

    def _fetch_detail(self, cotizacion_id: int) -> Dict[str, Any]:
        cotizacion = self.repository.get_quotation(cotizacion_id)
        if not cotizacion:
            raise NotFoundError(f"Cotización {cotizacion_id} no encontrada")

        cliente = None
        if cotizacion.get("cliente_id"):
            cliente = self.repository.get_clients_by_ids([cotizacion["cliente_id"]]).get(cotizacion["cliente_id"])

        items = self.repository.get_items(cotizacion_id)
        productos = self.repository.get_products_by_ids([i["producto_id"] for i in items])
        lines = self.repository.get_ingredient_lines(cotizacion_id)
        ingredientes = self.repository.get_ingredients_by_ids([l["ingrediente_id"] for l in lines])

        return dict(
            cotizacion,
            cliente=cliente,
            items=[
                dict(
                    item,
                    subtotal=item["precio_unitario"] * item["cantidad"],
                    producto_nombre=(productos.get(item["producto_id"]) or {}).get("nombre"),
                    producto_sku=(productos.get(item["producto_id"]) or {}).get("sku"),
                )
                for item in items
            ],
            ingredientes=[
                dict(
                    line,
                    subtotal=line["precio_unitario"] * line["cantidad"],
                    ingrediente_nombre=(ingredientes.get(line["ingrediente_id"]) or {}).get("nombre"),
                    unidad_medida=(ingredientes.get(line["ingrediente_id"]) or {}).get("unidad_medida"),
                )
                for line in lines
            ]
        )

    async def search_products(self, term: Optional[str] = None) -> List[Dict[str, Any]]:
        term = (term or "").strip() or None
        return self.views.get(
            ("productos", "selector", term),
            lambda: self.repository.search_products(term, settings.productos_picker_limit)
        )

    # ==================== FORMULARIO ====================

    @property
    def cart(self) -> QuotationCart:
        return self.state.cart

    def get_form(self) -> QuotationFormResponse:
        cart = self.cart
        header = cart.header
        return QuotationFormResponse(
            tipo=cart.tipo,
            cliente_id=getattr(header, "cliente_id", None),
            valida_hasta=getattr(header, "valida_hasta", None),
            nombre_producto=getattr(header, "nombre_producto", None),
            productos=[
                ProductLineResponse(
                    producto_id=line.producto_id,
                    nombre=line.producto["nombre"],
                    precio_unitario=line.precio_unitario,
                    cantidad=line.cantidad,
                    subtotal=line.subtotal
                )
                for line in cart.products
            ],
            ingredientes=[
                IngredientLineResponse(
                    ingrediente_id=line.ingrediente_id,
                    nombre=line.ingrediente["nombre"],
                    unidad_medida=line.ingrediente.get("unidad_medida"),
                    precio_unitario=line.precio_unitario,
                    cantidad=line.cantidad,
                    notas=line.notas,
                    subtotal=line.subtotal
                )
                for line in cart.ingredients
            ],
            total_productos=cart.products_total(),
            total_ingredientes=cart.ingredients_total(),
            total=cart.total(),
            submitting=self.state.submitting,
            success_message=self.state.success_notice()
        )

    async def set_tipo(self, tipo: str) -> QuotationFormResponse:
        self.cart.set_tipo(tipo)
        return self.get_form()

    async def update_header(self, values: Dict[str, Any]) -> QuotationFormResponse:
        cliente_id = values.get("cliente_id")
        if cliente_id is not None and self.cart.tipo == "personalizada" and not self.repository.get_client(cliente_id):
            raise NotFoundError(f"Cliente {cliente_id} no encontrado")
        self.cart.update_header(**values)
        return self.get_form()

    async def add_product(self, producto_id: int) -> QuotationFormResponse:
        if not self.cart.header.accepts_products:
            raise ValidationError("Las cotizaciones estándar solo admiten ingredientes")
        producto = self.repository.get_product(producto_id)
        if not producto:
            raise NotFoundError(f"Producto {producto_id} no encontrado")
        self.cart.add_product(producto)
        return self.get_form()

    async def update_product_quantity(self, producto_id: int, cantidad: int) -> QuotationFormResponse:
        if self.cart.update_product_quantity(producto_id, cantidad) is None:
            raise NotFoundError(f"El producto {producto_id} no está en la cotización")
        return self.get_form()

    async def remove_product(self, producto_id: int) -> QuotationFormResponse:
        self.cart.remove_product(producto_id)
        return self.get_form()

    async def add_ingredient(self, ingrediente_id: int) -> QuotationFormResponse:
        ingrediente = self.repository.get_ingredient(ingrediente_id)
        if not ingrediente or not ingrediente.get("activo", True):
            raise NotFoundError(f"Ingrediente {ingrediente_id} no encontrado")
        self.cart.add_ingredient(ingrediente)
        return self.get_form()

    async def update_ingredient(self, ingrediente_id: int, cantidad=None, notas: Optional[str] = None) -> QuotationFormResponse:
        if self.cart.find_ingredient(ingrediente_id) is None:
            raise NotFoundError(f"El ingrediente {ingrediente_id} no está en la cotización")
        if cantidad is not None:
            self.cart.update_ingredient_quantity(ingrediente_id, cantidad)
        if notas is not None:
            self.cart.update_ingredient_notes(ingrediente_id, notas)
        return self.get_form()

    async def remove_ingredient(self, ingrediente_id: int) -> QuotationFormResponse:
        self.cart.remove_ingredient(ingrediente_id)
        return self.get_form()

    async def reset_form(self) -> QuotationFormResponse:
        self.state.reset()
        return self.get_form()

    # ==================== REGISTRO ====================

    async def commit(self, usuario_id: Optional[str] = None) -> QuotationCommitResponse:
        """
        Guardar la cotización del formulario.

        La validación por tipo ocurre antes de cualquier escritura. Luego:
        insertar_cotizacion, insertar_items (personalizada con productos) e
        insertar_ingredientes (si hay), cada uno con su compensación.
        """
        with self.state.submission():
            cart = self.cart
            cart.validate()

            header = cart.header
            row: Dict[str, Any] = {
                "tipo": cart.tipo,
                "total": cart.total(),
                "estado": "pendiente",
                "cliente_id": getattr(header, "cliente_id", None),
                "valida_hasta": getattr(header, "valida_hasta", None),
                "nombre_producto": header.nombre_producto.strip() if cart.tipo == "estandar" else None,
            }
            if usuario_id:
                row["usuario_id"] = usuario_id

            products = list(cart.products)
            ingredients = list(cart.ingredients)
            ctx = self._commit_saga(row, products, ingredients).run()
            cotizacion = ctx["insertar_cotizacion"]

            logger.info(
                f"✅ Cotización #{cotizacion['id']} ({cart.tipo}) registrada: "
                f"{len(products)} productos, {len(ingredients)} ingredientes, total {row['total']}"
            )
            self.state.reset()
            self.state.notify_success("Cotización creada", settings.sale_success_seconds)
            self.views.invalidate("cotizaciones")

        return QuotationCommitResponse(
            success=True,
            message="Cotización creada",
            cotizacion_id=cotizacion["id"],
            tipo=row["tipo"],
            total=row["total"],
            items_count=len(products),
            ingredientes_count=len(ingredients),
            form=self.get_form()
        )

    def _commit_saga(self, row: Dict[str, Any], products, ingredients) -> Saga:
        repo = self.repository
        saga = Saga("cotizacion", self.store)
        saga.step(
            "insertar_cotizacion",
            lambda ctx: repo.create_quotation(row),
            lambda ctx, cotizacion: repo.delete_quotation(cotizacion["id"])
        )
        if products:
            saga.step(
                "insertar_items",
                lambda ctx: repo.create_items([
                    {
                        "cotizacion_id": ctx["insertar_cotizacion"]["id"],
                        "producto_id": line.producto_id,
                        "cantidad": line.cantidad,
                        "precio_unitario": line.precio_unitario,
                    }
                    for line in products
                ]),
                lambda ctx, items: repo.delete_items(ctx["insertar_cotizacion"]["id"])
            )
        if ingredients:
            saga.step(
                "insertar_ingredientes",
                lambda ctx: repo.create_ingredient_lines([
                    {
                        "cotizacion_id": ctx["insertar_cotizacion"]["id"],
                        "ingrediente_id": line.ingrediente_id,
                        "cantidad": line.cantidad,
                        "precio_unitario": line.precio_unitario,
                        "notas": line.notas or None,
                    }
                    for line in ingredients
                ]),
                lambda ctx, lines: repo.delete_ingredient_lines(ctx["insertar_cotizacion"]["id"])
            )
        return saga

    # ==================== ESTADO Y ELIMINACIÓN ====================

    async def update_status(self, cotizacion_id: int, estado: str) -> Dict[str, Any]:
        """pendiente -> aceptada | rechazada, solo para cotizaciones personalizadas"""
        cotizacion = self.repository.get_quotation(cotizacion_id)
        if not cotizacion:
            raise NotFoundError(f"Cotización {cotizacion_id} no encontrada")
        if cotizacion["tipo"] != "personalizada":
            raise ValidationError("Solo las cotizaciones personalizadas cambian de estado")
        if estado not in TRANSICIONES.get(cotizacion["estado"], ()):
            raise ValidationError(
                f"No se puede pasar de '{cotizacion['estado']}' a '{estado}'",
                details={"estado_actual": cotizacion["estado"]}
            )

        rows = self.repository.update_status(cotizacion_id, estado)
        self.views.invalidate("cotizaciones")
        logger.info(f"Cotización #{cotizacion_id}: {cotizacion['estado']} -> {estado}")
        return rows[0] if rows else dict(cotizacion, estado=estado)

    async def delete_quotation(self, cotizacion_id: int) -> None:
        if not self.repository.get_quotation(cotizacion_id):
            raise NotFoundError(f"Cotización {cotizacion_id} no encontrada")

        repo = self.repository
        (
            Saga("eliminar_cotizacion", self.store)
            .step("eliminar_items", lambda ctx: repo.delete_items(cotizacion_id))
            .step("eliminar_ingredientes", lambda ctx: repo.delete_ingredient_lines(cotizacion_id))
            .step("eliminar_cotizacion", lambda ctx: repo.delete_quotation(cotizacion_id))
            .run()
        )
        self.views.invalidate("cotizaciones")
