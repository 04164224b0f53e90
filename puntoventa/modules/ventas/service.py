# puntoventa/modules/ventas/service.py
import logging
from typing import Any, Dict, List, Optional

from puntoventa.config.settings import settings
from puntoventa.core.exceptions import NotFoundError, ValidationError
from puntoventa.shared.services.inventory_service import InventoryService
from puntoventa.shared.services.saga import Saga
from puntoventa.shared.services.view_cache import ViewCache, VIEWS_AFTER_SALE
from puntoventa.shared.store import RemoteStore
from .cart import CartLine
from .repository import VentasRepository
from .schemas import CartLineResponse, CartResponse, CheckoutResponse
from .state import METODOS_PAGO, VentasPageState

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "¡Venta completada con éxito!"


class VentasService:
    """Punto de venta: grilla de productos, carrito y cobro"""

    def __init__(self, store: RemoteStore, views: ViewCache, state: VentasPageState):
        self.store = store
        self.repository = VentasRepository(store)
        self.views = views
        self.state = state

    # ==================== VISTAS ====================

    async def get_products(self, term: Optional[str] = None) -> List[Dict[str, Any]]:
        term = (term or "").strip() or None
        return self.views.get(
            ("productos", "grilla", term),
            lambda: self.repository.search_products_in_stock(term, settings.productos_grid_limit)
        )

    async def get_clients(self) -> List[Dict[str, Any]]:
        return self.views.get(("clientes", "opciones"), self.repository.list_clients)

    def get_cart(self) -> CartResponse:
        cart = self.state.cart
        return CartResponse(
            items=[
                CartLineResponse(
                    producto_id=line.producto_id,
                    nombre=line.producto["nombre"],
                    precio_unitario=line.precio_unitario,
                    cantidad=line.cantidad,
                    stock_actual=line.stock,
                    subtotal=line.subtotal
                )
                for line in cart.lines
            ],
            total=cart.total(),
            items_count=len(cart),
            cliente_id=self.state.cliente_id,
            metodo_pago=self.state.metodo_pago,
            submitting=self.state.submitting,
            success_message=self.state.success_notice()
        )

    # ==================== CARRITO ====================

    async def add_item(self, producto_id: int) -> CartResponse:
        producto = self.repository.get_product(producto_id)
        if not producto:
            raise NotFoundError(f"Producto {producto_id} no encontrado")

        line = self.state.cart.find(producto_id)
        if line is not None:
            # la línea conserva el precio con que se agregó; el stock se refresca
            line.producto["stock_actual"] = producto["stock_actual"]
        if not self.state.cart.add_item(producto):
            logger.debug(f"Producto {producto_id} sin stock adicional, no se agrega")
        return self.get_cart()

    async def update_quantity(self, producto_id: int, cantidad: int) -> CartResponse:
        if self.state.cart.update_quantity(producto_id, cantidad) is None:
            raise NotFoundError(f"El producto {producto_id} no está en el carrito")
        return self.get_cart()

    async def remove_item(self, producto_id: int) -> CartResponse:
        self.state.cart.remove_item(producto_id)
        return self.get_cart()

    async def clear_cart(self) -> CartResponse:
        self.state.cart.clear()
        return self.get_cart()

    async def set_checkout_options(self, cliente_id: Optional[int], metodo_pago: str) -> CartResponse:
        if metodo_pago not in METODOS_PAGO:
            raise ValidationError(f"Método de pago inválido: {metodo_pago}")
        if cliente_id is not None and not self.repository.get_client(cliente_id):
            raise NotFoundError(f"Cliente {cliente_id} no encontrado")
        self.state.cliente_id = cliente_id
        self.state.metodo_pago = metodo_pago
        return self.get_cart()

    # ==================== COBRO ====================

    async def checkout(self, usuario_id: Optional[str] = None) -> CheckoutResponse:
        """
        Registrar la venta del carrito.

        Pasos: insertar_venta, insertar_items y, por línea, actualizar_stock y
        registrar_movimiento, cada uno con su compensación. Al terminar se
        limpia el carrito, se vuelve a cliente general / efectivo y se
        invalidan las vistas de ventas y stock.

        Raises:
            ConflictError: Ya hay un cobro en curso en esta página
            ValidationError: Carrito vacío o stock insuficiente
            SagaError: Falló una escritura en el store
        """
        with self.state.submission():
            cart = self.state.cart
            if cart.is_empty:
                raise ValidationError("El carrito está vacío")

            lines = list(cart.lines)
            InventoryService.validate_availability(
                self.store,
                [(line.producto_id, line.producto["nombre"], line.cantidad) for line in lines]
            )

            venta_row = {
                "total": cart.total(),
                "metodo_pago": self.state.metodo_pago,
                "cliente_id": self.state.cliente_id,
            }
            if usuario_id:
                venta_row["usuario_id"] = usuario_id

            ctx = self._checkout_saga(lines, venta_row, usuario_id).run()
            venta = ctx["insertar_venta"]

            logger.info(f"✅ Venta #{venta['id']} registrada: {len(lines)} líneas, total {venta_row['total']}")
            self.state.reset()
            self.state.notify_success(SUCCESS_MESSAGE, settings.sale_success_seconds)
            self.views.invalidate(*VIEWS_AFTER_SALE)

        return CheckoutResponse(
            success=True,
            message=SUCCESS_MESSAGE,
            venta_id=venta["id"],
            total=venta_row["total"],
            metodo_pago=venta_row["metodo_pago"],
            cliente_id=venta_row["cliente_id"],
            items_count=len(lines),
            created_at=venta.get("created_at"),
            cart=self.get_cart()
        )

    def _checkout_saga(self, lines: List[CartLine], venta_row: Dict[str, Any], usuario_id: Optional[str]) -> Saga:
        repo = self.repository
        saga = Saga("venta", self.store)

        saga.step(
            "insertar_venta",
            lambda ctx: repo.create_sale(venta_row),
            lambda ctx, venta: repo.delete_sale(venta["id"])
        )
        saga.step(
            "insertar_items",
            lambda ctx: repo.create_sale_items([
                {
                    "venta_id": ctx["insertar_venta"]["id"],
                    "producto_id": line.producto_id,
                    "cantidad": line.cantidad,
                    "precio_unitario": line.precio_unitario,
                }
                for line in lines
            ]),
            lambda ctx, items: repo.delete_sale_items(ctx["insertar_venta"]["id"])
        )

        for line in lines:
            # stock y movimiento en pasos separados: cada escritura se compensa sola
            saga.step(
                f"actualizar_stock:{line.producto_id}",
                lambda ctx, line=line: InventoryService.update_stock(
                    self.store, line.producto_id, -line.cantidad
                ),
                lambda ctx, result, line=line: InventoryService.restore_stock(
                    self.store, line.producto_id, result[0]
                )
            )
            saga.step(
                f"registrar_movimiento:{line.producto_id}",
                lambda ctx, line=line: InventoryService.record_movement(
                    self.store,
                    line.producto_id,
                    "venta",
                    -line.cantidad,
                    f"Venta #{ctx['insertar_venta']['id']}",
                    usuario_id
                ),
                lambda ctx, movimiento, line=line: InventoryService.record_movement(
                    self.store,
                    line.producto_id,
                    "devolucion",
                    line.cantidad,
                    f"Reversión de venta #{ctx['insertar_venta']['id']}",
                    usuario_id
                )
            )
        return saga
