# puntoventa/modules/ventas/state.py
from typing import Optional

from puntoventa.modules.ventas.cart import SalesCart
from puntoventa.shared.services.page_state import PageState

METODOS_PAGO = ("efectivo", "tarjeta")


class VentasPageState(PageState):
    """Punto de venta: carrito, cliente seleccionado y método de pago"""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.cart = SalesCart()
        self.cliente_id: Optional[int] = None
        self.metodo_pago = "efectivo"

    def reset(self) -> None:
        self.cart.clear()
        self.cliente_id = None
        self.metodo_pago = "efectivo"
