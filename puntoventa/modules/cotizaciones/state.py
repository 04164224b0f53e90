# puntoventa/modules/cotizaciones/state.py
from puntoventa.modules.cotizaciones.cart import QuotationCart
from puntoventa.shared.services.page_state import PageState


class CotizacionesPageState(PageState):
    """Formulario de nueva cotización"""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.cart = QuotationCart()

    def reset(self) -> None:
        self.cart.clear()
