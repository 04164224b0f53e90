# puntoventa/modules/ventas/router.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from puntoventa.core.auth.dependencies import get_current_user
from puntoventa.core.auth.schemas import CurrentSession
from puntoventa.core.dependencies import get_page_states, get_store, get_view_cache
from puntoventa.shared.services.page_state import PageStateStore
from puntoventa.shared.services.view_cache import ViewCache
from puntoventa.shared.store import RemoteStore
from .service import VentasService
from .state import VentasPageState
from .schemas import (
    ProductoVenta, ClienteOption, CartItemRequest, CartQuantityRequest,
    CheckoutOptionsRequest, CartResponse, CheckoutResponse
)

router = APIRouter()


def get_ventas_service(
    current_user: CurrentSession = Depends(get_current_user),
    store: RemoteStore = Depends(get_store),
    views: ViewCache = Depends(get_view_cache),
    pages: PageStateStore = Depends(get_page_states)
) -> VentasService:
    state = pages.get(current_user.user_id, "ventas", VentasPageState)
    return VentasService(store, views, state)


@router.get("/productos", response_model=List[ProductoVenta])
async def get_products(
    search: Optional[str] = Query(None, description="Buscar por nombre o SKU"),
    service: VentasService = Depends(get_ventas_service)
):
    """Productos con stock disponible para vender"""
    return await service.get_products(search)


@router.get("/clientes", response_model=List[ClienteOption])
async def get_clients(service: VentasService = Depends(get_ventas_service)):
    return await service.get_clients()


@router.get("/carrito", response_model=CartResponse)
async def get_cart(service: VentasService = Depends(get_ventas_service)):
    """Carrito actual, cliente y método de pago seleccionados"""
    return service.get_cart()


@router.post("/carrito/items", response_model=CartResponse)
async def add_cart_item(
    item: CartItemRequest,
    service: VentasService = Depends(get_ventas_service)
):
    """
    Agregar una unidad de un producto al carrito

    - Sin stock: no se agrega
    - Ya en el carrito: cantidad + 1 sin superar el stock
    """
    return await service.add_item(item.producto_id)


@router.patch("/carrito/items/{producto_id}", response_model=CartResponse)
async def update_cart_item(
    producto_id: int,
    request: CartQuantityRequest,
    service: VentasService = Depends(get_ventas_service)
):
    return await service.update_quantity(producto_id, request.cantidad)


@router.delete("/carrito/items/{producto_id}", response_model=CartResponse)
async def remove_cart_item(
    producto_id: int,
    service: VentasService = Depends(get_ventas_service)
):
    return await service.remove_item(producto_id)


@router.delete("/carrito", response_model=CartResponse)
async def clear_cart(service: VentasService = Depends(get_ventas_service)):
    return await service.clear_cart()


@router.put("/carrito/opciones", response_model=CartResponse)
async def set_checkout_options(
    options: CheckoutOptionsRequest,
    service: VentasService = Depends(get_ventas_service)
):
    """Seleccionar cliente (opcional) y método de pago"""
    return await service.set_checkout_options(options.cliente_id, options.metodo_pago)


@router.post("/checkout", response_model=CheckoutResponse)
async def checkout(
    current_user: CurrentSession = Depends(get_current_user),
    service: VentasService = Depends(get_ventas_service)
):
    """
    Completar la venta del carrito

    **Incluye:**
    - Registro de la venta y sus items
    - Descuento de stock con movimiento de inventario por producto
    - Limpieza del carrito y aviso de éxito
    """
    return await service.checkout(usuario_id=current_user.user_id)
