# puntoventa/modules/cotizaciones/router.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from puntoventa.core.auth.dependencies import get_current_user
from puntoventa.core.auth.schemas import CurrentSession
from puntoventa.core.dependencies import get_page_states, get_store, get_view_cache
from puntoventa.modules.ventas.schemas import ProductoVenta
from puntoventa.shared.schemas.common import BaseResponse
from puntoventa.shared.services.page_state import PageStateStore
from puntoventa.shared.services.view_cache import ViewCache
from puntoventa.shared.store import RemoteStore
from .service import CotizacionesService
from .state import CotizacionesPageState
from .schemas import (
    TipoRequest, HeaderRequest, ProductLineRequest, ProductQuantityRequest,
    IngredientLineRequest, IngredientUpdateRequest, EstadoRequest,
    QuotationFormResponse, CotizacionResponse, CotizacionDetalleResponse,
    QuotationCommitResponse
)

router = APIRouter()


def get_cotizaciones_service(
    current_user: CurrentSession = Depends(get_current_user),
    store: RemoteStore = Depends(get_store),
    views: ViewCache = Depends(get_view_cache),
    pages: PageStateStore = Depends(get_page_states)
) -> CotizacionesService:
    state = pages.get(current_user.user_id, "cotizaciones", CotizacionesPageState)
    return CotizacionesService(store, views, state)


# ==================== LISTA Y DETALLE ====================

@router.get("/", response_model=List[CotizacionResponse])
async def list_quotations(
    estado: Optional[str] = Query("todos", description="todos, pendiente, aceptada o rechazada"),
    search: Optional[str] = Query(None, description="Cliente o producto cotizado"),
    service: CotizacionesService = Depends(get_cotizaciones_service)
):
    """Cotizaciones de la más reciente a la más antigua"""
    return await service.list_quotations(estado, search)


@router.get("/productos", response_model=List[ProductoVenta])
async def search_products(
    search: Optional[str] = Query(None, description="Buscar por nombre o SKU"),
    service: CotizacionesService = Depends(get_cotizaciones_service)
):
    """Selector de productos para cotizar (máximo 20)"""
    return await service.search_products(search)


# ==================== FORMULARIO ====================

@router.get("/formulario", response_model=QuotationFormResponse)
async def get_form(service: CotizacionesService = Depends(get_cotizaciones_service)):
    return service.get_form()


@router.put("/formulario/tipo", response_model=QuotationFormResponse)
async def set_tipo(
    request: TipoRequest,
    service: CotizacionesService = Depends(get_cotizaciones_service)
):
    """Cambiar el tipo; pasar a estándar descarta los productos"""
    return await service.set_tipo(request.tipo)


@router.patch("/formulario", response_model=QuotationFormResponse)
async def update_header(
    request: HeaderRequest,
    service: CotizacionesService = Depends(get_cotizaciones_service)
):
    return await service.update_header(request.model_dump(exclude_unset=True))


@router.post("/formulario/productos", response_model=QuotationFormResponse)
async def add_product(
    request: ProductLineRequest,
    service: CotizacionesService = Depends(get_cotizaciones_service)
):
    return await service.add_product(request.producto_id)


@router.patch("/formulario/productos/{producto_id}", response_model=QuotationFormResponse)
async def update_product(
    producto_id: int,
    request: ProductQuantityRequest,
    service: CotizacionesService = Depends(get_cotizaciones_service)
):
    return await service.update_product_quantity(producto_id, request.cantidad)


@router.delete("/formulario/productos/{producto_id}", response_model=QuotationFormResponse)
async def remove_product(
    producto_id: int,
    service: CotizacionesService = Depends(get_cotizaciones_service)
):
    return await service.remove_product(producto_id)


@router.post("/formulario/ingredientes", response_model=QuotationFormResponse)
async def add_ingredient(
    request: IngredientLineRequest,
    service: CotizacionesService = Depends(get_cotizaciones_service)
):
    return await service.add_ingredient(request.ingrediente_id)


@router.patch("/formulario/ingredientes/{ingrediente_id}", response_model=QuotationFormResponse)
async def update_ingredient(
    ingrediente_id: int,
    request: IngredientUpdateRequest,
    service: CotizacionesService = Depends(get_cotizaciones_service)
):
    return await service.update_ingredient(ingrediente_id, request.cantidad, request.notas)


@router.delete("/formulario/ingredientes/{ingrediente_id}", response_model=QuotationFormResponse)
async def remove_ingredient(
    ingrediente_id: int,
    service: CotizacionesService = Depends(get_cotizaciones_service)
):
    return await service.remove_ingredient(ingrediente_id)


@router.delete("/formulario", response_model=QuotationFormResponse)
async def reset_form(service: CotizacionesService = Depends(get_cotizaciones_service)):
    return await service.reset_form()


@router.post("/", response_model=QuotationCommitResponse)
async def create_quotation(
    current_user: CurrentSession = Depends(get_current_user),
    service: CotizacionesService = Depends(get_cotizaciones_service)
):
    """
    Guardar la cotización del formulario

    - personalizada: requiere cliente, fecha de validez y al menos una línea
    - estandar: requiere nombre de producto y al menos un ingrediente
    """
    return await service.commit(usuario_id=current_user.user_id)


# ==================== POR ID ====================

@router.get("/{cotizacion_id}", response_model=CotizacionDetalleResponse)
async def get_quotation(
    cotizacion_id: int,
    service: CotizacionesService = Depends(get_cotizaciones_service)
):
    return await service.get_quotation_detail(cotizacion_id)


@router.patch("/{cotizacion_id}/estado", response_model=CotizacionResponse)
async def update_status(
    cotizacion_id: int,
    request: EstadoRequest,
    service: CotizacionesService = Depends(get_cotizaciones_service)
):
    """Aceptar o rechazar una cotización personalizada pendiente"""
    return await service.update_status(cotizacion_id, request.estado)


@router.delete("/{cotizacion_id}", response_model=BaseResponse)
async def delete_quotation(
    cotizacion_id: int,
    service: CotizacionesService = Depends(get_cotizaciones_service)
):
    await service.delete_quotation(cotizacion_id)
    return BaseResponse(success=True, message=f"Cotización {cotizacion_id} eliminada")
