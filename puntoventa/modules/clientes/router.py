# puntoventa/modules/clientes/router.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from puntoventa.core.dependencies import get_store, get_view_cache
from puntoventa.shared.schemas.common import BaseResponse
from puntoventa.shared.services.view_cache import ViewCache
from puntoventa.shared.store import RemoteStore
from .service import ClientesService
from .schemas import ClienteRequest, ClienteResponse

router = APIRouter()


def get_clientes_service(
    store: RemoteStore = Depends(get_store),
    views: ViewCache = Depends(get_view_cache)
) -> ClientesService:
    return ClientesService(store, views)


@router.get("/", response_model=List[ClienteResponse])
async def list_clients(
    search: Optional[str] = Query(None, description="Buscar por nombre, email o teléfono"),
    service: ClientesService = Depends(get_clientes_service)
):
    return await service.list_clients(search)


@router.post("/", response_model=ClienteResponse)
async def create_client(
    cliente: ClienteRequest,
    service: ClientesService = Depends(get_clientes_service)
):
    return await service.create_client(cliente)


@router.get("/{cliente_id}", response_model=ClienteResponse)
async def get_client(
    cliente_id: int,
    service: ClientesService = Depends(get_clientes_service)
):
    return await service.get_client(cliente_id)


@router.put("/{cliente_id}", response_model=ClienteResponse)
async def update_client(
    cliente_id: int,
    cliente: ClienteRequest,
    service: ClientesService = Depends(get_clientes_service)
):
    return await service.update_client(cliente_id, cliente)


@router.delete("/{cliente_id}", response_model=BaseResponse)
async def delete_client(
    cliente_id: int,
    service: ClientesService = Depends(get_clientes_service)
):
    """Eliminar cliente (no se permite si tiene ventas o cotizaciones)"""
    await service.delete_client(cliente_id)
    return BaseResponse(success=True, message=f"Cliente {cliente_id} eliminado")
