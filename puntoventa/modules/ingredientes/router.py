# puntoventa/modules/ingredientes/router.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from puntoventa.core.dependencies import get_store, get_view_cache
from puntoventa.shared.services.view_cache import ViewCache
from puntoventa.shared.store import RemoteStore
from .service import IngredientesService
from .schemas import IngredienteRequest, IngredienteResponse

router = APIRouter()


def get_ingredientes_service(
    store: RemoteStore = Depends(get_store),
    views: ViewCache = Depends(get_view_cache)
) -> IngredientesService:
    return IngredientesService(store, views)


@router.get("/", response_model=List[IngredienteResponse])
async def list_ingredients(
    search: Optional[str] = Query(None, description="Buscar por nombre"),
    incluir_inactivos: bool = Query(False),
    service: IngredientesService = Depends(get_ingredientes_service)
):
    """Ingredientes activos ordenados por nombre"""
    return await service.list_ingredients(search, incluir_inactivos)


@router.post("/", response_model=IngredienteResponse)
async def create_ingredient(
    ingrediente: IngredienteRequest,
    service: IngredientesService = Depends(get_ingredientes_service)
):
    return await service.create_ingredient(ingrediente)


@router.get("/{ingrediente_id}", response_model=IngredienteResponse)
async def get_ingredient(
    ingrediente_id: int,
    service: IngredientesService = Depends(get_ingredientes_service)
):
    return await service.get_ingredient(ingrediente_id)


@router.put("/{ingrediente_id}", response_model=IngredienteResponse)
async def update_ingredient(
    ingrediente_id: int,
    ingrediente: IngredienteRequest,
    service: IngredientesService = Depends(get_ingredientes_service)
):
    return await service.update_ingredient(ingrediente_id, ingrediente)


@router.delete("/{ingrediente_id}", response_model=IngredienteResponse)
async def deactivate_ingredient(
    ingrediente_id: int,
    service: IngredientesService = Depends(get_ingredientes_service)
):
    """Desactivar ingrediente (deja de aparecer en el selector)"""
    return await service.deactivate_ingredient(ingrediente_id)
