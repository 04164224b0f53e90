# puntoventa/modules/productos/router.py
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Query, UploadFile

from puntoventa.core.auth.dependencies import get_current_user
from puntoventa.core.auth.schemas import CurrentSession
from puntoventa.core.dependencies import get_image_storage, get_store, get_view_cache
from puntoventa.shared.schemas.common import BaseResponse
from puntoventa.shared.services.cloudinary_service import CloudinaryStorage
from puntoventa.shared.services.view_cache import ViewCache
from puntoventa.shared.store import RemoteStore
from .service import ProductosService
from .schemas import (
    ProductoCreate, ProductoUpdate, ProductoResponse, ProductosListResponse,
    MovimientoResponse, CategoriaBase, CategoriaResponse
)

router = APIRouter()
categorias_router = APIRouter()


def get_productos_service(
    store: RemoteStore = Depends(get_store),
    views: ViewCache = Depends(get_view_cache),
    images: CloudinaryStorage = Depends(get_image_storage)
) -> ProductosService:
    return ProductosService(store, views, images)


# ==================== PRODUCTOS ====================

@router.get("/", response_model=ProductosListResponse)
async def list_products(
    search: Optional[str] = Query(None, description="Buscar por nombre o SKU"),
    categoria_id: Optional[int] = Query(None, description="Filtrar por categoría"),
    service: ProductosService = Depends(get_productos_service)
):
    """
    Catálogo de productos ordenado por nombre

    **Estadísticas:** total de productos, valor del inventario (costo × stock) y stock bajo
    """
    return await service.list_products(search, categoria_id)


@router.post("/", response_model=ProductoResponse)
async def create_product(
    producto: ProductoCreate,
    current_user: CurrentSession = Depends(get_current_user),
    service: ProductosService = Depends(get_productos_service)
):
    return await service.create_product(producto, usuario_id=current_user.user_id)


@router.get("/{producto_id}", response_model=ProductoResponse)
async def get_product(
    producto_id: int,
    service: ProductosService = Depends(get_productos_service)
):
    return await service.get_product(producto_id)


@router.put("/{producto_id}", response_model=ProductoResponse)
async def update_product(
    producto_id: int,
    producto: ProductoUpdate,
    current_user: CurrentSession = Depends(get_current_user),
    service: ProductosService = Depends(get_productos_service)
):
    """Actualizar producto; si cambia el stock se registra un ajuste de inventario"""
    return await service.update_product(producto_id, producto, usuario_id=current_user.user_id)


@router.delete("/{producto_id}", response_model=BaseResponse)
async def delete_product(
    producto_id: int,
    service: ProductosService = Depends(get_productos_service)
):
    """Eliminar producto (no se permite si tiene ventas o cotizaciones)"""
    await service.delete_product(producto_id)
    return BaseResponse(success=True, message=f"Producto {producto_id} eliminado")


@router.post("/{producto_id}/imagen", response_model=ProductoResponse)
async def upload_product_image(
    producto_id: int,
    imagen: UploadFile = File(..., description="Imagen del producto (jpeg, png o webp)"),
    service: ProductosService = Depends(get_productos_service)
):
    content = await imagen.read()
    return await service.upload_image(producto_id, imagen.filename, content, imagen.content_type)


@router.get("/{producto_id}/movimientos", response_model=List[MovimientoResponse])
async def get_product_movements(
    producto_id: int,
    service: ProductosService = Depends(get_productos_service)
):
    """Últimos movimientos de inventario del producto"""
    return await service.get_movements(producto_id)


# ==================== CATEGORÍAS ====================

@categorias_router.get("/", response_model=List[CategoriaResponse])
async def list_categories(service: ProductosService = Depends(get_productos_service)):
    return await service.list_categories()


@categorias_router.post("/", response_model=CategoriaResponse)
async def create_category(
    categoria: CategoriaBase,
    service: ProductosService = Depends(get_productos_service)
):
    return await service.create_category(categoria)


@categorias_router.put("/{categoria_id}", response_model=CategoriaResponse)
async def update_category(
    categoria_id: int,
    categoria: CategoriaBase,
    service: ProductosService = Depends(get_productos_service)
):
    return await service.update_category(categoria_id, categoria)


@categorias_router.delete("/{categoria_id}", response_model=BaseResponse)
async def delete_category(
    categoria_id: int,
    service: ProductosService = Depends(get_productos_service)
):
    await service.delete_category(categoria_id)
    return BaseResponse(success=True, message=f"Categoría {categoria_id} eliminada")
