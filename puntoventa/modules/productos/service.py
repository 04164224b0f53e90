# puntoventa/modules/productos/service.py
import logging
import os
import uuid
from decimal import Decimal
from typing import Any, Dict, List, Optional

from puntoventa.core.exceptions import NotFoundError
from puntoventa.shared.services.cloudinary_service import CloudinaryStorage
from puntoventa.shared.services.inventory_service import InventoryService
from puntoventa.shared.services.view_cache import ViewCache
from puntoventa.shared.store import RemoteStore
from puntoventa.modules.ventas.cart import to_decimal
from .repository import ProductosRepository
from .schemas import ProductoCreate, ProductoUpdate, CategoriaBase

logger = logging.getLogger(__name__)

PRODUCT_VIEWS = ("productos", "stockBajo")


def compute_stats(productos: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "total_productos": len(productos),
        "valor_inventario": sum(
            (to_decimal(p["precio_costo"]) * p["stock_actual"] for p in productos),
            Decimal("0")
        ),
        "stock_bajo": sum(1 for p in productos if p["stock_actual"] <= p["stock_minimo"]),
    }


class ProductosService:
    """Catálogo: productos, ajustes de stock, imágenes y categorías"""

    def __init__(self, store: RemoteStore, views: ViewCache, images: Optional[CloudinaryStorage] = None):
        self.store = store
        self.repository = ProductosRepository(store)
        self.views = views
        self.images = images

    # ==================== PRODUCTOS ====================

    async def list_products(self, term: Optional[str] = None, categoria_id: Optional[int] = None) -> Dict[str, Any]:
        term = (term or "").strip() or None
        productos = self.views.get(
            ("productos", "catalogo", term, categoria_id),
            lambda: self.repository.list_products(term, categoria_id)
        )
        return {"productos": productos, "stats": compute_stats(productos)}

    async def get_product(self, producto_id: int) -> Dict[str, Any]:
        producto = self.repository.get_product(producto_id)
        if not producto:
            raise NotFoundError(f"Producto {producto_id} no encontrado")
        return producto

    async def create_product(self, data: ProductoCreate, usuario_id: Optional[str] = None) -> Dict[str, Any]:
        """Crear producto; con stock inicial se registra un movimiento 'ajuste'"""
        producto = self.repository.create_product(data.model_dump())
        if data.stock_actual > 0:
            InventoryService.record_movement(
                self.store, producto["id"], "ajuste", data.stock_actual, "Stock inicial", usuario_id
            )
        self.views.invalidate(*PRODUCT_VIEWS)
        logger.info(f"Producto creado: {producto['nombre']} (#{producto['id']})")
        return producto

    async def update_product(self, producto_id: int, data: ProductoUpdate, usuario_id: Optional[str] = None) -> Dict[str, Any]:
        """Actualizar producto; un cambio de stock registra la diferencia como 'ajuste'"""
        anterior = await self.get_product(producto_id)
        producto = self.repository.update_product(producto_id, data.model_dump())
        if producto is None:
            raise NotFoundError(f"Producto {producto_id} no encontrado")

        diferencia = data.stock_actual - anterior["stock_actual"]
        if diferencia != 0:
            InventoryService.record_movement(
                self.store, producto_id, "ajuste", diferencia, "Ajuste manual de inventario", usuario_id
            )
            logger.info(f"Ajuste de stock producto #{producto_id}: {anterior['stock_actual']} -> {data.stock_actual}")
        self.views.invalidate(*PRODUCT_VIEWS)
        return producto

    async def delete_product(self, producto_id: int) -> None:
        await self.get_product(producto_id)
        self.repository.delete_product(producto_id)
        self.views.invalidate(*PRODUCT_VIEWS)
        logger.info(f"Producto #{producto_id} eliminado")

    async def upload_image(self, producto_id: int, filename: str, content: bytes, content_type: Optional[str]) -> Dict[str, Any]:
        """Subir la imagen al almacenamiento y guardar su URL pública en imagen_url"""
        await self.get_product(producto_id)
        extension = os.path.splitext(filename or "")[1].lower() or ".jpg"
        path = f"productos/{producto_id}_{uuid.uuid4().hex[:8]}{extension}"

        self.images.upload(path, content, content_type)
        url = self.images.get_public_url(path)
        producto = self.repository.update_product(producto_id, {"imagen_url": url})
        self.views.invalidate("productos")
        return producto

    async def get_movements(self, producto_id: int) -> List[Dict[str, Any]]:
        await self.get_product(producto_id)
        return self.repository.get_movements(producto_id)

    # ==================== CATEGORÍAS ====================

    async def list_categories(self) -> List[Dict[str, Any]]:
        return self.views.get(("categorias",), self.repository.list_categories)

    async def create_category(self, data: CategoriaBase) -> Dict[str, Any]:
        categoria = self.repository.create_category(data.model_dump())
        self.views.invalidate("categorias")
        return categoria

    async def update_category(self, categoria_id: int, data: CategoriaBase) -> Dict[str, Any]:
        categoria = self.repository.update_category(categoria_id, data.model_dump())
        if categoria is None:
            raise NotFoundError(f"Categoría {categoria_id} no encontrada")
        self.views.invalidate("categorias")
        return categoria

    async def delete_category(self, categoria_id: int) -> None:
        if not self.repository.get_category(categoria_id):
            raise NotFoundError(f"Categoría {categoria_id} no encontrada")
        self.repository.delete_category(categoria_id)
        self.views.invalidate("categorias", "productos")
