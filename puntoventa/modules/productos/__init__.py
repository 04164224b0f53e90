# puntoventa/modules/productos/__init__.py
"""
Módulo de Productos - Catálogo e Inventario

- CRUD de productos con movimientos de inventario por ajuste
- Imágenes de producto
- Categorías

Arquitectura:
- router.py: Endpoints de productos (router) y categorías (categorias_router)
- service.py: Lógica de catálogo
- repository.py: Acceso a datos
- schemas.py: Modelos de request/response
"""

from .router import router, categorias_router
from .service import ProductosService

__all__ = [
    "router",
    "categorias_router",
    "ProductosService"
]
