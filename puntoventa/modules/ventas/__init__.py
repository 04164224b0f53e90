# puntoventa/modules/ventas/__init__.py
"""
Módulo de Ventas - Punto de Venta

Este módulo maneja la captura de ventas:
- Grilla de productos con stock y búsqueda por nombre/SKU
- Carrito con cantidades limitadas al stock
- Cobro: venta, items, descuento de stock y movimientos de inventario

Arquitectura:
- router.py: Endpoints del punto de venta
- service.py: Carrito y cobro
- repository.py: Acceso a datos de ventas
- cart.py: Modelo del carrito
- state.py: Estado de la página por usuario
- schemas.py: Modelos de request/response
"""

from .router import router
from .service import VentasService
from .repository import VentasRepository

__all__ = [
    "router",
    "VentasService",
    "VentasRepository"
]
