# puntoventa/modules/clientes/__init__.py
"""
Módulo de Clientes - Registro de clientes con búsqueda por nombre, email o teléfono
"""

from .router import router
from .service import ClientesService

__all__ = [
    "router",
    "ClientesService"
]
