# puntoventa/modules/ingredientes/__init__.py
"""
Módulo de Ingredientes - Catálogo de ingredientes para cotizaciones
"""

from .router import router
from .service import IngredientesService

__all__ = [
    "router",
    "IngredientesService"
]
