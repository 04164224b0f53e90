# puntoventa/modules/cotizaciones/__init__.py
"""
Módulo de Cotizaciones

- Lista con filtro por estado y detalle con productos e ingredientes
- Formulario personalizada (cliente, validez, productos e ingredientes)
  o estándar (producto cotizado, solo ingredientes)
- Registro, cambio de estado y eliminación

Arquitectura:
- router.py: Endpoints de cotizaciones
- service.py: Formulario, registro y transiciones de estado
- repository.py: Acceso a datos de cotizaciones
- cart.py: Líneas y cabecera del formulario
- schemas.py: Modelos de request/response
"""

from .router import router
from .service import CotizacionesService
from .repository import CotizacionesRepository

__all__ = [
    "router",
    "CotizacionesService",
    "CotizacionesRepository"
]
