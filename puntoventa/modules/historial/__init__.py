# puntoventa/modules/historial/__init__.py
"""
Módulo de Historial de Ventas

- Filtros por periodo (hoy, semana, mes, año, personalizado), método de pago y cliente
- Estadísticas del listado
- Detalle y anulación de ventas con devolución de stock
- Exportación CSV y PDF

Arquitectura:
- router.py: Endpoints del historial
- service.py: Consultas, anulación y exportación
- repository.py: Acceso a datos de ventas
- periods.py: Rangos de fecha por periodo
- schemas.py: Modelos de request/response
"""

from .router import router
from .service import HistorialService
from .repository import HistorialRepository

__all__ = [
    "router",
    "HistorialService",
    "HistorialRepository"
]
