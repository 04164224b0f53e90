# puntoventa/modules/dashboard/__init__.py
"""
Módulo de Dashboard - Resumen del negocio

Arquitectura:
- router.py: Endpoints del panel
- service.py: Métricas y meta mensual
- repository.py: Consultas agregadas
- schemas.py: Modelos de respuesta
"""

from .router import router
from .service import DashboardService

__all__ = [
    "router",
    "DashboardService"
]
