# puntoventa/api/v1/router.py
from fastapi import APIRouter
from puntoventa.api.v1.auth import router as auth_router
from puntoventa.modules.dashboard.router import router as dashboard_router
from puntoventa.modules.ventas.router import router as ventas_router
from puntoventa.modules.cotizaciones.router import router as cotizaciones_router
from puntoventa.modules.historial.router import router as historial_router
from puntoventa.modules.productos.router import router as productos_router, categorias_router
from puntoventa.modules.clientes.router import router as clientes_router
from puntoventa.modules.ingredientes.router import router as ingredientes_router

# Crear router principal de la API v1
api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["authentication"])

api_router.include_router(
    dashboard_router,
    prefix="/dashboard",
    tags=["Dashboard"]
)

api_router.include_router(
    ventas_router,
    prefix="/ventas",
    tags=["Ventas - Punto de Venta"]
)

api_router.include_router(
    cotizaciones_router,
    prefix="/cotizaciones",
    tags=["Cotizaciones"]
)

api_router.include_router(
    historial_router,
    prefix="/historial",
    tags=["Historial de Ventas"]
)

api_router.include_router(
    productos_router,
    prefix="/productos",
    tags=["Productos"]
)

api_router.include_router(
    categorias_router,
    prefix="/categorias",
    tags=["Categorías"]
)

api_router.include_router(
    clientes_router,
    prefix="/clientes",
    tags=["Clientes"]
)

api_router.include_router(
    ingredientes_router,
    prefix="/ingredientes",
    tags=["Ingredientes"]
)


@api_router.get("/")
async def api_root():
    """Root endpoint de la API"""
    return {
        "message": "Salty & Sweety POS API v1",
        "status": "active",
        "docs": "/docs",
        "available_endpoints": {
            "authentication": "/api/v1/auth",
            "dashboard": "/api/v1/dashboard",
            "ventas": "/api/v1/ventas",
            "cotizaciones": "/api/v1/cotizaciones",
            "historial": "/api/v1/historial",
            "productos": "/api/v1/productos",
            "categorias": "/api/v1/categorias",
            "clientes": "/api/v1/clientes",
            "ingredientes": "/api/v1/ingredientes"
        }
    }
