# puntoventa/main.py
import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager

from puntoventa.config.settings import settings
from puntoventa.core.middleware import setup_middleware, setup_exception_handlers
from puntoventa.api.v1.router import api_router
from puntoventa.shared.services.cloudinary_service import CloudinaryStorage
from puntoventa.shared.services.page_state import PageStateStore
from puntoventa.shared.services.view_cache import ViewCache
from puntoventa.shared.store import build_store

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("🚀 Salty & Sweety POS API Starting...")
    logger.info(f"📍 Version: {settings.version}")
    logger.info(f"🌍 Environment: {'Development' if settings.debug else 'Production'}")
    logger.info(f"🗄️  Store: {settings.store_backend}")

    if not hasattr(app.state, "store"):
        app.state.store = build_store(settings)
    if not hasattr(app.state, "views"):
        app.state.views = ViewCache(settings.view_stale_seconds)
    if not hasattr(app.state, "pages"):
        app.state.pages = PageStateStore()
    if not hasattr(app.state, "images"):
        app.state.images = CloudinaryStorage()

    yield

    # Shutdown
    close = getattr(app.state.store, "close", None)
    if close:
        close()
    logger.info("🛑 Salty & Sweety POS API Shutting down...")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="Punto de venta: productos, clientes, ventas, historial y cotizaciones",
        docs_url="/docs",
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan
    )

    setup_middleware(app)
    setup_exception_handlers(app)
    app.include_router(api_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {
            "message": "🚀 Salty & Sweety POS API",
            "version": settings.version,
            "status": "running",
            "environment": "production" if not settings.debug else "development",
            "docs": "/docs",
            "api": "/api/v1"
        }

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "version": settings.version,
            "app": settings.app_name,
            "store": settings.store_backend
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "puntoventa.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
