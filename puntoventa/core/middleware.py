from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import time
import logging

from puntoventa.core.exceptions import PuntoVentaError, StoreError
from puntoventa.shared.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


def setup_middleware(app: FastAPI):
    """Configure all middleware for the application"""

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure properly for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    @app.middleware("http")
    async def log_requests(request, call_next):
        start_time = time.time()

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.4f}s"
        )

        return response


def setup_exception_handlers(app: FastAPI):
    """Errores de la aplicación como ErrorResponse"""

    @app.exception_handler(PuntoVentaError)
    async def puntoventa_error_handler(request: Request, exc: PuntoVentaError):
        if isinstance(exc, StoreError):
            logger.error(f"❌ {request.method} {request.url.path}: {exc.message} (code={exc.code})")
        else:
            logger.warning(f"{request.method} {request.url.path}: {exc.message}")

        body = ErrorResponse(
            message=exc.message,
            error_code=exc.code or type(exc).__name__,
            details=exc.details or None
        )
        return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))
