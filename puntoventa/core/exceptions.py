# puntoventa/core/exceptions.py
from typing import Any, Dict, List, Optional


class PuntoVentaError(Exception):
    """Base de errores de la aplicación"""
    status_code = 500

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class ValidationError(PuntoVentaError):
    """Datos incompletos o inválidos, detectados antes de llamar al store"""
    status_code = 400


class NotFoundError(PuntoVentaError):
    status_code = 404


class ConflictError(PuntoVentaError):
    """Operación ya en curso para la misma página"""
    status_code = 409


class StoreError(PuntoVentaError):
    """Error devuelto por el store remoto (mensaje + código)"""
    status_code = 502


class ConstraintViolationError(StoreError):
    """Violación de integridad, con mensaje traducido para el usuario"""
    status_code = 409


class SagaError(StoreError):
    """Un paso de una secuencia de escrituras falló"""

    def __init__(
        self,
        message: str,
        failed_step: str,
        completed_steps: List[str],
        compensated_steps: List[str],
        failed_compensations: List[str],
        cause: Optional[Exception] = None
    ):
        code = getattr(cause, "code", None)
        super().__init__(
            message,
            code=code,
            details={
                "failed_step": failed_step,
                "completed_steps": completed_steps,
                "compensated_steps": compensated_steps,
                "failed_compensations": failed_compensations,
            }
        )
        self.failed_step = failed_step
        self.completed_steps = completed_steps
        self.compensated_steps = compensated_steps
        self.failed_compensations = failed_compensations
        self.cause = cause

    @property
    def fully_compensated(self) -> bool:
        return not self.failed_compensations


FOREIGN_KEY_VIOLATION = "23503"
UNIQUE_VIOLATION = "23505"

CONSTRAINT_MESSAGES = {
    ("productos", FOREIGN_KEY_VIOLATION): "No se puede eliminar el producto porque tiene ventas o cotizaciones asociadas",
    ("clientes", FOREIGN_KEY_VIOLATION): "No se puede eliminar el cliente porque tiene ventas o cotizaciones asociadas",
    ("categorias", FOREIGN_KEY_VIOLATION): "No se puede eliminar la categoría porque tiene productos asociados",
    ("ingredientes", FOREIGN_KEY_VIOLATION): "No se puede eliminar el ingrediente porque está en cotizaciones",
}


def translate_store_error(error: StoreError, table: str) -> StoreError:
    """Convertir violaciones de integridad en mensajes para el usuario"""
    if error.code == FOREIGN_KEY_VIOLATION:
        message = CONSTRAINT_MESSAGES.get(
            (table, FOREIGN_KEY_VIOLATION),
            "El registro está siendo usado por otros datos y no puede eliminarse"
        )
        return ConstraintViolationError(message, code=error.code, details={"store_message": error.message})
    if error.code == UNIQUE_VIOLATION:
        return ConstraintViolationError(
            "Ya existe un registro con esos datos",
            code=error.code,
            details={"store_message": error.message}
        )
    return error
