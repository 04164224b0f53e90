# puntoventa/shared/services/page_state.py
import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional, Tuple

from puntoventa.core.exceptions import ConflictError

logger = logging.getLogger(__name__)


class PageState:
    """Estado explícito de una página: envío en curso y aviso de éxito"""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self.submitting = False
        self.success_until: Optional[float] = None
        self.success_message: Optional[str] = None

    @property
    def show_success(self) -> bool:
        return self.success_until is not None and self.clock() < self.success_until

    def notify_success(self, message: str, seconds: float) -> None:
        self.success_message = message
        self.success_until = self.clock() + seconds

    def success_notice(self) -> Optional[str]:
        return self.success_message if self.show_success else None

    @contextmanager
    def submission(self) -> Iterator[None]:
        """Marcar un envío en curso; un segundo envío simultáneo se rechaza"""
        if self.submitting:
            raise ConflictError("Procesando...", code="in_flight")
        self.submitting = True
        try:
            yield
        finally:
            self.submitting = False


class PageStateStore:
    """Estado de página por (usuario, página)"""

    def __init__(self):
        self._states: Dict[Tuple[str, str], PageState] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str, page: str, factory: Callable[[], Any]) -> Any:
        key = (user_id, page)
        with self._lock:
            state = self._states.get(key)
            if state is None:
                state = factory()
                self._states[key] = state
                logger.debug(f"Nuevo estado de página {page} para {user_id}")
            return state

    def discard(self, user_id: str) -> None:
        """Olvidar todo el estado de un usuario (al cerrar sesión)"""
        with self._lock:
            for key in [k for k in self._states if k[0] == user_id]:
                del self._states[key]
