# puntoventa/shared/services/view_cache.py
import logging
import threading
import time
from typing import Any, Callable, Dict, Hashable, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Vistas que dependen de ventas y stock
VIEWS_AFTER_SALE = ("productos", "ventasHoy", "ventasMes", "stockBajo", "ventas")


class ViewCache:
    """
    Resultados de vistas de lectura por clave (nombre, parámetros...).

    Una entrada se vuelve a consultar al pasar stale_seconds o cuando una
    escritura invalida su nombre. Los errores del store no se guardan.
    """

    def __init__(self, stale_seconds: float = 2.0, clock: Callable[[], float] = time.monotonic):
        self.stale_seconds = stale_seconds
        self.clock = clock
        self._entries: Dict[Tuple[Hashable, ...], Tuple[float, Any]] = {}
        self._lock = threading.RLock()

    def get(self, key: Tuple[Hashable, ...], fetch: Callable[[], T]) -> T:
        now = self.clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and now - entry[0] < self.stale_seconds:
                return entry[1]

        value = fetch()
        with self._lock:
            self._entries[key] = (self.clock(), value)
        return value

    def invalidate(self, *names: str) -> None:
        """Descartar todas las entradas cuyo nombre de vista esté en names"""
        with self._lock:
            stale = [key for key in self._entries if key and key[0] in names]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug(f"Vistas invalidadas: {', '.join(names)} ({len(stale)} entradas)")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
