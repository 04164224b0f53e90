# puntoventa/shared/store/__init__.py
"""
Acceso al store remoto de tablas.

- base.py: contrato RemoteStore y álgebra de filtros
- postgrest.py: Supabase / PostgREST sobre httpx
- sql.py: SQLAlchemy con transacciones reales
"""

from puntoventa.config.settings import Settings
from .base import (
    AnyOf, Filter, Order, RemoteStore, Row,
    any_of, eq, gt, gte, ilike, in_, lt, lte, neq, search
)
from .postgrest import PostgrestStore
from .sql import SqlStore


def build_store(settings: Settings) -> RemoteStore:
    """Crear el store configurado en settings.store_backend"""
    if settings.store_backend == "sql":
        from puntoventa.config.database import make_engine
        store = SqlStore(make_engine(settings.database_url))
        store.create_tables()
        return store
    if settings.store_backend == "postgrest":
        return PostgrestStore(
            settings.supabase_rest_url,
            api_key=settings.supabase_anon_key,
            timeout=settings.request_timeout
        )
    raise ValueError(f"store_backend desconocido: {settings.store_backend}")


__all__ = [
    "AnyOf", "Filter", "Order", "RemoteStore", "Row",
    "any_of", "eq", "gt", "gte", "ilike", "in_", "lt", "lte", "neq", "search",
    "PostgrestStore", "SqlStore", "build_store",
]
