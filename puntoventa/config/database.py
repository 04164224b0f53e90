# puntoventa/config/database.py
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from .settings import settings


def make_engine(url: str = None, **kwargs) -> Engine:
    """Crear engine para el store SQL (SQLite activa claves foráneas)"""
    url = url or settings.database_url
    # Postgres siempre con el driver psycopg 3
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        url = "postgresql+psycopg://" + url[len("postgresql://"):]

    engine_kwargs = {
        "pool_pre_ping": True,
        "echo": settings.debug,
    }
    if url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url == "sqlite://":
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs["pool_recycle"] = 300
        # SSL para bases administradas en Render
        if "render" in url:
            engine_kwargs["connect_args"] = {"sslmode": "require"}
    engine_kwargs.update(kwargs)

    engine = create_engine(url, **engine_kwargs)

    if url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine
