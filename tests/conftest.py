# Configuración de pruebas: store SQL en memoria y sesión fija
import os
from datetime import datetime, timedelta
from decimal import Decimal

os.environ.setdefault("STORE_BACKEND", "sql")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-secret")
os.environ.setdefault("SUPABASE_URL", "http://supabase.test")

import pytest
from fastapi.testclient import TestClient

from puntoventa.config.database import make_engine
from puntoventa.core.auth.dependencies import get_current_user
from puntoventa.core.auth.schemas import CurrentSession
from puntoventa.core.exceptions import StoreError
from puntoventa.main import create_app
from puntoventa.shared.services.page_state import PageStateStore
from puntoventa.shared.services.view_cache import ViewCache
from puntoventa.shared.store import RemoteStore, SqlStore

USER_ID = "0b6c2a9e-2f5d-4d7e-9a43-5e1f7f0b8c11"


class FailingStore(RemoteStore):
    """
    Envuelve un store real: registra cada llamada y falla en la que
    cumpla fail_on(method, table).
    """

    def __init__(self, inner: RemoteStore, fail_on=None, transactional: bool = False):
        self.inner = inner
        self.fail_on = fail_on
        self.calls = []
        self.supports_transactions = transactional

    def _call(self, method, table, *args, **kwargs):
        self.calls.append((method, table))
        if self.fail_on and self.fail_on(method, table):
            raise StoreError(f"fallo simulado en {method} {table}", code="XX000")
        return getattr(self.inner, method)(table, *args, **kwargs)

    def select(self, table, filters=(), order=(), limit=None, columns=None):
        return self._call("select", table, filters=filters, order=order, limit=limit, columns=columns)

    def insert(self, table, rows):
        return self._call("insert", table, rows)

    def update(self, table, filters, patch):
        return self._call("update", table, filters, patch)

    def delete(self, table, filters):
        return self._call("delete", table, filters)

    def count(self, table, filters=()):
        return self._call("count", table, filters)

    def transaction(self):
        if self.supports_transactions:
            return self.inner.transaction()
        return super().transaction()

    def writes(self):
        return [c for c in self.calls if c[0] in ("insert", "update", "delete")]


def fail_when(method, table, nth=1):
    """Fallar en la n-ésima llamada a method sobre table"""
    seen = {"count": 0}

    def check(m, t):
        if m == method and t == table:
            seen["count"] += 1
            return seen["count"] == nth
        return False
    return check


@pytest.fixture
def store():
    store = SqlStore(make_engine("sqlite://"))
    store.create_tables()
    yield store
    store.engine.dispose()


@pytest.fixture
def views():
    return ViewCache(stale_seconds=2.0)


@pytest.fixture
def catalog(store):
    """Productos, clientes e ingredientes de ejemplo"""
    categoria = store.insert("categorias", {"nombre": "Postres"})
    productos = {
        "pastel": store.insert("productos", {
            "nombre": "Pastel de chocolate", "precio_venta": Decimal("10.00"),
            "precio_costo": Decimal("6.00"), "stock_actual": 10, "stock_minimo": 2,
            "sku": "PST-001", "categoria_id": categoria["id"],
        }),
        "galleta": store.insert("productos", {
            "nombre": "Galleta de avena", "precio_venta": Decimal("5.50"),
            "precio_costo": Decimal("2.00"), "stock_actual": 3, "stock_minimo": 5,
            "sku": "GAL-002", "categoria_id": categoria["id"],
        }),
        "agotado": store.insert("productos", {
            "nombre": "Alfajor", "precio_venta": Decimal("2.00"),
            "precio_costo": Decimal("1.00"), "stock_actual": 0, "stock_minimo": 1,
            "sku": "ALF-003",
        }),
    }
    clientes = {
        "ana": store.insert("clientes", {"nombre": "Ana Torres", "email": "ana@example.com", "telefono": "555-0101"}),
        "luis": store.insert("clientes", {"nombre": "Luis Pérez", "telefono": "555-0202"}),
    }
    ingredientes = {
        "harina": store.insert("ingredientes", {"nombre": "Harina", "unidad_medida": "kg", "precio_unitario": Decimal("0.80")}),
        "azucar": store.insert("ingredientes", {"nombre": "Azúcar", "unidad_medida": "kg", "precio_unitario": Decimal("1.20")}),
    }
    return {"categoria": categoria, "productos": productos, "clientes": clientes, "ingredientes": ingredientes}


def add_sale(store, total, metodo_pago="efectivo", cliente_id=None, created_at=None, items=()):
    """Registrar una venta directamente en el store"""
    venta = store.insert("ventas", {
        "total": Decimal(str(total)),
        "metodo_pago": metodo_pago,
        "cliente_id": cliente_id,
        "created_at": created_at or datetime.now() - timedelta(minutes=1),
    })
    for producto_id, cantidad, precio in items:
        store.insert("venta_items", {
            "venta_id": venta["id"], "producto_id": producto_id,
            "cantidad": cantidad, "precio_unitario": Decimal(str(precio)),
        })
    return venta


@pytest.fixture
def session():
    return CurrentSession(user_id=USER_ID, email="caja@saltysweety.com", access_token="token-de-prueba")


class FakeImageStorage:
    def __init__(self):
        self.uploads = {}

    def upload(self, path, content, content_type=None):
        self.uploads[path] = (content, content_type)

    def get_public_url(self, path):
        return f"https://images.test/{path}"


@pytest.fixture
def images():
    return FakeImageStorage()


@pytest.fixture
def app(store, views, images, session):
    app = create_app()
    app.state.store = store
    app.state.views = views
    app.state.pages = PageStateStore()
    app.state.images = images
    app.dependency_overrides[get_current_user] = lambda: session
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
