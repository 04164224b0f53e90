import json
from datetime import datetime, timedelta
from decimal import Decimal

import httpx
import pytest
from jose import jwt

from puntoventa.config.settings import settings
from puntoventa.core.auth.service import AuthProviderError, AuthService
from puntoventa.core.exceptions import (
    ConstraintViolationError, FOREIGN_KEY_VIOLATION, SagaError, StoreError, ValidationError,
    translate_store_error
)
from puntoventa.shared.services.cloudinary_service import CloudinaryStorage
from puntoventa.shared.services.inventory_service import InventoryService
from puntoventa.shared.services.saga import Saga
from puntoventa.shared.services.view_cache import ViewCache
from puntoventa.shared.store import Order, PostgrestStore, eq, gt, gte, in_, search
from puntoventa.shared.store.postgrest import build_params


# ==================== POSTGREST ====================

def test_build_params_simple_filters():
    params = build_params(
        [gt("stock_actual", 0), gte("created_at", datetime(2024, 5, 1, 0, 0)), eq("cliente_id", None)],
        [Order("nombre")],
        limit=50,
        columns=["*"]
    )
    assert params == [
        ("select", "*"),
        ("stock_actual", "gt.0"),
        ("created_at", "gte.2024-05-01T00:00:00"),
        ("cliente_id", "is.null"),
        ("order", "nombre.asc"),
        ("limit", "50"),
    ]


def test_build_params_or_and_in():
    params = build_params([search(["nombre", "sku"], "tarta, fresa"), in_("id", [3, 1])])
    assert params == [
        ("or", '(nombre.ilike."*tarta, fresa*",sku.ilike."*tarta, fresa*")'),
        ("id", "in.(3,1)"),
    ]


def test_postgrest_store_requests():
    seen = []

    def handler(request):
        seen.append(request)
        if request.method == "POST":
            body = json.loads(request.content)
            return httpx.Response(201, json=[dict(body, id=7)])
        if request.method == "HEAD":
            return httpx.Response(200, headers={"content-range": "0-1/2"})
        return httpx.Response(200, json=[{"id": 7, "total": 25.5}])

    client = httpx.Client(transport=httpx.MockTransport(handler))
    store = PostgrestStore("http://supabase.test/rest/v1", api_key="anon", client=client).with_token("user-jwt")

    created = store.insert("ventas", {"total": Decimal("25.50"), "metodo_pago": "efectivo"})
    assert created["id"] == 7
    assert json.loads(seen[0].content)["total"] == "25.50"
    assert seen[0].headers["Prefer"] == "return=representation"
    assert seen[0].headers["Authorization"] == "Bearer user-jwt"
    assert seen[0].headers["apikey"] == "anon"

    rows = store.select("ventas", [eq("id", 7)])
    assert rows[0]["total"] == Decimal("25.5")
    assert seen[1].url.params["id"] == "eq.7"

    assert store.count("clientes") == 2


def test_postgrest_errors_keep_code():
    def handler(request):
        return httpx.Response(409, json={"code": "23503", "message": "violates foreign key constraint"})

    store = PostgrestStore("http://supabase.test/rest/v1", client=httpx.Client(transport=httpx.MockTransport(handler)))

    with pytest.raises(StoreError) as exc_info:
        store.delete("productos", [eq("id", 1)])

    assert exc_info.value.code == FOREIGN_KEY_VIOLATION
    translated = translate_store_error(exc_info.value, "productos")
    assert isinstance(translated, ConstraintViolationError)
    assert translated.status_code == 409


# ==================== AUTENTICACIÓN ====================

def make_token(**claims):
    payload = {
        "sub": "user-1",
        "email": "caja@saltysweety.com",
        "aud": "authenticated",
        "exp": datetime.utcnow() + timedelta(hours=1),
    }
    payload.update(claims)
    return jwt.encode(payload, settings.supabase_jwt_secret, algorithm=settings.jwt_algorithm)


def test_verify_token():
    payload = AuthService.verify_token(make_token())
    assert payload["sub"] == "user-1"


@pytest.mark.parametrize("claims", [
    {"aud": "anon"},
    {"exp": datetime.utcnow() - timedelta(minutes=5)},
])
def test_verify_token_rejects_invalid_claims(claims):
    assert AuthService.verify_token(make_token(**claims)) is None


def test_verify_token_rejects_other_secret():
    token = jwt.encode({"sub": "x", "aud": "authenticated"}, "otro-secreto", algorithm="HS256")
    assert AuthService.verify_token(token) is None


def test_sign_in():
    def handler(request):
        assert request.url.params["grant_type"] == "password"
        if json.loads(request.content)["password"] != "caja1234":
            return httpx.Response(400, json={"error": "invalid_grant"})
        return httpx.Response(200, json={
            "access_token": "jwt", "refresh_token": "r", "expires_in": 3600,
            "user": {"id": "user-1", "email": "caja@saltysweety.com"},
        })

    service = AuthService("http://supabase.test/auth/v1", api_key="anon",
                          client=httpx.Client(transport=httpx.MockTransport(handler)))

    session = service.sign_in("caja@saltysweety.com", "caja1234")
    assert session.access_token == "jwt"
    assert session.user.id == "user-1"

    with pytest.raises(AuthProviderError) as exc_info:
        service.sign_in("caja@saltysweety.com", "incorrecta")
    assert exc_info.value.status_code == 401


# ==================== VISTAS ====================

def test_view_cache_reuses_until_stale():
    now = {"t": 0.0}
    cache = ViewCache(stale_seconds=2.0, clock=lambda: now["t"])
    calls = []

    def fetch():
        calls.append(1)
        return len(calls)

    assert cache.get(("productos", "grilla", None), fetch) == 1
    assert cache.get(("productos", "grilla", None), fetch) == 1
    now["t"] = 2.5
    assert cache.get(("productos", "grilla", None), fetch) == 2


def test_view_cache_invalidates_by_view_name():
    cache = ViewCache(stale_seconds=60)
    cache.get(("productos", "grilla", None), lambda: "a")
    cache.get(("clientes", "lista", None), lambda: "b")

    cache.invalidate("productos", "ventasHoy")

    assert cache.get(("productos", "grilla", None), lambda: "c") == "c"
    assert cache.get(("clientes", "lista", None), lambda: "d") == "b"


def test_view_cache_does_not_store_errors():
    cache = ViewCache()

    def failing():
        raise StoreError("caído")

    with pytest.raises(StoreError):
        cache.get(("ventasHoy",), failing)
    assert cache.get(("ventasHoy",), lambda: Decimal("0")) == Decimal("0")


# ==================== SAGA ====================

def test_saga_stops_and_compensates_in_reverse(store):
    log = []
    saga = (
        Saga("prueba", _NonTransactional(store))
        .step("a", lambda ctx: log.append("a") or "A", lambda ctx, r: log.append(f"undo {r}"))
        .step("b", lambda ctx: log.append("b") or "B", lambda ctx, r: log.append(f"undo {r}"))
        .step("c", lambda ctx: _raise(StoreError("boom", code="XX000")))
        .step("d", lambda ctx: log.append("d"))
    )

    with pytest.raises(SagaError) as exc_info:
        saga.run()

    assert log == ["a", "b", "undo B", "undo A"]
    assert exc_info.value.failed_step == "c"
    assert exc_info.value.code == "XX000"
    assert exc_info.value.fully_compensated


def test_saga_reports_failed_compensation(store):
    saga = (
        Saga("prueba", _NonTransactional(store))
        .step("a", lambda ctx: 1, lambda ctx, r: _raise(StoreError("sin red")))
        .step("b", lambda ctx: _raise(StoreError("boom")))
    )

    with pytest.raises(SagaError) as exc_info:
        saga.run()

    assert exc_info.value.failed_compensations == ["a"]
    assert not exc_info.value.fully_compensated


def test_saga_passes_validation_errors_through(store):
    saga = Saga("prueba", _NonTransactional(store)).step("a", lambda ctx: _raise(ValidationError("dato")))
    with pytest.raises(ValidationError):
        saga.run()


class _NonTransactional:
    """Store sin transacciones para probar compensaciones"""

    supports_transactions = False

    def __init__(self, inner):
        self.inner = inner

    def transaction(self):
        from contextlib import nullcontext
        return nullcontext(self)


def _raise(error):
    raise error


# ==================== INVENTARIO E IMÁGENES ====================

def test_validate_availability_lists_every_shortage(store, catalog):
    pastel = catalog["productos"]["pastel"]["id"]
    galleta = catalog["productos"]["galleta"]["id"]

    with pytest.raises(ValidationError) as exc_info:
        InventoryService.validate_availability(store, [(pastel, "Pastel", 11), (galleta, "Galleta", 4)])

    assert exc_info.value.message.splitlines() == [
        "Stock insuficiente para Pastel. Stock disponible: 10",
        "Stock insuficiente para Galleta. Stock disponible: 3",
    ]


def test_record_movement_rejects_unknown_type(store, catalog):
    with pytest.raises(ValidationError):
        InventoryService.record_movement(store, catalog["productos"]["pastel"]["id"], "regalo", 1, "x")


def test_image_validation():
    storage = CloudinaryStorage()
    storage.validate_image(b"img", "image/png")
    with pytest.raises(ValidationError):
        storage.validate_image(b"img", "application/pdf")
    with pytest.raises(ValidationError):
        storage.validate_image(b"x" * (settings.max_image_size + 1), "image/jpeg")


def test_image_path_uses_app_folder():
    storage = CloudinaryStorage()
    assert storage._public_id("productos/12_ab34cd56.png") == f"{settings.cloudinary_folder}/productos/12_ab34cd56"
