# puntoventa/shared/store/postgrest.py
import httpx
import json
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Union

from puntoventa.core.exceptions import StoreError
from .base import AnyOf, Condition, Filter, Order, RemoteStore, Row

logger = logging.getLogger(__name__)

_RESERVED = set(',.:()"')


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Tipo no serializable: {type(value).__name__}")


def _format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _quote(text: str) -> str:
    if any(ch in _RESERVED for ch in text):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


def _operand(condition: Filter, nested: bool = False) -> str:
    """Operador y valor; dentro de or=(...) los valores con reservados van entre comillas"""
    quote = _quote if nested else (lambda text: text)
    if condition.op == "ilike":
        return f"ilike.{quote('*' + str(condition.value) + '*')}"
    if condition.op == "in":
        values = ",".join(_quote(_format_value(v)) for v in condition.value)
        return f"in.({values})"
    if condition.value is None and condition.op == "eq":
        return "is.null"
    return f"{condition.op}.{quote(_format_value(condition.value))}"


def build_params(
    filters: Sequence[Condition] = (),
    order: Sequence[Order] = (),
    limit: Optional[int] = None,
    columns: Optional[Sequence[str]] = None
) -> List[tuple]:
    """Traducir filtros al query string de PostgREST"""
    params = []
    if columns is not None:
        params.append(("select", ",".join(columns) or "*"))
    for condition in filters:
        if isinstance(condition, AnyOf):
            parts = ",".join(f"{f.column}.{_operand(f, nested=True)}" for f in condition.filters)
            params.append(("or", f"({parts})"))
        else:
            params.append((condition.column, _operand(condition)))
    if order:
        params.append((
            "order",
            ",".join(f"{o.column}.{'asc' if o.ascending else 'desc'}" for o in order)
        ))
    if limit is not None:
        params.append(("limit", str(limit)))
    return params


class PostgrestStore(RemoteStore):
    """Store sobre la API REST de Supabase (PostgREST)"""

    supports_transactions = False

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        access_token: Optional[str] = None,
        timeout: int = 30,
        client: Optional[httpx.Client] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.access_token = access_token
        self.timeout = timeout
        self.client = client or httpx.Client(timeout=timeout)

    def with_token(self, access_token: Optional[str]) -> "PostgrestStore":
        return PostgrestStore(
            self.base_url,
            api_key=self.api_key,
            access_token=access_token,
            timeout=self.timeout,
            client=self.client
        )

    def close(self) -> None:
        self.client.close()

    def _get_headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
        token = self.access_token or self.api_key
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _request(
        self,
        method: str,
        table: str,
        params: List[tuple],
        payload: Any = None,
        prefer: Optional[str] = None
    ) -> httpx.Response:
        url = f"{self.base_url}/{table}"
        content = json.dumps(payload, default=_json_default) if payload is not None else None
        try:
            response = self.client.request(
                method,
                url,
                params=params,
                content=content,
                headers=self._get_headers(prefer)
            )
        except httpx.TimeoutException:
            logger.error(f"Timeout en {method} {table}")
            raise StoreError(f"Tiempo de espera agotado consultando {table}", code="timeout")
        except httpx.HTTPError as e:
            logger.error(f"Error de red en {method} {table}: {e}")
            raise StoreError(f"Error comunicándose con el store: {str(e)}", code="network")

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {"message": response.text}
            message = body.get("message") or response.text or f"HTTP {response.status_code}"
            code = body.get("code") or str(response.status_code)
            logger.warning(f"{method} {table} falló: {code} {message}")
            raise StoreError(message, code=code, details={k: body.get(k) for k in ("details", "hint") if body.get(k)})

        return response

    @staticmethod
    def _rows(response: httpx.Response) -> List[Row]:
        if not response.content:
            return []
        data = response.json(parse_float=Decimal)
        if isinstance(data, dict):
            return [data]
        return data or []

    def select(
        self,
        table: str,
        filters: Sequence[Condition] = (),
        order: Sequence[Order] = (),
        limit: Optional[int] = None,
        columns: Optional[Sequence[str]] = None
    ) -> List[Row]:
        params = build_params(filters, order, limit, columns or ["*"])
        return self._rows(self._request("GET", table, params))

    def insert(self, table: str, rows: Union[Row, List[Row]]) -> Union[Row, List[Row]]:
        many = isinstance(rows, list)
        response = self._request(
            "POST", table, [], payload=rows, prefer="return=representation"
        )
        created = self._rows(response)
        if many:
            return created
        if not created:
            raise StoreError(f"El store no devolvió la fila insertada en {table}")
        return created[0]

    def update(self, table: str, filters: Sequence[Condition], patch: Row) -> List[Row]:
        response = self._request(
            "PATCH", table, build_params(filters), payload=patch, prefer="return=representation"
        )
        return self._rows(response)

    def delete(self, table: str, filters: Sequence[Condition]) -> None:
        self._request("DELETE", table, build_params(filters))

    def count(self, table: str, filters: Sequence[Condition] = ()) -> int:
        response = self._request(
            "HEAD", table, build_params(filters, columns=["*"]), prefer="count=exact"
        )
        content_range = response.headers.get("content-range", "*/0")
        total = content_range.split("/")[-1]
        return int(total) if total.isdigit() else 0
