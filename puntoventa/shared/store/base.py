# puntoventa/shared/store/base.py
"""
Contrato del store remoto de tablas.

Cada tabla expone select / insert / update / delete / count. Los filtros
soportan igualdad, comparaciones, búsqueda parcial sin distinguir
mayúsculas (ilike), pertenencia (in) y OR de varios filtros, que es lo
mínimo que necesitan las búsquedas de productos, clientes y cotizaciones.
"""
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

Row = Dict[str, Any]

OPERATORS = frozenset(["eq", "neq", "gt", "gte", "lt", "lte", "ilike", "in"])


@dataclass(frozen=True)
class Filter:
    column: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in OPERATORS:
            raise ValueError(f"Operador de filtro no soportado: {self.op}")


@dataclass(frozen=True)
class AnyOf:
    """OR de filtros simples"""
    filters: Tuple[Filter, ...]


Condition = Union[Filter, AnyOf]


@dataclass(frozen=True)
class Order:
    column: str
    ascending: bool = True


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def neq(column: str, value: Any) -> Filter:
    return Filter(column, "neq", value)


def gt(column: str, value: Any) -> Filter:
    return Filter(column, "gt", value)


def gte(column: str, value: Any) -> Filter:
    return Filter(column, "gte", value)


def lt(column: str, value: Any) -> Filter:
    return Filter(column, "lt", value)


def lte(column: str, value: Any) -> Filter:
    return Filter(column, "lte", value)


def ilike(column: str, text: str) -> Filter:
    """Coincidencia parcial sin distinguir mayúsculas"""
    return Filter(column, "ilike", text)


def in_(column: str, values: Iterable[Any]) -> Filter:
    return Filter(column, "in", tuple(values))


def any_of(*filters: Filter) -> AnyOf:
    return AnyOf(tuple(filters))


def search(columns: Sequence[str], text: str) -> AnyOf:
    """OR de ilike sobre varias columnas (buscador de nombre/SKU, etc.)"""
    return any_of(*(ilike(column, text) for column in columns))


class RemoteStore(ABC):
    """Cliente de tablas remotas"""

    supports_transactions = False

    @abstractmethod
    def select(
        self,
        table: str,
        filters: Sequence[Condition] = (),
        order: Sequence[Order] = (),
        limit: Optional[int] = None,
        columns: Optional[Sequence[str]] = None
    ) -> List[Row]:
        ...

    @abstractmethod
    def insert(self, table: str, rows: Union[Row, List[Row]]) -> Union[Row, List[Row]]:
        """Insertar una fila (devuelve la fila) o varias (devuelve la lista)"""

    @abstractmethod
    def update(self, table: str, filters: Sequence[Condition], patch: Row) -> List[Row]:
        ...

    @abstractmethod
    def delete(self, table: str, filters: Sequence[Condition]) -> None:
        ...

    @abstractmethod
    def count(self, table: str, filters: Sequence[Condition] = ()) -> int:
        ...

    def select_one(self, table: str, filters: Sequence[Condition], columns: Optional[Sequence[str]] = None) -> Optional[Row]:
        rows = self.select(table, filters=filters, limit=1, columns=columns)
        return rows[0] if rows else None

    def with_token(self, access_token: Optional[str]) -> "RemoteStore":
        """Store que actúa en nombre de la sesión del usuario"""
        return self

    @contextmanager
    def transaction(self) -> Iterator["RemoteStore"]:
        """Sin transacciones entre tablas: cada escritura es independiente"""
        yield self
