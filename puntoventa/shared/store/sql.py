# puntoventa/shared/store/sql.py
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import date, datetime
from typing import Any, Iterator, List, Optional, Sequence, Union

from sqlalchemy import Date, DateTime, Table, and_, delete, func, insert, or_, select, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from puntoventa.core.exceptions import FOREIGN_KEY_VIOLATION, UNIQUE_VIOLATION, StoreError
from puntoventa.shared.database.models import Base
from .base import AnyOf, Condition, Filter, Order, RemoteStore, Row

logger = logging.getLogger(__name__)

_current_connection: ContextVar[Optional[Connection]] = ContextVar("_current_connection", default=None)


def _integrity_code(error: IntegrityError) -> Optional[str]:
    orig = error.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return code
    text = str(orig).upper()
    if "FOREIGN KEY" in text:
        return FOREIGN_KEY_VIOLATION
    if "UNIQUE" in text:
        return UNIQUE_VIOLATION
    return None


class SqlStore(RemoteStore):
    """
    Store sobre SQLAlchemy Core con las tablas de models.py.

    A diferencia de PostgREST sí ofrece transacciones: las secuencias de
    escrituras que corren dentro de transaction() se confirman o revierten
    juntas.
    """

    supports_transactions = True

    def __init__(self, engine: Engine):
        self.engine = engine
        self.tables = Base.metadata.tables

    def create_tables(self) -> None:
        Base.metadata.create_all(self.engine)

    def _table(self, name: str) -> Table:
        try:
            return self.tables[name]
        except KeyError:
            raise StoreError(f"Tabla desconocida: {name}", code="42P01")

    def _coerce(self, table: Table, row: Row) -> Row:
        """Convertir fechas ISO a date/datetime según el tipo de columna"""
        values = {}
        for key, value in row.items():
            if key not in table.c:
                raise StoreError(f"Columna desconocida {table.name}.{key}", code="42703")
            column_type = table.c[key].type
            if isinstance(value, str):
                if isinstance(column_type, DateTime):
                    value = datetime.fromisoformat(value)
                elif isinstance(column_type, Date):
                    value = date.fromisoformat(value[:10])
            values[key] = value
        return values

    def _clause(self, table: Table, condition: Condition):
        if isinstance(condition, AnyOf):
            return or_(*(self._clause(table, f) for f in condition.filters))
        column = table.c[condition.column]
        value = condition.value
        if isinstance(value, str) and condition.op in ("eq", "neq", "gt", "gte", "lt", "lte"):
            value = self._coerce(table, {condition.column: value})[condition.column]
        if condition.op == "eq":
            return column.is_(None) if value is None else column == value
        if condition.op == "neq":
            return column != value
        if condition.op == "gt":
            return column > value
        if condition.op == "gte":
            return column >= value
        if condition.op == "lt":
            return column < value
        if condition.op == "lte":
            return column <= value
        if condition.op == "ilike":
            return column.ilike(f"%{value}%")
        return column.in_(list(value))

    def _where(self, table: Table, filters: Sequence[Condition]):
        return and_(*(self._clause(table, f) for f in filters)) if filters else None

    @contextmanager
    def _connection(self) -> Iterator[Connection]:
        current = _current_connection.get()
        if current is not None:
            yield current
            return
        with self.engine.begin() as conn:
            yield conn

    @contextmanager
    def transaction(self) -> Iterator["SqlStore"]:
        if _current_connection.get() is not None:
            yield self
            return
        try:
            with self.engine.begin() as conn:
                token = _current_connection.set(conn)
                try:
                    yield self
                finally:
                    _current_connection.reset(token)
        except SQLAlchemyError as e:
            raise self._store_error(e)

    def _store_error(self, error: SQLAlchemyError) -> StoreError:
        if isinstance(error, IntegrityError):
            return StoreError(str(error.orig), code=_integrity_code(error))
        return StoreError(str(error), code="sql")

    def _execute(self, statement, fetch: Optional[str] = "all") -> Any:
        """Ejecutar y leer el resultado antes de liberar la conexión"""
        try:
            with self._connection() as conn:
                result = conn.execute(statement)
                if fetch == "all":
                    return [dict(r._mapping) for r in result]
                if fetch == "one":
                    return dict(result.one()._mapping)
                if fetch == "scalar":
                    return result.scalar_one()
                return None
        except SQLAlchemyError as e:
            logger.warning(f"Error SQL: {e}")
            raise self._store_error(e)

    def select(
        self,
        table: str,
        filters: Sequence[Condition] = (),
        order: Sequence[Order] = (),
        limit: Optional[int] = None,
        columns: Optional[Sequence[str]] = None
    ) -> List[Row]:
        t = self._table(table)
        cols = [t.c[c] for c in columns] if columns and columns != ["*"] else [t]
        stmt = select(*cols)
        where = self._where(t, filters)
        if where is not None:
            stmt = stmt.where(where)
        for o in order:
            stmt = stmt.order_by(t.c[o.column].asc() if o.ascending else t.c[o.column].desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        return self._execute(stmt)

    def insert(self, table: str, rows: Union[Row, List[Row]]) -> Union[Row, List[Row]]:
        t = self._table(table)
        many = isinstance(rows, list)
        if not many:
            return self._execute(insert(t).values(**self._coerce(t, rows)).returning(t), fetch="one")
        with self.transaction():
            return [
                self._execute(insert(t).values(**self._coerce(t, row)).returning(t), fetch="one")
                for row in rows
            ]

    def update(self, table: str, filters: Sequence[Condition], patch: Row) -> List[Row]:
        t = self._table(table)
        stmt = update(t).values(**self._coerce(t, patch))
        where = self._where(t, filters)
        if where is not None:
            stmt = stmt.where(where)
        return self._execute(stmt.returning(t))

    def delete(self, table: str, filters: Sequence[Condition]) -> None:
        t = self._table(table)
        stmt = delete(t)
        where = self._where(t, filters)
        if where is not None:
            stmt = stmt.where(where)
        self._execute(stmt, fetch=None)

    def count(self, table: str, filters: Sequence[Condition] = ()) -> int:
        t = self._table(table)
        stmt = select(func.count()).select_from(t)
        where = self._where(t, filters)
        if where is not None:
            stmt = stmt.where(where)
        return int(self._execute(stmt, fetch="scalar"))
