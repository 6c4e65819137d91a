"""
Table-oriented access to the dashboard database.

Every operation returns a ``SinkResult`` carrying either data or an error message; nothing
here raises to the caller. Without an engine (no ``SINK_DATABASE_URL``) all operations are
no-ops that report ``configured=False``.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, Mapping, NamedTuple

from sqlalchemy import MetaData, Table, delete, insert, select, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from otb_sync.db.base import Base
import otb_sync.models  # noqa: F401  (registers the sink tables on Base.metadata)

logger = logging.getLogger(__name__)

NOT_CONFIGURED = 'sink not configured'

# Per-process writer locks keyed by (database url, table), shared by every SinkStore.
_WRITE_LOCKS: dict[tuple[str, str], threading.Lock] = {}
_WRITE_LOCKS_GUARD = threading.Lock()


def _process_lock(engine: Engine, table: str) -> threading.Lock:
    key = (str(engine.url), table)
    with _WRITE_LOCKS_GUARD:
        lock = _WRITE_LOCKS.get(key)
        if lock is None:
            lock = _WRITE_LOCKS[key] = threading.Lock()
        return lock


def lock_table(conn: Connection, table: str) -> None:
    """Take the cross-process writer lock for ``table``; released at commit or rollback."""
    if conn.dialect.name == 'postgresql':
        conn.execute(text('SELECT pg_advisory_xact_lock(hashtext(:name))'), {'name': f'otb_sync.{table}'})


class SinkResult(NamedTuple):
    data: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SinkStore:
    def __init__(self, engine: Engine | None, metadata: MetaData | None = None) -> None:
        self.engine = engine
        self.metadata = metadata if metadata is not None else Base.metadata

    @property
    def configured(self) -> bool:
        return self.engine is not None

    def _table(self, name: str) -> Table:
        table = self.metadata.tables.get(name)
        if table is None:
            raise KeyError(f'unknown sink table: {name}')
        return table

    def create_schema(self) -> SinkResult:
        if self.engine is None:
            return SinkResult(error=NOT_CONFIGURED)
        try:
            self.metadata.create_all(bind=self.engine)
            return SinkResult(data=sorted(self.metadata.tables))
        except SQLAlchemyError as exc:
            logger.exception('sink schema creation failed')
            return SinkResult(error=str(exc))

    def delete(self, table: str, filters: Mapping[str, Any] | None = None) -> SinkResult:
        """Delete rows matching every ``column == value`` pair; no filters deletes all rows."""
        if self.engine is None:
            return SinkResult(error=NOT_CONFIGURED)
        try:
            target = self._table(table)
            stmt = delete(target)
            for column, value in (filters or {}).items():
                stmt = stmt.where(target.c[column] == value)
            with self.engine.begin() as conn:
                result = conn.execute(stmt)
            return SinkResult(data=int(result.rowcount or 0))
        except (SQLAlchemyError, KeyError) as exc:
            return SinkResult(error=str(exc))

    def insert(self, table: str, records: Iterable[Mapping[str, Any]]) -> SinkResult:
        if self.engine is None:
            return SinkResult(error=NOT_CONFIGURED)
        try:
            rows = [dict(r) for r in records]
            if not rows:
                return SinkResult(data=0)
            target = self._table(table)
            with self.engine.begin() as conn:
                conn.execute(insert(target), rows)
            return SinkResult(data=len(rows))
        except (SQLAlchemyError, KeyError, TypeError, ValueError) as exc:
            return SinkResult(error=str(exc))

    def replace(self, table: str, records: Iterable[Mapping[str, Any]]) -> SinkResult:
        """
        Delete every row of ``table`` and insert ``records`` in one transaction.

        Writers are serialized across processes on PostgreSQL by a transaction-scoped
        advisory lock on the table name, and within the process by a lock shared by every
        ``SinkStore`` on the same database. On failure ``data`` is ``{'step': ...}`` naming
        the step that failed (``prepare``, ``lock``, ``delete`` or ``insert``); the
        transaction is rolled back, so the table keeps its previous rows.
        """
        if self.engine is None:
            return SinkResult(error=NOT_CONFIGURED)
        step = 'prepare'
        try:
            target = self._table(table)
            rows = [dict(r) for r in records]
            with _process_lock(self.engine, table):
                with self.engine.begin() as conn:
                    step = 'lock'
                    lock_table(conn, table)
                    step = 'delete'
                    deleted = conn.execute(delete(target)).rowcount
                    step = 'insert'
                    if rows:
                        conn.execute(insert(target), rows)
            return SinkResult(data={'deleted': int(deleted or 0), 'inserted': len(rows)})
        except (SQLAlchemyError, KeyError, TypeError, ValueError) as exc:
            return SinkResult(data={'step': step}, error=str(exc))

    def select(
        self,
        table: str,
        fields: Iterable[str] | None = None,
        limit: int | None = None,
        filters: Mapping[str, Any] | None = None,
    ) -> SinkResult:
        if self.engine is None:
            return SinkResult(error=NOT_CONFIGURED)
        try:
            target = self._table(table)
            names = list(fields or [])
            columns = [target.c[name] for name in names] if names else [target]
            stmt = select(*columns)
            for column, value in (filters or {}).items():
                stmt = stmt.where(target.c[column] == value)
            stmt = stmt.order_by(target.c.id) if 'id' in target.c else stmt
            if limit is not None:
                stmt = stmt.limit(max(0, int(limit)))
            with self.engine.connect() as conn:
                rows = [dict(r) for r in conn.execute(stmt).mappings().all()]
            return SinkResult(data=rows)
        except (SQLAlchemyError, KeyError) as exc:
            return SinkResult(error=str(exc))

    def ping(self) -> bool | None:
        """True=reachable, False=failing, None=not configured."""
        if self.engine is None:
            return None
        try:
            with self.engine.connect() as conn:
                conn.execute(text('SELECT 1'))
            return True
        except SQLAlchemyError:
            return False
