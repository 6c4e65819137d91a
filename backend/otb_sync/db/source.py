"""Read-only access to the reservation source (Oracle)."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Mapping

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from otb_sync.sync.coercion import normalize_row


class SourceNotConfiguredError(RuntimeError):
    pass


class SourceConnection:
    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def fetch_all(self, sql: str, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        result = self._conn.execute(text(sql), dict(params or {}))
        return [normalize_row(row) for row in result.mappings().all()]


class SourceStore:
    def __init__(self, engine: Engine | None) -> None:
        self.engine = engine

    @property
    def configured(self) -> bool:
        return self.engine is not None

    @contextmanager
    def connect(self) -> Iterator[SourceConnection]:
        """Check a connection out of the pool; it goes back on every exit path."""
        if self.engine is None:
            raise SourceNotConfiguredError('ORACLE_USER / ORACLE_CONNECT_STRING not configured')
        with self.engine.connect() as conn:
            yield SourceConnection(conn)

    def ping(self) -> bool | None:
        if self.engine is None:
            return None
        try:
            with self.connect() as conn:
                conn.fetch_all('SELECT 1 AS ok FROM dual')
            return True
        except SQLAlchemyError:
            return False
