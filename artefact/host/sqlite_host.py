"""In-process SQLite storage host.

`SQLiteHost` is a storage engine behind the query bridge: it implements the
host query capability (one JSON request in, one JSON reply out) on top of a
single SQLAlchemy connection to a SQLite database. Statement failures are
reported in the reply's ``error`` member, never raised, so the bridge can
surface them to its caller.
"""

from __future__ import annotations

import base64
import json
import logging
import threading
from typing import Any

import jsonschema
from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from artefact.core.host import QueryExecutor
from artefact.core.protocol import QueryPayload, QueryResult
from artefact.core.types import QueryMethod
from artefact.core.utils.core_utils import DEFAULT_DATABASE, format_exception, load_config

logger = logging.getLogger(__name__)

BUSY_TIMEOUT_MS = 5000


def _to_json_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    return value


class SQLiteHost (QueryExecutor):
    """SQLite implementation of the host query capability.

    Attributes:
        database: Path of the database file, or ``:memory:``. When omitted, the
            ``database`` key of the configuration file is used.
        engine: SQLAlchemy engine owning the single connection.

    Example:
        >>> host = SQLiteHost()
        >>> host('{"sql": "select 1", "params": [], "method": "all"}')
        '{"rows": [[1]]}'
    """

    def __init__(self, database: str | None = None, config_file: str | None = None):
        if database is None:
            database = load_config(config_file).get("database") or DEFAULT_DATABASE
        self.database = database
        # one shared connection, so an in-memory database is visible from every thread
        self.engine = create_engine(
            f"sqlite:///{database}",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        event.listen(self.engine, "connect", self._configure_connection)
        self._lock = threading.Lock()

    @staticmethod
    def _configure_connection(dbapi_conn, _conn_record):
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA journal_mode=WAL")
        cur.execute("PRAGMA synchronous=NORMAL")
        cur.execute("PRAGMA foreign_keys=ON")
        cur.execute(f"PRAGMA busy_timeout={BUSY_TIMEOUT_MS}")
        cur.close()

    def __call__(self, payload: str) -> str:
        try:
            request = QueryPayload.from_dict(json.loads(payload))
        except (ValueError, jsonschema.ValidationError) as e:
            return QueryResult(error="Invalid query payload: %s" % format_exception(e)).to_json()
        return self.execute(request).to_json()

    def execute(self, request: QueryPayload) -> QueryResult:
        with self._lock:
            try:
                with self.engine.begin() as conn:
                    return self._execute(conn, request)
            except SQLAlchemyError as e:
                logger.debug("Query failed: %s" % format_exception(e))
                return QueryResult(error=str(getattr(e, "orig", None) or e))

    def batch(self, requests: list[QueryPayload]) -> list[QueryResult]:
        """Execute several requests in one transaction.

        The first failure rolls back the whole batch and is raised.
        """
        with self._lock:
            with self.engine.begin() as conn:
                return [self._execute(conn, request) for request in requests]

    @staticmethod
    def _execute(conn, request: QueryPayload) -> QueryResult:
        result = conn.exec_driver_sql(request.sql, tuple(request.params))
        if request.method == QueryMethod.run:
            return QueryResult(rows=[], last_insert_row_id=result.lastrowid, changes=max(result.rowcount, 0))
        if not result.returns_rows:
            return QueryResult(rows=[])
        if request.method == QueryMethod.get:
            row = result.fetchone()
            rows = [row] if row is not None else []
        else:
            rows = result.fetchall()
        return QueryResult(rows=[[_to_json_value(v) for v in row] for row in rows])

    def dispose(self) -> None:
        self.engine.dispose()

    def __enter__(self) -> "SQLiteHost":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.dispose()
        return False
