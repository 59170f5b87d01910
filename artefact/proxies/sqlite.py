"""Query bridge between SQLAlchemy statements and the host query capability.

`QueryBridge` implements the driver contract ``(sql, params, method) ->
{"rows": [...]}``: each call is serialized to a JSON request, handed to the
host query executor in exactly one call, and the JSON reply is translated
back. The bridge keeps no state between calls and never retries; failures are
logged and propagated to the caller.

Usage:
    from sqlalchemy import select
    from artefact.proxies.sqlite import QueryBridge, runtime

    db = runtime()                       # bound to the process-wide host
    db.create_all(users.metadata)
    db.run(users.insert().values(id=1, name="a"))
    rows = db.all(select(users))
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, Iterable, Sequence

import jsonschema
from sqlalchemy import MetaData
from sqlalchemy import Table as SQLTable
from sqlalchemy.dialects import sqlite
from sqlalchemy.schema import CreateTable

from artefact.core.host import get_host
from artefact.core.protocol import QueryPayload, QueryResult
from artefact.core.types import QueryMethod
from artefact.core.utils.core_utils import format_exception

logger = logging.getLogger(__name__)


class MalformedHostResponse (ValueError):
    pass


class HostQueryError (RuntimeError):
    pass


def compile_statement(statement: Any, dialect: Any = None) -> tuple[str, list]:
    """Compile a SQLAlchemy statement into SQL text with positional parameters.

    Expanding IN parameters are rendered one placeholder per value. Python-side
    column defaults of an INSERT are evaluated, and bind processors
    of the column types (e.g. enum label to code) are applied to the parameter
    values.

    Returns:
        A ``(sql, params)`` tuple.
    """
    dialect = dialect or sqlite.dialect(paramstyle="qmark")
    compiled = statement.compile(dialect=dialect, compile_kwargs={"render_postcompile": True})
    positions = getattr(compiled, "positiontup", None)
    sql = str(compiled).strip()
    if not positions:
        return sql, []
    values = compiled.construct_params()
    # python-side column defaults are normally filled in by the execution context
    for column in getattr(compiled, "insert_prefetch", None) or ():
        default = column.default
        if default is not None and column.key in values:
            values[column.key] = default.arg(None) if default.is_callable else default.arg
    params = []
    for key in positions:
        value = values[key]
        bind = compiled.binds.get(key)
        if bind is None:
            bind = _expanded_bind(compiled, key)
        processor = bind.type.bind_processor(dialect) if bind is not None else None
        params.append(processor(value) if processor else value)
    return sql, params


def _expanded_bind(compiled, key):
    # an expanded IN parameter "<name>_<n>" shares the type of the bind "<name>"
    name, sep, index = key.rpartition("_")
    if sep and index.isdigit():
        return compiled.binds.get(name)
    return None


def infer_method(statement: Any) -> QueryMethod:
    if getattr(statement, "is_select", False):
        return QueryMethod.all
    if getattr(statement, "_returning", None):
        return QueryMethod.all
    return QueryMethod.run


class QueryBridge (object):
    """Driver function for SQLAlchemy Core statements over the host query capability.

    Attributes:
        executor: Host query capability. When omitted, the executor bound
            process-wide (see `artefact.core.host.bind`) is looked up at call
            time.
    """

    def __init__(self, executor: Callable[[str], str] | None = None):
        self._executor = executor

    @property
    def executor(self) -> Callable[[str], str]:
        return self._executor or get_host().executor

    def send(self, sql: str, params: Sequence[Any] = (), method: QueryMethod | str = QueryMethod.all) -> QueryResult:
        """Send one request and return the full reply.

        Raises:
            ValueError: If `method` is not a known execution mode.
            MalformedHostResponse: If the reply is not JSON or violates the
                reply format.
            HostQueryError: If the reply carries an error.
        """
        try:
            payload = QueryPayload(sql=sql, params=tuple(params), method=QueryMethod(method))
            response = self.executor(payload.to_json())
            try:
                result = QueryResult.from_dict(json.loads(response))
            except (TypeError, ValueError, jsonschema.ValidationError) as e:
                raise MalformedHostResponse("Malformed host response: %s" % format_exception(e)) from e
            if result.error is not None:
                raise HostQueryError(result.error)
            return result
        except Exception as e:
            logger.error("Runtime Driver Error: %s" % format_exception(e))
            raise

    def __call__(self, sql: str, params: Sequence[Any], method: QueryMethod | str) -> dict[str, list]:
        return {"rows": self.send(sql, params, method).rows}

    def execute(self, statement: Any, method: QueryMethod | str | None = None) -> QueryResult:
        """Compile a SQLAlchemy statement and send it.

        The execution mode is inferred when not given: ``all`` for selects and
        statements with RETURNING, ``run`` otherwise.
        """
        sql, params = compile_statement(statement)
        return self.send(sql, params, method or infer_method(statement))

    def run(self, statement: Any) -> QueryResult:
        return self.execute(statement, QueryMethod.run)

    def all(self, statement: Any) -> list:
        return self.execute(statement, QueryMethod.all).rows

    def values(self, statement: Any) -> list:
        return self.execute(statement, QueryMethod.values).rows

    def get(self, statement: Any) -> list | None:
        rows = self.execute(statement, QueryMethod.get).rows
        return rows[0] if rows else None

    def create_all(self, tables: MetaData | Iterable[SQLTable]) -> None:
        """Issue CREATE TABLE for each table, in dependency order for a MetaData."""
        if isinstance(tables, MetaData):
            tables = tables.sorted_tables
        for table in tables:
            logger.debug("Creating table '%s'" % table.name)
            self.run(CreateTable(table, if_not_exists=True))

    async def call_async(self, sql: str, params: Sequence[Any], method: QueryMethod | str) -> dict[str, list]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.__call__, sql, params, method)

    async def execute_async(self, statement: Any, method: QueryMethod | str | None = None) -> QueryResult:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.execute, statement, method)


def runtime(executor: Callable[[str], str] | None = None) -> QueryBridge:
    """Return a query bridge over the given executor, or over the process-wide host."""
    return QueryBridge(executor)
