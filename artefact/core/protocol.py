"""Query request/response documents exchanged with the host query capability."""

from __future__ import annotations

import json
import logging
import pkgutil
from dataclasses import dataclass, field
from typing import Any

import jsonschema

from artefact.core.types import QueryMethod

logger = logging.getLogger(__name__)


class _ProtocolSchemas (object):
    """Lazily loaded JSON schema documents of the query protocol."""

    def __init__(self):
        self._schemas = {}

    def __getitem__(self, key):
        try:
            return self._schemas[key]
        except KeyError:
            s = pkgutil.get_data("artefact.core", 'schemas/%s.schema.json' % key).decode()
            v = json.loads(s)
            self._schemas[key] = v
            return v


_schemas = _ProtocolSchemas()


def validate_payload(doc):
    """Raise `jsonschema.ValidationError` if `doc` is not a valid query request."""
    jsonschema.validate(doc, _schemas["query_payload"], cls=jsonschema.Draft7Validator)


def validate_result(doc):
    """Raise `jsonschema.ValidationError` if `doc` is not a valid query reply."""
    jsonschema.validate(doc, _schemas["query_result"], cls=jsonschema.Draft7Validator)


@dataclass(frozen=True)
class QueryPayload:
    """A query request.

    Attributes:
        sql: Statement text with positional (``?``) placeholders.
        params: Flat ordered sequence of scalar parameter values.
        method: Execution mode.
    """

    sql: str
    params: tuple = ()
    method: QueryMethod = QueryMethod.all

    def to_dict(self) -> dict[str, Any]:
        return {"sql": self.sql, "params": list(self.params), "method": str(self.method)}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> QueryPayload:
        validate_payload(d)
        return cls(sql=d["sql"], params=tuple(d["params"]), method=QueryMethod(d["method"]))


@dataclass(frozen=True)
class QueryResult:
    """A query reply.

    An `error` means the call failed and `rows` carries no meaning. Without an
    error, `rows` is authoritative for read-shaped calls.
    """

    rows: list = field(default_factory=list)
    last_insert_row_id: int | None = None
    changes: int | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        doc = {}
        if self.error is not None:
            doc["error"] = self.error
            return doc
        doc["rows"] = self.rows
        if self.last_insert_row_id is not None:
            doc["last_insert_row_id"] = self.last_insert_row_id
        if self.changes is not None:
            doc["changes"] = self.changes
        return doc

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> QueryResult:
        validate_result(d)
        return cls(
            rows=d.get("rows") or [],
            last_insert_row_id=d.get("last_insert_row_id"),
            changes=d.get("changes"),
            error=d.get("error"),
        )
