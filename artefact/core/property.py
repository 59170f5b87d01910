"""Immutable column descriptors.

A `Property` describes one column: its type tag, an optional display name, type
specific configuration and the modifier flags applied to it. Properties are
frozen dataclasses; every modifier returns a new Property with one attribute
replaced, so a Property can be shared freely between schemas and threads.

Usage:
    from artefact.core.field import field

    prop = field.text("email").unique().optional()
    prop.is_unique      # True
    prop.to_dict()      # {'type': 'text', 'name': 'email', 'isOptional': True, ...}
"""

from __future__ import annotations

import base64
import datetime
import json
from dataclasses import dataclass, replace
from typing import Any, Callable, Sequence

from sqlalchemy.dialects import sqlite

from artefact.core.constant import is_function_literal, is_sql_expression
from artefact.core.types import FieldType


class _NoDefault(object):
    """Marker for a Property without a default value."""

    def __repr__(self):
        return "NO_DEFAULT"

    def __bool__(self):
        return False


NO_DEFAULT = _NoDefault()


class InvalidDefaultValue(TypeError):
    pass


@dataclass(frozen=True)
class Derivation:
    """Marks a field as sourced from a join against other schemas.

    This is documentation metadata only: the core never executes `join_on` or
    `sql`, it only stores and renders them.

    Attributes:
        schemas: Source schemas. Entries are Schema values or zero-argument
            callables returning one, which allows mutually referencing schemas.
        join_on: Function of two table aliases returning the join predicate.
        sql: Function of two table aliases returning the projected expression.
    """

    schemas: tuple
    join_on: Callable[[str, str], str]
    sql: Callable[[str, str], str]

    def resolve_schemas(self) -> list:
        return [s() if callable(s) else s for s in self.schemas]

    def render_join(self, alias: str, other: str) -> str:
        return self.join_on(alias, other)

    def render_sql(self, alias: str, other: str) -> str:
        return self.sql(alias, other)


def enum_options(config: Any) -> dict[str, int] | None:
    """Return the label to code mapping of an enum configuration.

    Both configuration forms are accepted: ``{"options": {"label": code}}`` and
    ``{"options": ["label", ...]}``. A label list is numbered from zero in order.
    """
    if not isinstance(config, dict):
        return None
    options = config.get("options")
    if isinstance(options, dict):
        return dict(options)
    if isinstance(options, (list, tuple)):
        return {label: code for code, label in enumerate(options)}
    return None


def sql_descriptor(expression) -> dict[str, Any]:
    """Return the JSON descriptor of a raw SQL expression compiled for SQLite."""
    compiled = expression.compile(dialect=sqlite.dialect())
    return {"sql": str(compiled), "params": dict(compiled.params)}


def default_document(value: Any) -> Any:
    """Return the JSON-compatible form of a default value."""
    if is_sql_expression(value):
        return sql_descriptor(value)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, datetime.datetime):
        return value.isoformat()
    return value


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def _is_json(value):
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return False
    return True


def _is_enum_value(value, config):
    options = enum_options(config) or {}
    if isinstance(value, str):
        return value in options
    return _is_int(value) and value in options.values()


_default_checks = {
    FieldType.integer: lambda v, c: _is_int(v),
    FieldType.real: lambda v, c: _is_int(v) or isinstance(v, float),
    FieldType.text: lambda v, c: isinstance(v, str),
    FieldType.blob: lambda v, c: isinstance(v, (bytes, bytearray)),
    FieldType.timestamp: lambda v, c: _is_int(v) or isinstance(v, (str, datetime.datetime)),
    FieldType.json: lambda v, c: _is_json(v),
    FieldType.enum: _is_enum_value,
}


@dataclass(frozen=True)
class Property:
    """Immutable description of one column.

    Attributes:
        type: Field type tag.
        name: Column name, when it differs from the key the field is stored
            under in a Schema.
        config: Type specific configuration, e.g. ``{"options": [...]}`` for enums.
        is_optional: Whether NULL values are allowed.
        is_identifier: Whether the column is the primary key.
        is_unique: Whether values must be unique.
        default_value: Default value, or `NO_DEFAULT`.
        reference: Zero-argument callable producing the referenced property. The
            target is never owned by this Property.
        derivation: Join metadata for derived fields.
    """

    type: FieldType | str
    name: str | None = None
    config: Any = None
    is_optional: bool = False
    is_identifier: bool = False
    is_unique: bool = False
    default_value: Any = NO_DEFAULT
    reference: Callable[[], Any] | None = None
    derivation: Derivation | None = None

    @property
    def has_default(self) -> bool:
        return self.default_value is not NO_DEFAULT

    def default(self, value: Any) -> Property:
        """Return a new Property with a default value.

        Raises:
            InvalidDefaultValue: If the value does not match the field type.
        """
        self._check_default(value)
        return replace(self, default_value=value)

    def identifier(self) -> Property:
        return replace(self, is_identifier=True)

    def optional(self) -> Property:
        return replace(self, is_optional=True)

    def unique(self) -> Property:
        return replace(self, is_unique=True)

    def references(self, ref: Callable[[], Any]) -> Property:
        return replace(self, reference=ref)

    def derive_from(self,
                    schemas: Sequence[Any],
                    join_on: Callable[[str, str], str],
                    sql: Callable[[str, str], str]) -> Property:
        return replace(self, derivation=Derivation(schemas=tuple(schemas), join_on=join_on, sql=sql))

    def set_metadata(self, name: str | None = None, config: Any = None) -> Property:
        return replace(self, name=name, config=config)

    def _check_default(self, value):
        if value is None or is_sql_expression(value) or is_function_literal(value):
            return
        check = _default_checks.get(self.type)
        if check is not None and not check(value, self.config):
            raise InvalidDefaultValue(
                "Invalid default value %r for %s field %r" % (value, self.type, self.name))

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON record format.

        Functions (references and derivations) are not serializable and are
        left out. Optional keys are present only when set.
        """
        doc = {"type": str(self.type)}
        if self.name is not None:
            doc["name"] = self.name
        if self.config is not None:
            doc["config"] = self.config
        doc["isOptional"] = self.is_optional
        doc["isIdentifier"] = self.is_identifier
        doc["isUnique"] = self.is_unique
        if self.has_default:
            doc["defaultValue"] = default_document(self.default_value)
        doc["hasDefault"] = self.has_default
        return doc

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Property:
        """Create a Property from its JSON record.

        Unknown type tags are kept as plain strings; the table compiler rejects
        them.
        """
        try:
            ptype = FieldType.from_typename(d["type"])
        except ValueError:
            ptype = d["type"]
        return cls(
            type=ptype,
            name=d.get("name"),
            config=d.get("config"),
            is_optional=d.get("isOptional", False),
            is_identifier=d.get("isIdentifier", False),
            is_unique=d.get("isUnique", False),
            default_value=d.get("defaultValue") if d.get("hasDefault", "defaultValue" in d) else NO_DEFAULT,
        )
