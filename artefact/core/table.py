"""Compilation of schemas into backend tables.

The `TableCompiler` interface is backend-agnostic: it walks the fields of a
Schema in declaration order, resolves a column type for each type tag and
applies the modifiers in a fixed order (primary key, not-null, unique,
default). `SQLiteTableCompiler` produces SQLAlchemy `Table` objects for the
SQLite dialect, usable with SQLAlchemy Core statements and the query bridge.

Usage:
    from artefact.core import Table

    users = Table("users", lambda prop: {
        "id": prop.integer("id").identifier(),
        "name": prop.text("name").optional(),
    })
    select(users).where(users.c.id == 1)
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable

from sqlalchemy import REAL, Integer, LargeBinary, MetaData, Text
from sqlalchemy import Column as SQLColumn
from sqlalchemy import Table as SQLTable
from sqlalchemy.dialects import sqlite
from sqlalchemy.schema import CreateTable
from sqlalchemy.sql.type_api import TypeEngine

from artefact.core.constant import as_sql_expression
from artefact.core.property import Property, enum_options
from artefact.core.schema import Schema, SchemaBuilder
from artefact.core.sqltypes import EnumCode, JSONText, Timestamp
from artefact.core.types import FieldType

logger = logging.getLogger(__name__)


class UnsupportedFieldType (ValueError):
    pass


class TableCompiler (object):
    """Backend-agnostic schema compiler. Subclasses provide the column types and the column factory."""

    column_types: dict[str, Callable[[Property], Any]] = {}

    def compile(self, name: str, schema: Schema | SchemaBuilder, **kwargs: Any) -> Any:
        if not isinstance(schema, Schema):
            schema = Schema(name, schema)
        # every type is resolved before the first column is built
        types = [(key, prop, self.column_type(key, prop)) for key, prop in schema.fields.items()]
        columns = [self.compile_column(key, prop, column_type) for key, prop, column_type in types]
        logger.debug("Compiled table '%s' from schema '%s' with %d columns" % (name, schema.name, len(columns)))
        return self.build_table(name, columns, **kwargs)

    def column_type(self, key: str, prop: Property) -> Any:
        factory = self.column_types.get(prop.type)
        if factory is None:
            raise UnsupportedFieldType("Unsupported type '%s' for field '%s'" % (prop.type, key))
        return factory(prop)

    def column_options(self, prop: Property) -> dict[str, Any]:
        options = {}
        if prop.is_identifier:
            options.update(self.primary_key())
        if not prop.is_optional:
            options.update(self.not_null())
        if prop.is_unique:
            options.update(self.unique())
        if prop.has_default:
            options.update(self.default(prop.default_value))
        return options

    def compile_column(self, key: str, prop: Property, column_type: Any) -> Any:
        raise NotImplementedError("Must be implemented by subclass")

    def build_table(self, name: str, columns: list, **kwargs: Any) -> Any:
        raise NotImplementedError("Must be implemented by subclass")

    def primary_key(self) -> dict[str, Any]:
        raise NotImplementedError("Must be implemented by subclass")

    def not_null(self) -> dict[str, Any]:
        raise NotImplementedError("Must be implemented by subclass")

    def unique(self) -> dict[str, Any]:
        raise NotImplementedError("Must be implemented by subclass")

    def default(self, value: Any) -> dict[str, Any]:
        raise NotImplementedError("Must be implemented by subclass")


def _enum_type(prop: Property) -> TypeEngine:
    return EnumCode(enum_options(prop.config) or {})


class SQLiteTableCompiler (TableCompiler):
    """Compiles schemas into SQLAlchemy tables for SQLite."""

    column_types = {
        FieldType.integer: lambda prop: Integer(),
        FieldType.real: lambda prop: REAL(),
        FieldType.text: lambda prop: Text(),
        FieldType.blob: lambda prop: LargeBinary(),
        FieldType.timestamp: lambda prop: Timestamp(),
        FieldType.json: lambda prop: JSONText(),
        FieldType.enum: _enum_type,
    }

    def compile_column(self, key: str, prop: Property, column_type: TypeEngine) -> SQLColumn:
        info = {"property": prop}
        if prop.derivation is not None:
            info["derivation"] = prop.derivation
        return SQLColumn(
            prop.name if prop.name is not None else key,
            column_type,
            key=key,
            info=info,
            **self.column_options(prop)
        )

    def build_table(self, name: str, columns: list, metadata: MetaData | None = None, **kwargs: Any) -> SQLTable:
        return SQLTable(name, metadata if metadata is not None else MetaData(), *columns, **kwargs)

    def primary_key(self) -> dict[str, Any]:
        return {"primary_key": True}

    def not_null(self) -> dict[str, Any]:
        return {"nullable": False}

    def unique(self) -> dict[str, Any]:
        return {"unique": True}

    def default(self, value: Any) -> dict[str, Any]:
        expression = as_sql_expression(value)
        if expression is not None:
            return {"server_default": expression}
        if isinstance(value, (dict, list)):
            # column defaults must not be shared mutable values
            def copy_default():
                return copy.deepcopy(value)
            return {"default": copy_default}
        return {"default": value}


def Table(name: str,
          schema: Schema | SchemaBuilder,
          metadata: MetaData | None = None,
          compiler: TableCompiler | None = None,
          **kwargs: Any) -> SQLTable:
    """Compile a schema, or a schema builder function, into a backend table.

    Args:
        name: Table name.
        schema: A Schema, or a builder function receiving the field builder.
        metadata: SQLAlchemy MetaData to register the table with. A fresh
            MetaData is used when omitted.
        compiler: Backend compiler; defaults to `SQLiteTableCompiler`.

    Returns:
        The compiled table.

    Raises:
        UnsupportedFieldType: If a field has a type tag the compiler cannot map.
    """
    compiler = compiler or SQLiteTableCompiler()
    return compiler.compile(name, schema, metadata=metadata, **kwargs)


def compile_ddl(table: SQLTable) -> str:
    """Render the CREATE TABLE statement of a compiled table for SQLite."""
    return str(CreateTable(table).compile(dialect=sqlite.dialect())).strip()
