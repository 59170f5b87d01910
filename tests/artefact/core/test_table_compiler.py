"""Tests for compiling schemas into SQLAlchemy tables (artefact.core.table)."""

import unittest
from unittest.mock import patch

from sqlalchemy import REAL, Column as SQLColumn, Integer, LargeBinary, MetaData, Text
from sqlalchemy.sql.elements import TextClause

from artefact.core.constant import Constant
from artefact.core.property import Property
from artefact.core.schema import Schema
from artefact.core.sqltypes import EnumCode, JSONText, Timestamp
from artefact.core.table import SQLiteTableCompiler, Table, UnsupportedFieldType, compile_ddl
from artefact.core.utils.core_utils import BUILD_TARGET_SQLITE


def users(prop):
    return {
        "id": prop.integer("id").identifier(),
        "name": prop.text("name"),
        "email": prop.text("email").unique().optional(),
    }


class TestTableCompiler(unittest.TestCase):

    def test_columns_follow_declaration_order(self):
        table = Table("users", users)
        self.assertEqual(table.name, "users")
        self.assertEqual([c.key for c in table.columns], ["id", "name", "email"])

    def test_identifier_is_primary_key(self):
        table = Table("users", users)
        self.assertTrue(table.c.id.primary_key)
        self.assertFalse(table.c.name.primary_key)

    def test_not_optional_is_not_null(self):
        table = Table("users", users)
        self.assertFalse(table.c.name.nullable)
        self.assertTrue(table.c.email.nullable)

    def test_unique(self):
        table = Table("users", users)
        self.assertTrue(table.c.email.unique)
        self.assertFalse(table.c.name.unique)

    def test_column_types(self):
        table = Table("t", lambda prop: {
            "i": prop.integer("i"),
            "r": prop.real("r"),
            "t": prop.text("t"),
            "b": prop.blob("b"),
            "ts": prop.timestamp("ts"),
            "j": prop.json("j"),
            "e": prop.enum("e", {"options": {"a": 1}}),
        })
        expected = {"i": Integer, "r": REAL, "t": Text, "b": LargeBinary, "ts": Timestamp, "j": JSONText,
                    "e": EnumCode}
        for key, column_type in expected.items():
            with self.subTest(column=key):
                self.assertIsInstance(table.c[key].type, column_type)
        self.assertEqual(table.c.e.type.options, (("a", 1),))

    def test_column_name_and_key(self):
        table = Table("t", lambda prop: {"createdAt": prop.integer("created_at")})
        self.assertEqual(table.c.createdAt.name, "created_at")

    def test_scalar_default(self):
        table = Table("t", lambda prop: {"n": prop.integer("n").default(5)})
        self.assertEqual(table.c.n.default.arg, 5)
        self.assertIsNone(table.c.n.server_default)

    def test_mutable_default_is_callable(self):
        table = Table("t", lambda prop: {"j": prop.json("j").default([])})
        self.assertTrue(table.c.j.default.is_callable)

    def test_function_literal_default_is_server_default(self):
        table = Table("t", lambda prop: {"ts": prop.integer("ts").default("now()")})
        self.assertIsNone(table.c.ts.default)
        self.assertIsInstance(table.c.ts.server_default.arg, TextClause)
        self.assertEqual(str(table.c.ts.server_default.arg), "CURRENT_TIMESTAMP")

    def test_sql_default_is_server_default(self):
        now = Constant(BUILD_TARGET_SQLITE).now()
        table = Table("t", lambda prop: {"ts": prop.integer("ts").default(now)})
        self.assertIs(table.c.ts.server_default.arg, now)

    def test_unknown_type_fails_before_any_column_is_built(self):
        schema = Schema("s", lambda prop: {
            "id": prop.integer("id"),
            "u": Property("uuid", "u"),
        })
        with patch("artefact.core.table.SQLColumn", wraps=SQLColumn) as column:
            with self.assertRaises(UnsupportedFieldType):
                SQLiteTableCompiler().compile("s", schema)
        self.assertEqual(column.call_count, 0)

    def test_unsupported_type_is_a_value_error(self):
        with self.assertRaises(ValueError):
            Table("s", lambda prop: {"u": Property("uuid", "u")})

    def test_derivation_is_recorded(self):
        source = Schema("source", lambda prop: {"id": prop.integer("id")})
        table = Table("t", lambda prop: {
            "label": prop.text("label").derive_from([source], lambda o, u: "", lambda o, u: ""),
        })
        self.assertIs(table.c.label.info["derivation"].schemas[0], source)
        self.assertEqual(table.c.label.info["property"].name, "label")

    def test_metadata(self):
        metadata = MetaData()
        Table("a", users, metadata=metadata)
        Table("b", users, metadata=metadata)
        self.assertEqual(sorted(metadata.tables), ["a", "b"])

    def test_schema_value_is_accepted(self):
        table = Table("people", Schema("users", users))
        self.assertEqual(table.name, "people")

    def test_ddl(self):
        ddl = compile_ddl(Table("users", users))
        self.assertTrue(ddl.startswith("CREATE TABLE users"))
        self.assertIn("id INTEGER NOT NULL", ddl)
        self.assertIn("name TEXT NOT NULL", ddl)
        self.assertIn("email TEXT,", ddl)
        self.assertIn("PRIMARY KEY (id)", ddl)
        self.assertIn("UNIQUE (email)", ddl)

    def test_ddl_server_default(self):
        ddl = compile_ddl(Table("t", lambda prop: {"ts": prop.integer("ts").default("now()")}))
        self.assertIn("CURRENT_TIMESTAMP", ddl)


if __name__ == '__main__':
    unittest.main()
