"""Tests for the example Action, Commit and Artefact schemas."""

import unittest

from sqlalchemy import select

from artefact.core import value
from artefact.core.sqltypes import EnumCode
from artefact.host.sqlite_host import SQLiteHost
from artefact.proxies.sqlite import QueryBridge
from artefact.schemas.action import action_schema, action_table
from artefact.schemas.artefact import artefact_schema, artefact_table
from artefact.schemas.commit import MODE_OPTIONS, commit_schema, commit_table

NOW = '{"sql":"CURRENT_TIMESTAMP","params":{}}' if value.emits_sql else '"now()"'


class TestExampleSchemas(unittest.TestCase):

    def test_action(self):
        self.assertEqual(
            str(action_schema),
            'Schema: Action\n{\n'
            '   text("actor"),\n'
            '   text("commit_digest"),\n'
            '   integer("timestamp").default(%s)\n'
            '}' % NOW
        )

    def test_action_references_commit(self):
        self.assertIs(action_schema.fields["commit_digest"].reference(), commit_schema.fields["digest"])

    def test_commit(self):
        rendered = str(commit_schema)
        self.assertTrue(rendered.startswith('Schema: Commit\n{\n   text("message").unique(),\n   enum("mode",\n'))
        self.assertIn('\t\t\t"blob",\n\t\t\t"executable",\n\t\t\t"symlink",\n\t\t\t"directory",\n\t\t\t"submodule",\n',
                      rendered)
        self.assertIn('   text("digest").identifier().unique(),\n', rendered)
        self.assertIn('   json("parents").default([]),\n', rendered)
        self.assertTrue(rendered.endswith('   json("artefacts").default([])\n}'))

    def test_commit_derivations(self):
        author = commit_schema.fields["author"].derivation
        self.assertEqual(author.resolve_schemas(), [action_schema])
        self.assertEqual(author.render_join("c", "a"), "c.digest = a.commit_digest")
        artefacts = commit_schema.fields["artefacts"].derivation
        self.assertEqual(artefacts.resolve_schemas(), [artefact_schema])

    def test_artefact(self):
        self.assertEqual(list(artefact_schema.fields), ["pathname", "mode", "digest", "modified_at", "created_at"])
        self.assertIn('   integer("modified_at").default(%s),\n' % NOW, str(artefact_schema))
        modified = artefact_schema.fields["modified_at"]
        self.assertEqual(modified.config, {"mode": "timestamp"})
        self.assertEqual(modified.derivation.resolve_schemas(), [commit_schema])
        self.assertEqual(modified.derivation.render_sql("a", "c"), "c.committer.date")
        self.assertEqual(artefact_schema.fields["created_at"].derivation.render_sql("a", "c"), "c.author.date")

    def test_tables(self):
        self.assertEqual(action_table.name, "actions")
        self.assertEqual(commit_table.name, "commits")
        self.assertEqual(artefact_table.name, "artefacts")
        self.assertTrue(commit_table.c.digest.primary_key)
        self.assertIsInstance(artefact_table.c.mode.type, EnumCode)
        self.assertEqual(artefact_table.c.mode.type.codes, set(MODE_OPTIONS.values()))
        self.assertIsNotNone(artefact_table.c.modified_at.server_default)
        self.assertIn("derivation", artefact_table.c.created_at.info)


class TestExampleTablesOnSQLite(unittest.TestCase):

    def setUp(self):
        self.host = SQLiteHost(":memory:")
        self.db = QueryBridge(self.host)
        self.db.create_all([action_table, commit_table, artefact_table])

    def tearDown(self):
        self.host.dispose()

    def test_commit_round_trip(self):
        self.db.run(commit_table.insert().values(
            message="initial import", mode="directory", digest="abc", author="alice", committer="bob"))
        self.db.run(artefact_table.insert().values(pathname="README.md", mode="blob", digest="def"))
        self.assertEqual(self.db.get(select(commit_table.c.mode, commit_table.c.parents)), [40000, "[]"])
        row = self.db.get(select(artefact_table.c.pathname, artefact_table.c.created_at))
        self.assertEqual(row[0], "README.md")
        self.assertIsNotNone(row[1])


if __name__ == '__main__':
    unittest.main()
