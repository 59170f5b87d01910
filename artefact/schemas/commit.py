"""Commits: a message, the parent digests and the artefacts they contain."""

from artefact.core import Schema, Table
from artefact.schemas.action import action_schema

MODE_OPTIONS = {
    "blob": 100644,
    "executable": 100755,
    "symlink": 120000,
    "directory": 40000,
    "submodule": 160000,
}


def _artefact_schema():
    from artefact.schemas.artefact import artefact_schema
    return artefact_schema


def commit(prop):
    return {
        "message": prop.text("message").unique(),
        "mode": prop.enum("mode", {"options": MODE_OPTIONS}),
        "digest": prop.text("digest").unique().identifier(),
        # digests of the parent commits
        "parents": prop.json("parents").default([]),
        "author": prop.text("author", {"mode": "json"}).derive_from(
            [action_schema],
            join_on=lambda o, u: f"{o}.digest = {u}.commit_digest",
            sql=lambda o, u: f"{u}",
        ),
        "committer": prop.text("committer", {"mode": "json"}).derive_from(
            [action_schema],
            join_on=lambda o, u: f"{o}.digest = {u}.commit_digest",
            sql=lambda o, u: f"{u}",
        ),
        "artefacts": prop.json("artefacts").derive_from(
            [_artefact_schema],
            join_on=lambda o, u: f"{o}.digest = {u}.digest",
            sql=lambda o, u: f"{u}.digest",
        ).default([]),
    }


commit_schema = Schema("Commit", commit)
commit_table = Table("commits", commit)
