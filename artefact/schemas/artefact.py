"""Artefacts: the files, links and submodules recorded by commits."""

from artefact.core import Schema, Table, value
from artefact.schemas.commit import MODE_OPTIONS, commit_schema


def artefact(prop):
    return {
        # full path including the file name
        "pathname": prop.text("pathname").unique(),
        "mode": prop.enum("mode", {"options": MODE_OPTIONS}),
        # hash of the artefact content
        "digest": prop.text("digest").unique(),
        "modified_at": prop.integer("modified_at", {"mode": "timestamp"}).derive_from(
            [commit_schema],
            join_on=lambda o, u: f"{o}.digest = {u}.digest",
            sql=lambda o, u: f"{u}.committer.date",
        ).default(value.now()),
        "created_at": prop.integer("created_at", {"mode": "timestamp"}).derive_from(
            [commit_schema],
            join_on=lambda o, u: f"{o}.digest = {u}.digest",
            sql=lambda o, u: f"{u}.author.date",
        ).default(value.now()),
    }


artefact_schema = Schema("Artefact", artefact)
artefact_table = Table("artefacts", artefact)
