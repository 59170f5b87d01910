"""Author and committer actions."""

from artefact.core import Schema, Table, value


def _commit_digest():
    from artefact.schemas.commit import commit_schema
    return commit_schema.fields["digest"]


def action(prop):
    return {
        # the actor identifier
        "actor": prop.text("actor"),
        # digest of the commit the action belongs to
        "commit_digest": prop.text("commit_digest").references(_commit_digest),
        # epoch seconds
        "timestamp": prop.integer("timestamp", {"mode": "timestamp"}).default(value.now()),
    }


action_schema = Schema("Action", action)
action_table = Table("actions", action)
