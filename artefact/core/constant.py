"""Build-target dependent constant values for field defaults.

For the ``SQLite`` build target, constants are raw SQL fragments that the table compiler hands to the database as
server defaults. For any other target (``SQLite-Dev``), constants are plain function-call literals such as
``"now()"``, which render readably and are translated back to SQL when a table is compiled.
"""

from sqlalchemy import text
from sqlalchemy.sql.elements import ClauseElement

from .utils.core_utils import get_build_target, BUILD_TARGET_SQLITE

NOW_LITERAL = "now()"

_function_literals = {
    NOW_LITERAL: "CURRENT_TIMESTAMP",
}


class Constant(object):
    """Default-value constants for one build target."""

    def __init__(self, build_target=None):
        self.build_target = build_target or get_build_target()

    @property
    def emits_sql(self):
        return self.build_target == BUILD_TARGET_SQLITE

    def now(self):
        if self.emits_sql:
            return text(_function_literals[NOW_LITERAL])
        return NOW_LITERAL

    def __repr__(self):
        return "Constant(%r)" % self.build_target


def is_sql_expression(value):
    return isinstance(value, ClauseElement)


def is_function_literal(value):
    return isinstance(value, str) and value in _function_literals


def as_sql_expression(value):
    """Return the raw SQL equivalent of a constant, or None when the value is an ordinary literal."""
    if is_sql_expression(value):
        return value
    if is_function_literal(value):
        return text(_function_literals[value])
    return None


value = Constant()
