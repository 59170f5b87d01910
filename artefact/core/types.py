"""Type enumerations for artefact schema definitions.

This module provides typed enumerations for the field type tags understood by
the schema core and the execution modes understood by the query bridge.
"""

from __future__ import annotations

from enum import Enum


class FieldType(str, Enum):
    """Field type tags.

    Values:
        integer: Whole number, stored as a 64-bit integer
        real: Floating point number
        text: Character string
        blob: Binary content
        timestamp: Point in time, stored as integer epoch seconds
        json: Structured JSON document, stored as text
        enum: Symbolic label, stored as its integer code
    """

    integer = "integer"
    real = "real"
    text = "text"
    blob = "blob"
    timestamp = "timestamp"
    json = "json"
    enum = "enum"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_typename(cls, typename: str) -> "FieldType":
        """Create a FieldType from a type name string.

        Args:
            typename: The type tag string.

        Returns:
            The corresponding FieldType enum member.

        Raises:
            ValueError: If the typename doesn't match any enum member.
        """
        for member in cls:
            if member.value == typename:
                return member
        raise ValueError(f"Unknown type name: {typename}")


class QueryMethod(str, Enum):
    """Execution modes of a query request.

    Values:
        run: Execute for side effects, reply carries changes and last insert row id
        all: Return every row
        values: Return every row as a plain value list
        get: Return at most one row
    """

    run = "run"
    all = "all"
    values = "values"
    get = "get"

    def __str__(self) -> str:
        return self.value
