"""Field builder: one constructor per supported type tag."""

from __future__ import annotations

from typing import Any

from artefact.core.property import Property
from artefact.core.types import FieldType


class FieldBuilder(object):
    """Factory producing a fresh `Property` per call.

    Each constructor takes the column name and an optional type specific
    configuration, and returns a Property with every modifier flag at its
    default. The builder performs no validation.

    Example:
        >>> from artefact.core.field import field
        >>> field.integer("id").identifier()
        >>> field.enum("status", {"options": ["pending", "active"]})
    """

    @staticmethod
    def make(ftype: FieldType | str, name: str, config: Any = None) -> Property:
        return Property(ftype).set_metadata(name, config)

    def integer(self, name: str, config: Any = None) -> Property:
        return self.make(FieldType.integer, name, config)

    def real(self, name: str, config: Any = None) -> Property:
        return self.make(FieldType.real, name, config)

    def text(self, name: str, config: Any = None) -> Property:
        return self.make(FieldType.text, name, config)

    def blob(self, name: str, config: Any = None) -> Property:
        return self.make(FieldType.blob, name, config)

    def timestamp(self, name: str, config: Any = None) -> Property:
        return self.make(FieldType.timestamp, name, config)

    def json(self, name: str, config: Any = None) -> Property:
        return self.make(FieldType.json, name, config)

    def enum(self, name: str, config: Any = None) -> Property:
        return self.make(FieldType.enum, name, config)


field = FieldBuilder()
