"""Named, ordered collections of properties.

A `Schema` is built once from a name and a builder function receiving the
field builder. It renders to a canonical text form (used for documentation,
diffing and prompting) and to a JSON document, and can ask the bound host's
predictor for structured output shaped like itself.

Usage:
    from artefact.core import Schema

    users = Schema("users", lambda prop: {
        "id": prop.integer("id").identifier(),
        "name": prop.text("name"),
    })
    print(users)
    users.to_dict()
"""

from __future__ import annotations

import asyncio
import json
import logging
from types import MappingProxyType
from typing import Any, Callable, Mapping

from artefact.core.field import FieldBuilder, field
from artefact.core.host import get_host
from artefact.core.property import Property, default_document, enum_options
from artefact.core.types import FieldType

logger = logging.getLogger(__name__)

SchemaBuilder = Callable[[FieldBuilder], Mapping[str, Property]]


def render_default(value: Any) -> str:
    """Render a default value literal.

    Integers render as bare digits. Every other value renders as JSON, with raw
    SQL expressions replaced by their compiled descriptor.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return json.dumps(default_document(value), separators=(",", ":"))


def render_modifiers(prop: Property) -> str:
    # canonical order, independent of the order the modifiers were applied in
    suffix = ""
    if prop.is_identifier:
        suffix += ".identifier()"
    if prop.is_optional:
        suffix += ".optional()"
    if prop.is_unique:
        suffix += ".unique()"
    if prop.has_default:
        suffix += ".default(%s)" % render_default(prop.default_value)
    return suffix


def render_field(key: str, prop: Property) -> str:
    """Render one field line, without indentation."""
    display_name = prop.name if prop.name is not None else key
    if prop.type == FieldType.enum:
        options = enum_options(prop.config)
        if options is not None:
            values = "\n".join('\t\t\t"%s",' % label for label in options)
            return 'enum("%s",\n    {   options:\n\t\t[\n%s\n\t\t]\n\t}\n   )%s' % (
                display_name, values, render_modifiers(prop))
    return '%s("%s")%s' % (prop.type, display_name, render_modifiers(prop))


class Schema(object):
    """Named, ordered mapping from field key to `Property`.

    Attributes:
        name: Schema name.
        fields: Read-only mapping of field keys to properties, in declaration
            order.
    """

    def __init__(self, name: str, builder: SchemaBuilder):
        self.name = name
        self.fields = MappingProxyType(dict(builder(field)))

    def __repr__(self):
        return "Schema(%r, fields=%r)" % (self.name, list(self.fields))

    def __str__(self):
        lines = ",\n".join("   " + render_field(key, prop) for key, prop in self.fields.items())
        return "Schema: %s\n{\n%s\n}" % (self.name, lines)

    def __iter__(self):
        return iter(self.fields.items())

    def __len__(self):
        return len(self.fields)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "fields": {key: prop.to_dict() for key, prop in self.fields.items()},
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Schema:
        """Create a Schema from its JSON document.

        Functions are not part of the document, so references and derivations
        are not restored.
        """
        fields = {key: Property.from_dict(pdoc) for key, pdoc in d.get("fields", {}).items()}
        return cls(d["name"], lambda _: fields)

    def predict(self, prompt: str, predictor: Callable[[str, str], str] | None = None) -> Any:
        """Ask the predictor for output shaped like this schema.

        The reply is parsed as JSON; a reply that is not JSON is returned as the
        raw text. There is no retry.

        Args:
            prompt: The input prompt.
            predictor: Inference capability; defaults to the bound host's.

        Returns:
            The parsed JSON value, or the raw reply text.
        """
        predictor = predictor or get_host().predictor
        response = predictor(prompt, self.to_json())
        try:
            return json.loads(response)
        except (TypeError, ValueError):
            logger.debug("Prediction for schema '%s' is not JSON, returning raw text" % self.name)
            return response

    async def predict_async(self, prompt: str, predictor: Callable[[str, str], str] | None = None) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.predict, prompt, predictor)
