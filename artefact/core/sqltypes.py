"""SQLAlchemy column types backing the artefact field types.

Timestamps are stored as integer epoch seconds, JSON documents as text and
enum labels as their integer codes.
"""

from __future__ import annotations

import datetime
import json
from typing import Any

from dateutil import parser
from sqlalchemy import Integer, Text
from sqlalchemy.types import TypeDecorator


class Timestamp(TypeDecorator):
    """Integer-backed timestamp (epoch seconds, UTC)."""
    impl = Integer
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Any) -> int | None:
        if value is None:
            return None
        if isinstance(value, bool):
            raise ValueError(f"Invalid timestamp value: {value!r}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            value = parser.parse(value)
        if isinstance(value, datetime.datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=datetime.timezone.utc)
            return int(value.timestamp())
        raise ValueError(f"Invalid timestamp value: {value!r}")

    def process_result_value(self, value: Any, dialect: Any) -> datetime.datetime | None:
        if value is None:
            return None
        # server defaults such as CURRENT_TIMESTAMP store text
        if isinstance(value, str):
            parsed = parser.parse(value)
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=datetime.timezone.utc)
        return datetime.datetime.fromtimestamp(int(value), tz=datetime.timezone.utc)


class JSONText(TypeDecorator):
    """Text-backed JSON document."""
    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Any) -> str | None:
        if value is None:
            return None
        return json.dumps(value, separators=(",", ":"))

    def process_result_value(self, value: Any, dialect: Any) -> Any:
        if value is None:
            return None
        return json.loads(value)


class EnumCode(TypeDecorator):
    """Integer-backed enumeration.

    Accepts a label or one of the integer codes of the option mapping and
    stores the code; results are returned as labels.
    """
    impl = Integer
    cache_ok = True

    def __init__(self, options: dict[str, int], *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.options = tuple(options.items())

    @property
    def codes(self) -> set[int]:
        return {code for _, code in self.options}

    def process_bind_param(self, value: Any, dialect: Any) -> int | None:
        if value is None:
            return None
        labels = dict(self.options)
        if isinstance(value, str) and value in labels:
            return labels[value]
        if isinstance(value, int) and not isinstance(value, bool) and value in self.codes:
            return value
        raise ValueError(f"Invalid enum value: {value!r}")

    def process_result_value(self, value: Any, dialect: Any) -> str | int | None:
        if value is None:
            return None
        for label, code in self.options:
            if code == value:
                return label
        return value
