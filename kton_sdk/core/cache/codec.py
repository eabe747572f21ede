"""JSON text codec that keeps big integers and datetimes intact.

Integers outside the IEEE-754 safe range are written as ``"<digits>n"``
strings so that other JSON readers (browsers in particular) do not round
them. Datetimes are written as ``{"__type": "Date", "value": <iso>}``.

Known hazard: any plain string consisting entirely of ``-?\\d+n`` with ASCII
digits (for example ``"123n"``) is decoded as an integer. Values containing
such strings do not round-trip.
"""

from __future__ import annotations

import dataclasses
import json
import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any

BIGINT_PATTERN = re.compile(r"-?\d+n", re.ASCII)
MAX_SAFE_INTEGER = 2**53 - 1

TYPE_KEY = "__type"
DATE_TYPE = "Date"
BIGINT_TYPE = "bigint"


class TypePreservingCodec:
    def __init__(
        self,
        *,
        safe_integer_limit: int = MAX_SAFE_INTEGER,
        separators: tuple[str, str] = (",", ":"),
    ):
        self.safe_integer_limit = safe_integer_limit
        self.separators = separators

    def encode(self, value: Any) -> str:
        return json.dumps(
            self.sanitize(value), separators=self.separators, ensure_ascii=False
        )

    def decode(self, text: str | bytes) -> Any:
        return self.restore(json.loads(text))

    def sanitize(self, value: Any) -> Any:
        """Rewrite ``value`` into plain JSON types using the tagged forms."""
        if value is None or isinstance(value, (bool, float, str)):
            return value
        if isinstance(value, int):
            if abs(value) > self.safe_integer_limit:
                return f"{value}n"
            return value
        if isinstance(value, datetime):
            return {TYPE_KEY: DATE_TYPE, "value": value.isoformat()}
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return self.sanitize(dataclasses.asdict(value))
        if isinstance(value, Mapping):
            return {str(k): self.sanitize(v) for k, v in value.items()}
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self.sanitize(v) for v in value]
        raise TypeError(
            f"Object of type {type(value).__name__} is not serializable"
        )

    def restore(self, value: Any) -> Any:
        if isinstance(value, str):
            if BIGINT_PATTERN.fullmatch(value):
                return int(value[:-1])
            return value
        if isinstance(value, list):
            return [self.restore(v) for v in value]
        if isinstance(value, dict):
            tagged = self._restore_tagged(value)
            if tagged is not None:
                return tagged
            return {k: self.restore(v) for k, v in value.items()}
        return value

    @staticmethod
    def _restore_tagged(value: dict[str, Any]) -> int | datetime | None:
        if set(value) != {TYPE_KEY, "value"} or not isinstance(value["value"], str):
            return None
        if value[TYPE_KEY] == DATE_TYPE:
            return datetime.fromisoformat(value["value"])
        # Older entries stored big integers as tagged records.
        if value[TYPE_KEY] == BIGINT_TYPE:
            return int(value["value"])
        return None


DEFAULT_CODEC = TypePreservingCodec()
