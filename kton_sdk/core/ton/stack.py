"""Typed records returned by a TVM get-method call."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any


class DecodeError(ValueError):
    """Raised when a stack cannot be decoded into the requested shape."""


@dataclass(frozen=True)
class IntRecord:
    value: int | None = None
    kind: str = field(default="int", init=False)


@dataclass(frozen=True)
class CellRecord:
    data: bytes | None = None
    kind: str = field(default="cell", init=False)

    @property
    def hex(self) -> str | None:
        return self.data.hex() if self.data else None


@dataclass(frozen=True)
class TupleRecord:
    items: tuple[StackRecord, ...] = ()
    kind: str = field(default="tuple", init=False)


StackRecord = IntRecord | CellRecord | TupleRecord


def parse_num(raw: str | int | None) -> int | None:
    """Parse a stack number given either as hex (``0x..``) or decimal text."""
    if raw is None:
        return None
    if isinstance(raw, int):
        return raw
    text = raw.strip()
    negative = text.startswith("-")
    if negative:
        text = text[1:]
    try:
        if text[:2].lower() == "0x":
            value = int(text[2:] or "0", 16)
        else:
            value = int(text, 10)
    except ValueError as exc:
        raise DecodeError(f"Invalid stack number: {raw!r}") from exc
    return -value if negative else value


def parse_stack_record(raw: dict[str, Any]) -> StackRecord:
    kind = raw.get("type")
    if kind == "num":
        return IntRecord(parse_num(raw.get("num")))
    if kind in ("null", "nan"):
        return IntRecord(None)
    if kind in ("cell", "slice"):
        payload = raw.get(kind)
        if not payload:
            return CellRecord(None)
        try:
            return CellRecord(bytes.fromhex(payload))
        except ValueError as exc:
            raise DecodeError(f"Invalid {kind} payload: {payload!r}") from exc
    if kind == "tuple":
        return TupleRecord(tuple(parse_stack_record(r) for r in raw.get("tuple") or []))
    raise DecodeError(f"Unknown stack record type: {kind!r}")


def parse_tvm_stack(raw: Iterable[dict[str, Any]]) -> list[StackRecord]:
    """Convert the JSON stack of a get-method response into typed records."""
    return [parse_stack_record(r) for r in raw]


class StackCursor:
    """Forward-only reader over one level of a stack."""

    def __init__(self, records: Sequence[StackRecord]):
        self._records = records
        self.index = 0

    def __len__(self) -> int:
        return len(self._records)

    def next(self) -> StackRecord | None:
        record = (
            self._records[self.index] if self.index < len(self._records) else None
        )
        self.index += 1
        return record

    def next_required(self, name: str) -> StackRecord:
        if self.index >= len(self._records):
            raise DecodeError(
                f"Stack exhausted reading {name!r} at position {self.index} "
                f"(length {len(self._records)})"
            )
        record = self._records[self.index]
        self.index += 1
        return record
