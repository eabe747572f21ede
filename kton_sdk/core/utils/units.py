from __future__ import annotations

from decimal import ROUND_DOWN, Decimal, InvalidOperation

from kton_sdk.core.constants.base import NANO, RATE_SCALE


def _to_decimal(value: str | int | float | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return Decimal(value)
    return Decimal(str(value).strip())


def to_nano(amount: str | int | float | Decimal) -> int:
    try:
        amt = _to_decimal(amount)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid TON amount: {amount}") from exc
    if amt < 0:
        raise ValueError("Amount must be non-negative")
    return int((amt * NANO).to_integral_value(rounding=ROUND_DOWN))


def from_nano(amount: int | str) -> Decimal:
    return Decimal(int(amount)) / NANO


def from_fixed_24(value: int) -> float:
    """Interpret a 2**24 fixed-point rate or fee."""
    return value / RATE_SCALE
