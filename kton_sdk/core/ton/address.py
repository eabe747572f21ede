from __future__ import annotations

from loguru import logger
from pytoniq_core import Address, Cell, Slice

from kton_sdk.core.ton.stack import DecodeError

# MsgAddress tag (2 bits)
ADDR_NONE = 0b00
ADDR_EXTERN = 0b01
ADDR_STD = 0b10


def format_address(address: Address, *, bounceable: bool = True) -> str:
    return address.to_str(
        is_user_friendly=True,
        is_url_safe=True,
        is_bounceable=bounceable,
        is_test_only=False,
    )


def to_readable_address(address: str, bounceable: bool = True) -> str:
    """Normalise raw or friendly form to url-safe friendly form.

    Unparseable input is returned unchanged.
    """
    try:
        return format_address(Address(address), bounceable=bounceable)
    except Exception:
        logger.error(f"Invalid address format: {address}")
        return address


def to_raw_address(address: str) -> str:
    return Address(address).to_str(is_user_friendly=False)


def _begin_parse(data: bytes) -> Slice:
    try:
        return Cell.one_from_boc(data).begin_parse()
    except Exception as exc:
        raise DecodeError(f"Invalid cell BOC: {data.hex()[:32]}...") from exc


def read_address(data: bytes) -> str | None:
    """Read a standard address prefix from a serialized cell."""
    cs = _begin_parse(data)
    try:
        address = cs.load_address()
    except Exception as exc:
        raise DecodeError("Cell does not start with a valid address") from exc
    return format_address(address) if address is not None else None


def read_address_any(data: bytes) -> str | None:
    """Like :func:`read_address` but also accepts external addresses.

    ``addr_none`` resolves to ``None``.
    """
    cs = _begin_parse(data)
    try:
        tag = cs.preload_uint(2)
        if tag == ADDR_NONE:
            return None
        if tag == ADDR_EXTERN:
            cs.load_uint(2)
            bits = cs.load_uint(9)
            value = cs.load_uint(bits) if bits else 0
            return f"External<{bits}:{value}>"
        address = cs.load_address()
    except Exception as exc:
        raise DecodeError("Cell does not start with a valid address") from exc
    return format_address(address) if address is not None else None
