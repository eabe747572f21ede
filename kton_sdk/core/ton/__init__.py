"""TVM stack decoding and message building for the staking pool."""

from kton_sdk.core.ton.address import (
    read_address,
    read_address_any,
    to_raw_address,
    to_readable_address,
)
from kton_sdk.core.ton.pool_state import PoolState, RoundState, decode_pool_state
from kton_sdk.core.ton.stack import (
    CellRecord,
    DecodeError,
    IntRecord,
    StackRecord,
    TupleRecord,
    parse_tvm_stack,
)

__all__ = [
    "CellRecord",
    "DecodeError",
    "IntRecord",
    "PoolState",
    "RoundState",
    "StackRecord",
    "TupleRecord",
    "decode_pool_state",
    "parse_tvm_stack",
    "read_address",
    "read_address_any",
    "to_raw_address",
    "to_readable_address",
]
