__version__ = "0.1.0"

from kton_sdk.core import (
    BaseAdapter,
    DecodeError,
    PoolState,
    RoundState,
    TtlCache,
    TypePreservingCodec,
    decode_pool_state,
)

__all__ = [
    "__version__",
    "BaseAdapter",
    "DecodeError",
    "PoolState",
    "RoundState",
    "TtlCache",
    "TypePreservingCodec",
    "decode_pool_state",
]
