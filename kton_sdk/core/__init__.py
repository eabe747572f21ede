from kton_sdk.core.adapters.BaseAdapter import BaseAdapter
from kton_sdk.core.cache import TtlCache, TypePreservingCodec
from kton_sdk.core.ton import DecodeError, PoolState, RoundState, decode_pool_state

__all__ = [
    "BaseAdapter",
    "DecodeError",
    "PoolState",
    "RoundState",
    "TtlCache",
    "TypePreservingCodec",
    "decode_pool_state",
]
