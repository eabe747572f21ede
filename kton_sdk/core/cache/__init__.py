from kton_sdk.core.cache.codec import DEFAULT_CODEC, TypePreservingCodec
from kton_sdk.core.cache.stores import JsonFileStore, KeyValueStore, MemoryStore
from kton_sdk.core.cache.ttl_cache import (
    CacheCorruptionError,
    CacheEntry,
    CacheError,
    CacheMissError,
    TtlCache,
)

__all__ = [
    "CacheCorruptionError",
    "CacheEntry",
    "CacheError",
    "CacheMissError",
    "DEFAULT_CODEC",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "TtlCache",
    "TypePreservingCodec",
]
