from __future__ import annotations

import asyncio
import inspect
import json
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeVar

from loguru import logger

from kton_sdk.core.cache.codec import DEFAULT_CODEC, TypePreservingCodec
from kton_sdk.core.cache.stores import KeyValueStore, MemoryStore
from kton_sdk.core.constants.base import CACHE_PREFIX, CACHE_TIMEOUT_MS


T = TypeVar("T")


class CacheError(Exception):
    pass


class CacheMissError(CacheError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Data not found: {key}")


class CacheCorruptionError(CacheError):
    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Invalid cached data: {key}")


@dataclass(frozen=True)
class CacheEntry:
    ts: int
    ttl: int
    data: str

    def to_json(self) -> str:
        return json.dumps(
            {"ts": self.ts, "ttl": self.ttl, "data": self.data}, separators=(",", ":")
        )

    @classmethod
    def from_json(cls, text: str) -> CacheEntry:
        raw = json.loads(text)
        if not isinstance(raw, dict):
            raise ValueError("cache entry is not an object")
        ts, ttl, data = raw.get("ts"), raw.get("ttl"), raw.get("data")
        if not isinstance(ts, int | float) or not isinstance(ttl, int | float):
            raise ValueError("cache entry is missing ts/ttl")
        if not isinstance(data, str):
            raise ValueError("cache entry is missing data")
        return cls(ts=int(ts), ttl=int(ttl), data=data)


async def _resolve(value: T | Awaitable[T]) -> T:
    if inspect.isawaitable(value):
        return await value
    return value


class TtlCache:
    """Read-through cache with per-entry time-to-live.

    Entries are stored as text under ``prefix + key`` in ``store``. All TTLs
    and timestamps are milliseconds.

    With ``dedupe_inflight`` (the default) concurrent ``get`` calls for the
    same key share a single producer call, run in a task owned by the cache.
    A cancelled caller stops waiting but the producer keeps running for the
    others. With it disabled every caller runs its own producer and the last
    write wins.
    """

    def __init__(
        self,
        default_ttl: int = CACHE_TIMEOUT_MS,
        prefix: str = CACHE_PREFIX,
        *,
        store: KeyValueStore | None = None,
        codec: TypePreservingCodec | None = None,
        clock: Callable[[], float] = time.time,
        dedupe_inflight: bool = True,
    ):
        self.default_ttl = default_ttl
        self.prefix = prefix
        self.store = store if store is not None else MemoryStore()
        self.codec = codec or DEFAULT_CODEC
        self.dedupe_inflight = dedupe_inflight
        self._clock = clock
        self._inflight: dict[str, asyncio.Future[Any]] = {}

    @property
    def time(self) -> int:
        return round(self._clock() * 1000)

    def full_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get(
        self,
        key: str,
        producer: Callable[[], T | Awaitable[T]],
        ttl: int | None = None,
    ) -> T:
        full_key = self.full_key(key)
        if not self.needs_update(full_key):
            try:
                return self._retrieve(full_key)
            except CacheError as exc:
                logger.error(f"Discarding cached data for {full_key}: {exc}")

        if not self.dedupe_inflight:
            return await self._produce(full_key, producer, ttl)

        task = self._inflight.get(full_key)
        if task is None:
            task = asyncio.ensure_future(self._produce(full_key, producer, ttl))
            self._inflight[full_key] = task
            task.add_done_callback(lambda done: self._settle(full_key, done))
        # Cancelling one caller must not cancel the shared producer.
        return await asyncio.shield(task)

    async def _produce(
        self,
        full_key: str,
        producer: Callable[[], T | Awaitable[T]],
        ttl: int | None,
    ) -> T:
        return await self._save(full_key, await _resolve(producer()), ttl)

    def _settle(self, full_key: str, task: asyncio.Future[Any]) -> None:
        if self._inflight.get(full_key) is task:
            del self._inflight[full_key]
        if not task.cancelled():
            task.exception()  # retrieved even when every caller went away

    def needs_update(self, full_key: str, force: bool = False) -> bool:
        """Whether the entry stored at ``full_key`` (prefix included) is stale."""
        if force:
            return True
        entry = self._entry(full_key)
        if entry is None:
            return True
        return self.time - entry.ts >= entry.ttl

    def retrieve(self, key: str) -> Any:
        """Return the stored value for ``key`` regardless of freshness.

        Raises:
            CacheMissError: no entry is stored.
            CacheCorruptionError: the entry cannot be decoded.
        """
        return self._retrieve(self.full_key(key))

    async def save(self, key: str, data: T | Awaitable[T], ttl: int | None = None) -> T:
        return await self._save(self.full_key(key), data, ttl)

    def pop(self, key: str) -> Any:
        """Remove ``key`` and return its value, raising on a corrupt entry."""
        full_key = self.full_key(key)
        raw = self.store.read(full_key)
        self.store.delete(full_key)
        if raw is None:
            return None
        return self._decode(full_key, raw)

    @property
    def size(self) -> int:
        return len(self.store.keys(self.prefix))

    def cleanup(self) -> int:
        removed = 0
        for full_key in self.store.keys(self.prefix):
            if self._entry(full_key) is not None and self.needs_update(full_key):
                self.store.delete(full_key)
                removed += 1
        if removed:
            logger.debug(f"Evicted {removed} expired entries under {self.prefix!r}")
        return removed

    def clear(self, key_groups: Iterable[str] | None = None) -> int:
        """Evict entries under the prefix.

        With ``key_groups`` only keys whose first three ``-``-separated
        segments equal one of the groups are evicted.
        """
        groups = None if key_groups is None else set(key_groups)
        removed = 0
        for full_key in self.store.keys(self.prefix):
            if groups is not None and "-".join(full_key.split("-")[:3]) not in groups:
                continue
            self.store.delete(full_key)
            removed += 1
        return removed

    async def _save(self, full_key: str, data: T | Awaitable[T], ttl: int | None) -> T:
        value = await _resolve(data)
        if value is None:
            logger.warning(f"Skipping cache save for {full_key}: data is None")
            return value
        try:
            entry = CacheEntry(
                ts=self.time,
                ttl=self.default_ttl if ttl is None else ttl,
                data=self.codec.encode(value),
            )
            self.store.write(full_key, entry.to_json())
        except Exception as exc:
            logger.error(f"Failed to save data for {full_key}: {exc}")
        return value

    def _entry(self, full_key: str) -> CacheEntry | None:
        raw = self.store.read(full_key)
        if raw is None:
            return None
        try:
            return CacheEntry.from_json(raw)
        except ValueError as exc:
            logger.error(f"Failed to parse data for key {full_key}: {exc}")
            return None

    def _retrieve(self, full_key: str) -> Any:
        raw = self.store.read(full_key)
        if raw is None:
            raise CacheMissError(full_key)
        return self._decode(full_key, raw)

    def _decode(self, full_key: str, raw: str) -> Any:
        try:
            return self.codec.decode(CacheEntry.from_json(raw).data)
        except ValueError as exc:
            logger.error(f"Failed to parse cached data for key {full_key}: {exc}")
            raise CacheCorruptionError(full_key) from exc
