from __future__ import annotations

from abc import ABC
from typing import Any, Protocol, TypeVar

from loguru import logger


class Closeable(Protocol):
    async def close(self) -> None: ...


C = TypeVar("C", bound=Closeable)


class BaseAdapter(ABC):
    """Common state for adapters: a name, a config dict and a bound logger.

    Clients created by the adapter itself are registered with :meth:`_own`
    and closed by :meth:`close`. Injected clients belong to the caller.
    """

    adapter_type: str | None = None

    def __init__(self, name: str, config: dict[str, Any] | None = None):
        self.name = name
        self.config = dict(config or {})
        self.logger = logger.bind(adapter=type(self).__name__)
        self._owned: list[Closeable] = []

    def _own(self, resource: C) -> C:
        self._owned.append(resource)
        return resource

    async def close(self) -> None:
        owned, self._owned = self._owned, []
        for resource in owned:
            await resource.close()
