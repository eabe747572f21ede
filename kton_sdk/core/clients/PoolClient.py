from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from loguru import logger

from kton_sdk.core.cache.ttl_cache import TtlCache
from kton_sdk.core.clients.TonApiClient import TonApiClient
from kton_sdk.core.ton.address import to_readable_address
from kton_sdk.core.ton.pool_state import PoolState, decode_pool_state
from kton_sdk.core.ton.stack import parse_tvm_stack

T = TypeVar("T")

POOL_INFO_KEY = "poolInfo"


class PoolClient:
    """Reads the staking pool contract through tonapi and caches the results."""

    def __init__(
        self,
        staking_contract: str,
        *,
        api: TonApiClient,
        cache: TtlCache,
    ):
        self.staking_contract = to_readable_address(staking_contract)
        self.api = api
        self.cache = cache

    async def cached(
        self,
        key: str,
        producer: Callable[[], Awaitable[T]],
        ttl: int | None = None,
    ) -> T:
        return await self.cache.get(key, producer, ttl)

    async def fetch_pool_state(self) -> PoolState:
        """Run ``get_pool_full_data`` and decode it, bypassing the cache."""
        result = await self.api.exec_get_method(
            self.staking_contract, "get_pool_full_data"
        )
        if not result.get("success", True):
            raise RuntimeError(
                f"get_pool_full_data failed with exit code {result.get('exit_code')}"
            )
        return decode_pool_state(parse_tvm_stack(result.get("stack") or []))

    async def get_pool_state(self, ttl: int | None = None) -> PoolState:
        async def _produce() -> dict[str, Any]:
            state = await self.fetch_pool_state()
            return state.to_dict()

        data = await self.cache.get(POOL_INFO_KEY, _produce, ttl)
        return PoolState.from_dict(data)

    async def get_jetton_wallet_address(self, owner: str) -> str:
        state = await self.get_pool_state()
        if not state.pool_jetton_minter:
            raise ValueError("No jetton minter address found in pool info")

        result = await self.api.exec_get_method(
            state.pool_jetton_minter, "get_wallet_address", [owner]
        )
        decoded = result.get("decoded") or {}
        address = decoded.get("jetton_wallet_address")
        if not address:
            raise ValueError("Invalid response when getting jetton wallet address")
        logger.debug(f"Jetton wallet for {owner}: {address}")
        return to_readable_address(address)
