from __future__ import annotations

from typing import Any, NotRequired, Required, TypedDict
from urllib.parse import quote

from kton_sdk.core.clients.TonClient import TonClient
from kton_sdk.core.config import get_api_base_url, get_tonapi_key


class TvmStackRecordJson(TypedDict):
    type: Required[str]
    num: NotRequired[str]
    cell: NotRequired[str]
    slice: NotRequired[str]
    tuple: NotRequired[list[TvmStackRecordJson]]


class MethodExecutionResult(TypedDict):
    success: Required[bool]
    exit_code: Required[int]
    stack: Required[list[TvmStackRecordJson]]
    decoded: NotRequired[dict[str, Any]]


class ApyHistoryPoint(TypedDict):
    apy: float
    time: int


class TonApiClient(TonClient):
    """Thin client over the tonapi.io v2 REST API."""

    def __init__(
        self,
        *,
        testnet: bool = False,
        base_url: str | None = None,
        api_key: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(
            base_url or get_api_base_url(testnet),
            api_key=api_key if api_key is not None else get_tonapi_key(),
            **kwargs,
        )
        self.testnet = testnet

    async def exec_get_method(
        self, account: str, method: str, args: list[str] | None = None
    ) -> MethodExecutionResult:
        path = f"/v2/blockchain/accounts/{quote(account)}/methods/{quote(method)}"
        params = [("args", a) for a in args or []]
        return await self._get_json(path, params=params)

    async def get_account(self, account: str) -> dict[str, Any]:
        return await self._get_json(f"/v2/accounts/{quote(account)}")

    async def get_staking_pool_history(self, account: str) -> dict[str, Any]:
        return await self._get_json(f"/v2/staking/pool/{quote(account)}/history")

    async def get_jetton_info(self, jetton: str) -> dict[str, Any]:
        return await self._get_json(f"/v2/jettons/{quote(jetton)}")

    async def get_rates(
        self, tokens: list[str], currencies: list[str]
    ) -> dict[str, Any]:
        params = {"tokens": ",".join(tokens), "currencies": ",".join(currencies)}
        return await self._get_json("/v2/rates", params=params)

    async def get_collection_items(
        self, collection: str, *, limit: int = 1000, offset: int = 0
    ) -> dict[str, Any]:
        params = {"limit": limit, "offset": offset}
        return await self._get_json(
            f"/v2/nfts/collections/{quote(collection)}/items", params=params
        )
