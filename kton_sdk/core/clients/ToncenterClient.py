from __future__ import annotations

from typing import Any

from kton_sdk.core.clients.TonClient import TonClient
from kton_sdk.core.config import get_jetton_index_url, get_toncenter_base_url


class ToncenterClient(TonClient):
    def __init__(self, *, testnet: bool = False, base_url: str | None = None, **kwargs: Any):
        super().__init__(base_url or get_toncenter_base_url(testnet), **kwargs)

    async def get_jetton_masters(self, address: str) -> dict[str, Any]:
        return await self._get_json("/jetton/masters", params={"address": address})

    async def get_holders_count(self, address: str) -> int | None:
        data = await self.get_jetton_masters(address)
        metadata = data.get("metadata") if isinstance(data, dict) else None
        if isinstance(metadata, dict) and metadata.get("holdersCount"):
            return int(metadata["holdersCount"])
        return None


class JettonIndexClient(TonClient):
    def __init__(self, *, base_url: str | None = None, **kwargs: Any):
        super().__init__(base_url or get_jetton_index_url(), **kwargs)

    async def get_jetton(self, address: str) -> dict[str, Any]:
        return await self._get_json(f"/jettons/{address}")

    async def get_holders_count(self, address: str) -> int | None:
        data = await self.get_jetton(address)
        details = data.get("details") if isinstance(data, dict) else None
        if isinstance(details, dict) and "holdersCount" in details:
            return int(details["holdersCount"])
        return None
