from __future__ import annotations

import re
import time
from decimal import Decimal
from typing import Any

import httpx

from kton_sdk.core.adapters.BaseAdapter import BaseAdapter
from kton_sdk.core.adapters.decorators import require_wallet, status_tuple
from kton_sdk.core.cache.stores import JsonFileStore, MemoryStore
from kton_sdk.core.cache.ttl_cache import TtlCache
from kton_sdk.core.clients.PoolClient import PoolClient
from kton_sdk.core.clients.protocols import (
    SendTransactionResponse,
    TransactionDetails,
    WalletConnector,
)
from kton_sdk.core.clients.TonApiClient import TonApiClient
from kton_sdk.core.clients.ToncenterClient import JettonIndexClient, ToncenterClient
from kton_sdk.core.config import (
    get_cache_dedupe,
    get_cache_path,
    get_cache_prefix,
    get_cache_ttl_ms,
    get_partner_code,
    get_staking_contract,
    get_token_type,
    is_testnet,
)
from kton_sdk.core.constants.base import (
    CHAIN_DEV,
    ESTIMATED_TIME_AFTER_ROUND_S,
    ESTIMATED_TIME_BW_TX_S,
    RECOMMENDED_FEE_RESERVE,
    ROUND_DURATION_S,
    STAKE_FEE_RESERVE,
    STAKING_CONTRACTS,
    TRANSACTION_TIMEOUT_MS,
    UNSTAKE_FEE_RESERVE,
    USER_CACHE_GROUPS,
)
from kton_sdk.core.ton.address import to_raw_address, to_readable_address
from kton_sdk.core.ton.payloads import build_stake_payload, build_unstake_payload
from kton_sdk.core.ton.pool_state import PoolState
from kton_sdk.core.utils.interest import (
    current_apy,
    exchange_rate,
    instant_liquidity,
    tvl,
)
from kton_sdk.core.utils.units import from_nano, to_nano

_AMOUNT_RE = re.compile(r"[\d.]+")


class KtonAdapter(BaseAdapter):
    adapter_type: str = "KTON"

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        *,
        connector: WalletConnector | None = None,
        wallet_address: str | None = None,
        cache: TtlCache | None = None,
        api: TonApiClient | None = None,
        toncenter: ToncenterClient | None = None,
        jetton_index: JettonIndexClient | None = None,
    ):
        super().__init__("kton_adapter", config)
        self.testnet = bool(self.config.get("testnet", is_testnet()))
        self.token_type = self.config.get("token_type") or get_token_type()
        partner_code = self.config.get("partner_code")
        if isinstance(partner_code, str):
            partner_code = int(partner_code, 0)
        self.partner_code = partner_code or get_partner_code()
        self.connector = connector
        self.cache = cache or self._build_cache()

        self._api_injected = api is not None
        self._toncenter_injected = toncenter is not None
        self.api = api
        self.toncenter = toncenter
        self.jetton_index = jetton_index or self._own(JettonIndexClient())
        self._build_network_clients()

        self.wallet_address: str | None = None
        self.jetton_wallet_address: str | None = None
        account = connector.account if connector is not None else None
        if wallet_address:
            self.set_wallet(wallet_address)
        elif account and account.get("address"):
            self.set_wallet(account["address"], chain=account.get("chain"))

    def _build_cache(self) -> TtlCache:
        path = self.config.get("cache_path") or get_cache_path()
        return TtlCache(
            int(self.config.get("cache_ttl_ms", get_cache_ttl_ms())),
            get_cache_prefix(),
            store=JsonFileStore(path) if path else MemoryStore(),
            dedupe_inflight=get_cache_dedupe(),
        )

    def _build_network_clients(self) -> None:
        if not self._api_injected:
            self.api = self._own(TonApiClient(testnet=self.testnet))
        if not self._toncenter_injected:
            self.toncenter = self._own(ToncenterClient(testnet=self.testnet))
        self.pool = PoolClient(
            get_staking_contract(self.token_type, self.testnet),
            api=self.api,
            cache=self.cache,
        )

    @property
    def staking_contract(self) -> str:
        return self.pool.staking_contract

    def set_wallet(self, address: str, *, chain: str | None = None) -> None:
        """Point the adapter at a wallet, following the wallet's network."""
        if chain is not None:
            wallet_testnet = chain == CHAIN_DEV
            if wallet_testnet != self.testnet:
                self.logger.info(
                    f"Network mismatch: adapter on {'testnet' if self.testnet else 'mainnet'}, "
                    f"wallet on {'testnet' if wallet_testnet else 'mainnet'}. Switching."
                )
                self.testnet = wallet_testnet
                self._build_network_clients()
        self.wallet_address = to_readable_address(address)
        self.jetton_wallet_address = None

    def disconnect_wallet(self) -> None:
        self.wallet_address = None
        self.jetton_wallet_address = None

    async def switch_token_type(self, token_type: str) -> None:
        if token_type not in STAKING_CONTRACTS:
            raise ValueError(f"Unknown token type: {token_type}")
        if token_type == self.token_type:
            return
        self.token_type = token_type
        self.jetton_wallet_address = None
        self.cache.clear()
        self._build_network_clients()
        self.logger.info(f"Switched token type to {token_type}")

    async def _jetton_wallet(self) -> str | None:
        if self.jetton_wallet_address is None and self.wallet_address:
            try:
                self.jetton_wallet_address = await self.pool.get_jetton_wallet_address(
                    self.wallet_address
                )
            except Exception as exc:
                self.logger.warning(
                    f"Could not get jetton wallet address (user may not have staked yet): {exc}"
                )
        return self.jetton_wallet_address

    @status_tuple
    async def get_pool_state(self, ttl: int | None = None) -> PoolState:
        return await self.pool.get_pool_state(ttl)

    @status_tuple
    async def get_current_apy(self, ttl: int | None = None) -> float:
        return current_apy(await self.pool.get_pool_state(ttl))

    @status_tuple
    async def get_historical_apy(self, ttl: int | None = None) -> list[dict[str, Any]]:
        history = await self.cache.get(
            "stakingHistory",
            lambda: self.api.get_staking_pool_history(self.staking_contract),
            ttl,
        )
        return history.get("apy", [])

    @status_tuple
    async def get_tvl(self, ttl: int | None = None) -> int:
        return tvl(await self.pool.get_pool_state(ttl))

    @status_tuple
    async def get_instant_liquidity(self, ttl: int | None = None) -> int:
        return instant_liquidity(await self.pool.get_pool_state(ttl))

    @status_tuple
    async def get_holders_count(self, ttl: int | None = None) -> int:
        state = await self.pool.get_pool_state(ttl)
        jetton = state.pool_jetton_minter
        if not jetton:
            raise ValueError("No jetton minter address found in pool info")

        try:
            count = await self.cache.get(
                f"jettonInfo-{jetton}",
                lambda: self.toncenter.get_holders_count(jetton),
                ttl,
            )
            if count:
                return count
            count = await self.jetton_index.get_holders_count(jetton)
            if count:
                return count
        except Exception as exc:
            self.logger.warning(f"Indexer lookup failed, falling back to tonapi: {exc}")

        try:
            info = await self.api.get_jetton_info(jetton)
            return int(info.get("holders_count", 0))
        except httpx.HTTPError:
            if self.testnet:
                self.logger.warning("Jetton not found on testnet, returning 0 holders")
                return 0
            raise

    async def _ton_price(self, ttl: int | None = None) -> float:
        try:
            response = await self.cache.get(
                "tonPrice", lambda: self.api.get_rates(["ton"], ["usd"]), ttl
            )
            return float(response["rates"]["TON"]["prices"]["USD"] or 0)
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as exc:
            self.logger.warning(f"TON price unavailable: {exc}")
            return 0.0

    @status_tuple
    async def get_rates(self, ttl: int | None = None) -> dict[str, float]:
        state = await self.pool.get_pool_state(ttl)
        return {
            "TONUSD": await self._ton_price(ttl),
            "KTONTON": exchange_rate(state.total_balance, state.supply),
            "KTONTONProjected": exchange_rate(
                state.projected_total_balance, state.projected_pool_supply
            ),
        }

    async def _payouts(self) -> dict[str, str]:
        state = await self.pool.get_pool_state()
        return {
            "deposit_payout": state.deposit_payout or "",
            "deposit_amount": str(state.requested_for_deposit),
            "withdrawal_payout": state.withdrawal_payout or "",
            "withdrawal_amount": str(state.requested_for_withdrawal),
            # Estimated: one validation round from now.
            "cycle_end": str(int(time.time()) + ROUND_DURATION_S),
        }

    @status_tuple
    async def get_payouts(self, ttl: int | None = None) -> dict[str, str]:
        return await self.cache.get("payouts", self._payouts, ttl)

    @status_tuple
    async def get_round_timestamps(self) -> dict[str, int]:
        round_end = int(time.time()) + ROUND_DURATION_S
        return {"round_start": round_end - ROUND_DURATION_S, "round_end": round_end}

    @require_wallet
    @status_tuple
    async def get_balance(self, ttl: int | None = None) -> int:
        return await self._balance(ttl)

    async def _balance(self, ttl: int | None = None) -> int:
        wallet = self.wallet_address
        account = await self.cache.get(
            f"account-{wallet}", lambda: self.api.get_account(wallet), ttl
        )
        return max(int(account.get("balance", 0)), 0)

    async def _available_balance(self, ttl: int | None = None) -> int:
        balance = await self._balance(ttl)
        return max(balance - to_nano(RECOMMENDED_FEE_RESERVE), 0)

    @require_wallet
    @status_tuple
    async def get_available_balance(self, ttl: int | None = None) -> int:
        return await self._available_balance(ttl)

    @require_wallet
    @status_tuple
    async def get_staked_balance(self, ttl: int | None = None) -> int:
        jetton_wallet = await self._jetton_wallet()
        if not jetton_wallet:
            return 0
        try:
            data = await self.cache.get(
                f"stakedBalance-{jetton_wallet}",
                lambda: self.api.exec_get_method(jetton_wallet, "get_wallet_data"),
                ttl,
            )
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                self.logger.debug("Jetton wallet not deployed yet, returning 0")
                return 0
            raise
        return int((data.get("decoded") or {}).get("balance", 0))

    async def _owned_payout_nfts(
        self, collection: str, round_end_s: int
    ) -> list[dict[str, Any]]:
        owner = to_raw_address(self.wallet_address)
        response = await self.api.get_collection_items(collection)
        items: list[dict[str, Any]] = []
        for position, item in enumerate(response.get("nft_items", [])):
            if (item.get("owner") or {}).get("address") != owner:
                continue
            name = (item.get("metadata") or {}).get("name") or ""
            match = _AMOUNT_RE.search(name)
            items.append(
                {
                    **item,
                    "estimated_payout_time": round_end_s
                    + position * ESTIMATED_TIME_BW_TX_S
                    + ESTIMATED_TIME_AFTER_ROUND_S,
                    "round_end_time": round_end_s,
                    "kton_amount": float(match.group()) if match else 0.0,
                }
            )
        return items

    @require_wallet
    @status_tuple
    async def get_active_withdrawal_nfts(
        self, ttl: int | None = None
    ) -> list[dict[str, Any]]:
        payouts = await self.cache.get("payouts", self._payouts, ttl)
        round_end_s = int(payouts["cycle_end"])
        nfts: list[dict[str, Any]] = []
        for key in ("deposit_payout", "withdrawal_payout"):
            collection = payouts.get(key)
            if not collection:
                continue
            nfts.extend(
                await self.cache.get(
                    f"payouts-{collection}",
                    lambda c=collection: self._owned_payout_nfts(c, round_end_s),
                    ttl,
                )
            )
        return nfts

    async def _send_transaction(
        self, address: str, amount_nano: int, payload: str
    ) -> SendTransactionResponse:
        if self.connector is None:
            raise RuntimeError("No wallet connector configured.")
        details: TransactionDetails = {
            "validUntil": int(time.time()) + TRANSACTION_TIMEOUT_MS // 1000,
            "messages": [
                {"address": address, "amount": str(amount_nano), "payload": payload}
            ],
        }
        return await self.connector.send_transaction(details)

    @staticmethod
    def _validate_amount(amount: int | float | Decimal) -> Decimal:
        if isinstance(amount, bool) or not isinstance(amount, int | float | Decimal):
            raise ValueError("Invalid amount specified")
        value = Decimal(str(amount))
        if value <= 0:
            raise ValueError("Invalid amount specified")
        return value

    async def _stake(self, amount: int | float | Decimal) -> SendTransactionResponse:
        value = self._validate_amount(amount)
        result = await self._send_transaction(
            self.staking_contract,
            to_nano(value + STAKE_FEE_RESERVE),
            build_stake_payload(self.partner_code),
        )
        self.logger.info(f"Staked {value} TON")
        return result

    @require_wallet
    @status_tuple
    async def stake(self, amount: int | float | Decimal) -> SendTransactionResponse:
        return await self._stake(amount)

    @require_wallet
    @status_tuple
    async def stake_max(self) -> SendTransactionResponse:
        available = from_nano(await self._available_balance())
        result = await self._stake(available)
        self.logger.info(f"Staked maximum amount of {available} TON")
        return result

    async def _unstake(
        self,
        amount: int | float | Decimal,
        *,
        wait_till_round_end: bool = False,
        fill_or_kill: bool = False,
    ) -> SendTransactionResponse:
        jetton_wallet = await self._jetton_wallet()
        if not jetton_wallet:
            raise RuntimeError("Jetton wallet address is not set.")
        value = self._validate_amount(amount)
        payload = build_unstake_payload(
            to_nano(value),
            self.wallet_address,
            wait_till_round_end=wait_till_round_end,
            fill_or_kill=fill_or_kill,
        )
        return await self._send_transaction(
            jetton_wallet, to_nano(UNSTAKE_FEE_RESERVE), payload
        )

    @require_wallet
    @status_tuple
    async def unstake(self, amount: int | float | Decimal) -> SendTransactionResponse:
        result = await self._unstake(amount)
        self.logger.info(f"Initiated unstaking of {amount} {self.token_type}")
        return result

    @require_wallet
    @status_tuple
    async def unstake_instant(
        self, amount: int | float | Decimal
    ) -> SendTransactionResponse:
        result = await self._unstake(amount, fill_or_kill=True)
        self.logger.info(f"Initiated instant unstaking of {amount} {self.token_type}")
        return result

    @require_wallet
    @status_tuple
    async def unstake_best_rate(
        self, amount: int | float | Decimal
    ) -> SendTransactionResponse:
        result = await self._unstake(amount, wait_till_round_end=True)
        self.logger.info(
            f"Initiated unstaking of {amount} {self.token_type} at the best rate"
        )
        return result

    def clear_storage_data(self) -> int:
        return self.cache.clear()

    def clear_storage_user_data(self) -> int:
        return self.cache.clear(self.cache.full_key(g) for g in USER_CACHE_GROUPS)
