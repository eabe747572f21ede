from __future__ import annotations

from typing import Protocol, TypedDict, runtime_checkable


class WalletAccount(TypedDict):
    address: str
    chain: str


class TransactionMessage(TypedDict):
    address: str
    amount: str
    payload: str


class TransactionDetails(TypedDict):
    validUntil: int
    messages: list[TransactionMessage]


class SendTransactionResponse(TypedDict):
    boc: str


@runtime_checkable
class WalletConnector(Protocol):
    """Signs and submits transactions on behalf of the connected wallet."""

    @property
    def account(self) -> WalletAccount | None: ...

    async def send_transaction(
        self, details: TransactionDetails
    ) -> SendTransactionResponse: ...
