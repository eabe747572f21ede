from kton_sdk.core.clients.PoolClient import PoolClient
from kton_sdk.core.clients.protocols import (
    SendTransactionResponse,
    TransactionDetails,
    TransactionMessage,
    WalletAccount,
    WalletConnector,
)
from kton_sdk.core.clients.TonApiClient import TonApiClient
from kton_sdk.core.clients.TonClient import TonClient
from kton_sdk.core.clients.ToncenterClient import JettonIndexClient, ToncenterClient

__all__ = [
    "JettonIndexClient",
    "PoolClient",
    "SendTransactionResponse",
    "TonApiClient",
    "TonClient",
    "ToncenterClient",
    "TransactionDetails",
    "TransactionMessage",
    "WalletAccount",
    "WalletConnector",
]
