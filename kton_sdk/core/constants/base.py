DEFAULT_HTTP_TIMEOUT = 30.0  # HTTP client timeout

# Timing (milliseconds unless suffixed)
TRANSACTION_TIMEOUT_MS = 600_000
CACHE_TIMEOUT_MS = 30_000
ESTIMATED_TIME_BW_TX_S = 3
ESTIMATED_TIME_AFTER_ROUND_S = 10 * 60
ROUND_DURATION_S = 65536  # ~18.2h validation round
SECONDS_PER_YEAR = 365 * 24 * 60 * 60

CHAIN_DEV = "-3"

TONAPI_URL = "https://tonapi.io"
TONAPI_URL_TESTNET = "https://testnet.tonapi.io"
TONCENTER_V3_URL = "https://toncenter.com/api/v3"
TONCENTER_V3_URL_TESTNET = "https://testnet.toncenter.com/api/v3"
JETTON_INDEX_URL = "https://jetton-index.tonscan.org/public-dyor"

TOKEN_KTON = "KTON"
TOKEN_PKTON = "pKTON"

STAKING_CONTRACTS = {
    TOKEN_KTON: {
        "mainnet": "EQA9HwEZD_tONfVz6lJS0PVKR5viEiEGyj9AuQewGQVnXPg0",
        "testnet": "kQD2y9eUotYw7VprrD0UJvAigDVXwgCCLWAl-DjaamCHniVr",
    },
    TOKEN_PKTON: {
        "mainnet": "EQDsW2P6nuP1zopKoNiCYj2xhqDan0cBuULQ8MH4o7dBt_7a",
        "testnet": "kQD2y9eUotYw7VprrD0UJvAigDVXwgCCLWAl-DjaamCHniVr",
    },
}

PARTNER_CODE = 0x0000000074746F6E
OP_STAKE = 0x47D54391
OP_UNSTAKE = 0x595F07BC

# Fee reserves in TON
STAKE_FEE_RESERVE = 1
UNSTAKE_FEE_RESERVE = 1.05
RECOMMENDED_FEE_RESERVE = 1.1

RATE_SCALE = 2**24
NANO = 10**9

CACHE_PREFIX = "network-cache-"
# Cache key groups that hold wallet-specific data
USER_CACHE_GROUPS = ("payouts", "stakedBalance", "account")
