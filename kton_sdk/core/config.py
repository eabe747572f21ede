"""Process-wide settings read from ``config.json``.

The file is looked up in this order: an explicit path, ``KTON_CONFIG_PATH`` /
``KTON_CONFIG``, then ``config.json`` in the project root (the nearest
directory holding a ``pyproject.toml``). Relative paths from the environment
are anchored at the project root.
"""

import json
import os
from pathlib import Path
from typing import Any

from loguru import logger

from kton_sdk.core.constants.base import (
    CACHE_PREFIX,
    CACHE_TIMEOUT_MS,
    JETTON_INDEX_URL,
    PARTNER_CODE,
    STAKING_CONTRACTS,
    TOKEN_KTON,
    TONAPI_URL,
    TONAPI_URL_TESTNET,
    TONCENTER_V3_URL,
    TONCENTER_V3_URL_TESTNET,
)

ENV_CONFIG_KEYS = ("KTON_CONFIG_PATH", "KTON_CONFIG")
CONFIG_FILENAME = "config.json"


def find_project_root(*starts: Path) -> Path | None:
    for start in starts:
        here = start.resolve()
        for candidate in (here, *here.parents):
            if (candidate / "pyproject.toml").is_file():
                return candidate
    return None


def _env_config_path() -> str | None:
    for key in ENV_CONFIG_KEYS:
        value = os.getenv(key, "").strip()
        if value:
            return value
    return None


def resolve_config_path(path: str | Path | None = None) -> Path:
    if path is not None:
        return Path(path).expanduser()
    candidate = Path(_env_config_path() or CONFIG_FILENAME).expanduser()
    if candidate.is_absolute():
        return candidate
    root = find_project_root(Path.cwd(), Path(__file__).parent)
    return root / candidate if root else candidate


def load_config_json(
    path: str | Path | None = None, *, require_exists: bool = False
) -> dict[str, Any]:
    """Read the config file; a missing or malformed file reads as ``{}``."""
    cfg_path = resolve_config_path(path)
    try:
        text = cfg_path.read_text()
    except FileNotFoundError:
        if require_exists:
            raise FileNotFoundError(f"Config file not found: {cfg_path}") from None
        return {}
    try:
        data = json.loads(text)
    except ValueError as exc:
        logger.warning(f"Ignoring malformed config file {cfg_path}: {exc}")
        return {}
    return data if isinstance(data, dict) else {}


def write_config_json(path: str | Path | None, config: dict[str, Any]) -> Path:
    target = resolve_config_path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(f"{json.dumps(config, indent=2)}\n")
    return target


CONFIG: dict[str, Any] = load_config_json()


def set_config(config: dict[str, Any]) -> None:
    # Mutate in place; modules hold a reference to CONFIG.
    CONFIG.clear()
    CONFIG.update(config)


def load_config(
    path: str | Path | None = None, *, require_exists: bool = False
) -> None:
    set_config(load_config_json(path, require_exists=require_exists))


def _section(name: str) -> dict[str, Any]:
    value = CONFIG.get(name)
    return value if isinstance(value, dict) else {}


def get_tonapi_key() -> str | None:
    api_key = _section("system").get("tonapi_key")
    if api_key:
        return str(api_key).strip()
    return os.environ.get("TONAPI_KEY")


def is_testnet() -> bool:
    return bool(_section("system").get("testnet", False))


def get_api_base_url(testnet: bool | None = None) -> str:
    api_url = _section("system").get("api_base_url")
    if api_url:
        return str(api_url).strip()
    testnet = is_testnet() if testnet is None else testnet
    return TONAPI_URL_TESTNET if testnet else TONAPI_URL


def get_toncenter_base_url(testnet: bool | None = None) -> str:
    testnet = is_testnet() if testnet is None else testnet
    return TONCENTER_V3_URL_TESTNET if testnet else TONCENTER_V3_URL


def get_jetton_index_url() -> str:
    return str(_section("system").get("jetton_index_url") or JETTON_INDEX_URL)


def get_cache_ttl_ms() -> int:
    return int(_section("cache").get("ttl_ms", CACHE_TIMEOUT_MS))


def get_cache_prefix() -> str:
    prefix = str(_section("cache").get("prefix") or CACHE_PREFIX)
    # Cache groups match the first three '-' segments of a key.
    if prefix.count("-") != 2 or not prefix.endswith("-"):
        raise ValueError(
            f"cache.prefix must look like 'name-part-' (two hyphens, trailing hyphen), got {prefix!r}"
        )
    return prefix


def get_cache_path() -> Path | None:
    path = _section("cache").get("path")
    return Path(path).expanduser() if path else None


def get_cache_dedupe() -> bool:
    return bool(_section("cache").get("dedupe_inflight", True))


def get_partner_code() -> int:
    value = _section("kton").get("partner_code", PARTNER_CODE)
    return int(value, 0) if isinstance(value, str) else int(value)


def get_token_type() -> str:
    token_type = _section("kton").get("token_type") or TOKEN_KTON
    if token_type not in STAKING_CONTRACTS:
        raise ValueError(f"Unknown token type: {token_type}")
    return token_type


def get_staking_contract(token_type: str, testnet: bool) -> str:
    override = _section("kton").get("staking_contract")
    if override:
        return str(override)
    try:
        contracts = STAKING_CONTRACTS[token_type]
    except KeyError:
        raise ValueError(f"Unknown token type: {token_type}") from None
    return contracts["testnet" if testnet else "mainnet"]
