from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from typing import Any

import click
from loguru import logger

from kton_sdk.adapters.kton_adapter.adapter import KtonAdapter
from kton_sdk.core.cache.codec import DEFAULT_CODEC
from kton_sdk.core.config import load_config
from kton_sdk.core.constants.base import STAKING_CONTRACTS


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(DEFAULT_CODEC.sanitize(data), indent=2))


def _run(
    ctx: click.Context,
    call: Callable[[KtonAdapter], Awaitable[tuple[bool, Any]]],
) -> None:
    async def _main() -> tuple[bool, Any]:
        adapter = KtonAdapter(ctx.obj["adapter_config"])
        try:
            return await call(adapter)
        finally:
            await adapter.close()

    ok, result = asyncio.run(_main())
    if ok:
        _echo_json({"ok": True, "result": result})
    else:
        _echo_json({"ok": False, "error": result})
        sys.exit(1)


@click.group(name="kton", help="Read the KTON staking pool from the command line.")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None)
@click.option("--testnet/--mainnet", default=None, help="Override the configured network.")
@click.option(
    "--token-type",
    type=click.Choice(sorted(STAKING_CONTRACTS)),
    default=None,
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
)
@click.pass_context
def kton_cli(
    ctx: click.Context,
    config_path: str | None,
    testnet: bool | None,
    token_type: str | None,
    log_level: str,
) -> None:
    logger.remove()
    logger.add(sys.stderr, level=str(log_level).upper())
    if config_path:
        load_config(config_path, require_exists=True)

    adapter_config: dict[str, Any] = {}
    if testnet is not None:
        adapter_config["testnet"] = testnet
    if token_type:
        adapter_config["token_type"] = token_type
    ctx.obj = {"adapter_config": adapter_config}


@kton_cli.command(name="pool-state", help="Decode get_pool_full_data.")
@click.option("--ttl", type=int, default=None, help="Cache TTL in milliseconds.")
@click.pass_context
def pool_state_cmd(ctx: click.Context, ttl: int | None) -> None:
    _run(ctx, lambda adapter: adapter.get_pool_state(ttl))


@kton_cli.command(name="apy", help="Current APY estimated from the pool state.")
@click.pass_context
def apy_cmd(ctx: click.Context) -> None:
    _run(ctx, lambda adapter: adapter.get_current_apy())


@kton_cli.command(name="tvl", help="Total value locked, in nanoton.")
@click.pass_context
def tvl_cmd(ctx: click.Context) -> None:
    _run(ctx, lambda adapter: adapter.get_tvl())


@kton_cli.command(name="rates", help="TON/USD and pool jetton exchange rates.")
@click.pass_context
def rates_cmd(ctx: click.Context) -> None:
    _run(ctx, lambda adapter: adapter.get_rates())


@kton_cli.command(name="cache-clear", help="Drop cached responses.")
@click.option("--user-only", is_flag=True, help="Only clear wallet-specific entries.")
@click.pass_context
def cache_clear_cmd(ctx: click.Context, user_only: bool) -> None:
    async def _clear(adapter: KtonAdapter) -> tuple[bool, Any]:
        removed = (
            adapter.clear_storage_user_data()
            if user_only
            else adapter.clear_storage_data()
        )
        return True, {"removed": removed}

    _run(ctx, _clear)


def main() -> None:
    kton_cli()


if __name__ == "__main__":
    main()
