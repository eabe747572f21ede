from __future__ import annotations

from collections.abc import Callable, Coroutine
from functools import wraps
from typing import Any, TypeAlias, TypeVar

T = TypeVar("T")

StatusTuple: TypeAlias = tuple[bool, T | str]

NOT_CONNECTED = "Wallet is not connected."


def status_tuple(
    fn: Callable[..., Coroutine[Any, Any, T]],
) -> Callable[..., Coroutine[Any, Any, StatusTuple[T]]]:
    """Turn an adapter coroutine into one returning ``(ok, result_or_error)``.

    Failures are logged on the adapter's bound logger. The error text falls
    back to the exception class name for exceptions without a message.
    """

    @wraps(fn)
    async def call(self: Any, *args: Any, **kwargs: Any) -> StatusTuple[T]:
        try:
            return True, await fn(self, *args, **kwargs)
        except Exception as exc:
            self.logger.error(f"{fn.__name__} failed: {exc!r}")
            return False, str(exc) or type(exc).__name__

    return call


def require_wallet(fn: Callable) -> Callable:
    @wraps(fn)
    async def call(self: Any, *args: Any, **kwargs: Any) -> Any:
        if getattr(self, "wallet_address", None):
            return await fn(self, *args, **kwargs)
        return False, NOT_CONNECTED

    return call
