import time
from typing import Any

import httpx
from loguru import logger

from kton_sdk.core.constants.base import DEFAULT_HTTP_TIMEOUT
from kton_sdk.core.utils.retry import is_retryable_http_error, retry_async


class TonClient:
    def __init__(
        self,
        base_url: str,
        *,
        api_key: str | None = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        max_retries: int = 3,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self.headers = {
            "Content-Type": "application/json",
        }
        if api_key:
            self.headers["Authorization"] = f"Bearer {api_key}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        url = path if path.startswith("http") else f"{self.base_url}{path}"
        merged_headers = dict(self.headers)
        if headers:
            merged_headers.update(headers)

        async def _send() -> httpx.Response:
            logger.debug(f"Making {method} request to {url}")
            start_time = time.time()
            resp = await self.client.request(
                method, url, headers=merged_headers, **kwargs
            )
            elapsed = time.time() - start_time
            if resp.status_code >= 400:
                logger.warning(
                    f"HTTP {resp.status_code} response for {method} {url} after {elapsed:.2f}s"
                )
            else:
                logger.debug(
                    f"HTTP {resp.status_code} response for {method} {url} after {elapsed:.2f}s"
                )
            resp.raise_for_status()
            return resp

        return await retry_async(
            _send,
            max_retries=self.max_retries,
            max_delay_s=10.0,
            should_retry=is_retryable_http_error,
            on_retry=lambda attempt, exc, delay: logger.warning(
                f"Retrying {method} {url} in {delay:.2f}s (attempt {attempt + 1}): {exc}"
            ),
        )

    async def _get_json(self, path: str, **kwargs: Any) -> Any:
        response = await self._request("GET", path, **kwargs)
        return response.json()

    async def close(self) -> None:
        await self.client.aclose()
