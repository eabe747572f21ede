import httpx
import pytest

from kton_sdk.core.clients.TonApiClient import TonApiClient
from kton_sdk.core.clients.ToncenterClient import JettonIndexClient, ToncenterClient
from kton_sdk.core.config import set_config


@pytest.fixture(autouse=True)
def _empty_config(restore_global_config):
    set_config({})


def _client(cls, handler, **kwargs):
    transport = httpx.MockTransport(handler)
    return cls(client=httpx.AsyncClient(transport=transport), **kwargs)


@pytest.mark.asyncio
async def test_exec_get_method_builds_url_and_auth():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True, "exit_code": 0, "stack": []})

    client = _client(TonApiClient, handler, api_key="secret")
    result = await client.exec_get_method("EQabc", "get_wallet_address", ["0:ff"])
    await client.close()

    assert result["success"] is True
    request = seen[0]
    assert request.url.host == "tonapi.io"
    assert request.url.path == "/v2/blockchain/accounts/EQabc/methods/get_wallet_address"
    assert request.url.params.get_list("args") == ["0:ff"]
    assert request.headers["Authorization"] == "Bearer secret"


@pytest.mark.asyncio
async def test_testnet_base_url():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"balance": 5})

    client = _client(TonApiClient, handler, testnet=True, api_key="")
    assert await client.get_account("EQabc") == {"balance": 5}
    assert seen[0].url.host == "testnet.tonapi.io"
    assert "Authorization" not in seen[0].headers


@pytest.mark.asyncio
async def test_retries_transient_status(monkeypatch):
    monkeypatch.setattr("kton_sdk.core.utils.retry.asyncio.sleep", _no_sleep)
    responses = iter([httpx.Response(503), httpx.Response(200, json={"rates": {}})])

    client = _client(TonApiClient, lambda request: next(responses), api_key="")

    assert await client.get_rates(["ton"], ["usd"]) == {"rates": {}}


@pytest.mark.asyncio
async def test_client_error_is_not_retried():
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(404, json={"error": "not found"})

    client = _client(TonApiClient, handler, api_key="")
    with pytest.raises(httpx.HTTPStatusError):
        await client.get_jetton_info("EQabc")
    assert calls == 1


@pytest.mark.asyncio
async def test_holders_count_sources():
    toncenter = _client(
        ToncenterClient,
        lambda request: httpx.Response(
            200, json={"jetton_masters": [], "metadata": {"holdersCount": "1234"}}
        ),
    )
    index = _client(
        JettonIndexClient,
        lambda request: httpx.Response(200, json={"details": {"holdersCount": 0}}),
    )

    assert await toncenter.get_holders_count("EQabc") == 1234
    assert await index.get_holders_count("EQabc") == 0


async def _no_sleep(_delay: float) -> None:
    return None
