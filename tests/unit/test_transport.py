import httpx
import pytest
from conftest import envelope

from secretflare.client.transport import AsyncSecretflareTransport
from secretflare.exceptions import MalformedResponseError, NotFoundError, TransportError
from secretflare.models.config import Config


def _transport(handler) -> AsyncSecretflareTransport:
    return AsyncSecretflareTransport(
        api_token="test-token",
        base_url="https://api.test/client/v4/",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_fetch_json_unwraps_result_and_authenticates():
    seen: list[httpx.Request] = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=envelope({"logpush": True}))

    async with _transport(handler) as transport:
        result = await transport.fetch_json("/accounts/a/workers/scripts/s/script-settings")

    assert result == {"logpush": True}
    assert seen[0].url.path == "/client/v4/accounts/a/workers/scripts/s/script-settings"
    assert seen[0].headers["authorization"] == "Bearer test-token"


@pytest.mark.asyncio
async def test_404_is_not_found():
    async with _transport(lambda r: httpx.Response(404, json=envelope(None, False))) as transport:
        with pytest.raises(NotFoundError):
            await transport.fetch_json("/accounts/a/workers/scripts/missing")


@pytest.mark.asyncio
async def test_not_found_error_code_is_not_found():
    body = envelope(None, False, [{"code": 10007, "message": "workers.api.error.script_not_found"}])

    async with _transport(lambda r: httpx.Response(400, json=body)) as transport:
        with pytest.raises(NotFoundError, match="script_not_found"):
            await transport.fetch_json("/accounts/a/workers/scripts/missing")


@pytest.mark.asyncio
async def test_server_error_is_transport_error_with_details():
    body = envelope(None, False, [{"code": 10013, "message": "internal error"}])

    async with _transport(lambda r: httpx.Response(500, json=body)) as transport:
        with pytest.raises(TransportError, match=r"internal error \[code: 10013\]") as exc_info:
            await transport.fetch_json("/x")

    assert exc_info.value.status_code == 500
    assert exc_info.value.errors == [{"code": 10013, "message": "internal error"}]


@pytest.mark.asyncio
async def test_unsuccessful_envelope_with_200_is_transport_error():
    body = envelope(None, False, [{"code": 1, "message": "nope"}])

    async with _transport(lambda r: httpx.Response(200, json=body)) as transport:
        with pytest.raises(TransportError, match="nope"):
            await transport.fetch_json("/x")


@pytest.mark.asyncio
async def test_non_json_success_is_malformed():
    async with _transport(lambda r: httpx.Response(200, text="<html>")) as transport:
        with pytest.raises(MalformedResponseError):
            await transport.fetch_json("/x")


@pytest.mark.asyncio
async def test_connect_error_is_transport_error():
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    async with _transport(handler) as transport:
        with pytest.raises(TransportError, match="boom") as exc_info:
            await transport.fetch_raw("/x")

    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_fetch_raw_returns_undecoded_response():
    def handler(request):
        return httpx.Response(
            200, content=b"console.log(1)", headers={"content-type": "application/javascript"}
        )

    async with _transport(handler) as transport:
        response = await transport.fetch_raw("/content", params={"version": "v1"})

    assert response.content == b"console.log(1)"
    assert response.request.url.params["version"] == "v1"


@pytest.mark.asyncio
async def test_fetch_raw_raises_on_error_status():
    async with _transport(lambda r: httpx.Response(502, text="bad gateway")) as transport:
        with pytest.raises(TransportError) as exc_info:
            await transport.fetch_raw("/content")
    assert exc_info.value.status_code == 502


def test_from_config(monkeypatch):
    monkeypatch.setenv("SECRETFLARE_ACCOUNT_ID", "acc")
    monkeypatch.setenv("SECRETFLARE_API_TOKEN", "tok")
    monkeypatch.setenv("SECRETFLARE_SEND_METRICS", "false")

    transport = AsyncSecretflareTransport.from_config(Config())

    assert transport.send_metrics is False
