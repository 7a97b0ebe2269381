"""Tests for the asynchronous AsyncJsonClient executor."""

import httpx
import pytest

from conftest import (
    MENU_GET,
    MESSAGE_SEND,
    AsyncFakeCredentialProvider,
    sent_tokens,
)
from wxfabric.client import AsyncJsonClient
from wxfabric.exceptions import (
    ApiError,
    CredentialExpiredError,
    CredentialFetchError,
    NetworkError,
    TransportStatusError,
)
from wxfabric.models import ApiResponse, EmbeddedStatusResponse

EXPIRED = {"errcode": 42001, "errmsg": "access_token expired"}


class SendResult(ApiResponse):
    msgid: int = 0


@pytest.mark.asyncio
async def test_post_json_success(async_json_client: AsyncJsonClient, async_provider, httpx_mock):
    httpx_mock.add_response(json={"errcode": 0, "errmsg": "ok", "msgid": 42})

    result = await async_json_client.post_json(MESSAGE_SEND, {"touser": "x"}, SendResult)

    assert result.msgid == 42
    request = httpx_mock.get_request()
    assert request.headers["Content-Type"] == "application/json; charset=utf-8"
    assert async_provider.fetch_calls == 1
    assert async_provider.refresh_calls == 0


@pytest.mark.asyncio
async def test_expired_credential_refreshed_once(
    async_json_client: AsyncJsonClient, async_provider, httpx_mock
):
    httpx_mock.add_response(json={**EXPIRED, "msgid": 1})
    httpx_mock.add_response(json={"errcode": 0, "errmsg": "ok", "msgid": 2})

    result = await async_json_client.post_json(MESSAGE_SEND, {}, SendResult)

    assert result.msgid == 2
    assert sent_tokens(httpx_mock) == ["token-1", "token-2"]
    assert async_provider.refresh_calls == 1


@pytest.mark.asyncio
async def test_retry_bound(async_json_client: AsyncJsonClient, async_provider, httpx_mock):
    httpx_mock.add_response(json=EXPIRED, is_reusable=True)

    with pytest.raises(CredentialExpiredError) as exc_info:
        await async_json_client.get_json(MENU_GET)

    assert exc_info.value.code == 42001
    assert len(httpx_mock.get_requests()) == 2
    assert async_provider.refresh_calls == 1


@pytest.mark.asyncio
async def test_application_error_passthrough(
    async_json_client: AsyncJsonClient, async_provider, httpx_mock
):
    httpx_mock.add_response(json={"errcode": 40003, "errmsg": "invalid openid"})

    with pytest.raises(ApiError) as exc_info:
        await async_json_client.get_json(MENU_GET)

    assert exc_info.value.code == 40003
    assert async_provider.refresh_calls == 0


@pytest.mark.asyncio
async def test_http_500_not_retried(async_json_client: AsyncJsonClient, httpx_mock):
    httpx_mock.add_response(status_code=500)

    with pytest.raises(TransportStatusError):
        await async_json_client.get_json(MENU_GET)

    assert len(httpx_mock.get_requests()) == 1


@pytest.mark.asyncio
async def test_fetch_failure_issues_no_request(settings, httpx_mock):
    provider = AsyncFakeCredentialProvider(fetch_error=OSError("cache unavailable"))

    async with AsyncJsonClient(provider, settings) as client:
        with pytest.raises(CredentialFetchError):
            await client.get_json(MENU_GET)

    assert httpx_mock.get_requests() == []


@pytest.mark.asyncio
async def test_network_error(async_json_client: AsyncJsonClient, httpx_mock):
    httpx_mock.add_exception(httpx.ConnectError("Connection refused"))

    with pytest.raises(NetworkError):
        await async_json_client.get_json(MENU_GET)


@pytest.mark.asyncio
async def test_embedded_envelope(async_json_client: AsyncJsonClient, httpx_mock):
    httpx_mock.add_response(
        json={"base": {"errcode": 0, "errmsg": ""}, "data": {"devices": [1, 2]}}
    )

    result = await async_json_client.get_json(
        "/shakearound/device/search?access_token=", EmbeddedStatusResponse
    )

    assert result.status_code() == 0
    assert result.model_extra["data"] == {"devices": [1, 2]}


@pytest.mark.asyncio
async def test_aclose_keeps_external_client(async_provider, settings):
    external = httpx.AsyncClient()
    client = AsyncJsonClient(async_provider, settings, http_client=external)

    await client.aclose()

    assert not external.is_closed
    await external.aclose()


@pytest.mark.asyncio
async def test_error_response_request_is_redacted(
    async_json_client: AsyncJsonClient, httpx_mock
):
    httpx_mock.add_response(status_code=503)

    with pytest.raises(TransportStatusError) as exc_info:
        await async_json_client.get_json(MENU_GET)

    assert "token-1" not in str(exc_info.value.response.request.url)
    assert sent_tokens(httpx_mock) == ["token-1"]
