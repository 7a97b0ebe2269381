# tests/conftest.py
import pytest
import pytest_asyncio

from wxfabric.client import AsyncJsonClient, JsonClient
from wxfabric.config import ClientSettings

BASE_URL = "https://api.example.com"
MENU_GET = "/cgi-bin/menu/get?access_token="
MESSAGE_SEND = "/cgi-bin/message/custom/send?access_token="


class FakeCredentialProvider:
    """Credential provider that hands out token-1, token-2, ... and counts calls."""

    def __init__(
        self,
        tokens: tuple[str, ...] = ("token-1", "token-2", "token-3"),
        *,
        fetch_error: Exception | None = None,
        refresh_error: Exception | None = None,
    ):
        self._tokens = tokens
        self._index = 0
        self.fetch_error = fetch_error
        self.refresh_error = refresh_error
        self.fetch_calls = 0
        self.refresh_calls = 0

    def fetch(self) -> str:
        self.fetch_calls += 1
        if self.fetch_error:
            raise self.fetch_error
        return self._tokens[self._index]

    def force_refresh(self) -> str:
        self.refresh_calls += 1
        if self.refresh_error:
            raise self.refresh_error
        self._index += 1
        return self._tokens[self._index]


class AsyncFakeCredentialProvider(FakeCredentialProvider):
    """Awaitable variant of FakeCredentialProvider."""

    async def fetch(self) -> str:  # type: ignore[override]
        return super().fetch()

    async def force_refresh(self) -> str:  # type: ignore[override]
        return super().force_refresh()


@pytest.fixture
def settings() -> ClientSettings:
    """Settings isolated from the environment and .env files."""
    return ClientSettings(_env_file=None, base_url=BASE_URL)


@pytest.fixture
def provider() -> FakeCredentialProvider:
    return FakeCredentialProvider()


@pytest.fixture
def async_provider() -> AsyncFakeCredentialProvider:
    return AsyncFakeCredentialProvider()


@pytest.fixture
def json_client(provider, settings):
    client = JsonClient(provider, settings)
    yield client
    client.close()


@pytest_asyncio.fixture
async def async_json_client(async_provider, settings):
    client = AsyncJsonClient(async_provider, settings)
    yield client
    await client.aclose()


def sent_tokens(httpx_mock) -> list[str]:
    """Credentials carried by the requests captured by pytest-httpx, in order."""
    return [r.url.params["access_token"] for r in httpx_mock.get_requests()]
