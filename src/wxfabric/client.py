"""JSON request executors for wxfabric.

This module provides JsonClient and AsyncJsonClient, which perform one logical
API call against a URL template that lacks its trailing credential parameter.
Each logical call obtains the credential from a provider, sends the request,
decodes the JSON envelope and, when the server reports the credential as
expired inside an otherwise successful response, forces a credential refresh
and retries exactly once.

Both clients share the request preparation, response handling and envelope
inspection implemented in _BaseJsonClient; they only differ in how the
transport and the credential provider are awaited.
"""

import inspect
import json
import ssl
from collections.abc import Collection
from http import HTTPStatus
from typing import Any, Self

import certifi
import httpx
import pydantic
import tenacity
from tenacity import (
    AsyncRetrying,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from .config import ClientSettings, get_settings
from .constants import CREDENTIAL_PARAMS, JSON_CONTENT_TYPE
from .credentials import AsyncCredentialProvider, CredentialProvider
from .envelope import check_status, decode_response, ensure_status_carrier
from .exceptions import (
    ConfigurationError,
    CredentialExpiredError,
    CredentialFetchError,
    NetworkError,
    TimeoutError,
    TransportError,
    TransportStatusError,
    ValidationError,
    WxFabricError,
    redact_url,
)
from .log_config import logger
from .models import ApiResponse
from .types import RequestData

MAX_ATTEMPTS = 2
"""One initial attempt plus at most one attempt with a refreshed credential."""


def _is_async_provider(credentials: Any, *, require_both: bool = False) -> bool:
    checks = [
        inspect.iscoroutinefunction(credentials.fetch),
        inspect.iscoroutinefunction(credentials.force_refresh),
    ]
    return all(checks) if require_both else any(checks)


class _BaseJsonClient:
    """Transport-independent part of the JSON executors.

    Attributes:
        _settings: Configuration settings for the client.
        _expired_codes: Envelope status codes that trigger the refresh retry.
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        expired_codes: Collection[int] | None = None,
    ):
        self._settings = settings or get_settings()
        self._expired_codes: frozenset[int] = frozenset(
            expired_codes
            if expired_codes is not None
            else self._settings.expired_credential_codes
        )

    def _ssl_verify(self) -> ssl.SSLContext | bool:
        try:
            ssl_context = ssl.create_default_context(cafile=certifi.where())
            logger.debug("Using certifi SSL context.")
            return ssl_context
        except Exception:
            logger.warning(
                "certifi not found or failed to load. Using default SSL verification."
            )
            return True

    def _default_client_kwargs(self) -> dict[str, Any]:
        return {
            "base_url": self._settings.base_url,
            "timeout": self._settings.request_timeout,
            "verify": self._ssl_verify(),
            "headers": {"User-Agent": self._settings.user_agent},
        }

    def _encode_payload(self, payload: Any) -> bytes:
        """Serializes ``payload`` to UTF-8 JSON, keeping non-ASCII text unescaped."""
        try:
            if isinstance(payload, pydantic.BaseModel):
                body = payload.model_dump_json(by_alias=True, exclude_none=True)
            else:
                body = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
        except (TypeError, ValueError) as e:
            raise ValidationError(
                f"Request payload is not JSON serializable: {e}"
            ) from e
        return body.encode("utf-8")

    def _validate_template(self, url_template: str) -> None:
        """Checks that ``url_template`` ends with an empty credential parameter."""
        if not url_template:
            raise ValidationError("URL template must not be empty.")
        try:
            items = httpx.URL(url_template).params.multi_items()
        except httpx.InvalidURL as e:
            raise ValidationError(f"URL template {url_template!r} is invalid: {e}") from e
        if not url_template.endswith("=") or not items or items[-1][1]:
            raise ValidationError(
                f"URL template {url_template!r} must end with its credential parameter, "
                "e.g. '...?access_token='."
            )
        credential_param = items[-1][0]
        carried = [
            name
            for name, value in items[:-1]
            if value and (name == credential_param or name in CREDENTIAL_PARAMS)
        ]
        if carried:
            raise ValidationError(
                f"URL template already carries a credential in {carried[0]!r}."
            )

    def _prepare(
        self,
        method: str,
        url_template: str,
        response_model: type[Any],
        *,
        payload: Any = None,
        has_body: bool = False,
    ) -> RequestData:
        self._validate_template(url_template)
        ensure_status_carrier(response_model)

        request_data = RequestData(method=method, url_template=url_template)
        if has_body:
            request_data.content = self._encode_payload(payload)
            request_data.headers["Content-Type"] = JSON_CONTENT_TYPE
        return request_data

    def _credential_error(self, action: str, exc: Exception) -> CredentialFetchError:
        logger.error(f"Credential provider failed to {action} credential: {exc}")
        return CredentialFetchError(f"Failed to {action} credential: {exc}")

    def _attempt_headers(self, request_data: RequestData) -> dict[str, str]:
        """Runs the pre-request hooks on a copy of the request headers."""
        headers = httpx.Headers(request_data.headers)
        for hook in self._settings.pre_request_hooks:
            try:
                hook(request_data.method, request_data.url_template, headers)
            except Exception as e:
                logger.opt(exception=e).error(
                    f"Error executing pre-request hook {getattr(hook, '__name__', str(hook))}: {e}"
                )
        return dict(headers.items())

    def _transport_error(
        self, exc: httpx.RequestError, request: httpx.Request
    ) -> TransportError:
        request = self._redacted_request(request)
        url = request.url
        if isinstance(exc, httpx.TimeoutException):
            logger.error(f"Request timed out: {url}")
            return TimeoutError("Request timed out", request=request)
        if isinstance(exc, httpx.NetworkError):
            logger.error(f"Network error occurred for {url}: {exc}")
            return NetworkError(f"Network error: {exc}", request=request)
        logger.error(f"HTTP request error for {url}: {exc}")
        return TransportError(f"HTTP request error: {exc}", request=request)

    def _redacted_request(self, request: httpx.Request) -> httpx.Request:
        """Returns a copy of ``request`` whose URL has the credential masked.

        Requests and responses escape the executor through post-request hooks
        and raised errors, so they must not point at the credential-bearing URL.
        """
        return httpx.Request(
            request.method,
            redact_url(request.url),
            headers=request.headers,
            content=request.content,
        )

    def _handle_response(
        self, response: httpx.Response, response_model: type[Any], attempt: int
    ) -> Any:
        """Validates the HTTP status, decodes the body and inspects its envelope."""
        response.request = self._redacted_request(response.request)
        logger.debug(
            f"Received response: {response.status_code} for {response.request.url}"
        )
        if response.status_code != HTTPStatus.OK:
            raise TransportStatusError(
                f"http.Status: {response.status_code} {response.reason_phrase}",
                response=response,
            )

        parsed = decode_response(response, response_model)

        for hook in self._settings.post_request_hooks:
            try:
                hook(response, parsed, attempt)
            except Exception as e:
                logger.opt(exception=e).error(
                    f"Error executing post-request hook {getattr(hook, '__name__', str(hook))}: {e}"
                )

        try:
            check_status(parsed, self._expired_codes, response=response)
        except CredentialExpiredError as e:
            if attempt >= MAX_ATTEMPTS:
                logger.warning(
                    f"Credential still rejected after refresh ({e}); giving up."
                )
            raise
        return parsed

    def _retry_policy(self) -> dict[str, Any]:
        return {
            "stop": stop_after_attempt(MAX_ATTEMPTS),
            "wait": wait_fixed(self._settings.refresh_retry_wait),
            "retry": retry_if_exception_type(CredentialExpiredError),
            "reraise": True,
            "before_sleep": self._before_credential_retry,
        }

    def _before_credential_retry(self, retry_state: tenacity.RetryCallState) -> None:
        if not retry_state.outcome:
            return
        exc = retry_state.outcome.exception()
        logger.info(
            f"Credential rejected by server ({exc}); refreshing credential and "
            f"retrying after attempt {retry_state.attempt_number}."
        )


class JsonClient(_BaseJsonClient):
    """Synchronous JSON executor backed by an httpx.Client.

    A single instance may be shared between threads: every logical call keeps
    its retry state on its own stack, and the credential provider is
    responsible for synchronizing its own cache.

    Typical usage:
    ```python
    with JsonClient(StaticCredentialProvider("TOKEN")) as client:
        menu = client.get_json("/cgi-bin/get_current_selfmenu_info?access_token=")
    ```

    Attributes:
        _credentials: The credential provider consulted on every logical call.
        _http_client: The underlying httpx.Client for making requests.
        _should_close_client: Flag indicating if this instance owns the _http_client.
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        settings: ClientSettings | None = None,
        *,
        http_client: httpx.Client | None = None,
        expired_codes: Collection[int] | None = None,
    ):
        """Initialize the JsonClient.

        Args:
            credentials: Provider supplying the credential appended to every URL.
            settings: Client settings. If None, the cached global settings are used.
            http_client: Optional pre-configured httpx.Client instance. It is
                not closed by this client.
            expired_codes: Envelope status codes that trigger the refresh retry.
                Defaults to ``settings.expired_credential_codes``.
        """
        super().__init__(settings, expired_codes=expired_codes)
        if not isinstance(credentials, CredentialProvider) or _is_async_provider(
            credentials
        ):
            raise ConfigurationError(
                "JsonClient requires a provider implementing synchronous fetch() "
                "and force_refresh()."
            )
        self._credentials = credentials
        self._should_close_client = http_client is None
        self._http_client = http_client or httpx.Client(**self._default_client_kwargs())
        logger.debug("JsonClient initialized.")

    def post_json(
        self,
        url_template: str,
        payload: Any,
        response_model: type[Any] = ApiResponse,
    ) -> Any:
        """POST ``payload`` as JSON and decode the response into ``response_model``.

        Args:
            url_template: URL missing only the credential value, e.g.
                ``"/cgi-bin/menu/create?access_token="``.
            payload: Any JSON-serializable value or pydantic model.
            response_model: Pydantic model implementing StatusCarrier.

        Returns:
            A new ``response_model`` instance decoded from the successful response.

        Raises:
            ValidationError: If the URL template or payload is invalid.
            CredentialFetchError: If the credential provider fails.
            TransportError: If the request fails or the HTTP status is not 200.
            DecodeError: If the response body cannot be decoded.
            ApiError: If the envelope carries a non-zero status code.
        """
        request_data = self._prepare(
            "POST", url_template, response_model, payload=payload, has_body=True
        )
        return self._execute(request_data, response_model)

    def get_json(
        self, url_template: str, response_model: type[Any] = ApiResponse
    ) -> Any:
        """GET ``url_template`` and decode the response into ``response_model``.

        Behaves like post_json without a request body.
        """
        request_data = self._prepare("GET", url_template, response_model)
        return self._execute(request_data, response_model)

    def _credential_for(self, attempt: int) -> str:
        action = "fetch" if attempt == 1 else "refresh"
        try:
            if attempt == 1:
                return self._credentials.fetch()
            return self._credentials.force_refresh()
        except WxFabricError:
            raise
        except Exception as e:
            raise self._credential_error(action, e) from e

    def _execute(self, request_data: RequestData, response_model: type[Any]) -> Any:
        for attempt in Retrying(**self._retry_policy()):
            with attempt:
                number = attempt.retry_state.attempt_number
                credential = self._credential_for(number)
                parsed = self._send_once(request_data, credential, response_model, number)
        return parsed

    def _send_once(
        self,
        request_data: RequestData,
        credential: str,
        response_model: type[Any],
        attempt: int,
    ) -> Any:
        request = request_data.build_request(
            self._http_client, credential, headers=self._attempt_headers(request_data)
        )
        logger.debug(
            f"Sending request: {request.method} {redact_url(request.url)} (attempt {attempt})"
        )
        try:
            response = self._http_client.send(request)
        except httpx.RequestError as e:
            raise self._transport_error(e, request) from e
        return self._handle_response(response, response_model, attempt)

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._should_close_client and not self._http_client.is_closed:
            self._http_client.close()
            logger.debug(f"JsonClient internal HTTP client closed. Client ID: {id(self)}.")

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        self.close()


class AsyncJsonClient(_BaseJsonClient):
    """Asynchronous JSON executor backed by an httpx.AsyncClient.

    Semantics are identical to JsonClient; the transport and the credential
    provider are awaited instead of called.

    Typical usage:
    ```python
    async with AsyncJsonClient(provider) as client:
        result = await client.post_json(
            "/cgi-bin/message/custom/send?access_token=", message
        )
    ```
    """

    def __init__(
        self,
        credentials: AsyncCredentialProvider,
        settings: ClientSettings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        expired_codes: Collection[int] | None = None,
    ):
        super().__init__(settings, expired_codes=expired_codes)
        if not isinstance(
            credentials, AsyncCredentialProvider
        ) or not _is_async_provider(credentials, require_both=True):
            raise ConfigurationError(
                "AsyncJsonClient requires a provider implementing async fetch() "
                "and force_refresh()."
            )
        self._credentials = credentials
        self._should_close_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            **self._default_client_kwargs()
        )
        logger.debug("AsyncJsonClient initialized.")

    async def post_json(
        self,
        url_template: str,
        payload: Any,
        response_model: type[Any] = ApiResponse,
    ) -> Any:
        """POST ``payload`` as JSON; see JsonClient.post_json."""
        request_data = self._prepare(
            "POST", url_template, response_model, payload=payload, has_body=True
        )
        return await self._execute(request_data, response_model)

    async def get_json(
        self, url_template: str, response_model: type[Any] = ApiResponse
    ) -> Any:
        """GET ``url_template``; see JsonClient.get_json."""
        request_data = self._prepare("GET", url_template, response_model)
        return await self._execute(request_data, response_model)

    async def _credential_for(self, attempt: int) -> str:
        action = "fetch" if attempt == 1 else "refresh"
        try:
            if attempt == 1:
                return await self._credentials.fetch()
            return await self._credentials.force_refresh()
        except WxFabricError:
            raise
        except Exception as e:
            raise self._credential_error(action, e) from e

    async def _execute(
        self, request_data: RequestData, response_model: type[Any]
    ) -> Any:
        async for attempt in AsyncRetrying(**self._retry_policy()):
            with attempt:
                number = attempt.retry_state.attempt_number
                credential = await self._credential_for(number)
                parsed = await self._send_once(
                    request_data, credential, response_model, number
                )
        return parsed

    async def _send_once(
        self,
        request_data: RequestData,
        credential: str,
        response_model: type[Any],
        attempt: int,
    ) -> Any:
        request = request_data.build_request(
            self._http_client, credential, headers=self._attempt_headers(request_data)
        )
        logger.debug(
            f"Sending request: {request.method} {redact_url(request.url)} (attempt {attempt})"
        )
        try:
            response = await self._http_client.send(request)
        except httpx.RequestError as e:
            raise self._transport_error(e, request) from e
        return self._handle_response(response, response_model, attempt)

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._should_close_client and not self._http_client.is_closed:
            await self._http_client.aclose()
            logger.debug(
                f"AsyncJsonClient internal HTTP client closed. Client ID: {id(self)}."
            )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        await self.aclose()
