"""Custom exception classes for the wxfabric library."""

import httpx

from .constants import CREDENTIAL_PARAMS


def redact_url(url: httpx.URL | str) -> str:
    """Return ``url`` with its credential masked.

    Executor URLs always carry the credential as their last query parameter,
    whatever that parameter is called, so the last parameter is masked along
    with every well-known credential parameter.
    """
    parsed = httpx.URL(str(url))
    items = parsed.params.multi_items()
    if not items:
        return str(parsed)
    names = {name for name, _ in items if name in CREDENTIAL_PARAMS}
    names.add(items[-1][0])
    for name in sorted(names):
        parsed = parsed.copy_set_param(name, "***")
    return str(parsed)


class WxFabricError(Exception):
    """Base exception class for all wxfabric errors."""

    def __init__(
        self,
        message: str,
        *,
        response: httpx.Response | None = None,
        request: httpx.Request | None = None,
    ):
        """Initializes the base exception.

        Args:
            message: The error message.
            response: Optional httpx.Response object associated with the error.
            request: Optional httpx.Request object associated with the error.
        """
        super().__init__(message)
        self.message = message
        self.response = response
        self.request = request

    def __str__(self) -> str:
        if self.response is not None:
            try:
                request = self.response.request
            except RuntimeError:
                request = None
            url_info = redact_url(request.url) if request is not None else "N/A"
            return (
                f"{self.message} (Status: {self.response.status_code}, URL: {url_info})"
            )
        if isinstance(self.request, httpx.Request):
            return f"{self.message} (URL: {redact_url(self.request.url)})"
        return self.message


class ConfigurationError(WxFabricError):
    """Represents an error in the library's configuration."""

    def __init__(self, message: str):
        super().__init__(message, response=None)


class ValidationError(WxFabricError):
    """Represents a client-side validation failure before a request is sent.

    Raised for malformed URL templates and request payloads that cannot be
    serialized to JSON.
    """


class CredentialFetchError(WxFabricError):
    """Raised when the credential provider fails to fetch or refresh a credential."""


class TransportError(WxFabricError):
    """Represents a failure to complete the HTTP exchange itself.

    Transport errors are never retried by the executor.
    """


class TimeoutError(TransportError):
    """Represents a request timeout error.

    This error is raised when an HTTP request does not complete within the configured timeout.
    """

    def __init__(self, message: str, *, request: httpx.Request | None = None):
        super().__init__(message, request=request, response=None)


class NetworkError(TransportError):
    """Represents a network connection error (e.g., DNS resolution failure, connection refused)."""

    def __init__(self, message: str, *, request: httpx.Request | None = None):
        super().__init__(message, request=request, response=None)


class TransportStatusError(TransportError):
    """Raised when the server answers with an HTTP status other than 200 OK."""

    @property
    def status_code(self) -> int | None:
        return self.response.status_code if self.response is not None else None


class DecodeError(WxFabricError):
    """Raised when a response body cannot be decoded into the response model."""


class ApiError(WxFabricError):
    """Represents an application-level error carried inside a 200 OK envelope.

    Attributes:
        code: The non-zero ``errcode`` reported by the server.
        errmsg: The ``errmsg`` reported by the server.
    """

    def __init__(
        self,
        code: int,
        errmsg: str,
        *,
        response: httpx.Response | None = None,
        request: httpx.Request | None = None,
    ):
        super().__init__(
            f"errcode: {code}, errmsg: {errmsg}", response=response, request=request
        )
        self.code = code
        self.errmsg = errmsg

    def __str__(self) -> str:
        return self.message


class CredentialExpiredError(ApiError):
    """The server rejected the credential as expired or invalid.

    The executor handles the first occurrence by refreshing the credential and
    retrying. Callers only see this error when the retried attempt was rejected
    as well, so it can be caught as a plain ApiError.
    """
