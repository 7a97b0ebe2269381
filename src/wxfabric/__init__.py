"""wxfabric: JSON API client core for access-token authenticated platform APIs.

This package provides the request executors shared by every endpoint of
WeChat-style platform APIs: the credential is appended as the last query
parameter, responses carry an ``errcode``/``errmsg`` envelope inside HTTP 200
bodies, and an expired credential is refreshed and the call retried once.
"""

__version__ = "0.1.0"

from . import (
    client,
    config,
    constants,
    credentials,
    envelope,
    exceptions,
    log_config,
    models,
    resources,
    types,
)
from .client import AsyncJsonClient, JsonClient
from .config import ClientSettings, get_settings
from .credentials import (
    AsyncCredentialProvider,
    CredentialProvider,
    StaticCredentialProvider,
)
from .exceptions import (
    ApiError,
    ConfigurationError,
    CredentialExpiredError,
    CredentialFetchError,
    DecodeError,
    NetworkError,
    TimeoutError,
    TransportError,
    TransportStatusError,
    ValidationError,
    WxFabricError,
)
from .models import ApiResponse, ApiStatus, EmbeddedStatusResponse, StatusCarrier
from .resources import BaseResourceClient, build_url_template

__all__ = [
    "__version__",
    # Modules
    "client",
    "config",
    "constants",
    "credentials",
    "envelope",
    "exceptions",
    "log_config",
    "models",
    "resources",
    "types",
    # Executors
    "JsonClient",
    "AsyncJsonClient",
    "ClientSettings",
    "get_settings",
    # Credentials
    "CredentialProvider",
    "AsyncCredentialProvider",
    "StaticCredentialProvider",
    # Errors
    "WxFabricError",
    "ApiError",
    "ConfigurationError",
    "CredentialExpiredError",
    "CredentialFetchError",
    "DecodeError",
    "NetworkError",
    "TimeoutError",
    "TransportError",
    "TransportStatusError",
    "ValidationError",
    # Models
    "ApiResponse",
    "ApiStatus",
    "EmbeddedStatusResponse",
    "StatusCarrier",
    # Resources
    "BaseResourceClient",
    "build_url_template",
]
