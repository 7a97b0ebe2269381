# wxfabric/config.py
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_EXPIRED_CREDENTIAL_CODES,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    MP_API_BASE_URL,
)
from .types import PostRequestHook, PreRequestHook


class ClientSettings(BaseSettings):
    """
    Manages user-configurable settings for wxfabric clients, primarily loaded
    from environment variables (prefixed with 'WXFABRIC_') or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "secrets.env"),
        env_file_encoding="utf-8",
        env_prefix="WXFABRIC_",
        extra="ignore",
        case_sensitive=False,
        arbitrary_types_allowed=True,  # Allow hook callables
    )

    # --- Transport Settings ---
    base_url: str = Field(
        default=MP_API_BASE_URL,
        description="Base URL that relative URL templates are resolved against",
    )
    request_timeout: float = Field(
        default=DEFAULT_TIMEOUT, description="Default request timeout in seconds"
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent header for requests",
    )

    # --- Credential Retry Settings ---
    expired_credential_codes: list[int] = Field(
        default_factory=lambda: list(DEFAULT_EXPIRED_CREDENTIAL_CODES),
        description="Envelope status codes that trigger a credential refresh and one retry",
    )
    refresh_retry_wait: float = Field(
        default=0.0,
        ge=0.0,
        description="Seconds to wait after refreshing the credential before retrying",
    )

    # --- Hook Settings ---
    pre_request_hooks: list[PreRequestHook] = Field(
        default_factory=list,
        description="List of hooks to call before each attempt is sent.",
    )
    post_request_hooks: list[PostRequestHook] = Field(
        default_factory=list,
        description="List of hooks to call after a response is received and decoded.",
    )


@lru_cache
def get_settings() -> ClientSettings:
    """
    Provides access to the client settings.

    Settings are loaded from environment variables or .env/secrets.env files.
    The instance is cached for performance.

    Returns:
        ClientSettings: The client settings instance.
    """
    return ClientSettings()
