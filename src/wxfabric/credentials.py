"""Credential provider contracts consumed by the wxfabric executors.

Providers own the credential: they fetch it, cache it, refresh it and
synchronize concurrent access to it. The executors only ask for the current
credential at the start of a logical call and force a refresh when the server
reports it as expired.
"""

from typing import Protocol, runtime_checkable

from .exceptions import ConfigurationError
from .log_config import logger


@runtime_checkable
class CredentialProvider(Protocol):
    """Protocol for synchronous credential providers.

    Both methods may raise; the executor treats any failure as fatal for the
    current call and does not retry it.
    """

    def fetch(self) -> str:
        """Returns the current non-expired credential, fetching it if needed."""
        ...

    def force_refresh(self) -> str:
        """Discards any cached credential and unconditionally obtains a new one."""
        ...


@runtime_checkable
class AsyncCredentialProvider(Protocol):
    """Protocol for asynchronous credential providers."""

    async def fetch(self) -> str:
        """Returns the current non-expired credential, fetching it if needed."""
        ...

    async def force_refresh(self) -> str:
        """Discards any cached credential and unconditionally obtains a new one."""
        ...


class StaticCredentialProvider:
    """Implements CredentialProvider with a fixed, externally managed credential.

    Suitable when another process keeps the credential fresh. A forced refresh
    cannot obtain anything new, so it returns the same credential.
    """

    def __init__(self, token: str | None):
        if not token:
            raise ConfigurationError(
                "StaticCredentialProvider requires a non-empty 'token'."
            )
        self._token: str = token
        logger.debug("StaticCredentialProvider initialized.")

    def fetch(self) -> str:
        return self._token

    def force_refresh(self) -> str:
        logger.warning(
            "StaticCredentialProvider cannot refresh its credential; reusing the current one."
        )
        return self._token
