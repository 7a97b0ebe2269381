"""Constants used throughout the wxfabric library.

This module defines the platform base URLs, the names of the query parameters
that carry credentials, and the status sentinels found in response envelopes.
"""

# Base URLs
MP_API_BASE_URL = "https://api.weixin.qq.com"
CORP_API_BASE_URL = "https://qyapi.weixin.qq.com"

# Query parameters that carry a credential. The credential is always the
# last parameter of a request URL.
ACCESS_TOKEN_PARAM = "access_token"
SUITE_ACCESS_TOKEN_PARAM = "suite_access_token"
CREDENTIAL_PARAMS: frozenset[str] = frozenset(
    [ACCESS_TOKEN_PARAM, SUITE_ACCESS_TOKEN_PARAM]
)

# --- Envelope status codes --- #
ERR_CODE_OK: int = 0
ERR_CODE_INVALID_CREDENTIAL: int = 40001
ERR_CODE_ACCESS_TOKEN_EXPIRED: int = 42001

DEFAULT_EXPIRED_CREDENTIAL_CODES: tuple[int, ...] = (
    ERR_CODE_INVALID_CREDENTIAL,
    ERR_CODE_ACCESS_TOKEN_EXPIRED,
)

# Default settings
DEFAULT_TIMEOUT: float = 30.0
JSON_CONTENT_TYPE: str = "application/json; charset=utf-8"

WXFABRIC_VERSION: str = "0.1.0"
DEFAULT_USER_AGENT: str = f"wxfabric/{WXFABRIC_VERSION}"
