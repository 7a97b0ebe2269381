"""Building blocks for endpoint groups on top of the wxfabric executors.

Endpoint groups (menus, messages, beacons, ...) are thin classes that hold a
reference to an executor and turn method calls into URL templates. This module
provides the URL template builder and the base class they share. It works
with both JsonClient and AsyncJsonClient: with the async client the helper
methods return awaitables.
"""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from .constants import ACCESS_TOKEN_PARAM
from .exceptions import ValidationError
from .log_config import logger
from .models import ApiResponse

if TYPE_CHECKING:
    from .client import AsyncJsonClient, JsonClient


def build_url_template(
    path: str,
    params: Mapping[str, Any] | None = None,
    *,
    credential_param: str = ACCESS_TOKEN_PARAM,
) -> str:
    """Builds a URL template that ends with an empty credential parameter.

    Args:
        path: Absolute URL or path relative to the client's base URL.
        params: Extra query parameters, placed before the credential.
        credential_param: Name of the query parameter carrying the credential.

    Returns:
        str: e.g. ``"/cgi-bin/user/info?openid=X&access_token="``.

    Raises:
        ValidationError: If the path is empty or already carries a query string.
    """
    if not path:
        raise ValidationError("Endpoint path must not be empty.")
    if "?" in path:
        raise ValidationError(
            f"Endpoint path {path!r} must not contain a query string; pass params instead."
        )
    query = urlencode({k: v for k, v in (params or {}).items() if v is not None})
    prefix = f"{query}&" if query else ""
    return f"{path}?{prefix}{credential_param}="


class BaseResourceClient:
    """Base class for endpoint groups.

    Subclasses set ``_path_prefix`` (e.g. ``"/shakearound"``) and, for APIs
    authenticated with another credential, ``_credential_param``.

    Attributes:
        _api_client: The executor used for making HTTP requests.
    """

    _path_prefix: str = ""
    _credential_param: str = ACCESS_TOKEN_PARAM

    def __init__(self, api_client: "JsonClient | AsyncJsonClient"):
        self._api_client = api_client
        logger.debug(f"{self.__class__.__name__} initialized")

    def _url(self, path: str, params: Mapping[str, Any] | None = None) -> str:
        full_path = f"{self._path_prefix.rstrip('/')}/{path.lstrip('/')}"
        return build_url_template(
            full_path, params, credential_param=self._credential_param
        )

    def _get(
        self,
        path: str,
        response_model: type[Any] = ApiResponse,
        **params: Any,
    ) -> Any:
        return self._api_client.get_json(self._url(path, params), response_model)

    def _post(
        self,
        path: str,
        payload: Any,
        response_model: type[Any] = ApiResponse,
        **params: Any,
    ) -> Any:
        return self._api_client.post_json(
            self._url(path, params), payload, response_model
        )
