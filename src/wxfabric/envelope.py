"""Envelope inspection shared by the synchronous and asynchronous executors."""

from collections.abc import Collection
from typing import Any

import httpx
import pydantic

from .constants import ERR_CODE_OK
from .exceptions import (
    ApiError,
    ConfigurationError,
    CredentialExpiredError,
    DecodeError,
)
from .models import StatusCarrier


def ensure_status_carrier(response_model: type[Any]) -> None:
    """Raises ConfigurationError unless ``response_model`` can report a status."""
    if not (
        isinstance(response_model, type)
        and issubclass(response_model, pydantic.BaseModel)
        and issubclass(response_model, StatusCarrier)
    ):
        raise ConfigurationError(
            f"Response model {response_model!r} must be a pydantic model "
            "implementing status_code() and status_message()."
        )


def decode_response(response: httpx.Response, response_model: type[Any]) -> Any:
    """Decodes the body of ``response`` into a new ``response_model`` instance.

    Raises:
        DecodeError: If the body is not valid JSON or does not fit the model.
    """
    try:
        return response_model.model_validate_json(response.content)
    except pydantic.ValidationError as e:
        raise DecodeError(
            f"Could not decode response into {response_model.__name__}: {e}",
            response=response,
        ) from e


def check_status(
    parsed: StatusCarrier,
    expired_codes: Collection[int],
    *,
    response: httpx.Response | None = None,
) -> None:
    """Raises the error described by the envelope of ``parsed``, if any.

    Raises:
        CredentialExpiredError: If the status code is one of ``expired_codes``.
        ApiError: For any other non-zero status code.
        DecodeError: If the status object itself is malformed.
    """
    try:
        code = parsed.status_code()
        if code == ERR_CODE_OK:
            return
        message = parsed.status_message()
    except pydantic.ValidationError as e:
        raise DecodeError(
            f"Malformed status object in response: {e}", response=response
        ) from e

    if code in expired_codes:
        raise CredentialExpiredError(code, message, response=response)
    raise ApiError(code, message, response=response)
