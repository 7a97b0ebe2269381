# wxfabric/models.py
"""Core protocols and response envelope models for wxfabric.

Every response returned by the platform carries a status object made of a
numeric ``errcode`` and a human-readable ``errmsg``. The status either is the
entire response, sits flat beside the payload fields, or is nested under a
dedicated field. Response models declare where their status lives by
implementing the StatusCarrier protocol, which is all the executor relies on.

Example:
    A flat response such as
    ```json
    {"errcode": 0, "errmsg": "ok", "msgid": 1000001}
    ```
    is modelled by subclassing ApiResponse:
    ```python
    class SendResult(ApiResponse):
        msgid: int = 0
    ```
    A nested response such as
    ```json
    {"base": {"errcode": 0, "errmsg": ""}, "data": {"page_id": 7}}
    ```
    is modelled by subclassing EmbeddedStatusResponse:
    ```python
    class PageResult(EmbeddedStatusResponse):
        data: dict[str, int] = {}
    ```
"""

from typing import ClassVar, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from .constants import ERR_CODE_OK


@runtime_checkable
class StatusCarrier(Protocol):
    """Protocol for response models that expose an envelope status."""

    def status_code(self) -> int:
        """Returns the envelope ``errcode``; 0 means success."""
        ...

    def status_message(self) -> str:
        """Returns the envelope ``errmsg``."""
        ...


class ApiStatus(BaseModel):
    """The bare status object.

    Missing fields decode to ``errcode=0`` and ``errmsg=""``, so a response
    that omits the status entirely counts as a success.
    """

    model_config = ConfigDict(extra="ignore")

    errcode: int = ERR_CODE_OK
    errmsg: str = ""

    def status_code(self) -> int:
        return self.errcode

    def status_message(self) -> str:
        return self.errmsg


class ApiResponse(ApiStatus):
    """A response whose status fields sit flat beside its payload fields.

    Payload fields not declared by a subclass are kept and can be read from
    ``model_extra``.
    """

    model_config = ConfigDict(extra="allow")


class EmbeddedStatusResponse(BaseModel):
    """A response whose status is nested under the field named by ``status_field``.

    Subclasses with a differently named status field override ``status_field``
    and declare that field with the ApiStatus type.
    """

    model_config = ConfigDict(extra="allow")

    status_field: ClassVar[str] = "base"

    base: ApiStatus = Field(default_factory=ApiStatus)

    def _status(self) -> ApiStatus:
        status = getattr(self, self.status_field, None)
        if isinstance(status, ApiStatus):
            return status
        # Undeclared field kept as extra data
        return ApiStatus.model_validate(status or {})

    def status_code(self) -> int:
        return self._status().status_code()

    def status_message(self) -> str:
        return self._status().status_message()
