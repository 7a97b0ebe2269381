# wxfabric/types.py
"""Core type definitions and data structures for wxfabric.

This module defines the per-call request data passed between the executor's
attempts and the type aliases for request hooks.
"""

from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import quote_plus

import httpx
from pydantic import BaseModel, Field


class RequestData(BaseModel):
    """Encapsulates the parts of a logical call that stay fixed across attempts.

    The credential is not part of this object; it is appended to
    ``url_template`` separately for each attempt.
    """

    method: str
    url_template: str
    content: bytes | None = None
    headers: dict[str, str] = Field(default_factory=dict)

    def url_for(self, credential: str) -> str:
        """Returns the final URL with the escaped credential as last parameter."""
        return self.url_template + quote_plus(credential)

    def build_request(
        self,
        http_client: httpx.Client | httpx.AsyncClient,
        credential: str,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Request:
        """Builds an httpx.Request for one attempt, using the client's base URL.

        Args:
            http_client: The client whose base URL and default headers apply.
            credential: The credential for this attempt.
            headers: Headers to send instead of ``self.headers``.
        """
        return http_client.build_request(
            method=self.method,
            url=self.url_for(credential),
            content=self.content,
            headers=headers if headers is not None else self.headers,
        )


PreRequestHook = Callable[[str, str, httpx.Headers], None]
"""Type alias for a pre-request hook.

Pre-request hooks are called before every attempt of a logical call.

Args:
    method (str): The HTTP method of the request ("GET" or "POST").
    url_template (str): The URL template, without the credential.
    headers (httpx.Headers): A mutable `httpx.Headers` object. Hooks can
        modify this object in place.
Return:
    None: Hooks are expected to modify arguments in-place or perform side effects.
"""

PostRequestHook = Callable[[httpx.Response, Any, int], None]
"""Type alias for a post-request hook.

Post-request hooks are called after a response has been received and decoded
into the response model, before its status envelope is inspected.

Args:
    response (httpx.Response): The `httpx.Response`. Its request carries the
        URL with the credential masked.
    parsed_model (Any): The decoded response model.
    attempt (int): The attempt number within the logical call (1 or 2).
Return:
    None: Hooks are expected to perform side effects.
"""
