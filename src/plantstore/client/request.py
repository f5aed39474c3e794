"""Request descriptors and the per-call retry marker.

These pieces are shared by :class:`~plantstore.client.sync_client.RequestPipeline`
and :class:`~plantstore.client.async_client.AsyncRequestPipeline` so that
both variants build, authorise, and judge requests identically.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from plantstore.client.response import error_detail
from plantstore.exceptions import TransportError, UnauthorizedError, ValidationError

UNAUTHORIZED = 401


@dataclass
class RequestDescriptor:
    """One outgoing request, before it is handed to the transport.

    ``path`` is always relative to the pipeline's base URL. The descriptor
    is kept for the lifetime of the call so that a retry replays exactly
    the same method, path, and body.
    """

    method: str
    path: str
    body: Any = None
    headers: dict[str, str] = field(default_factory=lambda: {"Accept": "application/json"})

    def authorize(self, credential: Optional[str]) -> None:
        """Set (or clear) the bearer ``Authorization`` header."""
        if credential:
            self.headers["Authorization"] = f"Bearer {credential}"
        else:
            self.headers.pop("Authorization", None)

    def to_httpx(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "method": self.method,
            "url": self.path,
            "headers": dict(self.headers),
        }
        if self.body is not None:
            kwargs["json"] = self.body
        return kwargs


@dataclass
class CallContext:
    """Execution context of a single logical call.

    ``retried`` is the retry marker: once set, a 401 for this call is final.
    Each call gets its own context, so concurrent calls never share it.
    """

    retried: bool = False


def build_descriptor(method: str, path: str, body: Any = None) -> RequestDescriptor:
    """Validate *path* and return a descriptor for it.

    Raises:
        ValidationError: If *path* names a scheme or host of its own.
    """
    try:
        url = httpx.URL(path)
    except httpx.InvalidURL as exc:
        raise ValidationError(f"Invalid request path {path!r}: {exc}") from exc
    if url.scheme or url.host:
        raise ValidationError(
            f"Request path must be relative to the base URL, got {path!r}"
        )
    return RequestDescriptor(method=method.upper(), path=path, body=body)


def raise_for_status(response: httpx.Response) -> None:
    """Raise the typed error for an HTTP error status, if any."""
    status = response.status_code
    if status < 400:
        return
    message = error_detail(response)
    if status == UNAUTHORIZED:
        raise UnauthorizedError(message, response=response)
    raise TransportError(message, status_code=status, response=response)
