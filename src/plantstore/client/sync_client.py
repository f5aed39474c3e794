"""Blocking request pipeline with bearer injection and refresh-on-401.

This module provides :class:`RequestPipeline`, which wraps
:class:`httpx.Client` and layers on:

- **Credential injection** -- the token held by the
  :class:`~plantstore.auth.credential_store.CredentialStore` is sent as
  ``Authorization: Bearer <token>`` on every request; no header is sent
  while the store is empty.
- **Refresh and retry** -- a 401 triggers one call to the refresher. If it
  yields a new token, the token is persisted and the original request is
  replayed once with it. The replay's outcome is final.
- **Error mapping** -- 401 becomes
  :class:`~plantstore.exceptions.UnauthorizedError`, every other error
  status and every network failure becomes
  :class:`~plantstore.exceptions.TransportError`. Nothing but the 401 case
  is ever retried.

See Also:
    :class:`~plantstore.client.async_client.AsyncRequestPipeline` for the
    non-blocking equivalent.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import httpx

from plantstore.auth.credential_store import CredentialStore
from plantstore.client.request import (
    UNAUTHORIZED,
    CallContext,
    RequestDescriptor,
    build_descriptor,
    raise_for_status,
)
from plantstore.exceptions import TransportError
from plantstore.models import Profile
from plantstore.output import get_output

Refresher = Callable[[], Optional[str]]


class RequestPipeline:
    """Authenticated HTTP pipeline for one session.

    Can be used as a context manager, or opened lazily on the first call
    and closed with :meth:`close`.

    Args:
        profile: Supplies ``base_url`` and request settings (timeout, SSL).
        store: Where the access credential is read from and written to.
        refresher: Called on a 401 to obtain a new credential; returns
            ``None`` when the session cannot be recovered. Without one, a
            401 is always final.
        transport: Optional httpx transport (e.g. :class:`httpx.MockTransport`).

    Example::

        with RequestPipeline(profile, store, refresher=session.refresh) as pipeline:
            response = pipeline.get("plants")
    """

    def __init__(
        self,
        profile: Profile,
        store: CredentialStore,
        refresher: Optional[Refresher] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._profile = profile
        self._store = store
        self._refresher = refresher
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def __enter__(self) -> RequestPipeline:
        self.open()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def open(self) -> None:
        if self._client is not None:
            return
        config = self._profile.request
        self._client = httpx.Client(
            base_url=self._profile.base_url,
            timeout=config.timeout,
            verify=config.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )

    def close(self) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def set_refresher(self, refresher: Optional[Refresher]) -> None:
        self._refresher = refresher

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    def send(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        allow_refresh: bool = True,
    ) -> httpx.Response:
        """Send a request with the stored credential, recovering from one 401.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE).
            path: Path relative to the profile's ``base_url``.
            body: Optional JSON-serialisable body.
            allow_refresh: When ``False`` the call starts with its retry
                marker already set, so a 401 is final. Used for the auth
                endpoints themselves.

        Returns:
            The successful :class:`httpx.Response` (of the replay, if one
            happened).

        Raises:
            ValidationError: If *path* is not relative.
            UnauthorizedError: On a 401 that refresh could not fix.
            TransportError: On any other error status or network failure.
        """
        descriptor = build_descriptor(method, path, body)
        ctx = CallContext(retried=not allow_refresh)
        descriptor.authorize(self._store.get())

        response = self._dispatch(descriptor)
        if response.status_code == UNAUTHORIZED and not ctx.retried:
            ctx.retried = True
            credential = self._refresh()
            if credential:
                self._store.set(credential)
                descriptor.authorize(credential)
                get_output().debug(f"Retrying {descriptor.method} {descriptor.path} with refreshed token")
                response = self._dispatch(descriptor)
            else:
                get_output().debug("Token refresh yielded no credential")

        raise_for_status(response)
        return response

    def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.send("GET", path, **kwargs)

    def post(self, path: str, body: Any = None, **kwargs: Any) -> httpx.Response:
        return self.send("POST", path, body, **kwargs)

    def put(self, path: str, body: Any = None, **kwargs: Any) -> httpx.Response:
        return self.send("PUT", path, body, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.send("DELETE", path, **kwargs)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _refresh(self) -> Optional[str]:
        if self._refresher is None:
            return None
        get_output().debug("Received 401, refreshing access token")
        return self._refresher()

    def _dispatch(self, descriptor: RequestDescriptor) -> httpx.Response:
        """Hand *descriptor* to the transport, mapping network failures."""
        self.open()
        assert self._client is not None
        get_output().debug(f"{descriptor.method} {descriptor.path}")
        try:
            response = self._client.request(**descriptor.to_httpx())
        except httpx.TransportError as exc:
            raise TransportError(f"Connection failed: {exc}") from exc
        except httpx.RequestError as exc:
            raise TransportError(f"Request failed: {exc}") from exc
        get_output().debug(f"HTTP {response.status_code} {descriptor.method} {descriptor.path}")
        return response
