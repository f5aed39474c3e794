"""Asynchronous request pipeline -- mirrors :class:`~plantstore.client.sync_client.RequestPipeline`.

:class:`AsyncRequestPipeline` wraps :class:`httpx.AsyncClient` and applies
the same rules as the blocking pipeline: bearer injection, one
refresh-and-replay on a 401, and typed error mapping. The refresher is
awaited, which lets :class:`~plantstore.session.AsyncSession` share a
single in-flight refresh between concurrent calls.

Every call carries its own retry marker, so two calls running on the same
event loop never suppress or trigger each other's retry.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional

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

AsyncRefresher = Callable[[], Awaitable[Optional[str]]]


class AsyncRequestPipeline:
    """Non-blocking authenticated HTTP pipeline for one session.

    Args:
        profile: Supplies ``base_url`` and request settings (timeout, SSL).
        store: Where the access credential is read from and written to.
        refresher: Coroutine function called on a 401; returns the new
            credential or ``None``.
        transport: Optional async httpx transport.

    Example::

        async with AsyncRequestPipeline(profile, store) as pipeline:
            response = await pipeline.get("plants")
    """

    def __init__(
        self,
        profile: Profile,
        store: CredentialStore,
        refresher: Optional[AsyncRefresher] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._profile = profile
        self._store = store
        self._refresher = refresher
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------ #
    # Async lifecycle
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> AsyncRequestPipeline:
        self.open()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    def open(self) -> None:
        if self._client is not None:
            return
        config = self._profile.request
        self._client = httpx.AsyncClient(
            base_url=self._profile.base_url,
            timeout=config.timeout,
            verify=config.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def set_refresher(self, refresher: Optional[AsyncRefresher]) -> None:
        self._refresher = refresher

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    async def send(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        allow_refresh: bool = True,
    ) -> httpx.Response:
        """Send a request with the stored credential, recovering from one 401.

        Behaves like :meth:`RequestPipeline.send
        <plantstore.client.sync_client.RequestPipeline.send>` but awaits
        the transport and the refresher.
        """
        descriptor = build_descriptor(method, path, body)
        ctx = CallContext(retried=not allow_refresh)
        descriptor.authorize(self._store.get())

        response = await self._dispatch(descriptor)
        if response.status_code == UNAUTHORIZED and not ctx.retried:
            ctx.retried = True
            credential = await self._refresh()
            if credential:
                self._store.set(credential)
                descriptor.authorize(credential)
                get_output().debug(f"Retrying {descriptor.method} {descriptor.path} with refreshed token")
                response = await self._dispatch(descriptor)
            else:
                get_output().debug("Token refresh yielded no credential")

        raise_for_status(response)
        return response

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.send("GET", path, **kwargs)

    async def post(self, path: str, body: Any = None, **kwargs: Any) -> httpx.Response:
        return await self.send("POST", path, body, **kwargs)

    async def put(self, path: str, body: Any = None, **kwargs: Any) -> httpx.Response:
        return await self.send("PUT", path, body, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.send("DELETE", path, **kwargs)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _refresh(self) -> Optional[str]:
        if self._refresher is None:
            return None
        get_output().debug("Received 401, refreshing access token")
        return await self._refresher()

    async def _dispatch(self, descriptor: RequestDescriptor) -> httpx.Response:
        self.open()
        assert self._client is not None
        get_output().debug(f"{descriptor.method} {descriptor.path}")
        try:
            response = await self._client.request(**descriptor.to_httpx())
        except httpx.TransportError as exc:
            raise TransportError(f"Connection failed: {exc}") from exc
        except httpx.RequestError as exc:
            raise TransportError(f"Request failed: {exc}") from exc
        get_output().debug(f"HTTP {response.status_code} {descriptor.method} {descriptor.path}")
        return response
