"""Session controller: login, registration, logout, and token refresh.

A :class:`Session` is the explicit, per-context owner of one credential.
It builds the :class:`~plantstore.client.sync_client.RequestPipeline` that
everything else sends through and wires its own :meth:`Session.refresh`
into that pipeline, so expired credentials are renewed without the plant
facade noticing.

Session states::

    Anonymous --login/register--> Authenticated
    Authenticated --refresh--> Authenticated   (credential replaced)
    Authenticated --logout--> Anonymous

Calls to the auth endpoints go out with their retry marker already set
(``allow_refresh=False``): a rejected login is reported as such, and a
rejected refresh can never start another refresh.

:class:`AsyncSession` is the non-blocking twin. Its ``refresh`` is
single-flight: concurrent callers that hit a 401 at the same time share one
refresh request.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import httpx

from plantstore.auth.credential_store import CredentialStore, MemoryCredentialStore
from plantstore.client.async_client import AsyncRequestPipeline
from plantstore.client.response import json_object
from plantstore.client.sync_client import RequestPipeline
from plantstore.exceptions import AuthenticationError, PlantStoreError
from plantstore.models import Credentials, Profile
from plantstore.output import get_output

TOKEN_FIELD = "accessToken"


def _token_from(payload: dict[str, Any]) -> Optional[str]:
    token = payload.get(TOKEN_FIELD)
    return token if isinstance(token, str) and token else None


class _SessionBase:
    """State and the purely local operations shared by both session flavours."""

    def __init__(
        self,
        profile: Optional[Profile] = None,
        store: Optional[CredentialStore] = None,
    ) -> None:
        self._profile = profile or Profile()
        self._store = store if store is not None else MemoryCredentialStore()

    @property
    def profile(self) -> Profile:
        return self._profile

    @property
    def store(self) -> CredentialStore:
        return self._store

    def is_authenticated(self) -> bool:
        """Return whether a credential is stored. Freshness is not checked."""
        return bool(self._store.get())

    def logout(self) -> None:
        """Forget the stored credential. Local only; safe to call repeatedly."""
        self._store.remove()
        get_output().debug(f"Logged out of profile '{self._profile.name}'")

    def _accept(self, response: httpx.Response, action: str) -> dict[str, Any]:
        """Store the token from a login/register *response* and return its payload."""
        payload = json_object(response)
        token = _token_from(payload)
        if token is None:
            raise AuthenticationError(f"{action} failed: no {TOKEN_FIELD} in response")
        self._store.set(token)
        get_output().debug(f"{action} succeeded; credential stored")
        return payload


class Session(_SessionBase):
    """Blocking session for one profile.

    Args:
        profile: Server and request settings. Defaults to ``Profile()``.
        store: Credential storage. Defaults to an in-memory store.
        transport: Optional httpx transport handed to the pipeline.

    Example::

        with Session(profile, FileCredentialStore(profile.name)) as session:
            session.login("a@b.com", "pw")
            plants = PlantClient(session.pipeline).list_plants()
    """

    def __init__(
        self,
        profile: Optional[Profile] = None,
        store: Optional[CredentialStore] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        super().__init__(profile, store)
        self.pipeline = RequestPipeline(
            self._profile, self._store, refresher=self.refresh, transport=transport
        )

    def __enter__(self) -> Session:
        self.pipeline.open()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        self.pipeline.close()

    def login(self, email: str, password: str) -> dict[str, Any]:
        """Log in and store the returned access token.

        Returns:
            The full response payload.

        Raises:
            AuthenticationError: If the request fails or the payload has no
                ``accessToken``. The store is left unchanged.
        """
        return self._authenticate(self._profile.endpoints.login, email, password, "Login")

    def register(self, email: str, password: str) -> dict[str, Any]:
        """Create an account and store the returned access token.

        Same contract as :meth:`login`, against the registration endpoint.
        """
        return self._authenticate(self._profile.endpoints.signup, email, password, "Registration")

    def refresh(self) -> Optional[str]:
        """Exchange the current credential for a new one.

        The request carries no body; the server identifies the session from
        the expiring bearer token or its own cookies.

        Returns:
            The new token, or ``None`` on any failure. Never raises for
            HTTP, network, or payload problems.
        """
        try:
            response = self.pipeline.post(self._profile.endpoints.refresh, allow_refresh=False)
        except (PlantStoreError, httpx.HTTPError) as exc:
            get_output().debug(f"Token refresh failed: {exc}")
            return None
        return _token_from(json_object(response))

    def _authenticate(self, path: str, email: str, password: str, action: str) -> dict[str, Any]:
        body = Credentials(email=email, password=password).model_dump()
        try:
            response = self.pipeline.post(path, body, allow_refresh=False)
        except PlantStoreError as exc:
            raise AuthenticationError(f"{action} failed: {exc}") from exc
        return self._accept(response, action)


class AsyncSession(_SessionBase):
    """Non-blocking session for one profile.

    Mirrors :class:`Session`; every network operation is a coroutine.
    Concurrent :meth:`refresh` calls are coalesced into one request.
    """

    def __init__(
        self,
        profile: Optional[Profile] = None,
        store: Optional[CredentialStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(profile, store)
        self.pipeline = AsyncRequestPipeline(
            self._profile, self._store, refresher=self.refresh, transport=transport
        )
        self._inflight: Optional[asyncio.Future[Optional[str]]] = None

    async def __aenter__(self) -> AsyncSession:
        self.pipeline.open()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.pipeline.aclose()

    async def login(self, email: str, password: str) -> dict[str, Any]:
        """See :meth:`Session.login`."""
        return await self._authenticate(self._profile.endpoints.login, email, password, "Login")

    async def register(self, email: str, password: str) -> dict[str, Any]:
        """See :meth:`Session.register`."""
        return await self._authenticate(
            self._profile.endpoints.signup, email, password, "Registration"
        )

    async def refresh(self) -> Optional[str]:
        """See :meth:`Session.refresh`.

        While a refresh is in flight, further callers await the same result
        instead of sending their own request. A caller being cancelled does
        not cancel the shared refresh.
        """
        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._refresh_once())
            self._inflight.add_done_callback(self._forget_inflight)
        else:
            get_output().debug("Joining in-flight token refresh")
        return await asyncio.shield(self._inflight)

    def _forget_inflight(self, future: asyncio.Future[Optional[str]]) -> None:
        if self._inflight is future:
            self._inflight = None

    async def _refresh_once(self) -> Optional[str]:
        try:
            response = await self.pipeline.post(
                self._profile.endpoints.refresh, allow_refresh=False
            )
        except (PlantStoreError, httpx.HTTPError) as exc:
            get_output().debug(f"Token refresh failed: {exc}")
            return None
        return _token_from(json_object(response))

    async def _authenticate(
        self, path: str, email: str, password: str, action: str
    ) -> dict[str, Any]:
        body = Credentials(email=email, password=password).model_dump()
        try:
            response = await self.pipeline.post(path, body, allow_refresh=False)
        except PlantStoreError as exc:
            raise AuthenticationError(f"{action} failed: {exc}") from exc
        return self._accept(response, action)
