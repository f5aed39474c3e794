"""Tests for the blocking session controller."""

from __future__ import annotations

import json
from typing import Optional

import httpx
import pytest

from plantstore.auth.credential_store import MemoryCredentialStore, NullCredentialStore
from plantstore.exceptions import AuthenticationError, UnauthorizedError
from plantstore.models import EndpointsConfig, Profile
from plantstore.session import Session


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_profile(**overrides) -> Profile:
    return Profile(name="test", base_url="https://api.example.com", **overrides)


class Recorder:
    """MockTransport handler that records requests and answers from a route table."""

    def __init__(self, routes: dict[str, httpx.Response | Exception]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        answer = self.routes.get(f"{request.method} {request.url.path}")
        if answer is None:
            return httpx.Response(404)
        if isinstance(answer, Exception):
            raise answer
        return httpx.Response(
            answer.status_code, content=answer.content, headers=answer.headers
        )

    @property
    def paths(self) -> list[str]:
        return [f"{r.method} {r.url.path}" for r in self.requests]


def _session(routes, store=None, profile=None) -> tuple[Session, Recorder]:
    recorder = Recorder(routes)
    session = Session(
        profile or _make_profile(),
        store if store is not None else MemoryCredentialStore(),
        transport=httpx.MockTransport(recorder),
    )
    return session, recorder


# ---------------------------------------------------------------------------
# login / register
# ---------------------------------------------------------------------------


class TestLogin:
    def test_success_stores_token_and_returns_payload(self, quiet_output) -> None:
        payload = {"accessToken": "X", "user": {"email": "a@b.com"}}
        session, recorder = _session({"POST /auth/login": httpx.Response(200, json=payload)})

        with session:
            assert session.login("a@b.com", "pw") == payload

        assert session.store.get() == "X"
        assert session.is_authenticated() is True
        assert json.loads(recorder.requests[0].content) == {"email": "a@b.com", "password": "pw"}

    def test_missing_token_fails_and_leaves_store_untouched(self, quiet_output) -> None:
        store = MemoryCredentialStore("OLD")
        session, _ = _session({"POST /auth/login": httpx.Response(200, json={})}, store)

        with session, pytest.raises(AuthenticationError, match="no accessToken"):
            session.login("a@b.com", "pw")

        assert store.get() == "OLD"

    @pytest.mark.parametrize("token", [None, 42, ""])
    def test_unusable_token_fails(self, quiet_output, token) -> None:
        session, _ = _session(
            {"POST /auth/login": httpx.Response(200, json={"accessToken": token})}
        )

        with session, pytest.raises(AuthenticationError):
            session.login("a@b.com", "pw")

        assert session.is_authenticated() is False

    def test_server_rejection_is_authentication_error(self, quiet_output) -> None:
        session, recorder = _session(
            {"POST /auth/login": httpx.Response(400, json={"message": "Invalid credentials"})}
        )

        with session, pytest.raises(AuthenticationError, match="Invalid credentials"):
            session.login("a@b.com", "wrong")

        assert recorder.paths == ["POST /auth/login"]

    def test_401_on_login_does_not_trigger_refresh(self, quiet_output) -> None:
        session, recorder = _session(
            {
                "POST /auth/login": httpx.Response(401),
                "POST /auth/refreshToken": httpx.Response(200, json={"accessToken": "R"}),
            },
            MemoryCredentialStore("OLD"),
        )

        with session, pytest.raises(AuthenticationError):
            session.login("a@b.com", "pw")

        assert recorder.paths == ["POST /auth/login"]
        assert session.store.get() == "OLD"

    def test_network_failure_is_authentication_error(self, quiet_output) -> None:
        session, _ = _session(
            {"POST /auth/login": httpx.ConnectError("Connection refused")}
        )

        with session, pytest.raises(AuthenticationError, match="Connection failed"):
            session.login("a@b.com", "pw")


class TestRegister:
    def test_success_posts_to_register_endpoint(self, quiet_output) -> None:
        session, recorder = _session(
            {"POST /auth/register": httpx.Response(201, json={"accessToken": "NEW"})}
        )

        with session:
            session.register("new@b.com", "pw")

        assert recorder.paths == ["POST /auth/register"]
        assert session.store.get() == "NEW"

    def test_duplicate_account(self, quiet_output) -> None:
        session, _ = _session(
            {"POST /auth/register": httpx.Response(409, json={"message": "User already exists"})}
        )

        with session, pytest.raises(AuthenticationError, match="Registration failed"):
            session.register("a@b.com", "pw")

    def test_custom_endpoints(self, quiet_output) -> None:
        profile = _make_profile(endpoints=EndpointsConfig(signup="api/auth/register"))
        session, recorder = _session(
            {"POST /api/auth/register": httpx.Response(200, json={"accessToken": "A"})},
            profile=profile,
        )

        with session:
            session.register("a@b.com", "pw")

        assert recorder.paths == ["POST /api/auth/register"]


# ---------------------------------------------------------------------------
# refresh
# ---------------------------------------------------------------------------


class TestRefresh:
    def test_returns_new_token_without_body(self, quiet_output) -> None:
        store = MemoryCredentialStore("T1")
        session, recorder = _session(
            {"POST /auth/refreshToken": httpx.Response(200, json={"accessToken": "T2"})}, store
        )

        with session:
            assert session.refresh() == "T2"

        request = recorder.requests[0]
        assert request.content == b""
        assert request.headers["authorization"] == "Bearer T1"
        # Persisting is the pipeline's job.
        assert store.get() == "T1"

    @pytest.mark.parametrize(
        "answer",
        [
            httpx.Response(401),
            httpx.Response(500, json={"message": "boom"}),
            httpx.Response(200, json={"user": {}}),
            httpx.Response(200, text="ok"),
            httpx.ConnectError("Connection refused"),
        ],
    )
    def test_failures_yield_none(self, quiet_output, answer) -> None:
        session, recorder = _session({"POST /auth/refreshToken": answer}, MemoryCredentialStore("T1"))

        with session:
            assert session.refresh() is None

        assert recorder.paths == ["POST /auth/refreshToken"]

    def test_rejected_refresh_never_recurses(self, quiet_output) -> None:
        session, recorder = _session(
            {
                "GET /plants": httpx.Response(401),
                "POST /auth/refreshToken": httpx.Response(401),
            },
            MemoryCredentialStore("T1"),
        )

        with session, pytest.raises(UnauthorizedError):
            session.pipeline.get("plants")

        assert recorder.paths == ["GET /plants", "POST /auth/refreshToken"]

    def test_redirect_loop_yields_none(self, quiet_output) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"Location": str(request.url)})

        with Session(
            _make_profile(), MemoryCredentialStore("T1"), transport=httpx.MockTransport(handler)
        ) as session:
            assert session.refresh() is None

    def test_redirect_loop_during_refresh_keeps_original_401(self, quiet_output) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/auth/refreshToken":
                return httpx.Response(302, headers={"Location": str(request.url)})
            return httpx.Response(401, json={"message": "jwt expired"})

        store = MemoryCredentialStore("T1")
        with Session(_make_profile(), store, transport=httpx.MockTransport(handler)) as session:
            with pytest.raises(UnauthorizedError, match="jwt expired"):
                session.pipeline.get("plants")

        assert store.get() == "T1"

    def test_transparent_recovery_through_pipeline(self, quiet_output) -> None:
        seen: list[Optional[str]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/auth/refreshToken":
                return httpx.Response(200, json={"accessToken": "T2"})
            seen.append(request.headers.get("authorization"))
            if request.headers.get("authorization") == "Bearer T2":
                return httpx.Response(200, json=[{"_id": "1"}])
            return httpx.Response(401)

        store = MemoryCredentialStore("T1")
        with Session(_make_profile(), store, transport=httpx.MockTransport(handler)) as session:
            assert session.pipeline.get("plants").json() == [{"_id": "1"}]

        assert seen == ["Bearer T1", "Bearer T2"]
        assert store.get() == "T2"


# ---------------------------------------------------------------------------
# logout / is_authenticated / isolation
# ---------------------------------------------------------------------------


class TestLogout:
    def test_logout_is_local_and_idempotent(self, quiet_output) -> None:
        session, recorder = _session({}, MemoryCredentialStore("X"))

        session.logout()
        session.logout()

        assert session.is_authenticated() is False
        assert recorder.requests == []

    def test_requests_after_logout_are_anonymous(self, quiet_output) -> None:
        session, recorder = _session(
            {"GET /plants": httpx.Response(200, json=[])}, MemoryCredentialStore("X")
        )

        with session:
            session.logout()
            session.pipeline.get("plants")

        assert "authorization" not in recorder.requests[0].headers


class TestSessionState:
    def test_default_profile_and_store(self) -> None:
        session = Session()
        assert session.profile.base_url == "http://localhost:3001"
        assert isinstance(session.store, MemoryCredentialStore)
        assert session.is_authenticated() is False

    def test_independent_sessions_do_not_share_credentials(self, quiet_output) -> None:
        first, _ = _session({"POST /auth/login": httpx.Response(200, json={"accessToken": "A"})})
        second, _ = _session({})

        with first:
            first.login("a@b.com", "pw")

        assert first.is_authenticated() is True
        assert second.is_authenticated() is False

    def test_null_store_keeps_working_anonymously(self, quiet_output) -> None:
        session, recorder = _session(
            {
                "POST /auth/login": httpx.Response(200, json={"accessToken": "A"}),
                "GET /plants": httpx.Response(200, json=[]),
            },
            NullCredentialStore(),
        )

        with session:
            session.login("a@b.com", "pw")
            session.pipeline.get("plants")

        assert session.is_authenticated() is False
        assert "authorization" not in recorder.requests[1].headers
