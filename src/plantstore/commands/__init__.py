"""CLI command groups and the helpers they share.

Each command resolves the active profile from the global options stored in
``ctx.obj`` by :func:`~plantstore.app.main_callback`, opens a
:class:`~plantstore.session.Session` for it, and reports
:class:`~plantstore.exceptions.PlantStoreError` failures as an error line
plus the matching exit code.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import typer

from plantstore.auth.credential_store import create_store
from plantstore.config import resolve_config
from plantstore.exceptions import PlantStoreError, UnauthorizedError
from plantstore.exit_codes import EXIT_AUTH_FAILURE
from plantstore.models import Profile
from plantstore.output import error, suggest
from plantstore.session import Session


def active_profile(ctx: typer.Context) -> Profile:
    obj = ctx.obj or {}
    _, profile = resolve_config(
        cli_profile=obj.get("profile"),
        cli_base_url=obj.get("base_url"),
    )
    return profile


def open_session(ctx: typer.Context) -> Session:
    """Build the session for the active profile.

    ``ctx.obj["transport"]``, when present, is handed to httpx; the CLI
    tests use it to plug in :class:`httpx.MockTransport`.
    """
    obj = ctx.obj or {}
    profile = active_profile(ctx)
    return Session(profile, create_store(profile), transport=obj.get("transport"))


def require_login(session: Session) -> None:
    """Exit with the auth-failure code unless a credential is stored."""
    if not session.is_authenticated():
        error("Not logged in.")
        suggest("Log in first: plantstore auth login")
        raise typer.Exit(code=EXIT_AUTH_FAILURE)


@contextmanager
def reporting_errors() -> Iterator[None]:
    """Turn a :class:`PlantStoreError` into an error line and exit code."""
    try:
        yield
    except PlantStoreError as exc:
        error(str(exc))
        if isinstance(exc, UnauthorizedError):
            suggest("Your session has expired. Log in again: plantstore auth login")
        raise typer.Exit(code=exc.exit_code) from None
