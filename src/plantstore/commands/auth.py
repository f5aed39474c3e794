"""Auth commands -- log in, register, log out, and inspect the session.

Provides the ``plantstore auth`` sub-command group. Missing email and
password options are prompted for (passwords with hidden input), so the
commands work both interactively and in scripts.

Typical workflow::

    plantstore auth register --email me@example.com
    plantstore auth status
    plantstore auth logout
"""

from __future__ import annotations

from typing import Optional

import typer

from plantstore.commands import active_profile, open_session, reporting_errors
from plantstore.exit_codes import EXIT_INVALID_USAGE
from plantstore.output import error, format_response, info, success, suggest


auth_app = typer.Typer(no_args_is_help=True)


@auth_app.command("login")
def auth_login(
    ctx: typer.Context,
    email: str = typer.Option(..., "--email", "-e", prompt=True, help="Account email."),
    password: str = typer.Option(
        ..., "--password", prompt=True, hide_input=True, help="Account password."
    ),
) -> None:
    """Log in and store the access token for the active profile.

    Example::

        plantstore auth login --email me@example.com
    """
    with reporting_errors():
        with open_session(ctx) as session:
            session.login(email, password)
    success(f"Logged in as {email}.")
    suggest("List your plants: plantstore plants list")


@auth_app.command("register")
def auth_register(
    ctx: typer.Context,
    email: str = typer.Option(..., "--email", "-e", prompt=True, help="Account email."),
    password: str = typer.Option(
        ..., "--password", prompt=True, hide_input=True, help="Account password."
    ),
    confirm_password: Optional[str] = typer.Option(
        None,
        "--confirm-password",
        hide_input=True,
        help="Repeat the password. Prompted for when omitted.",
    ),
) -> None:
    """Create an account and log in with it.

    All fields are required and the two passwords must match; both are
    checked before anything is sent.

    Example::

        plantstore auth register --email me@example.com
    """
    if confirm_password is None:
        confirm_password = typer.prompt("Confirm password", hide_input=True, default="")

    if not email.strip() or not password or not confirm_password:
        error("Please enter all fields.")
        raise typer.Exit(code=EXIT_INVALID_USAGE)
    if password != confirm_password:
        error("Passwords do not match.")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    with reporting_errors():
        with open_session(ctx) as session:
            session.register(email, password)
    success(f"Registered and logged in as {email}.")
    suggest("Add your first plant: plantstore plants add")


@auth_app.command("logout")
def auth_logout(ctx: typer.Context) -> None:
    """Forget the stored access token. Safe to run when already logged out."""
    with reporting_errors():
        with open_session(ctx) as session:
            session.logout()
    success("Logged out.")
    suggest("Log in again: plantstore auth login")


@auth_app.command("status")
def auth_status(ctx: typer.Context) -> None:
    """Show whether a token is stored for the active profile.

    This is a local check only; the token may still have expired on the
    server, in which case the next request refreshes it.
    """
    with reporting_errors():
        profile = active_profile(ctx)
        with open_session(ctx) as session:
            authenticated = session.is_authenticated()

    format_response(
        {
            "profile": profile.name,
            "base_url": profile.base_url,
            "authenticated": authenticated,
        }
    )
    if not authenticated:
        info("Not logged in.")
        suggest("Log in: plantstore auth login")
