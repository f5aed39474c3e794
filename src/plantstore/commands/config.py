"""Config commands -- view and change which storefront server is used.

Provides the ``plantstore config`` sub-command group. Profiles are stored
as JSON under the config directory; the default profile needs no file
until something about it is changed.
"""

from __future__ import annotations

import typer

from plantstore.commands import active_profile, reporting_errors
from plantstore.output import format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective profile after all overrides are applied.

    Example::

        plantstore config show
        plantstore --base-url http://staging:3001 config show --json
    """
    from plantstore.config import get_config_dir, list_profiles

    with reporting_errors():
        profile = active_profile(ctx)
        saved = list_profiles()
    info(f"Config directory: {get_config_dir()}")
    info(f"Saved profiles: {', '.join(saved) or '(none)'}")
    format_response(profile.model_dump(mode="json"))


@config_app.command("set-base-url")
def config_set_base_url(
    ctx: typer.Context,
    url: str = typer.Argument(help="Server origin, e.g. http://localhost:3001."),
) -> None:
    """Point the active profile at another server and save it."""
    from plantstore.config import save_profile

    with reporting_errors():
        profile = active_profile(ctx)
        profile.base_url = url
        save_profile(profile)
    success(f'Profile "{profile.name}" now uses {url}.')


@config_app.command("use")
def config_use(
    profile_name: str = typer.Argument(help="Profile to make the default."),
) -> None:
    """Make *profile_name* the default profile."""
    from plantstore.config import load_global_config, profile_exists, save_global_config
    from plantstore.exceptions import ConfigError

    with reporting_errors():
        if profile_name != "default" and not profile_exists(profile_name):
            raise ConfigError(f"Profile '{profile_name}' does not exist")
        config = load_global_config()
        config.default_profile = profile_name
        save_global_config(config)
    success(f'Default profile set to "{profile_name}".')
