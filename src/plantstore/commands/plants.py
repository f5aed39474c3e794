"""Plant commands -- list, add, update, and remove plant records.

Every command requires a stored access token; without one it exits with
the auth-failure code and points at ``plantstore auth login``. Expired
tokens are renewed transparently by the session.

The add and update commands validate their fields the way the storefront's
forms do (all fields present, frequency a non-negative number) before
anything is sent.
"""

from __future__ import annotations

from typing import Any

import typer

from plantstore.commands import open_session, reporting_errors, require_login
from plantstore.exceptions import ValidationError
from plantstore.output import OutputFormat, format_response, get_output, info, success, suggest
from plantstore.plants import Number, PlantClient, parse_watering_frequency


plants_app = typer.Typer(no_args_is_help=True)

_COLUMNS = ["id", "title", "description", "wateringFrequency", "createdAt"]


def _check_form(title: str, description: str, frequency: str) -> Number:
    """Validate the plant form fields and return the parsed frequency."""
    if not title.strip():
        raise ValidationError("Title is required")
    if not description.strip():
        raise ValidationError("Description is required")
    if not frequency.strip():
        raise ValidationError("Watering frequency is required")
    number = parse_watering_frequency(frequency)
    if number < 0:
        raise ValidationError("Please enter a valid watering frequency")
    return number


def _row(plant: Any) -> list[str]:
    if not isinstance(plant, dict):
        return [str(plant), "", "", "", ""]
    plant_id = plant.get("_id", plant.get("id", ""))
    return [str(plant_id)] + [str(plant.get(key, "")) for key in _COLUMNS[1:]]


@plants_app.command("list")
def plants_list(ctx: typer.Context) -> None:
    """List plant records.

    Example::

        plantstore plants list
        plantstore --json plants list
    """
    with reporting_errors():
        with open_session(ctx) as session:
            require_login(session)
            plants = PlantClient(session.pipeline, session.profile.endpoints).list_plants()

    output = get_output()
    if output.format == OutputFormat.JSON:
        output.format_response(plants)
        return
    if not plants:
        info("No plants yet.")
        suggest("Add one: plantstore plants add")
        return
    items = plants if isinstance(plants, list) else [plants]
    output.print_table(_COLUMNS, [_row(p) for p in items], title="Plants")


@plants_app.command("add")
def plants_add(
    ctx: typer.Context,
    title: str = typer.Option(..., "--title", "-t", prompt=True, help="Plant name."),
    description: str = typer.Option(
        ..., "--description", "-d", prompt=True, help="Short description."
    ),
    frequency: str = typer.Option(
        ..., "--frequency", "-f", prompt="Watering frequency (days)", help="Days between waterings."
    ),
) -> None:
    """Add a plant record.

    Example::

        plantstore plants add --title Fern --description "Likes shade" --frequency 3
    """
    with reporting_errors():
        number = _check_form(title, description, frequency)
        with open_session(ctx) as session:
            require_login(session)
            created = PlantClient(session.pipeline, session.profile.endpoints).add_plant(
                title, description, number
            )
    success(f'Plant "{title}" created.')
    if created is not None:
        format_response(created)


@plants_app.command("update")
def plants_update(
    ctx: typer.Context,
    plant_id: str = typer.Argument(help="Id of the plant to update."),
    title: str = typer.Option(..., "--title", "-t", prompt=True, help="Plant name."),
    description: str = typer.Option(
        ..., "--description", "-d", prompt=True, help="Short description."
    ),
    frequency: str = typer.Option(
        ..., "--frequency", "-f", prompt="Watering frequency (days)", help="Days between waterings."
    ),
) -> None:
    """Replace a plant record with the given fields."""
    with reporting_errors():
        number = _check_form(title, description, frequency)
        with open_session(ctx) as session:
            require_login(session)
            updated = PlantClient(session.pipeline, session.profile.endpoints).update_plant(
                plant_id, title, description, number
            )
    success(f"Plant {plant_id} updated.")
    if updated is not None:
        format_response(updated)


@plants_app.command("remove")
def plants_remove(
    ctx: typer.Context,
    plant_id: str = typer.Argument(help="Id of the plant to remove."),
) -> None:
    """Delete a plant record."""
    with reporting_errors():
        with open_session(ctx) as session:
            require_login(session)
            PlantClient(session.pipeline, session.profile.endpoints).remove_plant(plant_id)
    success(f"Plant {plant_id} removed.")
