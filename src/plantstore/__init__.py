"""plantstore -- client and command line for a garden-plant storefront.

The package talks to the storefront's REST server on behalf of one user
session. A :class:`~plantstore.session.Session` owns the access token,
attaches it to every request, and renews it transparently when the server
reports it expired; :class:`~plantstore.plants.PlantClient` lists, adds,
updates, and removes plant records on top of that session.

Typical use::

    plantstore auth login --email me@example.com
    plantstore plants add --title Fern --description "Shade lover" --frequency 3
    plantstore plants list

Modules:
    app: Typer application and CLI entry point.
    session: Session controller (login, register, refresh, logout).
    plants: Plant record facade.
    client: Request pipelines with refresh-on-401.
    auth: Credential stores.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and profile management.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
