"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~plantstore.exceptions.PlantStoreError` subclass.
Shell wrappers can inspect the exit code to tell a rejected login apart
from an unreachable server without parsing stderr.

Example::

    $ plantstore plants list
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- not logged in, or the session could not be refreshed
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or failed local validation."""

EXIT_AUTH_FAILURE = 3
"""Authentication failed or the stored credential was rejected."""

EXIT_NOT_FOUND = 4
"""The requested plant record was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The remote server returned an HTTP error status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
