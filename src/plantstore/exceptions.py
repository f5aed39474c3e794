"""Exception hierarchy for plantstore.

All exceptions inherit from :class:`PlantStoreError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`plantstore.exit_codes`.
The top-level error handler in :func:`plantstore.app.main` catches
``PlantStoreError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    PlantStoreError (exit 1)
    +-- ValidationError      (exit 2)
    +-- AuthenticationError  (exit 3)
    +-- UnauthorizedError    (exit 3)
    +-- TransportError       (exit 4 / 5 / 6 depending on status)
    +-- ConfigError          (exit 1)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from plantstore.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)

if TYPE_CHECKING:
    import httpx


class PlantStoreError(Exception):
    """Base exception for all plantstore errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`plantstore.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ValidationError(PlantStoreError):
    """Raised for input rejected locally, before any request is sent."""

    exit_code = EXIT_INVALID_USAGE


class AuthenticationError(PlantStoreError):
    """Raised when login or registration does not yield an access token."""

    exit_code = EXIT_AUTH_FAILURE


class UnauthorizedError(PlantStoreError):
    """Raised when the server answers HTTP 401 and the session could not recover.

    The originating :class:`httpx.Response` is kept on :attr:`response` so
    callers can inspect the rejected request.
    """

    exit_code = EXIT_AUTH_FAILURE
    status_code = 401

    def __init__(self, message: str, response: Optional[httpx.Response] = None):
        super().__init__(message)
        self.response = response


class TransportError(PlantStoreError):
    """Raised for any non-401 HTTP error status or a network-level failure.

    ``status_code`` is ``None`` when no response was received at all
    (timeout, DNS resolution, connection refused).
    """

    exit_code = EXIT_SERVER_ERROR

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Optional[httpx.Response] = None,
    ):
        if status_code is None:
            exit_code = EXIT_CONNECTION_ERROR
        elif status_code == 404:
            exit_code = EXIT_NOT_FOUND
        else:
            exit_code = EXIT_SERVER_ERROR
        super().__init__(message, exit_code=exit_code)
        self.status_code = status_code
        self.response = response


class ConfigError(PlantStoreError):
    """Raised for configuration problems (missing profiles, invalid JSON)."""

    exit_code = EXIT_GENERIC_FAILURE
