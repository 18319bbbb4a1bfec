"""Exception hierarchy for specforge.

All exceptions inherit from :class:`SpecForgeError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specforge.exit_codes`.
The top-level error handler in :func:`specforge.app.main` catches
``SpecForgeError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Malformed vendor-extension *content* never raises: the extension validators
return booleans and the reference resolver returns ``None``.

Subclass hierarchy::

    SpecForgeError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- SpecLoadError       (exit 6)
    +-- FormatError         (exit 7)
    +-- ValidationError     (exit 8)
    +-- RouteConflictError  (exit 9)
    +-- StateError          (exit 1)
    +-- ConfigError         (exit 1)
"""

from __future__ import annotations

from specforge.exit_codes import (
    EXIT_FORMAT_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_LOAD_ERROR,
    EXIT_ROUTE_CONFLICT,
    EXIT_VALIDATION_ERROR,
)


class SpecForgeError(Exception):
    """Base exception for all specforge errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specforge.exit_codes`. The entry point catches
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


class InvalidUsageError(SpecForgeError):
    """Raised for invalid CLI arguments or a missing document source."""

    exit_code = EXIT_INVALID_USAGE


class SpecLoadError(SpecForgeError):
    """Raised when raw document text cannot be read from a file, URL, or stdin."""

    exit_code = EXIT_LOAD_ERROR


class FormatError(SpecForgeError):
    """Raised when input text is not well-formed JSON or YAML.

    The message wraps the underlying deserialisation failure.
    """

    exit_code = EXIT_FORMAT_ERROR


class ValidationError(SpecForgeError):
    """Raised when a deserialised document fails the minimal OpenAPI contract.

    Args:
        message: Human-readable description of the failed check.
        field: Dotted name of the field that failed (``"info.title"``).
    """

    exit_code = EXIT_VALIDATION_ERROR

    def __init__(self, message: str, field: str):
        super().__init__(message)
        self.field = field


class RouteConflictError(SpecForgeError):
    """Raised by strict route-map construction when two routes share a key.

    Args:
        message: Human-readable description of the collision.
        key: The colliding ``METHOD:path`` key.
    """

    exit_code = EXIT_ROUTE_CONFLICT

    def __init__(self, message: str, key: str):
        super().__init__(message)
        self.key = key


class StateError(SpecForgeError):
    """Raised when a parser accessor is used before any document was loaded."""


class ConfigError(SpecForgeError):
    """Raised for configuration problems (invalid JSON, bad environment values)."""
