"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specforge.exceptions.SpecForgeError` subclass.
Shell wrappers can inspect the exit code to tell a malformed file apart from a
document that parsed but failed the minimal OpenAPI contract.

Example::

    $ specforge validate broken.yaml
    $ echo $?
    8   # EXIT_VALIDATION_ERROR -- info.title is missing
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_LOAD_ERROR = 6
"""The document could not be read (missing file, network failure, empty input)."""

EXIT_FORMAT_ERROR = 7
"""The input text is not well-formed JSON or YAML."""

EXIT_VALIDATION_ERROR = 8
"""The document deserialised but failed the minimal OpenAPI 3.x contract."""

EXIT_ROUTE_CONFLICT = 9
"""Two routes collided on the same ``METHOD:path`` key in strict mode."""

EXIT_EXTENSION_PROBLEMS = 10
"""``specforge validate`` found malformed vendor-extension content."""
