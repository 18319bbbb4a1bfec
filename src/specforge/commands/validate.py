"""Validate command -- check a document and its vendor extensions.

Loading already enforces the minimal OpenAPI contract, so a document that
fails it exits with :data:`~specforge.exit_codes.EXIT_VALIDATION_ERROR`
before any extension is looked at. The extension validators are advisory;
their findings are collected per operation and reported together.
"""

from __future__ import annotations

from typing import Optional

import typer

from specforge.commands.inspect import load_document
from specforge.exceptions import RouteConflictError
from specforge.exit_codes import EXIT_EXTENSION_PROBLEMS
from specforge.extensions import validate_operation_extensions
from specforge.output import error, format_response, success, warning
from specforge.parser import get_all_operations
from specforge.route_map import build_route_map


def validate_command(
    spec: Optional[str] = typer.Argument(
        None, help="Document file path, URL, or '-' for stdin."
    ),
) -> None:
    """Validate a document and the extension content of every operation.

    Route collisions between aliases and canonical paths are reported as a
    warning, or as a problem when strict route conflicts are configured.

    Example::

        specforge validate openapi.yaml
    """
    document, config = load_document(spec)
    records = get_all_operations(document)

    problems: list[str] = []
    for record in records:
        where = f"{record.method.value.upper()} {record.path}"
        for problem in validate_operation_extensions(record.operation):
            problems.append(f"{where}: {problem}")

    try:
        build_route_map(document, strict=True)
    except RouteConflictError as exc:
        if config.routes.strict_conflicts:
            problems.append(str(exc))
        else:
            warning(str(exc))

    format_response({
        "valid": not problems,
        "operations": len(records),
        "problems": problems,
    })

    if problems:
        error(f"{len(problems)} problem(s) found")
        raise typer.Exit(code=EXIT_EXTENSION_PROBLEMS)
    success(f"{document.info.title} {document.info.version} is valid")
