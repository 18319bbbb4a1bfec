"""Inspect commands -- examine a document's contents.

Provides the ``specforge inspect`` sub-command group with read-only commands
for viewing an OpenAPI document: general info, the flattened operations with
their extension facets, the alias-aware route map, and fully expanded schema
trees. Every sub-command takes an optional ``SPEC`` argument (file, URL, or
``-``) and falls back to the configured ``default_spec``.
"""

from __future__ import annotations

from typing import Any, Optional

import typer
from rich.markup import escape
from rich.tree import Tree

from specforge.exceptions import SpecForgeError
from specforge.exit_codes import EXIT_INVALID_USAGE
from specforge.extensions.custom_tags import get_custom_tags, get_tags_by_category
from specforge.extensions.permissions import get_required_permissions
from specforge.extensions.route_aliases import get_aliases
from specforge.models import Components, Document, GlobalConfig, PathItem, record_field
from specforge.output import debug, error, format_response, get_output, info, print_tree


inspect_app = typer.Typer(no_args_is_help=True)

_SPEC_ARGUMENT_HELP = "Document file path, URL, or '-' for stdin."


def load_document(
    spec: Optional[str],
    max_depth: Optional[int] = None,
    strict_routes: Optional[bool] = None,
) -> tuple[Document, GlobalConfig]:
    """Resolve the effective config, then load and validate the document.

    Args:
        spec: Explicit document source. When ``None`` the configured
            ``default_spec`` (or ``SPECFORGE_SPEC``) is used.
        max_depth: ``--max-depth`` override for schema expansion.
        strict_routes: ``--strict`` override for route-map construction.

    Returns:
        A ``(Document, GlobalConfig)`` tuple.

    Raises:
        typer.Exit: With the failing error's exit code when config cannot be
            resolved or the document cannot be loaded or validated.
    """
    from specforge.config import resolve_config
    from specforge.exceptions import InvalidUsageError
    from specforge.parser import create_parser, load_spec

    try:
        config = resolve_config(
            cli_spec=spec, cli_max_depth=max_depth, cli_strict_routes=strict_routes
        )
        source = config.default_spec
        if not source:
            raise InvalidUsageError(
                "No document given. Pass SPEC or set SPECFORGE_SPEC / default_spec."
            )
        debug(f"Loading document from {source}")
        document = create_parser().parse_object(load_spec(source))
    except SpecForgeError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    return document, config


def _text(values: list[Any]) -> str:
    return ", ".join(str(v) for v in values) or "-"


def _cell(value: Any) -> str:
    return str(value) if value else "-"


@inspect_app.command("info")
def inspect_info(
    spec: Optional[str] = typer.Argument(None, help=_SPEC_ARGUMENT_HELP),
) -> None:
    """Show document info (title, version, servers, operation count).

    Example::

        specforge inspect info openapi.yaml
    """
    from specforge.parser import get_all_operations

    document, _ = load_document(spec)

    servers = document.servers if isinstance(document.servers, list) else []
    data: dict[str, Any] = {
        "title": document.info.title,
        "version": document.info.version,
        "openapi_version": document.openapi,
        "description": document.info.description or "-",
        "servers": [url for url in (record_field(s, "url") for s in servers) if url],
        "paths": sum(isinstance(item, PathItem) for item in document.paths.values()),
        "operations": len(get_all_operations(document)),
    }
    components = document.components
    if isinstance(components, Components) and isinstance(components.schemas, dict):
        data["schemas"] = list(components.schemas.keys())

    format_response(data)


@inspect_app.command("operations")
def inspect_operations(
    spec: Optional[str] = typer.Argument(None, help=_SPEC_ARGUMENT_HELP),
    tag_category: Optional[str] = typer.Option(
        None, "--tag-category", "-c", help="Only operations with a custom tag in this category."
    ),
) -> None:
    """List every operation with its aliases, custom tags, and required permissions.

    Operations appear in document order.

    Example::

        specforge inspect operations openapi.yaml --tag-category admin
    """
    from specforge.parser import iter_operations

    document, _ = load_document(spec)

    headers = ["Method", "Path", "Summary", "Aliases", "Custom Tags", "Required"]
    rows: list[list[str]] = []
    for record in iter_operations(document):
        op = record.operation
        if tag_category is not None:
            tags = get_tags_by_category(op, tag_category)
            if not tags:
                continue
        else:
            tags = get_custom_tags(op)
        rows.append([
            record.method.value.upper(),
            record.path,
            _cell(op.summary),
            _text(get_aliases(op)),
            _text([record_field(tag, "name") for tag in tags]),
            _text(get_required_permissions(op)),
        ])

    if not rows:
        info("No matching operations.")
        return

    get_output().print_table(
        headers, rows, title=f"{document.info.title} -- Operations ({len(rows)})"
    )


@inspect_app.command("routes")
def inspect_routes(
    spec: Optional[str] = typer.Argument(None, help=_SPEC_ARGUMENT_HELP),
    strict: Optional[bool] = typer.Option(
        None, "--strict/--no-strict", help="Fail when two routes share a METHOD:path key."
    ),
) -> None:
    """Show the alias-aware route map.

    Every canonical path and every ``x-route-aliases`` entry gets one row.
    Without ``--strict`` a later route silently replaces an earlier one with
    the same key.

    Example::

        specforge inspect routes openapi.yaml --strict
    """
    from specforge.route_map import build_route_map

    document, config = load_document(spec, strict_routes=strict)

    try:
        routes = build_route_map(document, strict=config.routes.strict_conflicts)
    except SpecForgeError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    headers = ["Route", "Operation", "Summary"]
    rows = [
        [key, _cell(entry.operation.operation_id), _cell(entry.operation.summary)]
        for key, entry in routes.items()
    ]
    get_output().print_table(headers, rows, title=f"Routes ({len(rows)})")


@inspect_app.command("schema")
def inspect_schema(
    pointer: str = typer.Argument(
        ..., help="Schema name or local pointer, e.g. Pet or #/components/schemas/Pet."
    ),
    spec: Optional[str] = typer.Argument(None, help=_SPEC_ARGUMENT_HELP),
    max_depth: Optional[int] = typer.Option(
        None, "--max-depth", min=1, help="Maximum nesting depth to expand."
    ),
) -> None:
    """Show a schema with every ``$ref`` expanded.

    Self-referential schemas are expanded once per branch; the repeated
    reference is shown as ``$ref``.

    Example::

        specforge inspect schema Pet openapi.yaml
        specforge inspect schema '#/components/schemas/Pet' openapi.yaml --max-depth 3
    """
    from specforge.parser import expand_schema, resolve

    document, config = load_document(spec, max_depth=max_depth)

    ref = pointer if pointer.startswith("#/") else f"#/components/schemas/{pointer}"
    target = resolve(ref, document)
    if target is None:
        error(f"Nothing found at {ref}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    expanded = expand_schema(target, document, max_depth=config.resolver.max_depth)
    if expanded is None:
        error(f"{ref} is not a schema")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    tree = Tree(f"[bold cyan]{escape(ref)}[/bold cyan]")
    _grow(tree, expanded)
    print_tree(tree, expanded)


# ------------------------------------------------------------------ #
# Schema tree rendering
# ------------------------------------------------------------------ #


def _label(name: Any, schema: Any, required: bool = False) -> str:
    if not isinstance(schema, dict):
        kind = f"[dim]{escape(repr(schema))}[/dim]"
    elif "$ref" in schema:
        kind = f"[dim]$ref {escape(str(schema['$ref']))}[/dim]"
    else:
        kind_type = schema.get("type") or "schema"
        if isinstance(kind_type, list):
            kind_type = " | ".join(str(t) for t in kind_type)
        kind = escape(str(kind_type))
        if schema.get("format"):
            kind += f" <{escape(str(schema['format']))}>"
    label = f"[bold]{escape(str(name))}[/bold]: {kind}"
    if required:
        label += " [red]*[/red]"
    return label


def _grow(branch: Tree, schema: Any) -> None:
    # Keywords that are not schema-shaped are shown as leaves.
    if not isinstance(schema, dict):
        return
    required = schema.get("required")
    required_names = (
        {name for name in required if isinstance(name, str)}
        if isinstance(required, list)
        else set()
    )
    properties = schema.get("properties")
    if isinstance(properties, dict):
        for name, child in properties.items():
            _grow(branch.add(_label(name, child, name in required_names)), child)
    if "items" in schema:
        _grow(branch.add(_label("items", schema["items"])), schema["items"])
    for keyword in ("allOf", "anyOf", "oneOf"):
        members = schema.get(keyword)
        if not isinstance(members, list):
            continue
        for index, member in enumerate(members):
            _grow(branch.add(_label(f"{keyword}[{index}]", member)), member)
    if "not" in schema:
        _grow(branch.add(_label("not", schema["not"])), schema["not"])
