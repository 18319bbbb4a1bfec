"""specforge -- Parse OpenAPI 3.x documents and their SpecForge vendor extensions.

This package loads an OpenAPI 3.x document, checks its minimal structural
contract, and exposes a normalised view of its operations together with three
vendor-extension facets carried on each operation:

* ``x-route-aliases`` -- alternate path templates for the same operation.
* ``x-custom-tags`` -- categorisation tags richer than OpenAPI ``tags``.
* ``x-permissions`` -- required/optional permissions, roles, and scopes.

Typical usage::

    from specforge.parser import SpecParser
    from specforge.route_map import build_route_map

    parser = SpecParser()
    document = parser.parse(open("openapi.yaml").read())
    routes = build_route_map(document)

Modules:
    models: Pydantic models for the document, extensions, and configuration.
    parser: Intake, minimal validation, traversal, and ``$ref`` resolution.
    extensions: Stateless handlers for the three vendor extensions.
    route_map: Alias-aware ``METHOD:path`` lookup construction.
    config: XDG-aware configuration with precedence resolution.
    output: stdout/stderr formatting with Rich support.
    app: Typer application and CLI entry point.
"""

__version__ = "0.3.0"
