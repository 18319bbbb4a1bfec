"""Alias-aware route lookup built from a document's operations.

:func:`build_route_map` flattens the document and keys every operation by
``METHOD:path`` (upper-case method), then adds one more key per
``x-route-aliases`` entry pointing at the *same* operation object::

    GET /users  with  x-route-aliases: ["/accounts", "/members"]

    {
        "GET:/users":    RouteEntry(path="/users",    method=GET, operation=op),
        "GET:/accounts": RouteEntry(path="/accounts", method=GET, operation=op),
        "GET:/members":  RouteEntry(path="/members",  method=GET, operation=op),
    }

Insertion order is canonical path first, then aliases in declared order. On a
key collision the later entry replaces the earlier one. That silently lets an
alias shadow another operation's canonical path; pass ``strict=True`` to get a
:class:`~specforge.exceptions.RouteConflictError` instead.
"""

from __future__ import annotations

from typing import Optional

from specforge.exceptions import RouteConflictError
from specforge.extensions.route_aliases import get_aliases
from specforge.models import Document, HTTPMethod, RouteEntry
from specforge.parser.spec_parser import iter_operations


def route_key(method: HTTPMethod | str, path: str) -> str:
    """Return the ``METHOD:path`` key for *method* and *path*."""
    verb = method.value if isinstance(method, HTTPMethod) else HTTPMethod(method.lower()).value
    return f"{verb.upper()}:{path}"


def build_route_map(document: Document, strict: bool = False) -> dict[str, RouteEntry]:
    """Build the ``METHOD:path`` -> :class:`~specforge.models.RouteEntry` lookup.

    Args:
        document: The loaded document.
        strict: Raise on a key collision instead of overwriting.

    Returns:
        An insertion-ordered dict of route entries.

    Raises:
        RouteConflictError: Only when *strict* is set and two routes collide.
    """
    routes: dict[str, RouteEntry] = {}

    def insert(path: str, method: HTTPMethod, entry: RouteEntry) -> None:
        key = route_key(method, path)
        if strict and key in routes:
            previous = routes[key]
            raise RouteConflictError(
                f"Route {key} is declared twice "
                f"(first for {previous.method.value.upper()} {previous.path})",
                key=key,
            )
        routes[key] = entry

    for record in iter_operations(document):
        insert(
            record.path,
            record.method,
            RouteEntry(path=record.path, method=record.method, operation=record.operation),
        )
        for alias in get_aliases(record.operation):
            insert(
                alias,
                record.method,
                RouteEntry(path=alias, method=record.method, operation=record.operation),
            )

    return routes


def _is_path_param(segment: str) -> bool:
    return segment.startswith("{") and segment.endswith("}")


def _template_matches(template: str, path: str) -> bool:
    template_parts = template.strip("/").split("/")
    path_parts = path.strip("/").split("/")
    if len(template_parts) != len(path_parts):
        return False
    return all(
        (_is_path_param(expected) and actual != "") or expected == actual
        for expected, actual in zip(template_parts, path_parts)
    )


def lookup_route(
    routes: dict[str, RouteEntry], method: HTTPMethod | str, path: str
) -> Optional[RouteEntry]:
    """Find the route serving *method* *path*.

    An exact key wins. Otherwise the first template (in insertion order) whose
    ``{param}`` segments each match one concrete segment is returned, so
    ``/users/42`` finds ``GET:/users/{id}``.
    """
    key = route_key(method, path)
    if key in routes:
        return routes[key]

    prefix = key.split(":", 1)[0] + ":"
    for candidate_key, entry in routes.items():
        if candidate_key.startswith(prefix) and _template_matches(entry.path, path):
            return entry
    return None
