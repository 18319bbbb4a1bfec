"""Handlers for the three SpecForge vendor extensions carried on operations.

* :mod:`~specforge.extensions.route_aliases` -- ``x-route-aliases``
* :mod:`~specforge.extensions.custom_tags` -- ``x-custom-tags``
* :mod:`~specforge.extensions.permissions` -- ``x-permissions``

The handlers are stateless module-level functions, independent of each other
and of the parser. :func:`validate_operation_extensions` runs the advisory
validators of all three over one operation.
"""

from __future__ import annotations

from specforge.extensions import custom_tags, permissions, route_aliases
from specforge.models import Operation, record_field


def validate_operation_extensions(operation: Operation) -> list[str]:
    """Collect shape problems in *operation*'s extension content.

    Returns:
        Human-readable problem descriptions; empty when everything is valid.
        Never raises.
    """
    problems: list[str] = []

    aliases = operation.route_aliases
    if aliases is not None and not isinstance(aliases, list):
        problems.append(f"{route_aliases.EXTENSION_KEY} must be a list")
    elif aliases:
        seen: set[str] = set()
        for alias in aliases:
            if not route_aliases.validate_alias(alias):
                problems.append(f"{route_aliases.EXTENSION_KEY}: invalid alias {alias!r}")
            elif alias in seen:
                problems.append(f"{route_aliases.EXTENSION_KEY}: duplicate alias {alias!r}")
            else:
                seen.add(alias)

    tags = operation.custom_tags
    if tags is not None and not isinstance(tags, list):
        problems.append(f"{custom_tags.EXTENSION_KEY} must be a list")
    elif tags:
        names: set[str] = set()
        for index, tag in enumerate(tags):
            if not custom_tags.validate_custom_tag(tag):
                problems.append(f"{custom_tags.EXTENSION_KEY}[{index}]: invalid tag")
                continue
            name = record_field(tag, "name")
            if name in names:
                problems.append(
                    f"{custom_tags.EXTENSION_KEY}[{index}]: duplicate tag name {name!r}"
                )
            names.add(name)

    flags = operation.permissions
    if flags is not None and not permissions.validate_permissions(flags):
        problems.append(
            f"{permissions.EXTENSION_KEY}: every field must be a list of strings"
        )

    return problems


__all__ = [
    "custom_tags",
    "permissions",
    "route_aliases",
    "validate_operation_extensions",
]
