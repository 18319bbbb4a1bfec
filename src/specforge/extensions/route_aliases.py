"""Handler for the ``x-route-aliases`` extension.

An operation may declare alternate path templates under which it is also
reachable::

    /users:
      get:
        x-route-aliases: ["/accounts", "/members"]

Every function here looks only at the operation it is given. Mutators are
copy-on-write: they return a new :class:`~specforge.models.Operation` and
never touch the input. When nothing changes, the input itself is returned.
"""

from __future__ import annotations

import re
from typing import Any

from specforge.models import Operation

EXTENSION_KEY = "x-route-aliases"

# RFC 3986 path-safe characters plus ``{``/``}`` for path-parameter placeholders.
_ALIAS_PATTERN = re.compile(r"/[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%{}]*")


def get_aliases(operation: Operation) -> list[str]:
    """Return the operation's aliases in declared order (empty if none)."""
    aliases = operation.route_aliases
    if not isinstance(aliases, list):
        return []
    return list(aliases)


def has_aliases(operation: Operation) -> bool:
    return len(get_aliases(operation)) > 0


def add_alias(operation: Operation, alias: str) -> Operation:
    """Append *alias* unless it is already declared."""
    aliases = get_aliases(operation)
    if alias in aliases:
        return operation
    return operation.model_copy(update={"route_aliases": [*aliases, alias]})


def remove_alias(operation: Operation, alias: str) -> Operation:
    """Drop every occurrence of *alias*."""
    aliases = get_aliases(operation)
    if alias not in aliases:
        return operation
    return operation.model_copy(
        update={"route_aliases": [a for a in aliases if a != alias]}
    )


def validate_alias(alias: Any) -> bool:
    """Check that *alias* is an absolute path template.

    Example::

        validate_alias("/users/{id}")  # True
        validate_alias("users")        # False
        validate_alias("")             # False
    """
    if not isinstance(alias, str):
        return False
    return _ALIAS_PATTERN.fullmatch(alias) is not None
