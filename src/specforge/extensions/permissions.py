"""Handler for the ``x-permissions`` extension.

Declares what a caller needs in order to invoke an operation::

    x-permissions:
      required: ["users:write"]
      optional: ["users:audit"]
      roles: ["admin"]
      scopes: ["write:users"]

Getters return empty lists when the record or the field is absent. Mutators
are copy-on-write and create the record when it is missing.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional, Union

from specforge.models import Operation, PermissionFlags, coerce_model, record_field

EXTENSION_KEY = "x-permissions"

PERMISSION_FIELDS = ("required", "optional", "roles", "scopes")

FlagsLike = Union[PermissionFlags, Mapping[str, Any]]


def get_permissions(operation: Operation) -> Optional[FlagsLike]:
    return operation.permissions


def has_permissions(operation: Operation) -> bool:
    return operation.permissions is not None


def _flag_list(operation: Operation, key: str) -> list[str]:
    value = record_field(operation.permissions, key)
    if not isinstance(value, list):
        return []
    return list(value)


def get_required_permissions(operation: Operation) -> list[str]:
    return _flag_list(operation, "required")


def get_optional_permissions(operation: Operation) -> list[str]:
    return _flag_list(operation, "optional")


def get_required_roles(operation: Operation) -> list[str]:
    return _flag_list(operation, "roles")


def get_required_scopes(operation: Operation) -> list[str]:
    return _flag_list(operation, "scopes")


def set_permissions(operation: Operation, flags: FlagsLike) -> Operation:
    """Replace the whole ``x-permissions`` record."""
    return operation.model_copy(
        update={"permissions": coerce_model(PermissionFlags, flags)}
    )


def _append(operation: Operation, key: str, value: str) -> Operation:
    current = _flag_list(operation, key)
    if value in current:
        return operation

    flags = operation.permissions
    values = [*current, value]
    if isinstance(flags, PermissionFlags):
        updated: Any = flags.model_copy(update={key: values})
    elif isinstance(flags, Mapping):
        updated = coerce_model(PermissionFlags, {**flags, key: values})
    else:
        updated = PermissionFlags(**{key: values})
    return operation.model_copy(update={"permissions": updated})


def add_required_permission(operation: Operation, permission: str) -> Operation:
    return _append(operation, "required", permission)


def add_required_role(operation: Operation, role: str) -> Operation:
    return _append(operation, "roles", role)


def requires_permission(operation: Operation, permission: str) -> bool:
    return permission in get_required_permissions(operation)


def requires_role(operation: Operation, role: str) -> bool:
    return role in get_required_roles(operation)


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def validate_permissions(flags: Any) -> bool:
    """Check that every present field is a list of strings.

    An explicit ``null`` counts as present and fails, whether *flags* is a
    raw mapping or a :class:`~specforge.models.PermissionFlags` loaded from one.
    """
    if isinstance(flags, PermissionFlags):
        return all(
            _is_string_list(getattr(flags, key))
            for key in PERMISSION_FIELDS
            if key in flags.model_fields_set
        )

    if not isinstance(flags, Mapping):
        return False
    return all(_is_string_list(flags[key]) for key in PERMISSION_FIELDS if key in flags)
