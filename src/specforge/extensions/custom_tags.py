"""Handler for the ``x-custom-tags`` extension.

Custom tags categorise operations beyond the plain OpenAPI ``tags`` list::

    x-custom-tags:
      - name: Admin
        category: access
        color: "#d9534f"

A tag's ``name`` is its identity: adding a tag whose name already exists is a
no-op (the first tag wins) and removal drops every tag with that name.

Entries are normally :class:`~specforge.models.CustomTag` models. An entry
that does not fit the model stays a raw mapping; the readers below accept
both, and :func:`validate_custom_tag` tells them apart.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Union

from specforge.models import CustomTag, Operation, coerce_model, record_field

EXTENSION_KEY = "x-custom-tags"

_OPTIONAL_TEXT_FIELDS = ("category", "color", "icon", "description")

TagLike = Union[CustomTag, Mapping[str, Any]]


def get_custom_tags(operation: Operation) -> list[TagLike]:
    tags = operation.custom_tags
    if not isinstance(tags, list):
        return []
    return list(tags)


def has_custom_tags(operation: Operation) -> bool:
    return len(get_custom_tags(operation)) > 0


def get_tags_by_category(operation: Operation, category: str) -> list[TagLike]:
    """Return the tags whose ``category`` equals *category* exactly."""
    return [
        tag
        for tag in get_custom_tags(operation)
        if record_field(tag, "category") == category
    ]


def get_all_categories(operation: Operation) -> set[str]:
    """Return the distinct categories that are defined on the operation's tags."""
    categories = (record_field(tag, "category") for tag in get_custom_tags(operation))
    return {category for category in categories if isinstance(category, str)}


def add_custom_tag(operation: Operation, tag: TagLike) -> Operation:
    """Append *tag* unless a tag with the same name exists.

    A mapping is stored as a :class:`~specforge.models.CustomTag` when it fits.
    """
    tags = get_custom_tags(operation)
    name = record_field(tag, "name")
    if any(record_field(existing, "name") == name for existing in tags):
        return operation
    entry = coerce_model(CustomTag, tag)
    return operation.model_copy(update={"custom_tags": [*tags, entry]})


def remove_custom_tag(operation: Operation, name: str) -> Operation:
    """Drop every tag named *name*."""
    tags = get_custom_tags(operation)
    kept = [tag for tag in tags if record_field(tag, "name") != name]
    if len(kept) == len(tags):
        return operation
    return operation.model_copy(update={"custom_tags": kept})


def validate_custom_tag(tag: Any) -> bool:
    """Check the tag's shape.

    ``name`` must be a non-empty string and each optional field that is
    present (``category``, ``color``, ``icon``, ``description``) must be a
    string. An explicit ``null`` counts as present, whether the tag is a raw
    mapping or a :class:`~specforge.models.CustomTag` loaded from one.
    """
    if isinstance(tag, CustomTag):
        return len(tag.name) > 0 and all(
            isinstance(getattr(tag, key), str)
            for key in _OPTIONAL_TEXT_FIELDS
            if key in tag.model_fields_set
        )

    if not isinstance(tag, Mapping):
        return False
    name = tag.get("name")
    if not isinstance(name, str) or not name:
        return False
    return all(
        isinstance(tag[key], str) for key in _OPTIONAL_TEXT_FIELDS if key in tag
    )
