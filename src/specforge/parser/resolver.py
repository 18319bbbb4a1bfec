"""Resolve document-local ``$ref`` pointers in schema fragments.

Two layers are provided:

* :func:`resolve` follows **one** pointer such as ``#/components/schemas/Pet``
  against the owning document and returns whatever it lands on, or ``None``.
  It never raises and performs no cycle detection.
* :func:`expand_schema` is the recursive caller. It walks a schema tree,
  resolving every ``$ref`` it meets, and returns a plain-dict copy with the
  references inlined. Recursion is bounded in two ways: a ``seen`` set of
  pointers on the current descent path (a pointer already on the path is left
  as ``{"$ref": ...}``) and a ``max_depth`` nesting limit.

Only internal references (those starting with ``#/``) are supported; anything
else resolves to ``None`` and is left in place by :func:`expand_schema`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Optional, Union

from pydantic import BaseModel

from specforge.models import Document, Schema, SchemaRef, as_schema_node

DEFAULT_MAX_DEPTH = 32

_LOCAL_PREFIX = "#/"
_MISSING = object()


def is_reference(node: Any) -> bool:
    """Return ``True`` for a :class:`SchemaRef` or a mapping carrying ``$ref``."""
    if isinstance(node, SchemaRef):
        return True
    return isinstance(node, Mapping) and isinstance(node.get("$ref"), str)


def resolve(ref: str, document: Union[Document, Mapping[str, Any]]) -> Optional[Any]:
    """Resolve a single ``$ref`` string against *document*.

    Strips the ``#/`` prefix, splits the rest on ``/`` and walks the document
    one segment at a time. RFC 6901 escapes (``~1`` for ``/``, ``~0`` for
    ``~``) are decoded per segment. Mappings are entered by key and
    sequences by integer index. Pydantic models are entered by wire name
    (``requestBodies``, never ``request_bodies``) and only through fields the
    document actually declared, so model defaults such as an empty
    ``components.parameters`` are never reached.

    Args:
        ref: The pointer, e.g. ``"#/components/schemas/Pet"``.
        document: A :class:`~specforge.models.Document` or a raw dict.

    Returns:
        The value at the pointer, or ``None`` if the pointer is not local or
        any segment is absent.

    Example::

        schema = resolve("#/components/schemas/User", document)
    """
    if not isinstance(ref, str) or not ref.startswith(_LOCAL_PREFIX):
        return None

    current: Any = document
    for segment in ref[len(_LOCAL_PREFIX):].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")
        current = _step(current, segment)
        if current is _MISSING or current is None:
            return None
    return current


def _step(current: Any, segment: str) -> Any:
    if isinstance(current, BaseModel):
        return _model_attribute(current, segment)
    if isinstance(current, Mapping):
        return current.get(segment, _MISSING)
    if isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
        try:
            return current[int(segment)]
        except (ValueError, IndexError):
            return _MISSING
    return _MISSING


def _model_attribute(model: BaseModel, segment: str) -> Any:
    for name, info in type(model).model_fields.items():
        if (info.alias or name) == segment:
            if name not in model.model_fields_set:
                return _MISSING
            return getattr(model, name)
    extra = model.model_extra or {}
    return extra.get(segment, _MISSING)


def expand_schema(
    schema: Any,
    document: Union[Document, Mapping[str, Any]],
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Optional[dict[str, Any]]:
    """Return a plain-dict copy of *schema* with every ``$ref`` inlined.

    The input is never modified. A pointer that is already being expanded
    higher up the same branch is left as ``{"$ref": pointer}``, so
    self-referential and mutually-referential schemas terminate. Sibling
    branches track their pointers independently, so the same schema may be
    inlined in several places. Unresolvable pointers are also left as
    ``{"$ref": pointer}``.

    Args:
        schema: A :data:`~specforge.models.SchemaNode` or a raw mapping.
        document: The document that owns the pointers.
        max_depth: Maximum nesting depth. Deeper nodes are cut off: a
            reference is left unexpanded and an inline schema loses its
            nested keywords.

    Returns:
        The expanded schema, or ``None`` if *schema* is not schema-shaped.
    """
    node = as_schema_node(schema)
    if node is None:
        return None
    return _expand(node, document, frozenset(), 0, max_depth)


def _expand(
    node: Union[SchemaRef, Schema],
    document: Union[Document, Mapping[str, Any]],
    seen: frozenset[str],
    depth: int,
    max_depth: int,
) -> dict[str, Any]:
    if isinstance(node, SchemaRef):
        if node.ref in seen or depth >= max_depth:
            return {"$ref": node.ref}
        target = as_schema_node(resolve(node.ref, document))
        if target is None:
            return {"$ref": node.ref}
        return _expand(target, document, seen | {node.ref}, depth, max_depth)

    data = node.model_dump(
        by_alias=True,
        exclude_unset=True,
        exclude={"properties", "items", "all_of", "any_of", "one_of", "not_"},
    )
    if depth >= max_depth:
        return data

    def child(value: Any) -> Any:
        member = as_schema_node(value)
        if member is None:
            return value
        return _expand(member, document, seen, depth + 1, max_depth)

    # Keywords that did not load as schemas are copied through unchanged.
    if isinstance(node.properties, Mapping):
        data["properties"] = {name: child(value) for name, value in node.properties.items()}
    elif node.properties is not None:
        data["properties"] = node.properties
    if node.items is not None:
        data["items"] = child(node.items)
    for name, alias in (("all_of", "allOf"), ("any_of", "anyOf"), ("one_of", "oneOf")):
        members = getattr(node, name)
        if isinstance(members, list):
            data[alias] = [child(member) for member in members]
        elif members is not None:
            data[alias] = members
    if node.not_ is not None:
        data["not"] = child(node.not_)
    return data
