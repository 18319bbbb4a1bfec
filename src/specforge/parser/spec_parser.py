"""Check the minimal OpenAPI 3.x contract and traverse loaded documents.

The contract is deliberately shallow. Six presence/prefix checks run in a
fixed order and the first failure is reported:

1. ``openapi`` is present
2. ``openapi`` starts with ``"3."``
3. ``info`` is present
4. ``info.title`` is present
5. ``info.version`` is present
6. ``paths`` is present

"Present" follows JavaScript truthiness for scalars: ``None``, ``False``,
``""`` and ``0`` count as missing, while an empty ``paths: {}`` is present.

Traversal is offered twice. :class:`SpecParser` keeps the last successfully
parsed document and exposes accessors over it, and the module-level
:func:`iter_operations` / :func:`get_all_operations` take the document
explicitly so that callers need not rely on parser state.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from specforge.exceptions import StateError, ValidationError
from specforge.models import Document, Info, OperationRecord, PathItem
from specforge.parser.loader import parse_text


def _missing(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, (str, int, float)):
        return not value
    return False


def _field(candidate: Any, key: str) -> Any:
    if isinstance(candidate, Mapping):
        return candidate.get(key)
    return None


def validate_document(candidate: Any) -> None:
    """Run the six ordered contract checks on a deserialised document.

    Args:
        candidate: The deserialised document (normally a dict).

    Raises:
        ValidationError: On the first failed check. ``exc.field`` names the
            field (``"openapi"``, ``"info"``, ``"info.title"``,
            ``"info.version"`` or ``"paths"``).
    """
    openapi = _field(candidate, "openapi")
    if _missing(openapi):
        raise ValidationError("Missing required field: openapi", field="openapi")

    if not str(openapi).startswith("3."):
        raise ValidationError(
            f"Unsupported OpenAPI version: {openapi}. Only 3.x is supported.",
            field="openapi",
        )

    info = _field(candidate, "info")
    if _missing(info):
        raise ValidationError("Missing required field: info", field="info")

    if _missing(_field(info, "title")):
        raise ValidationError("Missing required field: info.title", field="info.title")

    if _missing(_field(info, "version")):
        raise ValidationError(
            "Missing required field: info.version", field="info.version"
        )

    if _missing(_field(candidate, "paths")):
        raise ValidationError("Missing required field: paths", field="paths")


_UNION_TAGS = frozenset({"ref", "inline"})


def _location(loc: tuple[Any, ...]) -> str:
    # Tagged-union branches add their tag to the error location.
    return ".".join(str(part) for part in loc if part not in _UNION_TAGS)


def build_document(candidate: Any) -> Document:
    """Validate the contract and build a :class:`~specforge.models.Document`.

    Fields outside the contract are never checked (see
    :data:`~specforge.models.Lenient`). The one extra requirement is that
    ``paths`` is a mapping.

    Raises:
        ValidationError: If a contract check fails, or if ``paths`` is not a
            mapping. In the latter case ``exc.field`` is ``"paths"``.
    """
    validate_document(candidate)
    try:
        return Document.model_validate(candidate)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        location = _location(first["loc"])
        raise ValidationError(
            f"Invalid value at {location}: {first['msg']}", field=location
        ) from exc


def iter_operations(document: Document) -> Iterator[OperationRecord]:
    """Yield every operation in *document*.

    Paths are visited in document order; within a path, verbs follow
    ``get, put, post, delete, options, head, patch, trace``. Undeclared verbs
    contribute nothing, and neither do ``paths`` entries that are not path
    item objects.
    """
    for path, path_item in document.paths.items():
        if not isinstance(path_item, PathItem):
            continue
        for method, operation in path_item.operations():
            yield OperationRecord(path=path, method=method, operation=operation)


def get_all_operations(document: Document) -> list[OperationRecord]:
    """Return :func:`iter_operations` as a list."""
    return list(iter_operations(document))


class SpecParser:
    """Parse OpenAPI 3.x documents and remember the last one that passed.

    A failed parse leaves the previously loaded document in place. The parser
    holds one mutable field, so concurrent ``parse_object`` calls on one
    instance need external serialisation; use one parser per in-flight parse.

    Example::

        parser = SpecParser()
        parser.parse(text)
        for record in parser.get_all_operations():
            print(record.method.value.upper(), record.path)
    """

    def __init__(self) -> None:
        self._document: Optional[Document] = None

    def parse(self, raw_text: str, hint: str = "") -> Document:
        """Deserialise JSON or YAML *raw_text* and pass it to :meth:`parse_object`.

        Raises:
            FormatError: If the text is not well-formed JSON or YAML.
            ValidationError: If the document fails the minimal contract.
        """
        return self.parse_object(parse_text(raw_text, hint=hint))

    def parse_object(self, candidate: Any) -> Document:
        """Validate an already deserialised document, store it, and return it."""
        document = build_document(candidate)
        self._document = document
        return document

    def reset(self) -> None:
        """Forget the loaded document."""
        self._document = None

    def get_spec(self) -> Optional[Document]:
        return self._document

    def _require_document(self) -> Document:
        if self._document is None:
            raise StateError("No document loaded. Call parse() first.")
        return self._document

    def get_paths(self) -> dict[str, Any]:
        return self._require_document().paths

    def get_path(self, path: str) -> Optional[PathItem]:
        """Return the path item at *path*; ``None`` if absent or not a path item."""
        path_item = self.get_paths().get(path)
        return path_item if isinstance(path_item, PathItem) else None

    def get_all_operations(self) -> list[OperationRecord]:
        return get_all_operations(self._require_document())

    def get_info(self) -> Info:
        return self._require_document().info

    def get_version(self) -> str:
        return self._require_document().openapi


def create_parser() -> SpecParser:
    """Return a fresh :class:`SpecParser`."""
    return SpecParser()
