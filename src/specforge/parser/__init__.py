"""OpenAPI document intake, minimal validation, traversal, and ``$ref`` resolution.

Typical usage::

    from specforge.parser import SpecParser, load_spec

    parser = SpecParser()
    document = parser.parse_object(load_spec("openapi.yaml"))
    records = parser.get_all_operations()

Sub-modules:

* :mod:`~specforge.parser.loader` -- I/O layer (URL, file, stdin) plus JSON /
  YAML deserialisation.
* :mod:`~specforge.parser.spec_parser` -- The six-check contract,
  :class:`SpecParser`, and explicit-document traversal.
* :mod:`~specforge.parser.resolver` -- Single-hop ``$ref`` resolution and
  cycle-safe schema expansion.
"""

from specforge.parser.loader import load_spec, parse_text, read_source
from specforge.parser.resolver import expand_schema, is_reference, resolve
from specforge.parser.spec_parser import (
    SpecParser,
    build_document,
    create_parser,
    get_all_operations,
    iter_operations,
    validate_document,
)

__all__ = [
    "SpecParser",
    "build_document",
    "create_parser",
    "expand_schema",
    "get_all_operations",
    "is_reference",
    "iter_operations",
    "load_spec",
    "parse_text",
    "read_source",
    "resolve",
    "validate_document",
]
