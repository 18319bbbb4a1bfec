"""Tests for specforge.extensions.validate_operation_extensions."""

from __future__ import annotations

from typing import Any

from specforge.extensions import validate_operation_extensions
from specforge.models import Document, Operation
from specforge.parser import SpecParser


class TestValidateOperationExtensions:

    def test_well_formed_operations_have_no_problems(self, petstore_doc: Document) -> None:
        for path_item in petstore_doc.paths.values():
            for _, operation in path_item.operations():
                assert validate_operation_extensions(operation) == []

    def test_no_extensions(self, bare_operation: Operation) -> None:
        assert validate_operation_extensions(bare_operation) == []

    def test_every_problem_is_reported(self, invalid_extensions_raw: dict[str, Any]) -> None:
        document = SpecParser().parse_object(invalid_extensions_raw)
        problems = validate_operation_extensions(document.paths["/items"].get)
        assert problems == [
            "x-route-aliases: invalid alias 'items-no-slash'",
            "x-route-aliases: duplicate alias '/dup'",
            "x-custom-tags[0]: invalid tag",
            "x-custom-tags[2]: duplicate tag name 'A'",
            "x-permissions: every field must be a list of strings",
        ]

    def test_wrong_container_types(self, invalid_extensions_raw: dict[str, Any]) -> None:
        document = SpecParser().parse_object(invalid_extensions_raw)
        problems = validate_operation_extensions(document.paths["/things"].get)
        assert problems == [
            "x-route-aliases must be a list",
            "x-custom-tags must be a list",
        ]

    def test_explicit_nulls_are_reported(self, minimal_raw: dict[str, Any]) -> None:
        minimal_raw["paths"] = {
            "/admin": {
                "get": {
                    "x-custom-tags": [{"name": "Admin", "color": None}],
                    "x-permissions": {"required": None},
                }
            }
        }
        document = SpecParser().parse_object(minimal_raw)
        assert validate_operation_extensions(document.paths["/admin"].get) == [
            "x-custom-tags[0]: invalid tag",
            "x-permissions: every field must be a list of strings",
        ]
