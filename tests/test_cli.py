"""End-to-end tests for the specforge CLI through Typer's CliRunner."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from specforge import __version__
from specforge.app import app

FIXTURES_DIR = Path(__file__).parent / "fixtures"
PETSTORE = str(FIXTURES_DIR / "petstore_extended.json")
COLLISION = str(FIXTURES_DIR / "alias_collision.json")
INVALID = str(FIXTURES_DIR / "invalid_extensions.json")


@pytest.fixture(autouse=True)
def _isolate(isolated_config: Path) -> None:
    """Every CLI test runs against an empty config."""


def _invoke_json(runner: CliRunner, *args: str) -> Any:
    result = runner.invoke(app, ["--json", "--quiet", "--no-color", *args])
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


# ---------------------------------------------------------------------------
# Global options
# ---------------------------------------------------------------------------


class TestGlobalOptions:

    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"specforge {__version__}" in result.output

    def test_no_args_shows_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, [])
        assert "inspect" in result.output
        assert "validate" in result.output

    def test_configured_format_applies(
        self, cli_runner: CliRunner, isolated_config: Path
    ) -> None:
        (isolated_config / "specforge.json").write_text(
            json.dumps({"output": {"format": "json"}}), encoding="utf-8"
        )
        result = cli_runner.invoke(app, ["--quiet", "inspect", "info", PETSTORE])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["title"] == "Petstore API"


# ---------------------------------------------------------------------------
# inspect
# ---------------------------------------------------------------------------


class TestInspectInfo:

    def test_info(self, cli_runner: CliRunner) -> None:
        data = _invoke_json(cli_runner, "inspect", "info", PETSTORE)
        assert data["title"] == "Petstore API"
        assert data["version"] == "1.0.0"
        assert data["openapi_version"] == "3.0.3"
        assert data["servers"] == ["https://petstore.example.com/v1"]
        assert data["operations"] == 5
        assert "Node" in data["schemas"]

    def test_stdin(self, cli_runner: CliRunner) -> None:
        text = (FIXTURES_DIR / "petstore_extended.json").read_text(encoding="utf-8")
        result = cli_runner.invoke(app, ["--json", "--quiet", "inspect", "info", "-"], input=text)
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["title"] == "Petstore API"

    def test_default_spec_from_env(
        self, cli_runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SPECFORGE_SPEC", COLLISION)
        data = _invoke_json(cli_runner, "inspect", "info")
        assert data["title"] == "Collision API"

    def test_missing_document_source(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--no-color", "inspect", "info"])
        assert result.exit_code == 2
        assert "No document given" in result.output

    def test_missing_file(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--no-color", "inspect", "info", "nope.json"])
        assert result.exit_code == 6

    def test_contract_failure(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        doc = tmp_path / "swagger.json"
        doc.write_text(json.dumps({"swagger": "2.0", "info": {}}), encoding="utf-8")
        result = cli_runner.invoke(app, ["--no-color", "inspect", "info", str(doc)])
        assert result.exit_code == 8
        assert "Missing required field: openapi" in result.output

    def test_malformed_text(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        doc = tmp_path / "broken.json"
        doc.write_text("{broken", encoding="utf-8")
        result = cli_runner.invoke(app, ["--no-color", "inspect", "info", str(doc)])
        assert result.exit_code == 7

    def test_non_object_document_fails_contract(
        self, cli_runner: CliRunner, tmp_path: Path
    ) -> None:
        doc = tmp_path / "list.json"
        doc.write_text("[1, 2, 3]", encoding="utf-8")
        result = cli_runner.invoke(app, ["--no-color", "inspect", "info", str(doc)])
        assert result.exit_code == 8
        assert "Missing required field: openapi" in result.output

    def test_loose_document(self, cli_runner: CliRunner, loose_doc: str) -> None:
        data = _invoke_json(cli_runner, "inspect", "info", loose_doc)
        assert data["servers"] == ["https://api.test"]
        assert data["paths"] == 1
        assert data["operations"] == 1
        assert data["schemas"] == ["A"]


@pytest.fixture
def loose_doc(tmp_path: Path) -> str:
    """A valid document whose optional fields are not the usual shapes."""
    doc = tmp_path / "loose.json"
    doc.write_text(
        json.dumps(
            {
                "openapi": "3.1.0",
                "info": {"title": "Loose", "version": "1"},
                "servers": [{"description": "no url"}, {"url": "https://api.test"}],
                "paths": {
                    "x-internal": True,
                    "/a": {"get": {"operationId": "a", "summary": 5, "tags": [1]}},
                },
                "components": {"schemas": {"A": {"required": True}}},
            }
        ),
        encoding="utf-8",
    )
    return str(doc)


class TestInspectOperations:

    def test_lists_extension_facets(self, cli_runner: CliRunner) -> None:
        rows = _invoke_json(cli_runner, "inspect", "operations", PETSTORE)
        assert len(rows) == 5
        first = rows[0]
        assert first["Method"] == "GET"
        assert first["Path"] == "/pets"
        assert first["Aliases"] == "/animals"
        assert first["Custom Tags"] == "Public, Catalog"
        assert first["Required"] == "pets:read"
        assert rows[-1]["Aliases"] == "-"

    def test_tag_category_filter(self, cli_runner: CliRunner) -> None:
        rows = _invoke_json(
            cli_runner, "inspect", "operations", PETSTORE, "--tag-category", "access"
        )
        assert [(r["Method"], r["Path"], r["Custom Tags"]) for r in rows] == [
            ("GET", "/pets", "Public"),
            ("POST", "/pets", "Admin"),
        ]

    def test_tag_category_without_matches(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            app, ["--no-color", "inspect", "operations", PETSTORE, "-c", "none"]
        )
        assert result.exit_code == 0
        assert "No matching operations" in result.output

    def test_loose_document(self, cli_runner: CliRunner, loose_doc: str) -> None:
        rows = _invoke_json(cli_runner, "inspect", "operations", loose_doc)
        assert [(r["Method"], r["Path"], r["Summary"]) for r in rows] == [("GET", "/a", "5")]


class TestInspectRoutes:

    def test_routes_include_aliases(self, cli_runner: CliRunner) -> None:
        rows = _invoke_json(cli_runner, "inspect", "routes", PETSTORE)
        routes = {row["Route"]: row["Operation"] for row in rows}
        assert len(routes) == 8
        assert routes["GET:/animals"] == "listPets"
        assert routes["GET:/pet/{petId}"] == "showPetById"

    def test_collision_last_write_wins(self, cli_runner: CliRunner) -> None:
        rows = _invoke_json(cli_runner, "inspect", "routes", COLLISION)
        assert {row["Route"]: row["Operation"] for row in rows} == {
            "GET:/members": "listUsers",
            "GET:/users": "listUsers",
        }

    def test_collision_strict(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--no-color", "inspect", "routes", COLLISION, "--strict"])
        assert result.exit_code == 9
        assert "GET:/members" in result.output

    def test_strict_from_env(
        self, cli_runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SPECFORGE_STRICT_ROUTES", "true")
        result = cli_runner.invoke(app, ["--no-color", "inspect", "routes", COLLISION])
        assert result.exit_code == 9
        result = cli_runner.invoke(
            app, ["--no-color", "inspect", "routes", COLLISION, "--no-strict"]
        )
        assert result.exit_code == 0


class TestInspectSchema:

    def test_expanded_schema_by_name(self, cli_runner: CliRunner) -> None:
        data = _invoke_json(cli_runner, "inspect", "schema", "Node", PETSTORE)
        assert data["properties"]["children"]["items"] == {"$ref": "#/components/schemas/Node"}

    def test_expanded_schema_by_pointer(self, cli_runner: CliRunner) -> None:
        data = _invoke_json(
            cli_runner, "inspect", "schema", "#/components/schemas/Pets", PETSTORE
        )
        assert data["items"]["properties"]["name"] == {"type": "string"}

    def test_max_depth(self, cli_runner: CliRunner) -> None:
        data = _invoke_json(
            cli_runner, "inspect", "schema", "Pet", PETSTORE, "--max-depth", "1"
        )
        assert data["properties"]["owner"] == {"$ref": "#/components/schemas/Owner"}

    def test_plain_tree(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--plain", "inspect", "schema", "Pet", PETSTORE])
        assert result.exit_code == 0
        assert "#/components/schemas/Pet" in result.stdout
        assert "owner" in result.stdout
        assert "int64" in result.stdout

    def test_unknown_schema(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--no-color", "inspect", "schema", "Ghost", PETSTORE])
        assert result.exit_code == 2
        assert "Nothing found at #/components/schemas/Ghost" in result.output

    def test_pointer_to_non_schema(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            app, ["--no-color", "inspect", "schema", "#/servers/0/url", PETSTORE]
        )
        assert result.exit_code == 2
        assert "is not a schema" in result.output


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


class TestValidate:

    def test_valid_document(self, cli_runner: CliRunner) -> None:
        data = _invoke_json(cli_runner, "validate", PETSTORE)
        assert data == {"valid": True, "operations": 5, "problems": []}

    def test_extension_problems(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--no-color", "--plain", "validate", INVALID])
        assert result.exit_code == 10
        assert "7 problem(s) found" in result.output
        assert "GET /items: x-route-aliases: invalid alias 'items-no-slash'" in result.output
        assert "GET /things: x-custom-tags must be a list" in result.output
        # duplicate aliases also collide in the route map; that is only a warning
        assert "Warning: Route GET:/dup" in result.output

    def test_collision_is_a_warning_by_default(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--no-color", "validate", COLLISION])
        assert result.exit_code == 0
        assert "Warning" in result.output

    def test_collision_fails_when_strict(
        self, cli_runner: CliRunner, isolated_config: Path
    ) -> None:
        (isolated_config / "specforge.json").write_text(
            json.dumps({"routes": {"strict_conflicts": True}}), encoding="utf-8"
        )
        result = cli_runner.invoke(app, ["--no-color", "validate", COLLISION])
        assert result.exit_code == 10
        assert "1 problem(s) found" in result.output

    def test_contract_failure_exit_code(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        doc = tmp_path / "no-paths.yaml"
        doc.write_text("openapi: 3.0.0\ninfo:\n  title: t\n  version: '1'\n", encoding="utf-8")
        result = cli_runner.invoke(app, ["--no-color", "validate", str(doc)])
        assert result.exit_code == 8
        assert "paths" in result.output


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


class TestConfigCommands:

    def test_show_defaults(self, cli_runner: CliRunner) -> None:
        data = _invoke_json(cli_runner, "config", "show")
        assert data["default_spec"] is None
        assert data["output"]["format"] == "auto"

    def test_set_then_show(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        for key, value in (
            ("output.format", "json"),
            ("resolver.max_depth", "5"),
            ("routes.strict_conflicts", "true"),
            ("default_spec", COLLISION),
        ):
            result = cli_runner.invoke(app, ["--no-color", "config", "set", key, value])
            assert result.exit_code == 0, result.output

        stored = json.loads(
            (isolated_config / "config" / "specforge" / "config.json").read_text(encoding="utf-8")
        )
        assert stored["output"]["format"] == "json"
        data = _invoke_json(cli_runner, "config", "show")
        assert data["resolver"]["max_depth"] == 5
        assert data["routes"]["strict_conflicts"] is True

        # The stored default document and format now drive inspect.
        result = cli_runner.invoke(app, ["--quiet", "inspect", "info"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["title"] == "Collision API"

    @pytest.mark.parametrize(
        ("key", "value", "message"),
        [
            ("nope", "1", "Unknown config key"),
            ("output", "json", "Unknown config key"),
            ("default_spec.path", "x", "Invalid config key"),
            ("resolver.max_depth", "abc", "Expected integer"),
            ("output.format", "bogus", "Invalid value for output.format"),
        ],
    )
    def test_set_rejects(
        self, cli_runner: CliRunner, key: str, value: str, message: str
    ) -> None:
        result = cli_runner.invoke(app, ["--no-color", "config", "set", key, value])
        assert result.exit_code == 2
        assert message in result.output

    def test_reset(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(app, ["config", "set", "output.format", "plain"])
        result = cli_runner.invoke(app, ["--no-color", "config", "reset", "--yes"])
        assert result.exit_code == 0, result.output
        assert _invoke_json(cli_runner, "config", "show")["output"]["format"] == "auto"

    def test_reset_declined(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(app, ["config", "set", "output.format", "plain"])
        result = cli_runner.invoke(app, ["--no-color", "config", "reset"], input="n\n")
        assert result.exit_code == 0
        assert "Cancelled." in result.output
        assert _invoke_json(cli_runner, "config", "show")["output"]["format"] == "plain"
