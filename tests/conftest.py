"""Shared test fixtures for specforge.

Provides reusable fixtures for loading document fixtures, building parsed
documents and operations, isolating configuration, managing output state,
and running CLI commands. These fixtures are automatically discovered by
pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from specforge.models import Document, Operation
from specforge.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Raw document fixtures (plain dicts loaded from JSON files)
# ---------------------------------------------------------------------------


def _load_fixture(name: str) -> dict[str, Any]:
    with open(FIXTURES_DIR / name, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def petstore_raw() -> dict[str, Any]:
    """Petstore document carrying all three vendor extensions and cyclic schemas."""
    return _load_fixture("petstore_extended.json")


@pytest.fixture
def collision_raw() -> dict[str, Any]:
    """Document where an alias shadows another operation's canonical path."""
    return _load_fixture("alias_collision.json")


@pytest.fixture
def invalid_extensions_raw() -> dict[str, Any]:
    """Document whose extension content is malformed in several ways."""
    return _load_fixture("invalid_extensions.json")


@pytest.fixture
def minimal_raw() -> dict[str, Any]:
    """The smallest document that passes the contract."""
    return {
        "openapi": "3.0.0",
        "info": {"title": "Minimal", "version": "1.0"},
        "paths": {},
    }


# ---------------------------------------------------------------------------
# Parsed fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_doc(petstore_raw: dict[str, Any]) -> Document:
    """Parsed petstore document."""
    from specforge.parser import SpecParser

    return SpecParser().parse_object(petstore_raw)


@pytest.fixture
def bare_operation() -> Operation:
    """An operation with no extension fields."""
    return Operation.model_validate(
        {"summary": "Bare", "responses": {"200": {"description": "OK"}}}
    )


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path so
    that tests never touch real user config. Clears all SPECFORGE_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("specforge.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "SPECFORGE_SPEC",
        "SPECFORGE_MAX_DEPTH",
        "SPECFORGE_STRICT_ROUTES",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
