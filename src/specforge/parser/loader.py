"""Read raw OpenAPI text from a URL, local file, or stdin and deserialise it.

This module is the intake side of the parser: it fetches document text and
deserialises it. It does not look at the result at all, not even whether it
is a mapping; the minimal OpenAPI contract is checked by
:func:`~specforge.parser.spec_parser.validate_document`.

The public functions are:

* :func:`read_source` -- Read raw text from a path, URL, or ``-`` (stdin).
* :func:`parse_text` -- Turn JSON or YAML text into Python values.
* :func:`load_spec` -- Both of the above in one call.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from specforge.exceptions import FormatError, SpecLoadError


def load_spec(source: str) -> Any:
    """Load and deserialise an OpenAPI document from URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The deserialised document (normally a dict; not yet validated).

    Raises:
        SpecLoadError: If the source cannot be read.
        FormatError: If the content is not JSON or YAML.
    """
    text, hint = read_source(source)
    return parse_text(text, hint=hint)


def read_source(source: str) -> tuple[str, str]:
    """Read raw text from *source*.

    Returns:
        ``(text, hint)`` where *hint* is ``"json"``, ``"yaml"`` or ``""``
        depending on the file extension or response content type.

    Raises:
        SpecLoadError: If the source cannot be read or is empty.
    """
    if source == "-":
        return _read_stdin(), ""
    if source.startswith(("http://", "https://")):
        return _read_url(source)
    return _read_file(source)


def _read_stdin() -> str:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecLoadError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecLoadError("No input received from stdin")
    return content


def _read_url(url: str) -> tuple[str, str]:
    """Fetch document text over HTTP(S), using the content type as a format hint."""
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecLoadError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecLoadError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"
    return response.text, hint


def _read_file(path: str) -> tuple[str, str]:
    """Read a local .json/.yaml/.yml file (any other extension is sniffed)."""
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecLoadError(f"Spec file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecLoadError(f"Failed to read spec file {path}: {exc}") from exc

    if not content.strip():
        raise SpecLoadError(f"Spec file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"
    return content, hint


def parse_text(content: str, hint: str = "") -> Any:
    """Parse *content* as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML, since
    valid JSON is also valid YAML but the JSON parser is stricter and faster.

    Args:
        content: The raw string content.
        hint: Optional format hint ('json' or 'yaml').

    Returns:
        The deserialised value (any JSON/YAML type).

    Raises:
        FormatError: If the content is neither JSON nor YAML.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise FormatError(f"Invalid JSON: {exc}") from exc
        else:
            return result

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = "Failed to parse spec as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise FormatError(msg) from exc

    return result
