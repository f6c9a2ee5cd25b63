"""Load tool definitions from JSON or YAML files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from mcpvet.core._types import SourceKind
from mcpvet.core.tool import ToolDefinition

SUFFIXES: dict[str, str] = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}


class LoadError(Exception):
    """Raised when tool definitions cannot be loaded from a file."""


def detect_format(path: Path | str) -> str:
    """Return ``"json"`` or ``"yaml"`` from the file extension."""
    suffix = Path(path).suffix.lower()
    try:
        return SUFFIXES[suffix]
    except KeyError:
        msg = f"Unsupported file format: {str(path)!r} - expected .json, .yaml or .yml"
        raise LoadError(msg) from None


def load_tools(path: Path | str) -> list[ToolDefinition]:
    """Read *path* and return the tool definitions it holds.

    Accepted layouts: a bare array of tools, ``{"tools": [...]}``, a
    manifest (``name`` or ``version`` alongside ``tools``), or a single
    tool object.

    Raises:
        :class:`LoadError`: If the file is missing, has an unsupported
            extension, cannot be decoded, or holds a malformed entry.

    """
    path = Path(path)
    fmt = detect_format(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read {str(path)!r}: {exc}"
        raise LoadError(msg) from exc

    try:
        data = json.loads(content) if fmt == "json" else yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        msg = f"Failed to parse {fmt.upper()} file {str(path)!r}: {exc}"
        raise LoadError(msg) from exc

    return normalize_tools(data, location=str(path))


def detect_layout(data: Any) -> str:
    """Classify decoded data as ``"array"``, ``"manifest"`` or ``"single"``."""
    if isinstance(data, list):
        return "array"
    if isinstance(data, dict) and isinstance(data.get("tools"), list):
        return "manifest" if ("name" in data or "version" in data) else "array"
    return "single"


def _is_tool_like(obj: Any) -> bool:
    return (
        isinstance(obj, dict)
        and isinstance(obj.get("name"), str)
        and isinstance(obj.get("description"), str)
        and isinstance(obj.get("inputSchema"), dict)
    )


def _check_property_names(entry: dict[str, Any], where: str) -> None:
    properties = entry["inputSchema"].get("properties")
    if not isinstance(properties, dict):
        return
    for key in properties:
        if not isinstance(key, str):
            msg = (
                f"Invalid tool definition {where}: property name {key!r} is not a string"
                ' - quote it in YAML (e.g. "on", "yes", "1")'
            )
            raise LoadError(msg)


def normalize_tools(data: Any, *, location: str = "") -> list[ToolDefinition]:
    """Turn decoded file content into :class:`ToolDefinition` objects.

    Raises:
        :class:`LoadError`: If an entry is not a tool object or names a
            parameter with a non-string key (YAML reads ``on:`` as ``True``).

    """
    layout = detect_layout(data)

    if layout == "single":
        if not _is_tool_like(data):
            msg = (
                f"Invalid tool definition in {location!r}: "
                "expected object with name, description and inputSchema"
            )
            raise LoadError(msg)
        _check_property_names(data, f"in {location!r}")
        return [ToolDefinition.from_dict(data, kind=SourceKind.FILE, location=location)]

    entries = data if isinstance(data, list) else data["tools"]
    where = "manifest " if layout == "manifest" else ""
    tools = []
    for index, entry in enumerate(entries):
        if not _is_tool_like(entry):
            msg = (
                f"Invalid tool definition at index {index} in {where}{location!r}: "
                "expected object with name, description and inputSchema"
            )
            raise LoadError(msg)
        _check_property_names(entry, f"at index {index} in {where}{location!r}")
        tools.append(ToolDefinition.from_dict(entry, kind=SourceKind.FILE, location=location))
    return tools
