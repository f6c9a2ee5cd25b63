import re
from collections.abc import Iterable, Iterator
from typing import Any

from mcpvet.core.tool import ToolDefinition

MCP_TOOLS_DOC = "https://modelcontextprotocol.io/specification/2025-11-25#tools"
MCP_ANNOTATIONS_DOC = "https://modelcontextprotocol.io/specification/2025-11-25#tool-annotations"

_COMBINATORS = ("oneOf", "anyOf", "allOf")


def schema_of(tool: ToolDefinition) -> dict[str, Any] | None:
    """``inputSchema`` when it is a mapping; rules skip the tool otherwise."""
    return tool.input_schema if isinstance(tool.input_schema, dict) else None


def has_name(tool: ToolDefinition) -> bool:
    return isinstance(tool.name, str) and bool(tool.name.strip())


def text_of(value: Any) -> str:
    return value if isinstance(value, str) else ""


def param_path(name: str, *rest: str) -> str:
    return ".".join(("inputSchema", "properties", name, *rest))


def iter_params(tool: ToolDefinition) -> Iterator[tuple[str, dict[str, Any]]]:
    """Top-level ``(name, schema)`` pairs whose schema is a mapping."""
    for name, prop in tool.properties.items():
        if isinstance(prop, dict):
            yield name, prop


def types_of(prop: dict[str, Any]) -> set[str]:
    """The declared ``type`` of *prop* as a set (``["string", "null"]`` aware)."""
    kind = prop.get("type")
    if isinstance(kind, str):
        return {kind}
    if isinstance(kind, list):
        return {k for k in kind if isinstance(k, str)}
    return set()


def name_matches(name: str, patterns: Iterable[re.Pattern[str]]) -> bool:
    return any(p.search(name) for p in patterns)


def word_pattern(words: Iterable[str]) -> re.Pattern[str]:
    """Case-insensitive whole-word alternation over *words*."""
    alternation = "|".join(re.escape(w) for w in words)
    return re.compile(rf"\b(?:{alternation})\b", re.IGNORECASE)


def schema_depth(schema: Any, path: str = "inputSchema") -> tuple[int, str]:
    """Deepest nesting level of *schema* and the path that reaches it.

    Each step through ``properties``, ``items`` or a schema-valued
    ``additionalProperties`` adds one level.  ``oneOf`` / ``anyOf`` /
    ``allOf`` branches are walked at the same level.  Ties keep the first
    path found.
    """
    if not isinstance(schema, dict):
        return 0, path

    best = (0, path)

    def consider(candidate: tuple[int, str]) -> None:
        nonlocal best
        if candidate[0] > best[0]:
            best = candidate

    properties = schema.get("properties")
    if isinstance(properties, dict):
        for name, prop in properties.items():
            depth, deepest = schema_depth(prop, f"{path}.properties.{name}")
            consider((depth + 1, deepest))

    items = schema.get("items")
    if isinstance(items, dict):
        depth, deepest = schema_depth(items, f"{path}.items")
        consider((depth + 1, deepest))
    elif isinstance(items, list):
        for i, item in enumerate(items):
            depth, deepest = schema_depth(item, f"{path}.items.{i}")
            consider((depth + 1, deepest))

    additional = schema.get("additionalProperties")
    if isinstance(additional, dict):
        depth, deepest = schema_depth(additional, f"{path}.additionalProperties")
        consider((depth + 1, deepest))

    for key in _COMBINATORS:
        branches = schema.get(key)
        if isinstance(branches, list):
            for i, branch in enumerate(branches):
                consider(schema_depth(branch, f"{path}.{key}.{i}"))

    return best
