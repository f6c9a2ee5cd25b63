"""Cross-tool schema fragment index."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mcpvet.core.tool import ToolDefinition

type FragmentIndex = Mapping[str, tuple[FragmentLocation, ...]]

_CONSTRAINT_KEYS = (
    "properties",
    "items",
    "oneOf",
    "anyOf",
    "allOf",
    "enum",
    "pattern",
    "minimum",
    "maximum",
    "minLength",
    "maxLength",
    "minItems",
    "maxItems",
)


@dataclass(frozen=True, slots=True)
class FragmentLocation:
    """Where a schema fragment occurs: tool position, tool name and path."""

    position: int
    tool: str
    path: str


def canonicalize(schema: Any) -> str:
    """Return a key-order and array-order insensitive form of *schema*.

    Object keys are sorted; array elements are canonicalized and then
    sorted, so ``{"a": 1, "b": [2, 1]}`` and ``{"b": [1, 2], "a": 1}`` agree.
    """
    if schema is None:
        return ""
    if isinstance(schema, list):
        return json.dumps(sorted(canonicalize(item) for item in schema))
    if isinstance(schema, dict):
        return json.dumps({str(k): canonicalize(schema[k]) for k in sorted(schema, key=str)})
    return json.dumps(schema, default=str)


def is_complex(schema: Any) -> bool:
    """Whether *schema* is substantial enough to be worth sharing via ``$ref``.

    ``{"type": "string"}`` is not; an object with properties, an array of
    objects, or any typed schema with two or more constraints is.
    """
    if not isinstance(schema, dict) or not schema.get("type"):
        return False

    kind = schema["type"]
    if kind == "object" and schema.get("properties"):
        return True
    items = schema.get("items")
    if kind == "array" and isinstance(items, dict):
        if items.get("type") == "object" and items.get("properties"):
            return True

    return sum(1 for key in _CONSTRAINT_KEYS if key in schema) >= 2


def property_fragments(tool: ToolDefinition) -> list[tuple[str, str]]:
    """``(canonical form, path)`` for every complex top-level property of *tool*."""
    return [
        (canonicalize(prop), f"inputSchema.properties.{name}")
        for name, prop in tool.properties.items()
        if is_complex(prop)
    ]


def build_fragment_index(tools: Iterable[ToolDefinition]) -> FragmentIndex:
    """Map each canonical property fragment to every location it occurs at.

    Built once per run; locations are in tool order, then property order.
    """
    index: dict[str, list[FragmentLocation]] = {}
    for position, tool in enumerate(tools):
        for canonical, path in property_fragments(tool):
            index.setdefault(canonical, []).append(
                FragmentLocation(position, tool.display_name, path)
            )
    return {canonical: tuple(locations) for canonical, locations in index.items()}
