from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from mcpvet.core._types import SourceKind

_UNNAMED = "(unnamed)"


@dataclass(frozen=True, slots=True)
class ToolAnnotations:
    """MCP behaviour hints attached to a tool."""

    title: str | None = None
    read_only_hint: bool | None = None
    destructive_hint: bool | None = None
    idempotent_hint: bool | None = None
    open_world_hint: bool | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ToolAnnotations:
        return cls(
            title=data.get("title"),
            read_only_hint=data.get("readOnlyHint"),
            destructive_hint=data.get("destructiveHint"),
            idempotent_hint=data.get("idempotentHint"),
            open_world_hint=data.get("openWorldHint"),
        )

    def to_dict(self) -> dict[str, Any]:
        pairs = (
            ("title", self.title),
            ("readOnlyHint", self.read_only_hint),
            ("destructiveHint", self.destructive_hint),
            ("idempotentHint", self.idempotent_hint),
            ("openWorldHint", self.open_world_hint),
        )
        return {k: v for k, v in pairs if v is not None}


@dataclass(frozen=True, slots=True)
class ToolSource:
    """Provenance of a tool definition."""

    kind: SourceKind
    location: str
    raw: Any

    def to_dict(self) -> dict[str, Any]:
        return {"type": str(self.kind), "location": self.location, "raw": self.raw}


@dataclass(frozen=True, slots=True, eq=False)
class ToolDefinition:
    """A tool definition under validation.

    Owned by the caller; rules read it and never modify it.  Equality is
    identity so that two tools with the same content stay distinguishable
    inside one run.
    """

    name: str
    description: str
    input_schema: Any
    annotations: ToolAnnotations | None = None
    source: ToolSource | None = None

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        *,
        kind: SourceKind = SourceKind.FILE,
        location: str = "",
    ) -> ToolDefinition:
        """Build a tool from its decoded MCP form (``name``, ``inputSchema``, ...).

        The mapping itself is kept as ``source.raw``.
        """
        annotations = data.get("annotations")
        return cls(
            name=data.get("name", ""),
            description=data.get("description", ""),
            input_schema=data.get("inputSchema"),
            annotations=(
                ToolAnnotations.from_dict(annotations)
                if isinstance(annotations, Mapping)
                else None
            ),
            source=ToolSource(kind=kind, location=location, raw=data),
        )

    @property
    def display_name(self) -> str:
        """Name used in issues; falls back to ``"(unnamed)"``."""
        if isinstance(self.name, str) and self.name.strip():
            return self.name
        return _UNNAMED

    @property
    def properties(self) -> dict[str, Any]:
        """``inputSchema.properties`` when it is a mapping, else ``{}``.

        Parameter names are always strings; other keys are converted with
        ``str()``.
        """
        if not isinstance(self.input_schema, dict):
            return {}
        props = self.input_schema.get("properties")
        if not isinstance(props, dict):
            return {}
        if all(isinstance(key, str) for key in props):
            return props
        return {str(key): value for key, value in props.items()}

    @property
    def raw(self) -> Any:
        return self.source.raw if self.source is not None else None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }
        if self.annotations is not None:
            data["annotations"] = self.annotations.to_dict()
        if self.source is not None:
            data["source"] = self.source.to_dict()
        return data
