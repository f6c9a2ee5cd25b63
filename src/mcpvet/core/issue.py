from dataclasses import dataclass
from typing import Any

from mcpvet.core._types import Category, Severity


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """A single finding reported by a rule for one tool."""

    rule_id: str
    category: Category
    severity: Severity
    message: str
    tool: str
    path: str | None = None
    suggestion: str | None = None
    documentation: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.rule_id,
            "category": str(self.category),
            "severity": str(self.severity),
            "message": self.message,
            "tool": self.tool,
        }
        if self.path is not None:
            data["path"] = self.path
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        if self.documentation is not None:
            data["documentation"] = self.documentation
        return data


@dataclass(frozen=True, slots=True)
class RuleFault:
    """A rule raised while checking a tool.

    Faults are diagnostics about the validator itself, never issues about
    the tool being validated.
    """

    rule_id: str
    tool: str
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"rule": self.rule_id, "tool": self.tool, "error": self.error}
