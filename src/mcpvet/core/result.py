from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from mcpvet.core._types import Category, MaturityLevel, Severity
from mcpvet.core.issue import RuleFault, ValidationIssue
from mcpvet.core.tool import ToolDefinition

MCP_SPEC_VERSION = "2025-11-25"


@dataclass(frozen=True, slots=True)
class ValidationSummary:
    total_tools: int
    valid_tools: int
    issues_by_severity: dict[Severity, int]
    issues_by_category: dict[Category, int]
    maturity_score: int
    maturity_level: MaturityLevel

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalTools": self.total_tools,
            "validTools": self.valid_tools,
            "issuesByCategory": {str(k): v for k, v in self.issues_by_category.items()},
            "issuesBySeverity": {str(k): v for k, v in self.issues_by_severity.items()},
            "maturityScore": self.maturity_score,
            "maturityLevel": str(self.maturity_level),
        }


@dataclass(frozen=True, slots=True)
class ToolResult:
    name: str
    valid: bool
    tool: ToolDefinition
    issues: list[ValidationIssue]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "valid": self.valid,
            "issues": [i.to_dict() for i in self.issues],
            "tool": self.tool.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class ValidationMetadata:
    validator_version: str
    timestamp: str
    duration_ms: int
    config_used: str = ""
    mcp_spec_version: str = MCP_SPEC_VERSION
    llm_analysis_used: bool = False
    diagnostics: list[RuleFault] = field(default_factory=list)
    """Rule faults from this run.  Never counted as issues."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "validatorVersion": self.validator_version,
            "mcpSpecVersion": self.mcp_spec_version,
            "timestamp": self.timestamp,
            "duration": self.duration_ms,
            "configUsed": self.config_used,
            "llmAnalysisUsed": self.llm_analysis_used,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of one validation run.

    This is the single shape every reporter serializes; ``to_dict()`` gives
    the camelCase form used for JSON output.
    """

    valid: bool
    summary: ValidationSummary
    issues: list[ValidationIssue]
    tools: list[ToolResult]
    metadata: ValidationMetadata

    def issues_for(self, tool_name: str) -> list[ValidationIssue]:
        return [i for i in self.issues if i.tool == tool_name]

    def rule_ids(self) -> set[str]:
        return {i.rule_id for i in self.issues}

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "summary": self.summary.to_dict(),
            "issues": [i.to_dict() for i in self.issues],
            "tools": [t.to_dict() for t in self.tools],
            "metadata": self.metadata.to_dict(),
        }
