from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from mcpvet.core._types import Category, Severity
from mcpvet.core.issue import ValidationIssue

if TYPE_CHECKING:
    from mcpvet.core.context import RuleContext
    from mcpvet.core.tool import ToolDefinition

type CheckFn = Callable[[Rule, ToolDefinition, RuleContext], list[ValidationIssue]]


@dataclass(frozen=True, slots=True)
class Rule:
    """A single validation rule.

    The check function receives the rule itself as its first argument, so
    a check body reads its own id, category and documentation from an
    explicit parameter.

    Example::

        def _check(rule: Rule, tool: ToolDefinition, ctx: RuleContext) -> list[ValidationIssue]:
            if tool.name.strip():
                return []
            return [rule.issue(tool, "Tool name must be non-empty", path="name")]

        NAM_001 = Rule(
            "NAM-001",
            Category.NAMING,
            Severity.ERROR,
            "Tool name must be non-empty",
            _check,
        )
    """

    id: str
    category: Category
    severity: Severity
    description: str
    check_fn: CheckFn = field(repr=False, compare=False)
    documentation: str | None = None

    def check(self, tool: ToolDefinition, ctx: RuleContext) -> list[ValidationIssue]:
        """Run the rule against *tool*. Always returns a list."""
        return list(self.check_fn(self, tool, ctx))

    def issue(
        self,
        tool: ToolDefinition,
        message: str,
        *,
        path: str | None = None,
        suggestion: str | None = None,
        severity: Severity | None = None,
    ) -> ValidationIssue:
        """Build an issue carrying this rule's identity.

        ``severity`` defaults to the rule's default severity.
        """
        return ValidationIssue(
            rule_id=self.id,
            category=self.category,
            severity=severity or self.severity,
            message=message,
            tool=tool.display_name,
            path=path,
            suggestion=suggestion,
            documentation=self.documentation,
        )

    def __str__(self) -> str:
        return f"[{self.id}] {self.description}"
