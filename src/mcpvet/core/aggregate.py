from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from mcpvet.core._types import Category, Severity
from mcpvet.core.issue import ValidationIssue


def _zero_severity() -> dict[Severity, int]:
    return dict.fromkeys(Severity, 0)


def _zero_category() -> dict[Category, int]:
    return dict.fromkeys(Category, 0)


@dataclass(slots=True)
class Tally:
    """Issue counts for a run.  Every bucket is present, zero-filled."""

    by_severity: dict[Severity, int] = field(default_factory=_zero_severity)
    by_category: dict[Category, int] = field(default_factory=_zero_category)
    per_tool: list[dict[Severity, int]] = field(default_factory=list)
    tool_valid: list[bool] = field(default_factory=list)

    @property
    def valid_tools(self) -> int:
        return sum(self.tool_valid)

    @property
    def valid(self) -> bool:
        return self.by_severity[Severity.ERROR] == 0

    @property
    def total(self) -> int:
        return sum(self.by_severity.values())


def aggregate(tool_issues: Sequence[Sequence[ValidationIssue]]) -> Tally:
    """Tally issues by severity and category, per tool and overall.

    A tool is valid when it has no error-severity issue; the run is valid
    when no tool has one.
    """
    tally = Tally()
    for issues in tool_issues:
        counts = _zero_severity()
        for issue in issues:
            counts[issue.severity] += 1
            tally.by_severity[issue.severity] += 1
            tally.by_category[issue.category] += 1
        tally.per_tool.append(counts)
        tally.tool_valid.append(counts[Severity.ERROR] == 0)
    return tally
