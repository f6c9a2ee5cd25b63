"""Rule executor: runs enabled rules against every tool."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from mcpvet.core.config import ENABLED, RuleSetting
from mcpvet.core.context import RuleContext
from mcpvet.core.issue import RuleFault, ValidationIssue

if TYPE_CHECKING:
    from mcpvet.core.registry import RuleRegistry
    from mcpvet.core.rule import Rule
    from mcpvet.core.tool import ToolDefinition

logger = logging.getLogger("mcpvet")


@dataclass(slots=True)
class ExecutionOutcome:
    """Issues per tool (input order) plus any rule faults."""

    tool_issues: list[list[ValidationIssue]] = field(default_factory=list)
    faults: list[RuleFault] = field(default_factory=list)

    @property
    def issues(self) -> list[ValidationIssue]:
        """Flat issue list, tool order then rule order."""
        return [issue for issues in self.tool_issues for issue in issues]


def enabled_rules(
    registry: RuleRegistry,
    settings: Mapping[str, RuleSetting],
) -> list[tuple[Rule, RuleSetting]]:
    """Enabled rules with their settings, in registration order."""
    pairs = []
    for rule in registry:
        setting = settings.get(rule.id, ENABLED)
        if setting.enabled:
            pairs.append((rule, setting))
    return pairs


def execute_rules(
    tools: Sequence[ToolDefinition],
    registry: RuleRegistry,
    settings: Mapping[str, RuleSetting],
) -> ExecutionOutcome:
    """Run every enabled rule against every tool.

    A rule that raises for one tool is recorded as a :class:`RuleFault`
    and the run carries on with the next rule.  Issues from a rule whose
    severity is overridden get the override; nothing else about them is
    touched.
    """
    base = RuleContext.for_tools(tools)
    plan = [
        (rule, setting, base.with_setting(setting))
        for rule, setting in enabled_rules(registry, settings)
    ]

    outcome = ExecutionOutcome()
    for tool in base.all_tools:
        issues: list[ValidationIssue] = []
        for rule, setting, ctx in plan:
            try:
                found = rule.check(tool, ctx)
            except Exception as exc:
                logger.exception(
                    "Rule %s raised while checking tool %r", rule.id, tool.display_name
                )
                outcome.faults.append(
                    RuleFault(rule.id, tool.display_name, f"{type(exc).__name__}: {exc}")
                )
                continue
            if setting.severity is not None:
                found = [dataclasses.replace(issue, severity=setting.severity) for issue in found]
            issues.extend(found)
        outcome.tool_issues.append(issues)

    logger.debug(
        "Ran %d rule(s) over %d tool(s): %d issue(s), %d fault(s)",
        len(plan),
        len(base.all_tools),
        sum(len(i) for i in outcome.tool_issues),
        len(outcome.faults),
    )
    return outcome
