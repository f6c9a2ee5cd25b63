from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING

from mcpvet import __version__
from mcpvet.core._types import Category, MaturityLevel, Severity

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from mcpvet.core.result import ToolResult, ValidationResult
    from mcpvet.core.rule import Rule

_SEVERITY_COLORS: dict[Severity, str] = {
    Severity.ERROR: "\033[31m",  # red
    Severity.WARNING: "\033[33m",  # yellow
    Severity.SUGGESTION: "\033[34m",  # blue
}
_MATURITY_COLORS: dict[MaturityLevel, str] = {
    MaturityLevel.EXEMPLARY: "\033[32m",
    MaturityLevel.MATURE: "\033[36m",
    MaturityLevel.MODERATE: "\033[33m",
    MaturityLevel.IMMATURE: "\033[31m",
}
_RED = "\033[31m"
_GREEN = "\033[32m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_RESET = "\033[0m"

_LINE_WIDTH = 66

_CATEGORY_TITLES: dict[Category, str] = {
    Category.SCHEMA: "Schema",
    Category.NAMING: "Naming",
    Category.SECURITY: "Security",
    Category.LLM_COMPATIBILITY: "LLM Compatibility",
    Category.BEST_PRACTICE: "Best Practice",
}

SARIF_SCHEMA = (
    "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/Schemata/"
    "sarif-schema-2.1.0.json"
)
_SARIF_LEVELS: dict[Severity, str] = {
    Severity.ERROR: "error",
    Severity.WARNING: "warning",
    Severity.SUGGESTION: "note",
}


def _use_color(no_color_flag: bool) -> bool:
    if no_color_flag:
        return False
    return not os.environ.get("NO_COLOR", "")


def _c(text: str, code: str, *, color: bool) -> str:
    if not color:
        return text
    return f"{code}{text}{_RESET}"


def _rule(title: str | None = None) -> str:
    if title is None:
        return "─" * _LINE_WIDTH
    header = f"── {title} "
    return header + "─" * max(0, _LINE_WIDTH - len(header))


def format_human(
    result: ValidationResult,
    *,
    verbose: bool = False,
    quiet: bool = False,
    no_color: bool = False,
) -> str:
    """Render *result* for a terminal.

    *verbose* adds suggestions under each issue; *quiet* keeps only
    error-severity issues and hides tools that have none.
    """
    color = _use_color(no_color)
    summary = result.summary
    lines: list[str] = []
    w = lines.append

    w(f"mcpvet {__version__}")
    w("")
    w(f"Validating {summary.total_tools} tool(s) ...")

    for tool_result in result.tools:
        issues = [i for i in tool_result.issues if not quiet or i.severity == Severity.ERROR]
        if quiet and not issues:
            continue
        w("")
        w(_c(_rule(_tool_label(tool_result)), _BOLD, color=color))
        if not issues:
            w(f"  {_c('OK', _GREEN, color=color)}")
            continue
        for issue in issues:
            tag = _c(f"[{issue.rule_id}]", _BOLD, color=color)
            sev = _c(str(issue.severity), _SEVERITY_COLORS[issue.severity], color=color)
            w(f"  {tag} {sev}: {issue.message}")
            if issue.path:
                w(f"    {_c('at:', _DIM, color=color)} {issue.path}")
            if verbose and issue.suggestion:
                w(f"    {_c('hint:', _DIM, color=color)} {issue.suggestion}")

    w("")
    w(_c(_rule(), _DIM, color=color))
    w(f"Summary: {summary.valid_tools}/{summary.total_tools} tools valid")
    w("")
    by_sev = summary.issues_by_severity
    w(f"  Errors:      {by_sev[Severity.ERROR]}")
    if not quiet:
        w(f"  Warnings:    {by_sev[Severity.WARNING]}")
        w(f"  Suggestions: {by_sev[Severity.SUGGESTION]}")
        categories = [(c, n) for c, n in summary.issues_by_category.items() if n]
        if categories:
            w("")
            w("  By category:")
            for category, count in categories:
                w(f"    {category}: {count}")

    level = summary.maturity_level
    w("")
    label = _c(str(level).upper(), _MATURITY_COLORS[level], color=color)
    w(f"Maturity: {label} ({summary.maturity_score}/100)")
    w(f"  {_c(level.description, _DIM, color=color)}")

    faults = result.metadata.diagnostics
    if faults:
        w("")
        noun = "fault" if len(faults) == 1 else "faults"
        w(_c(f"{len(faults)} rule {noun} during validation:", _RED, color=color))
        for fault in faults:
            w(f"  [{fault.rule_id}] {fault.tool}: {fault.error}")

    w("")
    if result.valid:
        w(_c("Validation passed.", _GREEN, color=color))
    else:
        errors = by_sev[Severity.ERROR]
        w(_c(f"Validation failed with {errors} error(s).", _RED, color=color))
    return "\n".join(lines)


def _tool_label(tool_result: ToolResult) -> str:
    mark = "✓" if tool_result.valid else "✗"
    return f"{mark} {tool_result.tool.display_name}"


def format_json(result: ValidationResult) -> str:
    return json.dumps(result.to_dict(), indent=2, default=str)


def format_sarif(result: ValidationResult, rules: Iterable[Rule] = ()) -> str:
    """Render *result* as a SARIF 2.1.0 log.

    Issues map to results with a logical location ``tool.path``.  Rule
    metadata comes from *rules* when given, else from the first issue seen
    for each rule ID.
    """
    known = {r.id: r for r in rules}
    driver_rules: dict[str, dict[str, object]] = {}
    results: list[dict[str, object]] = []

    for issue in result.issues:
        if issue.rule_id not in driver_rules:
            rule = known.get(issue.rule_id)
            entry: dict[str, object] = {
                "id": issue.rule_id,
                "name": issue.rule_id,
                "shortDescription": {
                    "text": rule.description if rule is not None else issue.message
                },
                "defaultConfiguration": {
                    "level": _SARIF_LEVELS[rule.severity if rule is not None else issue.severity]
                },
                "properties": {"category": str(issue.category)},
            }
            if issue.documentation:
                entry["helpUri"] = issue.documentation
            driver_rules[issue.rule_id] = entry

        qualified = f"{issue.tool}.{issue.path}" if issue.path else issue.tool
        sarif_result: dict[str, object] = {
            "ruleId": issue.rule_id,
            "level": _SARIF_LEVELS[issue.severity],
            "message": {"text": issue.message},
            "locations": [
                {
                    "logicalLocations": [
                        {"name": issue.tool, "kind": "tool", "fullyQualifiedName": qualified}
                    ]
                }
            ],
        }
        if issue.suggestion:
            sarif_result["fixes"] = [{"description": {"text": issue.suggestion}}]
        results.append(sarif_result)

    data = {
        "$schema": SARIF_SCHEMA,
        "version": "2.1.0",
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": "mcpvet",
                        "version": result.metadata.validator_version,
                        "rules": list(driver_rules.values()),
                    }
                },
                "results": results,
            }
        ],
    }
    return json.dumps(data, indent=2)


def format_rules_text(
    rules: Sequence[Rule],
    *,
    no_color: bool = False,
    total: int | None = None,
) -> str:
    color = _use_color(no_color)
    lines: list[str] = []
    w = lines.append

    id_w = max((len(r.id) for r in rules), default=0)
    sev_w = max((len(str(r.severity)) for r in rules), default=0)

    groups: dict[Category, list[Rule]] = {}
    for r in rules:
        groups.setdefault(r.category, []).append(r)

    count = len(rules)
    header = f"mcpvet {__version__} - {count} rules"
    if total is not None and total != count:
        header += f" (filtered from {total})"
    w(header)

    for category in Category:
        group = groups.get(category)
        if not group:
            continue

        w("")
        w(_c(_rule(f"{_CATEGORY_TITLES[category]} ({len(group)})"), _BOLD, color=color))
        w("")
        for r in group:
            rule_id = _c(r.id.ljust(id_w), _BOLD, color=color)
            severity = _c(str(r.severity).ljust(sev_w), _SEVERITY_COLORS[r.severity], color=color)
            w(f"  {rule_id}  {severity}  {r.description}")

    return "\n".join(lines)


def format_rules_json(rules: Sequence[Rule]) -> str:
    data = {
        "version": __version__,
        "rules": [
            {
                "id": r.id,
                "category": str(r.category),
                "severity": str(r.severity),
                "description": r.description,
                "documentation": r.documentation,
            }
            for r in rules
        ],
        "total": len(rules),
    }
    return json.dumps(data, indent=2)
