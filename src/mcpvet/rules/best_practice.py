"""Best-practice rules (BP-xxx): annotations, schema size and shape, output schema."""

from __future__ import annotations

import re
from typing import Any

from mcpvet.core._types import Category, Severity
from mcpvet.core.context import RuleContext
from mcpvet.core.fragments import property_fragments
from mcpvet.core.issue import ValidationIssue
from mcpvet.core.rule import Rule
from mcpvet.core.tool import ToolDefinition
from mcpvet.rules._helpers import (
    MCP_ANNOTATIONS_DOC,
    MCP_TOOLS_DOC,
    iter_params,
    param_path,
    schema_depth,
    schema_of,
    text_of,
)

MAX_PARAMETERS = 10
MAX_DEPTH = 4
MAX_LISTED_LOCATIONS = 3

_MODIFYING_NAME = re.compile(
    r"^(create|update|delete|remove|set|add|insert|drop|clear|reset|modify|change"
    r"|write|destroy|purge)"
    r"|-(create|update|delete|remove|set)$",
    re.IGNORECASE,
)


# --- RULE: annotations ---


def _check_title(rule: Rule, tool: ToolDefinition, ctx: RuleContext) -> list[ValidationIssue]:
    if tool.annotations is not None and tool.annotations.title:
        return []
    return [
        rule.issue(
            tool,
            "Tool is missing title annotation for display purposes",
            suggestion="Add annotations.title with a human-friendly name",
        )
    ]


def _check_read_only(rule: Rule, tool: ToolDefinition, ctx: RuleContext) -> list[ValidationIssue]:
    if tool.annotations is not None and tool.annotations.read_only_hint is not None:
        return []
    return [
        rule.issue(
            tool,
            "Tool is missing readOnlyHint annotation",
            suggestion="Add annotations.readOnlyHint to say whether the tool only reads data",
        )
    ]


def _check_destructive(
    rule: Rule, tool: ToolDefinition, ctx: RuleContext
) -> list[ValidationIssue]:
    if not _MODIFYING_NAME.search(text_of(tool.name)):
        return []
    if tool.annotations is not None and tool.annotations.destructive_hint is not None:
        return []
    return [
        rule.issue(
            tool,
            f'Tool name "{tool.name}" suggests data modification '
            "but is missing destructiveHint annotation",
            suggestion="Add annotations.destructiveHint to say whether the change is destructive",
        )
    ]


def _check_idempotent(
    rule: Rule, tool: ToolDefinition, ctx: RuleContext
) -> list[ValidationIssue]:
    if tool.annotations is not None and tool.annotations.idempotent_hint is not None:
        return []
    return [
        rule.issue(
            tool,
            "Tool is missing idempotentHint annotation",
            suggestion=(
                "Add annotations.idempotentHint to say whether repeated calls are safe"
            ),
        )
    ]


BP_001 = Rule(
    "BP-001",
    Category.BEST_PRACTICE,
    Severity.SUGGESTION,
    "Consider adding title annotation for display purposes",
    _check_title,
    documentation=MCP_ANNOTATIONS_DOC,
)
BP_002 = Rule(
    "BP-002",
    Category.BEST_PRACTICE,
    Severity.SUGGESTION,
    "Consider adding readOnlyHint annotation",
    _check_read_only,
    documentation=MCP_ANNOTATIONS_DOC,
)
BP_003 = Rule(
    "BP-003",
    Category.BEST_PRACTICE,
    Severity.SUGGESTION,
    "Consider adding destructiveHint for data-modifying tools",
    _check_destructive,
    documentation=MCP_ANNOTATIONS_DOC,
)
BP_004 = Rule(
    "BP-004",
    Category.BEST_PRACTICE,
    Severity.SUGGESTION,
    "Consider adding idempotentHint annotation",
    _check_idempotent,
    documentation=MCP_ANNOTATIONS_DOC,
)


# --- RULE: schema size, repetition and depth ---


def _check_param_count(
    rule: Rule, tool: ToolDefinition, ctx: RuleContext
) -> list[ValidationIssue]:
    count = len(tool.properties)
    if count <= MAX_PARAMETERS:
        return []
    return [
        rule.issue(
            tool,
            f"Tool has {count} parameters which exceeds the recommended limit of {MAX_PARAMETERS}",
            path="inputSchema.properties",
            suggestion="Consider splitting this tool into smaller, more focused tools",
        )
    ]


def _check_repeated_fragments(
    rule: Rule, tool: ToolDefinition, ctx: RuleContext
) -> list[ValidationIssue]:
    position = ctx.position(tool)
    issues = []
    for canonical, path in property_fragments(tool):
        others = [
            loc.path if loc.position == position else f"{loc.tool} ({loc.path})"
            for loc in ctx.fragment_index.get(canonical, ())
            if not (loc.position == position and loc.path == path)
        ]
        if not others:
            continue
        listed = ", ".join(others[:MAX_LISTED_LOCATIONS])
        if len(others) > MAX_LISTED_LOCATIONS:
            listed += f" and {len(others) - MAX_LISTED_LOCATIONS} more"
        issues.append(
            rule.issue(
                tool,
                f"Schema pattern at {path} is repeated in: {listed}",
                path=path,
                suggestion="Consider using $ref to define this schema once and reference it",
            )
        )
    return issues


def _check_depth(rule: Rule, tool: ToolDefinition, ctx: RuleContext) -> list[ValidationIssue]:
    schema = schema_of(tool)
    if schema is None:
        return []
    depth, path = schema_depth(schema)
    if depth <= MAX_DEPTH:
        return []
    return [
        rule.issue(
            tool,
            f"Schema has {depth} levels of nesting which exceeds "
            f"the recommended limit of {MAX_DEPTH}",
            path=path,
            suggestion="Consider flattening the schema or breaking it into separate tools",
        )
    ]


def _is_complex_param(prop: dict[str, Any]) -> bool:
    if prop.get("type") in ("object", "array"):
        return True
    if prop.get("oneOf") or prop.get("anyOf") or prop.get("allOf"):
        return True
    enum = prop.get("enum")
    return isinstance(enum, list) and len(enum) > 3


def _check_param_examples(
    rule: Rule, tool: ToolDefinition, ctx: RuleContext
) -> list[ValidationIssue]:
    return [
        rule.issue(
            tool,
            f'Complex parameter "{name}" is missing examples',
            path=param_path(name),
            suggestion="Add an 'examples' array to help LLMs understand expected values",
        )
        for name, prop in iter_params(tool)
        if _is_complex_param(prop)
        and not any(key in prop for key in ("examples", "example", "default"))
    ]


BP_005 = Rule(
    "BP-005",
    Category.BEST_PRACTICE,
    Severity.WARNING,
    f"Tools with many parameters (>{MAX_PARAMETERS}) should be split",
    _check_param_count,
)
BP_006 = Rule(
    "BP-006",
    Category.BEST_PRACTICE,
    Severity.SUGGESTION,
    "Use $ref for repeated schema patterns",
    _check_repeated_fragments,
)
BP_007 = Rule(
    "BP-007",
    Category.BEST_PRACTICE,
    Severity.WARNING,
    f"Deeply nested schemas (>{MAX_DEPTH} levels) hurt usability",
    _check_depth,
)
BP_008 = Rule(
    "BP-008",
    Category.BEST_PRACTICE,
    Severity.SUGGESTION,
    "Provide examples in inputSchema for complex parameters",
    _check_param_examples,
)


# --- RULE: outputSchema ---


def _described(schema: Any) -> bool:
    return isinstance(schema, dict) and bool(text_of(schema.get("description")).strip())


def _check_output_schema(
    rule: Rule, tool: ToolDefinition, ctx: RuleContext
) -> list[ValidationIssue]:
    raw = tool.raw
    if not isinstance(raw, dict) or "outputSchema" not in raw:
        return [
            rule.issue(
                tool,
                "Tool is missing outputSchema for output validation and parsing",
                path="outputSchema",
                suggestion=(
                    "Add outputSchema with type, properties and descriptions "
                    "to define the expected output"
                ),
            )
        ]

    output = raw["outputSchema"]
    # A malformed outputSchema is worse than a missing one.
    if not isinstance(output, dict):
        return [
            rule.issue(
                tool,
                "outputSchema must be a valid JSON Schema object",
                path="outputSchema",
                suggestion="Provide a JSON Schema object with type and properties",
                severity=Severity.WARNING,
            )
        ]

    issues = []
    if not isinstance(output.get("type"), (str, list)):
        issues.append(
            rule.issue(
                tool,
                'outputSchema is missing "type" property',
                path="outputSchema.type",
                suggestion='Add "type": "object" or the appropriate type to outputSchema',
                severity=Severity.WARNING,
            )
        )
    if not _described(output):
        issues.append(
            rule.issue(
                tool,
                "outputSchema is missing a description",
                path="outputSchema.description",
                suggestion="Add a description to outputSchema explaining the output structure",
            )
        )

    properties = output.get("properties")
    if output.get("type") == "object" and isinstance(properties, dict) and properties:
        total = len(properties)
        missing = sum(1 for prop in properties.values() if not _described(prop))
        if missing:
            message = (
                "outputSchema properties are missing descriptions"
                if missing == total
                else f"{missing} of {total} outputSchema properties are missing descriptions"
            )
            issues.append(
                rule.issue(
                    tool,
                    message,
                    path="outputSchema.properties",
                    suggestion="Describe every outputSchema property for better LLM understanding",
                )
            )
    return issues


BP_009 = Rule(
    "BP-009",
    Category.BEST_PRACTICE,
    Severity.SUGGESTION,
    "Consider providing outputSchema for better output validation and parsing",
    _check_output_schema,
    documentation=MCP_TOOLS_DOC,
)

RULES: tuple[Rule, ...] = (
    BP_001,
    BP_002,
    BP_003,
    BP_004,
    BP_005,
    BP_006,
    BP_007,
    BP_008,
    BP_009,
)
