"""Schema rules (SCH-xxx): the tool record and its inputSchema are well formed."""

from __future__ import annotations

import json

from mcpvet.core._types import Category, Severity
from mcpvet.core.context import RuleContext
from mcpvet.core.issue import ValidationIssue
from mcpvet.core.rule import Rule
from mcpvet.core.schema_check import SchemaChecker
from mcpvet.core.tool import ToolDefinition
from mcpvet.rules._helpers import MCP_TOOLS_DOC, has_name, schema_of

_PROPERTIES_DOC = "https://json-schema.org/understanding-json-schema/reference/object#properties"
_REQUIRED_DOC = "https://json-schema.org/understanding-json-schema/reference/object#required"
_CORE_DOC = "https://json-schema.org/draft/2020-12/json-schema-core"


# --- RULE: name / description / inputSchema present ---


def _check_name(rule: Rule, tool: ToolDefinition, ctx: RuleContext) -> list[ValidationIssue]:
    if has_name(tool):
        return []
    return [
        rule.issue(
            tool,
            'Tool is missing required "name" field',
            path="name",
            suggestion='Add a descriptive kebab-case name for the tool (e.g. "get-user-profile")',
        )
    ]


def _check_description(
    rule: Rule, tool: ToolDefinition, ctx: RuleContext
) -> list[ValidationIssue]:
    if isinstance(tool.description, str) and tool.description.strip():
        return []
    return [
        rule.issue(
            tool,
            'Tool is missing required "description" field',
            path="description",
            suggestion="Add a clear description explaining what the tool does and when to use it",
        )
    ]


def _check_input_schema(
    rule: Rule, tool: ToolDefinition, ctx: RuleContext
) -> list[ValidationIssue]:
    if schema_of(tool) is not None:
        return []
    return [
        rule.issue(
            tool,
            'Tool is missing required "inputSchema" field',
            path="inputSchema",
            suggestion="Add an inputSchema object defining the tool's input parameters",
        )
    ]


SCH_001 = Rule(
    "SCH-001",
    Category.SCHEMA,
    Severity.ERROR,
    "Tool must have a name field",
    _check_name,
    documentation=MCP_TOOLS_DOC,
)
SCH_002 = Rule(
    "SCH-002",
    Category.SCHEMA,
    Severity.ERROR,
    "Tool must have a description field",
    _check_description,
    documentation=MCP_TOOLS_DOC,
)
SCH_003 = Rule(
    "SCH-003",
    Category.SCHEMA,
    Severity.ERROR,
    "Tool must have an inputSchema field",
    _check_input_schema,
    documentation=MCP_TOOLS_DOC,
)


# --- RULE: inputSchema is valid JSON Schema ---


class _ValidSchemaCheck:
    """Check body for SCH-004, bound to a shared :class:`SchemaChecker`."""

    def __init__(self, checker: SchemaChecker) -> None:
        self._checker = checker

    def __call__(
        self, rule: Rule, tool: ToolDefinition, ctx: RuleContext
    ) -> list[ValidationIssue]:
        schema = schema_of(tool)
        if schema is None:
            return []
        reason = self._checker.check(schema)
        if reason is None:
            return []
        return [
            rule.issue(
                tool,
                f"inputSchema is not valid JSON Schema: {reason}",
                path="inputSchema",
                suggestion="Review the JSON Schema specification and fix the schema syntax errors",
            )
        ]


def valid_schema_rule(checker: SchemaChecker) -> Rule:
    """Build SCH-004 around *checker*."""
    return Rule(
        "SCH-004",
        Category.SCHEMA,
        Severity.ERROR,
        "inputSchema must be valid JSON Schema",
        _ValidSchemaCheck(checker),
        documentation=_CORE_DOC,
    )


# --- RULE: inputSchema shape ---


def _check_object_type(
    rule: Rule, tool: ToolDefinition, ctx: RuleContext
) -> list[ValidationIssue]:
    schema = schema_of(tool)
    if schema is None:
        return []
    kind = schema.get("type")
    if kind == "object":
        return []
    message = (
        f'inputSchema.type is "{kind}" but must be "object"'
        if kind
        else 'inputSchema is missing required "type" field (must be "object")'
    )
    return [
        rule.issue(
            tool,
            message,
            path="inputSchema.type",
            suggestion='Set inputSchema.type to "object": MCP tool inputs are named parameters',
        )
    ]


def _check_properties(rule: Rule, tool: ToolDefinition, ctx: RuleContext) -> list[ValidationIssue]:
    schema = schema_of(tool)
    if schema is None:
        return []
    properties = schema.get("properties")
    if not isinstance(properties, dict) or not properties:
        message = (
            "inputSchema.properties is empty - tool takes no parameters"
            if isinstance(properties, dict)
            else 'inputSchema is missing "properties" field'
        )
        return [
            rule.issue(
                tool,
                message,
                path="inputSchema.properties",
                suggestion=(
                    "Define the tool's input parameters in inputSchema.properties, "
                    "or document clearly that it takes none"
                ),
            )
        ]
    return []


def _check_required_list(
    rule: Rule, tool: ToolDefinition, ctx: RuleContext
) -> list[ValidationIssue]:
    schema = schema_of(tool)
    if schema is None or not tool.properties:
        return []
    required = schema.get("required")
    if required is None:
        return [
            rule.issue(
                tool,
                'inputSchema has properties but no "required" array - all parameters are optional',
                path="inputSchema.required",
                suggestion=(
                    'Add a "required" array listing parameters that must be provided, '
                    "or [] if all are truly optional"
                ),
            )
        ]
    if not isinstance(required, list):
        return [
            rule.issue(
                tool,
                "inputSchema.required is not an array",
                path="inputSchema.required",
                suggestion='Change "required" to an array of property names (e.g. ["userId"])',
            )
        ]
    return []


def _check_required_exist(
    rule: Rule, tool: ToolDefinition, ctx: RuleContext
) -> list[ValidationIssue]:
    schema = schema_of(tool)
    if schema is None:
        return []
    required = schema.get("required")
    if not isinstance(required, list):
        return []

    names = set(tool.properties)
    issues = []
    for entry in required:
        if not isinstance(entry, str):
            issues.append(
                rule.issue(
                    tool,
                    f"inputSchema.required contains non-string value: {json.dumps(entry)}",
                    path="inputSchema.required",
                    suggestion="Ensure every value in the required array is a property name",
                )
            )
        elif entry not in names:
            issues.append(
                rule.issue(
                    tool,
                    f'Required parameter "{entry}" is not defined in properties',
                    path="inputSchema.required",
                    suggestion=f'Add "{entry}" to inputSchema.properties or drop it from required',
                )
            )
    return issues


SCH_005 = Rule(
    "SCH-005",
    Category.SCHEMA,
    Severity.ERROR,
    'inputSchema.type must be "object"',
    _check_object_type,
    documentation=MCP_TOOLS_DOC,
)
SCH_006 = Rule(
    "SCH-006",
    Category.SCHEMA,
    Severity.WARNING,
    "inputSchema.properties should be defined (not empty object)",
    _check_properties,
    documentation=_PROPERTIES_DOC,
)
SCH_007 = Rule(
    "SCH-007",
    Category.SCHEMA,
    Severity.WARNING,
    "Required parameters should be listed in inputSchema.required",
    _check_required_list,
    documentation=_REQUIRED_DOC,
)
SCH_008 = Rule(
    "SCH-008",
    Category.SCHEMA,
    Severity.ERROR,
    "Parameters in required must exist in properties",
    _check_required_exist,
    documentation=_REQUIRED_DOC,
)


def schema_rules(checker: SchemaChecker) -> tuple[Rule, ...]:
    """The schema rule set, in execution order, with SCH-004 bound to *checker*."""
    return (
        SCH_001,
        SCH_002,
        SCH_003,
        valid_schema_rule(checker),
        SCH_005,
        SCH_006,
        SCH_007,
        SCH_008,
    )
