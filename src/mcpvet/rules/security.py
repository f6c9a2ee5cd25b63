"""Security rules (SEC-xxx): bounded inputs and careful handling of risky parameters.

All checks look at the top-level parameters in ``inputSchema.properties``
and match parameter names against small pattern tables.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from mcpvet.core._types import Category, Severity
from mcpvet.core.context import RuleContext
from mcpvet.core.issue import ValidationIssue
from mcpvet.core.rule import Rule
from mcpvet.core.tool import ToolDefinition
from mcpvet.rules._helpers import iter_params, name_matches, param_path, text_of, types_of

_I = re.IGNORECASE

# Free-form fields where a length cap would get in the way.
CONTENT_FIELDS = tuple(
    re.compile(p, _I)
    for p in (
        r"^(content|contents|body|text|messages?)$",
        r"^(prompt|thoughts?|input|output|response)$",
        r"^(code|script|source|data|payload|json|xml|html|markdown)$",
        r"^(query|sql|graphql)$",
        r"(content|body|text|data)$",
    )
)
PATH_FIELDS = tuple(re.compile(p, _I) for p in (r"path", r"file", r"dir", r"folder"))
URL_FIELDS = tuple(re.compile(p, _I) for p in (r"url", r"uri", r"href", r"link", r"endpoint"))
COMMAND_FIELDS = (re.compile(r"^(command|query|action|method|operation|mode|type|kind)$", _I),)
SENSITIVE_FIELDS = tuple(
    re.compile(p, _I)
    for p in (
        r"password",
        r"passwd",
        r"token",
        r"secret",
        r"api[_-]?key",
        r"auth",
        r"credential",
        r"private[_-]?key",
        r"access[_-]?key",
    )
)
CODE_FIELDS = (
    re.compile(
        r"^(script|code|eval|exec|execute|command|cmd|shell|expression|query|sql"
        r"|javascript|python|bash)$",
        _I,
    ),
)
_SECURITY_NOTE = re.compile(r"danger|warning|security|caution|risk|unsafe|untrusted", _I)


def is_sensitive(name: str) -> bool:
    return name_matches(name, SENSITIVE_FIELDS)


type _ParamCheck = Callable[[str, dict], str | None]


def _per_param(check: _ParamCheck, suggestion: str) -> Callable[..., list[ValidationIssue]]:
    """Wrap a ``(name, schema) -> message | None`` predicate as a check function.

    One issue per parameter the predicate flags, pointing at that parameter.
    """

    def run(rule: Rule, tool: ToolDefinition, ctx: RuleContext) -> list[ValidationIssue]:
        issues = []
        for name, prop in iter_params(tool):
            message = check(name, prop)
            if message is not None:
                issues.append(
                    rule.issue(tool, message, path=param_path(name), suggestion=suggestion)
                )
        return issues

    return run


def _unbounded_string(name: str, prop: dict) -> str | None:
    if "string" not in types_of(prop) or "maxLength" in prop:
        return None
    if name_matches(name, CONTENT_FIELDS):
        return None
    return f"String parameter '{name}' is missing maxLength constraint"


def _unbounded_array(name: str, prop: dict) -> str | None:
    if "array" in types_of(prop) and "maxItems" not in prop:
        return f"Array parameter '{name}' is missing maxItems constraint"
    return None


def _unbounded_number(name: str, prop: dict) -> str | None:
    numeric = types_of(prop) & {"number", "integer"}
    if numeric and "minimum" not in prop and "maximum" not in prop:
        return f"Number parameter '{name}' is missing minimum/maximum constraints"
    return None


def _unpatterned_path(name: str, prop: dict) -> str | None:
    if "string" in types_of(prop) and name_matches(name, PATH_FIELDS) and "pattern" not in prop:
        return f"File path parameter '{name}' is missing pattern constraint for path validation"
    return None


def _unformatted_url(name: str, prop: dict) -> str | None:
    if "string" in types_of(prop) and name_matches(name, URL_FIELDS):
        if prop.get("format") != "uri":
            return f"URL parameter '{name}' should use format: \"uri\" for proper URL validation"
    return None


def _open_command(name: str, prop: dict) -> str | None:
    if "string" in types_of(prop) and name_matches(name, COMMAND_FIELDS) and "enum" not in prop:
        return (
            f"Parameter '{name}' appears to be a command/action "
            "but is missing an enum constraint"
        )
    return None


def _sensitive_default(name: str, prop: dict) -> str | None:
    if is_sensitive(name) and "default" in prop:
        return f"Security-sensitive parameter '{name}' has a default value"
    return None


def _open_object(name: str, prop: dict) -> str | None:
    if "object" not in types_of(prop):
        return None
    # additionalProperties defaults to true in JSON Schema
    if prop.get("additionalProperties", True) is True:
        return f"Object parameter '{name}' allows additional properties"
    return None


def _undocumented_code(name: str, prop: dict) -> str | None:
    if not name_matches(name, CODE_FIELDS):
        return None
    if _SECURITY_NOTE.search(text_of(prop.get("description"))):
        return None
    return f"Parameter '{name}' appears to accept code/scripts but lacks security documentation"


def _check_sensitive(rule: Rule, tool: ToolDefinition, ctx: RuleContext) -> list[ValidationIssue]:
    # Any property counts here, even one without a usable schema.
    return [
        rule.issue(
            tool,
            f"Parameter '{name}' appears to contain sensitive data",
            path=param_path(name),
            suggestion=(
                "Handle this parameter securely: keep it out of logs, transmit it securely, "
                "and prefer supplying it at runtime over storing it"
            ),
        )
        for name in tool.properties
        if is_sensitive(name)
    ]


SEC_001 = Rule(
    "SEC-001",
    Category.SECURITY,
    Severity.ERROR,
    "String parameters must have maxLength constraint (except content fields)",
    _per_param(_unbounded_string, 'Add "maxLength": 100 or an appropriate limit'),
)
SEC_002 = Rule(
    "SEC-002",
    Category.SECURITY,
    Severity.ERROR,
    "Array parameters must have maxItems constraint",
    _per_param(_unbounded_array, 'Add "maxItems": 100 or an appropriate limit'),
)
SEC_003 = Rule(
    "SEC-003",
    Category.SECURITY,
    Severity.WARNING,
    "Number parameters should have minimum/maximum constraints",
    _per_param(
        _unbounded_number, 'Add "minimum" and/or "maximum" constraints to bound the value'
    ),
)
SEC_004 = Rule(
    "SEC-004",
    Category.SECURITY,
    Severity.ERROR,
    "File path parameters must use pattern for path validation",
    _per_param(
        _unpatterned_path,
        'Add a "pattern" constraint to validate the path and prevent traversal '
        '(e.g. "^[a-zA-Z0-9_\\-./]+$")',
    ),
)
SEC_005 = Rule(
    "SEC-005",
    Category.SECURITY,
    Severity.ERROR,
    'URL parameters must use format: "uri"',
    _per_param(_unformatted_url, 'Add "format": "uri" to validate URL structure'),
)
SEC_006 = Rule(
    "SEC-006",
    Category.SECURITY,
    Severity.WARNING,
    "Command/query parameters should use enum when values are known",
    _per_param(
        _open_command,
        'If the valid values are known, add an "enum" array to restrict input to them',
    ),
)
SEC_007 = Rule(
    "SEC-007",
    Category.SECURITY,
    Severity.WARNING,
    "Sensitive parameter names (password, token, key, secret) should be flagged",
    _check_sensitive,
)
SEC_008 = Rule(
    "SEC-008",
    Category.SECURITY,
    Severity.ERROR,
    "No default values for security-sensitive parameters",
    _per_param(
        _sensitive_default,
        "Remove the default value. Credentials should always be provided explicitly",
    ),
)
SEC_009 = Rule(
    "SEC-009",
    Category.SECURITY,
    Severity.WARNING,
    "Object parameters with additionalProperties: true need justification",
    _per_param(
        _open_object,
        'Add "additionalProperties": false, or document why extra properties are needed',
    ),
)
SEC_010 = Rule(
    "SEC-010",
    Category.SECURITY,
    Severity.WARNING,
    "Parameters accepting code/scripts should be documented as dangerous",
    _per_param(
        _undocumented_code,
        "Describe the security implications of accepting code or script input",
    ),
)

RULES: tuple[Rule, ...] = (
    SEC_001,
    SEC_002,
    SEC_003,
    SEC_004,
    SEC_005,
    SEC_006,
    SEC_007,
    SEC_008,
    SEC_009,
    SEC_010,
)
