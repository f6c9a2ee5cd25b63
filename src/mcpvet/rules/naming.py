"""Naming rules (NAM-xxx): tool and parameter naming conventions."""

from __future__ import annotations

import re
from collections import Counter

from mcpvet.core._types import Category, Severity
from mcpvet.core.context import RuleContext
from mcpvet.core.issue import ValidationIssue
from mcpvet.core.rule import Rule
from mcpvet.core.tool import ToolDefinition
from mcpvet.rules._helpers import has_name

_KEBAB = re.compile(r"^[a-z][a-z0-9]*(-[a-z0-9]+)*$")

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 50

# Tool names should open with one of these (prefix match on the first segment).
DESCRIPTIVE_VERBS: tuple[str, ...] = (
    # crud
    "get", "create", "update", "delete", "list",
    # query
    "search", "find", "fetch", "query", "lookup",
    # modify
    "add", "remove", "set", "edit", "modify",
    # analysis
    "check", "validate", "verify", "analyze", "inspect",
    # actions
    "run", "execute", "process", "send", "submit",
    # files
    "read", "write", "save", "load", "export", "import", "move", "copy", "rename",
    "zip", "unzip", "compress", "decompress", "extract", "archive",
    # display
    "print", "echo", "log", "show", "display", "render",
    # state
    "open", "close", "init", "initialize", "connect", "disconnect",
    "sample", "test", "try", "ping",
    "start", "stop", "enable", "disable", "generate", "convert", "transform",
    "format", "parse", "sync", "refresh", "clear", "reset", "count", "calculate",
    "compare", "merge", "split", "filter", "sort", "group", "map", "reduce",
    "apply", "call", "invoke", "trigger", "notify", "publish", "subscribe",
    "download", "upload", "install", "uninstall", "register", "unregister",
    "authenticate", "authorize", "revoke", "cancel", "abort", "terminate", "kill",
    # vcs and build
    "clone", "fork", "branch", "checkout", "commit", "push", "pull", "revert",
    "rollback", "deploy", "build", "compile", "bundle", "minify", "optimize", "lint",
    "scan", "detect", "monitor", "watch", "track", "record", "replay", "undo", "redo",
    "backup", "restore", "encrypt", "decrypt", "sign", "hash", "encode", "decode",
    "serialize", "deserialize", "sanitize", "escape", "unescape", "wrap", "unwrap",
    "bind", "unbind", "attach", "detach", "mount", "unmount", "lock", "unlock",
    "grant", "deny", "allow", "block", "accept", "reject", "approve", "request",
    "respond", "handle", "dispatch", "route", "forward", "redirect", "proxy",
    "cache", "flush", "purge", "invalidate", "expire", "extend", "renew",
    "schedule", "queue", "dequeue", "enqueue", "pop", "peek", "poll", "wait",
    "sleep", "pause", "resume", "retry", "repeat", "loop", "iterate", "traverse",
    "visit", "walk", "crawl", "scrape", "harvest", "collect", "gather",
    "aggregate", "summarize", "report", "dump", "stream", "pipe", "tee",
    "broadcast", "multicast", "unicast",
)  # fmt: skip


def to_kebab_case(name: str) -> str:
    name = re.sub(r"([a-z])([A-Z])", r"\1-\2", name)
    name = re.sub(r"[\s_]+", "-", name)
    return re.sub(r"--+", "-", name).lower()


def to_camel_case(name: str) -> str:
    name = re.sub(r"[-_]([a-z])", lambda m: m.group(1).upper(), name)
    return name[:1].lower() + name[1:] if name[:1].isupper() else name


_CASING_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("SCREAMING_CASE", re.compile(r"^[A-Z][A-Z0-9]*(_[A-Z0-9]+)+$")),
    ("SCREAMING_CASE", re.compile(r"^[A-Z][A-Z0-9]+$")),
    ("snake_case", re.compile(r"^[a-z][a-z0-9]*(_[a-z0-9]+)+$")),
    ("kebab-case", re.compile(r"^[a-z][a-z0-9]*(-[a-z0-9]+)+$")),
    ("PascalCase", re.compile(r"^[A-Z](?=.*[a-z])[a-zA-Z0-9]*$")),
    ("camelCase", re.compile(r"^[a-z][a-zA-Z0-9]*$")),
)


def detect_casing(name: str) -> str:
    """Classify a parameter name; ``"other"`` when no convention fits.

    Single lowercase words (``id``, ``name``) count as camelCase.
    """
    for casing, pattern in _CASING_PATTERNS:
        if pattern.match(name):
            return casing
    return "other"


# --- RULE: tool name shape ---


def _check_non_empty(rule: Rule, tool: ToolDefinition, ctx: RuleContext) -> list[ValidationIssue]:
    if has_name(tool):
        return []
    return [
        rule.issue(
            tool,
            "Tool name must be non-empty",
            path="name",
            suggestion="Provide a descriptive kebab-case name for the tool",
        )
    ]


def _check_kebab(rule: Rule, tool: ToolDefinition, ctx: RuleContext) -> list[ValidationIssue]:
    if not has_name(tool) or _KEBAB.match(tool.name):
        return []
    return [
        rule.issue(
            tool,
            f'Tool name "{tool.name}" must use kebab-case format',
            path="name",
            suggestion=f'Use kebab-case format: "{to_kebab_case(tool.name)}"',
        )
    ]


def _check_length(rule: Rule, tool: ToolDefinition, ctx: RuleContext) -> list[ValidationIssue]:
    if not has_name(tool):
        return []
    length = len(tool.name)
    if length < NAME_MIN_LENGTH:
        return [
            rule.issue(
                tool,
                f'Tool name "{tool.name}" is too short ({length} characters). '
                f"Should be at least {NAME_MIN_LENGTH} characters.",
                path="name",
                suggestion="Use a more descriptive name that clearly indicates the tool's purpose",
            )
        ]
    if length > NAME_MAX_LENGTH:
        return [
            rule.issue(
                tool,
                f'Tool name "{tool.name}" is too long ({length} characters). '
                f"Should be at most {NAME_MAX_LENGTH} characters.",
                path="name",
                suggestion="Use a shorter, more concise name while keeping it descriptive",
            )
        ]
    return []


def _check_leading_digit(
    rule: Rule, tool: ToolDefinition, ctx: RuleContext
) -> list[ValidationIssue]:
    if not has_name(tool) or not tool.name[0].isdigit():
        return []
    return [
        rule.issue(
            tool,
            f'Tool name "{tool.name}" should not start with a number',
            path="name",
            suggestion="Start the tool name with a descriptive verb or noun instead of a number",
        )
    ]


def _check_verb(rule: Rule, tool: ToolDefinition, ctx: RuleContext) -> list[ValidationIssue]:
    if not has_name(tool):
        return []
    first = tool.name.split("-")[0].lower()
    if any(first.startswith(verb) for verb in DESCRIPTIVE_VERBS):
        return []
    return [
        rule.issue(
            tool,
            f'Tool name "{tool.name}" should start with a descriptive verb',
            path="name",
            suggestion=(
                "Consider a verb prefix like: get-, create-, update-, delete-, list-, "
                "search-, find-, fetch-, add-, remove-, set-, check-, validate-"
            ),
        )
    ]


NAM_001 = Rule(
    "NAM-001", Category.NAMING, Severity.ERROR, "Tool name must be non-empty", _check_non_empty
)
NAM_002 = Rule(
    "NAM-002",
    Category.NAMING,
    Severity.ERROR,
    "Tool name must use kebab-case format",
    _check_kebab,
)
NAM_003 = Rule(
    "NAM-003",
    Category.NAMING,
    Severity.WARNING,
    f"Tool name should be {NAME_MIN_LENGTH}-{NAME_MAX_LENGTH} characters",
    _check_length,
)
NAM_004 = Rule(
    "NAM-004",
    Category.NAMING,
    Severity.WARNING,
    "Tool name should not start with numbers",
    _check_leading_digit,
)
NAM_005 = Rule(
    "NAM-005",
    Category.NAMING,
    Severity.WARNING,
    "Tool name should use descriptive verbs",
    _check_verb,
)


# --- RULE: parameter casing ---


def _check_param_casing(
    rule: Rule, tool: ToolDefinition, ctx: RuleContext
) -> list[ValidationIssue]:
    names = list(tool.properties)
    if not names:
        return []

    casing = {name: detect_casing(name) for name in names}
    counts = Counter(casing.values())
    # most_common keeps first-seen order among ties
    dominant = counts.most_common(1)[0][0]

    issues = []
    inconsistent = [n for n, c in casing.items() if c not in (dominant, "other")]
    if inconsistent:
        issues.append(
            rule.issue(
                tool,
                "Parameter names have inconsistent casing. "
                f"Found mixed styles: {', '.join(counts)}",
                path="inputSchema.properties",
                suggestion=(
                    f"Use consistent {dominant} for all parameters. "
                    f"Inconsistent: {', '.join(inconsistent)}"
                ),
            )
        )

    not_camel = [n for n, c in casing.items() if c not in ("camelCase", "other")]
    if not_camel and dominant != "camelCase":
        renames = ", ".join(f"{n} -> {to_camel_case(n)}" for n in not_camel)
        issues.append(
            rule.issue(
                tool,
                f"Parameter names should use camelCase (current: {dominant})",
                path="inputSchema.properties",
                suggestion=f"Consider renaming: {renames}",
            )
        )
    return issues


NAM_006 = Rule(
    "NAM-006",
    Category.NAMING,
    Severity.WARNING,
    "Parameter names should use consistent casing (camelCase recommended)",
    _check_param_casing,
)

RULES: tuple[Rule, ...] = (NAM_001, NAM_002, NAM_003, NAM_004, NAM_005, NAM_006)
