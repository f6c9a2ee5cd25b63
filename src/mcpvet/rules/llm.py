"""LLM compatibility rules (LLM-xxx).

Lexical heuristics over tool and parameter descriptions: an agent picks
and fills tools from their text alone, so the text has to say what the
tool does, when to use it, and what each parameter expects.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass

from mcpvet.core._types import Category, Severity
from mcpvet.core.context import RuleContext
from mcpvet.core.issue import ValidationIssue
from mcpvet.core.rule import Rule
from mcpvet.core.tool import ToolDefinition
from mcpvet.rules._helpers import iter_params, param_path, text_of, word_pattern

_I = re.IGNORECASE

DESCRIPTION_MIN_LENGTH = 20
DESCRIPTION_MAX_LENGTH = 500
PARAM_DESCRIPTION_MIN_LENGTH = 10
PARAM_DESCRIPTION_MAX_LENGTH = 200


def _description(tool: ToolDefinition) -> str:
    """The stripped tool description, or ``""`` (LLM-001 reports that case)."""
    return text_of(tool.description).strip()


type _CheckFn = Callable[..., list[ValidationIssue]]


def _when_described(check: _CheckFn) -> _CheckFn:
    """Skip tools whose description is empty."""

    def run(rule: Rule, tool: ToolDefinition, ctx: RuleContext) -> list[ValidationIssue]:
        if not _description(tool):
            return []
        return check(rule, tool, ctx)

    return run


# --- RULE: description present and sized ---


def _check_non_empty(rule: Rule, tool: ToolDefinition, ctx: RuleContext) -> list[ValidationIssue]:
    if _description(tool):
        return []
    return [
        rule.issue(
            tool,
            "Tool description is empty or missing",
            path="description",
            suggestion="Add a clear description explaining what this tool does and when to use it",
        )
    ]


@_when_described
def _check_length(rule: Rule, tool: ToolDefinition, ctx: RuleContext) -> list[ValidationIssue]:
    length = len(_description(tool))
    if length < DESCRIPTION_MIN_LENGTH:
        return [
            rule.issue(
                tool,
                f"Tool description is too short ({length} characters, "
                f"minimum {DESCRIPTION_MIN_LENGTH})",
                path="description",
                suggestion=(
                    f"Expand the description to at least {DESCRIPTION_MIN_LENGTH} characters "
                    "covering what the tool does and when to use it"
                ),
            )
        ]
    if length > DESCRIPTION_MAX_LENGTH:
        return [
            rule.issue(
                tool,
                f"Tool description is too long ({length} characters, "
                f"maximum {DESCRIPTION_MAX_LENGTH})",
                path="description",
                suggestion=(
                    f"Shorten the description to under {DESCRIPTION_MAX_LENGTH} characters "
                    "while keeping essential information"
                ),
            )
        ]
    return []


LLM_001 = Rule(
    "LLM-001",
    Category.LLM_COMPATIBILITY,
    Severity.ERROR,
    "Tool description must be non-empty",
    _check_non_empty,
)
LLM_002 = Rule(
    "LLM-002",
    Category.LLM_COMPATIBILITY,
    Severity.WARNING,
    f"Tool description should be {DESCRIPTION_MIN_LENGTH}-{DESCRIPTION_MAX_LENGTH} characters",
    _check_length,
)


# --- RULE: description says what, when, and gives examples ---

ACTION_VERBS: tuple[str, ...] = (
    "creates", "retrieves", "updates", "deletes", "removes", "sends", "fetches",
    "generates", "validates", "returns", "gets", "lists", "searches", "finds",
    "adds", "sets", "reads", "writes", "saves", "loads", "runs", "executes",
    "starts", "stops", "checks", "converts", "calculates", "computes", "queries",
    "uploads", "downloads", "parses", "formats", "analyzes", "summarizes",
    "extracts", "publishes", "schedules", "cancels", "moves", "copies", "renames",
    "lookups", "looks", "modifies", "inserts", "opens", "closes", "builds",
    "deploys", "installs", "registers", "resolves", "sorts", "filters", "merges",
    "create", "retrieve", "update", "delete", "remove", "send", "fetch",
    "generate", "validate", "return", "get", "search", "find", "add", "read",
    "write", "save", "load", "execute", "convert", "calculate", "compute",
    "upload", "download", "parse", "analyze", "summarize", "extract",
    "creating", "retrieving", "updating", "deleting", "sending", "fetching",
    "generating", "validating", "returning", "searching", "listing",
)  # fmt: skip
_ACTION_VERB = word_pattern(ACTION_VERBS)


@_when_described
def _check_action_verb(
    rule: Rule, tool: ToolDefinition, ctx: RuleContext
) -> list[ValidationIssue]:
    if _ACTION_VERB.search(tool.description):
        return []
    return [
        rule.issue(
            tool,
            "Tool description does not explain what the tool does",
            path="description",
            suggestion=(
                'Use an action verb to state what the tool does (e.g. "Retrieves...", '
                '"Creates...", "Deletes...")'
            ),
        )
    ]


WHEN_PHRASES: tuple[str, ...] = (
    "when", "if ", "use this to", "use this for", "used to", "used for",
    "useful for", "helps to", "helps with", "for ", "in order to", "to ",
    "allows you to", "enables", "lets you", "designed for", "intended for",
    "meant for", "best for", "ideal for", "suitable for", "should be used",
    "can be used", "typically used", "commonly used", "especially useful",
    "particularly useful", "helpful for", "helpful when",
)  # fmt: skip


@_when_described
def _check_when(rule: Rule, tool: ToolDefinition, ctx: RuleContext) -> list[ValidationIssue]:
    lowered = tool.description.lower()
    if any(phrase in lowered for phrase in WHEN_PHRASES):
        return []
    return [
        rule.issue(
            tool,
            "Tool description does not explain when to use this tool",
            path="description",
            suggestion='Add context about when to use this tool (e.g. "Use this when...")',
        )
    ]


EXAMPLE_PHRASES: tuple[str, ...] = (
    "example", "e.g.", "e.g,", "eg.", "eg:", "for instance", "such as",
    "like ", "including", "sample", "```", '"', "'",
)  # fmt: skip
EXAMPLE_PATTERNS = (
    re.compile(r"\b\w+\s*=\s*[\"'][^\"']+[\"']"),
    re.compile(r"\b\w+:\s*[\"'][^\"']+[\"']"),
    re.compile(r"`[^`]+`"),
    re.compile(r"\(\s*e\.?g\.?\s+", _I),
)


@_when_described
def _check_examples(rule: Rule, tool: ToolDefinition, ctx: RuleContext) -> list[ValidationIssue]:
    lowered = tool.description.lower()
    if any(p in lowered for p in EXAMPLE_PHRASES):
        return []
    if any(p.search(tool.description) for p in EXAMPLE_PATTERNS):
        return []
    return [
        rule.issue(
            tool,
            "Tool description does not include usage examples",
            path="description",
            suggestion="Add an example of a call (e.g. \"Example: search-users query='john'\")",
        )
    ]


LLM_003 = Rule(
    "LLM-003",
    Category.LLM_COMPATIBILITY,
    Severity.WARNING,
    "Tool description should explain WHAT the tool does",
    _check_action_verb,
)
LLM_004 = Rule(
    "LLM-004",
    Category.LLM_COMPATIBILITY,
    Severity.WARNING,
    "Tool description should explain WHEN to use the tool",
    _check_when,
)
LLM_005 = Rule(
    "LLM-005",
    Category.LLM_COMPATIBILITY,
    Severity.SUGGESTION,
    "Tool description should include example usage",
    _check_examples,
)


# --- RULE: parameter descriptions ---


def _check_param_described(
    rule: Rule, tool: ToolDefinition, ctx: RuleContext
) -> list[ValidationIssue]:
    return [
        rule.issue(
            tool,
            f"Parameter '{name}' is missing a description",
            path=param_path(name, "description"),
            suggestion=f"Add a description to '{name}' explaining its purpose and expected values",
        )
        for name, prop in iter_params(tool)
        if not text_of(prop.get("description")).strip()
    ]


def _check_param_length(
    rule: Rule, tool: ToolDefinition, ctx: RuleContext
) -> list[ValidationIssue]:
    issues = []
    for name, prop in iter_params(tool):
        description = prop.get("description")
        if not isinstance(description, str) or not description:
            continue
        length = len(description.strip())
        if length < PARAM_DESCRIPTION_MIN_LENGTH:
            message = (
                f"Parameter '{name}' description is too short "
                f"({length} characters, minimum {PARAM_DESCRIPTION_MIN_LENGTH})"
            )
            suggestion = (
                f"Expand the description to at least {PARAM_DESCRIPTION_MIN_LENGTH} characters "
                "with details about expected values and format"
            )
        elif length > PARAM_DESCRIPTION_MAX_LENGTH:
            message = (
                f"Parameter '{name}' description is too long "
                f"({length} characters, maximum {PARAM_DESCRIPTION_MAX_LENGTH})"
            )
            suggestion = (
                f"Shorten the description to under {PARAM_DESCRIPTION_MAX_LENGTH} characters "
                "while keeping essential information"
            )
        else:
            continue
        issues.append(
            rule.issue(
                tool, message, path=param_path(name, "description"), suggestion=suggestion
            )
        )
    return issues


LLM_006 = Rule(
    "LLM-006",
    Category.LLM_COMPATIBILITY,
    Severity.ERROR,
    "Each parameter must have a description",
    _check_param_described,
)
LLM_007 = Rule(
    "LLM-007",
    Category.LLM_COMPATIBILITY,
    Severity.WARNING,
    f"Parameter descriptions should be "
    f"{PARAM_DESCRIPTION_MIN_LENGTH}-{PARAM_DESCRIPTION_MAX_LENGTH} characters",
    _check_param_length,
)


# --- RULE: ambiguous terms ---

AMBIGUOUS_TERMS: tuple[str, ...] = (
    "data", "value", "input", "output", "info", "stuff", "thing", "item", "object",
    "result", "response", "payload", "content", "body", "param", "arg", "argument",
    "parameter", "var", "variable", "prop", "property", "field", "attr", "attribute",
    "opts", "options", "config", "settings", "details", "misc", "other", "extra",
    "additional", "temp", "tmp", "foo", "bar", "baz", "test",
)  # fmt: skip
CONTEXT_WORDS: tuple[str, ...] = (
    "user", "file", "path", "url", "name", "id", "email", "phone", "address", "date",
    "time", "status", "type", "format", "size", "count", "number", "amount", "price",
    "quantity", "index", "offset", "limit", "page", "query", "filter", "sort", "order",
    "search", "message", "text", "title", "description", "label", "tag", "category",
    "group", "list", "array", "collection", "set", "map", "dictionary", "hash", "key",
    "token", "secret", "password", "credential", "auth", "session", "request", "error",
    "success", "failure", "code", "reason", "source", "target", "destination", "origin",
    "start", "end", "from", "to", "min", "max", "default", "required", "optional",
)  # fmt: skip
_AMBIGUOUS = {term: re.compile(rf"\b{term}\b", _I) for term in AMBIGUOUS_TERMS}


def ambiguous_terms(text: str) -> list[str]:
    return [term for term, pattern in _AMBIGUOUS.items() if pattern.search(text)]


def has_context(text: str) -> bool:
    lowered = text.lower()
    return any(word in lowered for word in CONTEXT_WORDS)


def _check_ambiguous(rule: Rule, tool: ToolDefinition, ctx: RuleContext) -> list[ValidationIssue]:
    issues = []
    for name, prop in iter_params(tool):
        description = text_of(prop.get("description"))

        name_terms = ambiguous_terms(name)
        if name_terms and not has_context(f"{name} {description}"):
            issues.append(
                rule.issue(
                    tool,
                    f"Parameter '{name}' uses ambiguous term(s): {', '.join(name_terms)}",
                    path=param_path(name),
                    suggestion=(
                        "Use a more specific name like 'userData' or 'configValue', "
                        "or add context in the description"
                    ),
                )
            )

        desc_terms = ambiguous_terms(description) if description else []
        if desc_terms and not has_context(description):
            issues.append(
                rule.issue(
                    tool,
                    f"Parameter '{name}' description uses ambiguous term(s) without context: "
                    f"{', '.join(desc_terms)}",
                    path=param_path(name, "description"),
                    suggestion=(
                        f'Clarify what kind of {desc_terms[0]} is expected '
                        '(e.g. "user data", "configuration value")'
                    ),
                )
            )
    return issues


LLM_008 = Rule(
    "LLM-008",
    Category.LLM_COMPATIBILITY,
    Severity.WARNING,
    'Avoid ambiguous terms (e.g. "data", "value", "input") without context',
    _check_ambiguous,
)


# --- RULE: constraints mentioned in the description ---


@dataclass(frozen=True, slots=True)
class _ConstraintMention:
    key: str
    label: str
    patterns: tuple[re.Pattern[str], ...]


def _mention(key: str, label: str, *patterns: str) -> _ConstraintMention:
    return _ConstraintMention(key, label, tuple(re.compile(p, _I) for p in patterns))


CONSTRAINT_MENTIONS: tuple[_ConstraintMention, ...] = (
    _mention(
        "minimum",
        "minimum value",
        r"\bmin(imum)?\b",
        r"\bat\s+least\b",
        r"\bgreater\s+than\b",
        r">=?\s*\d",
        r"\bno\s+less\s+than\b",
        r"\blower\s+bound\b",
    ),
    _mention(
        "maximum",
        "maximum value",
        r"\bmax(imum)?\b",
        r"\bat\s+most\b",
        r"\bless\s+than\b",
        r"<=?\s*\d",
        r"\bno\s+more\s+than\b",
        r"\bupper\s+bound\b",
        r"\bup\s+to\b",
    ),
    _mention(
        "minLength",
        "minimum length",
        r"\bmin(imum)?\s*(length|chars?|characters?)\b",
        r"\bat\s+least\s+\d+\s*(chars?|characters?)\b",
        r"\blength.{0,20}(at\s+least|min|>=)",
    ),
    _mention(
        "maxLength",
        "maximum length",
        r"\bmax(imum)?\s*(\d+\s*)?(length|chars?|characters?)\b",
        r"\bat\s+most\s+\d+\s*(chars?|characters?)\b",
        r"\blength.{0,20}(at\s+most|max|<=|up\s+to)",
        r"\bup\s+to\s+\d+\s*(chars?|characters?)\b",
        r"\bno\s+more\s+than\s+\d+\s*(chars?|characters?)\b",
        r"\btruncated?\b",
        r"\blimit(ed)?\s+to\b",
    ),
    _mention(
        "pattern",
        "format pattern",
        r"\bpattern\b",
        r"\bformat\b",
        r"\bregex\b",
        r"\bmust\s+match\b",
        r"\bshould\s+match\b",
        r"\bvalid\b",
        r"\blike\s+[\"'][^\"']+[\"']",
        r"\be\.?g\.?\s*[\"':]",
    ),
    _mention(
        "enum",
        "allowed values",
        r"\bone\s+of\b",
        r"\bmust\s+be\b",
        r"\bshould\s+be\b",
        r"\ballowed\s+values?\b",
        r"\bvalid\s+values?\b",
        r"\bpossible\s+values?\b",
        r"\boptions?\s*(are|:)",
        r"\b(can|may)\s+be\b",
        r"['\"][^'\"]+['\"](\s*,\s*['\"][^'\"]+['\"]\s*(,|or|and))+",
    ),
    _mention(
        "format",
        "format",
        r"\bformat\b",
        r"\biso\s*\d*",
        r"\brfc\s*\d+",
        r"\buuid\b",
        r"\buri\b",
        r"\burl\b",
        r"\bemail\b",
        r"\bdate\b",
        r"\btime\b",
        r"\bdatetime\b",
        r"\bhostname\b",
        r"\bipv[46]?\b",
    ),
)


def _check_constraints_mentioned(
    rule: Rule, tool: ToolDefinition, ctx: RuleContext
) -> list[ValidationIssue]:
    issues = []
    for name, prop in iter_params(tool):
        description = text_of(prop.get("description"))
        missing = []
        for mention in CONSTRAINT_MENTIONS:
            value = prop.get(mention.key)
            if value is None or value == []:
                continue
            if not any(p.search(description) for p in mention.patterns):
                missing.append(mention.label)
        if missing:
            issues.append(
                rule.issue(
                    tool,
                    f"Parameter '{name}' has schema constraints not mentioned in description: "
                    f"{', '.join(missing)}",
                    path=param_path(name, "description"),
                    suggestion=(
                        'Document the constraints in the description (e.g. "max 100 characters", '
                        '"must be one of: a, b, c")'
                    ),
                )
            )
    return issues


LLM_009 = Rule(
    "LLM-009",
    Category.LLM_COMPATIBILITY,
    Severity.SUGGESTION,
    'Include parameter constraints in description (e.g. "max 100 characters")',
    _check_constraints_mentioned,
)


# --- RULE: abbreviations ---

ABBREVIATIONS: dict[str, str] = {
    "id": "identifier", "num": "number", "str": "string", "cfg": "configuration",
    "env": "environment", "src": "source", "dst": "destination", "dest": "destination",
    "tmp": "temporary", "temp": "temporary", "pwd": "password or working directory",
    "cwd": "current working directory", "dir": "directory", "dirs": "directories",
    "fn": "function", "func": "function", "cb": "callback", "ctx": "context",
    "req": "request", "res": "response", "err": "error", "msg": "message",
    "msgs": "messages", "val": "value", "vals": "values", "len": "length",
    "idx": "index", "cnt": "count", "max": "maximum", "min": "minimum",
    "avg": "average", "asc": "ascending", "desc": "descending",
    "auth": "authentication/authorization", "creds": "credentials",
    "perms": "permissions", "usr": "user", "grp": "group", "org": "organization",
    "repo": "repository", "pkg": "package", "lib": "library",
    "api": "API (Application Programming Interface)",
    "sdk": "SDK (Software Development Kit)", "cli": "CLI (Command Line Interface)",
    "db": "database", "sql": "SQL (Structured Query Language)", "tbl": "table",
    "col": "column", "cols": "columns", "lbl": "label", "img": "image",
    "imgs": "images", "doc": "document", "docs": "documents", "ref": "reference",
    "refs": "references", "attr": "attribute", "attrs": "attributes",
    "prop": "property", "props": "properties", "param": "parameter",
    "params": "parameters", "arg": "argument", "args": "arguments", "opt": "option",
    "opts": "options", "conf": "configuration", "config": "configuration",
    "init": "initialize", "exec": "execute", "proc": "process",
    "async": "asynchronous", "sync": "synchronous", "buf": "buffer", "fmt": "format",
    "ver": "version", "ts": "timestamp", "tz": "timezone", "lat": "latitude",
    "lng": "longitude", "lon": "longitude", "addr": "address", "tel": "telephone",
    "ext": "extension", "qty": "quantity", "amt": "amount", "bal": "balance",
    "txn": "transaction", "inv": "invoice", "ttl": "time to live", "etag": "entity tag",
    "jwt": "JWT (JSON Web Token)", "sso": "SSO (Single Sign-On)",
    "mfa": "MFA (Multi-Factor Authentication)", "otp": "OTP (One-Time Password)",
    "uri": "URI (Uniform Resource Identifier)", "url": "URL (Uniform Resource Locator)",
    "fqdn": "FQDN (Fully Qualified Domain Name)", "dns": "DNS (Domain Name System)",
    "ip": "IP address", "cidr": "CIDR notation", "vm": "virtual machine",
    "io": "I/O (Input/Output)", "fs": "file system", "os": "operating system",
    "pid": "process ID", "uid": "user ID", "gid": "group ID",
    "regex": "regular expression", "regexp": "regular expression",
    "b64": "Base64", "hex": "hexadecimal",
}  # fmt: skip
EXPLANATION_WORDS: tuple[str, ...] = (
    "identifier", "number", "string", "configuration", "environment", "source",
    "destination", "temporary", "password", "directory", "function", "callback",
    "context", "request", "response", "error", "message", "value", "length", "index",
    "count", "maximum", "minimum", "average", "authentication", "authorization",
    "credentials", "permissions", "user", "group", "organization", "repository",
    "package", "library", "interface", "database", "table", "column", "label", "image",
    "document", "reference", "attribute", "property", "parameter", "argument", "option",
    "initialize", "execute", "process", "asynchronous", "synchronous", "buffer",
    "format", "version", "timestamp", "timezone",
)  # fmt: skip
_ABBREVIATION = {a: re.compile(rf"\b{re.escape(a)}\b", _I) for a in ABBREVIATIONS}


def unexplained_abbreviations(name: str, description: str) -> list[str]:
    found = [a for a, pattern in _ABBREVIATION.items() if pattern.search(name)]
    if not found:
        return []
    combined = f"{name} {description}".lower()
    if any(word in combined for word in EXPLANATION_WORDS):
        return []
    return found


def _check_abbreviations(
    rule: Rule, tool: ToolDefinition, ctx: RuleContext
) -> list[ValidationIssue]:
    issues = []
    for name, prop in iter_params(tool):
        found = unexplained_abbreviations(name, text_of(prop.get("description")))
        if found:
            expansions = ", ".join(f'"{a}" ({ABBREVIATIONS[a]})' for a in found)
            issues.append(
                rule.issue(
                    tool,
                    f"Parameter '{name}' uses unexplained abbreviation(s): {', '.join(found)}",
                    path=param_path(name),
                    suggestion=f"Consider expanding or explaining: {expansions}",
                )
            )
    return issues


LLM_010 = Rule(
    "LLM-010",
    Category.LLM_COMPATIBILITY,
    Severity.WARNING,
    "Avoid jargon and abbreviations without explanation",
    _check_abbreviations,
)


# --- RULE: side effects ---

SIDE_EFFECT_NAME_WORDS: tuple[str, ...] = (
    "create", "add", "new", "insert", "post", "make",
    "update", "edit", "modify", "change", "set", "put", "patch",
    "delete", "remove", "destroy", "drop", "clear", "purge", "reset",
    "send", "emit", "publish", "broadcast", "dispatch", "push", "notify",
    "write", "save", "store", "persist", "commit", "sync",
    "execute", "run", "trigger", "invoke", "fire", "start", "stop",
    "import", "export", "upload", "download",
    "move", "copy", "transfer", "migrate",
    "configure", "enable", "disable", "activate", "deactivate",
    "login", "logout", "signup", "register", "revoke",
    "approve", "reject", "cancel", "confirm",
)  # fmt: skip
_SIDE_EFFECT_MENTION = re.compile(
    r"\b(creates?|adds?|inserts?|generates?|produces?"
    r"|updates?|modif(y|ies)|changes?|edits?|mutates?|alters?"
    r"|deletes?|removes?|destroys?|purges?|clears?|permanent(ly)?|irreversible"
    r"|sends?|emits?|publish(es)?|broadcasts?|dispatch(es)?|push(es)?|notif(y|ies)"
    r"|writes?|saves?|stores?|persists?|commits?|logs?|records?"
    r"|executes?|triggers?|invokes?|fires?|starts?|stops?|launch(es)?|terminates?"
    r"|side\s+effects?|causes?|results?\s+in|affects?|impacts?"
    r"|contacts?|connects?\s+to|requests?|state\s+change)\b"
    r"|\b(note|warning|caution|important)\s*:"
    r"|\bmakes?\s+(a\s+)?(api\s+)?call\b",
    _I,
)
_DESTRUCTIVE_MENTION = re.compile(
    r"\b(destruct|delet|remov|destroy|permanent|irreversible|cannot\s+be\s+undone)", _I
)


def name_suggests_side_effects(name: str) -> bool:
    lowered = name.lower()
    for word in SIDE_EFFECT_NAME_WORDS:
        if lowered.startswith(word) or lowered.endswith(word):
            return True
        if re.search(rf"(^|[-_]){word}([-_]|$)", lowered):
            return True
    return False


@_when_described
def _check_side_effects(
    rule: Rule, tool: ToolDefinition, ctx: RuleContext
) -> list[ValidationIssue]:
    issues = []
    name = text_of(tool.name)
    if name_suggests_side_effects(name) and not _SIDE_EFFECT_MENTION.search(tool.description):
        issues.append(
            rule.issue(
                tool,
                f"Tool '{name}' appears to have side effects but its description omits them",
                path="description",
                suggestion=(
                    'State what changes this tool makes (e.g. "Creates a new record...", '
                    '"Deletes the file permanently...")'
                ),
            )
        )
    destructive = tool.annotations is not None and tool.annotations.destructive_hint is True
    if destructive and not _DESTRUCTIVE_MENTION.search(tool.description):
        issues.append(
            rule.issue(
                tool,
                f"Tool '{name}' is marked as destructive but description does not warn about this",
                path="description",
                suggestion='Warn about the destructive effect (e.g. "Permanently deletes...")',
            )
        )
    return issues


LLM_011 = Rule(
    "LLM-011",
    Category.LLM_COMPATIBILITY,
    Severity.SUGGESTION,
    "Tool description should mention side effects if any",
    _check_side_effects,
)


# --- RULE: consistency with related tools ---

_LEADING_VERBS = frozenset(
    (
        "creates", "create", "retrieves", "retrieve", "gets", "get", "updates", "update",
        "deletes", "delete", "removes", "remove", "lists", "list", "searches", "search",
        "finds", "find", "sends", "send", "fetches", "fetch", "returns", "return",
        "generates", "generate", "validates", "validate", "checks", "check", "sets", "set",
        "adds", "add", "inserts", "insert", "saves", "save", "loads", "load", "reads",
        "read", "writes", "write", "executes", "execute", "runs", "run", "starts", "start",
        "stops", "stop", "enables", "enable", "disables", "disable", "configures",
        "configure",
    )
)  # fmt: skip
_WHEN_CLAUSE = re.compile(r"\b(when|if|for|used\s+to|use\s+this)\b", _I)
_HAS_EXAMPLE = re.compile(r"\b(example|e\.g\.|for\s+instance|such\s+as)", _I)
_LENGTH_WORDS = {"short": "shorter", "medium": "medium length", "long": "longer"}


@dataclass(frozen=True, slots=True)
class DescriptionStyle:
    """Coarse features of a description used to compare related tools."""

    starts_with_verb: bool
    has_when: bool
    has_example: bool
    length: str

    @classmethod
    def of(cls, description: str) -> DescriptionStyle:
        text = description.strip()
        words = text.split()
        size = len(text)
        return cls(
            starts_with_verb=bool(words) and words[0].lower() in _LEADING_VERBS,
            has_when=bool(_WHEN_CLAUSE.search(text)),
            has_example=bool(_HAS_EXAMPLE.search(text)),
            length="short" if size < 50 else "medium" if size < 150 else "long",
        )


def tool_prefix(name: str) -> str | None:
    """Resource prefix shared by related tools (``user-create`` → ``user``)."""
    for sep in ("-", "_"):
        if sep in name:
            return name.split(sep)[0]
    match = re.match(r"^([a-z]+)(?=[A-Z])", name) or re.match(r"^([A-Z][a-z]+)(?=[A-Z])", name)
    return match.group(1) if match else None


def style_differences(style: DescriptionStyle, related: list[DescriptionStyle]) -> list[str]:
    half = len(related) / 2
    found = []
    if not style.starts_with_verb and sum(r.starts_with_verb for r in related) > half:
        found.append("does not start with an action verb like related tools")

    common_length, count = Counter(r.length for r in related).most_common(1)[0]
    if count > half and style.length != common_length:
        found.append(
            f"has {_LENGTH_WORDS[style.length]} description while related tools have "
            f"{_LENGTH_WORDS[common_length]} descriptions"
        )
    if not style.has_when and sum(r.has_when for r in related) > half:
        found.append('lacks "when to use" context that related tools have')
    if not style.has_example and sum(r.has_example for r in related) > half:
        found.append("lacks examples that related tools have")
    return found


@_when_described
def _check_consistency(
    rule: Rule, tool: ToolDefinition, ctx: RuleContext
) -> list[ValidationIssue]:
    prefix = tool_prefix(text_of(tool.name))
    if prefix is None:
        return []
    related = [
        t
        for t in ctx.others(tool)
        if t.name != tool.name and tool_prefix(text_of(t.name)) == prefix
    ]
    styles = [DescriptionStyle.of(d) for t in related if (d := _description(t))]
    if len(related) < 2 or len(styles) < 2:
        return []

    differences = style_differences(DescriptionStyle.of(tool.description), styles)
    if not differences:
        return []
    names = ", ".join(t.display_name for t in related[:3])
    return [
        rule.issue(
            tool,
            f"Tool description is inconsistent with related '{prefix}-*' tools: "
            f"{'; '.join(differences)}",
            path="description",
            suggestion=f"Align description style with related tools ({names}) for consistency",
        )
    ]


LLM_012 = Rule(
    "LLM-012",
    Category.LLM_COMPATIBILITY,
    Severity.WARNING,
    "Related tools should have consistent description patterns",
    _check_consistency,
)


# --- RULE: workflow guidance ---

_WORKFLOW_WORDS = word_pattern(
    (
        "first", "before", "after", "then", "instead", "alternatively", "prerequisite",
        "requires", "following", "prior to", "once", "next", "finally", "subsequently",
        "in advance",
    )
)  # fmt: skip
_WORKFLOW_PATTERNS = tuple(
    re.compile(p, _I)
    for p in (
        r"\buse\s+\w+\s+(?:for|to|when)",
        r"\bcall\s+\w+\s+(?:to|first|before|after)",
        r"\bsee\s+\w+\s+for",
        r"\bprefer\s+\w+",
        r"\brequires?\s+\w+",
        r"\brun\s+\w+\s+(?:first|before|after)",
        r"\binvoke\s+\w+",
    )
)


@_when_described
def _check_workflow(rule: Rule, tool: ToolDefinition, ctx: RuleContext) -> list[ValidationIssue]:
    description = tool.description
    if _WORKFLOW_WORDS.search(description):
        return []
    if any(p.search(description) for p in _WORKFLOW_PATTERNS):
        return []
    lowered = description.lower()
    for other in ctx.others(tool):
        other_name = text_of(other.name).lower()
        if other_name and other_name != text_of(tool.name).lower() and other_name in lowered:
            return []
    return [
        rule.issue(
            tool,
            "Tool description lacks workflow guidance (prerequisites, alternatives, sequencing)",
            path="description",
            suggestion=(
                'Add workflow context like "Call X first to...", "Use Y instead for...", '
                'or "After this, use Z to..."'
            ),
        )
    ]


LLM_013 = Rule(
    "LLM-013",
    Category.LLM_COMPATIBILITY,
    Severity.SUGGESTION,
    "Tool description should include workflow guidance (prerequisites, alternatives, sequencing)",
    _check_workflow,
)

RULES: tuple[Rule, ...] = (
    LLM_001,
    LLM_002,
    LLM_003,
    LLM_004,
    LLM_005,
    LLM_006,
    LLM_007,
    LLM_008,
    LLM_009,
    LLM_010,
    LLM_011,
    LLM_012,
    LLM_013,
)
