from __future__ import annotations

import pytest

from mcpvet.core._types import Category, Severity
from mcpvet.core.rule import Rule
from mcpvet.core.tool import ToolAnnotations, ToolDefinition
from mcpvet.rules.llm import (
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
    RULES,
    DescriptionStyle,
    ambiguous_terms,
    name_suggests_side_effects,
    tool_prefix,
    unexplained_abbreviations,
)
from tests.conftest import assert_issue, assert_no_issues, make_tool, param_tool, run_rule


def test_rules_are_llm_compatibility() -> None:
    assert [r.id for r in RULES] == [f"LLM-{i:03d}" for i in range(1, 14)]
    assert all(r.category == Category.LLM_COMPATIBILITY for r in RULES)


@pytest.mark.parametrize(
    "rule", [LLM_002, LLM_003, LLM_004, LLM_005, LLM_011, LLM_012, LLM_013], ids=str
)
def test_description_rules_skip_empty_description(rule: Rule) -> None:
    assert_no_issues(run_rule(rule, make_tool(description="")))


# --- RULE: LLM-001 / LLM-002 ---


@pytest.mark.parametrize("description", ["", "   "], ids=["empty", "blank"])
def test_llm001_empty_description(description: str) -> None:
    issue = assert_issue(run_rule(LLM_001, make_tool(description=description)), "LLM-001")
    assert issue.severity == Severity.ERROR


def test_llm002_too_short() -> None:
    issue = assert_issue(run_rule(LLM_002, make_tool(description="short")), "LLM-002")
    assert issue.message == "Tool description is too short (5 characters, minimum 20)"


def test_llm002_too_long() -> None:
    issue = assert_issue(run_rule(LLM_002, make_tool(description="x" * 501)), "LLM-002")
    assert issue.message == "Tool description is too long (501 characters, maximum 500)"


@pytest.mark.parametrize("length", [20, 500])
def test_llm002_bounds_inclusive(length: int) -> None:
    assert_no_issues(run_rule(LLM_002, make_tool(description="x" * length)))


# --- RULE: LLM-003 / LLM-004 / LLM-005 ---


def test_llm003_no_action_verb() -> None:
    tool = make_tool(description="A user profile helper for accounts")
    issue = assert_issue(run_rule(LLM_003, tool), "LLM-003")
    assert "action verb" in (issue.suggestion or "")


@pytest.mark.parametrize(
    "description",
    ["Retrieves a user profile.", "Search the catalogue.", "Use to get the profile."],
)
def test_llm003_action_verb(description: str) -> None:
    assert_no_issues(run_rule(LLM_003, make_tool(description=description)))


def test_llm004_no_when() -> None:
    tool = make_tool(description="Retrieves user profiles.")
    assert_issue(run_rule(LLM_004, tool), "LLM-004")


def test_llm004_when() -> None:
    assert_no_issues(run_rule(LLM_004, make_tool()))


def test_llm005_no_examples() -> None:
    tool = make_tool(description="Retrieves user profiles.")
    issue = assert_issue(run_rule(LLM_005, tool), "LLM-005")
    assert issue.severity == Severity.SUGGESTION


@pytest.mark.parametrize(
    "description",
    [
        'Searches documents, e.g. "quarterly report".',
        "Searches documents. Example: search-docs query=budget",
        "Searches documents such as invoices.",
        "Searches documents with `query`.",
    ],
)
def test_llm005_examples(description: str) -> None:
    assert_no_issues(run_rule(LLM_005, make_tool(description=description)))


# --- RULE: LLM-006 / LLM-007 ---


@pytest.mark.parametrize("schema", [{"type": "string"}, {"type": "string", "description": " "}])
def test_llm006_missing_param_description(schema: dict) -> None:
    issue = assert_issue(run_rule(LLM_006, param_tool("q", schema)), "LLM-006")
    assert issue.message == "Parameter 'q' is missing a description"
    assert issue.path == "inputSchema.properties.q.description"


def test_llm006_described() -> None:
    assert_no_issues(run_rule(LLM_006, make_tool()))


def test_llm007_too_short() -> None:
    tool = param_tool("q", {"type": "string", "description": "Short"})
    issue = assert_issue(run_rule(LLM_007, tool), "LLM-007")
    assert "too short (5 characters, minimum 10)" in issue.message


def test_llm007_too_long() -> None:
    tool = param_tool("q", {"type": "string", "description": "x" * 201})
    issue = assert_issue(run_rule(LLM_007, tool), "LLM-007")
    assert "too long (201 characters, maximum 200)" in issue.message


def test_llm007_skips_missing_description() -> None:
    assert_no_issues(run_rule(LLM_007, param_tool("q", {"type": "string"})))


# --- RULE: LLM-008 ---


def test_ambiguous_terms_whole_words() -> None:
    assert ambiguous_terms("data") == ["data"]
    assert ambiguous_terms("userData") == []
    assert ambiguous_terms("the input value") == ["value", "input"]


def test_llm008_ambiguous_name() -> None:
    issue = assert_issue(run_rule(LLM_008, param_tool("data", {"type": "string"})), "LLM-008")
    assert issue.message == "Parameter 'data' uses ambiguous term(s): data"
    assert issue.path == "inputSchema.properties.data"


def test_llm008_ambiguous_description() -> None:
    tool = param_tool("q", {"type": "string", "description": "Some value"})
    issue = assert_issue(run_rule(LLM_008, tool), "LLM-008")
    assert issue.path == "inputSchema.properties.q.description"


def test_llm008_context_given() -> None:
    tool = param_tool("data", {"type": "string", "description": "The user record"})
    assert_no_issues(run_rule(LLM_008, tool))


# --- RULE: LLM-009 ---


def test_llm009_undocumented_max_length() -> None:
    tool = param_tool(
        "username", {"type": "string", "maxLength": 100, "description": "The user name"}
    )
    issue = assert_issue(run_rule(LLM_009, tool), "LLM-009")
    assert issue.message == (
        "Parameter 'username' has schema constraints not mentioned in description: "
        "maximum length"
    )


def test_llm009_documented_max_length() -> None:
    tool = param_tool(
        "username",
        {"type": "string", "maxLength": 100, "description": "The user name, max 100 characters"},
    )
    assert_no_issues(run_rule(LLM_009, tool))


def test_llm009_enum() -> None:
    undocumented = param_tool("order", {"enum": ["asc", "desc"], "description": "Sort direction"})
    assert "allowed values" in assert_issue(run_rule(LLM_009, undocumented), "LLM-009").message

    documented = param_tool(
        "order", {"enum": ["asc", "desc"], "description": "Sort direction, one of asc or desc"}
    )
    assert_no_issues(run_rule(LLM_009, documented))


def test_llm009_unconstrained() -> None:
    assert_no_issues(run_rule(LLM_009, param_tool("q", {"type": "string"})))


# --- RULE: LLM-010 ---


def test_unexplained_abbreviations() -> None:
    assert unexplained_abbreviations("cfg", "") == ["cfg"]
    assert unexplained_abbreviations("cfg", "Path to the configuration file") == []
    assert unexplained_abbreviations("userId", "") == []


def test_llm010_abbreviation() -> None:
    issue = assert_issue(run_rule(LLM_010, param_tool("cfg", {"type": "string"})), "LLM-010")
    assert issue.message == "Parameter 'cfg' uses unexplained abbreviation(s): cfg"
    assert issue.suggestion == 'Consider expanding or explaining: "cfg" (configuration)'


def test_llm010_explained() -> None:
    tool = param_tool("cfg", {"type": "string", "description": "Path to the configuration file"})
    assert_no_issues(run_rule(LLM_010, tool))


# --- RULE: LLM-011 ---


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("delete-user", True),
        ("user_create", True),
        ("sendEmail", True),
        ("get-report", False),
        ("search-docs", False),
    ],
)
def test_name_suggests_side_effects(name: str, expected: bool) -> None:
    assert name_suggests_side_effects(name) is expected


def test_llm011_side_effects_not_mentioned() -> None:
    tool = make_tool(name="delete-user", description="Handles the user account lifecycle.")
    issue = assert_issue(run_rule(LLM_011, tool), "LLM-011")
    assert issue.message == (
        "Tool 'delete-user' appears to have side effects but its description omits them"
    )


def test_llm011_side_effects_mentioned() -> None:
    tool = make_tool(name="delete-user", description="Deletes the user account permanently.")
    assert_no_issues(run_rule(LLM_011, tool))


def test_llm011_destructive_without_warning() -> None:
    tool = ToolDefinition(
        name="get-report",
        description="Retrieves a report for the dashboard.",
        input_schema={"type": "object", "properties": {}},
        annotations=ToolAnnotations(destructive_hint=True),
    )
    issue = assert_issue(run_rule(LLM_011, tool), "LLM-011")
    assert "marked as destructive" in issue.message


# --- RULE: LLM-012 ---

_CREATE = make_tool(
    name="user-create",
    description="Creates a new user account. Use this when onboarding someone to the workspace.",
)
_UPDATE = make_tool(
    name="user-update",
    description="Updates an existing user account. Use this when profile details have changed.",
)


@pytest.mark.parametrize(
    ("name", "prefix"),
    [("user-create", "user"), ("user_create", "user"), ("userCreate", "user"), ("users", None)],
)
def test_tool_prefix(name: str, prefix: str | None) -> None:
    assert tool_prefix(name) == prefix


def test_description_style() -> None:
    style = DescriptionStyle.of(_CREATE.description)
    assert style.starts_with_verb is True
    assert style.has_when is True
    assert style.has_example is False
    assert style.length == "medium"


def test_llm012_inconsistent_with_related_tools() -> None:
    tool = make_tool(name="user-list", description="User listing.")
    issue = assert_issue(run_rule(LLM_012, tool, _CREATE, _UPDATE), "LLM-012")
    assert issue.message.startswith(
        "Tool description is inconsistent with related 'user-*' tools: "
        "does not start with an action verb like related tools"
    )
    assert "has shorter description" in issue.message
    assert 'lacks "when to use" context' in issue.message
    assert issue.suggestion is not None
    assert "user-create, user-update" in issue.suggestion


def test_llm012_needs_two_related_tools() -> None:
    tool = make_tool(name="user-list", description="User listing.")
    assert_no_issues(run_rule(LLM_012, tool, _CREATE))


def test_llm012_consistent() -> None:
    tool = make_tool(
        name="user-delete",
        description="Deletes a user account. Use this when someone leaves the workspace for good.",
    )
    assert_no_issues(run_rule(LLM_012, tool, _CREATE, _UPDATE))


# --- RULE: LLM-013 ---


def test_llm013_no_workflow_guidance() -> None:
    tool = make_tool(description="Retrieves a user profile.")
    assert_issue(run_rule(LLM_013, tool), "LLM-013")


@pytest.mark.parametrize(
    "description",
    [
        "Retrieves a user profile. Call list-users first to find the identifier.",
        "Retrieves a user profile. Prefer search-users for fuzzy lookups.",
    ],
)
def test_llm013_workflow_guidance(description: str) -> None:
    assert_no_issues(run_rule(LLM_013, make_tool(description=description)))


def test_llm013_mentions_other_tool() -> None:
    tool = make_tool(description="Retrieves a user profile found with search-users.")
    other = make_tool(name="search-users")
    assert_no_issues(run_rule(LLM_013, tool, other))
    assert_issue(run_rule(LLM_013, tool), "LLM-013")
