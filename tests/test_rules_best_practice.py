from __future__ import annotations

from typing import Any

import pytest

from mcpvet.core._types import Severity
from mcpvet.core.tool import ToolDefinition
from mcpvet.rules.best_practice import (
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
from tests.conftest import (
    GOOD_DESCRIPTION,
    assert_issue,
    assert_no_issues,
    make_tool,
    param_tool,
    run_rule,
)

_ADDRESS = {
    "type": "object",
    "properties": {
        "street": {"type": "string"},
        "city": {"type": "string"},
    },
}


def _nested(depth: int) -> dict[str, Any]:
    """An inputSchema whose deepest property sits *depth* levels down."""
    node: dict[str, Any] = {"type": "string"}
    for level in range(depth, 0, -1):
        node = {"type": "object", "properties": {f"l{level}": node}}
    return node


# --- RULE: annotations ---


def test_bp001_missing_title() -> None:
    issue = assert_issue(run_rule(BP_001, make_tool()), "BP-001")
    assert issue.severity == Severity.SUGGESTION
    assert issue.documentation is not None
    assert issue.path is None


def test_bp001_title() -> None:
    tool = make_tool(annotations={"title": "Get user"})
    assert_no_issues(run_rule(BP_001, tool))


def test_bp002_missing_read_only_hint() -> None:
    assert_issue(run_rule(BP_002, make_tool()), "BP-002")


def test_bp002_false_counts_as_set() -> None:
    assert_no_issues(run_rule(BP_002, make_tool(annotations={"readOnlyHint": False})))


@pytest.mark.parametrize("name", ["delete-user", "create-invoice", "user-delete", "set-flag"])
def test_bp003_modifying_name(name: str) -> None:
    issue = assert_issue(run_rule(BP_003, make_tool(name=name)), "BP-003")
    assert issue.message == (
        f'Tool name "{name}" suggests data modification but is missing destructiveHint annotation'
    )


def test_bp003_read_only_name() -> None:
    assert_no_issues(run_rule(BP_003, make_tool(name="get-user")))


def test_bp003_hint_present() -> None:
    tool = make_tool(name="delete-user", annotations={"destructiveHint": True})
    assert_no_issues(run_rule(BP_003, tool))


def test_bp004_missing_idempotent_hint() -> None:
    assert_issue(run_rule(BP_004, make_tool()), "BP-004")
    assert_no_issues(run_rule(BP_004, make_tool(annotations={"idempotentHint": True})))


# --- RULE: BP-005 ---


def test_bp005_too_many_parameters() -> None:
    props = {f"p{i}": {"type": "integer"} for i in range(11)}
    issue = assert_issue(run_rule(BP_005, make_tool(properties=props, required=[])), "BP-005")
    assert issue.message == "Tool has 11 parameters which exceeds the recommended limit of 10"
    assert issue.severity == Severity.WARNING


def test_bp005_at_limit() -> None:
    props = {f"p{i}": {"type": "integer"} for i in range(10)}
    assert_no_issues(run_rule(BP_005, make_tool(properties=props, required=[])))


# --- RULE: BP-006 ---


def test_bp006_repeated_within_tool() -> None:
    tool = make_tool(properties={"billing": _ADDRESS, "shipping": _ADDRESS}, required=[])
    issues = run_rule(BP_006, tool)
    assert [i.message for i in issues] == [
        "Schema pattern at inputSchema.properties.billing is repeated in: "
        "inputSchema.properties.shipping",
        "Schema pattern at inputSchema.properties.shipping is repeated in: "
        "inputSchema.properties.billing",
    ]
    assert issues[0].path == "inputSchema.properties.billing"


def test_bp006_repeated_across_tools() -> None:
    first = make_tool(name="create-order", properties={"address": _ADDRESS}, required=[])
    second = make_tool(name="update-order", properties={"target": _ADDRESS}, required=[])
    issue = assert_issue(run_rule(BP_006, first, second), "BP-006")
    assert issue.message == (
        "Schema pattern at inputSchema.properties.address is repeated in: "
        "update-order (inputSchema.properties.target)"
    )


def test_bp006_lists_at_most_three() -> None:
    tool = make_tool(name="create-order", properties={"address": _ADDRESS}, required=[])
    others = [
        make_tool(name=f"tool-{i}", properties={"address": _ADDRESS}, required=[])
        for i in range(5)
    ]
    issue = assert_issue(run_rule(BP_006, tool, *others), "BP-006")
    assert issue.message.endswith("tool-2 (inputSchema.properties.address) and 2 more")


def test_bp006_same_name_tools_are_distinct() -> None:
    first = make_tool(name="get-user", properties={"address": _ADDRESS}, required=[])
    second = make_tool(name="get-user", properties={"address": _ADDRESS}, required=[])
    issue = assert_issue(run_rule(BP_006, first, second), "BP-006")
    assert "get-user (inputSchema.properties.address)" in issue.message


def test_bp006_simple_fragments_ignored() -> None:
    tool = make_tool(properties={"a": {"type": "string"}, "b": {"type": "string"}}, required=[])
    assert_no_issues(run_rule(BP_006, tool))


def test_bp006_unique_fragment() -> None:
    tool = make_tool(properties={"address": _ADDRESS}, required=[])
    assert_no_issues(run_rule(BP_006, tool))


# --- RULE: BP-007 ---


def test_bp007_too_deep() -> None:
    tool = ToolDefinition(name="get-user", description=GOOD_DESCRIPTION, input_schema=_nested(5))
    issue = assert_issue(run_rule(BP_007, tool), "BP-007")
    assert issue.message == (
        "Schema has 5 levels of nesting which exceeds the recommended limit of 4"
    )
    assert issue.path is not None
    assert issue.path.endswith(".properties.l5")


def test_bp007_at_limit() -> None:
    tool = ToolDefinition(name="get-user", description=GOOD_DESCRIPTION, input_schema=_nested(4))
    assert_no_issues(run_rule(BP_007, tool))


# --- RULE: BP-008 ---


@pytest.mark.parametrize(
    "schema",
    [
        pytest.param({"type": "object", "properties": {"a": {}}}, id="object"),
        pytest.param({"type": "array", "items": {"type": "string"}}, id="array"),
        pytest.param({"anyOf": [{"type": "string"}, {"type": "integer"}]}, id="anyOf"),
        pytest.param({"type": "string", "enum": ["a", "b", "c", "d"]}, id="large-enum"),
    ],
)
def test_bp008_complex_without_examples(schema: dict[str, Any]) -> None:
    issue = assert_issue(run_rule(BP_008, param_tool("filter", schema)), "BP-008")
    assert issue.message == 'Complex parameter "filter" is missing examples'


@pytest.mark.parametrize(
    "schema",
    [
        pytest.param({"type": "object", "examples": [{}]}, id="examples"),
        pytest.param({"type": "array", "example": []}, id="example"),
        pytest.param({"type": "array", "default": []}, id="default"),
        pytest.param({"type": "string", "enum": ["a", "b", "c"]}, id="small-enum"),
        pytest.param({"type": "string"}, id="scalar"),
    ],
)
def test_bp008_simple_or_exemplified(schema: dict[str, Any]) -> None:
    assert_no_issues(run_rule(BP_008, param_tool("filter", schema)))


# --- RULE: BP-009 ---


def test_bp009_missing_output_schema() -> None:
    issue = assert_issue(run_rule(BP_009, make_tool()), "BP-009")
    assert issue.severity == Severity.SUGGESTION
    assert issue.path == "outputSchema"


def test_bp009_malformed_output_schema_is_warning() -> None:
    issue = assert_issue(run_rule(BP_009, make_tool(outputSchema="text")), "BP-009")
    assert issue.severity == Severity.WARNING
    assert issue.message == "outputSchema must be a valid JSON Schema object"


def test_bp009_output_schema_without_type() -> None:
    tool = make_tool(outputSchema={"description": "The user profile"})
    issues = run_rule(BP_009, tool)
    assert len(issues) == 1
    assert issues[0].path == "outputSchema.type"
    assert issues[0].severity == Severity.WARNING


def test_bp009_partially_described_properties() -> None:
    tool = make_tool(
        outputSchema={
            "type": "object",
            "description": "The user profile",
            "properties": {
                "name": {"type": "string", "description": "Display name"},
                "email": {"type": "string"},
            },
        }
    )
    issue = assert_issue(run_rule(BP_009, tool), "BP-009")
    assert issue.message == "1 of 2 outputSchema properties are missing descriptions"
    assert issue.severity == Severity.SUGGESTION


def test_bp009_undescribed_schema_and_properties() -> None:
    tool = make_tool(outputSchema={"type": "object", "properties": {"name": {"type": "string"}}})
    messages = [i.message for i in run_rule(BP_009, tool)]
    assert messages == [
        "outputSchema is missing a description",
        "outputSchema properties are missing descriptions",
    ]


def test_bp009_complete_output_schema() -> None:
    tool = make_tool(
        outputSchema={
            "type": "object",
            "description": "The user profile",
            "properties": {"name": {"type": "string", "description": "Display name"}},
        }
    )
    assert_no_issues(run_rule(BP_009, tool))
