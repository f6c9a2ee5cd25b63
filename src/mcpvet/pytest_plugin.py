"""pytest plugin for mcpvet - MCP tool definition validation in tests.

Provides the ``tool_validator`` fixture, ``@pytest.mark.tool_validate``
marker, and ``--mcpvet-strict`` CLI flag.

Usage::

    def test_my_tools(tool_validator):
        result = tool_validator(server.list_tools())
        assert result.valid

    @pytest.mark.tool_validate(exclude_rules={"BP-001"}, min_severity="warning")
    def test_strict(tool_validator):
        tool_validator(TOOLS)
        # Issues auto-checked after the test body; test fails if any found.

CLI flag (applies tool_validate to all tests using tool_validator)::

    pytest --mcpvet-strict
    pytest --mcpvet-strict --mcpvet-min-severity warning

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from mcpvet.core._types import SEVERITY_LEVEL, Severity

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from mcpvet.core.issue import ValidationIssue
    from mcpvet.core.result import ValidationResult
    from mcpvet.core.tool import ToolDefinition

_RESULTS_KEY: pytest.StashKey[list[ValidationResult]] = pytest.StashKey()


def _format_issue(issue: ValidationIssue) -> str:
    location = f" ({issue.path})" if issue.path else ""
    line = f"  [{issue.rule_id}] {issue.severity} {issue.tool}{location}: {issue.message}"
    if issue.suggestion:
        line += f"\n    hint: {issue.suggestion}"
    return line


def _check_marker(marker: pytest.Mark) -> None:
    accepted = [str(s) for s in Severity]
    min_severity = marker.kwargs.get("min_severity", "error")
    if min_severity not in accepted:
        pytest.fail(
            f"tool_validate: invalid min_severity {min_severity!r}; "
            f"expected one of: {', '.join(accepted)}",
            pytrace=False,
        )


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("mcpvet", "MCP tool definition validation")
    group.addoption(
        "--mcpvet-strict",
        action="store_true",
        default=False,
        help="Auto-check issues on all tests using the tool_validator fixture.",
    )
    group.addoption(
        "--mcpvet-min-severity",
        default="error",
        choices=[str(s) for s in Severity],
        help="Minimum severity for --mcpvet-strict (default: error).",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "tool_validate: mark test to auto-check tool definition issues after the test. "
        "Options: exclude_rules=set(), min_severity='error'",
    )


@pytest.fixture
def tool_validator(request: pytest.FixtureRequest) -> Any:
    """Fixture that validates MCP tool definitions.

    Returns a callable: ``tool_validator(tools, rules=None)`` that returns a
    :class:`~mcpvet.core.result.ValidationResult`.  *tools* may hold
    :class:`~mcpvet.core.tool.ToolDefinition` objects or plain MCP tool
    mappings; *rules* overrides rule settings for that call.

    If the test is marked with ``@pytest.mark.tool_validate`` or
    ``--mcpvet-strict`` is passed, issues are auto-checked after the test.
    """
    from mcpvet.core.validator import validate

    marker = request.node.get_closest_marker("tool_validate")
    if marker is not None:
        _check_marker(marker)

    results: list[ValidationResult] = []
    request.node.stash[_RESULTS_KEY] = results

    def factory(
        tools: Iterable[ToolDefinition | Mapping[str, Any]],
        rules: Mapping[str, Any] | None = None,
    ) -> ValidationResult:
        result = validate(tools, config=rules)
        results.append(result)
        return result

    return factory


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item: pytest.Item, call: pytest.CallInfo[None]) -> Any:
    outcome = yield
    if call.when != "call":
        return
    report = outcome.get_result()
    if not report.passed:
        return

    results = item.stash.get(_RESULTS_KEY, None)
    if results is None:
        return

    marker = item.get_closest_marker("tool_validate")
    global_strict = item.config.getoption("--mcpvet-strict", default=False)

    if marker is None and not global_strict:
        return

    marker_kwargs = (marker.kwargs if marker and marker.kwargs else {}) or {}
    marker_exclude: set[str] = set(marker_kwargs.get("exclude_rules", ()))

    if marker is not None:
        min_severity = marker_kwargs.get("min_severity", "error")
    else:
        min_severity = item.config.getoption("--mcpvet-min-severity", default="error")

    min_level = SEVERITY_LEVEL[Severity(min_severity)]

    all_issues = [
        issue
        for result in results
        for issue in result.issues
        if SEVERITY_LEVEL[issue.severity] >= min_level and issue.rule_id not in marker_exclude
    ]

    if all_issues:
        lines = [f"MCP tool definition issues detected ({len(all_issues)}):"]
        lines.extend(_format_issue(i) for i in all_issues)
        report.outcome = "failed"
        report.longrepr = "\n".join(lines)
