from __future__ import annotations

import json

import pytest

from mcpvet.cli._output import (
    SARIF_SCHEMA,
    format_human,
    format_json,
    format_rules_json,
    format_rules_text,
    format_sarif,
)
from mcpvet.core._types import Category, Severity
from mcpvet.core.registry import RuleRegistry
from mcpvet.core.result import ValidationResult
from mcpvet.core.rule import Rule
from mcpvet.core.validator import validate
from mcpvet.rules import ALL_RULES
from tests.conftest import make_tool


def _bad_name(rule, tool, ctx):  # type: ignore[no-untyped-def]
    if tool.name.islower():
        return []
    return [
        rule.issue(
            tool,
            f"Tool name {tool.name!r} is not lowercase",
            path="name",
            suggestion=f"Rename to {tool.name.lower()!r}",
        )
    ]


def _no_title(rule, tool, ctx):  # type: ignore[no-untyped-def]
    return [rule.issue(tool, "Missing title")]


def _explode(rule, tool, ctx):  # type: ignore[no-untyped-def]
    msg = "boom"
    raise RuntimeError(msg)


NAM_901 = Rule(
    "NAM-901",
    Category.NAMING,
    Severity.ERROR,
    "Tool name must be lowercase",
    _bad_name,
    documentation="https://example.com/nam-901",
)
BP_901 = Rule("BP-901", Category.BEST_PRACTICE, Severity.SUGGESTION, "Add a title", _no_title)
SCH_901 = Rule("SCH-901", Category.SCHEMA, Severity.WARNING, "Explodes", _explode)

_REGISTRY = RuleRegistry([NAM_901, BP_901])


def _result(*names: str, registry: RuleRegistry = _REGISTRY) -> ValidationResult:
    return validate([make_tool(name=n) for n in names], registry=registry)


@pytest.fixture(autouse=True)
def _clear_no_color(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NO_COLOR", raising=False)


class TestFormatHuman:
    def test_passing(self) -> None:
        registry = RuleRegistry([NAM_901])
        out = format_human(_result("get-user", registry=registry), no_color=True)
        lines = out.splitlines()
        assert lines[0].startswith("mcpvet ")
        assert "Validating 1 tool(s) ..." in lines
        assert any(line.startswith("── ✓ get-user ──") for line in lines)
        assert "  OK" in lines
        assert "Summary: 1/1 tools valid" in lines
        assert "Maturity: EXEMPLARY (100/100)" in lines
        assert lines[-1] == "Validation passed."
        assert "\033[" not in out

    def test_failing(self) -> None:
        out = format_human(_result("Get-User", "list-users"), no_color=True)
        assert "── ✗ Get-User " in out
        assert "  [NAM-901] error: Tool name 'Get-User' is not lowercase" in out
        assert "    at: name" in out
        assert "  [BP-901] suggestion: Missing title" in out
        assert "Summary: 1/2 tools valid" in out
        assert "  Errors:      1" in out
        assert "  Suggestions: 2" in out
        assert "    naming: 1" in out
        assert "    best-practice: 2" in out
        assert out.endswith("Validation failed with 1 error(s).")

    def test_hint_only_when_verbose(self) -> None:
        result = _result("Get-User")
        assert "hint:" not in format_human(result, no_color=True)
        verbose = format_human(result, verbose=True, no_color=True)
        assert "    hint: Rename to 'get-user'" in verbose

    def test_quiet_keeps_errors_only(self) -> None:
        out = format_human(_result("Get-User", "list-users"), quiet=True, no_color=True)
        assert "[NAM-901]" in out
        assert "[BP-901]" not in out
        assert "list-users" not in out
        assert "Warnings:" not in out
        assert "  Errors:      1" in out

    def test_faults_listed(self) -> None:
        registry = RuleRegistry([SCH_901])
        out = format_human(_result("get-user", registry=registry), no_color=True)
        assert "1 rule fault during validation:" in out
        assert "  [SCH-901] get-user: RuntimeError: boom" in out

    def test_color(self) -> None:
        out = format_human(_result("Get-User"))
        assert "\033[31merror\033[0m" in out

    def test_no_color_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        assert "\033[" not in format_human(_result("Get-User"))


class TestFormatJson:
    def test_round_trips_result(self) -> None:
        result = _result("Get-User")
        data = json.loads(format_json(result))
        assert data == json.loads(json.dumps(result.to_dict(), default=str))
        assert data["valid"] is False
        assert data["issues"][0]["id"] == "NAM-901"
        assert data["summary"]["issuesBySeverity"]["error"] == 1


class TestFormatSarif:
    def test_structure(self) -> None:
        data = json.loads(format_sarif(_result("Get-User"), _REGISTRY))
        assert data["$schema"] == SARIF_SCHEMA
        assert data["version"] == "2.1.0"
        run = data["runs"][0]
        driver = run["tool"]["driver"]
        assert driver["name"] == "mcpvet"
        assert [r["id"] for r in driver["rules"]] == ["NAM-901", "BP-901"]
        nam = driver["rules"][0]
        assert nam["shortDescription"]["text"] == "Tool name must be lowercase"
        assert nam["defaultConfiguration"]["level"] == "error"
        assert nam["helpUri"] == "https://example.com/nam-901"
        assert nam["properties"]["category"] == "naming"
        assert "helpUri" not in driver["rules"][1]

    def test_results(self) -> None:
        data = json.loads(format_sarif(_result("Get-User"), _REGISTRY))
        first, second = data["runs"][0]["results"]
        assert first["ruleId"] == "NAM-901"
        assert first["level"] == "error"
        assert first["message"]["text"] == "Tool name 'Get-User' is not lowercase"
        location = first["locations"][0]["logicalLocations"][0]
        assert location == {
            "name": "Get-User",
            "kind": "tool",
            "fullyQualifiedName": "Get-User.name",
        }
        assert first["fixes"] == [{"description": {"text": "Rename to 'get-user'"}}]
        assert second["level"] == "note"
        assert "fixes" not in second
        fqn = second["locations"][0]["logicalLocations"][0]["fullyQualifiedName"]
        assert fqn == "Get-User"

    def test_rules_from_issues_when_not_given(self) -> None:
        data = json.loads(format_sarif(_result("Get-User")))
        rule = data["runs"][0]["tool"]["driver"]["rules"][0]
        assert rule["shortDescription"]["text"] == "Tool name 'Get-User' is not lowercase"

    def test_empty(self) -> None:
        data = json.loads(format_sarif(_result()))
        assert data["runs"][0]["results"] == []
        assert data["runs"][0]["tool"]["driver"]["rules"] == []


class TestFormatRules:
    def test_text(self) -> None:
        out = format_rules_text(ALL_RULES, no_color=True, total=len(ALL_RULES))
        lines = out.splitlines()
        assert lines[0].endswith(f"- {len(ALL_RULES)} rules")
        assert any(line.startswith("── Schema (8) ") for line in lines)
        assert any(line.startswith("── LLM Compatibility (13) ") for line in lines)
        assert any(line.startswith("  SCH-001  error") for line in lines)

    def test_text_filtered(self) -> None:
        naming = [r for r in ALL_RULES if r.category == Category.NAMING]
        out = format_rules_text(naming, no_color=True, total=len(ALL_RULES))
        assert out.splitlines()[0].endswith(f"- 6 rules (filtered from {len(ALL_RULES)})")
        assert "── Schema" not in out

    def test_json(self) -> None:
        data = json.loads(format_rules_json(ALL_RULES))
        assert data["total"] == len(ALL_RULES)
        first = data["rules"][0]
        assert first["id"] == "SCH-001"
        assert first["category"] == "schema"
        assert first["severity"] == "error"
        assert set(first) == {"id", "category", "severity", "description", "documentation"}
