from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import pytest
from mcp.types import ListToolsResult, Tool

from mcpvet.core import server as server_module
from mcpvet.core.context import RuleContext
from mcpvet.core.tool import ToolDefinition

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from mcpvet.core.issue import ValidationIssue
    from mcpvet.core.rule import Rule

GOOD_DESCRIPTION = (
    "Retrieves a user profile by identifier. Use this when you need account details."
)


def tool_dict(
    name: str = "get-user",
    description: str = GOOD_DESCRIPTION,
    *,
    properties: dict[str, Any] | None = None,
    required: list[str] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """An MCP tool object; by default one that passes every error-severity rule."""
    if properties is None:
        properties = {
            "userId": {
                "type": "string",
                "description": "Unique identifier of the user",
                "maxLength": 64,
            }
        }
        if required is None:
            required = ["userId"]
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required is not None:
        schema["required"] = required
    return {"name": name, "description": description, "inputSchema": schema, **extra}


def make_tool(
    name: str = "get-user",
    description: str = GOOD_DESCRIPTION,
    **kwargs: Any,
) -> ToolDefinition:
    return ToolDefinition.from_dict(tool_dict(name, description, **kwargs), location="<test>")


def param_tool(name: str, schema: dict[str, Any]) -> ToolDefinition:
    """A tool with a single parameter *name* described by *schema*."""
    return make_tool(properties={name: schema}, required=[name])


def run_rule(rule: Rule, tool: ToolDefinition, *others: ToolDefinition) -> list[ValidationIssue]:
    ctx = RuleContext.for_tools([tool, *others])
    return rule.check(tool, ctx)


def assert_issue(issues: list[ValidationIssue], rule_id: str) -> ValidationIssue:
    matching = [i for i in issues if i.rule_id == rule_id]
    assert matching, f"Expected issue {rule_id}, got: {[i.rule_id for i in issues] or 'none'}"
    return matching[0]


def assert_issues(issues: list[ValidationIssue], *rule_ids: str) -> list[ValidationIssue]:
    found_ids = {i.rule_id for i in issues}
    expected = set(rule_ids)
    missing = expected - found_ids
    assert not missing, f"Missing issues: {missing}. Got: {found_ids}"
    return [i for i in issues if i.rule_id in expected]


def assert_no_issues(issues: list[ValidationIssue]) -> None:
    assert issues == [], f"Expected no issues, got: {[(i.rule_id, i.message) for i in issues]}"


# --- live server stub ---


class StubServer:
    """Stands in for an MCP server: serves ``tools/list`` pages to a fake session."""

    def __init__(self) -> None:
        self.pages: list[ListToolsResult] = []
        self.error: Exception | None = None
        self.delay = 0.0
        self.opened: list[str] = []
        self.cursors: list[str | None] = []
        self.client_info: Any = None

    def serve(self, *tools: dict[str, Any], next_cursor: str | None = None) -> None:
        self.pages.append(
            ListToolsResult(tools=[Tool(**t) for t in tools], nextCursor=next_cursor)
        )

    def session(self, read: Any, write: Any, **kwargs: Any) -> _StubSession:
        self.client_info = kwargs.get("client_info")
        return _StubSession(self)


class _StubSession:
    def __init__(self, server: StubServer) -> None:
        self._server = server

    async def __aenter__(self) -> _StubSession:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None

    async def initialize(self) -> None:
        if self._server.delay:
            await asyncio.sleep(self._server.delay)
        if self._server.error is not None:
            raise self._server.error

    async def list_tools(self, cursor: str | None = None) -> ListToolsResult:
        self._server.cursors.append(cursor)
        return self._server.pages[len(self._server.cursors) - 1]


@pytest.fixture
def stub_server(monkeypatch: pytest.MonkeyPatch) -> StubServer:
    stub = StubServer()

    @asynccontextmanager
    async def open_streams(server: str) -> AsyncIterator[tuple[Any, Any]]:
        stub.opened.append(server)
        yield None, None

    monkeypatch.setattr(server_module, "_open_streams", open_streams)
    monkeypatch.setattr(server_module, "ClientSession", stub.session)
    return stub
