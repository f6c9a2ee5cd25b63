"""Validation orchestrator."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from importlib.metadata import version
from pathlib import Path
from typing import TYPE_CHECKING, Any

from mcpvet.core.aggregate import aggregate
from mcpvet.core.config import ValidatorConfig, load_config, resolve_rules
from mcpvet.core.engine import execute_rules
from mcpvet.core.loader import load_tools
from mcpvet.core.maturity import assess
from mcpvet.core.result import ToolResult, ValidationMetadata, ValidationResult, ValidationSummary
from mcpvet.core.tool import ToolDefinition

if TYPE_CHECKING:
    from mcpvet.core.registry import RuleRegistry

logger = logging.getLogger("mcpvet")


def _default_registry() -> RuleRegistry:
    from mcpvet.rules import REGISTRY

    return REGISTRY


def _coerce_tools(tools: Iterable[ToolDefinition | Mapping[str, Any]]) -> list[ToolDefinition]:
    return [
        t if isinstance(t, ToolDefinition) else ToolDefinition.from_dict(t, location="<inline>")
        for t in tools
    ]


def _config_identity(config: object, config_path: Path | str | None) -> str:
    if config_path is not None:
        return str(config_path)
    if isinstance(config, ValidatorConfig) and config.path is not None:
        return str(config.path)
    return ""


def validate(
    tools: Iterable[ToolDefinition | Mapping[str, Any]],
    *,
    config: ValidatorConfig | Mapping[str, Any] | None = None,
    config_path: Path | str | None = None,
    registry: RuleRegistry | None = None,
) -> ValidationResult:
    """Validate tool definitions and build a :class:`ValidationResult`.

    Rule settings are layered: built-in defaults, then the file at
    *config_path* (if given), then *config*.  *config* may be a full
    :class:`ValidatorConfig` or just a ``rule ID -> setting`` mapping.
    Plain mappings in *tools* are read as MCP tool objects.

    Raises:
        :class:`~mcpvet.core.config.ConfigError`: If *config_path* cannot be
            loaded or a rule setting is invalid.  Nothing is executed.

    """
    started = time.perf_counter()
    timestamp = datetime.now(UTC).isoformat().replace("+00:00", "Z")

    registry = registry if registry is not None else _default_registry()
    file_config = load_config(config_path) if config_path is not None else None
    inline_rules: Mapping[str, Any] = (
        config.rules if isinstance(config, ValidatorConfig) else (config or {})
    )
    settings = resolve_rules(
        registry,
        file_config.rules if file_config is not None else {},
        inline_rules,
    )

    tool_list = _coerce_tools(tools)
    outcome = execute_rules(tool_list, registry, settings)
    tally = aggregate(outcome.tool_issues)
    score, level = assess(tally.per_tool)

    summary = ValidationSummary(
        total_tools=len(tool_list),
        valid_tools=tally.valid_tools,
        issues_by_severity=tally.by_severity,
        issues_by_category=tally.by_category,
        maturity_score=score,
        maturity_level=level,
    )
    tool_results = [
        ToolResult(name=tool.name, valid=valid, tool=tool, issues=issues)
        for tool, valid, issues in zip(
            tool_list, tally.tool_valid, outcome.tool_issues, strict=True
        )
    ]
    metadata = ValidationMetadata(
        validator_version=version("mcpvet"),
        timestamp=timestamp,
        duration_ms=round((time.perf_counter() - started) * 1000),
        config_used=_config_identity(config, config_path),
        diagnostics=outcome.faults,
    )
    logger.debug("Validated %d tool(s): score %d (%s)", len(tool_list), score, level)

    return ValidationResult(
        valid=tally.valid,
        summary=summary,
        issues=outcome.issues,
        tools=tool_results,
        metadata=metadata,
    )


def validate_file(path: Path | str, **kwargs: Any) -> ValidationResult:
    """Load tools from *path*, then :func:`validate` them with *kwargs*."""
    return validate(load_tools(path), **kwargs)


def validate_server(
    server: str, *, timeout: float | None = None, **kwargs: Any
) -> ValidationResult:
    """Fetch tools from the live MCP *server*, then :func:`validate` them.

    The fetch completes before any rule runs.  *timeout* (seconds) defaults
    to :data:`~mcpvet.core.server.DEFAULT_TIMEOUT`.
    """
    from mcpvet.core.server import DEFAULT_TIMEOUT, load_server_tools

    tools = load_server_tools(server, timeout=DEFAULT_TIMEOUT if timeout is None else timeout)
    return validate(tools, **kwargs)
