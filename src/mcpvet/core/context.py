from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from mcpvet.core.config import ENABLED, RuleSetting
from mcpvet.core.fragments import FragmentIndex, build_fragment_index

if TYPE_CHECKING:
    from mcpvet.core.tool import ToolDefinition


@dataclass(frozen=True, slots=True)
class RuleContext:
    """Read-only, run-scoped data every rule is evaluated against.

    One context is built per run with :meth:`for_tools`; the executor
    derives a per-rule copy with :meth:`with_setting`.  The tool tuple,
    fragment index and position table are shared by reference between
    those copies and never change after construction.
    """

    all_tools: tuple[ToolDefinition, ...] = ()
    setting: RuleSetting = ENABLED
    fragment_index: FragmentIndex = field(default_factory=dict, repr=False)
    _positions: Mapping[int, int] = field(default_factory=dict, repr=False)

    @classmethod
    def for_tools(cls, tools: Sequence[ToolDefinition]) -> RuleContext:
        all_tools = tuple(tools)
        return cls(
            all_tools=all_tools,
            fragment_index=MappingProxyType(dict(build_fragment_index(all_tools))),
            _positions=MappingProxyType({id(t): i for i, t in enumerate(all_tools)}),
        )

    def with_setting(self, setting: RuleSetting) -> RuleContext:
        return dataclasses.replace(self, setting=setting)

    def position(self, tool: ToolDefinition) -> int:
        """Index of *tool* in :attr:`all_tools`, or ``-1`` if it is not part of the run."""
        return self._positions.get(id(tool), -1)

    def others(self, tool: ToolDefinition) -> tuple[ToolDefinition, ...]:
        """Every tool in the run except *tool* itself."""
        return tuple(t for t in self.all_tools if t is not tool)
