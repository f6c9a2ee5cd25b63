"""Rule registry: the fixed, ordered table of known rules."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator

from mcpvet.core._types import CATEGORY_PREFIX, Category, Severity
from mcpvet.core.rule import Rule

_RULE_ID = re.compile(r"^([A-Z]{2,4})-\d{3}$")


class RegistrationError(ValueError):
    """Raised when a rule cannot be registered."""


def _check_rule(rule: Rule) -> None:
    if not isinstance(rule, Rule):
        msg = f"Not a Rule: {rule!r}"
        raise RegistrationError(msg)

    match = _RULE_ID.match(rule.id)
    if match is None:
        msg = f"Malformed rule ID {rule.id!r} - expected PREFIX-NNN (e.g. 'SCH-001')"
        raise RegistrationError(msg)

    if not isinstance(rule.category, Category):
        msg = f"Rule {rule.id} has unknown category {rule.category!r}"
        raise RegistrationError(msg)
    if not isinstance(rule.severity, Severity):
        msg = f"Rule {rule.id} has unknown severity {rule.severity!r}"
        raise RegistrationError(msg)

    expected = CATEGORY_PREFIX[rule.category]
    if match.group(1) != expected:
        msg = f"Rule {rule.id} is in category {rule.category!r} but its prefix is not {expected!r}"
        raise RegistrationError(msg)

    if not callable(rule.check_fn):
        msg = f"Rule {rule.id} has no callable check function"
        raise RegistrationError(msg)


class RuleRegistry:
    """Rules keyed by ID, in registration order.

    Registration order is the execution order, so issue lists are
    reproducible across runs.
    """

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: dict[str, Rule] = {}
        for rule in rules:
            self._add(rule)

    def _add(self, rule: Rule) -> None:
        _check_rule(rule)
        if rule.id in self._rules:
            msg = f"Duplicate rule ID: {rule.id}"
            raise RegistrationError(msg)
        self._rules[rule.id] = rule

    def rule_ids(self) -> tuple[str, ...]:
        return tuple(self._rules)

    def is_registered(self, rule_id: str) -> bool:
        return rule_id in self._rules

    def get(self, rule_id: str) -> Rule | None:
        return self._rules.get(rule_id)

    def by_category(self) -> dict[Category, tuple[Rule, ...]]:
        """Group rules by category; every category is present."""
        groups: dict[Category, list[Rule]] = {c: [] for c in Category}
        for rule in self._rules.values():
            groups[rule.category].append(rule)
        return {c: tuple(rules) for c, rules in groups.items()}

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules
