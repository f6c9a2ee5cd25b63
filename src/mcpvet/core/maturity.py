"""Maturity scoring.

Each tool starts at 100 and loses a fixed penalty per issue, weighted by
severity, floored at 0.  The run score is the mean of the tool scores,
rounded half-up, so one badly defined tool in a large set cannot drag the
whole set to zero.  An empty tool set scores 100.

The weights and bands below are versioned: changing either is a scoring
change and bumps :data:`SCORING_VERSION`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import ROUND_HALF_UP, Decimal

from mcpvet.core._types import MaturityLevel, Severity

SCORING_VERSION = 1

PENALTY: dict[Severity, int] = {
    Severity.ERROR: 25,
    Severity.WARNING: 8,
    Severity.SUGGESTION: 2,
}

# Lowest score of each band, highest band first.
LEVEL_FLOOR: tuple[tuple[int, MaturityLevel], ...] = (
    (91, MaturityLevel.EXEMPLARY),
    (71, MaturityLevel.MATURE),
    (41, MaturityLevel.MODERATE),
    (0, MaturityLevel.IMMATURE),
)

MAX_SCORE = 100


def tool_score(counts: Mapping[Severity, int]) -> int:
    penalty = sum(PENALTY[sev] * counts.get(sev, 0) for sev in Severity)
    return max(0, MAX_SCORE - penalty)


def score_tools(per_tool: Sequence[Mapping[Severity, int]]) -> int:
    """Score a run from per-tool severity counts."""
    if not per_tool:
        return MAX_SCORE
    mean = Decimal(sum(tool_score(c) for c in per_tool)) / len(per_tool)
    return int(mean.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def maturity_level(score: int) -> MaturityLevel:
    if not 0 <= score <= MAX_SCORE:
        msg = f"Maturity score must be within 0..{MAX_SCORE}, got {score}"
        raise ValueError(msg)
    for floor, level in LEVEL_FLOOR:
        if score >= floor:
            return level
    raise AssertionError("unreachable")  # pragma: no cover


def assess(per_tool: Sequence[Mapping[Severity, int]]) -> tuple[int, MaturityLevel]:
    score = score_tools(per_tool)
    return score, maturity_level(score)
