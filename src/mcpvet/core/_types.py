from enum import StrEnum
from typing import Any

type JSONSchema = dict[str, Any]


class Severity(StrEnum):
    """Issue severity levels (ordered highest → lowest)."""

    ERROR = "error"
    WARNING = "warning"
    SUGGESTION = "suggestion"


SEVERITY_LEVEL: dict[Severity, int] = {
    Severity.SUGGESTION: 0,
    Severity.WARNING: 1,
    Severity.ERROR: 2,
}


class Category(StrEnum):
    """Rule categories."""

    SCHEMA = "schema"
    NAMING = "naming"
    SECURITY = "security"
    LLM_COMPATIBILITY = "llm-compatibility"
    BEST_PRACTICE = "best-practice"


CATEGORY_PREFIX: dict[Category, str] = {
    Category.SCHEMA: "SCH",
    Category.NAMING: "NAM",
    Category.SECURITY: "SEC",
    Category.LLM_COMPATIBILITY: "LLM",
    Category.BEST_PRACTICE: "BP",
}


class SourceKind(StrEnum):
    """Where a tool definition was acquired from."""

    FILE = "file"
    SERVER = "server"


class MaturityLevel(StrEnum):
    """Maturity bands (ordered lowest → highest)."""

    IMMATURE = "immature"
    MODERATE = "moderate"
    MATURE = "mature"
    EXEMPLARY = "exemplary"

    @property
    def description(self) -> str:
        return _MATURITY_DESCRIPTIONS[self]


_MATURITY_DESCRIPTIONS: dict[MaturityLevel, str] = {
    MaturityLevel.IMMATURE: "High risk of misuse; basic functionality only",
    MaturityLevel.MODERATE: "Usable in simple agents; some guidance",
    MaturityLevel.MATURE: "Reliable for complex workflows",
    MaturityLevel.EXEMPLARY: "Optimized for advanced multi-tool agents",
}
