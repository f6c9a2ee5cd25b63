from __future__ import annotations

import dataclasses
import json
import logging
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

import yaml

from mcpvet.core._types import Severity

if TYPE_CHECKING:
    from mcpvet.core.registry import RuleRegistry
    from mcpvet.core.rule import Rule

logger = logging.getLogger("mcpvet")

type RuleValue = bool | Severity

OUTPUT_FORMATS: tuple[str, ...] = ("human", "json", "sarif")

# Searched in this order in each directory while walking up from CWD.
CONFIG_FILENAMES: tuple[str, ...] = (
    ".mcpvet.toml",
    "mcpvet.config.yaml",
    "mcpvet.config.yml",
    "mcpvet.config.json",
)


class ConfigError(ValueError):
    """Raised when a config source cannot be loaded or holds an invalid value."""


def parse_rule_value(value: object) -> RuleValue:
    """Normalise a per-rule setting.

    Accepts booleans, severity names, and the aliases ``on`` / ``off`` /
    ``true`` / ``false`` (case-insensitive).

    Raises:
        :class:`ConfigError`: For anything else.

    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        norm = value.strip().lower()
        if norm in ("on", "true"):
            return True
        if norm in ("off", "false"):
            return False
        if norm in Severity:
            return Severity(norm)
    msg = (
        f"Invalid rule setting {value!r}. "
        "Expected true, false, on, off, error, warning or suggestion"
    )
    raise ConfigError(msg)


@dataclass(frozen=True, slots=True)
class RuleSetting:
    """Resolved configuration for one rule."""

    enabled: bool = True
    severity: Severity | None = None
    """Severity override, or ``None`` to keep the rule's default."""

    @classmethod
    def from_value(cls, value: RuleValue) -> RuleSetting:
        if value is False:
            return cls(enabled=False)
        if value is True:
            return cls()
        return cls(severity=Severity(value))

    @property
    def value(self) -> RuleValue:
        """The setting in its config form (``True``, ``False`` or a severity)."""
        if not self.enabled:
            return False
        return self.severity if self.severity is not None else True

    def severity_for(self, rule: Rule) -> Severity:
        return self.severity or rule.severity


ENABLED = RuleSetting()


@dataclass(frozen=True)
class ValidatorConfig:
    """Configuration for a validation run.

    Can be loaded from ``.mcpvet.toml``, ``mcpvet.config.yaml`` / ``.json``
    or ``pyproject.toml [tool.mcpvet]`` via :func:`load_config`.

    Example ``pyproject.toml``::

        [tool.mcpvet]
        format = "sarif"

        [tool.mcpvet.rules]
        "BP-001" = false
        "SEC-003" = "error"

    """

    rules: Mapping[str, RuleValue] = field(default_factory=dict)
    """Rule ID → ``True`` / ``False`` / severity.  Absent IDs are enabled at
    their default severity; unknown IDs are ignored."""

    format: str = "human"
    """Report format: ``human``, ``json`` or ``sarif``."""

    verbose: bool = False
    color: bool = True

    path: Path | None = field(default=None, compare=False)
    """File this config was loaded from, if any."""

    def __post_init__(self) -> None:
        rules = MappingProxyType({str(k): parse_rule_value(v) for k, v in self.rules.items()})
        object.__setattr__(self, "rules", rules)
        if self.format not in OUTPUT_FORMATS:
            known = ", ".join(f'"{f}"' for f in OUTPUT_FORMATS)
            msg = f"Unknown output format {self.format!r}. Known formats: {known}"
            raise ConfigError(msg)

    def with_rules(self, overrides: Mapping[str, object]) -> ValidatorConfig:
        """Return a copy with *overrides* layered over :attr:`rules`."""
        return dataclasses.replace(self, rules={**self.rules, **overrides})


def merge_configs(base: ValidatorConfig, override: ValidatorConfig) -> ValidatorConfig:
    """Layer *override* over *base*.

    Rule entries merge per ID with *override* winning; output preferences
    come from *override*.  The result keeps *base*'s path unless *override*
    has its own.
    """
    return dataclasses.replace(
        override,
        rules={**base.rules, **override.rules},
        path=override.path or base.path,
    )


def resolve_rules(
    registry: RuleRegistry,
    *layers: Mapping[str, object],
) -> dict[str, RuleSetting]:
    """Resolve one :class:`RuleSetting` for every registered rule.

    *layers* are applied in order (defaults, file config, inline overrides);
    a later layer wins for the same rule ID.  IDs the registry does not know
    are ignored.
    """
    settings = dict.fromkeys(registry.rule_ids(), ENABLED)
    for layer in layers:
        for rule_id, value in layer.items():
            if rule_id not in settings:
                logger.debug("Ignoring unknown rule ID %r in config", rule_id)
                continue
            settings[rule_id] = RuleSetting.from_value(parse_rule_value(value))
    return settings


def load_config(path: Path | str | None = None) -> ValidatorConfig:
    """Load :class:`ValidatorConfig` from a file.

    When ``path`` is ``None``, walks up from the current directory looking for
    one of :data:`CONFIG_FILENAMES`, then ``pyproject.toml [tool.mcpvet]``.
    A ``pyproject.toml`` without a ``[tool.mcpvet]`` section acts as a project
    root marker and stops the search.

    Args:
        path: Explicit config file (``.toml``, ``.yaml``, ``.yml``, ``.json``
              or ``pyproject.toml``).  If ``None``, auto-detects by walking up.

    Returns:
        :class:`ValidatorConfig` populated from the file, with defaults for
        any missing keys.

    Raises:
        :class:`ConfigError`: If an explicit file does not exist, a file cannot
            be parsed, or a value is not recognised.

    """
    if path is not None:
        resolved = Path(path)
        if not resolved.is_file():
            msg = f"Config file not found: {resolved}"
            raise ConfigError(msg)
        return _parse_config(_read_file(resolved), source=resolved)

    found = _find_config()
    if found is None:
        return ValidatorConfig()
    return _parse_config(_read_file(found), source=found)


def _find_config() -> Path | None:
    """Walk up from CWD looking for a config file."""
    current = Path.cwd()
    while True:
        for name in CONFIG_FILENAMES:
            candidate = current / name
            if candidate.is_file():
                return candidate

        pyproject = current / "pyproject.toml"
        if pyproject.is_file():
            return pyproject

        parent = current.parent
        if parent == current:
            return None
        current = parent


def _read_file(path: Path) -> dict[str, Any]:
    """Read a config file and return the mcpvet-relevant section."""
    suffix = path.suffix.lower()
    try:
        if suffix == ".toml":
            with path.open("rb") as f:
                raw: Any = tomllib.load(f)
        elif suffix in (".yaml", ".yml"):
            with path.open(encoding="utf-8") as f:
                raw = yaml.safe_load(f)
        elif suffix == ".json":
            with path.open(encoding="utf-8") as f:
                raw = json.load(f)
        else:
            msg = f"Unsupported config file {path}: expected .toml, .yaml, .yml or .json"
            raise ConfigError(msg)
    except (tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as exc:
        msg = f"Invalid config in {path}: {exc}"
        raise ConfigError(msg) from exc
    except OSError as exc:
        msg = f"Cannot read config file {path}: {exc}"
        raise ConfigError(msg) from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        msg = f"Invalid config in {path}: expected a mapping at the top level"
        raise ConfigError(msg)

    if path.name == "pyproject.toml":
        tool: dict[str, Any] = raw.get("tool", {})
        section: dict[str, Any] = tool.get("mcpvet", {})
        return section
    return raw


def _parse_config(data: dict[str, Any], *, source: Path | None = None) -> ValidatorConfig:
    """Parse a raw key/value dict into :class:`ValidatorConfig`.

    Raises:
        :class:`ConfigError`: On unrecognised rule settings or formats.

    """
    kwargs: dict[str, Any] = {"path": source}

    rules = data.get("rules")
    if rules is not None:
        if not isinstance(rules, dict):
            msg = f"'rules' must be a mapping of rule ID to setting, got {type(rules).__name__}"
            raise ConfigError(msg)
        kwargs["rules"] = rules

    # Output settings may also sit in an "output" table.
    output = data.get("output")
    flat = {**output, **data} if isinstance(output, dict) else data

    if (v := flat.get("format")) is not None:
        kwargs["format"] = str(v)
    if (v := flat.get("verbose")) is not None:
        kwargs["verbose"] = bool(v)
    if (v := flat.get("color")) is not None:
        kwargs["color"] = bool(v)

    for key in data:
        if key not in ("rules", "output", "format", "verbose", "color"):
            logger.debug("Ignoring unknown config key %r", key)

    return ValidatorConfig(**kwargs)
