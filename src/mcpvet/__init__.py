from importlib.metadata import version

from mcpvet.core._types import Category, MaturityLevel, Severity
from mcpvet.core.config import ConfigError, RuleSetting, ValidatorConfig, load_config
from mcpvet.core.issue import RuleFault, ValidationIssue
from mcpvet.core.loader import LoadError, load_tools
from mcpvet.core.registry import RegistrationError, RuleRegistry
from mcpvet.core.result import ValidationResult
from mcpvet.core.rule import Rule
from mcpvet.core.tool import ToolAnnotations, ToolDefinition
from mcpvet.core.validator import validate, validate_file, validate_server

__version__ = version("mcpvet")


__all__ = [
    "Category",
    "ConfigError",
    "LoadError",
    "MaturityLevel",
    "RegistrationError",
    "Rule",
    "RuleFault",
    "RuleRegistry",
    "RuleSetting",
    "Severity",
    "ToolAnnotations",
    "ToolDefinition",
    "ValidationIssue",
    "ValidationResult",
    "ValidatorConfig",
    "__version__",
    "load_config",
    "load_tools",
    "validate",
    "validate_file",
    "validate_server",
]
