from mcpvet.core.registry import RuleRegistry
from mcpvet.core.rule import Rule
from mcpvet.core.schema_check import JsonSchemaChecker, SchemaChecker
from mcpvet.rules import best_practice, llm, naming, schema, security


def build_registry(schema_checker: SchemaChecker) -> RuleRegistry:
    """Build the full rule registry.

    Category order (schema, naming, security, llm-compatibility,
    best-practice) is the execution order.  *schema_checker* is bound into
    SCH-004; it is the only rule with an injected collaborator.
    """
    return RuleRegistry(
        (
            *schema.schema_rules(schema_checker),
            *naming.RULES,
            *security.RULES,
            *llm.RULES,
            *best_practice.RULES,
        )
    )


REGISTRY: RuleRegistry = build_registry(JsonSchemaChecker())
ALL_RULES: tuple[Rule, ...] = tuple(REGISTRY)

__all__ = ["ALL_RULES", "REGISTRY", "build_registry"]
