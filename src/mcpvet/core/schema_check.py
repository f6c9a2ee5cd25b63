from __future__ import annotations

from typing import Any, Protocol

from jsonschema import Draft202012Validator, SchemaError
from jsonschema.validators import validator_for


class SchemaChecker(Protocol):
    """Decides whether a value is a usable JSON Schema document."""

    def check(self, schema: Any) -> str | None:
        """Return ``None`` if *schema* is valid, else a reason it is not."""
        ...


class JsonSchemaChecker:
    """:class:`SchemaChecker` backed by the ``jsonschema`` metaschemas.

    Schemas declaring ``$schema`` are checked against that draft; the rest
    against Draft 2020-12.  Build one and share it: the rule that uses it
    never constructs its own.
    """

    def __init__(self, default: type[Any] = Draft202012Validator) -> None:
        self._default = default

    def check(self, schema: Any) -> str | None:
        # validator_for looks $schema up as a dict key; only strings are safe
        declared = isinstance(schema, dict) and isinstance(schema.get("$schema"), str)
        cls = validator_for(schema, default=self._default) if declared else self._default
        try:
            cls.check_schema(schema)
        except SchemaError as exc:
            where = "/".join(str(p) for p in exc.path)
            return f"{exc.message} (at {where})" if where else exc.message
        return None
