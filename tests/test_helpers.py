from __future__ import annotations

from typing import Any

import pytest

from mcpvet.core.fragments import (
    FragmentLocation,
    build_fragment_index,
    canonicalize,
    is_complex,
    property_fragments,
)
from mcpvet.rules._helpers import iter_params, param_path, schema_depth, types_of, word_pattern
from tests.conftest import make_tool

_ADDRESS = {
    "type": "object",
    "properties": {"street": {"type": "string"}, "city": {"type": "string"}},
}


# --- canonicalize ---


def test_canonicalize_ignores_key_order() -> None:
    a = {"type": "object", "properties": {"x": {"type": "string"}, "y": {"type": "integer"}}}
    b = {"properties": {"y": {"type": "integer"}, "x": {"type": "string"}}, "type": "object"}
    assert canonicalize(a) == canonicalize(b)


def test_canonicalize_ignores_array_order() -> None:
    assert canonicalize({"enum": ["a", "b"]}) == canonicalize({"enum": ["b", "a"]})
    assert canonicalize({"a": 1, "b": [2, 1]}) == canonicalize({"b": [1, 2], "a": 1})


def test_canonicalize_distinguishes_values() -> None:
    assert canonicalize({"type": "string"}) != canonicalize({"type": "integer"})
    assert canonicalize({"maxLength": 1}) != canonicalize({"maxLength": "1"})


def test_canonicalize_none() -> None:
    assert canonicalize(None) == ""


# --- is_complex ---


@pytest.mark.parametrize(
    ("schema", "expected"),
    [
        pytest.param(_ADDRESS, True, id="object-with-properties"),
        pytest.param({"type": "object"}, False, id="bare-object"),
        pytest.param(
            {"type": "array", "items": _ADDRESS},
            True,
            id="array-of-objects",
        ),
        pytest.param({"type": "array", "items": {"type": "string"}}, False, id="array-of-strings"),
        pytest.param({"type": "string", "minLength": 1, "maxLength": 9}, True, id="constrained"),
        pytest.param({"type": "string", "maxLength": 9}, False, id="one-constraint"),
        pytest.param({"type": "string"}, False, id="plain"),
        pytest.param({"minLength": 1, "maxLength": 9}, False, id="untyped"),
        pytest.param("string", False, id="not-a-mapping"),
    ],
)
def test_is_complex(schema: Any, expected: bool) -> None:
    assert is_complex(schema) is expected


# --- fragment index ---


def test_property_fragments_only_complex() -> None:
    tool = make_tool(properties={"address": _ADDRESS, "name": {"type": "string"}}, required=[])
    fragments = property_fragments(tool)
    assert [path for _, path in fragments] == ["inputSchema.properties.address"]


def test_build_fragment_index_groups_locations() -> None:
    first = make_tool(name="a", properties={"home": _ADDRESS, "work": _ADDRESS}, required=[])
    second = make_tool(name="b", properties={"ship": _ADDRESS}, required=[])
    index = build_fragment_index([first, second])
    assert list(index.values()) == [
        (
            FragmentLocation(0, "a", "inputSchema.properties.home"),
            FragmentLocation(0, "a", "inputSchema.properties.work"),
            FragmentLocation(1, "b", "inputSchema.properties.ship"),
        )
    ]


def test_build_fragment_index_empty() -> None:
    assert dict(build_fragment_index([])) == {}


# --- schema_depth ---


def test_schema_depth_flat() -> None:
    assert schema_depth({"type": "object", "properties": {"a": {"type": "string"}}}) == (
        1,
        "inputSchema.properties.a",
    )


def test_schema_depth_items_and_additional() -> None:
    schema = {
        "type": "object",
        "properties": {
            "list": {"type": "array", "items": {"type": "object", "additionalProperties": {}}},
        },
    }
    assert schema_depth(schema) == (
        3,
        "inputSchema.properties.list.items.additionalProperties",
    )


def test_schema_depth_combinators_do_not_add_level() -> None:
    schema = {"anyOf": [{"type": "string"}, {"type": "object", "properties": {"a": {}}}]}
    assert schema_depth(schema) == (1, "inputSchema.anyOf.1.properties.a")


def test_schema_depth_first_deepest_wins() -> None:
    schema = {"properties": {"a": {}, "b": {}}}
    assert schema_depth(schema) == (1, "inputSchema.properties.a")


def test_schema_depth_non_mapping() -> None:
    assert schema_depth(None) == (0, "inputSchema")


# --- small helpers ---


def test_types_of() -> None:
    assert types_of({"type": "string"}) == {"string"}
    assert types_of({"type": ["string", "null", 3]}) == {"string", "null"}
    assert types_of({}) == set()


def test_param_path() -> None:
    assert param_path("q") == "inputSchema.properties.q"
    assert param_path("q", "description") == "inputSchema.properties.q.description"


def test_iter_params_skips_non_mappings() -> None:
    tool = make_tool(properties={"a": {"type": "string"}, "b": True}, required=[])
    assert [name for name, _ in iter_params(tool)] == ["a"]


def test_word_pattern_whole_words() -> None:
    pattern = word_pattern(["data", "info"])
    assert pattern.search("some DATA here")
    assert not pattern.search("metadata")
