"""Tests for the PostgreSQL to TypeScript type mapping."""

from __future__ import annotations

import pytest

from expressgen.dbtypes.type_map import FALLBACK_TYPE, element_type_name, map_type, resolve_type


pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "storage_type, expected",
    [
        ("integer", "number"),
        ("bigint", "number"),
        ("numeric", "number"),
        ("double precision", "number"),
        ("text", "string"),
        ("character varying", "string"),
        ("uuid", "string"),
        ("time without time zone", "string"),
        ("boolean", "boolean"),
        ("timestamp with time zone", "Date"),
        ("date", "Date"),
        ("json", "unknown"),
        ("jsonb", "unknown"),
    ],
)
def test_map_type(storage_type, expected):
    assert map_type(storage_type) == expected


def test_unmapped_type_falls_back_to_unknown():
    assert map_type("tsvector") == FALLBACK_TYPE == "unknown"


def test_element_type_name():
    assert element_type_name("_int4") == "int4"
    assert element_type_name("int4") == "int4"


class TestResolveType:
    def test_scalar_uses_data_type(self):
        assert resolve_type("integer", "int4") == "number"

    def test_array_uses_udt_element(self):
        assert resolve_type("ARRAY", "_int4") == "number[]"
        assert resolve_type("ARRAY", "_varchar") == "string[]"
        assert resolve_type("ARRAY", "_timestamptz") == "Date[]"

    def test_array_of_unmapped_element(self):
        assert resolve_type("ARRAY", "_tsvector") == "unknown[]"
        assert resolve_type("ARRAY", None) == "unknown[]"

    def test_user_defined_falls_back(self):
        assert resolve_type("USER-DEFINED", "mood") == "unknown"
