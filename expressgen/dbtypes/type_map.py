"""PostgreSQL to TypeScript value-type mapping.

Keys cover both the SQL-standard ``data_type`` names reported by
``information_schema.columns`` and the internal ``udt_name`` aliases, since
array columns only expose their element type through ``udt_name``
(``_int4``, ``_varchar``, ...).
"""

from __future__ import annotations

FALLBACK_TYPE = "unknown"
ARRAY_DATA_TYPE = "ARRAY"
ARRAY_MARKER = "_"

TYPE_MAP: dict[str, str] = {
    # integral / decimal
    "smallint": "number",
    "integer": "number",
    "bigint": "number",
    "numeric": "number",
    "decimal": "number",
    "real": "number",
    "double precision": "number",
    "int2": "number",
    "int4": "number",
    "int8": "number",
    "float4": "number",
    "float8": "number",
    # character
    "text": "string",
    "character varying": "string",
    "varchar": "string",
    "character": "string",
    "char": "string",
    "bpchar": "string",
    # boolean
    "boolean": "boolean",
    "bool": "boolean",
    # temporal
    "timestamp": "Date",
    "timestamp with time zone": "Date",
    "timestamp without time zone": "Date",
    "timestamptz": "Date",
    "date": "Date",
    "time": "string",
    "time with time zone": "string",
    "time without time zone": "string",
    "timetz": "string",
    # opaque
    "json": "unknown",
    "jsonb": "unknown",
    # identifiers
    "uuid": "string",
}


def map_type(storage_type: str) -> str:
    """Map a storage type name to its TypeScript type (``unknown`` if unmapped)."""
    return TYPE_MAP.get(storage_type, FALLBACK_TYPE)


def element_type_name(udt_name: str) -> str:
    """Strip the leading array marker: ``"_int4"`` -> ``"int4"``."""
    return udt_name[len(ARRAY_MARKER):] if udt_name.startswith(ARRAY_MARKER) else udt_name


def resolve_type(data_type: str, udt_name: str | None = None) -> str:
    """Resolve a column's TypeScript type, wrapping array elements as ``T[]``."""
    if data_type == ARRAY_DATA_TYPE:
        return f"{map_type(element_type_name(udt_name or ''))}[]"
    return map_type(data_type)
