"""Database type generation: catalog introspection to Kysely types.

Quick usage::

    from expressgen.dbtypes import SchemaIntrospector, TypeEmitter

    groups = await SchemaIntrospector(config.database).introspect()
    await TypeEmitter(config.types_path).write(groups)
"""

from expressgen.dbtypes.emitter import TypeEmitter, is_auto_generated, render_types
from expressgen.dbtypes.introspector import SchemaIntrospector
from expressgen.dbtypes.models import ColumnMeta, TableGroup, group_columns
from expressgen.dbtypes.type_map import map_type, resolve_type

__all__ = [
    "ColumnMeta",
    "SchemaIntrospector",
    "TableGroup",
    "TypeEmitter",
    "group_columns",
    "is_auto_generated",
    "map_type",
    "render_types",
    "resolve_type",
]
