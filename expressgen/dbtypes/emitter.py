"""Render introspected tables into the Kysely ``Database`` type file.

Each table becomes an ``export interface <Pascal>Table`` block with one
``ColumnType<...>`` field per column.  A field is optional (``?:``) when the
database usually fills it in itself; a nullable column adds ``| null`` to its
type.  The file ends with the ``Database`` mapping and the ``Row`` /
``InsertRow`` / ``UpdateRow`` helper aliases.

Output depends only on the grouped columns, so an unchanged schema always
produces a byte-identical file.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from pathlib import Path

from ..utils import pascal_case, write_text_file
from .models import ColumnMeta, TableGroup
from .type_map import resolve_type

AUTO_COLUMN_NAMES = frozenset({"id", "created_at", "updated_at"})

# sequence, uuid functions, clock functions
_AUTO_DEFAULT_RE = re.compile(
    r"^nextval\(|uuid_generate|gen_random_uuid\(|\buuid\(|\bnow\(|current_timestamp|current_date",
    re.IGNORECASE,
)
_TS_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

HEADER = """\
/**
 * This file was automatically generated.
 * DO NOT MODIFY IT MANUALLY.
 */

import { ColumnType, Insertable, Selectable, Updateable } from 'kysely';
"""

FOOTER = """\
// Utility types for better type safety
export type Row<Table extends keyof Database> = Selectable<Database[Table]>;
export type InsertRow<Table extends keyof Database> = Insertable<Database[Table]>;
export type UpdateRow<Table extends keyof Database> = Updateable<Database[Table]>;
"""


@dataclass(frozen=True)
class FieldDecl:
    name: str
    ts_type: str
    optional: bool
    nullable: bool

    def render(self) -> str:
        marker = "?" if self.optional else ""
        value_type = f"{self.ts_type} | null" if self.nullable else self.ts_type
        return f"{property_key(self.name)}{marker}: ColumnType<{value_type}>;"


def is_auto_generated(column: ColumnMeta) -> bool:
    """True when callers normally omit this column on insert.

    Either the name is conventionally database-managed (``id``,
    ``created_at``, ``updated_at``) or the default expression is a sequence,
    a UUID function, or a clock function.
    """
    if column.column_name in AUTO_COLUMN_NAMES:
        return True
    default = column.column_default
    return bool(default and _AUTO_DEFAULT_RE.search(default.strip()))


def field_for(column: ColumnMeta) -> FieldDecl:
    return FieldDecl(
        name=column.column_name,
        ts_type=resolve_type(column.data_type, column.udt_name),
        optional=is_auto_generated(column),
        nullable=column.is_nullable,
    )


def property_key(name: str) -> str:
    """Quote a property name unless it is a plain identifier."""
    if _TS_IDENTIFIER_RE.match(name):
        return name
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def interface_names(groups: list[TableGroup]) -> dict[str, str]:
    """Assign a unique ``<Pascal>Table`` interface name to every table."""
    names: dict[str, str] = {}
    taken: set[str] = set()
    for group in groups:
        base = f"{pascal_case(group.table_name) or 'Unnamed'}Table"
        if base[0].isdigit():
            base = f"T{base}"
        candidate, suffix = base, 2
        while candidate in taken:
            candidate, suffix = f"{base}{suffix}", suffix + 1
        taken.add(candidate)
        names[group.table_name] = candidate
    return names


def render_types(groups: list[TableGroup]) -> str:
    """Render the complete type file for *groups*."""
    names = interface_names(groups)
    lines = [HEADER]

    for group in groups:
        lines.append(f"export interface {names[group.table_name]} {{")
        for column in group.columns:
            lines.append(f"  {field_for(column).render()}")
        lines.append("}")
        lines.append("")

    lines.append("// Database interface with auto-generated fields marked as optional")
    lines.append("export interface Database {")
    for group in groups:
        lines.append(f"  {property_key(group.table_name)}: {names[group.table_name]};")
    lines.append("}")
    lines.append("")
    lines.append(FOOTER)
    return "\n".join(lines)


class TypeEmitter:
    """Writes the rendered type file to disk."""

    def __init__(self, output_path: Path) -> None:
        self.output_path = Path(output_path)

    async def write(self, groups: list[TableGroup]) -> Path:
        """Render *groups* and write them in one call.

        Raises:
            FileSystemError: If the file cannot be written.
        """
        content = render_types(groups)
        await asyncio.to_thread(write_text_file, self.output_path, content)
        return self.output_path
