"""Column metadata read from the catalog, grouped per table."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field


class ColumnMeta(BaseModel):
    """One row of the catalog query: a single column of a base table."""

    model_config = ConfigDict(frozen=True)

    table_name: str
    column_name: str
    data_type: str = Field(..., description="information_schema data_type, e.g. 'integer' or 'ARRAY'")
    is_nullable: bool = False
    column_default: Optional[str] = None
    udt_name: str = Field(default="", description="Underlying type, '_int4' for integer[]")

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ColumnMeta":
        """Build from a catalog row where ``is_nullable`` is ``'YES'``/``'NO'``."""
        nullable = row.get("is_nullable")
        if isinstance(nullable, str):
            nullable = nullable.upper() == "YES"
        return cls(
            table_name=row["table_name"],
            column_name=row["column_name"],
            data_type=row["data_type"],
            is_nullable=bool(nullable),
            column_default=row.get("column_default"),
            udt_name=row.get("udt_name") or "",
        )


class TableGroup(BaseModel):
    """Columns of one table, in catalog ordinal order."""

    model_config = ConfigDict(frozen=True)

    table_name: str
    columns: tuple[ColumnMeta, ...] = ()


def group_columns(columns: Iterable[ColumnMeta]) -> list[TableGroup]:
    """Group columns by table, keeping the order in which they arrive.

    The catalog query already orders by table name then ordinal position, so
    preserving arrival order is what makes the emitted file deterministic.
    """
    grouped: dict[str, list[ColumnMeta]] = {}
    for column in columns:
        grouped.setdefault(column.table_name, []).append(column)
    return [TableGroup(table_name=name, columns=tuple(cols)) for name, cols in grouped.items()]
