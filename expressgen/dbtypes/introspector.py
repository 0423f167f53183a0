"""Catalog introspection for the database type generator.

Reads table/column metadata of every base table in one schema from
``information_schema`` using psycopg2.  One query per run; failures are
fatal and never retried.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import psycopg2
import psycopg2.extras

from ..config import DatabaseConfig
from ..errors import CatalogQueryError, DatabaseConnectivityError
from .models import ColumnMeta, TableGroup, group_columns

CATALOG_QUERY = """
SELECT
    t.table_name,
    c.column_name,
    c.data_type,
    c.is_nullable,
    c.column_default,
    c.udt_name
FROM information_schema.tables t
JOIN information_schema.columns c
    ON c.table_schema = t.table_schema
   AND c.table_name = t.table_name
WHERE t.table_schema = %s
  AND t.table_type = 'BASE TABLE'
ORDER BY t.table_name, c.ordinal_position
"""


class SchemaIntrospector:
    """Fetches column metadata for the configured schema.

    Args:
        database: Connection settings and schema name.
        connect: Connection factory, ``psycopg2.connect`` by default.
    """

    def __init__(
        self,
        database: DatabaseConfig,
        connect: Callable[..., Any] = psycopg2.connect,
    ) -> None:
        self.database = database
        self._connect = connect

    def fetch_columns(self) -> list[ColumnMeta]:
        """Run the catalog query and return one ``ColumnMeta`` per column.

        Raises:
            DatabaseConnectivityError: If the connection cannot be opened.
            CatalogQueryError: If the query fails.
        """
        try:
            conn = self._connect(**self.database.connect_kwargs())
        except psycopg2.Error as exc:
            raise DatabaseConnectivityError(
                f"cannot connect to {self.database.host}:{self.database.port}"
                f"/{self.database.name}: {str(exc).strip()}"
            ) from exc

        try:
            with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
                cur.execute(CATALOG_QUERY, (self.database.schema_name,))
                rows = cur.fetchall()
        except psycopg2.Error as exc:
            raise CatalogQueryError(f"catalog query failed: {str(exc).strip()}") from exc
        finally:
            conn.close()

        return [ColumnMeta.from_row(dict(row)) for row in rows]

    async def introspect(self) -> list[TableGroup]:
        """Fetch and group columns by table (blocking I/O runs in a thread)."""
        columns = await asyncio.to_thread(self.fetch_columns)
        return group_columns(columns)
