"""Knex migration and SQL stub generation.

Migrations in the generated project keep their SQL in plain files::

    migrations/scripts/20250412212525_add_demo_table.ts
    migrations/queries/20250412212525_add_demo_table.up.sql
    migrations/queries/20250412212525_add_demo_table.down.sql

The ``.ts`` body reads the matching ``.sql`` file at run time.  This module
creates new migrations in that shape and backfills stubs for migrations
written before the convention existed.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from ..config import Config
from ..errors import ScaffoldConflictError, ValidationError
from ..utils import ensure_dir, read_text_file, write_text_file
from .templates import TemplateRenderer

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
SQL_LOADER_MARKER = "fs.readFile"
DIRECTIONS = ("up", "down")

_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass(frozen=True)
class CreatedMigration:
    migration: Path
    up_sql: Path
    down_sql: Path


@dataclass
class BackfillReport:
    """What :meth:`MigrationGenerator.backfill` did, file by file."""

    scanned: int = 0
    created_stubs: list[Path] = field(default_factory=list)
    patched_migrations: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    up_to_date: list[Path] = field(default_factory=list)


def split_migration_stem(stem: str) -> tuple[str, str] | None:
    """Split ``"<timestamp>_<name>"``; ``None`` when there is no underscore."""
    timestamp, sep, name = stem.partition("_")
    if not sep or not timestamp or not name:
        return None
    return timestamp, name


def validate_migration_name(name: str) -> str:
    """Return the trimmed migration name.

    Raises:
        ValidationError: If it is empty or not usable in a file name.
    """
    name = name.strip()
    if not name:
        raise ValidationError("migration name", "cannot be empty")
    if not _NAME_RE.match(name):
        raise ValidationError(
            "migration name", "may only contain letters, digits, '_' and '-'"
        )
    return name


class MigrationGenerator:
    """Creates SQL-backed Knex migrations and backfills missing stubs."""

    def __init__(self, config: Config, renderer: TemplateRenderer | None = None) -> None:
        self.config = config
        self.renderer = renderer or TemplateRenderer()

    # -- Rendering ---------------------------------------------------------

    def sql_stub(self, migration_name: str, direction: str) -> str:
        return self.renderer.render(
            "sql_stub.sql.j2", {"migration_name": migration_name, "direction": direction}
        )

    def migration_body(self) -> str:
        return self.renderer.render("migration.ts.j2", {})

    def stub_path(self, stem: str, direction: str) -> Path:
        return self.config.migration_queries_path / f"{stem}.{direction}.sql"

    # -- New migration -----------------------------------------------------

    async def create(self, name: str, *, now: datetime | None = None) -> CreatedMigration:
        """Create ``<timestamp>_<name>.ts`` plus its two SQL stubs.

        Args:
            name: Migration name, e.g. ``add_demo_table``.
            now: Clock override for the timestamp prefix.

        Raises:
            ValidationError: If *name* is empty or malformed.
            ScaffoldConflictError: If a migration with the same stem exists.
            FileSystemError: If a file cannot be written.
        """
        name = validate_migration_name(name)
        timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
        stem = f"{timestamp}_{name}"

        migration = self.config.migration_scripts_path / f"{stem}.ts"
        up_sql = self.stub_path(stem, "up")
        down_sql = self.stub_path(stem, "down")

        existing = [p for p in (migration, up_sql, down_sql) if p.exists()]
        if existing:
            raise ScaffoldConflictError(existing)

        await asyncio.to_thread(write_text_file, up_sql, self.sql_stub(name, "up"))
        await asyncio.to_thread(write_text_file, down_sql, self.sql_stub(name, "down"))
        await asyncio.to_thread(write_text_file, migration, self.migration_body())
        return CreatedMigration(migration=migration, up_sql=up_sql, down_sql=down_sql)

    # -- Backfill ----------------------------------------------------------

    def migration_files(self) -> list[Path]:
        """Sorted ``.ts`` migrations, excluding ``.d.ts`` declarations."""
        scripts = self.config.migration_scripts_path
        if not scripts.is_dir():
            return []
        return sorted(
            p for p in scripts.iterdir()
            if p.is_file() and p.name.endswith(".ts") and not p.name.endswith(".d.ts")
        )

    async def backfill(self) -> BackfillReport:
        """Create missing SQL stubs and convert their migrations to load them.

        A migration whose two stubs already exist is left alone.  Otherwise
        the missing stubs are written (existing ones are never touched) and
        the migration body is replaced by the SQL loader unless it already
        reads its SQL from disk.  Running it twice changes nothing the second
        time.

        Raises:
            FileSystemError: If a stub or migration cannot be read or written.
        """
        report = BackfillReport()
        ensure_dir(self.config.migration_queries_path)

        for migration in self.migration_files():
            report.scanned += 1
            stem = migration.name[: -len(".ts")]
            parts = split_migration_stem(stem)
            if parts is None:
                report.skipped.append(migration)
                continue
            _, name = parts

            missing = [d for d in DIRECTIONS if not self.stub_path(stem, d).exists()]
            if not missing:
                report.up_to_date.append(migration)
                continue

            for direction in missing:
                path = self.stub_path(stem, direction)
                await asyncio.to_thread(write_text_file, path, self.sql_stub(name, direction))
                report.created_stubs.append(path)

            content = await asyncio.to_thread(read_text_file, migration)
            if SQL_LOADER_MARKER not in content:
                await asyncio.to_thread(write_text_file, migration, self.migration_body())
                report.patched_migrations.append(migration)

        return report
