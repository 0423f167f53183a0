"""Tests for SQL-backed migration creation and stub backfill."""

from __future__ import annotations

from datetime import datetime

import pytest

from expressgen.config import Config
from expressgen.errors import ScaffoldConflictError, ValidationError
from expressgen.scaffolder.migration_gen import (
    SQL_LOADER_MARKER,
    MigrationGenerator,
    split_migration_stem,
    validate_migration_name,
)


pytestmark = pytest.mark.unit

FIXED_NOW = datetime(2025, 4, 12, 21, 25, 25)

LEGACY_MIGRATION = """\
import { Knex } from 'knex';

export async function up(knex: Knex): Promise<void> {
  await knex.schema.createTable('demo', (t) => t.increments('id'));
}

export async function down(knex: Knex): Promise<void> {
  await knex.schema.dropTable('demo');
}
"""


@pytest.fixture
def generator(config: Config) -> MigrationGenerator:
    return MigrationGenerator(config)


@pytest.fixture
def scripts(config: Config):
    path = config.migration_scripts_path
    path.mkdir(parents=True)
    return path


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestNames:
    def test_split_stem(self):
        assert split_migration_stem("20250412212525_add_demo_table") == (
            "20250412212525",
            "add_demo_table",
        )

    def test_split_stem_without_underscore(self):
        assert split_migration_stem("20250412212525") is None
        assert split_migration_stem("_leading") is None

    def test_validate_name_trims(self):
        assert validate_migration_name("  add_demo_table ") == "add_demo_table"

    @pytest.mark.parametrize("name", ["", "   ", "add demo", "../escape"])
    def test_validate_name_rejects(self, name):
        with pytest.raises(ValidationError):
            validate_migration_name(name)


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


class TestCreate:
    @pytest.mark.asyncio
    async def test_writes_migration_and_stubs(self, generator, config):
        created = await generator.create("add_demo_table", now=FIXED_NOW)

        stem = "20250412212525_add_demo_table"
        assert created.migration == config.migration_scripts_path / f"{stem}.ts"
        assert created.up_sql == config.migration_queries_path / f"{stem}.up.sql"
        assert created.down_sql == config.migration_queries_path / f"{stem}.down.sql"

        assert SQL_LOADER_MARKER in created.migration.read_text(encoding="utf-8")
        assert created.up_sql.read_text(encoding="utf-8") == (
            "-- SQL for add_demo_table up migration\n-- Add your SQL here\n"
        )
        assert created.down_sql.read_text(encoding="utf-8").startswith(
            "-- SQL for add_demo_table down migration"
        )

    @pytest.mark.asyncio
    async def test_same_stem_conflicts(self, generator):
        await generator.create("add_demo_table", now=FIXED_NOW)
        with pytest.raises(ScaffoldConflictError):
            await generator.create("add_demo_table", now=FIXED_NOW)

    @pytest.mark.asyncio
    async def test_invalid_name_writes_nothing(self, generator, config):
        with pytest.raises(ValidationError):
            await generator.create("   ", now=FIXED_NOW)
        assert not config.migration_scripts_path.exists()


# ---------------------------------------------------------------------------
# backfill
# ---------------------------------------------------------------------------


class TestBackfill:
    @pytest.mark.asyncio
    async def test_creates_stubs_and_converts_migration(self, generator, scripts, config):
        legacy = scripts / "20240101000000_create_demo.ts"
        legacy.write_text(LEGACY_MIGRATION, encoding="utf-8")

        report = await generator.backfill()

        assert report.scanned == 1
        queries = config.migration_queries_path
        assert sorted(p.name for p in report.created_stubs) == [
            "20240101000000_create_demo.down.sql",
            "20240101000000_create_demo.up.sql",
        ]
        assert (queries / "20240101000000_create_demo.up.sql").read_text(encoding="utf-8") == (
            "-- SQL for create_demo up migration\n-- Add your SQL here\n"
        )
        assert report.patched_migrations == [legacy]
        assert SQL_LOADER_MARKER in legacy.read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_second_run_changes_nothing(self, generator, scripts, config):
        (scripts / "20240101000000_create_demo.ts").write_text(LEGACY_MIGRATION, encoding="utf-8")
        await generator.backfill()
        snapshot = {
            p: p.read_bytes()
            for p in [*scripts.iterdir(), *config.migration_queries_path.iterdir()]
        }

        report = await generator.backfill()

        assert report.created_stubs == []
        assert report.patched_migrations == []
        assert len(report.up_to_date) == 1
        for path, content in snapshot.items():
            assert path.read_bytes() == content

    @pytest.mark.asyncio
    async def test_existing_stub_is_kept(self, generator, scripts, config):
        (scripts / "20240101000000_create_demo.ts").write_text(LEGACY_MIGRATION, encoding="utf-8")
        queries = config.migration_queries_path
        queries.mkdir(parents=True)
        up = queries / "20240101000000_create_demo.up.sql"
        up.write_text("CREATE TABLE demo ();\n", encoding="utf-8")

        report = await generator.backfill()

        assert [p.name for p in report.created_stubs] == ["20240101000000_create_demo.down.sql"]
        assert up.read_text(encoding="utf-8") == "CREATE TABLE demo ();\n"

    @pytest.mark.asyncio
    async def test_loader_migration_not_rewritten(self, generator, scripts):
        body = generator.migration_body() + "// local tweak\n"
        migration = scripts / "20240101000000_create_demo.ts"
        migration.write_text(body, encoding="utf-8")

        report = await generator.backfill()

        assert len(report.created_stubs) == 2
        assert report.patched_migrations == []
        assert migration.read_text(encoding="utf-8") == body

    @pytest.mark.asyncio
    async def test_unparseable_and_declaration_files(self, generator, scripts, config):
        (scripts / "legacy.ts").write_text(LEGACY_MIGRATION, encoding="utf-8")
        (scripts / "20240101000000_types.d.ts").write_text("", encoding="utf-8")
        (scripts / "README.md").write_text("", encoding="utf-8")

        report = await generator.backfill()

        assert report.scanned == 1
        assert [p.name for p in report.skipped] == ["legacy.ts"]
        assert list(config.migration_queries_path.iterdir()) == []
        assert (scripts / "legacy.ts").read_text(encoding="utf-8") == LEGACY_MIGRATION

    @pytest.mark.asyncio
    async def test_no_scripts_directory(self, generator):
        report = await generator.backfill()
        assert report.scanned == 0
