"""Shared pytest fixtures for the expressgen test suite.

Provides reusable fixtures for:
- Temporary Express project trees
- Configuration pointing at them
- Sample plans and router sources
- Catalog rows for the type generator
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any

import pytest

from expressgen.config import Config, DatabaseConfig
from expressgen.dbtypes.models import ColumnMeta
from expressgen.scaffolder.planner import Plan, build_plan
from expressgen.scaffolder.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Empty Express project with a ``src/`` directory (auto-cleanup)."""
    root = tmp_path / "indigo-api"
    (root / "src").mkdir(parents=True)
    yield root


@pytest.fixture
def config(project_dir: Path) -> Config:
    """Configuration rooted at the temporary project."""
    return Config(
        project_dir=project_dir,
        database=DatabaseConfig(
            host="db.test", port=5432, user="tester", password="secret", name="app"
        ),
    )


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


# ---------------------------------------------------------------------------
# Plans & router sources
# ---------------------------------------------------------------------------

@pytest.fixture
def post_plan() -> Plan:
    """POST app/widgets with all defaults."""
    return build_plan("POST", "app", "widgets")


@pytest.fixture
def get_plan() -> Plan:
    """GET app/widgets without a schema file."""
    return build_plan("GET", "app", "widgets", needs_schema=False)


@pytest.fixture
def existing_router() -> str:
    """A router file that already serves one endpoint."""
    return textwrap.dedent(
        """\
        import { Router } from "express";
        import getAppUsers from "@/controllers/app/users/getAppUsers";

        const router = Router();

        router.get("/users", getAppUsers);

        export default router;
        """
    )


# ---------------------------------------------------------------------------
# Catalog rows
# ---------------------------------------------------------------------------

def _row(table: str, column: str, data_type: str, nullable: str = "NO",
         default: str | None = None, udt: str = "") -> dict[str, Any]:
    return {
        "table_name": table,
        "column_name": column,
        "data_type": data_type,
        "is_nullable": nullable,
        "column_default": default,
        "udt_name": udt,
    }


@pytest.fixture
def demo_rows() -> list[dict[str, Any]]:
    """Catalog rows for ``demo`` and ``orders``, in catalog order."""
    return [
        _row("demo", "id", "integer", default="nextval('demo_id_seq'::regclass)", udt="int4"),
        _row("demo", "name", "text", udt="text"),
        _row("demo", "created_at", "timestamp without time zone", nullable="YES",
             default="now()", udt="timestamp"),
        _row("orders", "id", "uuid", default="gen_random_uuid()", udt="uuid"),
        _row("orders", "amount", "numeric", udt="numeric"),
        _row("orders", "tags", "ARRAY", nullable="YES", udt="_varchar"),
        _row("orders", "metadata", "jsonb", nullable="YES", udt="jsonb"),
    ]


@pytest.fixture
def demo_columns(demo_rows: list[dict[str, Any]]) -> list[ColumnMeta]:
    return [ColumnMeta.from_row(row) for row in demo_rows]
