"""expressgen configuration.

Typed configuration for every generator.  All settings use Pydantic v2 models
so they are validated at construction time and can be built from environment
variables without boiler-plate.  Paths are resolved relative to the project
root of the Express template the generators operate on.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

_ENV_NAMES = {
    "host": "DB_HOST",
    "port": "DB_PORT",
    "user": "DB_USER",
    "password": "DB_PASSWORD",
    "name": "DB_NAME",
    "schema_name": "DB_SCHEMA",
}


class DatabaseConfig(BaseModel):
    """Connection settings for the PostgreSQL catalog used by ``db-types``.

    The variable names mirror the ones the generated project reads from its
    ``.env`` file so both sides share a single source of truth.
    """

    host: str = Field(default="localhost")
    port: int = Field(default=5432, ge=1, le=65535)
    user: str = Field(default="postgres")
    password: str = Field(default="")
    name: str = Field(default="postgres")
    schema_name: str = Field(default="public", description="Schema to introspect")
    connect_timeout: int = Field(default=10, ge=1, description="Seconds")

    def connect_kwargs(self) -> dict[str, Any]:
        """Return keyword arguments suitable for ``psycopg2.connect``."""
        return {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "dbname": self.name,
            "connect_timeout": self.connect_timeout,
        }


class Config(BaseModel):
    """Global expressgen configuration.

    Created once by the CLI entry point and passed to the generators.
    """

    project_dir: Path = Field(default=Path("."))
    src_dir_name: str = Field(default="src")
    migrations_dir_name: str = Field(default="migrations")
    types_file: str = Field(
        default="database/types.ts",
        description="Generated type file, relative to the src directory",
    )
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def src_path(self) -> Path:
        """Root of the TypeScript sources inside the project."""
        return self.project_dir / self.src_dir_name

    @property
    def controllers_path(self) -> Path:
        return self.src_path / "controllers"

    @property
    def actions_path(self) -> Path:
        return self.src_path / "actions"

    @property
    def routes_path(self) -> Path:
        return self.src_path / "routes"

    @property
    def schema_helpers_path(self) -> Path:
        return self.src_path / "schemaHelpers"

    @property
    def types_path(self) -> Path:
        """Destination of the generated database type file."""
        return self.src_path / self.types_file

    @property
    def migration_scripts_path(self) -> Path:
        """Directory holding the Knex migration ``.ts`` files."""
        return self.project_dir / self.migrations_dir_name / "scripts"

    @property
    def migration_queries_path(self) -> Path:
        """Directory holding the ``.up.sql`` / ``.down.sql`` stubs."""
        return self.project_dir / self.migrations_dir_name / "queries"

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls, project_dir: str | Path | None = None) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            EXPRESSGEN_PROJECT_DIR, DB_HOST, DB_PORT, DB_USER, DB_PASSWORD,
            DB_NAME, DB_SCHEMA.

        Args:
            project_dir: Explicit project directory.  Takes precedence over
                ``EXPRESSGEN_PROJECT_DIR``.

        Raises:
            ValidationError: If a ``DB_*`` value is malformed, e.g. a
                non-numeric or out-of-range ``DB_PORT``.
        """
        db_kwargs: dict[str, Any] = {}
        if os.environ.get("DB_HOST"):
            db_kwargs["host"] = os.environ["DB_HOST"]
        if os.environ.get("DB_PORT"):
            db_kwargs["port"] = os.environ["DB_PORT"].strip()
        if os.environ.get("DB_USER"):
            db_kwargs["user"] = os.environ["DB_USER"]
        if os.environ.get("DB_PASSWORD"):
            db_kwargs["password"] = os.environ["DB_PASSWORD"]
        if os.environ.get("DB_NAME"):
            db_kwargs["name"] = os.environ["DB_NAME"]
        if os.environ.get("DB_SCHEMA"):
            db_kwargs["schema_name"] = os.environ["DB_SCHEMA"]

        if project_dir is None:
            project_dir = os.environ.get("EXPRESSGEN_PROJECT_DIR", ".")

        try:
            database = DatabaseConfig(**db_kwargs)
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            field = str(first["loc"][0]) if first["loc"] else "database"
            raise ValidationError(
                _ENV_NAMES.get(field, field),
                first["msg"].removeprefix("Value error, "),
            ) from exc

        return cls(project_dir=Path(project_dir), database=database)
