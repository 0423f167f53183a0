"""expressgen command-line interface.

Usage::

    expressgen endpoint                              # interactive
    expressgen endpoint --method POST --scope app --domain widgets
    expressgen db-types --schema public
    expressgen migration new add_demo_table
    expressgen migration backfill
    expressgen helper "select user by id"

Exit codes: 0 on success, 1 on any validation, file-system or database error.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.prompt import Confirm

from . import __version__
from .config import Config
from .dbtypes import SchemaIntrospector, TypeEmitter
from .errors import ExpressGenError
from .scaffolder.generator import EndpointGenerator
from .scaffolder.helper_gen import HelperGenerator
from .scaffolder.migration_gen import MigrationGenerator
from .scaffolder.planner import HttpMethod, Plan, build_plan, discover_domains, discover_scopes
from .scaffolder.prompts import RichPrompter, collect_plan, required
from .utils import (
    console,
    display_path,
    print_banner,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _plan_from_args(args: argparse.Namespace, config: Config) -> Plan:
    """Build the plan from flags when all three choices are given, else ask."""
    if args.method and args.scope and args.domain:
        return build_plan(
            args.method,
            args.scope,
            args.domain,
            controller_name=args.controller,
            action_name=args.action,
            query_name=args.query,
            route_path=args.route,
            needs_schema=not args.no_schema,
        )
    return collect_plan(
        RichPrompter(),
        discover_scopes(config.routes_path),
        lambda scope: discover_domains(config.controllers_path, scope),
    )


def cmd_endpoint(args: argparse.Namespace, config: Config) -> int:
    print_banner("Endpoint Generator")
    plan = _plan_from_args(args, config)
    result = asyncio.run(EndpointGenerator(config).generate(plan, overwrite=args.force))
    print_success("Endpoint created successfully!")
    print_summary_table(result.summary(config.project_dir), title="Generated files")
    return EXIT_SUCCESS


def cmd_db_types(args: argparse.Namespace, config: Config) -> int:
    print_banner("Database Types")
    if args.schema:
        config.database.schema_name = args.schema
    output = Path(args.output) if args.output else config.types_path

    console.print(
        f"Introspecting [bold]{config.database.name}[/bold] "
        f"(schema [bold]{config.database.schema_name}[/bold])..."
    )
    groups = asyncio.run(SchemaIntrospector(config.database).introspect())
    if not groups:
        print_warning(f"No base tables found in schema '{config.database.schema_name}'.")
    path = asyncio.run(TypeEmitter(output).write(groups))

    print_success("Database types generated successfully!")
    print_summary_table(
        {
            "Tables": str(len(groups)),
            "Columns": str(sum(len(g.columns) for g in groups)),
            "File": display_path(path, config.project_dir),
        },
        title="Generated types",
    )
    return EXIT_SUCCESS


def cmd_migration_new(args: argparse.Namespace, config: Config) -> int:
    print_banner("New Migration")
    created = asyncio.run(MigrationGenerator(config).create(args.name))
    print_success(f"Migration {args.name.strip()} created successfully!")
    print_summary_table(
        {
            "Migration": display_path(created.migration, config.project_dir),
            "Up SQL": display_path(created.up_sql, config.project_dir),
            "Down SQL": display_path(created.down_sql, config.project_dir),
        },
        title="Edit the SQL files, then run the migration",
    )
    return EXIT_SUCCESS


def cmd_migration_backfill(args: argparse.Namespace, config: Config) -> int:
    print_banner("SQL Stub Backfill")
    report = asyncio.run(MigrationGenerator(config).backfill())
    for path in report.skipped:
        print_warning(f"Skipping {path.name} - doesn't match <timestamp>_<name>.ts")
    print_summary_table(
        {
            "Migrations found": str(report.scanned),
            "SQL stubs created": str(len(report.created_stubs)),
            "Migrations updated": str(len(report.patched_migrations)),
            "Already up to date": str(len(report.up_to_date)),
            "Skipped": str(len(report.skipped)),
        },
        title="SQL file creation complete",
    )
    return EXIT_SUCCESS


def cmd_helper(args: argparse.Namespace, config: Config) -> int:
    print_banner("Schema Helper Generator")
    raw_name = args.name
    if raw_name is None:
        raw_name = RichPrompter().text(
            'Enter helper name (e.g., "select user by id"):',
            validate=required("Helper name"),
        )

    generator = HelperGenerator(config)
    target = generator.target(raw_name)
    overwrite = args.force
    if target.exists() and not overwrite:
        overwrite = Confirm.ask(
            f"Helper [red]{target.stem}[/red] already exists. Overwrite?",
            default=False,
            console=console,
        )
        if not overwrite:
            print_warning("Operation cancelled.")
            return EXIT_SUCCESS

    path = asyncio.run(generator.generate(raw_name, overwrite=overwrite))
    print_success("Schema helper created successfully!")
    print_summary_table({"File": display_path(path, config.project_dir)}, title="Generated files")
    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="expressgen",
        description="Scaffold endpoints, migrations and database types for an Express project.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  expressgen endpoint\n"
            "  expressgen endpoint --method POST --scope app --domain widgets\n"
            "  expressgen db-types --schema public\n"
            "  expressgen migration new add_demo_table\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"expressgen {__version__}")
    parser.add_argument(
        "--project", "-p",
        default=None,
        help="Project root (default: $EXPRESSGEN_PROJECT_DIR or the current directory)",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    endpoint = sub.add_parser("endpoint", help="Scaffold controller, action, query and route")
    endpoint.add_argument("--method", type=str.upper, choices=[m.value for m in HttpMethod])
    endpoint.add_argument("--scope", help="Scope, e.g. 'app'")
    endpoint.add_argument("--domain", help="Domain, e.g. 'widgets'")
    endpoint.add_argument("--controller", help="Override the controller name")
    endpoint.add_argument("--action", help="Override the action name")
    endpoint.add_argument("--query", help="Override the query name")
    endpoint.add_argument("--route", help="Override the route path")
    endpoint.add_argument("--no-schema", action="store_true", help="Skip the Zod schema file")
    endpoint.add_argument("--force", action="store_true", help="Overwrite existing files")
    endpoint.set_defaults(handler=cmd_endpoint)

    db_types = sub.add_parser("db-types", help="Generate Kysely types from the live schema")
    db_types.add_argument("--schema", default=None, help="Schema to introspect (default: public)")
    db_types.add_argument("--output", "-o", default=None, help="Output file (default: src/database/types.ts)")
    db_types.set_defaults(handler=cmd_db_types)

    migration = sub.add_parser("migration", help="Create migrations and SQL stubs")
    migration_sub = migration.add_subparsers(dest="migration_command", metavar="ACTION")
    migration_sub.required = True
    new = migration_sub.add_parser("new", help="Create a SQL-backed migration")
    new.add_argument("name", help="Migration name, e.g. add_demo_table")
    new.set_defaults(handler=cmd_migration_new)
    backfill = migration_sub.add_parser("backfill", help="Create missing SQL stubs")
    backfill.set_defaults(handler=cmd_migration_backfill)

    helper = sub.add_parser("helper", help="Scaffold a reusable schema helper")
    helper.add_argument("name", nargs="?", default=None, help='e.g. "select user by id"')
    helper.add_argument("--force", action="store_true", help="Overwrite without asking")
    helper.set_defaults(handler=cmd_helper)

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def run(argv: Optional[Sequence[str]] = None) -> int:
    """Parse *argv*, run the command, and return the exit code."""
    args = build_parser().parse_args(argv)

    try:
        config = Config.from_env(args.project)
        return args.handler(args, config)
    except ExpressGenError as exc:
        print_error(f"Error: {exc}")
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print_warning("Aborted.")
        return EXIT_FAILURE


def main() -> None:
    """Console-script entry point for ``expressgen``."""
    sys.exit(run())


if __name__ == "__main__":
    main()
