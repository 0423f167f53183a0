"""Endpoint scaffolding orchestrator.

Takes a confirmed ``Plan`` and generates the layered files of one endpoint
inside an Express project::

    src/controllers/<scope>/<domain>/<controller>/index.ts
    src/controllers/<scope>/<domain>/<controller>/schema/<controller>.schema.ts
    src/actions/<scope>/<domain>/<action>/index.ts
    src/actions/<scope>/<domain>/<action>/queries/<query>.ts

then registers the controller in ``src/routes/<scope>.routes.ts``.

Existing leaf files are never silently replaced: unless ``overwrite`` is set,
every target is checked first and the run fails before writing anything.
Once writing starts, a failure leaves earlier files in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ..config import Config
from ..errors import ScaffoldConflictError
from ..utils import display_path
from .planner import Plan
from .router_patch import RouterPatch, RouterPatcher
from .templates import TemplateRenderer


@dataclass(frozen=True)
class PlannedFile:
    """One file the generator will write: its template and destination."""

    kind: str
    template: str
    path: Path


@dataclass
class ScaffoldResult:
    """Paths written by :meth:`EndpointGenerator.generate`."""

    plan: Plan
    files: dict[str, Path] = field(default_factory=dict)
    router: RouterPatch | None = None

    def summary(self, root: Path) -> dict[str, str]:
        """Label -> project-relative path, for the console summary table."""
        rows: dict[str, str] = {}
        for kind, path in self.files.items():
            rows[kind.capitalize()] = display_path(path, root)
        if self.router is not None:
            state = "created" if self.router.created else (
                "updated" if self.router.changed else "unchanged"
            )
            rows["Route"] = f"{display_path(self.router.path, root)} ({state})"
        return rows


class EndpointGenerator:
    """Renders the endpoint templates for a plan and patches the router."""

    def __init__(self, config: Config, renderer: TemplateRenderer | None = None) -> None:
        self.config = config
        self.renderer = renderer or TemplateRenderer()
        self.router_patcher = RouterPatcher(config.routes_path, self.renderer)

    # -- Paths -------------------------------------------------------------

    def controller_dir(self, plan: Plan) -> Path:
        return self.config.controllers_path / plan.scope / plan.domain / plan.operation_name

    def action_dir(self, plan: Plan) -> Path:
        return self.config.actions_path / plan.scope / plan.domain / plan.action_name

    def planned_files(self, plan: Plan) -> list[PlannedFile]:
        """Return the files this plan produces, in write order."""
        controller_dir = self.controller_dir(plan)
        action_dir = self.action_dir(plan)
        files = [PlannedFile("controller", "controller.ts.j2", controller_dir / "index.ts")]
        if plan.needs_schema:
            files.append(
                PlannedFile(
                    "schema",
                    "schema.ts.j2",
                    controller_dir / "schema" / f"{plan.operation_name}.schema.ts",
                )
            )
        files.append(PlannedFile("action", "action.ts.j2", action_dir / "index.ts"))
        files.append(
            PlannedFile("query", "query.ts.j2", action_dir / "queries" / f"{plan.query_name}.ts")
        )
        return files

    # -- Rendering ---------------------------------------------------------

    def render(self, plan: Plan) -> dict[str, str]:
        """Render every planned file without touching the disk.

        Returns:
            Mapping of file kind (``controller``, ``schema``, ``action``,
            ``query``) to rendered text.
        """
        context = plan.template_context()
        return {
            planned.kind: self.renderer.render(planned.template, context)
            for planned in self.planned_files(plan)
        }

    def conflicts(self, plan: Plan) -> list[Path]:
        return [p.path for p in self.planned_files(plan) if p.path.exists()]

    # -- Public API --------------------------------------------------------

    async def generate(self, plan: Plan, *, overwrite: bool = False) -> ScaffoldResult:
        """Write the endpoint files for *plan* and register its route.

        Args:
            plan: The confirmed plan.
            overwrite: Replace existing controller/action/query/schema files.

        Returns:
            A ``ScaffoldResult`` with every written path.

        Raises:
            ScaffoldConflictError: If a target exists and *overwrite* is off.
            FileSystemError: If a directory or file cannot be written.
        """
        if not overwrite:
            existing = self.conflicts(plan)
            if existing:
                raise ScaffoldConflictError(existing)

        context = plan.template_context()
        result = ScaffoldResult(plan=plan)

        for planned in self.planned_files(plan):
            result.files[planned.kind] = await self.renderer.render_to_file(
                planned.template, planned.path, context
            )

        result.router = await self.router_patcher.apply(plan)
        return result
