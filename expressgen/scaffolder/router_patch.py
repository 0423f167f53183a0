"""Idempotent merge of a new route into ``routes/<scope>.routes.ts``.

The router file is treated as plain text.  Two statements are derived from
the plan, an import of the controller and a ``router.<method>(...)``
registration, and each is inserted only when its exact text is not already
present.  Everything else in the file is left untouched, so applying the
same plan twice yields byte-identical output.

Insertion points:

* import: after the last line starting with ``import`` (scanning bottom-up),
  or at the very top when the file has no imports;
* route: before the first line starting with ``export default``, or at the
  end of the file when there is no default export.

Presence is an exact substring check.  A statement written with different
spacing is not recognised and will be inserted again.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path

from ..utils import read_text_file, write_text_file
from .planner import ROUTE_SUFFIX, Plan
from .templates import TemplateRenderer

IMPORT_KEYWORD = "import"
EXPORT_DEFAULT = "export default"


@dataclass(frozen=True)
class RouterPatch:
    """Outcome of patching a router file."""

    path: Path
    text: str
    created: bool
    import_added: bool
    route_added: bool

    @property
    def changed(self) -> bool:
        return self.created or self.import_added or self.route_added


def import_statement(plan: Plan) -> str:
    return (
        f'import {plan.controller_name} from '
        f'"@/controllers/{plan.scope}/{plan.domain}/{plan.operation_name}";'
    )


def route_statement(plan: Plan) -> str:
    return f'router.{plan.method.value.lower()}("{plan.route_path}", {plan.controller_name});'


def router_path(routes_dir: Path, scope: str) -> Path:
    return routes_dir / f"{scope}{ROUTE_SUFFIX}"


def insert_import(lines: list[str], statement: str) -> None:
    """Insert *statement* after the last import line (in place)."""
    last_import = -1
    for index in range(len(lines) - 1, -1, -1):
        if lines[index].startswith(IMPORT_KEYWORD):
            last_import = index
            break
    lines.insert(last_import + 1, statement)


def insert_route(lines: list[str], statement: str) -> None:
    """Insert *statement* before the default export, or append it (in place)."""
    for index, line in enumerate(lines):
        if line.startswith(EXPORT_DEFAULT):
            lines.insert(index, statement)
            return
    lines.append(statement)


def patch_router_text(text: str, plan: Plan) -> tuple[str, bool, bool]:
    """Merge the plan's import and route statements into *text*.

    Presence of both statements is decided against the original *text*, then
    the insertions are applied to its lines.  Existing line endings survive
    because the text is split and re-joined on ``"\\n"`` only.

    Returns:
        ``(new_text, import_added, route_added)``.
    """
    imp = import_statement(plan)
    route = route_statement(plan)
    import_added = imp not in text
    route_added = route not in text

    lines = text.split("\n")
    if import_added:
        insert_import(lines, imp)
    if route_added:
        insert_route(lines, route)
    return "\n".join(lines), import_added, route_added


class RouterPatcher:
    """Applies :func:`patch_router_text` to the scope's router file on disk."""

    def __init__(self, routes_dir: Path, renderer: TemplateRenderer | None = None) -> None:
        self.routes_dir = Path(routes_dir)
        self.renderer = renderer or TemplateRenderer()

    def skeleton(self) -> str:
        """Minimal router used when the scope has no router file yet."""
        return self.renderer.render("router.ts.j2", {})

    async def apply(self, plan: Plan) -> RouterPatch:
        """Patch (or create) ``<routes_dir>/<scope>.routes.ts`` for *plan*.

        The recomputed text is written back in one call, and only when it
        differs from what is on disk.

        Raises:
            FileSystemError: If the router file cannot be read or written.
        """
        path = router_path(self.routes_dir, plan.scope)
        created = not path.exists()
        original = self.skeleton() if created else await asyncio.to_thread(read_text_file, path)

        text, import_added, route_added = patch_router_text(original, plan)
        if created or text != original:
            await asyncio.to_thread(write_text_file, path, text)

        return RouterPatch(
            path=path,
            text=text,
            created=created,
            import_added=import_added,
            route_added=route_added,
        )
