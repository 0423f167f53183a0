"""Tests for the idempotent router patch.

Covers:
- Statement text derived from a plan
- Insertion after the last import and before the default export
- Fallbacks when there are no imports / no default export
- Idempotence (second pass is a fixed point)
- Exact-match presence checking
- RouterPatcher file creation and rewriting
"""

from __future__ import annotations

from pathlib import Path

import pytest

from expressgen.scaffolder.planner import build_plan
from expressgen.scaffolder.router_patch import (
    RouterPatcher,
    import_statement,
    patch_router_text,
    route_statement,
)


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestStatements:
    def test_import_statement(self, post_plan):
        assert import_statement(post_plan) == (
            'import postAppWidgets from "@/controllers/app/widgets/postAppWidgets";'
        )

    def test_route_statement(self, post_plan):
        assert route_statement(post_plan) == 'router.post("/widgets", postAppWidgets);'

    def test_route_statement_lowercases_method(self):
        plan = build_plan("DELETE", "app", "widgets", route_path="/widgets/:id")
        assert route_statement(plan) == 'router.delete("/widgets/:id", deleteAppWidgets);'


# ---------------------------------------------------------------------------
# patch_router_text
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestPatchRouterText:
    def test_inserts_after_last_import_and_before_export(self, post_plan, existing_router):
        text, import_added, route_added = patch_router_text(existing_router, post_plan)
        assert import_added and route_added

        lines = text.split("\n")
        assert lines[0] == 'import { Router } from "express";'
        assert lines[1] == 'import getAppUsers from "@/controllers/app/users/getAppUsers";'
        assert lines[2] == import_statement(post_plan)
        export_index = lines.index("export default router;")
        assert lines[export_index - 1] == route_statement(post_plan)
        # unrelated content is untouched
        assert 'router.get("/users", getAppUsers);' in lines
        assert text.endswith("export default router;\n")

    def test_idempotent(self, post_plan, existing_router):
        once, _, _ = patch_router_text(existing_router, post_plan)
        twice, import_added, route_added = patch_router_text(once, post_plan)
        assert twice == once
        assert not import_added
        assert not route_added

    def test_two_plans_each_added_once(self, post_plan, get_plan, existing_router):
        text, _, _ = patch_router_text(existing_router, post_plan)
        text, _, _ = patch_router_text(text, get_plan)
        text, _, _ = patch_router_text(text, post_plan)
        assert text.count(import_statement(post_plan)) == 1
        assert text.count(route_statement(post_plan)) == 1
        assert text.count(route_statement(get_plan)) == 1

    def test_no_import_lines_inserts_at_top(self, post_plan):
        source = "const router = Router();\n\nexport default router;\n"
        text, _, _ = patch_router_text(source, post_plan)
        assert text.split("\n")[0] == import_statement(post_plan)

    def test_no_export_appends_route(self, post_plan):
        source = 'import { Router } from "express";\n\nconst router = Router();'
        text, _, _ = patch_router_text(source, post_plan)
        assert text.split("\n")[-1] == route_statement(post_plan)

    def test_route_goes_before_first_export_default(self, post_plan):
        source = (
            'import { Router } from "express";\n'
            "const router = Router();\n"
            "export default router;\n"
            "export default other;\n"
        )
        lines = patch_router_text(source, post_plan)[0].split("\n")
        assert lines.index(route_statement(post_plan)) == lines.index("export default router;") - 1

    def test_indented_import_is_not_an_anchor(self, post_plan):
        source = (
            'import { Router } from "express";\n'
            "const router = Router();\n"
            "  import nested from './nested';\n"
            "export default router;\n"
        )
        lines = patch_router_text(source, post_plan)[0].split("\n")
        assert lines[1] == import_statement(post_plan)

    def test_whitespace_variant_is_not_a_duplicate(self, post_plan):
        source = (
            'import { Router } from "express";\n'
            'import postAppWidgets  from "@/controllers/app/widgets/postAppWidgets";\n'
            "const router = Router();\n"
            'router.post( "/widgets", postAppWidgets );\n'
            "export default router;\n"
        )
        text, import_added, route_added = patch_router_text(source, post_plan)
        assert import_added and route_added
        assert text.count("postAppWidgets") == 6

    def test_crlf_lines_are_kept(self, post_plan):
        source = 'import { Router } from "express";\r\nconst router = Router();\r\nexport default router;\r\n'
        text, _, _ = patch_router_text(source, post_plan)
        assert 'import { Router } from "express";\r\n' in text
        assert "const router = Router();\r\n" in text


# ---------------------------------------------------------------------------
# RouterPatcher
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestRouterPatcher:
    @pytest.mark.asyncio
    async def test_creates_router_from_skeleton(self, tmp_path: Path, post_plan):
        patcher = RouterPatcher(tmp_path / "routes")
        result = await patcher.apply(post_plan)

        assert result.created
        assert result.path == tmp_path / "routes" / "app.routes.ts"
        assert result.path.read_text(encoding="utf-8") == (
            'import { Router } from "express";\n'
            'import postAppWidgets from "@/controllers/app/widgets/postAppWidgets";\n'
            "\n"
            "const router = Router();\n"
            "\n"
            'router.post("/widgets", postAppWidgets);\n'
            "export default router;\n"
        )

    @pytest.mark.asyncio
    async def test_second_run_is_fixed_point(self, tmp_path: Path, post_plan):
        patcher = RouterPatcher(tmp_path / "routes")
        first = await patcher.apply(post_plan)
        before = first.path.read_bytes()

        second = await patcher.apply(post_plan)
        assert not second.created
        assert not second.changed
        assert first.path.read_bytes() == before

    @pytest.mark.asyncio
    async def test_patches_existing_file(self, tmp_path: Path, post_plan, existing_router):
        routes = tmp_path / "routes"
        routes.mkdir()
        path = routes / "app.routes.ts"
        path.write_text(existing_router, encoding="utf-8")

        result = await RouterPatcher(routes).apply(post_plan)
        assert not result.created
        assert result.import_added and result.route_added
        content = path.read_text(encoding="utf-8")
        assert content.startswith('import { Router } from "express";\n')
        assert route_statement(post_plan) in content
