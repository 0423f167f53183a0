"""expressgen scaffolder -- generates endpoint, helper and migration files.

Quick usage::

    from expressgen.scaffolder import EndpointGenerator, build_plan

    plan = build_plan("POST", "app", "widgets")
    result = await EndpointGenerator(config).generate(plan)
"""

from expressgen.scaffolder.generator import EndpointGenerator, ScaffoldResult
from expressgen.scaffolder.helper_gen import HelperGenerator
from expressgen.scaffolder.migration_gen import MigrationGenerator
from expressgen.scaffolder.planner import HttpMethod, Plan, build_plan, default_names
from expressgen.scaffolder.router_patch import RouterPatcher, patch_router_text
from expressgen.scaffolder.templates import TemplateRenderer

__all__ = [
    "EndpointGenerator",
    "HelperGenerator",
    "HttpMethod",
    "MigrationGenerator",
    "Plan",
    "RouterPatcher",
    "ScaffoldResult",
    "TemplateRenderer",
    "build_plan",
    "default_names",
    "patch_router_text",
]
