"""Schema helper generation.

Writes a reusable async validation helper to
``src/schemaHelpers/<camelName>.ts``.  The name is typed freely by the
operator (``"select user by id"``) and converted to camelCase.
"""

from __future__ import annotations

from pathlib import Path

from ..config import Config
from ..errors import ScaffoldConflictError, ValidationError
from ..utils import camel_case
from .planner import is_identifier
from .templates import TemplateRenderer


def helper_name(raw_name: str) -> str:
    """Convert a free-form helper name to its camelCase identifier.

    Raises:
        ValidationError: If nothing usable remains after conversion.
    """
    if not raw_name.strip():
        raise ValidationError("helper name", "cannot be empty")
    name = camel_case(raw_name)
    if not is_identifier(name):
        raise ValidationError("helper name", f"{raw_name!r} does not form a valid identifier")
    return name


class HelperGenerator:
    """Renders ``helper.ts.j2`` into the schema helper directory."""

    def __init__(self, config: Config, renderer: TemplateRenderer | None = None) -> None:
        self.config = config
        self.renderer = renderer or TemplateRenderer()

    def target(self, raw_name: str) -> Path:
        return self.config.schema_helpers_path / f"{helper_name(raw_name)}.ts"

    async def generate(self, raw_name: str, *, overwrite: bool = False) -> Path:
        """Write the helper file and return its path.

        Raises:
            ValidationError: If the name is empty or unusable.
            ScaffoldConflictError: If the file exists and *overwrite* is off.
            FileSystemError: If the file cannot be written.
        """
        path = self.target(raw_name)
        if path.exists() and not overwrite:
            raise ScaffoldConflictError([path])
        return await self.renderer.render_to_file(
            "helper.ts.j2", path, {"helper_name": helper_name(raw_name)}
        )
