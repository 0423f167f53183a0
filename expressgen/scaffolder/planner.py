"""Naming derivation and the immutable endpoint ``Plan``.

A plan is derived from three choices (HTTP method, scope, domain).  Every
other field has a deterministic default of the form
``<verb><PascalScope><PascalDomain>`` that the operator may override::

    default_names(HttpMethod.POST, "app", "widgets")
    # -> postAppWidgets, createAppWidgets, insertAppWidgets, "/widgets"
"""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError
from ..utils import pascal_case

# ---------------------------------------------------------------------------
# Methods and verb tables
# ---------------------------------------------------------------------------


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


# (controller prefix, action verb, query verb)
_VERBS: dict[HttpMethod, tuple[str, str, str]] = {
    HttpMethod.POST: ("post", "create", "insert"),
    HttpMethod.GET: ("get", "fetch", "select"),
    HttpMethod.PUT: ("put", "modify", "update"),
    HttpMethod.PATCH: ("patch", "modify", "update"),
    HttpMethod.DELETE: ("delete", "remove", "delete"),
}
_FALLBACK_VERBS = ("handle", "process", "execute")

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_SEGMENT_RE = re.compile(r"^[a-z][a-z0-9_-]*$")

ROUTE_SUFFIX = ".routes.ts"


class DefaultNames(NamedTuple):
    controller_name: str
    action_name: str
    query_name: str
    route_path: str


def parse_method(method: HttpMethod | str) -> HttpMethod:
    """Coerce a method name such as ``"post"`` to ``HttpMethod``.

    Raises:
        ValueError: If the name is not a supported method.
    """
    if isinstance(method, HttpMethod):
        return method
    return HttpMethod(method.strip().upper())


def verbs_for(method: HttpMethod | str) -> tuple[str, str, str]:
    """Return the (controller, action, query) verbs for *method*."""
    try:
        return _VERBS[parse_method(method)]
    except ValueError:
        return _FALLBACK_VERBS


def default_names(method: HttpMethod | str, scope: str, domain: str) -> DefaultNames:
    """Derive the default controller/action/query names and route path.

    Pure and deterministic: identical inputs always give identical names.
    """
    prefix, action_verb, query_verb = verbs_for(method)
    suffix = f"{pascal_case(scope)}{pascal_case(domain)}"
    return DefaultNames(
        controller_name=f"{prefix}{suffix}",
        action_name=f"{action_verb}{suffix}",
        query_name=f"{query_verb}{suffix}",
        route_path=f"/{domain}",
    )


def normalize_segment(value: str) -> str:
    """Trim and lower-case a scope or domain name, as typed by the operator."""
    return value.strip().lower()


def is_identifier(value: str) -> bool:
    return bool(_IDENTIFIER_RE.match(value))


def is_segment(value: str) -> bool:
    return bool(_SEGMENT_RE.match(normalize_segment(value)))


def normalize_route(value: str) -> str:
    """Trim *value* and add the leading ``/`` if missing.

    Raises:
        ValueError: If the path is empty or holds quotes or whitespace.
    """
    value = value.strip()
    if not value:
        raise ValueError("cannot be empty")
    if not value.startswith("/"):
        value = f"/{value}"
    if '"' in value or any(ch.isspace() for ch in value):
        raise ValueError("must not contain quotes or whitespace")
    return value


# ---------------------------------------------------------------------------
# Plan model
# ---------------------------------------------------------------------------


class Plan(BaseModel):
    """The fully-resolved values driving one endpoint scaffold run.

    Frozen once built; consumed by the endpoint generator and the router
    patcher, then discarded.
    """

    model_config = ConfigDict(frozen=True)

    method: HttpMethod
    scope: str = Field(..., description="First namespace level, e.g. 'app'")
    domain: str = Field(..., description="Second namespace level, e.g. 'widgets'")
    controller_name: str
    action_name: str
    query_name: str
    route_path: str
    needs_schema: bool = True

    @field_validator("scope", "domain", mode="before")
    @classmethod
    def _check_segment(cls, value: str) -> str:
        value = normalize_segment(str(value))
        if not value:
            raise ValueError("cannot be empty")
        if not _SEGMENT_RE.match(value):
            raise ValueError(
                "must start with a letter and contain only a-z, 0-9, '_' or '-'"
            )
        return value

    @field_validator("controller_name", "action_name", "query_name", mode="before")
    @classmethod
    def _check_identifier(cls, value: str) -> str:
        value = str(value).strip()
        if not value:
            raise ValueError("cannot be empty")
        if not _IDENTIFIER_RE.match(value):
            raise ValueError(f"{value!r} is not a valid identifier")
        return value

    @field_validator("route_path", mode="before")
    @classmethod
    def _check_route(cls, value: str) -> str:
        return normalize_route(str(value))

    # -- Derived values ----------------------------------------------------

    @property
    def operation_name(self) -> str:
        """Directory/file stem for the controller; same as its name."""
        return self.controller_name

    @property
    def status_code(self) -> int:
        return 201 if self.method is HttpMethod.POST else 200

    @property
    def payload_source(self) -> str:
        """Request attribute the generated validator parses."""
        if self.method in (HttpMethod.GET, HttpMethod.DELETE):
            return "req.query"
        return "req.body"

    def template_context(self) -> dict[str, object]:
        """Build the Jinja2 context shared by every endpoint template."""
        return {
            "method": self.method.value,
            "scope": self.scope,
            "domain": self.domain,
            "controller_name": self.controller_name,
            "operation_name": self.operation_name,
            "action_name": self.action_name,
            "query_name": self.query_name,
            "route_path": self.route_path,
            "needs_schema": self.needs_schema,
            "status_code": self.status_code,
            "payload_source": self.payload_source,
        }


def build_plan(
    method: HttpMethod | str,
    scope: str,
    domain: str,
    *,
    controller_name: str | None = None,
    action_name: str | None = None,
    query_name: str | None = None,
    route_path: str | None = None,
    needs_schema: bool = True,
) -> Plan:
    """Resolve defaults for any omitted name and return a validated ``Plan``.

    ``None`` means "use the default"; an explicit empty string is an error.

    Raises:
        ValidationError: If any field is empty or malformed.
    """
    try:
        method = parse_method(method)
    except ValueError:
        raise ValidationError(
            "method", f"{method!r} is not one of {', '.join(m.value for m in HttpMethod)}"
        ) from None

    scope = normalize_segment(scope)
    domain = normalize_segment(domain)
    defaults = default_names(method, scope, domain)

    try:
        return Plan(
            method=method,
            scope=scope,
            domain=domain,
            controller_name=defaults.controller_name if controller_name is None else controller_name,
            action_name=defaults.action_name if action_name is None else action_name,
            query_name=defaults.query_name if query_name is None else query_name,
            route_path=defaults.route_path if route_path is None else route_path,
            needs_schema=needs_schema,
        )
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "plan"
        message = first["msg"].removeprefix("Value error, ")
        raise ValidationError(field, message) from exc


# ---------------------------------------------------------------------------
# On-disk discovery (read-only)
# ---------------------------------------------------------------------------


def discover_scopes(routes_dir: Path) -> list[str]:
    """Return existing scopes, one per ``<scope>.routes.ts`` file.

    Names a plan would not keep verbatim, such as ``Admin.routes.ts``, are
    left out.
    """
    if not routes_dir.is_dir():
        return []
    names = (
        p.name[: -len(ROUTE_SUFFIX)]
        for p in routes_dir.iterdir()
        if p.is_file() and p.name.endswith(ROUTE_SUFFIX)
    )
    return sorted(name for name in names if _SEGMENT_RE.match(name))


def discover_domains(controllers_dir: Path, scope: str) -> list[str]:
    """Return existing domains: the sub-directories of ``controllers/<scope>``.

    Directory names that are not valid lower-case segments are left out.
    """
    scope_dir = controllers_dir / scope
    if not scope_dir.is_dir():
        return []
    return sorted(
        p.name for p in scope_dir.iterdir() if p.is_dir() and _SEGMENT_RE.match(p.name)
    )
