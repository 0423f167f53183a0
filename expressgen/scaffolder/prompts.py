"""Interactive question/answer flow that produces an endpoint ``Plan``.

The flow itself (:func:`collect_plan`) performs no I/O.  It receives the
existing on-disk options (scopes, and a lookup for the domains of a scope)
plus a *prompter* that answers questions.  ``RichPrompter`` answers them on
the terminal; tests drive the flow with a scripted prompter instead.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol

from rich.prompt import Confirm, Prompt

from ..utils import console, print_summary_table, print_warning
from .planner import (
    HttpMethod,
    Plan,
    build_plan,
    default_names,
    is_identifier,
    is_segment,
    normalize_route,
    normalize_segment,
)

NEW_SCOPE = "+ Create new scope"
NEW_DOMAIN = "+ Create new domain"

Validator = Callable[[str], Optional[str]]


class Prompter(Protocol):
    """Answers the questions asked by :func:`collect_plan`."""

    def select(self, message: str, choices: list[str], default: str | None = None) -> str: ...

    def text(self, message: str, default: str | None = None, validate: Validator | None = None) -> str: ...

    def confirm(self, message: str, default: bool = True) -> bool: ...

    def preview(self, rows: dict[str, str]) -> None: ...

    def notify(self, message: str) -> None: ...


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------


def required(label: str) -> Validator:
    def _check(value: str) -> str | None:
        return None if value.strip() else f"{label} cannot be empty"

    return _check


def segment(label: str) -> Validator:
    def _check(value: str) -> str | None:
        if not value.strip():
            return f"{label} cannot be empty"
        if not is_segment(value):
            return f"{label} must start with a letter and use only a-z, 0-9, '_' or '-'"
        return None

    return _check


def identifier(label: str) -> Validator:
    def _check(value: str) -> str | None:
        value = value.strip()
        if not value:
            return f"{label} cannot be empty"
        if not is_identifier(value):
            return f"{label} must be a valid identifier"
        return None

    return _check


def route(label: str) -> Validator:
    def _check(value: str) -> str | None:
        try:
            normalize_route(value)
        except ValueError as exc:
            return f"{label} {exc}"
        return None

    return _check


# ---------------------------------------------------------------------------
# Flow
# ---------------------------------------------------------------------------


def _choose_segment(
    prompter: Prompter,
    existing: list[str],
    *,
    kind: str,
    create_label: str,
    example: str,
) -> str:
    """Pick an existing scope/domain or type a new one."""
    if existing:
        choice = prompter.select(f"Select or create a {kind}:", [*existing, create_label])
        if choice != create_label:
            return choice
    typed = prompter.text(
        f'Enter {kind} name (e.g., {example}):',
        validate=segment(f"{kind.capitalize()} name"),
    )
    return normalize_segment(typed)


def plan_preview(plan: Plan) -> dict[str, str]:
    return {
        "Method": plan.method.value,
        "Scope": plan.scope,
        "Domain": plan.domain,
        "Controller": plan.controller_name,
        "Action": plan.action_name,
        "Query": plan.query_name,
        "Route": f"{plan.method.value} {plan.route_path}",
        "Schema": "Yes" if plan.needs_schema else "No",
    }


def collect_plan(
    prompter: Prompter,
    scopes: list[str],
    domains_for: Callable[[str], list[str]],
) -> Plan:
    """Ask for every plan field until the operator confirms the preview.

    Args:
        prompter: Source of answers.
        scopes: Existing scopes offered as choices.
        domains_for: Returns the existing domains of a scope.

    Returns:
        The confirmed, immutable ``Plan``.

    Raises:
        ValidationError: If an answer slips past the prompter's validation.
    """
    while True:
        method = prompter.select(
            "Select HTTP method:", [m.value for m in HttpMethod], default=HttpMethod.GET.value
        )
        scope = _choose_segment(
            prompter, scopes, kind="scope", create_label=NEW_SCOPE,
            example='"app", "hub", "admin"',
        )
        domain = _choose_segment(
            prompter, domains_for(scope), kind="domain", create_label=NEW_DOMAIN,
            example='"users", "products"',
        )

        defaults = default_names(method, scope, domain)
        controller_name = prompter.text(
            f'Controller name (e.g., "{defaults.controller_name}"):',
            default=defaults.controller_name,
            validate=identifier("Controller name"),
        )
        action_name = prompter.text(
            f'Action name (e.g., "{defaults.action_name}"):',
            default=defaults.action_name,
            validate=identifier("Action name"),
        )
        query_name = prompter.text(
            f'Query name (e.g., "{defaults.query_name}"):',
            default=defaults.query_name,
            validate=identifier("Query name"),
        )
        route_path = prompter.text(
            f'Route path (e.g., "{defaults.route_path}"):',
            default=defaults.route_path,
            validate=route("Route path"),
        )
        needs_schema = prompter.confirm("Do you need a Zod schema file?", default=True)

        plan = build_plan(
            method,
            scope,
            domain,
            controller_name=controller_name,
            action_name=action_name,
            query_name=query_name,
            route_path=route_path,
            needs_schema=needs_schema,
        )
        prompter.preview(plan_preview(plan))
        if prompter.confirm("Does this look correct?", default=True):
            return plan
        prompter.notify("Restarting configuration...")


# ---------------------------------------------------------------------------
# Terminal prompter
# ---------------------------------------------------------------------------


class RichPrompter:
    """Asks questions on the terminal with ``rich.prompt``."""

    def select(self, message: str, choices: list[str], default: str | None = None) -> str:
        for index, choice in enumerate(choices, start=1):
            console.print(f"  [cyan]{index}[/cyan]) {choice}")
        numbers = [str(i) for i in range(1, len(choices) + 1)]
        kwargs = {"default": str(choices.index(default) + 1)} if default in choices else {}
        answer = Prompt.ask(message, choices=numbers, console=console, **kwargs)
        return choices[int(answer) - 1]

    def text(self, message: str, default: str | None = None, validate: Validator | None = None) -> str:
        while True:
            kwargs = {"default": default} if default is not None else {}
            answer = Prompt.ask(message, console=console, **kwargs) or ""
            error = validate(answer) if validate else None
            if error is None:
                return answer.strip()
            print_warning(error)

    def confirm(self, message: str, default: bool = True) -> bool:
        return Confirm.ask(message, default=default, console=console)

    def preview(self, rows: dict[str, str]) -> None:
        print_summary_table(rows, title="Configuration Preview")

    def notify(self, message: str) -> None:
        print_warning(message)
