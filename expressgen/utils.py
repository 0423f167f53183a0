"""Shared utility functions for expressgen.

Provides identifier case conversion, file-system helpers that translate
``OSError`` into the project's error taxonomy, and Rich-based console
reporting used by every command.
"""

from __future__ import annotations

import re
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

from .errors import FileSystemError

console = Console()

# ---------------------------------------------------------------------------
# String / name helpers
# ---------------------------------------------------------------------------

_WORD_RE = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+")


def split_words(value: str) -> list[str]:
    """Split an arbitrary name into words.

    Separators are any non-alphanumeric characters plus lower-to-upper case
    boundaries, so ``"select user-by_id"`` and ``"selectUserById"`` both give
    ``["select", "user", "by", "id"]`` (case preserved).
    """
    words: list[str] = []
    for chunk in re.split(r"[^A-Za-z0-9]+", value):
        words.extend(_WORD_RE.findall(chunk))
    return words


def camel_case(value: str) -> str:
    """Convert ``some-thing`` / ``some thing`` / ``SomeThing`` to ``someThing``.

    Examples::

        camel_case("select user by id") -> "selectUserById"
        camel_case("API keys")          -> "apiKeys"
    """
    words = split_words(value)
    if not words:
        return ""
    head, *tail = words
    return head.lower() + "".join(w[:1].upper() + w[1:].lower() for w in tail)


def pascal_case(value: str) -> str:
    """Convert ``some_thing`` or ``some-thing`` to ``SomeThing``."""
    camel = camel_case(value)
    return camel[:1].upper() + camel[1:]


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist.

    Raises:
        FileSystemError: If the directory cannot be created.
    """
    dir_path = Path(path)
    try:
        dir_path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FileSystemError(dir_path, f"cannot create directory ({exc.strerror or exc})") from exc
    return dir_path


def write_text_file(path: str | Path, content: str) -> Path:
    """Create parent dirs and write *content* verbatim in a single call.

    Raises:
        FileSystemError: If the parent directory or the file cannot be written.
    """
    file_path = Path(path)
    ensure_dir(file_path.parent)
    try:
        with open(file_path, "w", encoding="utf-8", newline="") as fh:
            fh.write(content)
    except OSError as exc:
        raise FileSystemError(file_path, f"cannot write file ({exc.strerror or exc})") from exc
    return file_path


def read_text_file(path: str | Path) -> str:
    """Read a UTF-8 text file verbatim (no newline translation).

    Raises:
        FileSystemError: If the file cannot be read.
    """
    file_path = Path(path)
    try:
        with open(file_path, encoding="utf-8", newline="") as fh:
            return fh.read()
    except OSError as exc:
        raise FileSystemError(file_path, f"cannot read file ({exc.strerror or exc})") from exc


def display_path(path: Path, root: Path) -> str:
    """Return *path* relative to *root* when possible, for console output."""
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_banner(title: str, color: str = "bright_cyan") -> None:
    """Print a full-width rule announcing a command."""
    console.print()
    console.print(Rule(f"[bold {color}] {title} [/bold {color}]", style=color))
    console.print()


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")
