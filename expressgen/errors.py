"""Error taxonomy for expressgen.

Every failure the generators can detect is raised as a subclass of
``ExpressGenError``.  Nothing is retried or recovered locally: errors
propagate to the CLI, which prints them and exits with status 1.
"""

from __future__ import annotations

from pathlib import Path


class ExpressGenError(Exception):
    """Base class for all fatal generator errors."""


class ValidationError(ExpressGenError):
    """Raised when a required name, path, or option is empty or malformed."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"{field}: {message}")


class FileSystemError(ExpressGenError):
    """Raised when a directory or file cannot be created or written."""

    def __init__(self, path: str | Path, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"{self.path}: {message}")


class ScaffoldConflictError(FileSystemError):
    """Raised when scaffold targets already exist and overwriting is off."""

    def __init__(self, paths: list[Path]) -> None:
        self.paths = list(paths)
        listing = ", ".join(str(p) for p in self.paths)
        super().__init__(
            self.paths[0],
            f"refusing to overwrite existing file(s): {listing} (use --force)",
        )


class DatabaseConnectivityError(ExpressGenError):
    """Raised when the catalog database cannot be reached."""


class CatalogQueryError(ExpressGenError):
    """Raised when the information-schema query itself fails."""
