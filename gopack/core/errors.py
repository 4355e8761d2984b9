"""Exception hierarchy for gopack.

Lower layers raise or return these; only the top-level orchestration
(``resolve_project`` and the CLI) decides to terminate the process.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

# Exit statuses are truncated to 8 bits by the OS
MAX_EXIT_CODE = 255


class GopackError(Exception):
    """Base class for all gopack failures."""

    pass


class ConfigError(GopackError):
    """Declaration file is missing, unreadable, or malformed.

    Raised at startup, before any dependency is processed.
    """

    pass


class RetrievalError(GopackError):
    """Fetching or checking out a dependency failed.

    Covers network failures, unknown references, permission problems,
    missing SCM clients and timeouts. Always fatal, never retried.
    """

    pass


class ResolutionCancelled(GopackError):
    """The resolution session was cancelled while work was in flight."""

    pass


@dataclass(frozen=True)
class ProjectError:
    """One validation failure tied to one dependency field.

    Args:
        key: Declaration key of the offending entry.
        field: Name of the field that failed validation.
        message: Human readable description.
        import_path: Import identifier of the dependency, when known.
    """

    key: str
    field: str
    message: str
    import_path: Optional[str] = None

    def __str__(self) -> str:
        target = self.import_path or "<missing import>"
        return f"[{self.key}] {target}: {self.field}: {self.message}"


class DependencyValidationError(GopackError):
    """Aggregated validation failures for a dependency set."""

    def __init__(self, errors: List[ProjectError]) -> None:
        self.errors = list(errors)
        super().__init__(
            f"{len(self.errors)} dependency validation error(s)"
        )

    @property
    def exit_code(self) -> int:
        """Process exit status: the error count, capped so it never wraps to 0."""
        return min(len(self.errors), MAX_EXIT_CODE)
