"""Project declaration loading and the checksum gate.

``Config`` wraps the project's ``gopack.config``. Its MD5 checksum is
computed once per run and compared against ``.gopack/checksum``; the
marker is rewritten only after a fully successful run, so any failure
forces the next run to re-fetch everything.
"""

from __future__ import annotations

import hashlib
import logging
import tomllib
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from gopack.config.schema import Declaration
from gopack.core.dep import Dep
from gopack.core.dependencies import Dependencies
from gopack.core.errors import ConfigError
from gopack.graph.trie import Graph
from gopack.runtime.session import ResolutionSession

logger = logging.getLogger("gopack.runtime.config")


def _format_schema_error(path: Path, exc: ValidationError) -> str:
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err["loc"])
        problems.append(f"{location}: {err['msg']}")
    return f"Invalid declaration {path}: " + "; ".join(problems)


def load_declaration(path: Path) -> Declaration:
    """Parse and validate a ``gopack.config`` file.

    Raises:
        ConfigError: If the file is missing, unreadable, not TOML, or does
            not match the declaration schema.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigError(f"Declaration file not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read declaration file {path}: {e}") from e

    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Malformed declaration file {path}: {e}") from e

    try:
        return Declaration.model_validate(data)
    except ValidationError as e:
        raise ConfigError(_format_schema_error(path, e)) from e


class Config:
    """The project's declaration file and its checksum marker."""

    def __init__(self, session: ResolutionSession, declaration: Declaration) -> None:
        self.session = session
        self.path = session.declaration_path
        self.declaration = declaration
        self.repository = declaration.repo
        self._checksum: Optional[str] = None

    @classmethod
    def load(cls, session: ResolutionSession) -> "Config":
        """Load the declaration file at the session's project root."""
        declaration = load_declaration(session.declaration_path)
        logger.info(
            "Loaded %s (%d deps, %d dev-deps)",
            session.declaration_path,
            len(declaration.deps),
            len(declaration.dev_deps),
        )
        return cls(session, declaration)

    # -------------------------------------------------------------------------
    # Checksum gate
    # -------------------------------------------------------------------------

    def checksum(self) -> str:
        """Hex MD5 digest of the declaration file, computed once."""
        if self._checksum is None:
            try:
                data = self.path.read_bytes()
            except OSError as e:
                raise ConfigError(f"Cannot read declaration file {self.path}: {e}") from e
            self._checksum = hashlib.md5(data).hexdigest()
        return self._checksum

    def modified_checksum(self) -> bool:
        """True when no marker exists or it records a different checksum."""
        try:
            stored = self.session.checksum_path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return True
        return stored != self.checksum()

    def write_checksum(self) -> None:
        """Persist the checksum marker. Call only after a successful run."""
        marker = self.session.checksum_path
        marker.parent.mkdir(parents=True, exist_ok=True)
        marker.write_text(self.checksum(), encoding="utf-8")
        logger.debug("Wrote checksum %s to %s", self.checksum(), marker)

    # -------------------------------------------------------------------------
    # Graph bootstrap
    # -------------------------------------------------------------------------

    def init_repo(self, graph: Graph) -> Optional[Dep]:
        """Link the project into its own vendor location.

        When the project declares ``repo``, ``<vendor>/src/<repo>`` becomes a
        symlink to the project root and a synthetic self-dependency is
        inserted into ``graph`` so the project's own sub-packages resolve.
        An existing link is left alone.

        Returns:
            The synthetic self-dependency, or None without ``repo``.
        """
        if not self.repository:
            return None

        self_dep = Dep(self.repository.strip("/"), self.session, key="<self>")
        link = self_dep.target_path
        link.parent.mkdir(parents=True, exist_ok=True)
        if not link.is_symlink() and not link.exists():
            link.symlink_to(self.session.project_root, target_is_directory=True)
            logger.info("Linked %s -> %s", link, self.session.project_root)

        graph.insert(self_dep)
        return self_dep

    def load_dependency_model(self, graph: Graph) -> Optional[Dependencies]:
        """Build the project's top-level dependency set on ``graph``."""
        return Dependencies.from_declaration(
            self.declaration, graph, self.session, repository=self.repository
        )
