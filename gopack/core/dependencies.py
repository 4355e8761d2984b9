"""Ordered dependency collection.

``Dependencies`` keeps three index-aligned lists (declaration keys, raw
import strings and Dep objects) and a shared reference to the run's
``Graph``. Validation is exhaustive: every member is checked and all
problems are returned together.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, Iterator, List, Optional, Set

from gopack.core.dep import Dep
from gopack.core.errors import ProjectError

if TYPE_CHECKING:
    from gopack.config.schema import Declaration
    from gopack.graph.trie import Graph
    from gopack.runtime.session import ResolutionSession

logger = logging.getLogger("gopack.core.dependencies")


@dataclass
class ProjectFacts:
    """Facts about the project that owns a dependency set.

    Args:
        repository: The project's own import identifier, if declared.
        imports: Import identifiers used by the project's source files.
    """

    repository: Optional[str] = None
    imports: Set[str] = field(default_factory=set)


def _looks_remote(import_path: str) -> bool:
    """Standard-library imports have no host-like first segment."""
    return "." in import_path.split("/", 1)[0]


class Dependencies:
    """Ordered set of dependencies sharing one import graph."""

    def __init__(self, graph: "Graph", repository: Optional[str] = None) -> None:
        self.keys: List[str] = []
        self.imports: List[Optional[str]] = []
        self.dep_list: List[Dep] = []
        self.import_graph = graph
        self.repository = repository

    @classmethod
    def from_declaration(
        cls,
        declaration: "Declaration",
        graph: "Graph",
        session: "ResolutionSession",
        repository: Optional[str] = None,
    ) -> Optional["Dependencies"]:
        """Build the main then dev entries of ``declaration``.

        Each dependency with an import identifier is inserted into
        ``graph``.

        Returns:
            The new set, or None when the declaration lists nothing.
        """
        if declaration.total == 0:
            return None

        deps = cls(graph, repository=repository or declaration.repo)
        for table in (declaration.deps, declaration.dev_deps):
            for key, entry in table.items():
                deps.add(key, Dep.from_entry(key, entry, session))
        return deps

    def add(self, key: str, dep: Dep) -> None:
        self.keys.append(key)
        self.imports.append(dep.import_path)
        self.dep_list.append(dep)
        if dep.import_path:
            self.import_graph.insert(dep)

    def __len__(self) -> int:
        return len(self.dep_list)

    def __iter__(self) -> Iterator[Dep]:
        return iter(self.dep_list)

    def validate(self, project_facts: Optional[ProjectFacts] = None) -> List[ProjectError]:
        """Validate every member and the set as a whole.

        Each dependency contributes at most one error, so a set with k
        invalid members yields exactly k errors.

        Args:
            project_facts: Facts about the owning project.

        Returns:
            List[ProjectError]: All problems found, empty when valid.
        """
        facts = project_facts or ProjectFacts(repository=self.repository)
        repository = facts.repository or self.repository

        errors: List[ProjectError] = []
        seen: Dict[str, str] = {}
        for key, dep in zip(self.keys, self.dep_list):
            error = dep.validate(repository)
            if error is None and dep.import_path in seen:
                error = ProjectError(
                    key=key,
                    field="import",
                    message=f"duplicate of '{seen[dep.import_path]}'",
                    import_path=dep.import_path,
                )
            if error is not None:
                errors.append(error)
                continue
            assert dep.import_path
            seen[dep.import_path] = key

        self._warn_undeclared(facts)

        if errors:
            logger.debug("%d of %d dependencies invalid", len(errors), len(self))
        return errors

    def _warn_undeclared(self, facts: ProjectFacts) -> None:
        repository = (facts.repository or "").strip("/")
        for import_path in sorted(facts.imports):
            if not _looks_remote(import_path):
                continue
            if repository and (
                import_path == repository or import_path.startswith(repository + "/")
            ):
                continue
            if self.import_graph.search(import_path) is None:
                logger.warning("Import %s is not declared in any dependency", import_path)

    def visit_deps(self, routine: Callable[[Dep], None]) -> None:
        """Apply ``routine`` to every dependency in declaration order."""
        for dep in self.dep_list:
            routine(dep)
