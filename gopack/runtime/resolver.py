"""Transitive dependency resolution.

The resolver performs a pre-order, depth-first walk over the forest of
dependency sets. It keeps an explicit stack of frames instead of
recursing, so arbitrarily deep chains do not grow the Python stack:

    for each dep of the top frame, in declaration order:
        fetch (checksum gated) -> pin checkout -> push nested set, if any

A nested set is processed completely before the next sibling. Each
import identifier is processed once per run; later references are
recorded in the report and, when they point back to an ancestor, flagged
as cycles.

With ``max_workers > 1`` the fetch and checkout of every sibling in a
frame are submitted to a thread pool when the frame is pushed. The walk
itself stays on the calling thread, so the Graph and the report are never
touched concurrently and a nested set is only expanded after its parent's
fetch and checkout have completed.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from rich.console import Console

from gopack.core.dep import Dep
from gopack.core.dependencies import Dependencies, ProjectFacts
from gopack.core.errors import (
    ConfigError,
    DependencyValidationError,
    ResolutionCancelled,
    RetrievalError,
)
from gopack.graph.report import ROOT_NODE, ResolutionReport
from gopack.graph.trie import Graph
from gopack.runtime.config import Config
from gopack.runtime.session import ResolutionSession

logger = logging.getLogger("gopack.runtime.resolver")


@dataclass
class _Frame:
    """One dependency set on the worklist."""

    dependencies: Dependencies
    parent: str
    depth: int
    index: int = 0


@dataclass
class Resolution:
    """Everything produced by ``resolve_project``."""

    config: Config
    dependencies: Dependencies
    graph: Graph
    report: ResolutionReport = field(default_factory=ResolutionReport)


class DependencyResolver:
    """Walks a dependency set and everything it transitively declares."""

    def __init__(
        self,
        session: ResolutionSession,
        graph: Graph,
        force_refetch: bool,
        console: Optional[Console] = None,
    ) -> None:
        """Initialize resolver.

        Args:
            session: Resolution session.
            graph: Shared import graph; nested sets are inserted into it.
            force_refetch: Re-fetch dependencies already present on disk.
            console: Console for progress lines (quiet when omitted).
        """
        self.session = session
        self.graph = graph
        self.force_refetch = force_refetch
        self.console = console or Console(quiet=True)
        self._visited: set[str] = set()
        self._inflight: Dict[str, Tuple[Dep, Future]] = {}
        self._executor: Optional[ThreadPoolExecutor] = None

    def resolve(
        self, dependencies: Dependencies, report: Optional[ResolutionReport] = None
    ) -> ResolutionReport:
        """Fetch, pin and expand ``dependencies`` depth first.

        Args:
            dependencies: Top-level dependency set, already validated.
            report: Report to extend; a fresh one is created when omitted.

        Returns:
            ResolutionReport: Visit order, counters, repeats and cycles.

        Raises:
            DependencyValidationError: If a nested declaration is invalid.
            RetrievalError: If any fetch or checkout fails.
            ResolutionCancelled: If the session is cancelled.
        """
        report = report or ResolutionReport()
        if report.root != ROOT_NODE:
            # The project itself is linked, never fetched
            self._visited.add(report.root)
        workers = self.session.settings.max_workers
        if workers > 1:
            self._executor = ThreadPoolExecutor(
                max_workers=workers, thread_name_prefix="gopack-fetch"
            )
        aborted_pool = False
        try:
            self._walk(dependencies, report)
        except BaseException:
            if self._executor is not None and not self.session.cancelled:
                # Stop sibling retrievals still running in the pool
                self.session.cancel_event.set()
                aborted_pool = True
            raise
        finally:
            if self._executor is not None:
                self._executor.shutdown(wait=True, cancel_futures=True)
                self._executor = None
            self._inflight.clear()
            if aborted_pool:
                # Only the pool was stopped; the session stays usable
                self.session.cancel_event.clear()

        logger.info("Resolution finished: %s", report.summary())
        return report

    def _walk(self, dependencies: Dependencies, report: ResolutionReport) -> None:
        stack: List[_Frame] = [self._push(dependencies, report.root, 1)]

        while stack:
            if self.session.cancelled:
                raise ResolutionCancelled("Resolution cancelled")

            frame = stack[-1]
            if frame.index >= len(frame.dependencies):
                stack.pop()
                continue

            dep = frame.dependencies.dep_list[frame.index]
            frame.index += 1
            assert dep.import_path

            if dep.import_path in self._visited:
                cycle = report.record_repeat(frame.parent, dep.import_path)
                if cycle:
                    logger.warning("Dependency cycle: %s", " -> ".join(cycle))
                else:
                    logger.info(
                        "%s already resolved, skipping repeat via %s",
                        dep.import_path,
                        frame.parent,
                    )
                continue
            self._visited.add(dep.import_path)

            self.console.print(f"     Updating: `{dep.import_path}`", style="bright_black")
            retrieved, pinned = self._complete(dep)
            if pinned:
                report.checkouts += 1
                self.console.print(
                    f"      Updated: `{dep.import_path}` at "
                    f"{dep.checkout_type.value} {dep.checkout_spec}",
                    style="bright_black",
                )
            report.record_visit(frame.parent, dep.import_path, frame.depth, retrieved)

            nested = self._expand(dep)
            if nested is not None:
                stack.append(self._push(nested, dep.import_path, frame.depth + 1))

    def _push(self, dependencies: Dependencies, parent: str, depth: int) -> _Frame:
        if self._executor is not None:
            for dep in dependencies:
                path = dep.import_path
                if path and path not in self._visited and path not in self._inflight:
                    future = self._executor.submit(self.fetch_and_pin, dep)
                    self._inflight[path] = (dep, future)
        return _Frame(dependencies=dependencies, parent=parent, depth=depth)

    def _complete(self, dep: Dep) -> Tuple[bool, bool]:
        assert dep.import_path
        entry = self._inflight.pop(dep.import_path, None)
        if entry is None:
            return self.fetch_and_pin(dep)

        owner, future = entry
        if owner is dep:
            return future.result()

        # The prefetch ran for another declaration of the same import; the
        # one visited first in pre-order decides source and checkout.
        if future.cancel():
            return self.fetch_and_pin(dep)
        prefetched = False
        try:
            prefetched, _ = future.result()
        except RetrievalError as e:
            logger.warning(
                "Prefetch of %s for declaration %s failed: %s",
                dep.import_path,
                owner.key,
                e,
            )
        retrieved, pinned = self.fetch_and_pin(dep)
        return retrieved or prefetched, pinned

    def fetch_and_pin(self, dep: Dep) -> Tuple[bool, bool]:
        """Fetch ``dep`` when needed, then pin its declared checkout.

        The checkout is applied on every visit, so a working copy that
        drifted off its pinned reference is restored even when the
        checksum gate skips retrieval.

        Returns:
            ``(retrieved, pinned)``.
        """
        retrieved = dep.fetch(self.force_refetch)
        pinned = dep.switch_to_checkout()
        return retrieved, pinned

    def _expand(self, dep: Dep) -> Optional[Dependencies]:
        nested = dep.load_transitive_deps(self.graph)
        if nested is None:
            return None

        errors = nested.validate(ProjectFacts(repository=nested.repository))
        if errors:
            logger.error(
                "%d invalid dependencies declared by %s", len(errors), dep.import_path
            )
            raise DependencyValidationError(errors)
        logger.debug("Expanding %d dependencies of %s", len(nested), dep.import_path)
        return nested


def resolve_project(
    session: ResolutionSession,
    project_facts: Optional[ProjectFacts] = None,
    console: Optional[Console] = None,
) -> Resolution:
    """Run the full pipeline for the project at ``session.project_root``.

    Loads the declaration, links the project into the vendor workspace,
    validates the declared set exhaustively, resolves it transitively and
    finally persists the checksum marker. Any exception leaves the marker
    untouched.

    Raises:
        ConfigError: If the declaration cannot be loaded or declares no
            dependencies.
        DependencyValidationError: If any declared dependency is invalid.
        RetrievalError: If a fetch or checkout fails.
        ResolutionCancelled: If the session is cancelled.
    """
    graph = Graph()
    config = Config.load(session)
    config.init_repo(graph)

    dependencies = config.load_dependency_model(graph)
    if dependencies is None:
        raise ConfigError(
            f"Error loading dependency info: no dependencies declared in {config.path}"
        )
    report = ResolutionReport(root=config.repository or ROOT_NODE)
    resolution = Resolution(config, dependencies, graph, report)

    facts = project_facts or ProjectFacts()
    if facts.repository is None:
        facts.repository = config.repository
    errors = dependencies.validate(facts)
    if errors:
        raise DependencyValidationError(errors)

    resolver = DependencyResolver(
        session, graph, force_refetch=config.modified_checksum(), console=console
    )
    resolver.resolve(dependencies, report)
    config.write_checksum()
    return resolution
