"""Resolution report backed by a networkx DiGraph.

The report records every parent to child edge walked during a resolution
run, in visit order, so the dependency tree can be rendered and repeated
or cyclic references can be inspected afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import networkx as nx
from rich.tree import Tree

logger = logging.getLogger("gopack.graph.report")

ROOT_NODE = "<root>"


@dataclass
class Visit:
    """One dependency visit in traversal order."""

    import_path: str
    parent: str
    depth: int
    retrieved: bool


@dataclass
class ResolutionReport:
    """Outcome of one resolution run.

    Attributes:
        root: Node id for the project itself.
        visits: Dependencies processed, in pre-order.
        retrievals: Number of SCM retrievals performed.
        checkouts: Number of checkouts performed.
        repeats: ``(parent, child)`` pairs skipped because the child was
            already visited through another path.
        cycles: Identifier paths that lead back to an ancestor.
    """

    root: str = ROOT_NODE
    visits: List[Visit] = field(default_factory=list)
    retrievals: int = 0
    checkouts: int = 0
    repeats: List[Tuple[str, str]] = field(default_factory=list)
    cycles: List[List[str]] = field(default_factory=list)
    graph: nx.DiGraph = field(default_factory=nx.DiGraph)

    def __post_init__(self) -> None:
        self.graph.add_node(self.root, depth=0)

    def record_visit(
        self, parent: str, import_path: str, depth: int, retrieved: bool
    ) -> None:
        self.visits.append(Visit(import_path, parent, depth, retrieved))
        if retrieved:
            self.retrievals += 1
        if not self.graph.has_node(import_path):
            self.graph.add_node(import_path, depth=depth)
        self.graph.add_edge(parent, import_path)

    def record_repeat(self, parent: str, import_path: str) -> Optional[List[str]]:
        """Record an already-visited dependency reached again.

        Returns:
            The cycle path when ``import_path`` is an ancestor of ``parent``,
            otherwise ``None``.
        """
        self.repeats.append((parent, import_path))
        cycle: Optional[List[str]] = None
        if self.graph.has_node(import_path) and nx.has_path(self.graph, import_path, parent):
            cycle = nx.shortest_path(self.graph, import_path, parent) + [import_path]
            self.cycles.append(cycle)
        self.graph.add_edge(parent, import_path)
        return cycle

    @property
    def visited(self) -> List[str]:
        return [v.import_path for v in self.visits]

    def render_tree(self) -> Tree:
        """Build a rich Tree of the dependency forest.

        Repeated references are shown once more as a dimmed leaf without
        expanding them again.
        """
        tree = Tree(self.root)
        stack: List[Tuple[str, Tree]] = [(self.root, tree)]
        expanded = {self.root}
        while stack:
            node, branch = stack.pop()
            children = []
            for child in self.graph.successors(node):
                if child in expanded:
                    branch.add(f"[dim]{child} (repeat)[/dim]")
                    continue
                expanded.add(child)
                children.append((child, branch.add(child)))
            stack.extend(reversed(children))
        return tree

    def summary(self) -> str:
        return (
            f"{len(self.visits)} dependencies, {self.retrievals} retrieved, "
            f"{self.checkouts} pinned, {len(self.repeats)} repeated, "
            f"{len(self.cycles)} cycle(s)"
        )
