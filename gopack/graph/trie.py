"""Import-identifier trie.

Every dependency known to a run is registered here under its import
identifier, split on ``/``. Lookups walk the trie segment by segment and
stop at the first leaf, so a sub-package identifier such as
``github.com/acme/lib/util`` resolves to the dependency that owns
``github.com/acme/lib``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional

if TYPE_CHECKING:
    from gopack.core.dep import Dep

logger = logging.getLogger("gopack.graph.trie")


def split_identifier(identifier: str) -> List[str]:
    """Split an import identifier into its path segments."""
    return identifier.strip("/").split("/")


@dataclass
class GraphNode:
    """One segment of an import identifier.

    A node is a leaf iff it owns a dependency.
    """

    key: str
    dependency: Optional["Dep"] = None
    leaf: bool = False
    nodes: Dict[str, "GraphNode"] = field(default_factory=dict)


class Graph:
    """Prefix trie addressing dependencies by import identifier."""

    def __init__(self) -> None:
        self.nodes: Dict[str, GraphNode] = {}

    def insert(self, dependency: "Dep") -> None:
        """Register ``dependency`` under its import identifier.

        Re-inserting an identifier replaces the leaf's dependency and
        leaves the trie shape untouched.
        """
        if not dependency.import_path:
            raise ValueError("Cannot insert a dependency without an import path")

        keys = split_identifier(dependency.import_path)
        nodes = self.nodes
        node: Optional[GraphNode] = None
        for key in keys:
            node = nodes.get(key)
            if node is None:
                node = GraphNode(key=key)
                nodes[key] = node
            nodes = node.nodes

        assert node is not None
        if node.leaf:
            logger.debug("Replacing dependency at %s", dependency.import_path)
        node.dependency = dependency
        node.leaf = True

    def search_node(self, identifier: str) -> Optional[GraphNode]:
        """Return the first leaf node on the path of ``identifier``."""
        nodes = self.nodes
        for key in split_identifier(identifier):
            node = nodes.get(key)
            if node is None:
                return None
            if node.leaf:
                return node
            nodes = node.nodes
        return None

    def search(self, identifier: str) -> Optional["Dep"]:
        """Return the dependency owning ``identifier``, if any."""
        node = self.search_node(identifier)
        return node.dependency if node else None

    def leaves(self) -> Iterator["Dep"]:
        """Yield every registered dependency, depth first."""
        stack = list(reversed(list(self.nodes.values())))
        while stack:
            node = stack.pop()
            if node.leaf and node.dependency is not None:
                yield node.dependency
            stack.extend(reversed(list(node.nodes.values())))

    def __len__(self) -> int:
        return sum(1 for _ in self.leaves())

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, str) and self.search(identifier) is not None
