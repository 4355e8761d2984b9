"""Public graph API surface."""

from gopack.graph.report import ResolutionReport
from gopack.graph.trie import Graph, GraphNode, split_identifier

__all__ = [
    "Graph",
    "GraphNode",
    "ResolutionReport",
    "split_identifier",
]
