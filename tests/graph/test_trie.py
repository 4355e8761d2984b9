"""Tests for the import-identifier trie."""

import pytest

from gopack.core.dep import Dep
from gopack.graph import Graph
from gopack.runtime.session import ResolutionSession


def _dep(session: ResolutionSession, import_path: str) -> Dep:
    return Dep(import_path, session)


def test_inserted_identifier_is_found(session: ResolutionSession) -> None:
    """Search on an inserted identifier returns its dependency."""
    graph = Graph()
    foo = _dep(session, "example.org/foo")
    bar = _dep(session, "github.com/acme/bar")
    graph.insert(foo)
    graph.insert(bar)

    assert graph.search("example.org/foo") is foo
    assert graph.search("github.com/acme/bar") is bar
    assert len(graph) == 2


def test_descendant_path_resolves_to_owning_leaf(session: ResolutionSession) -> None:
    """Sub-package identifiers resolve to the dependency that owns them."""
    graph = Graph()
    owner = _dep(session, "a/b")
    graph.insert(owner)

    assert graph.search("a/b/c") is owner
    assert graph.search("a/b/c/d/e") is owner


def test_unknown_identifier_returns_none(session: ResolutionSession) -> None:
    """No shared prefix means no match, not an error."""
    graph = Graph()
    graph.insert(_dep(session, "example.org/foo"))

    assert graph.search("other.org/foo") is None
    assert graph.search("example.org/bar") is None
    assert "other.org/foo" not in graph


def test_strict_prefix_of_leaf_is_not_a_match(session: ResolutionSession) -> None:
    """Walking off the end before reaching a leaf finds nothing."""
    graph = Graph()
    graph.insert(_dep(session, "example.org/foo/bar"))

    assert graph.search("example.org/foo") is None
    assert graph.search("example.org") is None


def test_reinsert_replaces_leaf_dependency(session: ResolutionSession) -> None:
    """Re-insertion swaps the dependency without changing trie shape."""
    graph = Graph()
    first = _dep(session, "example.org/foo")
    second = _dep(session, "example.org/foo")
    graph.insert(first)
    graph.insert(_dep(session, "example.org/other"))

    graph.insert(second)

    assert graph.search("example.org/foo") is second
    assert len(graph) == 2
    node = graph.search_node("example.org/foo")
    assert node is not None and node.leaf and node.nodes == {}


def test_leaf_flag_tracks_dependency_ownership(session: ResolutionSession) -> None:
    """Intermediate nodes are not leaves and own no dependency."""
    graph = Graph()
    graph.insert(_dep(session, "example.org/foo/bar"))

    top = graph.nodes["example.org"]
    assert not top.leaf and top.dependency is None
    middle = top.nodes["foo"]
    assert not middle.leaf and middle.dependency is None
    assert middle.nodes["bar"].leaf


def test_leaves_follow_insertion_order(session: ResolutionSession) -> None:
    """leaves() walks the trie depth first in insertion order."""
    graph = Graph()
    for path in ["z.org/one", "a.org/two", "z.org/three"]:
        graph.insert(_dep(session, path))

    assert [d.import_path for d in graph.leaves()] == [
        "z.org/one",
        "z.org/three",
        "a.org/two",
    ]


def test_insert_requires_import_path(session: ResolutionSession) -> None:
    graph = Graph()
    with pytest.raises(ValueError):
        graph.insert(Dep(None, session))
