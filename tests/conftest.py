"""Shared fixtures: a project directory and an in-memory SCM fetcher."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, Tuple

import pytest

from gopack.config.schema import DECLARATION_FILE, ResolverSettings
from gopack.core.errors import RetrievalError
from gopack.runtime.session import ResolutionSession
from gopack.scm.base import BaseFetcher


class FakeFetcher(BaseFetcher):
    """Fetcher that materializes directories instead of running git.

    ``nested`` maps a source locator to the ``gopack.config`` text the
    retrieved tree should contain.
    """

    NAME = "git"

    def __init__(self) -> None:
        super().__init__(timeout=5)
        self.nested: Dict[str, str] = {}
        self.fail_on: Set[str] = set()
        self.on_retrieve: Optional[Callable[[str], None]] = None
        self.retrievals: List[Tuple[str, Path, bool]] = []
        self.checkouts: List[Tuple[Path, str, str]] = []

    @property
    def retrieved_sources(self) -> List[str]:
        return [source for source, _, _ in self.retrievals]

    def retrieve(self, source: str, target_dir: Path, update: bool) -> None:
        self.retrievals.append((source, target_dir, update))
        if self.on_retrieve is not None:
            self.on_retrieve(source)
        if source in self.fail_on:
            raise RetrievalError(f"cannot reach {source}")
        target_dir.mkdir(parents=True, exist_ok=True)
        text = self.nested.get(source)
        if text is not None:
            (target_dir / DECLARATION_FILE).write_text(textwrap.dedent(text), encoding="utf-8")

    def checkout(self, target_dir: Path, kind: str, ref: str) -> None:
        self.checkouts.append((target_dir, kind, ref))


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def session(project: Path, fake_fetcher: FakeFetcher) -> ResolutionSession:
    return ResolutionSession(project_root=project, fetchers={"git": fake_fetcher})


@pytest.fixture
def write_config(project: Path) -> Callable[[str], Path]:
    """Write the project's ``gopack.config`` from dedented TOML text."""

    def _write(text: str) -> Path:
        path = project / DECLARATION_FILE
        path.write_text(textwrap.dedent(text), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_session(
    project: Path, fake_fetcher: FakeFetcher
) -> Callable[..., ResolutionSession]:
    """Factory for sessions with custom settings and the fake fetcher."""

    def _make(**settings: object) -> ResolutionSession:
        return ResolutionSession(
            project_root=project,
            settings=ResolverSettings(**settings),
            fetchers={"git": fake_fetcher},
        )

    return _make
