"""Go source tree statistics.

A light scan of the project's own ``.go`` files: it counts files and
packages and collects the import identifiers they use. The result feeds
the ``stats`` subcommand and the undeclared-import warnings emitted while
validating the top-level dependency set.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Set

from rich.table import Table

from gopack.core.dependencies import ProjectFacts
from gopack.utils.scanner import load_gitignore_patterns, scan_files

logger = logging.getLogger("gopack.analysis.source_tree")

_PACKAGE_RE = re.compile(r"^\s*package\s+(\w+)", re.MULTILINE)
_SINGLE_IMPORT_RE = re.compile(r'^\s*import\s+(?:[\w.]+\s+)?"([^"]+)"', re.MULTILINE)
_IMPORT_BLOCK_RE = re.compile(r"^\s*import\s*\((.*?)\)", re.MULTILINE | re.DOTALL)
_BLOCK_ENTRY_RE = re.compile(r'"([^"]+)"')


def parse_imports(text: str) -> Set[str]:
    """Extract import paths from Go source text."""
    imports = set(_SINGLE_IMPORT_RE.findall(text))
    for block in _IMPORT_BLOCK_RE.findall(text):
        imports.update(_BLOCK_ENTRY_RE.findall(block))
    return imports


@dataclass
class ProjectStats:
    """Summary of a Go source tree."""

    root: Path
    files: int = 0
    test_files: int = 0
    packages: Set[str] = field(default_factory=set)
    import_counts: Counter = field(default_factory=Counter)

    @property
    def imports(self) -> Set[str]:
        return set(self.import_counts)

    def remote_imports(self) -> List[str]:
        return sorted(i for i in self.imports if "." in i.split("/", 1)[0])

    def facts(self, repository: str | None = None) -> ProjectFacts:
        return ProjectFacts(repository=repository, imports=self.imports)

    def to_table(self) -> Table:
        table = Table(title=f"Source tree: {self.root}")
        table.add_column("Metric")
        table.add_column("Value", justify="right")
        table.add_row("Go files", str(self.files))
        table.add_row("Test files", str(self.test_files))
        table.add_row("Packages", str(len(self.packages)))
        table.add_row("Distinct imports", str(len(self.import_counts)))
        table.add_row("Remote imports", str(len(self.remote_imports())))
        return table

    def top_imports(self, limit: int = 10) -> Dict[str, int]:
        return dict(self.import_counts.most_common(limit))


def analyze_source_tree(root: Path, extra_ignores: Iterable[str] = ()) -> ProjectStats:
    """Scan ``root`` for Go files and collect statistics."""
    root = root.resolve()
    ignores = load_gitignore_patterns(root) + list(extra_ignores)
    stats = ProjectStats(root=root)

    for path in scan_files(root, ["*.go"], ignore_patterns=ignores):
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Skipping unreadable file %s: %s", path, e)
            continue

        stats.files += 1
        if path.name.endswith("_test.go"):
            stats.test_files += 1
        package = _PACKAGE_RE.search(text)
        if package:
            rel_dir = path.parent.relative_to(root).as_posix()
            stats.packages.add(f"{rel_dir}:{package.group(1)}")
        stats.import_counts.update(parse_imports(text))

    logger.debug(
        "Scanned %d Go files in %s (%d imports)", stats.files, root, len(stats.import_counts)
    )
    return stats
