"""File scanner using scandir and generator pattern."""

import fnmatch
import logging
import os
from pathlib import Path
from typing import Generator, List, Optional

logger = logging.getLogger("gopack.utils.scanner")

ALWAYS_IGNORED = [".git", ".hg", ".svn", ".gopack"]


def load_gitignore_patterns(root_path: Path) -> List[str]:
    """Load patterns from .gitignore in the root path."""
    gitignore = root_path / ".gitignore"
    patterns: List[str] = []
    if not gitignore.is_file():
        return patterns
    try:
        with open(gitignore, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#"):
                    patterns.append(line)
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Failed to read .gitignore at %s: %s", gitignore, exc)
    return patterns


def _is_ignored(str_path: str, is_dir: bool, ignore_patterns: List[str]) -> bool:
    """Check a root-relative path against simplified gitignore patterns."""
    for pattern in ignore_patterns:
        if pattern.endswith("/"):
            if not is_dir:
                continue
            pattern = pattern.rstrip("/")
        if fnmatch.fnmatch(str_path, pattern) or fnmatch.fnmatch(
            str_path, f"**/{pattern}"
        ):
            return True
        if fnmatch.fnmatch(str_path.rsplit("/", 1)[-1], pattern):
            return True
    return False


def scan_files(
    root_path: Path,
    patterns: List[str],
    ignore_patterns: Optional[List[str]] = None,
) -> Generator[Path, None, None]:
    """Scan files matching patterns, respecting ignores.

    Args:
        root_path: Root directory to scan.
        patterns: Glob patterns to include (e.g. ['*.go']).
        ignore_patterns: Glob patterns to ignore.

    Yields:
        Path objects for matching files, in deterministic order.
    """
    root_path = root_path.resolve()
    ignores = (ignore_patterns or []) + ALWAYS_IGNORED

    stack = [root_path]
    while stack:
        current_dir = stack.pop()

        try:
            entries = sorted(os.scandir(current_dir), key=lambda e: e.name)
        except PermissionError:
            continue

        dirs = []
        for entry in entries:
            path = Path(entry.path)
            str_path = path.relative_to(root_path).as_posix()
            # Symlinks are skipped so the vendor self-link cannot loop
            is_dir = entry.is_dir(follow_symlinks=False)
            if _is_ignored(str_path, is_dir, ignores):
                continue
            if is_dir:
                dirs.append(path)
            elif entry.is_file(follow_symlinks=False) and any(
                fnmatch.fnmatch(entry.name, pattern) for pattern in patterns
            ):
                yield path

        stack.extend(reversed(dirs))
