"""Tests for Go source tree statistics."""

from pathlib import Path

from gopack.analysis.source_tree import analyze_source_tree, parse_imports

MAIN_GO = """package main

import (
\t"fmt"
\tlog "github.com/acme/log"
\t_ "example.org/driver"
)

func main() { fmt.Println("hi") }
"""

UTIL_GO = """package util

import "strings"
"""


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_parse_imports_handles_blocks_and_aliases() -> None:
    assert parse_imports(MAIN_GO) == {"fmt", "github.com/acme/log", "example.org/driver"}
    assert parse_imports(UTIL_GO) == {"strings"}


def test_analyze_counts_files_packages_and_imports(tmp_path: Path) -> None:
    _write(tmp_path / "main.go", MAIN_GO)
    _write(tmp_path / "util" / "util.go", UTIL_GO)
    _write(tmp_path / "util" / "util_test.go", UTIL_GO)
    _write(tmp_path / "README.md", "not go")

    stats = analyze_source_tree(tmp_path)

    assert stats.files == 3
    assert stats.test_files == 1
    assert stats.packages == {".:main", "util:util"}
    assert stats.import_counts["strings"] == 2
    assert stats.remote_imports() == ["example.org/driver", "github.com/acme/log"]


def test_vendor_and_ignored_paths_are_skipped(tmp_path: Path) -> None:
    _write(tmp_path / "main.go", UTIL_GO)
    _write(tmp_path / ".gopack" / "vendor" / "src" / "x.org" / "y" / "y.go", MAIN_GO)
    _write(tmp_path / "third_party" / "z.go", MAIN_GO)
    _write(tmp_path / "gen" / "gen.go", MAIN_GO)
    _write(tmp_path / ".gitignore", "gen/\n")

    stats = analyze_source_tree(tmp_path, extra_ignores=["third_party"])

    assert stats.files == 1
    assert stats.imports == {"strings"}


def test_facts_carry_repository_and_imports(tmp_path: Path) -> None:
    _write(tmp_path / "main.go", MAIN_GO)

    facts = analyze_source_tree(tmp_path).facts("github.com/acme/app")

    assert facts.repository == "github.com/acme/app"
    assert "github.com/acme/log" in facts.imports
