"""Static analysis of the project's own Go source tree."""

from gopack.analysis.source_tree import ProjectStats, analyze_source_tree, parse_imports

__all__ = ["ProjectStats", "analyze_source_tree", "parse_imports"]
