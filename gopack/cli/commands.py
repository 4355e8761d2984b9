"""CLI commands that run after dependencies are resolved.

Each command receives the resolution (or the source tree statistics) and a
console, and returns a process exit code.
"""

from __future__ import annotations

import logging

from rich.console import Console

from gopack.analysis.source_tree import ProjectStats
from gopack.cli.toolchain import run_go
from gopack.runtime.resolver import Resolution

logger = logging.getLogger("gopack.cli.commands")


def dependencytree_command(resolution: Resolution, console: Console) -> int:
    """Print the resolved dependency tree."""
    report = resolution.report
    console.print(report.render_tree())
    console.print(report.summary(), style="bright_black", markup=False)
    for cycle in report.cycles:
        console.print("cycle: " + " -> ".join(cycle), style="yellow", markup=False)
    return 0


def stats_command(stats: ProjectStats, console: Console) -> int:
    """Print source tree statistics."""
    console.print(stats.to_table())
    remote = stats.remote_imports()
    if remote:
        console.print("Remote imports:", style="bold")
        for import_path in remote:
            console.print(f"  {import_path}", markup=False)
    return 0


def installdeps_command(resolution: Resolution, console: Console) -> int:
    """Run ``go install`` for every top-level dependency."""
    dependencies = resolution.dependencies
    imports = [dep.import_path for dep in dependencies if dep.import_path]
    console.print(f"Installing {len(imports)} dependencies", style="bright_black")
    return run_go(resolution.config.session, ["install", *imports])
