"""Main CLI entry point for gopack.

Provides commands: version, dependencytree, stats, installdeps. Any other
arguments are handed to the Go toolchain once dependencies are resolved.
"""

import argparse
import logging
import sys
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from gopack import __version__
from gopack.analysis.source_tree import analyze_source_tree
from gopack.cli.commands import (
    dependencytree_command,
    installdeps_command,
    stats_command,
)
from gopack.cli.toolchain import run_go
from gopack.core.errors import (
    ConfigError,
    DependencyValidationError,
    GopackError,
    ResolutionCancelled,
    RetrievalError,
)
from gopack.runtime.resolver import resolve_project
from gopack.runtime.session import ResolutionSession

logger = logging.getLogger("gopack.cli")

COMMANDS = ("dependencytree", "stats", "installdeps")


def setup_logging(verbose: bool = False, console: Optional[Console] = None) -> None:
    """Setup logging configuration with Rich integration.

    Args:
        verbose: Enable verbose logging.
        console: Rich Console instance for coordinated output (optional).
    """
    level = logging.DEBUG if verbose else logging.WARNING

    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        log_time_format="[%H:%M:%S]",
    )

    logging.basicConfig(
        level=level,
        format="[%(name)s] %(message)s",
        handlers=[handler],
        force=True,
    )


def make_console(colors: bool) -> Console:
    """Console for user-facing output; plain unless colors are enabled."""
    return Console(no_color=not colors, highlight=False)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gopack",
        description=(
            "gopack - vendoring dependency manager for Go.\n\n"
            "commands:\n"
            "  version          print the gopack version\n"
            "  dependencytree   print the resolved dependency tree\n"
            "  stats            print source tree statistics\n"
            "  installdeps      go install every declared dependency\n"
            "  <anything else>  run `go <args>` with the vendored GOPATH"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument("command", nargs="?", help="gopack command or go subcommand")
    parser.add_argument("args", nargs=argparse.REMAINDER, help=argparse.SUPPRESS)
    return parser


def _report_validation(console: Console, exc: DependencyValidationError) -> None:
    for error in exc.errors:
        console.print(str(error), style="red", markup=False)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point.

    Returns:
        int: Exit code. 0 on success, the number of validation errors when
        declared dependencies are invalid, 1 on any other failure.
    """
    argv = sys.argv[1:] if argv is None else argv
    args = build_parser().parse_args(argv)

    if args.command == "version":
        print(f"gopack version {__version__}")
        return 0

    session = ResolutionSession.from_env()
    console = make_console(session.settings.colors)
    setup_logging(args.verbose, Console(stderr=True, no_color=not session.settings.colors))

    try:
        stats = analyze_source_tree(
            session.project_root, extra_ignores=[session.settings.vendor_dir]
        )
        resolution = resolve_project(session, stats.facts(), console=console)
    except DependencyValidationError as e:
        _report_validation(console, e)
        return e.exit_code
    except (ConfigError, RetrievalError, ResolutionCancelled) as e:
        console.print(str(e), style="red", markup=False)
        return 1
    except GopackError as e:
        logger.error("gopack failed: %s", e, exc_info=True)
        return 1
    except KeyboardInterrupt:
        session.cancel()
        console.print("Interrupted", style="red")
        return 1

    if args.command == "dependencytree":
        return dependencytree_command(resolution, console)
    if args.command == "stats":
        return stats_command(stats, console)
    if args.command == "installdeps":
        return installdeps_command(resolution, console)

    passthrough = [args.command, *args.args] if args.command else list(args.args)
    return run_go(session, passthrough)


if __name__ == "__main__":
    sys.exit(main())
