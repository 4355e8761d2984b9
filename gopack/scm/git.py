"""Git repository fetcher."""

import logging
from pathlib import Path

from gopack.scm.base import BaseFetcher

logger = logging.getLogger("gopack.scm.git")


class GitFetcher(BaseFetcher):
    """Fetcher for git repositories.

    Clones with full history so any declared commit can be checked out.
    """

    NAME = "git"

    def retrieve(self, source: str, target_dir: Path, update: bool) -> None:
        if update:
            logger.info("Updating git repository at %s", target_dir)
            self.run_command(
                ["git", "-C", str(target_dir), "fetch", "--all", "--tags", "-q"]
            )
            return

        target_dir.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Cloning git repository: %s", source)
        # "--" keeps a hostile source from being parsed as an option
        self.run_command(["git", "clone", "-q", "--", source, str(target_dir)])
        logger.info("Successfully cloned to: %s", target_dir)

    def checkout(self, target_dir: Path, kind: str, ref: str) -> None:
        logger.info("Checking out %s %s in %s", kind, ref, target_dir)
        self.run_command(["git", "-C", str(target_dir), "checkout", "-q", ref])
        if kind == "branch":
            # Fast-forward to the remote head of the branch
            self.run_command(
                ["git", "-C", str(target_dir), "merge", "-q", "--ff-only", f"origin/{ref}"]
            )
