"""Mercurial repository fetcher."""

import logging
from pathlib import Path

from gopack.scm.base import BaseFetcher

logger = logging.getLogger("gopack.scm.hg")


class HgFetcher(BaseFetcher):
    """Fetcher for mercurial repositories."""

    NAME = "hg"

    def retrieve(self, source: str, target_dir: Path, update: bool) -> None:
        if update:
            logger.info("Pulling mercurial repository at %s", target_dir)
            self.run_command(["hg", "pull", "-q", "-R", str(target_dir)])
            return

        target_dir.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Cloning mercurial repository: %s", source)
        self.run_command(["hg", "clone", "-q", "--", source, str(target_dir)])

    def checkout(self, target_dir: Path, kind: str, ref: str) -> None:
        logger.info("Updating %s to %s %s", target_dir, kind, ref)
        self.run_command(["hg", "update", "-q", "-R", str(target_dir), "-r", ref])
