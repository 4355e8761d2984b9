"""Base SCM fetcher interface.

A fetcher is the retrieval boundary of gopack: it knows how to bring a
dependency's source into the vendor workspace and how to pin the working
copy to a branch, commit or tag. Everything above this layer treats the
SCM client as opaque.
"""

import logging
import subprocess
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from gopack.core.errors import ResolutionCancelled, RetrievalError

logger = logging.getLogger("gopack.scm.base")

# Interval at which a running command checks for cancellation
_POLL_INTERVAL = 0.2


class BaseFetcher(ABC):
    """Base class for SCM fetchers.

    Subclasses implement ``retrieve`` and ``checkout`` on top of
    ``run_command``, which enforces the timeout and honours the session's
    cancellation event.
    """

    NAME: str = "base"

    def __init__(
        self,
        timeout: float = 300.0,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        """Initialize fetcher.

        Args:
            timeout: Timeout for a single SCM command (seconds).
            cancel_event: Event that aborts in-flight commands when set.
        """
        self.timeout = timeout
        self.cancel_event = cancel_event or threading.Event()
        logger.debug("Fetcher %s initialized (timeout=%ss)", self.NAME, timeout)

    @abstractmethod
    def retrieve(self, source: str, target_dir: Path, update: bool) -> None:
        """Bring ``source`` into ``target_dir``.

        Args:
            source: Source locator (repository URL).
            target_dir: Destination inside the vendor workspace.
            update: True when ``target_dir`` already holds a working copy
                that should be refreshed instead of cloned.

        Raises:
            RetrievalError: If the SCM client fails.
        """
        raise NotImplementedError

    @abstractmethod
    def checkout(self, target_dir: Path, kind: str, ref: str) -> None:
        """Pin the working copy at ``target_dir`` to ``ref``.

        Args:
            target_dir: Working copy.
            kind: One of ``branch``, ``commit``, ``tag``.
            ref: Literal reference value.

        Raises:
            RetrievalError: If the SCM client fails.
        """
        raise NotImplementedError

    def run_command(self, cmd: List[str], cwd: Optional[Path] = None) -> str:
        """Run an SCM command and return its stdout.

        Raises:
            RetrievalError: On non-zero exit, missing client, or timeout.
            ResolutionCancelled: If the cancel event fires while running.
        """
        logger.debug("Running: %s", " ".join(cmd))
        if self.cancel_event.is_set():
            raise ResolutionCancelled(f"Cancelled before running: {cmd[0]}")

        try:
            proc = subprocess.Popen(
                cmd,
                cwd=str(cwd) if cwd else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
            )
        except OSError as e:
            raise RetrievalError(f"Could not run {cmd[0]}: {e}") from e

        deadline = time.monotonic() + self.timeout
        while True:
            try:
                stdout, stderr = proc.communicate(timeout=_POLL_INTERVAL)
                break
            except subprocess.TimeoutExpired:
                if self.cancel_event.is_set():
                    proc.kill()
                    proc.communicate()
                    raise ResolutionCancelled(f"Cancelled: {' '.join(cmd)}")
                if time.monotonic() >= deadline:
                    proc.kill()
                    proc.communicate()
                    logger.error("Command timed out after %ss: %s", self.timeout, cmd)
                    raise RetrievalError(
                        f"{' '.join(cmd)} timed out after {self.timeout}s"
                    )

        if proc.returncode != 0:
            logger.error("Command failed (%d): %s", proc.returncode, stderr.strip())
            raise RetrievalError(
                f"{' '.join(cmd)} failed with exit code {proc.returncode}: "
                f"{stderr.strip()}"
            )
        return stdout.strip()
