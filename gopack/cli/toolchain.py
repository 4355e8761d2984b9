"""Pass-through to the Go toolchain with a localized GOPATH."""

from __future__ import annotations

import logging
import subprocess
from typing import List

from gopack.runtime.session import ResolutionSession

logger = logging.getLogger("gopack.cli.toolchain")

GO_BINARY = "go"


def run_go(session: ResolutionSession, args: List[str]) -> int:
    """Run ``go <args>`` with GOPATH pointing at the vendor workspace.

    Returns:
        int: 0 when the toolchain succeeds, 1 otherwise.
    """
    cmd = [GO_BINARY, *args]
    logger.debug("Running toolchain: %s", " ".join(cmd))
    try:
        result = subprocess.run(
            cmd,
            cwd=str(session.project_root),
            env=session.toolchain_env(),
            check=False,
        )
    except OSError as e:
        logger.error("Could not run %s: %s", GO_BINARY, e)
        return 1

    if result.returncode != 0:
        logger.error("%s exited with code %d", " ".join(cmd), result.returncode)
        return 1
    return 0
