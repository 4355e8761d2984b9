"""Resolution session context.

A ``ResolutionSession`` carries everything one run needs: the project
root, the vendor workspace layout, the runtime settings, the SCM fetchers
and the cancellation event. It is threaded explicitly through Config,
Dependencies and Dep instead of living in module-level globals.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

from gopack.config.schema import DECLARATION_FILE, GOPACK_DIR, ResolverSettings
from gopack.scm import FETCHERS, BaseFetcher

logger = logging.getLogger("gopack.runtime.session")

CHECKSUM_FILE = "checksum"


@dataclass
class ResolutionSession:
    """Per-run context shared by every component of a resolution.

    Args:
        project_root: Directory holding the project's ``gopack.config``.
        settings: Runtime settings.
        fetchers: SCM kind to fetcher instance; built from ``FETCHERS``
            when not supplied.
    """

    project_root: Path
    settings: ResolverSettings = field(default_factory=ResolverSettings)
    fetchers: Dict[str, BaseFetcher] = field(default_factory=dict)
    cancel_event: threading.Event = field(default_factory=threading.Event)

    def __post_init__(self) -> None:
        self.project_root = Path(self.project_root).resolve()
        if not self.fetchers:
            self.fetchers = {
                name: cls(
                    timeout=self.settings.retrieval_timeout,
                    cancel_event=self.cancel_event,
                )
                for name, cls in FETCHERS.items()
            }

    @classmethod
    def from_env(
        cls,
        project_dir: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ResolutionSession":
        """Build a session from the process environment.

        ``GOPACK_APP_CONFIG`` overrides the project directory, which is
        otherwise ``project_dir`` or the current working directory.
        """
        env = os.environ if environ is None else environ
        root = Path(env.get("GOPACK_APP_CONFIG") or project_dir or Path.cwd())
        settings = ResolverSettings.from_env(root, env)
        logger.debug("Session for %s with %s", root, settings)
        return cls(project_root=root, settings=settings)

    @property
    def gopack_dir(self) -> Path:
        return self.project_root / GOPACK_DIR

    @property
    def checksum_path(self) -> Path:
        return self.gopack_dir / CHECKSUM_FILE

    @property
    def declaration_path(self) -> Path:
        return self.project_root / DECLARATION_FILE

    @property
    def vendor_root(self) -> Path:
        return self.project_root / self.settings.vendor_dir

    @property
    def vendor_src(self) -> Path:
        return self.vendor_root / "src"

    def target_path(self, import_path: str) -> Path:
        """Location of ``import_path`` inside the vendor workspace."""
        return self.vendor_src / Path(*import_path.split("/"))

    def fetcher_for(self, scm: str) -> BaseFetcher:
        try:
            return self.fetchers[scm]
        except KeyError:
            raise ValueError(f"No fetcher registered for scm '{scm}'") from None

    def toolchain_env(self) -> Dict[str, str]:
        """Process environment with ``GOPATH`` pointing at the vendor root."""
        env = dict(os.environ)
        env["GOPATH"] = str(self.vendor_root)
        return env

    def cancel(self) -> None:
        """Abort in-flight retrievals and stop the traversal."""
        logger.warning("Cancelling resolution session")
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()
