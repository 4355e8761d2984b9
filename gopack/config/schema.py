"""Configuration schema definitions using Pydantic for validation.

Two kinds of configuration live here:

* ``Declaration`` / ``DepEntry`` describe the ``gopack.config`` file a
  project (or any fetched dependency) ships. Type mismatches and unknown
  fields are caught at load time instead of surfacing as late failures.
* ``ResolverSettings`` holds the runtime knobs of a resolution session.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DECLARATION_FILE = "gopack.config"
GOPACK_DIR = ".gopack"
DEFAULT_VENDOR_DIR = ".gopack/vendor"

ScmName = Literal["git", "hg"]


class DepEntry(BaseModel):
    """One entry of the ``[deps]`` or ``[dev-deps]`` tables.

    Attributes:
        import_path: Import identifier (``import`` in the file). Left
            optional here so a missing value is reported as a dependency
            validation error rather than a schema failure.
        scm: Explicit SCM kind; inferred from the identifier when absent.
        source: Source locator; defaults to ``https://<import>``.
        branch: Branch to pin after retrieval.
        commit: Commit to pin after retrieval.
        tag: Tag to pin after retrieval.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    import_path: Optional[str] = Field(default=None, alias="import")
    scm: Optional[ScmName] = None
    source: Optional[str] = None
    branch: Optional[str] = None
    commit: Optional[str] = None
    tag: Optional[str] = None

    @field_validator("import_path")
    @classmethod
    def strip_import(cls, v: Optional[str]) -> Optional[str]:
        """Normalize surrounding whitespace and slashes."""
        if v is None:
            return None
        v = v.strip().strip("/")
        return v or None


class Declaration(BaseModel):
    """Parsed contents of a ``gopack.config`` file.

    Table order is preserved, so iteration follows declaration order.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    repo: Optional[str] = None
    deps: Dict[str, DepEntry] = Field(default_factory=dict)
    dev_deps: Dict[str, DepEntry] = Field(default_factory=dict, alias="dev-deps")

    @property
    def total(self) -> int:
        return len(self.deps) + len(self.dev_deps)


class ResolverSettings(BaseModel):
    """Runtime settings for one resolution session.

    Attributes:
        vendor_dir: Vendor workspace, relative to the project root.
        retrieval_timeout: Timeout for one SCM command (seconds).
        max_workers: Sibling dependencies fetched concurrently (1 = serial).
        colors: Whether console output is colored.
    """

    vendor_dir: str = DEFAULT_VENDOR_DIR
    retrieval_timeout: float = Field(default=300.0, ge=1.0, le=3600.0)
    max_workers: int = Field(default=1, ge=1, le=64)
    colors: bool = False

    @classmethod
    def from_env(
        cls, project_root: Path, environ: Optional[Mapping[str, str]] = None
    ) -> "ResolverSettings":
        """Build settings from ``GOPACK_*`` and ``GOPATH`` variables.

        A ``GOPATH`` whose first entry lies under the project root is used
        as the vendor workspace.
        """
        env = os.environ if environ is None else environ
        data: Dict[str, object] = {"colors": env.get("GOPACK_COLORS") == "1"}

        gopath = env.get("GOPATH")
        if gopath:
            first = Path(gopath.split(os.pathsep)[0]).resolve()
            try:
                data["vendor_dir"] = str(first.relative_to(project_root.resolve()))
            except ValueError:
                pass

        if env.get("GOPACK_WORKERS"):
            data["max_workers"] = env["GOPACK_WORKERS"]
        if env.get("GOPACK_TIMEOUT"):
            data["retrieval_timeout"] = env["GOPACK_TIMEOUT"]
        return cls.model_validate(data)
