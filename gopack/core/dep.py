"""Dependency model.

A ``Dep`` holds the declared facts of one dependency and drives its
fetch/checkout lifecycle:

1. structural pass: import identifier, SCM kind, source locator
2. checkout pass: zero or one of branch, commit, tag
3. ``validate`` before anything touches the network
4. ``fetch`` (gated by the declaration checksum), then ``switch_to_checkout``
5. ``load_transitive_deps`` when the retrieved tree ships its own declaration
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Tuple

from gopack.config.schema import DECLARATION_FILE, DepEntry
from gopack.core.errors import ProjectError
from gopack.utils.validation import validate_safe_path, validate_url

if TYPE_CHECKING:
    from gopack.core.dependencies import Dependencies
    from gopack.graph.trie import Graph
    from gopack.runtime.session import ResolutionSession

logger = logging.getLogger("gopack.core.dep")

# Hosts known to serve mercurial repositories; any other host defaults to git
_HG_HOSTS = ("code.google.com", "hg.")


class CheckoutKind(str, Enum):
    """Kind of pinned version reference."""

    BRANCH = "branch"
    COMMIT = "commit"
    TAG = "tag"


def infer_scm(import_path: str, source: Optional[str] = None) -> Optional[str]:
    """Infer the SCM kind from the source locator or the identifier's host.

    Returns ``None`` when the identifier has no host-like first segment.
    """
    if source:
        if source.endswith(".git") or source.startswith(("git@", "git://", "git+")):
            return "git"
        if source.startswith("hg::"):
            return "hg"

    host = import_path.split("/", 1)[0]
    if "." not in host:
        return None
    if host.startswith(_HG_HOSTS):
        return "hg"
    return "git"


class Dep:
    """One declared dependency."""

    def __init__(
        self,
        import_path: Optional[str],
        session: "ResolutionSession",
        key: Optional[str] = None,
    ) -> None:
        self.import_path = import_path
        self.key = key or import_path or "<unnamed>"
        self.session = session
        self.scm: Optional[str] = None
        self.source: Optional[str] = None
        self.checkout_specs: List[Tuple[CheckoutKind, str]] = []

    @classmethod
    def from_entry(
        cls, key: str, entry: DepEntry, session: "ResolutionSession"
    ) -> "Dep":
        """Build a Dep from a declaration entry in two passes."""
        dep = cls(entry.import_path, session, key=key)
        dep.set_scm(entry)
        dep.set_source(entry)

        dep.set_checkout(entry, CheckoutKind.BRANCH)
        dep.set_checkout(entry, CheckoutKind.COMMIT)
        dep.set_checkout(entry, CheckoutKind.TAG)
        return dep

    def __repr__(self) -> str:
        return f"Dep(key={self.key}, import={self.import_path}, scm={self.scm})"

    # -------------------------------------------------------------------------
    # Population
    # -------------------------------------------------------------------------

    def set_scm(self, entry: DepEntry) -> None:
        if entry.scm:
            self.scm = entry.scm
        elif self.import_path:
            self.scm = infer_scm(self.import_path, entry.source)

    def set_source(self, entry: DepEntry) -> None:
        if entry.source:
            self.source = entry.source.removeprefix("hg::")
        elif self.import_path:
            self.source = f"https://{self.import_path}"

    def set_checkout(self, entry: DepEntry, kind: CheckoutKind) -> None:
        value = getattr(entry, kind.value)
        if value:
            self.checkout_specs.append((kind, value))

    @property
    def checkout_type(self) -> Optional[CheckoutKind]:
        return self.checkout_specs[0][0] if self.checkout_specs else None

    @property
    def checkout_spec(self) -> Optional[str]:
        return self.checkout_specs[0][1] if self.checkout_specs else None

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self, project_repository: Optional[str] = None) -> Optional[ProjectError]:
        """Return the first field-level problem with this dependency, if any."""
        if not self.import_path:
            return self._error("import", "import path is required")

        if project_repository and self.import_path == project_repository.strip("/"):
            return self._error("import", "dependency refers to the project itself")

        if not validate_safe_path(self.import_path, self.session.vendor_src):
            return self._error("import", "import path escapes the vendor workspace")

        if self.scm is None:
            return self._error("scm", "could not infer scm, declare it explicitly")

        if self.scm not in self.session.fetchers:
            return self._error("scm", f"unsupported scm '{self.scm}'")

        if len(self.checkout_specs) > 1:
            kinds = ", ".join(kind.value for kind, _ in self.checkout_specs)
            return self._error("checkout", f"only one of branch, commit, tag allowed (got {kinds})")

        if not self.source or not validate_url(self.source):
            return self._error("source", f"invalid source locator '{self.source}'")

        return None

    def _error(self, field: str, message: str) -> ProjectError:
        return ProjectError(
            key=self.key, field=field, message=message, import_path=self.import_path
        )

    # -------------------------------------------------------------------------
    # Retrieval
    # -------------------------------------------------------------------------

    @property
    def target_path(self) -> Path:
        assert self.import_path, "target_path requires an import path"
        return self.session.target_path(self.import_path)

    def fetch(self, force_refetch: bool) -> bool:
        """Retrieve the dependency into the vendor workspace.

        An existing target path is trusted as-is unless ``force_refetch``
        is set; this is a caching shortcut, not an integrity check.

        Returns:
            bool: True when a retrieval ran.

        Raises:
            RetrievalError: If the SCM client fails.
        """
        target = self.target_path
        exists = target.exists()
        if exists and not force_refetch:
            logger.debug("Using vendored copy of %s at %s", self.import_path, target)
            return False

        assert self.scm and self.source
        fetcher = self.session.fetcher_for(self.scm)
        fetcher.retrieve(self.source, target, update=exists)
        return True

    def switch_to_checkout(self) -> bool:
        """Pin the working copy to the declared branch, commit or tag.

        Returns:
            bool: True when a checkout ran.
        """
        kind = self.checkout_type
        if kind is None:
            return False
        assert self.scm and self.checkout_spec
        self.session.fetcher_for(self.scm).checkout(
            self.target_path, kind.value, self.checkout_spec
        )
        return True

    # -------------------------------------------------------------------------
    # Transitive expansion
    # -------------------------------------------------------------------------

    @property
    def declaration_path(self) -> Path:
        return self.target_path / DECLARATION_FILE

    @property
    def owns_declaration(self) -> bool:
        """Whether the retrieved tree ships its own declaration file."""
        return bool(self.import_path) and self.declaration_path.is_file()

    def load_transitive_deps(self, graph: "Graph") -> Optional["Dependencies"]:
        """Load the dependencies this dependency declares.

        Returns:
            A new Dependencies set sharing ``graph``, or None when the
            nested declaration is absent or declares nothing.

        Raises:
            ConfigError: If the nested declaration is malformed.
        """
        if not self.owns_declaration:
            return None

        from gopack.core.dependencies import Dependencies
        from gopack.runtime.config import load_declaration

        declaration = load_declaration(self.declaration_path)
        logger.debug(
            "%s declares %d dependencies", self.import_path, declaration.total
        )
        return Dependencies.from_declaration(
            declaration,
            graph,
            self.session,
            repository=declaration.repo or self.import_path,
        )
