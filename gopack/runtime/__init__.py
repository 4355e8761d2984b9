"""Resolution runtime: session, configuration and the resolver pipeline."""

from gopack.runtime.config import Config, load_declaration
from gopack.runtime.resolver import DependencyResolver, Resolution, resolve_project
from gopack.runtime.session import ResolutionSession

__all__ = [
    "Config",
    "DependencyResolver",
    "Resolution",
    "ResolutionSession",
    "load_declaration",
    "resolve_project",
]
