"""Dependency model: Dep, Dependencies and the error taxonomy."""

from gopack.core.dep import CheckoutKind, Dep, infer_scm
from gopack.core.dependencies import Dependencies, ProjectFacts
from gopack.core.errors import (
    ConfigError,
    DependencyValidationError,
    GopackError,
    ProjectError,
    ResolutionCancelled,
    RetrievalError,
)

__all__ = [
    "CheckoutKind",
    "ConfigError",
    "Dep",
    "Dependencies",
    "DependencyValidationError",
    "GopackError",
    "ProjectError",
    "ProjectFacts",
    "ResolutionCancelled",
    "RetrievalError",
    "infer_scm",
]
