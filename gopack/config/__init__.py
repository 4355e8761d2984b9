"""Configuration schema and validation for gopack."""

from .schema import (
    DECLARATION_FILE,
    DEFAULT_VENDOR_DIR,
    GOPACK_DIR,
    Declaration,
    DepEntry,
    ResolverSettings,
)

__all__ = [
    "DECLARATION_FILE",
    "DEFAULT_VENDOR_DIR",
    "GOPACK_DIR",
    "Declaration",
    "DepEntry",
    "ResolverSettings",
]
