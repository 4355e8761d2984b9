"""gopack: vendoring dependency manager for Go projects."""

__version__ = "0.1.0"
