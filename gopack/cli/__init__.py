"""Command implementations for the gopack CLI."""
