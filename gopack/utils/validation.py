"""Input validation utilities for security and correctness."""

import logging
import os
import re
from pathlib import Path
from urllib.parse import urlparse

logger = logging.getLogger("gopack.utils.validation")

# Allowed source locator schemes
ALLOWED_SCHEMES = {"http", "https", "git", "ssh", "git+ssh", "svn+ssh"}

_SCP_LIKE = re.compile(r"^[a-zA-Z0-9_.-]+@[a-zA-Z0-9_.-]+:")


def validate_url(url: str) -> bool:
    """Validate a source locator for safety.

    Checks:
    1. Does not start with '-' (prevent argument injection).
    2. Scheme is allowed, or the locator uses scp-like git syntax.

    Args:
        url: Source locator to validate.

    Returns:
        bool: True if valid, False otherwise.
    """
    if not url:
        return False

    if url.startswith("-"):
        logger.warning("URL starts with '-': %s", url)
        return False

    parsed = urlparse(url)
    if not parsed.scheme:
        if _SCP_LIKE.match(url):
            return True
        logger.warning("URL has no scheme: %s", url)
        return False

    if parsed.scheme not in ALLOWED_SCHEMES:
        logger.warning("URL scheme not allowed: %s", parsed.scheme)
        return False

    return bool(parsed.netloc)


def validate_safe_path(path: str | Path, base_dir: Path) -> bool:
    """Validate that a path resolves to a location inside the base directory.

    Prevents an import identifier such as ``../../etc`` from escaping the
    vendor workspace. The check is lexical: symlinks inside the workspace
    (the project's own self-link) are not followed.

    Args:
        path: Path to validate (string or Path object).
        base_dir: The trusted base directory.

    Returns:
        bool: True if safe, False otherwise.
    """
    base_dir = Path(os.path.abspath(base_dir))
    target_path = Path(os.path.normpath(base_dir / path))
    try:
        target_path.relative_to(base_dir)
        return True
    except ValueError:
        logger.warning("Path traversal detected: %s is not inside %s", target_path, base_dir)
        return False
