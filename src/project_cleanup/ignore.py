"""Ignore pattern handling for directory traversal."""

from __future__ import annotations

import re
from pathlib import Path

from .errors import ConfigurationError


def compile_ignore(pattern: str | None) -> re.Pattern[str] | None:
    """Compile a user-supplied ignore pattern.

    Args:
        pattern: Regular expression, or None / empty for no filtering.

    Returns:
        Compiled pattern, or None if no pattern was given.

    Raises:
        ConfigurationError: If the pattern is not a valid regular expression.

    """
    if not pattern:
        return None

    try:
        return re.compile(pattern)
    except re.error as e:
        raise ConfigurationError(f"Invalid ignore pattern {pattern!r}: {e}") from e


def is_ignored(pattern: re.Pattern[str] | None, path: Path | str) -> bool:
    """Check whether a path matches the ignore pattern anywhere in its string form."""
    if pattern is None:
        return False

    # Path("") renders as "."
    path_str = "" if isinstance(path, Path) and not path.parts else str(path)
    if not path_str:
        return False

    return pattern.search(path_str) is not None
