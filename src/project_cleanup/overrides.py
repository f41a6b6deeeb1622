"""Per-project override files listing extra cleanable directories.

An override file is UTF-8 text with one relative path per line. Blank lines
and lines starting with ``#`` are ignored, duplicates are collapsed and the
first-seen order is kept.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath, PureWindowsPath

from .errors import OverrideFileError

OVERRIDE_FILENAME = ".cleanuprc"


def _validate_entry(entry: str, override_path: Path) -> None:
    """Reject entries that would point outside the project root."""
    posix = PurePosixPath(entry)
    windows = PureWindowsPath(entry)
    if posix.is_absolute() or windows.is_absolute() or windows.drive:
        raise OverrideFileError(f"Absolute path {entry!r} in {override_path}")
    if not posix.parts or not windows.parts:
        raise OverrideFileError(f"Path {entry!r} refers to the project root in {override_path}")
    if ".." in posix.parts or ".." in windows.parts:
        raise OverrideFileError(f"Path {entry!r} escapes the project root in {override_path}")


def parse_override_file(directory: Path) -> list[str]:
    """Read the override file in a project directory.

    Args:
        directory: Project root containing the override file.

    Returns:
        Listed entries in file order, without comments, blanks or duplicates.

    Raises:
        OverrideFileError: If the file cannot be read or decoded, or lists a
            path outside the project.

    """
    override_path = directory / OVERRIDE_FILENAME

    try:
        text = override_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise OverrideFileError(f"Override file is not valid UTF-8: {override_path}") from e
    except OSError as e:
        raise OverrideFileError(f"Could not read override file {override_path}: {e}") from e

    entries: list[str] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()

        if not line or line.startswith("#"):
            continue
        if line in entries:
            continue

        _validate_entry(line, override_path)
        entries.append(line)

    return entries
