"""Identify project directories and their dependency directories."""

from __future__ import annotations

from pathlib import Path

from .overrides import OVERRIDE_FILENAME
from .project import Project

# Marker file -> dependency directories it implies, checked in this order.
# Every matching marker applies, so polyglot projects get all candidates.
MARKERS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Cargo.toml", ("target",)),  # Rust
    ("package.json", ("node_modules", ".cache")),  # Node.js
    ("pom.xml", (".gradle", "build")),  # Java
)


def classify(path: Path) -> Project | None:
    """Classify a directory as a project.

    Built-in candidates are applied first, then the entries of the project's
    override file (if any). Only candidates that exist are recorded.

    Args:
        path: Directory to check.

    Returns:
        Project if the directory holds a marker or override file, None otherwise.

    Raises:
        OverrideFileError: If the project's override file is invalid.

    """
    if not path.is_dir():
        return None

    project = Project(root=path)
    is_project = False

    for marker, candidates in MARKERS:
        if not (path / marker).is_file():
            continue

        is_project = True
        for candidate in candidates:
            project.add_dependency_dir_if_exists(candidate)

    if (path / OVERRIDE_FILENAME).is_file():
        is_project = True
        project.load_override_file()

    return project if is_project else None
