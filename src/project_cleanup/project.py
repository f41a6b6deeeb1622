"""Discovered project records."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .overrides import parse_override_file


@dataclass(eq=False)
class Project:
    """A project root and the dependency directories found inside it.

    Dependency directories are only added while the project is being
    classified; afterwards the record is treated as read-only.
    """

    root: Path
    dependency_dirs: set[Path] = field(default_factory=set)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Project):
            return NotImplemented
        return self.root == other.root

    def __hash__(self) -> int:
        return hash(self.root)

    def add_dependency_dir_if_exists(self, subdir: str | Path) -> bool:
        """Mark a subdirectory of the project root as cleanable, if it exists.

        Args:
            subdir: Path of the subdirectory, relative to the project root.

        Returns:
            True if the directory was added.

        """
        path = self.root / subdir

        if path in self.dependency_dirs or not path.is_dir():
            return False

        # Must stay strictly below the root, also after resolving symlinks
        try:
            relative = path.resolve(strict=True).relative_to(self.root.resolve(strict=True))
        except (OSError, RuntimeError, ValueError):
            return False
        if not relative.parts:
            return False

        self.dependency_dirs.add(path)
        return True

    def is_dependency_dir(self, path: Path) -> bool:
        """Check if a path is one of this project's dependency directories."""
        return path in self.dependency_dirs

    def load_override_file(self) -> None:
        """Add the directories listed in the project's override file."""
        for entry in parse_override_file(self.root):
            self.add_dependency_dir_if_exists(entry)

    def sorted_dependency_dirs(self) -> list[Path]:
        """Get dependency directories ordered by path string."""
        return sorted(self.dependency_dirs, key=str)

    def __str__(self) -> str:
        return f"Project({self.root}, {len(self.dependency_dirs)} dependency dirs)"
