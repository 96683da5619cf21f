"""Domain datatypes for one scan of a project directory."""

from __future__ import annotations

from dataclasses import dataclass, field

from .tree import DirectoryTree

BINARY_PLACEHOLDER = "[Binary content]"


@dataclass(frozen=True)
class FileRecord:
    """Accepted file with its root-relative path and decoded (or placeholder) content."""

    relative_path: str
    content: str


@dataclass
class ProjectContext:
    """Everything collected by one walk: the directory tree plus file records."""

    tree: DirectoryTree = field(default_factory=DirectoryTree)
    files: list[FileRecord] = field(default_factory=list)

    def add_file(self, record: FileRecord) -> None:
        """Register ``record`` in the tree and keep its content."""
        self.tree.add_file(record.relative_path)
        self.files.append(record)


__all__ = [
    "BINARY_PLACEHOLDER",
    "FileRecord",
    "ProjectContext",
]
