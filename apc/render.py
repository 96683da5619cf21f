"""Text rendering for a collected project context.

Produces the box-drawing directory tree and the concatenated file contents.
Both outputs are sorted, so identical trees always render identically.
"""

from __future__ import annotations

import posixpath
from collections.abc import Iterable

from .project_model import ROOT, DirectoryTree, FileRecord, ProjectContext

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE_INDENT = "│   "
SPACE_INDENT = "    "

STRUCTURE_HEADER = "Directory Structure:\n"
CONTENTS_HEADER = "\nFile Contents:"


def _split_children(tree: DirectoryTree, directory: str) -> tuple[list[str], list[str]]:
    """Return ``(directories, files)`` among ``directory``'s children, each sorted."""
    dirs: list[str] = []
    files: list[str] = []
    for child in tree.children.get(directory, ()):
        (dirs if tree.is_directory(child) else files).append(child)
    dirs.sort()
    files.sort()
    return dirs, files


def _format_branch(tree: DirectoryTree, directory: str, prefix: str, out: list[str]) -> None:
    dirs, files = _split_children(tree, directory)
    rows = [(child, True) for child in dirs] + [(child, False) for child in files]
    for index, (child, is_dir) in enumerate(rows):
        is_last = index == len(rows) - 1
        name = posixpath.basename(child)
        out.append(f"{prefix}{LAST_BRANCH if is_last else BRANCH}{name}{'/' if is_dir else ''}\n")
        if is_dir:
            _format_branch(tree, child, prefix + (SPACE_INDENT if is_last else PIPE_INDENT), out)


def format_directory_tree(tree: DirectoryTree) -> str:
    """Render ``tree`` starting with a ``./`` root line.

    Directories come before files at every level, each group sorted by path.
    """
    out = ["./\n"]
    _format_branch(tree, ROOT, "", out)
    return "".join(out)


def format_file_contents(files: Iterable[FileRecord]) -> str:
    """Concatenate file bodies under ``--- path ---`` headers, sorted by path.

    Every body is terminated by exactly one added newline when it lacks one.
    """
    out: list[str] = []
    for record in sorted(files, key=lambda item: item.relative_path):
        out.append(f"\n--- {record.relative_path} ---\n")
        out.append(record.content)
        if not record.content.endswith("\n"):
            out.append("\n")
    return "".join(out)


def format_project_context(context: ProjectContext, structure_only: bool = False) -> str:
    """Render the full report; ``structure_only`` drops the file contents section."""
    text = STRUCTURE_HEADER + format_directory_tree(context.tree)
    if structure_only:
        return text
    return text + CONTENTS_HEADER + format_file_contents(context.files)


__all__ = [
    "STRUCTURE_HEADER",
    "CONTENTS_HEADER",
    "format_directory_tree",
    "format_file_contents",
    "format_project_context",
]
