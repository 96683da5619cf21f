"""Parent-to-children mapping for accepted paths.

Paths are root-relative, slash-separated strings; the root is ``""``.
Parents are derived from the path text, never from live object links.
"""

from __future__ import annotations

import posixpath

ROOT = ""


def parent_of(relative_path: str) -> str:
    """Return the parent directory of ``relative_path`` (``""`` for top-level entries)."""
    return posixpath.dirname(relative_path)


class DirectoryTree:
    """Directory records keyed by relative path, each holding its child paths.

    A path is a directory exactly when it is a key of :attr:`children`.
    Child sets are unordered; renderers sort them.
    """

    def __init__(self) -> None:
        self.children: dict[str, set[str]] = {ROOT: set()}

    def is_directory(self, relative_path: str) -> bool:
        return relative_path in self.children

    def _link(self, relative_path: str) -> None:
        parent = parent_of(relative_path)
        if parent not in self.children:
            self.add_directory(parent)
        self.children[parent].add(relative_path)

    def add_directory(self, relative_path: str) -> None:
        """Record ``relative_path`` as a directory and attach it to its parent.

        Missing ancestors are created on the way up so every directory other
        than the root hangs off exactly one parent.
        """
        if relative_path == ROOT:
            return
        self.children.setdefault(relative_path, set())
        self._link(relative_path)

    def add_file(self, relative_path: str) -> None:
        """Attach file ``relative_path`` to its parent directory."""
        self._link(relative_path)


__all__ = ["ROOT", "parent_of", "DirectoryTree"]
