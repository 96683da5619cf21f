"""Domain model for one project scan.

This package contains the non-rendering pieces:
- file records and the per-run project context
- the parent-to-children directory tree
- the rule-aware filesystem walk and file collection
"""

from __future__ import annotations

from .tree import ROOT, DirectoryTree, parent_of
from .types import BINARY_PLACEHOLDER, FileRecord, ProjectContext
from .walk import (
    DEFAULT_MAX_FILE_SIZE,
    ProjectPathError,
    WalkEntry,
    collect_file_record,
    collect_project_context,
    iter_project_entries,
    to_relative,
)

__all__ = [
    "ROOT",
    "DirectoryTree",
    "parent_of",
    "BINARY_PLACEHOLDER",
    "FileRecord",
    "ProjectContext",
    "DEFAULT_MAX_FILE_SIZE",
    "ProjectPathError",
    "WalkEntry",
    "collect_file_record",
    "collect_project_context",
    "iter_project_entries",
    "to_relative",
]
