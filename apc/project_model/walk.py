"""Filesystem walk and file collection for one project scan."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from ..binary import is_binary
from ..gitignore import GitIgnoreLayer
from ..ignore_rules import DOT_IGNORE_FILE_NAME, DirectoryRuleLayer, IgnoreRuleStore
from .types import BINARY_PLACEHOLDER, FileRecord, ProjectContext

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 1_048_576


class ProjectPathError(ValueError):
    """Raised when the scan root is missing or not a directory."""


@dataclass(frozen=True)
class WalkEntry:
    """One visible path produced by the walk."""

    path: Path
    relative_path: str
    is_dir: bool


def to_relative(path: Path, root: Path) -> str:
    """Return ``path`` relative to ``root`` with forward slashes (``""`` for the root).

    Backslashes inside POSIX file names are kept; only real separators change.
    """
    try:
        relative = path.relative_to(root)
    except ValueError:
        relative = path
    text = relative.as_posix()
    return "" if text == "." else text.strip("/")


def _is_hidden_by_rules(
    path: Path,
    is_dir: bool,
    rules: IgnoreRuleStore,
    dot_ignore: DirectoryRuleLayer | None,
    vcs: GitIgnoreLayer | None,
) -> bool:
    # Highest precedence first; the first layer with an opinion decides.
    verdict = rules.check(path, is_dir)
    if verdict is None and dot_ignore is not None:
        verdict = dot_ignore.rule_verdict(path, is_dir)
    if verdict is None and vcs is not None:
        verdict = vcs.check(path, is_dir)
    return verdict is True


def _sorted_children(directory: Path) -> list[os.DirEntry[str]]:
    """Return directory entries sorted by name; an unreadable directory yields none."""
    try:
        with os.scandir(directory) as entries:
            return sorted(entries, key=lambda entry: entry.name)
    except OSError as exc:
        logger.warning("Error accessing path: %s", exc)
        return []


def _classify(entry: os.DirEntry[str]) -> tuple[bool, bool]:
    """Return ``(is_dir, descend)``; links to directories are listed but not entered."""
    if entry.is_dir(follow_symlinks=False):
        return True, True
    if entry.is_symlink() and entry.is_dir(follow_symlinks=True):
        return True, False
    return False, False


def iter_project_entries(
    root: Path,
    rules: IgnoreRuleStore,
    vcs: GitIgnoreLayer | None = None,
    dot_ignore: DirectoryRuleLayer | None = None,
) -> Iterator[WalkEntry]:
    """Yield visible directories and files under ``root`` depth-first, parents first.

    A directory's rule files are loaded before any of its children are
    checked, so every ancestor rule set is available to descendants.
    Excluded directories are not descended into. Symlinked directories are
    yielded as directories but never followed.
    """
    root = root.resolve()
    layers = [layer for layer in (rules, dot_ignore, vcs) if layer is not None]
    for layer in layers:
        layer.load_rules_for(root)

    stack: list[Path] = [root]
    while stack:
        directory = stack.pop()
        subdirectories: list[Path] = []
        for entry in _sorted_children(directory):
            path = Path(entry.path)
            try:
                is_dir, descend = _classify(entry)
            except OSError as exc:
                logger.warning("Error accessing path: %s", exc)
                continue
            if _is_hidden_by_rules(path, is_dir, rules, dot_ignore, vcs):
                continue
            if descend:
                for layer in layers:
                    layer.load_rules_for(path)
                subdirectories.append(path)
            yield WalkEntry(path=path, relative_path=to_relative(path, root), is_dir=is_dir)
        stack.extend(reversed(subdirectories))


def collect_file_record(
    path: Path,
    relative_path: str,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    include_binary: bool = False,
) -> FileRecord | None:
    """Read ``path`` and return its record, or ``None`` when it is filtered out.

    Files larger than ``max_file_size`` are skipped. Binary files are skipped
    unless ``include_binary`` is set, in which case undecodable content is
    replaced by :data:`BINARY_PLACEHOLDER`. Read errors propagate as
    ``OSError`` for the caller to report.
    """
    stat = path.stat()
    if not path.is_file():
        logger.debug("skipping non-regular file %s", relative_path)
        return None
    if stat.st_size > max_file_size:
        logger.debug("skipping %s: %d bytes exceeds limit of %d", relative_path, stat.st_size, max_file_size)
        return None

    content = path.read_bytes()
    if len(content) > max_file_size:
        logger.debug("skipping %s: grew past limit of %d bytes", relative_path, max_file_size)
        return None
    if not include_binary and is_binary(content):
        logger.debug("skipping binary file %s", relative_path)
        return None

    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError:
        if not include_binary:
            logger.debug("skipping undecodable file %s", relative_path)
            return None
        text = BINARY_PLACEHOLDER
    return FileRecord(relative_path=relative_path, content=text)


def collect_project_context(
    root: Path,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    include_binary: bool = False,
    root_rules_only: bool = False,
    vcs_ignore: bool = True,
) -> ProjectContext:
    """Walk ``root`` and collect the visible directory tree and file contents.

    Raises :class:`ProjectPathError` for an invalid root and
    :class:`~apc.ignore_rules.IgnoreRuleError` for a malformed rule file.
    Per-entry access errors are logged and skipped. ``.ignore`` files are
    honored in every directory, beneath ``.apcignore`` and above git.
    """
    if not root.exists() or not root.is_dir():
        raise ProjectPathError(f"Project path must be a valid directory: {root}")
    root = root.resolve()
    rules = IgnoreRuleStore(root, root_only=root_rules_only)
    dot_ignore = DirectoryRuleLayer(root, DOT_IGNORE_FILE_NAME)
    vcs = GitIgnoreLayer.discover(root) if vcs_ignore else None

    context = ProjectContext()
    for entry in iter_project_entries(root, rules, vcs, dot_ignore):
        if entry.is_dir:
            context.tree.add_directory(entry.relative_path)
            continue
        try:
            record = collect_file_record(entry.path, entry.relative_path, max_file_size, include_binary)
        except OSError as exc:
            logger.warning("Error accessing path: %s", exc)
            continue
        if record is not None:
            context.add_file(record)
    return context


__all__ = [
    "DEFAULT_MAX_FILE_SIZE",
    "ProjectPathError",
    "WalkEntry",
    "to_relative",
    "iter_project_entries",
    "collect_file_record",
    "collect_project_context",
]
