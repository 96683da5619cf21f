"""Layered ``.apcignore`` resolution.

Each directory may carry its own rule file with gitignore syntax. Rules are
compiled lazily, once per directory, and a path is resolved by walking from
its containing directory up to the scan root; the nearest directory with a
matching pattern decides.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import pathspec

logger = logging.getLogger(__name__)

RULE_FILE_NAME = ".apcignore"
GITIGNORE_FILE_NAME = ".gitignore"
DOT_IGNORE_FILE_NAME = ".ignore"

# Never emitted and never re-included by any rule.
ALWAYS_EXCLUDED_DIR_NAMES = frozenset({".git", ".idea", ".vscode"})
CONTROL_FILE_NAMES = frozenset({GITIGNORE_FILE_NAME, RULE_FILE_NAME})


class IgnoreRuleError(ValueError):
    """Raised when a rule file cannot be read or compiled."""

    def __init__(self, source: Path, reason: str) -> None:
        super().__init__(f"Invalid ignore rules in {source}: {reason}")
        self.source = source
        self.reason = reason


@dataclass(frozen=True)
class RuleSet:
    """Compiled patterns from one rule file, anchored at ``directory``."""

    directory: Path
    source: Path
    spec: pathspec.GitIgnoreSpec

    def verdict(self, path: Path, is_dir: bool) -> bool | None:
        """Return ``True`` if ignored, ``False`` if re-included, else ``None``.

        ``None`` means no pattern in this file matched ``path``. Directories
        are matched with a trailing slash so directory-only patterns never
        match a file of the same name.
        """
        try:
            relative = path.relative_to(self.directory).as_posix()
        except ValueError:
            return None
        if relative in ("", "."):
            return None
        if is_dir:
            relative += "/"
        return self.spec.check_file(relative).include


def compile_rules(directory: Path, source: Path, lines: list[str]) -> RuleSet:
    """Compile gitignore-style ``lines`` into a rule set rooted at ``directory``."""
    try:
        spec = pathspec.GitIgnoreSpec.from_lines(lines)
    except ValueError as exc:
        raise IgnoreRuleError(source, str(exc)) from exc
    return RuleSet(directory=directory, source=source, spec=spec)


def compile_rule_file(source: Path, directory: Path | None = None) -> RuleSet:
    """Read and compile ``source``; patterns are anchored at its directory by default."""
    try:
        text = source.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise IgnoreRuleError(source, f"not valid UTF-8 ({exc.reason})") from exc
    except OSError as exc:
        raise IgnoreRuleError(source, exc.strerror or str(exc)) from exc
    return compile_rules(directory if directory is not None else source.parent, source, text.splitlines())


def load_rule_file(directory: Path, file_name: str) -> RuleSet | None:
    """Compile ``directory / file_name`` when it exists, otherwise return ``None``."""
    source = directory / file_name
    if not source.is_file():
        return None
    rules = compile_rule_file(source, directory)
    logger.debug("loaded %d rule(s) from %s", len(rules.spec.patterns), source)
    return rules


def _is_within(path: Path, root: Path) -> bool:
    """Return whether ``path`` is at or under ``root``."""
    try:
        path.relative_to(root)
        return True
    except ValueError:
        return False


def ancestor_directories(path: Path, stop: Path) -> list[Path]:
    """Return ``path``'s containing directories, nearest first, ending at ``stop``.

    Returns an empty list when ``path`` is ``stop`` itself or lies outside it.
    """
    if path == stop or not _is_within(path, stop):
        return []
    directories: list[Path] = []
    current = path.parent
    while True:
        directories.append(current)
        if current == stop:
            break
        parent = current.parent
        if parent == current:
            break
        current = parent
    return directories


class DirectoryRuleLayer:
    """Per-run cache of one kind of rule file, keyed by absolute directory.

    ``root_only`` restricts resolution to the root's own rule file instead of
    consulting every directory between a path and the root.
    """

    def __init__(self, root: Path, rule_file_name: str, root_only: bool = False) -> None:
        self.root = root.resolve()
        self.rule_file_name = rule_file_name
        self.root_only = root_only
        self._rules: dict[Path, RuleSet | None] = {}

    def _absolute(self, path: Path) -> Path:
        return path if path.is_absolute() else self.root / path

    def load_rules_for(self, directory: Path) -> RuleSet | None:
        """Return the cached rule set for ``directory``, compiling it on first use.

        A directory without a rule file caches ``None``. Compilation errors
        propagate as :class:`IgnoreRuleError`.
        """
        key = self._absolute(directory)
        if key in self._rules:
            return self._rules[key]
        rules = load_rule_file(key, self.rule_file_name)
        self._rules[key] = rules
        return rules

    def cached_directories(self) -> list[Path]:
        """Return directories whose rule lookup has already happened."""
        return list(self._rules)

    def rule_verdict(self, path: Path, is_dir: bool) -> bool | None:
        """Let the nearest directory with a matching pattern decide for ``path``."""
        path = self._absolute(path)
        if self.root_only:
            directories = [self.root] if path != self.root and _is_within(path, self.root) else []
        else:
            directories = ancestor_directories(path, self.root)
        for directory in directories:
            rules = self.load_rules_for(directory)
            if rules is None:
                continue
            verdict = rules.verdict(path, is_dir)
            if verdict is not None:
                return verdict
        return None


class IgnoreRuleStore(DirectoryRuleLayer):
    """``.apcignore`` resolution plus the fixed exclusions that no rule can undo."""

    def __init__(self, root: Path, root_only: bool = False, rule_file_name: str = RULE_FILE_NAME) -> None:
        super().__init__(root, rule_file_name, root_only=root_only)

    def check(self, path: Path, is_dir: bool | None = None) -> bool | None:
        """Resolve ``path`` against the fixed exclusions and layered rule files.

        Returns ``True`` when excluded, ``False`` when a negation pattern
        explicitly re-includes it, and ``None`` when no rule has an opinion.
        """
        path = self._absolute(path)
        if path == self.root:
            return None
        try:
            parts = path.relative_to(self.root).parts
        except ValueError:
            parts = path.parts
        if any(part in ALWAYS_EXCLUDED_DIR_NAMES for part in parts):
            return True
        if path.name in CONTROL_FILE_NAMES:
            return True

        if is_dir is None:
            is_dir = path.is_dir()
        return self.rule_verdict(path, is_dir)

    def is_excluded(self, path: Path, is_dir: bool | None = None) -> bool:
        """Return whether ``path`` must be hidden from the walk and output."""
        return self.check(path, is_dir) is True


__all__ = [
    "RULE_FILE_NAME",
    "GITIGNORE_FILE_NAME",
    "DOT_IGNORE_FILE_NAME",
    "ALWAYS_EXCLUDED_DIR_NAMES",
    "CONTROL_FILE_NAMES",
    "IgnoreRuleError",
    "RuleSet",
    "compile_rules",
    "compile_rule_file",
    "load_rule_file",
    "ancestor_directories",
    "DirectoryRuleLayer",
    "IgnoreRuleStore",
]
