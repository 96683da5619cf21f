"""Version-control ignore layer.

Mirrors git's own exclude sources for a scan root that lives inside a git
work tree: nested ``.gitignore`` files from the repository top level down,
the repository-local ``.git/info/exclude`` and the user's global excludes
file. The layer sits beneath the ``.apcignore`` rules and is consulted only
when those have no opinion about a path.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path

from .ignore_rules import GITIGNORE_FILE_NAME, RuleSet, ancestor_directories, compile_rule_file, load_rule_file

logger = logging.getLogger(__name__)

GIT_DIR_NAME = ".git"


def find_repository_root(path: Path) -> Path | None:
    """Return the nearest directory at or above ``path`` holding a ``.git`` entry."""
    current = path.resolve()
    while True:
        if (current / GIT_DIR_NAME).exists():
            return current
        parent = current.parent
        if parent == current:
            return None
        current = parent


def _configured_excludes_file() -> Path | None:
    """Ask git for ``core.excludesFile``; ``None`` when unset or git is unavailable."""
    if shutil.which("git") is None:
        return None
    try:
        proc = subprocess.run(
            ["git", "config", "--global", "--get", "core.excludesFile"],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    value = proc.stdout.strip()
    if not value:
        return None
    return Path(value).expanduser()


def global_excludes_file() -> Path | None:
    """Locate the global excludes file the way git does.

    ``core.excludesFile`` wins; otherwise ``$XDG_CONFIG_HOME/git/ignore``
    (``~/.config/git/ignore`` when the variable is unset). Returns ``None``
    when the resolved file does not exist.
    """
    candidate = _configured_excludes_file()
    if candidate is None:
        config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
        candidate = Path(config_home) / "git" / "ignore"
    return candidate if candidate.is_file() else None


def _repository_excludes_file(repo_root: Path) -> Path | None:
    """Return ``.git/info/exclude`` when ``.git`` is a real directory that has one."""
    candidate = repo_root / GIT_DIR_NAME / "info" / "exclude"
    return candidate if candidate.is_file() else None


class GitIgnoreLayer:
    """Resolve paths against git's exclude sources for one repository.

    Per-directory ``.gitignore`` rule sets are cached for the run, like the
    ``.apcignore`` store. Precedence follows git: the nearest ``.gitignore``
    with a matching pattern decides, then the repository exclude file, then
    the global excludes file.
    """

    def __init__(self, repo_root: Path, fallback_rules: list[RuleSet] | None = None) -> None:
        self.repo_root = repo_root.resolve()
        self.fallback_rules = list(fallback_rules or [])
        self._rules: dict[Path, RuleSet | None] = {}

    @classmethod
    def discover(cls, root: Path) -> GitIgnoreLayer | None:
        """Build the layer for ``root`` or return ``None`` outside a git work tree."""
        repo_root = find_repository_root(root)
        if repo_root is None:
            return None
        fallback_rules: list[RuleSet] = []
        for source in (_repository_excludes_file(repo_root), global_excludes_file()):
            if source is not None:
                fallback_rules.append(compile_rule_file(source, repo_root))
        logger.debug("git ignore layer active for %s (repository %s)", root, repo_root)
        return cls(repo_root, fallback_rules)

    def load_rules_for(self, directory: Path) -> RuleSet | None:
        """Return the cached ``.gitignore`` rule set for ``directory``."""
        if directory in self._rules:
            return self._rules[directory]
        rules = load_rule_file(directory, GITIGNORE_FILE_NAME)
        self._rules[directory] = rules
        return rules

    def check(self, path: Path, is_dir: bool) -> bool | None:
        """Return ``True`` if git ignores ``path``, ``False`` if re-included, else ``None``."""
        for directory in ancestor_directories(path, self.repo_root):
            rules = self.load_rules_for(directory)
            if rules is None:
                continue
            verdict = rules.verdict(path, is_dir)
            if verdict is not None:
                return verdict
        for rules in self.fallback_rules:
            verdict = rules.verdict(path, is_dir)
            if verdict is not None:
                return verdict
        return None

    def is_ignored(self, path: Path, is_dir: bool) -> bool:
        """Return whether git would ignore ``path``."""
        return self.check(path, is_dir) is True


__all__ = [
    "GIT_DIR_NAME",
    "find_repository_root",
    "global_excludes_file",
    "GitIgnoreLayer",
]
