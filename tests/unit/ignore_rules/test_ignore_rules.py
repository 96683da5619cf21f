"""Tests for layered ``.apcignore`` resolution.

Covers fixed exclusions, per-directory scoping, negation precedence,
directory-only patterns and the per-run rule cache.
"""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from apc import ignore_rules
from apc.ignore_rules import (
    DOT_IGNORE_FILE_NAME,
    DirectoryRuleLayer,
    IgnoreRuleError,
    IgnoreRuleStore,
    ancestor_directories,
    compile_rules,
)


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class FixedExclusionTests(unittest.TestCase):
    def test_paths_without_rule_files_are_visible(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            nested = _write(root / "src" / "pkg" / "module.py", "x = 1\n")
            store = IgnoreRuleStore(root)

            self.assertFalse(store.is_excluded(nested))
            self.assertFalse(store.is_excluded(root / "src", is_dir=True))
            self.assertIsNone(store.check(nested))

    def test_vcs_and_ide_directories_are_always_excluded(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / ".apcignore", "!.git/\n!.idea/\n!config\n")
            store = IgnoreRuleStore(root)

            self.assertTrue(store.is_excluded(root / ".git", is_dir=True))
            self.assertTrue(store.is_excluded(root / ".git" / "config", is_dir=False))
            self.assertTrue(store.is_excluded(root / "sub" / ".idea", is_dir=True))
            self.assertTrue(store.is_excluded(root / ".vscode" / "settings.json", is_dir=False))

    def test_control_files_are_never_emitted(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            self.assertTrue(IgnoreRuleStore(root).is_excluded(root / ".gitignore", is_dir=False))
            self.assertTrue(IgnoreRuleStore(root).is_excluded(root / "docs" / ".apcignore", is_dir=False))

    def test_excluded_names_above_the_root_do_not_hide_the_project(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = (Path(tmp) / ".vscode" / "project").resolve()
            source = _write(root / "main.py", "print()\n")

            self.assertFalse(IgnoreRuleStore(root).is_excluded(source, is_dir=False))


class LayeredRuleTests(unittest.TestCase):
    def test_subdirectory_rules_do_not_leak_into_siblings(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "one" / ".apcignore", "notes.txt\n")
            first = _write(root / "one" / "notes.txt", "a")
            second = _write(root / "two" / "notes.txt", "b")
            top = _write(root / "notes.txt", "c")
            store = IgnoreRuleStore(root)

            self.assertTrue(store.is_excluded(first, is_dir=False))
            self.assertFalse(store.is_excluded(second, is_dir=False))
            self.assertFalse(store.is_excluded(top, is_dir=False))

    def test_later_negation_in_same_file_reincludes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / ".apcignore", "*.txt\n!keep.txt\n")
            store = IgnoreRuleStore(root)

            self.assertTrue(store.is_excluded(root / "drop.txt", is_dir=False))
            self.assertFalse(store.is_excluded(root / "keep.txt", is_dir=False))
            self.assertIs(store.check(root / "keep.txt", is_dir=False), False)

    def test_nested_negation_overrides_ancestor_exclusion(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / ".apcignore", "*.log\n")
            _write(root / "logs" / ".apcignore", "!x.log\n")
            store = IgnoreRuleStore(root)

            self.assertFalse(store.is_excluded(root / "logs", is_dir=True))
            self.assertFalse(store.is_excluded(root / "logs" / "x.log", is_dir=False))
            self.assertTrue(store.is_excluded(root / "logs" / "y.log", is_dir=False))
            self.assertTrue(store.is_excluded(root / "z.log", is_dir=False))

    def test_directory_only_pattern_skips_files_with_same_name(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / ".apcignore", "build/\n")
            store = IgnoreRuleStore(root)

            self.assertFalse(store.is_excluded(root / "build", is_dir=False))
            self.assertTrue(store.is_excluded(root / "build", is_dir=True))
            self.assertTrue(store.is_excluded(root / "pkg" / "build", is_dir=True))
            self.assertTrue(store.is_excluded(root / "build" / "out.txt", is_dir=False))

    def test_anchored_pattern_only_matches_at_its_own_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / ".apcignore", "/dist\n")
            store = IgnoreRuleStore(root)

            self.assertTrue(store.is_excluded(root / "dist", is_dir=True))
            self.assertFalse(store.is_excluded(root / "web" / "dist", is_dir=True))

    def test_comments_and_blank_lines_are_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / ".apcignore", "# generated files\n\n*.gen\n")
            store = IgnoreRuleStore(root)

            self.assertTrue(store.is_excluded(root / "a.gen", is_dir=False))
            self.assertFalse(store.is_excluded(root / "# generated files", is_dir=False))

    def test_is_dir_is_read_from_filesystem_when_omitted(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / ".apcignore", "cache/\n")
            (root / "cache").mkdir()

            self.assertTrue(IgnoreRuleStore(root).is_excluded(root / "cache"))

    def test_relative_paths_resolve_against_root(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / ".apcignore", "*.bak\n")

            self.assertTrue(IgnoreRuleStore(root).is_excluded(Path("sub/file.bak"), is_dir=False))

    def test_root_only_mode_ignores_nested_rule_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / ".apcignore", "*.log\n")
            _write(root / "logs" / ".apcignore", "!x.log\n*.txt\n")
            store = IgnoreRuleStore(root, root_only=True)

            self.assertTrue(store.is_excluded(root / "logs" / "x.log", is_dir=False))
            self.assertFalse(store.is_excluded(root / "logs" / "notes.txt", is_dir=False))


class DotIgnoreLayerTests(unittest.TestCase):
    def test_dot_ignore_files_resolve_nearest_first(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / ".ignore", "secret.txt\n*.key\n")
            _write(root / "vault" / ".ignore", "!public.key\n")
            layer = DirectoryRuleLayer(root, DOT_IGNORE_FILE_NAME)

            self.assertTrue(layer.rule_verdict(root / "secret.txt", is_dir=False))
            self.assertTrue(layer.rule_verdict(root / "vault" / "private.key", is_dir=False))
            self.assertIs(layer.rule_verdict(root / "vault" / "public.key", is_dir=False), False)
            self.assertIsNone(layer.rule_verdict(root / "readme.md", is_dir=False))

    def test_apcignore_store_does_not_read_dot_ignore(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / ".ignore", "secret.txt\n")

            self.assertFalse(IgnoreRuleStore(root).is_excluded(root / "secret.txt", is_dir=False))


class RuleCacheTests(unittest.TestCase):
    def test_rules_are_loaded_once_per_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / ".apcignore", "*.tmp\n")
            (root / "a" / "b").mkdir(parents=True)
            store = IgnoreRuleStore(root)

            with mock.patch("apc.ignore_rules.load_rule_file", wraps=ignore_rules.load_rule_file) as load:
                for name in ("one.tmp", "two.tmp", "three.txt"):
                    store.is_excluded(root / "a" / "b" / name, is_dir=False)
                first = store.load_rules_for(root)
                second = store.load_rules_for(root)

            self.assertIs(first, second)
            self.assertEqual(load.call_count, 3)
            self.assertEqual(
                set(store.cached_directories()),
                {root, root / "a", root / "a" / "b"},
            )

    def test_missing_rule_file_caches_none(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            store = IgnoreRuleStore(root)

            self.assertIsNone(store.load_rules_for(root))
            self.assertIn(root, store.cached_directories())

    def test_empty_rule_file_is_distinct_from_missing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / ".apcignore", "")

            rules = IgnoreRuleStore(root).load_rules_for(root)

            self.assertIsNotNone(rules)
            self.assertIsNone(rules.verdict(root / "anything.txt", is_dir=False))


class RuleErrorTests(unittest.TestCase):
    def test_undecodable_rule_file_is_fatal(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            source = root / ".apcignore"
            source.write_bytes(b"\xff\xfe\xfa*.log\n")

            with self.assertRaises(IgnoreRuleError) as exc_info:
                IgnoreRuleStore(root).load_rules_for(root)

            self.assertEqual(exc_info.exception.source, source)
            self.assertIn(str(source), str(exc_info.exception))

    def test_pattern_compile_failure_is_fatal(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / ".apcignore", "broken\n")
            with mock.patch(
                "apc.ignore_rules.pathspec.GitIgnoreSpec.from_lines",
                side_effect=ValueError("Invalid git pattern: 'broken'"),
            ):
                with self.assertRaises(IgnoreRuleError) as exc_info:
                    IgnoreRuleStore(root).is_excluded(root / "file.txt", is_dir=False)

            self.assertIn("Invalid git pattern", exc_info.exception.reason)


class HelperTests(unittest.TestCase):
    def test_ancestor_directories_walks_up_to_stop(self) -> None:
        root = Path("/project")
        self.assertEqual(
            ancestor_directories(root / "a" / "b" / "c.txt", root),
            [root / "a" / "b", root / "a", root],
        )
        self.assertEqual(ancestor_directories(root, root), [])
        self.assertEqual(ancestor_directories(Path("/elsewhere/x"), root), [])

    def test_rule_set_has_no_opinion_outside_its_directory(self) -> None:
        rules = compile_rules(Path("/project/sub"), Path("/project/sub/.apcignore"), ["*"])
        self.assertIsNone(rules.verdict(Path("/project/other.txt"), is_dir=False))
        self.assertTrue(rules.verdict(Path("/project/sub/any.txt"), is_dir=False))


if __name__ == "__main__":
    unittest.main()
