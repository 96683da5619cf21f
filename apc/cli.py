"""Command-line front door for apc.

Parses CLI options, merges them over persisted defaults, and scans the
target directory. The rendered report goes to stdout or to ``--output``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import ScanDefaults, load_scan_defaults, save_scan_defaults
from .ignore_rules import IgnoreRuleError
from .project_model import ProjectPathError, collect_project_context
from .render import format_project_context

LOG_FORMAT = "apc: %(levelname)s: %(message)s"


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _configure_logging(verbose: bool) -> None:
    """Send diagnostics to stderr so they never mix with the report."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger = logging.getLogger("apc")
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apc",
        description="AI Project Context - prepares project code context for AI consumption.",
    )
    parser.add_argument("path", help="Path to the project directory.")
    parser.add_argument("-o", "--output", metavar="OUTPUT", help="Output file path (defaults to stdout).")
    parser.add_argument(
        "--max-file-size",
        metavar="SIZE",
        type=_positive_int,
        default=None,
        help="Maximum file size in bytes to include (default: 1048576).",
    )
    parser.add_argument(
        "--include-binary",
        action="store_true",
        default=None,
        help="Include binary files (with placeholder content).",
    )
    parser.add_argument(
        "--structure-only",
        action="store_true",
        help="Only output the directory structure without file contents.",
    )
    parser.add_argument(
        "--root-rules-only",
        action="store_true",
        default=None,
        help="Only honor the .apcignore file at the project root.",
    )
    parser.add_argument(
        "--no-vcs-ignore",
        dest="vcs_ignore",
        action="store_false",
        default=None,
        help="Do not apply .gitignore and git exclude files.",
    )
    parser.add_argument(
        "--save-defaults",
        action="store_true",
        help="Persist the effective scan options as defaults for later runs.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Report skipped files on stderr.")
    return parser


def resolve_scan_options(args: argparse.Namespace, defaults: ScanDefaults) -> ScanDefaults:
    """Overlay explicitly given command-line options on ``defaults``."""
    return ScanDefaults(
        max_file_size=args.max_file_size if args.max_file_size is not None else defaults.max_file_size,
        include_binary=args.include_binary if args.include_binary is not None else defaults.include_binary,
        root_rules_only=args.root_rules_only if args.root_rules_only is not None else defaults.root_rules_only,
        vcs_ignore=args.vcs_ignore if args.vcs_ignore is not None else defaults.vcs_ignore,
    )


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments, scan the project and write the report.

    Fatal conditions (invalid root, malformed rule file, unwritable output)
    raise ``SystemExit`` with a readable message before anything is written.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    options = resolve_scan_options(args, load_scan_defaults())
    if args.save_defaults:
        save_scan_defaults(options)

    project_path = Path(args.path)
    try:
        context = collect_project_context(
            project_path,
            max_file_size=options.max_file_size,
            include_binary=options.include_binary,
            root_rules_only=options.root_rules_only,
            vcs_ignore=options.vcs_ignore,
        )
    except (ProjectPathError, IgnoreRuleError) as exc:
        raise SystemExit(str(exc)) from exc

    formatted_output = format_project_context(context, structure_only=args.structure_only)

    if args.output is None:
        print(formatted_output)
        return
    output_path = Path(args.output)
    try:
        output_path.write_text(formatted_output, encoding="utf-8")
    except OSError as exc:
        raise SystemExit(f"Cannot write output to {output_path}: {exc.strerror or exc}") from exc
    print(f"Project context written to: {output_path}")


if __name__ == "__main__":
    main()
