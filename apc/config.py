"""Saved scan defaults in a small JSON file.

Lets repeated runs skip the same flags. Reading never raises: a missing or
broken file simply means the built-in options apply.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from .project_model import DEFAULT_MAX_FILE_SIZE

CONFIG_ENV_VAR = "APC_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "apc.json"


@dataclass(frozen=True)
class ScanDefaults:
    """Option defaults applied before command-line overrides."""

    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    include_binary: bool = False
    root_rules_only: bool = False
    vcs_ignore: bool = True


def config_path() -> Path:
    """Return the config file location, honoring ``$APC_CONFIG``."""
    override = os.environ.get(CONFIG_ENV_VAR)
    return Path(override).expanduser() if override else DEFAULT_CONFIG_PATH


def load_config() -> dict[str, object]:
    """Read the apc settings file as a dict.

    A file that is absent, cannot be read, is not JSON, or holds something
    other than an object yields ``{}`` so scans fall back to built-in options.
    """
    try:
        data = json.loads(config_path().read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Write ``data`` to the settings file, indented, creating parent folders.

    Saving defaults is best effort: a scan never fails because the settings
    file could not be written.
    """
    path = config_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError):
        pass


def _load_bool(data: dict[str, object], key: str, default: bool) -> bool:
    """Only explicit booleans are accepted; anything else falls back to ``default``."""
    value = data.get(key)
    return value if isinstance(value, bool) else default


def _load_positive_int(data: dict[str, object], key: str, default: int) -> int:
    """Booleans, non-integers and values below 1 fall back to ``default``."""
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return default
    return value


def load_scan_defaults() -> ScanDefaults:
    """Return scan defaults from config, field by field, with built-in fallbacks."""
    data = load_config()
    builtin = ScanDefaults()
    return ScanDefaults(
        max_file_size=_load_positive_int(data, "max_file_size", builtin.max_file_size),
        include_binary=_load_bool(data, "include_binary", builtin.include_binary),
        root_rules_only=_load_bool(data, "root_rules_only", builtin.root_rules_only),
        vcs_ignore=_load_bool(data, "vcs_ignore", builtin.vcs_ignore),
    )


def save_scan_defaults(defaults: ScanDefaults) -> None:
    """Persist ``defaults`` while keeping unrelated keys already in the file."""
    config = load_config()
    config["max_file_size"] = int(defaults.max_file_size)
    config["include_binary"] = bool(defaults.include_binary)
    config["root_rules_only"] = bool(defaults.root_rules_only)
    config["vcs_ignore"] = bool(defaults.vcs_ignore)
    save_config(config)


__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATH",
    "ScanDefaults",
    "config_path",
    "load_config",
    "save_config",
    "load_scan_defaults",
    "save_scan_defaults",
]
