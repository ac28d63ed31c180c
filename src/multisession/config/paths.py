"""Where multisession reads configuration and keeps shared state.

Config files are layered system, user, project (lowest to highest). The
shared store (session records and the summary file) lives under the
project root unless the config points it somewhere else.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

CONFIG_FILENAME = "config.yaml"
APP_NAME = "multisession"
PROJECT_DIRNAME = ".multisession"


def _windows_dir(env_var: str) -> Path | None:
    base = os.environ.get(env_var)
    return Path(base) / APP_NAME if base else None


def _user_config_dir() -> Path | None:
    if sys.platform == "win32":
        return _windows_dir("APPDATA")

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / APP_NAME

    home = Path.home()
    if (home / ".config").exists():
        return home / ".config" / APP_NAME
    return home / PROJECT_DIRNAME


def get_system_config_path() -> Path | None:
    """System-wide config file (may not exist).

    ``/etc/multisession/config.yaml``, or ``%PROGRAMDATA%`` on Windows.
    """
    if sys.platform == "win32":
        base = _windows_dir("PROGRAMDATA")
        return base / CONFIG_FILENAME if base else None
    return Path("/etc") / APP_NAME / CONFIG_FILENAME


def get_user_config_path() -> Path | None:
    """Per-user config file (may not exist).

    Checks ``$XDG_CONFIG_HOME``, then ``~/.config`` when present, then
    ``~/.multisession``. Uses ``%APPDATA%`` on Windows.
    """
    config_dir = _user_config_dir()
    return config_dir / CONFIG_FILENAME if config_dir else None


def get_project_dir(project_root: str | Path) -> Path:
    """The ``.multisession`` directory of a shared project."""
    return Path(project_root) / PROJECT_DIRNAME


def get_project_config_path(project_root: str | Path) -> Path:
    return get_project_dir(project_root) / CONFIG_FILENAME


def get_config_paths(project_root: str | Path | None = None) -> list[Path]:
    """Config files in merge order; later entries override earlier ones."""
    candidates = [get_system_config_path(), get_user_config_path()]
    if project_root:
        candidates.append(get_project_config_path(project_root))
    return [path for path in candidates if path is not None]


def resolve_store_path(project_root: str | Path, configured: str | Path) -> Path:
    """Resolve a configured store location against ``project_root``.

    ``~`` expands to the user's home. Absolute paths are used as given, so a
    team can keep sessions on a shared mount outside the checkout.
    """
    path = Path(os.path.expanduser(str(configured)))
    if path.is_absolute():
        return path
    return Path(project_root) / path
