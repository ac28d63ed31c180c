"""Configuration file loading and caching.

Handles:
- YAML file parsing
- Environment variable overrides
- Config caching with reload support
- Conversion from dict to typed Config dataclass
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from multisession.config.merge import merge_configs
from multisession.config.paths import get_config_paths
from multisession.config.schema import (
    AllocationConfig,
    Config,
    CoordinationConfig,
    LifecycleConfig,
    LoggingConfig,
    SessionDefaultsConfig,
    StoreConfig,
)

# Not routed through multisession.logging: config loads before logging is set up
_log = logging.getLogger("multisession.config")

_cached_config: Config | None = None

_TRUTHY = {"1", "true", "yes", "on"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning empty dict if not found or invalid.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML as dict, or empty dict on error.
    """
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except yaml.YAMLError as e:
        _log.warning("Invalid YAML in %s: %s", path, e)
        return {}
    except PermissionError:
        _log.debug("Permission denied reading %s", path)
        return {}
    except OSError as e:
        _log.warning("Error reading %s: %s", path, e)
        return {}


def env_overrides() -> dict[str, Any]:
    """Build config dict from environment variables.

    Returns:
        Config dict with values from MULTISESSION_LOG, MULTISESSION_STRICT
        and MULTISESSION_SESSIONS_DIR.
    """
    overrides: dict[str, Any] = {}

    log_path = os.environ.get("MULTISESSION_LOG")
    if log_path:
        overrides.setdefault("logging", {})["file"] = log_path

    strict = os.environ.get("MULTISESSION_STRICT")
    if strict:
        overrides.setdefault("coordination", {})["strict"] = _as_bool(strict, False)

    sessions_dir = os.environ.get("MULTISESSION_SESSIONS_DIR")
    if sessions_dir:
        overrides.setdefault("store", {})["sessions_dir"] = sessions_dir

    return overrides


def _as_bool(value: Any, default: bool) -> bool:
    # YAML leaves quoted "false" as a string, which bool() would call True
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    if isinstance(value, int):
        return bool(value)
    return default


def _str_list(value: Any, default: list[str]) -> list[str]:
    if not isinstance(value, list):
        return list(default)
    return [str(v) for v in value if v is not None]


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def dict_to_config(data: dict[str, Any]) -> Config:
    """Convert merged dict to typed Config dataclass.

    Args:
        data: Merged configuration dictionary.

    Returns:
        Typed Config object.
    """
    store_data = _section(data, "store")
    store_defaults = StoreConfig()
    store = StoreConfig(
        sessions_dir=str(store_data.get("sessions_dir", store_defaults.sessions_dir)),
        summary_file=str(store_data.get("summary_file", store_defaults.summary_file)),
    )

    defaults_data = _section(data, "defaults")
    session_defaults = SessionDefaultsConfig()
    defaults = SessionDefaultsConfig(
        focus=_str_list(defaults_data.get("focus"), session_defaults.focus),
        directories=_str_list(defaults_data.get("directories"), session_defaults.directories),
        file_patterns=_str_list(defaults_data.get("file_patterns"), session_defaults.file_patterns),
    )

    coord_data = _section(data, "coordination")
    coordination = CoordinationConfig(
        strict=_as_bool(coord_data.get("strict"), False),
        lock_timeout=float(coord_data.get("lock_timeout", 10.0)),
    )

    alloc_data = _section(data, "allocation")
    allocation = AllocationConfig(
        focus_weight=int(alloc_data.get("focus_weight", 10)),
    )

    life_data = _section(data, "lifecycle")
    life_defaults = LifecycleConfig()
    lifecycle = LifecycleConfig(
        max_idle_hours=float(life_data.get("max_idle_hours", life_defaults.max_idle_hours)),
        max_sessions=int(life_data.get("max_sessions", life_defaults.max_sessions)),
        merge_threshold=float(life_data.get("merge_threshold", life_defaults.merge_threshold)),
        similar_focus_threshold=float(
            life_data.get("similar_focus_threshold", life_defaults.similar_focus_threshold)
        ),
        similar_directory_threshold=float(
            life_data.get("similar_directory_threshold", life_defaults.similar_directory_threshold)
        ),
        auto_create_threshold=float(
            life_data.get("auto_create_threshold", life_defaults.auto_create_threshold)
        ),
        fit_threshold=float(life_data.get("fit_threshold", life_defaults.fit_threshold)),
        default_session=str(life_data.get("default_session", life_defaults.default_session)),
    )

    log_data = _section(data, "logging")
    logging_config = LoggingConfig(
        level=log_data.get("level"),
        verbose=log_data.get("verbose"),
        file=log_data.get("file"),
        components={
            str(name): str(level)
            for name, level in _section(log_data, "components").items()
            if level is not None
        },
    )

    known_keys = {"store", "defaults", "coordination", "allocation", "lifecycle", "logging"}
    extra = {k: v for k, v in data.items() if k not in known_keys}

    return Config(
        store=store,
        defaults=defaults,
        coordination=coordination,
        allocation=allocation,
        lifecycle=lifecycle,
        logging=logging_config,
        extra=extra,
    )


def load_config(project_root: str | Path | None = None, reload: bool = False) -> Config:
    """Load and merge config from all sources.

    Priority order (highest to lowest):
    1. Environment variables
    2. Project config ($project_root/.multisession/config.yaml)
    3. User config
    4. System config

    Args:
        project_root: Project directory for project-level config.
        reload: Force reload even if cached.

    Returns:
        Merged Config object.
    """
    global _cached_config

    if _cached_config is not None and not reload and project_root is None:
        return _cached_config

    configs: list[dict[str, Any]] = []

    for path in get_config_paths(project_root):
        config_data = load_yaml_file(path)
        if config_data:
            _log.debug("Loaded config from %s", path)
            configs.append(config_data)

    env_config = env_overrides()
    if env_config:
        configs.append(env_config)

    config = dict_to_config(merge_configs(*configs))

    # Only the global (project-less) config is cached
    if project_root is None:
        _cached_config = config

    return config


def get_config() -> Config:
    """Get the cached global config, loading it on first use."""
    if _cached_config is None:
        return load_config()
    return _cached_config


def reset_config() -> None:
    """Reset cached config. Useful for testing or forcing a reload."""
    global _cached_config
    _cached_config = None
