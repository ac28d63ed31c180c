"""Configuration management for multisession.

Provides hierarchical YAML-based configuration with:
- System-level config (/etc/multisession/ or %PROGRAMDATA%)
- User-level config (~/.config/multisession/, ~/.multisession/ or %APPDATA%)
- Project-level config ($project_root/.multisession/)
- Environment variable overrides (highest priority)

Example usage:
    from multisession.config import load_config

    config = load_config(project_root="/path/to/project")
    print(config.coordination.strict)
"""

from multisession.config.loader import (
    get_config,
    load_config,
    reset_config,
)
from multisession.config.paths import (
    get_config_paths,
    get_project_config_path,
    get_project_dir,
    get_system_config_path,
    get_user_config_path,
    resolve_store_path,
)
from multisession.config.schema import (
    AllocationConfig,
    Config,
    CoordinationConfig,
    LifecycleConfig,
    LoggingConfig,
    SessionDefaultsConfig,
    StoreConfig,
)

__all__ = [
    # Main API
    "Config",
    "load_config",
    "get_config",
    "reset_config",
    # Schema types
    "AllocationConfig",
    "CoordinationConfig",
    "LifecycleConfig",
    "LoggingConfig",
    "SessionDefaultsConfig",
    "StoreConfig",
    # Path utilities
    "get_config_paths",
    "get_system_config_path",
    "get_user_config_path",
    "get_project_config_path",
    "get_project_dir",
    "resolve_store_path",
]
