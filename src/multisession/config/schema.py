"""Configuration schema dataclasses for multisession.

Defines the structure of configuration at all levels (system, user, project).
Every field has a default so partial configs merge cleanly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class StoreConfig:
    """Where session records live.

    Relative paths resolve against the project root; absolute and ``~`` paths
    are used as given. MULTISESSION_SESSIONS_DIR overrides ``sessions_dir``.

    Example config.yaml:
        store:
          sessions_dir: .multisession/sessions
          summary_file: .multisession/summary.json
    """

    sessions_dir: str = ".multisession/sessions"
    summary_file: str = ".multisession/summary.json"


@dataclass
class SessionDefaultsConfig:
    """Values applied when a session is created without explicit options."""

    focus: list[str] = field(default_factory=lambda: ["general"])
    directories: list[str] = field(default_factory=list)
    file_patterns: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class CoordinationConfig:
    """Claim protocol settings.

    ``strict`` turns on the opt-in hardening: claims are serialized through a
    project-wide file lock and record writes use compare-and-swap on the
    record version. Off by default, claims are advisory and best-effort.
    """

    strict: bool = False
    lock_timeout: float = 10.0  # Seconds to wait for the claim lock in strict mode


@dataclass
class AllocationConfig:
    """Task allocation scoring."""

    focus_weight: int = 10  # Score bonus when a focus tag appears in the task


@dataclass
class LifecycleConfig:
    """Thresholds for the maintenance operations in SessionLifecycle."""

    max_idle_hours: float = 24.0
    max_sessions: int = 5
    merge_threshold: float = 0.8
    similar_focus_threshold: float = 0.7
    similar_directory_threshold: float = 0.6
    auto_create_threshold: float = 0.8  # Work-analysis confidence needed to auto-create
    fit_threshold: float = 0.8  # Fit score an existing session must beat to be picked
    default_session: str = "main"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str | None = None  # DEBUG, INFO, WARNING, ERROR
    verbose: int | None = None  # 0-4, overrides level
    file: str | None = None  # Log file path
    # Per-component levels, e.g. {"claims": "debug"}; keys are child logger names
    components: dict[str, str] = field(default_factory=dict)


@dataclass
class Config:
    """Root configuration object."""

    store: StoreConfig = field(default_factory=StoreConfig)
    defaults: SessionDefaultsConfig = field(default_factory=SessionDefaultsConfig)
    coordination: CoordinationConfig = field(default_factory=CoordinationConfig)
    allocation: AllocationConfig = field(default_factory=AllocationConfig)
    lifecycle: LifecycleConfig = field(default_factory=LifecycleConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Unknown top-level sections, kept for collaborators (dashboard, journal)
    extra: dict[str, Any] = field(default_factory=dict)
