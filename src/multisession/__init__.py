"""multisession: coordinate several agents editing one project tree."""

__version__ = "0.1.0"

from multisession.config import Config, get_config, load_config
from multisession.coordination import (
    ClaimCoordinator,
    ClaimResult,
    Conflict,
    SessionLifecycle,
    TaskAllocator,
    TaskRecommendation,
    WorkContext,
    compute_conflicts,
)
from multisession.coordinator import Coordinator
from multisession.errors import (
    ConflictError,
    CorruptRecordError,
    DuplicateError,
    MultisessionError,
    NotFoundError,
    SessionNotFoundError,
    ValidationError,
    VersionConflictError,
)
from multisession.logging import get_logger, setup_logging
from multisession.session import (
    FileSessionStore,
    InMemorySessionStore,
    Session,
    SessionStatus,
    SessionStore,
    sanitize_session_name,
)

__all__ = [
    # Entry point
    "Coordinator",
    # Sessions
    "FileSessionStore",
    "InMemorySessionStore",
    "Session",
    "SessionStatus",
    "SessionStore",
    "sanitize_session_name",
    # Coordination
    "ClaimCoordinator",
    "ClaimResult",
    "Conflict",
    "SessionLifecycle",
    "TaskAllocator",
    "TaskRecommendation",
    "WorkContext",
    "compute_conflicts",
    # Errors
    "ConflictError",
    "CorruptRecordError",
    "DuplicateError",
    "MultisessionError",
    "NotFoundError",
    "SessionNotFoundError",
    "ValidationError",
    "VersionConflictError",
    # Config / logging
    "Config",
    "get_config",
    "load_config",
    "get_logger",
    "setup_logging",
]
