"""Session registry: record schema, name rules and storage backings."""

from multisession.session.memory import InMemorySessionStore
from multisession.session.names import (
    MAX_NAME_LENGTH,
    normalize_path,
    sanitize_session_name,
    validate_task_id,
)
from multisession.session.protocols import SessionStore
from multisession.session.schema import Session, SessionStatus
from multisession.session.storage import FileSessionStore, write_json_atomic

__all__ = [
    "FileSessionStore",
    "InMemorySessionStore",
    "MAX_NAME_LENGTH",
    "Session",
    "SessionStatus",
    "SessionStore",
    "normalize_path",
    "sanitize_session_name",
    "validate_task_id",
    "write_json_atomic",
]
