"""Name and identifier validation.

Session names double as file names, so they are sanitized before use as a
record key.
"""

from __future__ import annotations

import re
from pathlib import PurePath
from typing import Any

from multisession.errors import ValidationError

MAX_NAME_LENGTH = 50

_INVALID_NAME_CHARS = re.compile(r'[<>:"/\\|?*]')
_TASK_ID = re.compile(r"^[A-Za-z0-9_-]+$")


def sanitize_session_name(name: Any) -> str:
    """Return the filesystem-safe form of a session name.

    Each of ``< > : " / \\ | ? *`` becomes ``_`` and surrounding whitespace is
    trimmed. The result must be 1-50 characters long.

    Raises:
        ValidationError: If ``name`` is not a non-empty string or the
            sanitized result is empty or too long.
    """
    if not isinstance(name, str) or not name:
        raise ValidationError("name", name, "session name must be a non-empty string")

    sanitized = _INVALID_NAME_CHARS.sub("_", name).strip()

    if not sanitized:
        raise ValidationError("name", name, "session name cannot be empty after sanitization")
    if len(sanitized) > MAX_NAME_LENGTH:
        raise ValidationError(
            "name", name, f"session name too long (max {MAX_NAME_LENGTH} characters)"
        )
    return sanitized


def validate_task_id(task_id: Any) -> str:
    """Check a task identifier used by the journaling layer.

    Raises:
        ValidationError: Unless ``task_id`` is a non-empty string of letters,
            digits, hyphens and underscores.
    """
    if not isinstance(task_id, str) or not task_id:
        raise ValidationError("task_id", task_id, "task ID must be a non-empty string")
    if not _TASK_ID.match(task_id):
        raise ValidationError(
            "task_id",
            task_id,
            "task ID can only contain letters, numbers, hyphens, and underscores",
        )
    return task_id


def normalize_path(path: Any) -> str:
    """Normalize a claimed path to POSIX form so equal paths compare equal."""
    if not isinstance(path, str) or not path.strip():
        raise ValidationError("path", path, "path must be a non-empty string")
    return PurePath(path.strip()).as_posix()
