"""Session record schema.

A Session is the persisted declaration of one contributor's active work
scope. The model forbids unknown keys so arbitrary JSON never passes the
store boundary as a Session.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from multisession.errors import CorruptRecordError, ValidationError

if TYPE_CHECKING:
    from multisession.config.schema import SessionDefaultsConfig

# Fields a patch may never touch
IMMUTABLE_FIELDS = frozenset({"id", "name", "created", "version"})

# Set only by close_record, so closing always drops claims
CLOSE_FIELDS = frozenset({"status", "closed"})


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStatus(str, Enum):
    """Lifecycle state of a session. CLOSED is terminal."""

    ACTIVE = "active"
    CLOSED = "closed"


def parse_status(value: SessionStatus | str) -> SessionStatus:
    """Coerce a status filter value, rejecting unknown names."""
    if isinstance(value, SessionStatus):
        return value
    try:
        return SessionStatus(value)
    except ValueError:
        raise ValidationError(
            "status", value, f"must be one of {[s.value for s in SessionStatus]}"
        ) from None


class Session(BaseModel):
    """One session record, keyed by its sanitized ``name``."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    created: datetime = Field(default_factory=utcnow)
    last_active: datetime = Field(default_factory=utcnow)
    focus: list[str] = Field(default_factory=lambda: ["general"])
    directories: list[str] = Field(default_factory=list)
    file_patterns: list[str] = Field(default_factory=lambda: ["*"])
    current_task: str | None = None
    active_files: list[str] = Field(default_factory=list)
    locked_files: list[str] = Field(default_factory=list)
    status: SessionStatus = SessionStatus.ACTIVE
    closed: datetime | None = None
    merged_from: str | None = None
    version: int = 1
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("focus", "directories", "file_patterns", "active_files", "locked_files")
    @classmethod
    def _unique(cls, value: list[str]) -> list[str]:
        # Set semantics, first occurrence keeps its position
        return list(dict.fromkeys(value))

    @property
    def is_active(self) -> bool:
        return self.status is SessionStatus.ACTIVE

    @property
    def workload(self) -> int:
        """Number of files currently claimed."""
        return len(self.active_files)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Session:
        return cls.model_validate(data)


def _describe(error: pydantic.ValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item.get("loc", ())) or "record"
        parts.append(f"{loc}: {item.get('msg', 'invalid')}")
    return "; ".join(parts)


def new_session(
    name: str,
    *,
    focus: list[str] | None = None,
    directories: list[str] | None = None,
    file_patterns: list[str] | None = None,
    current_task: str | None = None,
    metadata: dict[str, Any] | None = None,
    defaults: SessionDefaultsConfig | None = None,
) -> Session:
    """Build a fresh active record for an already-sanitized name.

    Options left as None fall back to ``defaults`` (or the model defaults).
    """
    data: dict[str, Any] = {"name": name, "current_task": current_task}
    if defaults is not None:
        data["focus"] = list(defaults.focus)
        data["directories"] = list(defaults.directories)
        data["file_patterns"] = list(defaults.file_patterns)
    if focus is not None:
        data["focus"] = focus
    if directories is not None:
        data["directories"] = directories
    if file_patterns is not None:
        data["file_patterns"] = file_patterns
    if metadata is not None:
        data["metadata"] = metadata

    try:
        return Session.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError("options", data, _describe(e)) from e


def apply_patch(session: Session, patch: Mapping[str, Any]) -> Session:
    """Shallow-merge ``patch`` into ``session`` and return the new record.

    Stamps ``last_active`` and bumps ``version``. The input record is not
    modified.

    Raises:
        ValidationError: For unknown, immutable or close-only fields, a
            closed session, or a patch that produces an invalid record.
    """
    if not isinstance(patch, Mapping):
        raise ValidationError("patch", patch, "patch must be a mapping of field names to values")

    unknown = sorted(set(patch) - set(Session.model_fields))
    if unknown:
        raise ValidationError("patch", unknown, f"unknown field(s): {', '.join(unknown)}")
    immutable = sorted(set(patch) & IMMUTABLE_FIELDS)
    if immutable:
        raise ValidationError("patch", immutable, f"immutable field(s): {', '.join(immutable)}")
    close_only = sorted(set(patch) & CLOSE_FIELDS)
    if close_only:
        raise ValidationError(
            "patch", close_only, f"field(s) {', '.join(close_only)} can only change through close"
        )
    if not session.is_active:
        raise ValidationError("status", session.status.value, f"session '{session.name}' is closed")

    return _advance(session, patch)


def close_record(session: Session) -> Session:
    """Closed copy of ``session`` with its claims dropped."""
    return _advance(
        session,
        {
            "status": SessionStatus.CLOSED,
            "active_files": [],
            "locked_files": [],
            "closed": utcnow(),
        },
    )


def _advance(session: Session, patch: Mapping[str, Any]) -> Session:
    data = session.model_dump()
    data.update(patch)
    data["last_active"] = utcnow()
    data["version"] = session.version + 1

    try:
        return Session.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError("patch", dict(patch), _describe(e)) from e


def parse_record(data: Any, source: str) -> Session:
    """Validate a decoded stored document read from ``source``.

    Raises:
        CorruptRecordError: If the document is not a Session.
    """
    if not isinstance(data, dict):
        raise CorruptRecordError(source, f"expected a JSON object, got {type(data).__name__}")
    try:
        return Session.model_validate(data)
    except pydantic.ValidationError as e:
        raise CorruptRecordError(source, _describe(e)) from e
