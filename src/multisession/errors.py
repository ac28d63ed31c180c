"""Error taxonomy for session coordination.

Every error carries structured fields so callers (dashboard, CLI, journal)
can react programmatically; ``to_dict()`` gives a JSON-ready form with the
error ``code`` plus those fields. Nothing in the core retries on its own.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

_JSON_SCALARS = (str, int, float, bool, type(None))


class MultisessionError(Exception):
    """Base class for all coordination errors."""

    code: ClassVar[str] = "error"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"error": self.code, "message": str(self)}
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if isinstance(value, list):
                value = list(value)
            elif not isinstance(value, _JSON_SCALARS):
                value = repr(value)
            data[f.name] = value
        return data


@dataclass
class ValidationError(MultisessionError):
    """Input rejected before any disk mutation.

    Raised for empty/too-long session names, malformed task identifiers,
    unknown enum values, unknown or immutable patch fields and bad paths.
    """

    code: ClassVar[str] = "validation_error"

    field: str
    value: Any
    reason: str

    def __str__(self) -> str:
        return f"Invalid {self.field}: {self.reason}"


@dataclass
class NotFoundError(MultisessionError):
    """The targeted record does not exist."""

    code: ClassVar[str] = "not_found"

    name: str
    kind: str = "session"

    def __str__(self) -> str:
        return f"{self.kind.capitalize()} '{self.name}' not found"


class SessionNotFoundError(NotFoundError):
    """A claim or release named a session that does not exist (or is closed)."""


@dataclass
class DuplicateError(MultisessionError):
    """Creation collided with an existing sanitized name."""

    code: ClassVar[str] = "duplicate"

    name: str

    def __str__(self) -> str:
        return f"Session '{self.name}' already exists"


@dataclass
class ConflictError(MultisessionError):
    """A claim collided with another active session's claim. Nothing was written."""

    code: ClassVar[str] = "conflict"

    path: str
    session: str
    conflicting_sessions: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        others = ", ".join(self.conflicting_sessions)
        return f"File '{self.path}' already in use by: {others}"


@dataclass
class CorruptRecordError(MultisessionError):
    """A stored record could not be parsed or did not match the Session shape."""

    code: ClassVar[str] = "corrupt_record"

    path: str
    reason: str

    def __str__(self) -> str:
        return f"Corrupt session record {self.path}: {self.reason}"


@dataclass
class VersionConflictError(MultisessionError):
    """Compare-and-swap failed: the record changed since it was read.

    Only raised when a caller passes ``expected_version``.
    """

    code: ClassVar[str] = "version_conflict"

    name: str
    expected: int
    actual: int

    def __str__(self) -> str:
        return (
            f"Session '{self.name}' was modified concurrently "
            f"(expected version {self.expected}, found {self.actual})"
        )
