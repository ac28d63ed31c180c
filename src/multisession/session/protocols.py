"""Capability interface for session persistence.

ClaimCoordinator, TaskAllocator and SessionLifecycle depend only on this
protocol, so the backing (filesystem, in-memory fake, anything else) can be
swapped without touching them.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from multisession.session.schema import Session, SessionStatus


@runtime_checkable
class SessionStore(Protocol):
    """Durable CRUD over Session records keyed by sanitized name."""

    def create(
        self,
        name: str,
        *,
        focus: list[str] | None = None,
        directories: list[str] | None = None,
        file_patterns: list[str] | None = None,
        current_task: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Session:
        """Create a new active session. Raises DuplicateError on collision."""
        ...

    def read(self, name: str) -> Session | None:
        """Return the record, or None when it does not exist."""
        ...

    def update(
        self,
        name: str,
        patch: Mapping[str, Any],
        *,
        expected_version: int | None = None,
    ) -> Session:
        """Shallow-merge ``patch`` into an active record and persist it.

        ``status`` and ``closed`` are not patchable; closing goes through
        ``close``.
        """
        ...

    def list(self, status: SessionStatus | str | None = SessionStatus.ACTIVE) -> list[Session]:
        """Records matching ``status`` (None for all), sorted by name."""
        ...

    def close(self, name: str) -> Session:
        """Mark the session closed and drop its claims. Closed is terminal."""
        ...
