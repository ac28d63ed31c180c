"""Backing-independent SessionStore behaviour.

Subclasses supply raw record access (fetch, persist, enumerate, lock); this
class owns validation, duplicate detection, patch semantics, the optional
compare-and-swap check and listing order, so every backing behaves alike.
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

from multisession.errors import DuplicateError, NotFoundError, VersionConflictError
from multisession.logging import get_logger
from multisession.session.names import sanitize_session_name
from multisession.session.schema import (
    Session,
    SessionStatus,
    apply_patch,
    close_record,
    new_session,
    parse_status,
)

if TYPE_CHECKING:
    from multisession.config.schema import SessionDefaultsConfig

log = get_logger("storage")


class BaseSessionStore:
    """Shared create/read/update/list/close logic."""

    def __init__(self, defaults: SessionDefaultsConfig | None = None) -> None:
        self._defaults = defaults

    # -- hooks ---------------------------------------------------------------

    def _fetch(self, key: str) -> Session | None:
        raise NotImplementedError

    def _persist(self, session: Session) -> None:
        raise NotImplementedError

    def _iter_records(self) -> Iterator[Session]:
        """Yield every readable record; unreadable ones are skipped and logged."""
        raise NotImplementedError

    def _record_lock(self, key: str) -> contextlib.AbstractContextManager[Any]:
        return contextlib.nullcontext()

    def _membership_changed(self) -> None:
        """Called after a create, close or status change."""

    # -- SessionStore ----------------------------------------------------------

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
        key = sanitize_session_name(name)
        session = new_session(
            key,
            focus=focus,
            directories=directories,
            file_patterns=file_patterns,
            current_task=current_task,
            metadata=metadata,
            defaults=self._defaults,
        )
        if self._fetch(key) is not None:
            raise DuplicateError(key)

        self._persist(session)
        log.info("Session '%s' created with ID %s", key, session.id)
        self._membership_changed()
        return session

    def read(self, name: str) -> Session | None:
        return self._fetch(sanitize_session_name(name))

    def update(
        self,
        name: str,
        patch: Mapping[str, Any],
        *,
        expected_version: int | None = None,
    ) -> Session:
        key = sanitize_session_name(name)
        if expected_version is None:
            return self._update(key, patch, None)
        with self._record_lock(key):
            return self._update(key, patch, expected_version)

    def _update(
        self, key: str, patch: Mapping[str, Any], expected_version: int | None
    ) -> Session:
        current = self._fetch(key)
        if current is None:
            raise NotFoundError(key)
        if expected_version is not None and current.version != expected_version:
            raise VersionConflictError(key, expected_version, current.version)

        updated = apply_patch(current, patch)
        self._persist(updated)
        log.debug("Session '%s' updated to version %d", key, updated.version)
        return updated

    def list(self, status: SessionStatus | str | None = SessionStatus.ACTIVE) -> list[Session]:
        wanted = parse_status(status) if status is not None else None
        sessions = [s for s in self._iter_records() if wanted is None or s.status is wanted]
        sessions.sort(key=lambda s: s.name)
        return sessions

    def close(self, name: str) -> Session:
        """Close the session and drop its claims. Closing twice is a no-op."""
        key = sanitize_session_name(name)
        current = self._fetch(key)
        if current is None:
            raise NotFoundError(key)
        if not current.is_active:
            return current

        session = close_record(current)
        self._persist(session)
        log.info("Session '%s' closed", key)
        self._membership_changed()
        return session
