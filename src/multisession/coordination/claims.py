"""Advisory per-file claims.

A claim is membership of a path in a session's ``active_files``. Claiming
checks the current snapshot for other claimants and then writes; the two
steps are not atomic together. Two sessions claiming the same unclaimed
path at the same moment can therefore both succeed, and the double claim
only surfaces at the next conflict check. That is the documented contract
of the default mode: claims inform, they do not exclude.

Strict mode (opt-in) serializes claim/release through a store-wide lock and
writes with compare-and-swap on the record version, so a concurrent writer
turns into VersionConflictError instead of a silent overwrite.
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from multisession.coordination.conflicts import Conflict, claimants_of, compute_conflicts
from multisession.errors import ConflictError, SessionNotFoundError
from multisession.logging import get_logger
from multisession.session.names import normalize_path, sanitize_session_name

if TYPE_CHECKING:
    from multisession.session.protocols import SessionStore
    from multisession.session.schema import Session

log = get_logger("claims")


@dataclass
class ClaimResult:
    """Outcome of a successful claim or release."""

    session: str
    path: str
    changed: bool  # False for an idempotent no-op
    active_files: list[str] = field(default_factory=list)
    success: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "session": self.session,
            "path": self.path,
            "changed": self.changed,
            "active_files": list(self.active_files),
        }


class ClaimCoordinator:
    """Claim/release protocol over a SessionStore."""

    def __init__(
        self,
        store: SessionStore,
        *,
        strict: bool = False,
        lock: contextlib.AbstractContextManager[Any] | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            store: Where sessions live.
            strict: Enable the serialized compare-and-swap mode.
            lock: Store-wide lock held around each claim/release in strict mode.
        """
        self._store = store
        self._strict = strict
        self._lock = lock

    @property
    def strict(self) -> bool:
        return self._strict

    def _guard(self) -> contextlib.AbstractContextManager[Any]:
        if self._strict and self._lock is not None:
            return self._lock
        return contextlib.nullcontext()

    def _resolve(self, key: str, *, require_active: bool) -> Session:
        session = self._store.read(key)
        if session is None or (require_active and not session.is_active):
            raise SessionNotFoundError(key)
        return session

    def _expected(self, session: Session) -> int | None:
        return session.version if self._strict else None

    def claim(self, session_name: str, path: str) -> ClaimResult:
        """Claim ``path`` for ``session_name``.

        Re-claiming a path the session already holds succeeds without a
        write.

        Raises:
            SessionNotFoundError: If the session does not exist or is closed.
            ConflictError: If another active session claims ``path``.
            VersionConflictError: Strict mode only, if the record changed
                between read and write.
        """
        path = normalize_path(path)
        key = sanitize_session_name(session_name)

        with self._guard():
            session = self._resolve(key, require_active=True)
            if path in session.active_files:
                log.debug("Session '%s' already holds %s", key, path)
                return ClaimResult(key, path, changed=False, active_files=session.active_files)

            others = sorted(n for n in claimants_of(path, self._store.list()) if n != key)
            if others:
                log.warning("Claim of %s by '%s' refused, held by %s", path, key, ", ".join(others))
                raise ConflictError(path, key, others)

            updated = self._store.update(
                key,
                {"active_files": [*session.active_files, path]},
                expected_version=self._expected(session),
            )

        log.info("Session '%s' claimed %s", key, path)
        return ClaimResult(key, path, changed=True, active_files=updated.active_files)

    def release(self, session_name: str, path: str) -> ClaimResult:
        """Release ``path``. Releasing an unheld path is a successful no-op.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        path = normalize_path(path)
        key = sanitize_session_name(session_name)

        with self._guard():
            session = self._resolve(key, require_active=False)
            if path not in session.active_files:
                return ClaimResult(key, path, changed=False, active_files=session.active_files)

            updated = self._store.update(
                key,
                {"active_files": [f for f in session.active_files if f != path]},
                expected_version=self._expected(session),
            )

        log.info("Session '%s' released %s", key, path)
        return ClaimResult(key, path, changed=True, active_files=updated.active_files)

    def release_all(self, session_name: str) -> list[str]:
        """Drop every claim held by the session and return the released paths."""
        key = sanitize_session_name(session_name)

        with self._guard():
            session = self._resolve(key, require_active=False)
            if not session.active_files:
                return []
            self._store.update(key, {"active_files": []}, expected_version=self._expected(session))

        log.info("Session '%s' released %d file(s)", key, len(session.active_files))
        return list(session.active_files)

    def check(self, path: str, session_name: str | None = None) -> list[str]:
        """Names of active sessions, other than ``session_name``, claiming ``path``."""
        path = normalize_path(path)
        key = sanitize_session_name(session_name) if session_name is not None else None
        return [n for n in claimants_of(path, self._store.list()) if n != key]

    def conflicts(self) -> list[Conflict]:
        """Current conflicts across all active sessions."""
        return compute_conflicts(self._store.list())
