"""Entry point for collaborators (dashboard, journal, CLI).

Coordinator wires a SessionStore to the claim protocol, the allocator and
the lifecycle maintenance, and exposes the operations those collaborators
call. Everything it returns is JSON-serializable through ``to_dict()``.
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

from multisession.config import Config, load_config
from multisession.coordination.allocator import TaskAllocator, TaskRecommendation
from multisession.coordination.claims import ClaimCoordinator, ClaimResult
from multisession.coordination.conflicts import Conflict, compute_conflicts
from multisession.coordination.lifecycle import SessionLifecycle
from multisession.logging import get_logger
from multisession.session.memory import InMemorySessionStore
from multisession.session.protocols import SessionStore
from multisession.session.schema import Session, SessionStatus
from multisession.session.storage import FileSessionStore

log = get_logger()


class Coordinator:
    """Session registry, claims and task allocation for one project.

    Example:
        coord = Coordinator.open("/path/to/project")
        coord.create_session("frontend", focus=["ui"])
        coord.claim_file("frontend", "src/app.css")
    """

    def __init__(
        self,
        store: SessionStore,
        config: Config | None = None,
        *,
        claim_lock: contextlib.AbstractContextManager[Any] | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            store: Backing store for sessions.
            config: Settings; defaults apply when omitted.
            claim_lock: Lock for strict mode. When omitted and strict mode is
                on, the store's own ``claim_lock()`` is used if it has one.
        """
        self._config = config or Config()
        self._store = store

        strict = self._config.coordination.strict
        if strict and claim_lock is None:
            factory = getattr(store, "claim_lock", None)
            if factory is not None:
                claim_lock = factory()

        self._claims = ClaimCoordinator(store, strict=strict, lock=claim_lock)
        self._allocator = TaskAllocator(self._config.allocation.focus_weight)
        self._lifecycle = SessionLifecycle(store, self._config.lifecycle)

    @classmethod
    def open(cls, project_root: str | Path = ".", config: Config | None = None) -> Coordinator:
        """Coordinator over the on-disk store of ``project_root``.

        Loads the layered configuration for that project unless ``config``
        is given.
        """
        config = config or load_config(project_root=project_root)
        store = FileSessionStore.for_project(project_root, config)
        log.debug("Opened session store at %s", store.sessions_dir)
        return cls(store, config)

    @classmethod
    def in_memory(cls, config: Config | None = None) -> Coordinator:
        """Coordinator over a fresh in-memory store."""
        config = config or Config()
        return cls(InMemorySessionStore(config.defaults), config)

    @property
    def config(self) -> Config:
        return self._config

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def claims(self) -> ClaimCoordinator:
        return self._claims

    @property
    def allocator(self) -> TaskAllocator:
        return self._allocator

    @property
    def lifecycle(self) -> SessionLifecycle:
        return self._lifecycle

    # -- session registry ------------------------------------------------------

    def create_session(
        self,
        name: str,
        *,
        focus: list[str] | None = None,
        directories: list[str] | None = None,
        file_patterns: list[str] | None = None,
        current_task: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Session:
        return self._store.create(
            name,
            focus=focus,
            directories=directories,
            file_patterns=file_patterns,
            current_task=current_task,
            metadata=metadata,
        )

    def get_session(self, name: str) -> Session | None:
        return self._store.read(name)

    def list_active_sessions(self) -> list[Session]:
        return self._store.list(SessionStatus.ACTIVE)

    def list_sessions(self, status: SessionStatus | str | None = None) -> list[Session]:
        """All sessions by default; pass a status to filter."""
        return self._store.list(status)

    def update_session(self, name: str, patch: Mapping[str, Any]) -> Session:
        return self._store.update(name, patch)

    def close_session(self, name: str) -> Session:
        return self._store.close(name)

    # -- claims ----------------------------------------------------------------

    def compute_conflicts(self) -> list[Conflict]:
        return compute_conflicts(self.list_active_sessions())

    def claim_file(self, session_name: str, path: str) -> ClaimResult:
        return self._claims.claim(session_name, path)

    def release_file(self, session_name: str, path: str) -> ClaimResult:
        return self._claims.release(session_name, path)

    def check_file(self, path: str, session_name: str | None = None) -> list[str]:
        return self._claims.check(path, session_name)

    # -- allocation ------------------------------------------------------------

    def recommend_tasks(self, tasks: Iterable[str]) -> list[TaskRecommendation]:
        return self._allocator.recommend(tasks, self.list_active_sessions())

    def session_for_work(
        self, description: str, files: Sequence[str] = (), *, force: bool = False
    ) -> Session:
        """Session an agent should record the described work in.

        An active session that already fits the work wins; otherwise one is
        reused or created from the work analysis.
        """
        fitting = self._lifecycle.best_fit(description, files)
        if fitting is not None:
            return fitting
        return self._lifecycle.auto_session(description, files, force=force)

    # -- overview --------------------------------------------------------------

    def status_overview(self) -> dict[str, Any]:
        """Snapshot of active sessions and their conflicts for display."""
        sessions = self.list_active_sessions()
        conflicts = compute_conflicts(sessions)
        return {
            "total_sessions": len(sessions),
            "conflicts": len(conflicts),
            "sessions": [
                {
                    "name": s.name,
                    "focus": list(s.focus),
                    "active_files": s.workload,
                    "current_task": s.current_task,
                    "last_active": s.last_active.isoformat(),
                }
                for s in sessions
            ],
            "conflict_details": [c.to_dict() for c in conflicts],
        }
