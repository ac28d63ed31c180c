"""Session lifecycle maintenance and automatic session selection.

Nothing here runs by itself. An external scheduler (dashboard poller, cron
job, CLI command) calls the maintenance operations when it wants
housekeeping done; agents call the selection operations when they start a
piece of work and need a session to record it in.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from multisession.config.schema import LifecycleConfig
from multisession.coordination.analysis import WorkContext, analyze_work
from multisession.errors import DuplicateError, NotFoundError, ValidationError
from multisession.logging import get_logger
from multisession.session.names import MAX_NAME_LENGTH, sanitize_session_name
from multisession.session.schema import utcnow

if TYPE_CHECKING:
    from multisession.session.protocols import SessionStore
    from multisession.session.schema import Session

log = get_logger("lifecycle")

CREATED_BY = "multisession.lifecycle"
_CREATE_ATTEMPTS = 3


def overlap(first: Sequence[str], second: Sequence[str]) -> float:
    """Share of ``first`` that loosely matches ``second``.

    An item matches when it contains, or is contained in, some item of the
    other list (case-insensitive). The count is divided by the longer
    list's length, so the measure is 1.0 only for equivalent lists.
    """
    if not first or not second:
        return 0.0
    lowered = [item.lower() for item in second]
    matched = [
        item
        for item in first
        if any(item.lower() in other or other in item.lower() for other in lowered)
    ]
    return len(matched) / max(len(first), len(second))


def _union(*lists: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(item for items in lists for item in items))


def fit_score(session: Session, context: WorkContext) -> float:
    """How well ``session`` already covers the work in ``context`` (0.0-1.0).

    Weighted overlap: focus 0.4, directories 0.3, file patterns 0.3.
    """
    return (
        overlap(session.focus, context.focus) * 0.4
        + overlap(session.directories, context.directories) * 0.3
        + overlap(session.file_patterns, context.file_types) * 0.3
    )


class SessionLifecycle:
    """Maintenance and session selection over a SessionStore."""

    def __init__(self, store: SessionStore, config: LifecycleConfig | None = None) -> None:
        self._store = store
        self._config = config or LifecycleConfig()

    @property
    def config(self) -> LifecycleConfig:
        return self._config

    def find_similar(
        self, focus: Sequence[str], directories: Sequence[str] = ()
    ) -> Session | None:
        """First active session whose focus or directories resemble the given ones."""
        for session in self._store.list():
            if overlap(session.focus, focus) >= self._config.similar_focus_threshold:
                return session
            if overlap(session.directories, directories) >= self._config.similar_directory_threshold:
                return session
        return None

    def unique_name(self, base: str) -> str:
        """``base`` if no stored session uses it, else ``base-1``, ``base-2``, ..."""
        base = sanitize_session_name(base)
        taken = {s.name for s in self._store.list(status=None)}
        if base not in taken:
            return base

        counter = 1
        while True:
            suffix = f"-{counter}"
            candidate = f"{base[: MAX_NAME_LENGTH - len(suffix)]}{suffix}"
            if candidate not in taken:
                return candidate
            counter += 1

    def _create_unique(self, base: str, **options: Any) -> Session:
        # Another agent can take the name between unique_name and create
        for _ in range(_CREATE_ATTEMPTS - 1):
            try:
                return self._store.create(self.unique_name(base), **options)
            except DuplicateError as e:
                log.debug("Session name '%s' taken concurrently, retrying", e.name)
        return self._store.create(self.unique_name(base), **options)

    def default_session(self) -> Session:
        """The catch-all session for work no dedicated session covers.

        Returns the active session named ``config.default_session`` (``main``)
        or any active session created as the default, else creates one with
        focus ``general`` over ``src``. A closed default is not reopened; the
        replacement gets a suffixed name.
        """
        session = self._store.read(self._config.default_session)
        if session is not None and session.is_active:
            return session
        for session in self._store.list():
            if session.metadata.get("default_session"):
                return session

        session = self._create_unique(
            self._config.default_session,
            focus=["general"],
            directories=["src"],
            file_patterns=["*"],
            metadata={
                "auto_created": True,
                "default_session": True,
                "confidence": 1.0,
                "reasoning": "Default session for general development",
                "created_by": CREATED_BY,
            },
        )
        log.info("Created default session '%s'", session.name)
        return session

    def auto_session(
        self, description: str, files: Sequence[str] = (), *, force: bool = False
    ) -> Session:
        """Pick or create the session that should carry the described work.

        The description and files are analyzed into a WorkContext. Below
        ``auto_create_threshold`` confidence the default session is used
        unless ``force`` is set. Otherwise a similar active session is
        reused (see :meth:`find_similar`), and failing that a new session is
        created under the suggested name with the analysis recorded in its
        metadata.
        """
        context = analyze_work(description, files)
        if context.confidence < self._config.auto_create_threshold and not force:
            log.debug(
                "Work confidence %.2f below %.2f, using default session",
                context.confidence,
                self._config.auto_create_threshold,
            )
            return self.default_session()

        directories = context.recommended_directories
        existing = self.find_similar(context.focus, directories)
        if existing is not None:
            log.info(
                "Using existing session '%s' (%.2f confidence)", existing.name, context.confidence
            )
            return existing

        session = self._create_unique(
            context.suggested_name,
            focus=list(context.focus),
            directories=directories,
            file_patterns=context.recommended_patterns,
            current_task=description or None,
            metadata={
                "auto_created": True,
                "confidence": context.confidence,
                "reasoning": context.reasoning,
                "created_by": CREATED_BY,
            },
        )
        log.info(
            "Auto-created session '%s' (%.2f confidence): %s",
            session.name,
            context.confidence,
            context.reasoning,
        )
        return session

    def best_fit(self, description: str, files: Sequence[str] = ()) -> Session | None:
        """Active session that best fits the described work, if one fits well.

        Only a fit score strictly above ``fit_threshold`` counts; ties keep
        the first session in listing order.
        """
        context = analyze_work(description, files)
        best: Session | None = None
        best_score = 0.0
        for session in self._store.list():
            score = fit_score(session, context)
            if score > best_score:
                best, best_score = session, score

        if best is None or best_score <= self._config.fit_threshold:
            return None
        log.debug("Session '%s' fits work (score %.2f)", best.name, best_score)
        return best

    def sweep_inactive(self, now: datetime | None = None) -> list[str]:
        """Close idle sessions that hold no claims.

        A session is idle when its ``last_active`` is older than
        ``max_idle_hours``. Sessions still claiming files are left open.

        Returns:
            Names of the sessions closed, in listing order.
        """
        now = now or utcnow()
        cutoff = now - timedelta(hours=self._config.max_idle_hours)
        closed: list[str] = []
        for session in self._store.list():
            if session.last_active < cutoff and not session.active_files:
                self._store.close(session.name)
                closed.append(session.name)
                log.info("Auto-closed inactive session '%s'", session.name)
        return closed

    def merge(self, primary: str, secondary: str) -> Session:
        """Fold ``secondary`` into ``primary`` and close ``secondary``.

        Focus, directories, file patterns and claims are unioned in that
        order, primary's entries first.

        Raises:
            ValidationError: If both names refer to the same session.
            NotFoundError: If either session is missing or closed.
        """
        first = self._store.read(primary)
        if first is None or not first.is_active:
            raise NotFoundError(sanitize_session_name(primary))
        second = self._store.read(secondary)
        if second is None or not second.is_active:
            raise NotFoundError(sanitize_session_name(secondary))
        if first.name == second.name:
            raise ValidationError("secondary", secondary, "cannot merge a session into itself")

        merged = self._store.update(
            first.name,
            {
                "focus": _union(first.focus, second.focus),
                "directories": _union(first.directories, second.directories),
                "file_patterns": _union(first.file_patterns, second.file_patterns),
                "active_files": _union(first.active_files, second.active_files),
                "merged_from": second.name,
            },
        )
        self._store.close(second.name)
        log.info("Merged session '%s' into '%s'", second.name, first.name)
        return merged

    def consolidate(self) -> tuple[str, str] | None:
        """Merge the most similar pair when too many sessions are active.

        Does nothing unless more than ``max_sessions`` sessions are active
        and some pair's focus overlap reaches ``merge_threshold``.

        Returns:
            ``(primary, secondary)`` names of the merged pair, or None.
        """
        sessions = self._store.list()
        if len(sessions) <= self._config.max_sessions:
            return None

        best: tuple[float, Session, Session] | None = None
        for i, first in enumerate(sessions):
            for second in sessions[i + 1 :]:
                score = overlap(first.focus, second.focus)
                if score >= self._config.merge_threshold and (best is None or score > best[0]):
                    best = (score, first, second)

        if best is None:
            return None
        _, first, second = best
        self.merge(first.name, second.name)
        return first.name, second.name
