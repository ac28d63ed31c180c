"""Filesystem session storage.

One JSON document per session in:
  $PROJECT/.multisession/sessions/<sanitized-name>.json

plus an advisory summary at $PROJECT/.multisession/summary.json listing the
active session names. Each session file is the only source of truth for
that session; the summary is a convenience for collaborators.

Every write is atomic: the document goes to a uniquely named temp file in
the target directory and is renamed over the target, so readers never see
a partial record. A crash between the two steps can leave a ``.*.tmp``
orphan; nothing removes those implicitly (see remove_orphaned_temp_files).
"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
import time
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING, Any

from filelock import FileLock

from multisession.config.paths import resolve_store_path
from multisession.errors import CorruptRecordError
from multisession.logging import get_logger
from multisession.session.base import BaseSessionStore
from multisession.session.names import sanitize_session_name
from multisession.session.schema import Session, parse_record, utcnow

if TYPE_CHECKING:
    from multisession.config.schema import Config, SessionDefaultsConfig

log = get_logger("storage")

RECORD_SUFFIX = ".json"
TEMP_SUFFIX = ".tmp"
LOCKS_DIRNAME = ".locks"


def write_json_atomic(path: Path, data: Any) -> None:
    """Write ``data`` as JSON to ``path`` via temp file + rename.

    On any failure the temp file is removed, ``path`` is left exactly as it
    was and the error propagates.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=TEMP_SUFFIX)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise


def load_record(path: Path) -> Session | None:
    """Load a session document from disk.

    Returns:
        The Session, or None if the file does not exist.

    Raises:
        CorruptRecordError: If the file is unreadable JSON or not a Session.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return None
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise CorruptRecordError(str(path), str(e)) from e

    session = parse_record(data, str(path))
    if session.name != path.name[: -len(RECORD_SUFFIX)]:
        raise CorruptRecordError(
            str(path), f"record name '{session.name}' does not match its file name"
        )
    return session


class FileSessionStore(BaseSessionStore):
    """Directory-of-JSON-documents SessionStore."""

    def __init__(
        self,
        sessions_dir: str | Path,
        *,
        summary_path: str | Path | None = None,
        project_root: str | Path | None = None,
        defaults: SessionDefaultsConfig | None = None,
        lock_timeout: float = 10.0,
    ) -> None:
        """Initialize the store.

        Args:
            sessions_dir: Directory holding one ``<name>.json`` per session.
            summary_path: Where to write the summary record (None disables it).
            project_root: Recorded in the summary; defaults to the parent of
                ``sessions_dir``'s parent.
            defaults: Focus/directories/file_patterns for new sessions.
            lock_timeout: Seconds to wait for a record lock during
                compare-and-swap updates.
        """
        super().__init__(defaults)
        self._dir = Path(sessions_dir)
        self._summary_path = Path(summary_path) if summary_path else None
        self._project_root = Path(project_root) if project_root else self._dir.parent.parent
        self._lock_timeout = lock_timeout

    @classmethod
    def for_project(cls, project_root: str | Path, config: Config) -> FileSessionStore:
        """Build a store laid out under ``project_root`` as ``config`` describes.

        Relative store paths resolve against ``project_root``.
        """
        root = Path(project_root)
        return cls(
            resolve_store_path(root, config.store.sessions_dir),
            summary_path=resolve_store_path(root, config.store.summary_file),
            project_root=root,
            defaults=config.defaults,
            lock_timeout=config.coordination.lock_timeout,
        )

    @property
    def sessions_dir(self) -> Path:
        return self._dir

    @property
    def locks_dir(self) -> Path:
        return self._dir / LOCKS_DIRNAME

    def path_for(self, name: str) -> Path:
        """Path of the record for ``name`` (sanitized)."""
        return self._dir / f"{sanitize_session_name(name)}{RECORD_SUFFIX}"

    # -- hooks ---------------------------------------------------------------

    def _fetch(self, key: str) -> Session | None:
        return load_record(self._dir / f"{key}{RECORD_SUFFIX}")

    def _persist(self, session: Session) -> None:
        path = self._dir / f"{session.name}{RECORD_SUFFIX}"
        write_json_atomic(path, session.to_dict())
        log.debug("Saved session %s to %s", session.name, path)

    def _iter_records(self) -> Iterator[Session]:
        if not self._dir.exists():
            return
        # Temp files end in .tmp, so the glob never yields a half-written record
        for path in sorted(self._dir.glob(f"*{RECORD_SUFFIX}")):
            if not path.is_file():
                continue
            try:
                session = load_record(path)
            except CorruptRecordError as e:
                log.warning("Skipping unreadable session file %s: %s", path.name, e.reason)
                continue
            except OSError as e:
                log.warning("Failed to read session file %s: %s", path.name, e)
                continue
            if session is not None:
                yield session

    def _record_lock(self, key: str) -> FileLock:
        self.locks_dir.mkdir(parents=True, exist_ok=True)
        # Record locks end in .json.lock so no session name can collide with claims.lock
        return FileLock(
            self.locks_dir / f"{key}{RECORD_SUFFIX}.lock", timeout=self._lock_timeout
        )

    def _membership_changed(self) -> None:
        self.write_summary()

    # -- extras ----------------------------------------------------------------

    def claim_lock(self, timeout: float | None = None) -> FileLock:
        """Project-wide lock used to serialize claims in strict mode."""
        self.locks_dir.mkdir(parents=True, exist_ok=True)
        return FileLock(
            self.locks_dir / "claims.lock",
            timeout=self._lock_timeout if timeout is None else timeout,
        )

    def read_summary(self) -> dict[str, Any] | None:
        """Return the last written summary record, if any."""
        if self._summary_path is None or not self._summary_path.exists():
            return None
        try:
            with open(self._summary_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log.warning("Failed to read summary %s: %s", self._summary_path, e)
            return None
        return data if isinstance(data, dict) else None

    def write_summary(self) -> None:
        """Rewrite the summary of active sessions.

        The summary is advisory, so a failed write is logged rather than
        raised: the session mutation that triggered it has already landed.
        """
        if self._summary_path is None:
            return
        data = {
            "updated": utcnow().isoformat(),
            "active_sessions": [s.name for s in self.list()],
            "project_root": str(self._project_root),
        }
        try:
            write_json_atomic(self._summary_path, data)
        except OSError as e:
            log.warning("Failed to write session summary %s: %s", self._summary_path, e)

    def remove_orphaned_temp_files(self, max_age_seconds: float = 3600.0) -> int:
        """Delete temp files left behind by interrupted writes.

        Only files older than ``max_age_seconds`` are touched, so writes in
        flight in other processes are left alone. Never called implicitly.

        Returns:
            Number of files removed.
        """
        if not self._dir.exists():
            return 0

        candidates = list(self._dir.glob(f".*{TEMP_SUFFIX}"))
        if self._summary_path is not None and self._summary_path.parent.exists():
            candidates.extend(self._summary_path.parent.glob(f".*{TEMP_SUFFIX}"))

        threshold = time.time() - max_age_seconds
        removed = 0
        for path in candidates:
            try:
                if path.stat().st_mtime < threshold:
                    path.unlink()
                    removed += 1
            except FileNotFoundError:
                continue
        if removed:
            log.info("Removed %d orphaned temp file(s) from %s", removed, self._dir)
        return removed
