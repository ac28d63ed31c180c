"""In-memory SessionStore.

Same validation, ordering and error semantics as FileSessionStore, without
touching disk. Records are stored as serialized documents so callers can
never mutate stored state through a returned Session.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from multisession.errors import CorruptRecordError
from multisession.logging import get_logger
from multisession.session.base import BaseSessionStore
from multisession.session.schema import Session, parse_record

if TYPE_CHECKING:
    from multisession.config.schema import SessionDefaultsConfig

log = get_logger("storage")


class InMemorySessionStore(BaseSessionStore):
    """Dict-backed SessionStore for tests and embedding."""

    def __init__(self, defaults: SessionDefaultsConfig | None = None) -> None:
        super().__init__(defaults)
        self._records: dict[str, dict[str, Any]] = {}
        self._locks: defaultdict[str, threading.Lock] = defaultdict(threading.Lock)
        self._claims_lock = threading.Lock()
        self.membership_changes = 0

    def _fetch(self, key: str) -> Session | None:
        data = self._records.get(key)
        if data is None:
            return None
        return parse_record(data, f"memory:{key}")

    def _persist(self, session: Session) -> None:
        self._records[session.name] = session.to_dict()

    def _iter_records(self) -> Iterator[Session]:
        for key in sorted(self._records):
            try:
                yield parse_record(self._records[key], f"memory:{key}")
            except CorruptRecordError as e:
                log.warning("Skipping unreadable session %s: %s", key, e.reason)

    def _record_lock(self, key: str) -> threading.Lock:
        return self._locks[key]

    def _membership_changed(self) -> None:
        self.membership_changes += 1

    def claim_lock(self, timeout: float | None = None) -> threading.Lock:
        """Store-wide lock used to serialize claims in strict mode."""
        return self._claims_lock

    def put_raw(self, key: str, data: Any) -> None:
        """Store an arbitrary document under ``key``, bypassing validation."""
        self._records[key] = data
