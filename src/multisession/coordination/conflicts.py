"""Conflict detection over a snapshot of sessions.

Pure functions: no store access, no side effects. The result is only as
fresh as the snapshot passed in.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from multisession.session.schema import Session


@dataclass
class Conflict:
    """A path claimed by more than one active session."""

    file: str
    sessions: list[str] = field(default_factory=list)
    type: str = "file_conflict"

    def to_dict(self) -> dict[str, Any]:
        return {"file": self.file, "sessions": list(self.sessions), "type": self.type}


def build_claim_index(sessions: Iterable[Session]) -> dict[str, list[str]]:
    """Map each claimed path to the names claiming it.

    Paths keep the order in which they first appear in the snapshot; names
    keep snapshot order and appear once per path. Closed sessions are
    ignored.
    """
    index: dict[str, list[str]] = {}
    for session in sessions:
        if not session.is_active:
            continue
        for path in session.active_files:
            claimants = index.setdefault(path, [])
            if session.name not in claimants:
                claimants.append(session.name)
    return index


def compute_conflicts(sessions: Iterable[Session]) -> list[Conflict]:
    """One Conflict per path claimed by two or more distinct sessions."""
    return [
        Conflict(file=path, sessions=names)
        for path, names in build_claim_index(sessions).items()
        if len(names) > 1
    ]


def claimants_of(path: str, sessions: Iterable[Session]) -> list[str]:
    """Names of active sessions in the snapshot that claim ``path``."""
    return build_claim_index(sessions).get(path, [])
