"""Task allocation heuristic.

Stateless scoring of sessions against free-text task descriptions:

    score = focus_weight if any focus tag occurs in the task (case-insensitive)
            else 0
            minus the session's workload (number of claimed files)

The strictly highest score wins. Ties keep the session that comes first in
the given order; stores list sessions sorted by name, which makes the
outcome reproducible.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from multisession.errors import ValidationError
from multisession.logging import get_logger
from multisession.session.schema import Session

log = get_logger("allocator")

ANY_SESSION = "any"
FOCUS_MATCH = "focus_match"
LOWEST_WORKLOAD = "lowest_workload"

DEFAULT_FOCUS_WEIGHT = 10

# Keyword families used to guess focus tags from a description
FOCUS_KEYWORDS: dict[str, tuple[str, ...]] = {
    "ui": ("ui", "user interface", "interface"),
    "components": ("component", "components"),
    "styling": ("style", "css", "scss", "styling"),
    "api": ("api", "endpoint", "rest"),
    "database": ("database", "db", "data"),
    "auth": ("auth", "authentication", "login"),
    "testing": ("test", "testing", "spec"),
    "deployment": ("deploy", "deployment"),
}


@dataclass
class TaskRecommendation:
    """Which session should take a task, and why."""

    task: str
    recommended_session: str
    reason: str
    score: int | None = None
    matched_focus: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "task": self.task,
            "recommended_session": self.recommended_session,
            "reason": self.reason,
            "score": self.score,
            "matched_focus": self.matched_focus,
        }


def matching_focus(task: str, focus: Iterable[str]) -> str | None:
    """First non-blank focus tag contained in ``task``, ignoring case."""
    text = task.lower()
    for tag in focus:
        needle = tag.strip().lower()
        if needle and needle in text:
            return tag
    return None


class TaskAllocator:
    """Scores sessions against tasks and recommends one per task."""

    def __init__(self, focus_weight: int = DEFAULT_FOCUS_WEIGHT) -> None:
        self._focus_weight = focus_weight

    def score(self, task: str, session: Session) -> tuple[int, str | None]:
        """Score one session for one task; also return the matched tag."""
        tag = matching_focus(task, session.focus)
        bonus = self._focus_weight if tag is not None else 0
        return bonus - session.workload, tag

    def recommend_one(self, task: str, sessions: Sequence[Session]) -> TaskRecommendation:
        if not isinstance(task, str):
            raise ValidationError("task", task, "task must be a string")

        best: Session | None = None
        best_score = 0
        best_tag: str | None = None
        for session in sessions:
            score, tag = self.score(task, session)
            if best is None or score > best_score:
                best, best_score, best_tag = session, score, tag

        if best is None:
            return TaskRecommendation(task, ANY_SESSION, LOWEST_WORKLOAD)

        reason = FOCUS_MATCH if best_score > 0 else LOWEST_WORKLOAD
        return TaskRecommendation(
            task,
            best.name,
            reason,
            score=best_score,
            matched_focus=best_tag if reason == FOCUS_MATCH else None,
        )

    def recommend(
        self, tasks: Iterable[str], sessions: Sequence[Session]
    ) -> list[TaskRecommendation]:
        """One recommendation per task, in input order.

        Tasks are scored independently: a recommendation does not add to the
        winner's workload for later tasks.
        """
        if isinstance(tasks, str):
            raise ValidationError("tasks", tasks, "tasks must be a list of strings, not a string")
        recommendations = [self.recommend_one(task, sessions) for task in tasks]
        log.debug(
            "Recommended %d task(s) across %d session(s)", len(recommendations), len(sessions)
        )
        return recommendations


def suggest_focus(text: str) -> list[str]:
    """Guess focus tags for a work description; ``["general"]`` if none match."""
    lowered = text.lower()
    focus = [
        area
        for area, keywords in FOCUS_KEYWORDS.items()
        if any(keyword in lowered for keyword in keywords)
    ]
    return focus or ["general"]
