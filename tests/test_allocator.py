"""Tests for task allocation."""

from __future__ import annotations

import pytest

from multisession.coordination.allocator import (
    ANY_SESSION,
    FOCUS_MATCH,
    LOWEST_WORKLOAD,
    TaskAllocator,
    matching_focus,
    suggest_focus,
)
from multisession.errors import ValidationError
from multisession.session.schema import Session


def _session(name: str, focus: list[str], workload: int = 0) -> Session:
    return Session(name=name, focus=focus, active_files=[f"{name}-{i}.py" for i in range(workload)])


@pytest.fixture
def allocator() -> TaskAllocator:
    return TaskAllocator()


class TestRecommend:
    """Tests for TaskAllocator.recommend."""

    def test_focus_and_workload_scenario(self, allocator: TaskAllocator) -> None:
        sessions = [
            _session("frontend", ["ui"], workload=1),
            _session("backend", ["api"], workload=0),
        ]
        first, second = allocator.recommend(
            ["build login UI", "add rate limiting to API"], sessions
        )

        assert first.task == "build login UI"
        assert first.recommended_session == "frontend"
        assert first.score == 9
        assert first.reason == FOCUS_MATCH
        assert first.matched_focus == "ui"

        assert second.recommended_session == "backend"
        assert second.score == 10
        assert second.reason == FOCUS_MATCH

    def test_no_sessions(self, allocator: TaskAllocator) -> None:
        (rec,) = allocator.recommend(["anything"], [])
        assert rec.recommended_session == ANY_SESSION
        assert rec.reason == LOWEST_WORKLOAD
        assert rec.score is None

    def test_no_tasks(self, allocator: TaskAllocator) -> None:
        assert allocator.recommend([], [_session("a", ["ui"])]) == []

    def test_tie_goes_to_first_session(self, allocator: TaskAllocator) -> None:
        sessions = [_session("alpha", ["docs"]), _session("beta", ["docs"])]
        (rec,) = allocator.recommend(["write docs"], sessions)
        assert rec.recommended_session == "alpha"

    def test_no_match_picks_least_loaded(self, allocator: TaskAllocator) -> None:
        sessions = [_session("busy", ["ui"], workload=3), _session("idle", ["ui"], workload=1)]
        (rec,) = allocator.recommend(["migrate database"], sessions)
        assert rec.recommended_session == "idle"
        assert rec.score == -1
        assert rec.reason == LOWEST_WORKLOAD
        assert rec.matched_focus is None

    def test_zero_score_is_lowest_workload(self, allocator: TaskAllocator) -> None:
        # Focus matched but fully offset by workload
        sessions = [_session("a", ["api"], workload=10)]
        (rec,) = allocator.recommend(["api work"], sessions)
        assert rec.score == 0
        assert rec.reason == LOWEST_WORKLOAD

    def test_case_insensitive(self, allocator: TaskAllocator) -> None:
        (rec,) = allocator.recommend(["Fix the api client"], [_session("a", ["API"])])
        assert rec.reason == FOCUS_MATCH

    def test_tasks_scored_independently(self, allocator: TaskAllocator) -> None:
        sessions = [_session("a", ["ui"]), _session("b", ["api"])]
        recs = allocator.recommend(["ui one", "ui two", "ui three"], sessions)
        assert [r.recommended_session for r in recs] == ["a", "a", "a"]

    def test_custom_focus_weight(self) -> None:
        allocator = TaskAllocator(focus_weight=3)
        sessions = [_session("match", ["ui"], workload=4), _session("other", ["api"])]
        (rec,) = allocator.recommend(["ui polish"], sessions)
        assert rec.recommended_session == "other"

    def test_string_instead_of_list(self, allocator: TaskAllocator) -> None:
        with pytest.raises(ValidationError):
            allocator.recommend("build login UI", [])

    def test_non_string_task(self, allocator: TaskAllocator) -> None:
        with pytest.raises(ValidationError):
            allocator.recommend(["ok", 42], [])

    def test_to_dict(self, allocator: TaskAllocator) -> None:
        (rec,) = allocator.recommend(["ui"], [_session("a", ["ui"])])
        assert rec.to_dict() == {
            "task": "ui",
            "recommended_session": "a",
            "reason": FOCUS_MATCH,
            "score": 10,
            "matched_focus": "ui",
        }


class TestMatchingFocus:
    def test_blank_tags_never_match(self) -> None:
        assert matching_focus("anything", ["", "  "]) is None

    def test_first_matching_tag(self) -> None:
        assert matching_focus("api and ui", ["ui", "api"]) == "ui"


class TestSuggestFocus:
    def test_keywords(self) -> None:
        assert suggest_focus("Create a login component") == ["components", "auth"]

    def test_styling(self) -> None:
        assert suggest_focus("tweak the SCSS") == ["styling"]

    def test_general_fallback(self) -> None:
        assert suggest_focus("refactor") == ["general"]
