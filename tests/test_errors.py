"""Tests for the error taxonomy."""

from __future__ import annotations

import json

from multisession.errors import (
    ConflictError,
    CorruptRecordError,
    DuplicateError,
    MultisessionError,
    NotFoundError,
    SessionNotFoundError,
    ValidationError,
    VersionConflictError,
)


class TestErrors:
    def test_hierarchy(self) -> None:
        for error in (
            ValidationError("name", "", "empty"),
            NotFoundError("a"),
            SessionNotFoundError("a"),
            DuplicateError("a"),
            ConflictError("f", "b", ["a"]),
            CorruptRecordError("a.json", "bad"),
            VersionConflictError("a", 1, 2),
        ):
            assert isinstance(error, MultisessionError)
        assert isinstance(SessionNotFoundError("a"), NotFoundError)

    def test_conflict_message(self) -> None:
        error = ConflictError("src/app.css", "backend", ["frontend", "qa"])
        assert str(error) == "File 'src/app.css' already in use by: frontend, qa"

    def test_conflict_to_dict(self) -> None:
        data = ConflictError("src/app.css", "backend", ["frontend"]).to_dict()
        assert data["error"] == "conflict"
        assert data["path"] == "src/app.css"
        assert data["session"] == "backend"
        assert data["conflicting_sessions"] == ["frontend"]
        assert "message" in data

    def test_not_found_message(self) -> None:
        assert str(SessionNotFoundError("ghost")) == "Session 'ghost' not found"
        assert SessionNotFoundError("ghost").to_dict()["error"] == "not_found"

    def test_version_conflict_to_dict(self) -> None:
        data = VersionConflictError("a", 3, 4).to_dict()
        assert data == {
            "error": "version_conflict",
            "message": str(VersionConflictError("a", 3, 4)),
            "name": "a",
            "expected": 3,
            "actual": 4,
        }

    def test_non_json_values_repr(self) -> None:
        data = ValidationError("patch", {"x": object()}, "bad").to_dict()
        assert isinstance(data["value"], str)
        json.dumps(data)
