"""Tests for the Session record model and patch semantics."""

from __future__ import annotations

import json

import pydantic
import pytest

from multisession.config.schema import SessionDefaultsConfig
from multisession.errors import CorruptRecordError, ValidationError
from multisession.session.schema import (
    Session,
    SessionStatus,
    apply_patch,
    close_record,
    new_session,
    parse_record,
    parse_status,
)


class TestSession:
    """Tests for the Session model."""

    def test_defaults(self) -> None:
        session = Session(name="frontend")
        assert session.focus == ["general"]
        assert session.file_patterns == ["*"]
        assert session.directories == []
        assert session.active_files == []
        assert session.status is SessionStatus.ACTIVE
        assert session.version == 1
        assert session.closed is None
        assert session.id

    def test_ids_are_unique(self) -> None:
        assert Session(name="a").id != Session(name="b").id

    def test_lists_have_set_semantics(self) -> None:
        session = Session(name="a", active_files=["x", "y", "x"], focus=["ui", "ui"])
        assert session.active_files == ["x", "y"]
        assert session.focus == ["ui"]

    def test_workload_counts_claims(self) -> None:
        assert Session(name="a", active_files=["x", "y"]).workload == 2

    def test_unknown_keys_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            Session.from_dict({"name": "a", "bogus": 1})

    def test_to_dict_is_json_ready(self) -> None:
        data = Session(name="a", metadata={"owner": "alice"}).to_dict()
        assert data["status"] == "active"
        assert isinstance(data["created"], str)
        # Serializes without a custom encoder
        assert json.loads(json.dumps(data)) == data

    def test_from_dict_restores_record(self) -> None:
        original = Session(name="a", focus=["api"], active_files=["src/app.py"])
        restored = Session.from_dict(original.to_dict())
        assert restored == original


class TestParseStatus:
    def test_accepts_enum_and_string(self) -> None:
        assert parse_status(SessionStatus.CLOSED) is SessionStatus.CLOSED
        assert parse_status("active") is SessionStatus.ACTIVE

    def test_rejects_unknown(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            parse_status("paused")
        assert exc_info.value.field == "status"


class TestNewSession:
    """Tests for new_session."""

    def test_uses_config_defaults(self) -> None:
        defaults = SessionDefaultsConfig(focus=["testing"], directories=["tests"])
        session = new_session("qa", defaults=defaults)
        assert session.focus == ["testing"]
        assert session.directories == ["tests"]

    def test_explicit_options_win(self) -> None:
        defaults = SessionDefaultsConfig(focus=["testing"])
        session = new_session("qa", focus=["api"], defaults=defaults)
        assert session.focus == ["api"]

    def test_defaults_are_copied(self) -> None:
        defaults = SessionDefaultsConfig()
        session = new_session("qa", defaults=defaults)
        session.focus.append("extra")
        assert defaults.focus == ["general"]

    def test_invalid_options(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            new_session("qa", focus=[1, 2])  # type: ignore[list-item]
        assert exc_info.value.field == "options"


class TestApplyPatch:
    """Tests for apply_patch."""

    def test_shallow_merge(self) -> None:
        session = Session(name="a", focus=["ui"])
        updated = apply_patch(session, {"current_task": "login form"})
        assert updated.current_task == "login form"
        assert updated.focus == ["ui"]

    def test_bumps_version_and_last_active(self) -> None:
        session = Session(name="a")
        updated = apply_patch(session, {"current_task": "x"})
        assert updated.version == session.version + 1
        assert updated.last_active >= session.last_active

    def test_input_not_modified(self) -> None:
        session = Session(name="a")
        apply_patch(session, {"active_files": ["x"]})
        assert session.active_files == []
        assert session.version == 1

    def test_list_replaced_wholesale(self) -> None:
        session = Session(name="a", active_files=["x", "y"])
        assert apply_patch(session, {"active_files": ["z"]}).active_files == ["z"]

    def test_unknown_field(self) -> None:
        with pytest.raises(ValidationError, match="unknown field"):
            apply_patch(Session(name="a"), {"colour": "blue"})

    @pytest.mark.parametrize("field_name", ["id", "name", "created", "version"])
    def test_immutable_field(self, field_name: str) -> None:
        with pytest.raises(ValidationError, match="immutable field"):
            apply_patch(Session(name="a"), {field_name: "x"})

    def test_invalid_value(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            apply_patch(Session(name="a"), {"active_files": "src/app.css"})
        assert exc_info.value.field == "patch"

    @pytest.mark.parametrize("patch", [{"status": "closed"}, {"status": "active"}, {"closed": None}])
    def test_close_fields_rejected(self, patch: dict) -> None:
        with pytest.raises(ValidationError, match="only change through close"):
            apply_patch(Session(name="a"), patch)

    def test_closed_session_rejected(self) -> None:
        closed = close_record(Session(name="a"))
        with pytest.raises(ValidationError, match="is closed") as exc_info:
            apply_patch(closed, {"current_task": "more work"})
        assert exc_info.value.field == "status"

    def test_non_mapping(self) -> None:
        with pytest.raises(ValidationError):
            apply_patch(Session(name="a"), [("current_task", "x")])  # type: ignore[arg-type]


class TestCloseRecord:
    def test_drops_claims_and_stamps(self) -> None:
        session = Session(name="a", active_files=["x"], locked_files=["y"])
        closed = close_record(session)
        assert closed.status is SessionStatus.CLOSED
        assert closed.active_files == []
        assert closed.locked_files == []
        assert closed.closed is not None
        assert closed.version == session.version + 1
        assert session.is_active


class TestParseRecord:
    def test_valid(self) -> None:
        data = Session(name="a").to_dict()
        assert parse_record(data, "a.json").name == "a"

    def test_not_an_object(self) -> None:
        with pytest.raises(CorruptRecordError) as exc_info:
            parse_record(["a"], "a.json")
        assert exc_info.value.path == "a.json"

    def test_wrong_shape(self) -> None:
        with pytest.raises(CorruptRecordError):
            parse_record({"name": "a", "active_files": "not-a-list"}, "a.json")
