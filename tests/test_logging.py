"""Tests for logging helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

import multisession.logging as ms_logging
from multisession.config.schema import LoggingConfig
from multisession.logging import (
    COMPONENTS,
    TRACE,
    VERBOSE,
    component_levels,
    get_logger,
    resolve_level,
    setup_logging,
)


@pytest.fixture
def fresh_logging():
    """Undo setup_logging side effects after the test."""
    yield
    ms_logging._remove_handlers()
    ms_logging._configured = False
    ms_logging.logger.setLevel(logging.NOTSET)
    for name in (*COMPONENTS, "custom"):
        get_logger(name).setLevel(logging.NOTSET)


class TestResolveLevel:
    def test_default(self) -> None:
        assert resolve_level(None) == logging.INFO
        assert resolve_level(LoggingConfig()) == logging.INFO

    @pytest.mark.parametrize(
        ("verbose", "expected"),
        [(0, logging.ERROR), (1, logging.WARNING), (2, logging.INFO), (3, VERBOSE), (4, TRACE)],
    )
    def test_verbosity(self, verbose: int, expected: int) -> None:
        assert resolve_level(LoggingConfig(verbose=verbose)) == expected

    def test_verbose_wins_over_level(self) -> None:
        assert resolve_level(LoggingConfig(level="debug", verbose=0)) == logging.ERROR

    def test_level_name(self) -> None:
        assert resolve_level(LoggingConfig(level="warn")) == logging.WARNING
        assert resolve_level(LoggingConfig(level="nonsense")) == logging.INFO


class TestComponentLevels:
    def test_empty(self) -> None:
        assert component_levels(None) == {}
        assert component_levels(LoggingConfig()) == {}

    def test_names_are_case_insensitive(self) -> None:
        config = LoggingConfig(components={"claims": "Trace", "storage": "warning"})
        assert component_levels(config) == {"claims": TRACE, "storage": logging.WARNING}

    def test_unknown_level_dropped(self) -> None:
        config = LoggingConfig(components={"claims": "loud", "lifecycle": "debug"})
        assert component_levels(config) == {"lifecycle": logging.DEBUG}


class TestSetupLogging:
    def test_component_levels_applied(self, tmp_path: Path, fresh_logging: None) -> None:
        config = LoggingConfig(
            level="warning",
            file=str(tmp_path / "ms.log"),
            components={"claims": "debug"},
        )
        setup_logging(config)

        assert get_logger().level == logging.WARNING
        assert get_logger("claims").getEffectiveLevel() == logging.DEBUG
        assert get_logger("storage").getEffectiveLevel() == logging.WARNING

    def test_component_below_root_reaches_file(self, tmp_path: Path, fresh_logging: None) -> None:
        log_file = tmp_path / "ms.log"
        setup_logging(
            LoggingConfig(level="warning", file=str(log_file), components={"claims": "debug"})
        )

        get_logger("claims").debug("claim detail")
        get_logger("storage").debug("storage detail")
        for handler in ms_logging._handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "claim detail" in text
        assert "[multisession.claims]" in text
        assert "storage detail" not in text

    def test_second_call_is_noop(self, tmp_path: Path, fresh_logging: None) -> None:
        setup_logging(LoggingConfig(level="error", file=str(tmp_path / "a.log")))
        setup_logging(LoggingConfig(level="debug", file=str(tmp_path / "b.log")))

        assert get_logger().level == logging.ERROR
        assert len(ms_logging._handlers) == 1
        assert not (tmp_path / "b.log").exists()

    def test_force_replaces_handlers(self, tmp_path: Path, fresh_logging: None) -> None:
        setup_logging(LoggingConfig(level="error", file=str(tmp_path / "a.log")))
        config = LoggingConfig(
            level="debug", file=str(tmp_path / "b.log"), components={"custom": "error"}
        )
        setup_logging(config, force=True)

        assert get_logger().level == logging.DEBUG
        assert get_logger("custom").level == logging.ERROR
        assert len(ms_logging._handlers) == 1
        assert ms_logging._handlers[0] in get_logger().handlers

    def test_force_resets_dropped_overrides(self, tmp_path: Path, fresh_logging: None) -> None:
        setup_logging(LoggingConfig(file=str(tmp_path / "a.log"), components={"claims": "error"}))
        setup_logging(LoggingConfig(file=str(tmp_path / "a.log")), force=True)
        assert get_logger("claims").level == logging.NOTSET


class TestGetLogger:
    def test_child_logger(self) -> None:
        assert get_logger("claims").name == "multisession.claims"

    def test_root_logger(self) -> None:
        assert get_logger().name == "multisession"

    def test_custom_level_names(self) -> None:
        assert logging.getLevelName(TRACE) == "TRACE"
        assert logging.getLevelName(VERBOSE) == "VERBOSE"
