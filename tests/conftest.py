"""Root pytest configuration for all tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from multisession.config import reset_config
from multisession.session import FileSessionStore, InMemorySessionStore


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep user config and env overrides from leaking into tests."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("MULTISESSION_LOG", raising=False)
    monkeypatch.delenv("MULTISESSION_STRICT", raising=False)
    monkeypatch.delenv("MULTISESSION_SESSIONS_DIR", raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def memory_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def file_store(tmp_path: Path) -> FileSessionStore:
    root = tmp_path / "project"
    return FileSessionStore(
        root / ".multisession" / "sessions",
        summary_path=root / ".multisession" / "summary.json",
        project_root=root,
    )


@pytest.fixture(params=["memory", "file"])
def store(request: pytest.FixtureRequest, tmp_path: Path):
    """Run a test against every SessionStore backing."""
    if request.param == "memory":
        return InMemorySessionStore()
    root = tmp_path / "project"
    return FileSessionStore(
        root / ".multisession" / "sessions",
        summary_path=root / ".multisession" / "summary.json",
        project_root=root,
    )
