"""
Shared pytest fixtures for tock tests.
"""

from __future__ import annotations

import pytest

from tock.store import SessionStore


@pytest.fixture(autouse=True)
def isolate_tock_paths(tmp_path, monkeypatch) -> None:
    """
    Ensure tests do not read/write the real database or config file.

    Parameters
    ----------
    tmp_path : pathlib.Path
        Temporary path provided by pytest.
    monkeypatch : pytest.MonkeyPatch
        Monkeypatch fixture for environment updates.
    """
    monkeypatch.setenv("TOCK_DB_PATH", str(tmp_path / "tock.db"))
    monkeypatch.setenv("TOCK_CONFIG_PATH", str(tmp_path / "config.toml"))


@pytest.fixture
def store(tmp_path) -> SessionStore:
    """
    Provide an empty session store in a temporary directory.
    """
    session_store = SessionStore(tmp_path / "sessions.db")
    session_store.ensure_schema()
    return session_store
