"""Shared fixtures for quill_log tests."""

import pytest

from quill_log.config import Dictionary, SessionSettings
from quill_log.session_id import SessionID


@pytest.fixture
def session_id():
    return SessionID("FIX.4.2", "SENDER", "TARGET")


@pytest.fixture
def log_dir(tmp_path):
    """Log directory that does not exist yet."""
    return tmp_path / "log"


@pytest.fixture
def settings(log_dir, session_id):
    """Settings with a default log path and one configured session."""
    session_settings = SessionSettings({"FileLogPath": str(log_dir)})
    session_settings.set(session_id, Dictionary())
    return session_settings
