"""Tests for FileLogFactory ownership rules."""

import pytest

from quill_log.config import Dictionary, SessionSettings
from quill_log.errors import ConfigurationError
from quill_log.session_id import SessionID
from quill_log.session_logging.factory import FileLogFactory


class TestGlobalLog:
    def test_global_log_is_shared_and_reference_counted(self, settings, log_dir):
        factory = FileLogFactory(settings)
        logs = [factory.create() for _ in range(3)]

        assert factory.global_log_count == 3
        assert logs[1] is logs[0]
        assert logs[2] is logs[0]
        assert (log_dir / "GLOBAL.event.current.log").exists()

        factory.destroy(logs[0])
        factory.destroy(logs[1])
        assert factory.global_log_count == 1
        assert not logs[0].closed

        factory.destroy(logs[2])
        assert factory.global_log_count == 0
        assert logs[0].closed

    def test_global_log_is_rebuilt_after_release(self, settings, tmp_path):
        factory = FileLogFactory(settings)
        first = factory.create()
        factory.destroy(first)

        settings.set_defaults({"FileLogPath": str(tmp_path / "elsewhere")})
        with factory.acquire() as second:
            assert second is not first
            assert second.paths.path == str(tmp_path / "elsewhere")
            assert (tmp_path / "elsewhere" / "GLOBAL.event.current.log").exists()

    def test_settings_are_read_once_while_shared(self, log_dir):
        settings = SessionSettings({"FileLogPath": str(log_dir)})
        factory = FileLogFactory(settings)
        with factory.acquire() as first:
            settings.set_defaults({})
            with factory.acquire() as second:
                assert second is first
                assert factory.global_log_count == 2

    def test_missing_path_rolls_back_count(self, log_dir):
        settings = SessionSettings()
        factory = FileLogFactory(settings)

        with pytest.raises(ConfigurationError, match="FileLogPath not defined"):
            factory.create()
        assert factory.global_log_count == 0

        settings.set_defaults({"FileLogPath": str(log_dir)})
        with factory.acquire() as log:
            assert factory.global_log_count == 1
            assert not log.closed

    def test_unwritable_path_rolls_back_count(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        factory = FileLogFactory(SessionSettings({"FileLogPath": str(blocker / "log")}))

        with pytest.raises(ConfigurationError):
            factory.create()
        assert factory.global_log_count == 0

    def test_unexpected_settings_error_rolls_back_count(self, log_dir):
        class BrokenSettings:
            def __init__(self):
                self.calls = 0

            def get(self, session_id=None):
                self.calls += 1
                if self.calls == 1:
                    raise RuntimeError("settings store unavailable")
                return Dictionary({"FileLogPath": str(log_dir)})

        factory = FileLogFactory(BrokenSettings())
        with pytest.raises(RuntimeError, match="settings store unavailable"):
            factory.create()
        assert factory.global_log_count == 0

        with factory.acquire():
            assert factory.global_log_count == 1

    def test_message_logging_flag(self, log_dir):
        factory = FileLogFactory(
            SessionSettings({"FileLogPath": str(log_dir), "FileLogMessages": "N"})
        )
        with factory.acquire() as log:
            assert log.log_messages is False
            assert not (log_dir / "GLOBAL.messages.current.log").exists()

    def test_backup_path_from_settings(self, tmp_path):
        factory = FileLogFactory(
            SessionSettings(
                {
                    "FileLogPath": str(tmp_path / "log"),
                    "FileLogBackupPath": str(tmp_path / "backup"),
                }
            )
        )
        with factory.acquire() as log:
            assert log.paths.backup_path == str(tmp_path / "backup")

    def test_fixed_path_without_settings(self, log_dir):
        factory = FileLogFactory(path=str(log_dir))
        with factory.acquire() as log:
            assert log.paths.path == str(log_dir)
            assert log.paths.backup_path == str(log_dir)
            assert log.log_messages is True

    def test_destroying_a_released_global_log_again(self, settings):
        factory = FileLogFactory(settings)
        log = factory.create()
        factory.destroy(log)
        factory.destroy(log)
        assert factory.global_log_count == 0


class TestSessionLogs:
    def test_each_create_returns_a_new_log(self, settings, session_id, log_dir):
        factory = FileLogFactory(settings)
        first = factory.create(session_id)
        second = factory.create(session_id)

        assert first is not second
        assert factory.global_log_count == 0
        assert (log_dir / "FIX.4.2-SENDER-TARGET.event.current.log").exists()

        factory.destroy(first)
        assert first.closed
        assert not second.closed
        factory.destroy(second)
        assert second.closed

    def test_session_and_global_logs_are_independent(self, settings, session_id):
        factory = FileLogFactory(settings)
        global_log = factory.create()
        session_log = factory.create(session_id)

        factory.destroy(session_log)
        assert factory.global_log_count == 1
        assert not global_log.closed
        factory.destroy(global_log)

    def test_qualifier_in_file_names(self, log_dir):
        session_id = SessionID("FIX.4.2", "SENDER", "TARGET", "Q1")
        settings = SessionSettings({"FileLogPath": str(log_dir)})
        settings.set(session_id, Dictionary())

        with FileLogFactory(settings).acquire(session_id):
            assert (log_dir / "FIX.4.2-SENDER-TARGET-Q1.event.current.log").exists()
            assert (
                log_dir / "FIX.4.2-SENDER-TARGET-Q1.messages.current.log"
            ).exists()

    def test_per_session_settings(self, tmp_path, session_id):
        settings = SessionSettings({"FileLogPath": str(tmp_path / "default")})
        settings.set(
            session_id,
            Dictionary(
                {
                    "FileLogPath": str(tmp_path / "session"),
                    "FileLogBackupPath": str(tmp_path / "session-backup"),
                    "FileLogMessages": "N",
                    "MillisecondsInTimeStamp": "N",
                }
            ),
        )
        with FileLogFactory(settings).acquire(session_id) as log:
            assert log.paths.path == str(tmp_path / "session")
            assert log.paths.backup_path == str(tmp_path / "session-backup")
            assert log.log_messages is False
            assert log.milliseconds_in_timestamp is False

    def test_fixed_path_overrides_settings(self, settings, session_id, tmp_path):
        factory = FileLogFactory(settings, path=str(tmp_path / "fixed"))
        with factory.acquire(session_id) as log:
            assert log.paths.path == str(tmp_path / "fixed")
            assert log.paths.backup_path == str(tmp_path / "fixed")

    def test_fixed_path_and_backup_path(self, settings, session_id, tmp_path):
        factory = FileLogFactory(
            settings,
            path=str(tmp_path / "fixed"),
            backup_path=str(tmp_path / "fixed-backup"),
        )
        with factory.acquire(session_id) as log:
            assert log.paths.backup_path == str(tmp_path / "fixed-backup")
            assert (tmp_path / "fixed-backup").is_dir()

    def test_unknown_session(self, settings):
        factory = FileLogFactory(settings)
        with pytest.raises(ConfigurationError, match="Session not found"):
            factory.create(SessionID("FIX.4.4", "NOBODY", "NOWHERE"))

    def test_malformed_flag(self, log_dir, session_id):
        settings = SessionSettings({"FileLogPath": str(log_dir)})
        settings.set(session_id, Dictionary({"FileLogMessages": "perhaps"}))
        with pytest.raises(ConfigurationError):
            FileLogFactory(settings).create(session_id)


class TestFactory:
    def test_needs_settings_or_path(self):
        with pytest.raises(ValueError):
            FileLogFactory()

    def test_acquire_releases_on_exit(self, settings, session_id):
        factory = FileLogFactory(settings)
        with factory.acquire() as global_log:
            assert factory.global_log_count == 1
        assert factory.global_log_count == 0
        assert global_log.closed

        with factory.acquire(session_id) as session_log:
            session_log.on_event("inside")
        assert session_log.closed

    def test_acquire_releases_on_error(self, settings):
        factory = FileLogFactory(settings)
        with pytest.raises(RuntimeError):
            with factory.acquire():
                raise RuntimeError("boom")
        assert factory.global_log_count == 0
