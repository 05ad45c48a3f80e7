"""Hands out the shared global file log and per-session file logs."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional, Protocol

from quill_log.config import Dictionary
from quill_log.session_id import GLOBAL_PREFIX, SessionID, generate_prefix
from quill_log.session_logging.config_schema import (
    FileLogSettings,
    load_file_log_settings,
)
from quill_log.session_logging.logger import FileLog

logger = logging.getLogger(__name__)


class SettingsProvider(Protocol):
    def get(self, session_id: Optional[SessionID] = None) -> Dictionary: ...


class FileLogFactory:
    """Creates and destroys file logs.

    The global log is shared: every ``create()`` without a session bumps a
    reference count and every ``destroy()`` of it drops one, and the log is
    closed when the count reaches zero. Session logs are never shared.
    """

    def __init__(
        self,
        settings: Optional[SettingsProvider] = None,
        path: Optional[str] = None,
        backup_path: Optional[str] = None,
    ):
        if settings is None and not path:
            raise ValueError("FileLogFactory needs settings or a fixed path")
        self._settings = settings
        self._path = path or ""
        self._backup_path = backup_path or ""
        self._global_log: Optional[FileLog] = None
        self._global_log_count = 0
        self._lock = threading.Lock()

    @property
    def global_log_count(self) -> int:
        return self._global_log_count

    def create(self, session_id: Optional[SessionID] = None) -> FileLog:
        if session_id is None:
            return self._acquire_global_log()
        return self._open_log(self._resolve(session_id), generate_prefix(session_id))

    def destroy(self, log: FileLog) -> None:
        with self._lock:
            if log is not None and log is self._global_log:
                self._global_log_count -= 1
                logger.debug(
                    "Global file log released, %d holder(s) left",
                    self._global_log_count,
                )
                if self._global_log_count > 0:
                    return
                self._global_log = None
                self._global_log_count = 0
        log.close()

    @contextmanager
    def acquire(self, session_id: Optional[SessionID] = None) -> Iterator[FileLog]:
        """Create a log for the duration of a ``with`` block."""
        log = self.create(session_id)
        try:
            yield log
        finally:
            self.destroy(log)

    def _acquire_global_log(self) -> FileLog:
        with self._lock:
            self._global_log_count += 1
            if self._global_log_count > 1:
                logger.debug(
                    "Global file log shared, %d holder(s)", self._global_log_count
                )
                return self._global_log
            try:
                self._global_log = self._open_log(self._resolve(), GLOBAL_PREFIX)
            except Exception as exc:
                self._global_log_count -= 1
                logger.warning("Could not create global file log: %s", exc)
                raise
            return self._global_log

    def _resolve(self, session_id: Optional[SessionID] = None) -> FileLogSettings:
        if self._settings is None:
            settings = Dictionary()
        elif session_id is None:
            settings = self._settings.get()
        else:
            settings = self._settings.get(session_id)
        return load_file_log_settings(settings, self._path, self._backup_path)

    @staticmethod
    def _open_log(settings: FileLogSettings, prefix: str) -> FileLog:
        return FileLog(
            settings.path,
            settings.backup_path,
            prefix,
            log_messages=settings.log_messages,
            milliseconds_in_timestamp=settings.milliseconds_in_timestamp,
        )
