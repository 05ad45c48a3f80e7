"""File log with an event stream and an optional raw message stream.

Files are laid out as::

    <path>/<prefix>.event.current.log
    <path>/<prefix>.messages.current.log
    <backup_path>/<prefix>.event.backup.<n>.log
    <backup_path>/<prefix>.messages.backup.<n>.log

A FileLog has a single writer. Only ``backup()`` is serialized internally.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Optional, TextIO

from quill_log.errors import ConfigurationError
from quill_log.session_logging.formatters import format_line

logger = logging.getLogger(__name__)

EVENT_STREAM = "event"
MESSAGES_STREAM = "messages"


@dataclass(frozen=True, slots=True)
class LogPaths:
    path: str
    backup_path: str
    full_prefix: str
    full_backup_prefix: str

    @classmethod
    def build(
        cls, path: Optional[str], backup_path: Optional[str], prefix: str
    ) -> "LogPaths":
        path = path or "."
        backup_path = backup_path or path
        return cls(
            path=path,
            backup_path=backup_path,
            full_prefix=os.path.join(path, prefix + "."),
            full_backup_prefix=os.path.join(backup_path, prefix + "."),
        )

    def current_file(self, stream: str) -> str:
        return f"{self.full_prefix}{stream}.current.log"

    def backup_file(self, stream: str, index: int) -> str:
        return f"{self.full_backup_prefix}{stream}.backup.{index}.log"


def ensure_directory(path: str) -> None:
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as exc:
        raise ConfigurationError(f"Could not create directory: {path}") from exc


class _LogStreams:
    """Event handle plus optional messages handle, opened and closed as a pair."""

    def __init__(self, event_path: str, messages_path: Optional[str]):
        self.event_path = event_path
        self.messages_path = messages_path
        self.event: Optional[TextIO] = None
        self.messages: Optional[TextIO] = None

    @property
    def closed(self) -> bool:
        return self.event is None

    def open(self, mode: str) -> None:
        try:
            if self.messages_path is not None:
                self.messages = open(self.messages_path, mode, encoding="utf-8")
            self.event = open(self.event_path, mode, encoding="utf-8")
        except OSError:
            self.close()
            raise

    def close(self) -> None:
        handles = (self.messages, self.event)
        self.messages = None
        self.event = None
        for handle in handles:
            if handle is not None:
                handle.close()


class FileLog:
    """Persists protocol events and, optionally, raw messages for one session."""

    def __init__(
        self,
        path: Optional[str],
        backup_path: Optional[str],
        prefix: str,
        log_messages: bool = True,
        milliseconds_in_timestamp: bool = True,
    ):
        if not prefix:
            raise ValueError("FileLog prefix must not be empty")

        self.prefix = prefix
        self.log_messages = log_messages
        self._milliseconds_in_timestamp = milliseconds_in_timestamp
        self._backup_lock = threading.Lock()

        self.paths = LogPaths.build(path, backup_path, prefix)
        ensure_directory(self.paths.path)
        ensure_directory(self.paths.backup_path)

        self.event_file_name = self.paths.current_file(EVENT_STREAM)
        self.messages_file_name: Optional[str] = (
            self.paths.current_file(MESSAGES_STREAM) if log_messages else None
        )
        self._streams = _LogStreams(self.event_file_name, self.messages_file_name)

        try:
            self._streams.open("a")
        except OSError as exc:
            failed = exc.filename or self.event_file_name
            kind = MESSAGES_STREAM if failed == self.messages_file_name else EVENT_STREAM
            raise ConfigurationError(f"Could not open {kind} file: {failed}") from exc
        logger.debug("Opened file log %s in %s", prefix, self.paths.path)

    @property
    def milliseconds_in_timestamp(self) -> bool:
        return self._milliseconds_in_timestamp

    @milliseconds_in_timestamp.setter
    def milliseconds_in_timestamp(self, value: bool) -> None:
        self._milliseconds_in_timestamp = value

    @property
    def closed(self) -> bool:
        return self._streams.closed

    def on_incoming(self, text: str) -> None:
        if self.log_messages:
            self._write(self._streams.messages, text)

    def on_outgoing(self, text: str) -> None:
        if self.log_messages:
            self._write(self._streams.messages, text)

    def on_event(self, text: str) -> None:
        self._write(self._streams.event, text)

    def _write(self, handle: Optional[TextIO], text: str) -> None:
        if handle is None:
            raise ValueError(f"File log {self.prefix} is closed")
        handle.write(format_line(text, milliseconds=self._milliseconds_in_timestamp))
        handle.flush()

    def clear(self) -> None:
        """Truncate the current files."""
        self._ensure_open()
        self._streams.close()
        self._streams.open("w")

    def backup(self) -> str:
        """Move the current files to the first free backup number and start new ones.

        Returns:
            Path of the event backup file that was written
        """
        with self._backup_lock:
            self._ensure_open()
            self._streams.close()

            index = 0
            while True:
                index += 1
                event_backup = self.paths.backup_file(EVENT_STREAM, index)
                messages_backup = (
                    self.paths.backup_file(MESSAGES_STREAM, index)
                    if self.log_messages
                    else None
                )
                if os.path.exists(event_backup):
                    continue
                if messages_backup is not None and os.path.exists(messages_backup):
                    continue
                break

            renamed = []
            try:
                if messages_backup is not None:
                    os.rename(self.messages_file_name, messages_backup)
                    renamed.append((messages_backup, self.messages_file_name))
                os.rename(self.event_file_name, event_backup)
            except OSError:
                # Put back what moved and keep appending to the unrotated files
                try:
                    for source, target in renamed:
                        os.rename(source, target)
                finally:
                    self._streams.open("a")
                raise
            self._streams.open("w")

        logger.info("Backed up file log %s as number %d", self.prefix, index)
        return event_backup

    def _ensure_open(self) -> None:
        if self._streams.closed:
            raise ValueError(f"File log {self.prefix} is closed")

    def close(self) -> None:
        if not self._streams.closed:
            self._streams.close()
            logger.debug("Closed file log %s", self.prefix)

    def __enter__(self) -> "FileLog":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
