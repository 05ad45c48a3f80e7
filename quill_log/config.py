"""Session settings backed by INI files.

``[DEFAULT]`` holds values shared by every session. Every other section
describes one session through its ``BeginString``, ``SenderCompID``,
``TargetCompID`` and optional ``SessionQualifier`` keys, and inherits the
defaults. Section names are free-form but must be unique, e.g.::

    [DEFAULT]
    FileLogPath = log

    [SESSION.1]
    BeginString = FIX.4.2
    SenderCompID = SENDER
    TargetCompID = TARGET
    FileLogMessages = N

Keys are case-insensitive.
"""

from __future__ import annotations

import configparser
import logging
from typing import Dict, Iterator, List, Mapping, Optional

from pydantic import TypeAdapter, ValidationError

from quill_log.errors import ConfigurationError
from quill_log.session_id import SessionID

logger = logging.getLogger(__name__)

DEFAULT_SECTION_NAME = "DEFAULT"

# Session identity keys
BEGIN_STRING = "BeginString"
SENDER_COMP_ID = "SenderCompID"
TARGET_COMP_ID = "TargetCompID"
SESSION_QUALIFIER = "SessionQualifier"

# File log keys
FILE_LOG_PATH = "FileLogPath"
FILE_LOG_BACKUP_PATH = "FileLogBackupPath"
FILE_LOG_MESSAGES = "FileLogMessages"
MILLISECONDS_IN_TIMESTAMP = "MillisecondsInTimeStamp"

_BOOL_ADAPTER = TypeAdapter(bool)


class Dictionary:
    """String-valued settings with typed accessors."""

    def __init__(
        self, values: Optional[Mapping[str, object]] = None, name: str = ""
    ):
        self.name = name
        self._values: Dict[str, str] = {}
        for key, value in (values or {}).items():
            if isinstance(value, bool):
                self.set_bool(key, value)
            else:
                self.set_string(key, str(value))

    def has(self, key: str) -> bool:
        return key.lower() in self._values

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def get_string(self, key: str) -> str:
        try:
            return self._values[key.lower()]
        except KeyError:
            raise ConfigurationError(f"{key} not defined") from None

    def get_bool(self, key: str) -> bool:
        value = self.get_string(key)
        try:
            return _BOOL_ADAPTER.validate_python(value.strip())
        except ValidationError:
            raise ConfigurationError(
                f"Illegal value {value!r} for {key}, expected a boolean"
            ) from None

    def set_string(self, key: str, value: str) -> None:
        self._values[key.lower()] = value.strip()

    def set_bool(self, key: str, value: bool) -> None:
        self._values[key.lower()] = "Y" if value else "N"

    def merged(self, overrides: "Dictionary") -> "Dictionary":
        """Return a copy of these values with *overrides* laid on top."""
        result = Dictionary(name=overrides.name or self.name)
        result._values = {**self._values, **overrides._values}
        return result


class SessionSettings:
    """Default settings plus one settings dictionary per configured session."""

    def __init__(self, defaults: Optional[Mapping[str, object]] = None):
        self._defaults = Dictionary(defaults, name=DEFAULT_SECTION_NAME)
        self._sessions: Dict[SessionID, Dictionary] = {}

    @classmethod
    def from_string(cls, text: str, source: str = "<string>") -> "SessionSettings":
        parser = configparser.ConfigParser(interpolation=None)
        try:
            parser.read_string(text, source=source)
        except configparser.Error as exc:
            raise ConfigurationError(f"Could not parse settings {source}: {exc}") from exc

        settings = cls(parser.defaults())
        for section in parser.sections():
            values = Dictionary(dict(parser.items(section)), name=section)
            settings.set(_session_id_from(values), values)
        logger.debug("Loaded %d session(s) from %s", len(settings._sessions), source)
        return settings

    @classmethod
    def from_file(cls, path: str) -> "SessionSettings":
        try:
            with open(path, "r", encoding="utf-8") as settings_file:
                text = settings_file.read()
        except OSError as exc:
            raise ConfigurationError(f"Could not read settings file: {path}") from exc
        return cls.from_string(text, source=str(path))

    def get(self, session_id: Optional[SessionID] = None) -> Dictionary:
        """Return the defaults, or the settings of *session_id* merged over them."""
        if session_id is None:
            return self._defaults
        try:
            values = self._sessions[session_id]
        except KeyError:
            raise ConfigurationError(f"Session not found: {session_id}") from None
        return self._defaults.merged(values)

    def set(self, session_id: SessionID, values: Dictionary) -> None:
        if session_id in self._sessions:
            raise ConfigurationError(f"Duplicate session: {session_id}")
        self._sessions[session_id] = values

    def set_defaults(self, values: Mapping[str, object]) -> None:
        self._defaults = Dictionary(values, name=DEFAULT_SECTION_NAME)

    def has(self, session_id: SessionID) -> bool:
        return session_id in self._sessions

    def session_ids(self) -> List[SessionID]:
        return list(self._sessions)


def _session_id_from(values: Dictionary) -> SessionID:
    qualifier = (
        values.get_string(SESSION_QUALIFIER) if values.has(SESSION_QUALIFIER) else ""
    )
    return SessionID(
        begin_string=values.get_string(BEGIN_STRING),
        sender_comp_id=values.get_string(SENDER_COMP_ID),
        target_comp_id=values.get_string(TARGET_COMP_ID),
        session_qualifier=qualifier,
    )
