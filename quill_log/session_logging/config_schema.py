"""Settings consumed by file logs."""

from typing import Optional

from pydantic import BaseModel, ValidationError

from quill_log.config import (
    FILE_LOG_BACKUP_PATH,
    FILE_LOG_MESSAGES,
    FILE_LOG_PATH,
    MILLISECONDS_IN_TIMESTAMP,
    Dictionary,
)
from quill_log.errors import ConfigurationError


class FileLogSettings(BaseModel):
    """Resolved locations and flags for one file log."""

    path: str
    backup_path: str
    log_messages: bool = True
    milliseconds_in_timestamp: bool = True


def load_file_log_settings(
    settings: Dictionary,
    path: Optional[str] = None,
    backup_path: Optional[str] = None,
) -> FileLogSettings:
    """Resolve file log settings from a settings dictionary.

    Args:
        settings: Global or per-session settings
        path: Fixed log directory that takes precedence over ``FileLogPath``
        backup_path: Fixed backup directory, only honoured together with ``path``

    Returns:
        FileLogSettings with the backup path defaulting to the log path

    Raises:
        ConfigurationError: ``FileLogPath`` is required but missing, or a
            flag is not a boolean
    """
    raw: dict = {}
    for key, field in (
        (FILE_LOG_MESSAGES, "log_messages"),
        (MILLISECONDS_IN_TIMESTAMP, "milliseconds_in_timestamp"),
    ):
        if settings.has(key):
            raw[field] = settings.get_string(key)

    if path:
        raw["path"] = path
        raw["backup_path"] = backup_path or path
    else:
        raw["path"] = settings.get_string(FILE_LOG_PATH)
        raw["backup_path"] = (
            settings.get_string(FILE_LOG_BACKUP_PATH)
            if settings.has(FILE_LOG_BACKUP_PATH)
            else raw["path"]
        )

    try:
        return FileLogSettings.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid file log settings: {exc}") from exc
