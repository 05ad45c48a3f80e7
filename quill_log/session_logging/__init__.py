"""File logging for message-processing sessions.

Each log writes an event stream and, unless disabled, a raw message stream
into per-session files that can be truncated or rotated into numbered
backups. ``FileLogFactory`` shares a single ``GLOBAL`` log between callers
that have no session.
"""

from quill_log.session_logging.config_schema import (
    FileLogSettings,
    load_file_log_settings,
)
from quill_log.session_logging.factory import FileLogFactory
from quill_log.session_logging.logger import FileLog, LogPaths

__all__ = [
    "FileLog",
    "FileLogFactory",
    "FileLogSettings",
    "LogPaths",
    "load_file_log_settings",
]
