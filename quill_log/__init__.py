"""File-backed audit logs for message-processing sessions."""

from quill_log.config import Dictionary, SessionSettings
from quill_log.errors import ConfigurationError, QuillLogError
from quill_log.session_id import GLOBAL_PREFIX, SessionID, generate_prefix
from quill_log.session_logging import FileLog, FileLogFactory, LogPaths

__all__ = [
    "ConfigurationError",
    "Dictionary",
    "FileLog",
    "FileLogFactory",
    "GLOBAL_PREFIX",
    "LogPaths",
    "QuillLogError",
    "SessionID",
    "SessionSettings",
    "generate_prefix",
]
