"""Exceptions raised by the file log package."""


class QuillLogError(Exception):
    """Base class for file log errors."""


class ConfigurationError(QuillLogError):
    """Raised when a setting is missing or malformed, or a log file cannot be opened."""
