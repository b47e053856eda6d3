"""Data models for configuration module."""

from enum import Enum


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class CacheLevel(str, Enum):
    """Gradle cache collection levels."""

    NONE = "none"
    ONLY_DEPS = "only_deps"
    ALL = "all"
