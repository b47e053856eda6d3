"""Configuration module for the Android test step."""

from typing import Optional

from .logger import create_step_logger, setup_step_logging
from .models import CacheLevel, LogLevel
from .settings import StepConfig


def setup_logging(config: StepConfig):
    """Setup logging configuration."""
    return setup_step_logging(config)


# Global configuration instance
_config: Optional[StepConfig] = None


def get_config() -> StepConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = StepConfig.from_env()
        setup_logging(_config)
    return _config


def set_config(config: StepConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
    setup_logging(config)


__all__ = [
    "StepConfig",
    "LogLevel",
    "CacheLevel",
    "get_config",
    "set_config",
    "setup_logging",
    "create_step_logger",
]
