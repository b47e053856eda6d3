"""Logging setup for the step, console plus an optional log file."""

import sys
from pathlib import Path

from loguru import logger


def _console_format(verbose: bool) -> str:
    if verbose:
        return ("<green>{time:HH:mm:ss.SSS}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "<level>{message}</level>")
    return "<level>{message}</level>"


def _file_format() -> str:
    return "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"


def setup_step_logging(config) -> None:
    """Replace loguru's default sink with the step's sinks."""
    logger.remove()

    console_level = "DEBUG" if config.is_debug else config.log_level.value
    logger.add(
        sys.stderr,
        level=console_level,
        format=_console_format(config.is_debug),
        colorize=True,
    )

    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_path),
            level="DEBUG",
            format=_file_format(),
            rotation=config.log_rotation,
            retention=config.log_retention,
        )

    logger.debug(f"Logging initialized (console level: {console_level})")


def create_step_logger(task: str):
    """Logger bound to the Gradle task the step drives."""
    return logger.bind(task=task)
