"""Configuration settings for the Android test step."""

import os
import shlex
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from tools.base import ConfigError

from .models import CacheLevel, LogLevel

_TRUTHY = ("true", "1", "yes")


class StepConfig(BaseModel):
    """Main configuration class."""

    # Project inputs
    project_location: str = Field(default=".")
    report_path_pattern: str = Field(default="build/reports/tests")
    result_path_pattern: str = Field(default="build/test-results")
    delta_path_pattern: str = Field(default="build/paparazzi/failures")

    # Task selection
    task: str = Field(default="test")
    variant: str = Field(default="")
    module: str = Field(default="")
    arguments: str = Field(default="")  # shell-quoted extra Gradle arguments
    fail_on_empty_selection: bool = Field(default=False)

    # Output directories, empty disables the export
    deploy_dir: str = Field(default="")
    test_result_dir: str = Field(default="")

    cache_level: CacheLevel = Field(default=CacheLevel.ONLY_DEPS)

    # Logging configuration
    is_debug: bool = Field(default=False)
    log_level: LogLevel = Field(default=LogLevel.INFO)
    log_file: Optional[str] = Field(default=None)
    log_rotation: str = Field(default="50 MB")
    log_retention: str = Field(default="30 days")

    @field_validator("project_location")
    @classmethod
    def _project_location_is_dir(cls, value: str) -> str:
        if not value or not Path(value).is_dir():
            raise ValueError(f"project location is not a directory: {value!r}")
        return value

    @field_validator("task")
    @classmethod
    def _task_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("task must not be empty")
        return value.strip()

    @field_validator("arguments")
    @classmethod
    def _arguments_are_shell_words(cls, value: str) -> str:
        try:
            shlex.split(value)
        except ValueError as e:
            raise ValueError(f"failed to parse arguments: {e}") from e
        return value

    @property
    def gradle_args(self) -> List[str]:
        """Extra Gradle arguments, shell-split."""
        return shlex.split(self.arguments)

    @classmethod
    def from_env(cls, **overrides) -> "StepConfig":
        """Create configuration from environment variables.

        Keyword overrides with a value other than None take precedence over
        the environment. Raises ConfigError when validation fails.
        """
        env_file = Path(".env")
        if env_file.exists():
            load_dotenv(env_file)

        values = dict(
            project_location=os.getenv("project_location", "."),
            report_path_pattern=os.getenv("report_path_pattern", "build/reports/tests"),
            result_path_pattern=os.getenv("result_path_pattern", "build/test-results"),
            delta_path_pattern=os.getenv("delta_path_pattern", "build/paparazzi/failures"),
            task=os.getenv("task", "test"),
            variant=os.getenv("variant", ""),
            module=os.getenv("module", ""),
            arguments=os.getenv("arguments", ""),
            fail_on_empty_selection=os.getenv("fail_on_empty_selection", "false").lower() in _TRUTHY,
            deploy_dir=os.getenv("BITRISE_DEPLOY_DIR", ""),
            test_result_dir=os.getenv("BITRISE_TEST_RESULT_DIR", ""),
            cache_level=os.getenv("cache_level", CacheLevel.ONLY_DEPS.value),
            is_debug=os.getenv("is_debug", "false").lower() in _TRUTHY,
            log_file=os.getenv("ATS_LOG_FILE") or None,
        )
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**values)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ConfigError(
                message=f"Process config: {problems}",
                suggestions=["Check the step inputs and the environment variables they map to"],
                error_code="INVALID_CONFIG",
            ) from e

    def summary_rows(self) -> List[Tuple[str, str]]:
        """Key/value rows describing the resolved inputs."""
        return [
            ("project_location", self.project_location),
            ("report_path_pattern", self.report_path_pattern),
            ("result_path_pattern", self.result_path_pattern),
            ("delta_path_pattern", self.delta_path_pattern),
            ("task", self.task),
            ("variant", self.variant or "-"),
            ("module", self.module or "-"),
            ("arguments", self.arguments or "-"),
            ("deploy_dir", self.deploy_dir or "-"),
            ("test_result_dir", self.test_result_dir or "-"),
            ("cache_level", self.cache_level.value),
            ("fail_on_empty_selection", str(self.fail_on_empty_selection).lower()),
            ("is_debug", str(self.is_debug).lower()),
        ]
