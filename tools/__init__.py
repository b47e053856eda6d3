"""Tools package: error taxonomy and the Gradle build driver."""

from .base import (
    ClassificationError,
    CommandResult,
    ConfigError,
    ExportError,
    GradleError,
    MalformedTaskDir,
    MarkerNotFound,
    MarkerTooShallow,
    ModuleNotFound,
    SelectionError,
    StepError,
    TestRunError,
    VariantNotFound,
)
from .gradle_tool import CommandRunner, GradleCommand, GradleProject, GradleTask, Variants, parse_variants

__all__ = [
    "StepError", "ConfigError", "GradleError", "SelectionError", "ModuleNotFound",
    "VariantNotFound", "TestRunError", "ClassificationError", "MarkerNotFound",
    "MalformedTaskDir", "MarkerTooShallow", "ExportError", "CommandResult",
    "CommandRunner", "GradleProject", "GradleTask", "GradleCommand", "Variants",
    "parse_variants",
]
