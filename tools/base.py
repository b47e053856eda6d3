"""Base error and result types shared by the step's components."""

from typing import List, Optional

from pydantic import BaseModel


class StepError(Exception):
    """Step error with actionable guidance."""

    def __init__(
        self,
        message: str,
        suggestions: Optional[List[str]] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.suggestions = suggestions or []
        self.error_code = error_code

    def __str__(self) -> str:
        return self.message


class ConfigError(StepError):
    """Malformed or missing configuration. Fatal before anything runs."""


class GradleError(StepError):
    """The build driver could not open the project or list its variants."""


class SelectionError(StepError):
    """Variant selection failed. Fatal before anything runs."""


class ModuleNotFound(SelectionError):
    def __init__(self, module: str):
        super().__init__(
            message=f"module not found: {module}",
            suggestions=["Use the module id as Gradle reports it, e.g. 'app' or 'feature:login'"],
            error_code="MODULE_NOT_FOUND",
        )
        self.module = module


class VariantNotFound(SelectionError):
    def __init__(self, variant: str):
        super().__init__(
            message=f"no variant matches: {variant}",
            suggestions=["Run 'ats variants' to see the variants the task offers"],
            error_code="VARIANT_NOT_FOUND",
        )
        self.variant = variant


class TestRunError(StepError):
    """The Gradle test command exited with a non-zero status."""

    __test__ = False

    def __init__(self, exit_code: int, command: str = ""):
        super().__init__(
            message=f"test task failed with exit status {exit_code}",
            error_code="TEST_RUN_FAILED",
        )
        self.exit_code = exit_code
        self.command = command


class ClassificationError(StepError):
    """Artifact path does not follow the Gradle unit test result layout."""

    def __init__(self, path: str, reason: str):
        super().__init__(message=f"unknown path ({path}): {reason}", error_code=type(self).__name__)
        self.path = path
        self.reason = reason


class MarkerNotFound(ClassificationError):
    pass


class MalformedTaskDir(ClassificationError):
    pass


class MarkerTooShallow(ClassificationError):
    pass


class ExportError(StepError):
    """Creating a directory, writing a descriptor or copying an artifact failed."""


class CommandResult(BaseModel):
    """Result of an external command execution."""

    command: str
    exit_code: int
    output: str = ""

    @property
    def success(self) -> bool:
        return self.exit_code == 0
