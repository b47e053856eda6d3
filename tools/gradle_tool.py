"""Gradle build driver: variant discovery and test command execution."""

import os
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger

from .base import CommandResult, GradleError

# module id -> variant names, in discovery order
Variants = Dict[str, List[str]]

# Helper tasks sharing a variant task's prefix, e.g. testDebugUnitTestClasses
EXCLUDED_VARIANT_SUFFIXES = ("Classes", "Sources", "Resources")


class CommandRunner:
    """Runs external commands on the host."""

    def run(self, args: List[str], cwd: Optional[str] = None, capture: bool = False) -> CommandResult:
        """
        Run a command and wait for it to exit.

        Args:
            args: Command line, executable first
            cwd: Working directory
            capture: Capture stdout/stderr into the result instead of streaming them
        """
        printable = " ".join(shlex.quote(a) for a in args)
        logger.debug(f"Executing: {printable} (cwd: {cwd or os.getcwd()})")
        try:
            if capture:
                completed = subprocess.run(
                    args,
                    cwd=cwd,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    encoding="utf-8",
                    errors="replace",
                )
                output = completed.stdout or ""
            else:
                completed = subprocess.run(args, cwd=cwd)
                output = ""
        except OSError as e:
            raise GradleError(
                message=f"Failed to execute {args[0]}: {e}",
                suggestions=["Check that the Gradle executable exists and is executable"],
                error_code="GRADLE_EXECUTION_ERROR",
            ) from e
        return CommandResult(command=printable, exit_code=completed.returncode, output=output)


def parse_variants(output: str, task_name: str) -> Variants:
    """
    Parse `gradle tasks --all` output into the variants of a task.

    Example lines:
        app:testDebugUnitTest - Run unit tests for the debug build.
        feature:login:testReleaseUnitTest - Run unit tests for the release build.
        testDebugUnitTest - Run unit tests for the debug build.

    yield {"app": ["DebugUnitTest"], "feature:login": ["ReleaseUnitTest"], "": ["DebugUnitTest"]}
    for the task name "test".
    """
    variants: Variants = {}
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue

        name = line.split()[0]
        module = ""
        if ":" in name:
            module, name = name.rsplit(":", 1)

        if not name.startswith(task_name):
            continue
        variant = name[len(task_name):]
        # "lint" must not pick up "lintVital..." style siblings in lower case
        if not variant or not variant[0].isupper():
            continue
        if variant.endswith(EXCLUDED_VARIANT_SUFFIXES):
            continue

        variants.setdefault(module, []).append(variant)
    return variants


class GradleCommand:
    """A ready-to-run Gradle invocation."""

    def __init__(self, executable: str, arguments: List[str], cwd: str, runner: CommandRunner):
        self.executable = executable
        self.arguments = arguments
        self.cwd = cwd
        self.runner = runner

    def printable(self) -> str:
        display = "./gradlew" if Path(self.executable).name == "gradlew" else self.executable
        return " ".join([display] + [shlex.quote(a) for a in self.arguments])

    def run(self) -> int:
        """Run the command with its output streamed to the console, return the exit status."""
        result = self.runner.run([self.executable] + self.arguments, cwd=self.cwd)
        return result.exit_code


class GradleTask:
    """A task name of a Gradle project, e.g. `test` or `verifySnapshots`."""

    def __init__(self, project: "GradleProject", name: str):
        self.project = project
        self.name = name

    def get_variants(self, args: Optional[List[str]] = None) -> Variants:
        """List the variants this task can run for, per module."""
        cmd = [self.project.executable, "tasks", "--all", "--console=plain", "--quiet"] + list(args or [])
        result = self.project.runner.run(cmd, cwd=self.project.location, capture=True)
        if not result.success:
            raise GradleError(
                message=f"failed to fetch variants, `{result.command}` exited with status {result.exit_code}",
                suggestions=[
                    "Check the Gradle output above for configuration errors",
                    "Verify the extra Gradle arguments are valid",
                ],
                error_code="GRADLE_TASKS_FAILED",
            )
        variants = parse_variants(result.output, self.name)
        logger.debug(f"Task {self.name}: discovered {sum(len(v) for v in variants.values())} variant(s)")
        return variants

    def get_command(self, variants: Variants, args: Optional[List[str]] = None) -> GradleCommand:
        """Gradle command running this task for every given module variant."""
        tasks = []
        for module, names in variants.items():
            for variant in names:
                task = f"{self.name}{variant}"
                tasks.append(f"{module}:{task}" if module else task)
        return GradleCommand(
            self.project.executable,
            tasks + list(args or []),
            cwd=self.project.location,
            runner=self.project.runner,
        )


class GradleProject:
    """A Gradle project on disk."""

    def __init__(self, location: str, executable: str, runner: CommandRunner):
        self.location = location
        self.executable = executable
        self.runner = runner

    @classmethod
    def open(cls, location: str, runner: Optional[CommandRunner] = None) -> "GradleProject":
        """Open the project at location, preferring its gradlew wrapper."""
        root = Path(location)
        if not root.is_dir():
            raise GradleError(
                message=f"Gradle project directory does not exist: {location}",
                error_code="PROJECT_NOT_FOUND",
            )
        executable = cls._determine_gradle_executable(root)
        if not executable:
            raise GradleError(
                message=f"No gradlew wrapper in {location} and no gradle on PATH",
                suggestions=[
                    "Commit the Gradle wrapper (gradlew) to the repository",
                    "Set project_location to the directory containing gradlew",
                ],
                error_code="GRADLE_NOT_FOUND",
            )
        return cls(str(root), executable, runner or CommandRunner())

    @staticmethod
    def _determine_gradle_executable(root: Path) -> Optional[str]:
        """Determine which Gradle executable to use."""
        wrapper = root / "gradlew"
        if wrapper.is_file():
            logger.debug("Found Gradle wrapper (gradlew)")
            # Make sure it's executable
            if not os.access(wrapper, os.X_OK):
                wrapper.chmod(wrapper.stat().st_mode | 0o111)
            return str(wrapper.resolve())

        system_gradle = shutil.which("gradle")
        if system_gradle:
            logger.debug("Found system Gradle")
            return system_gradle
        return None

    def get_task(self, name: str) -> GradleTask:
        return GradleTask(self, name)
