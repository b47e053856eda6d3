"""Orchestration of one step run: select variants, run tests, export results."""

import os
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from loguru import logger

from config.logger import create_step_logger
from config.settings import StepConfig
from reporting.artifacts import (
    Artifact,
    ArtifactCategory,
    find_artifacts,
    module_path,
    result_dirs,
    unit_test_result_dir,
)
from reporting.deploy import export_artifacts
from reporting.testaddon import TestAddonExporter
from tools.base import StepError, TestRunError, VariantNotFound
from tools.gradle_tool import CommandRunner, GradleProject, Variants

from .selector import log_variants, select_variants

XML_PATTERN = "*.xml"
DELTA_PATTERN = "delta-*.png"


@dataclass(frozen=True)
class TaskProfile:
    """What a Gradle task produces and how its variants are named."""

    task_name: str
    categories: Tuple[ArtifactCategory, ...]
    variant_suffix: str = ""

    @classmethod
    def for_task(cls, task_name: str) -> "TaskProfile":
        if task_name == "test":
            return cls(task_name, (ArtifactCategory.HTML, ArtifactCategory.XML), "UnitTest")
        return cls(task_name, tuple(ArtifactCategory))


@dataclass
class StepContext:
    """Collaborators of a step run."""

    config: StepConfig
    project: Any  # GradleProject or anything with get_task(name)
    log: Any = field(default=logger)

    @classmethod
    def create(cls, config: StepConfig, runner: Optional[CommandRunner] = None) -> "StepContext":
        project = GradleProject.open(config.project_location, runner)
        return cls(config=config, project=project, log=create_step_logger(config.task))


class StepDriver:
    """Runs the configured Gradle test task and collects its results."""

    def __init__(self, context: StepContext, profile: Optional[TaskProfile] = None):
        self.context = context
        self.config = context.config
        self.log = context.log
        self.profile = profile or TaskProfile.for_task(self.config.task)
        self.project_location = os.path.abspath(self.config.project_location)

    def run(self) -> int:
        """Run the step and return the process exit code."""
        task = self.context.project.get_task(self.config.task)
        args = self.config.gradle_args

        try:
            variants = self.get_variants(task, args)
        except StepError as e:
            self.log.error(f"Run: failed to find buildable variants, error: {e}")
            for suggestion in e.suggestions:
                self.log.info(f"  • {suggestion}")
            return 1

        if not variants:
            self.log.warning(f"No buildable variants found. Skipping {self.config.task}!")
            return 0

        test_error = self.run_tests(task, variants, args)

        self.export_results(variants)

        if test_error is not None:
            return 1
        return 0

    def get_variants(self, task, args: List[str]) -> Variants:
        all_variants = task.get_variants(args)
        selected = select_variants(
            all_variants,
            module=self.config.module,
            variant=self.config.variant,
            variant_suffix=self.profile.variant_suffix,
            require_match=self.config.fail_on_empty_selection,
        )
        log_variants(all_variants, selected, log=self.log)
        if not selected and self.config.fail_on_empty_selection:
            raise VariantNotFound(self.config.variant or self.config.task)
        return selected

    def run_tests(self, task, variants: Variants, args: List[str]) -> Optional[TestRunError]:
        command = task.get_command(variants, args)
        self.log.info("Run test:")
        self.log.success(f"$ {command.printable()}")

        try:
            exit_code = command.run()
        except StepError as e:
            self.log.error(f"Run: failed to start test task, error: {e}")
            return TestRunError(-1, command.printable())

        if exit_code != 0:
            error = TestRunError(exit_code, command.printable())
            self.log.error(f"Run: test task failed, error: {error}")
            return error
        return None

    def export_results(self, variants: Variants) -> None:
        """Export everything the run produced, one failing artifact never stops the rest."""
        if self.config.deploy_dir:
            for category in self.profile.categories:
                self.log.info(f"Export {category.name} results:")
                artifacts = self.deploy_artifacts(variants, category)
                export_artifacts(self.config.deploy_dir, artifacts, log=self.log)

        if self.config.test_result_dir:
            self.log.info("Export XML results for test addon:")
            exporter = TestAddonExporter(self.config.test_result_dir, log=self.log)
            for artifact in self.test_addon_artifacts(variants):
                exporter.export(artifact)
            self.log.info(f"Exported {exporter.exported} artifact(s), {exporter.failed} failed")

    def _pattern(self, category: ArtifactCategory) -> str:
        return {
            ArtifactCategory.HTML: self.config.report_path_pattern,
            ArtifactCategory.XML: self.config.result_path_pattern,
            ArtifactCategory.SNAPSHOT: self.config.delta_path_pattern,
        }[category]

    def deploy_artifacts(self, variants: Variants, category: ArtifactCategory) -> List[Artifact]:
        artifacts: List[Artifact] = []
        for module in variants:
            artifacts.extend(result_dirs(self.project_location, module, self._pattern(category)))
        return artifacts

    def test_addon_artifacts(self, variants: Variants) -> List[Artifact]:
        """Unit test XML files of the selected variants, then snapshot delta images."""
        artifacts: List[Artifact] = []
        for module, names in variants.items():
            for variant in names:
                xml_dir = unit_test_result_dir(
                    self.project_location, module, self.config.result_path_pattern, variant
                )
                artifacts.extend(find_artifacts(str(xml_dir), XML_PATTERN))

        if ArtifactCategory.SNAPSHOT in self.profile.categories:
            for module in variants:
                delta_dir = os.path.join(
                    self.project_location, module_path(module), self.config.delta_path_pattern
                )
                artifacts.extend(find_artifacts(delta_dir, DELTA_PATTERN))
        return artifacts
