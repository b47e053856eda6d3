from __future__ import annotations

import json
import zipfile
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from config.settings import StepConfig
from runner.driver import StepContext, StepDriver, TaskProfile
from reporting.artifacts import ArtifactCategory
from tools.base import GradleError


class FakeCommand:
    def __init__(self, arguments: List[str], exit_code: int, on_run: Optional[Callable[[], None]]):
        self.arguments = arguments
        self.exit_code = exit_code
        self.on_run = on_run
        self.ran = False

    def printable(self) -> str:
        return "./gradlew " + " ".join(self.arguments)

    def run(self) -> int:
        self.ran = True
        if self.on_run:
            self.on_run()
        return self.exit_code


class FakeTask:
    def __init__(self, name: str, variants: Dict[str, List[str]], exit_code: int = 0, on_run=None, error=None):
        self.name = name
        self.variants = variants
        self.exit_code = exit_code
        self.on_run = on_run
        self.error = error
        self.commands: List[FakeCommand] = []

    def get_variants(self, args=None):
        if self.error:
            raise self.error
        return self.variants

    def get_command(self, variants, args=None):
        tasks = [f"{m}:{self.name}{v}" for m, names in variants.items() for v in names]
        command = FakeCommand(tasks + list(args or []), self.exit_code, self.on_run)
        self.commands.append(command)
        return command


class FakeProject:
    def __init__(self, task: FakeTask):
        self.task = task

    def get_task(self, name: str) -> FakeTask:
        assert name == self.task.name
        return self.task


def _write(path: Path, data: bytes = b"<testsuite/>") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


def _driver(project: Path, tmp_path: Path, task: FakeTask, **config) -> StepDriver:
    config.setdefault("task", task.name)
    step_config = StepConfig(
        project_location=str(project),
        deploy_dir=str(tmp_path / "deploy"),
        test_result_dir=str(tmp_path / "results"),
        **config,
    )
    return StepDriver(StepContext(config=step_config, project=FakeProject(task)))


def test_unit_test_run_exports_selected_variant(project: Path, tmp_path: Path) -> None:
    def gradle_run() -> None:
        _write(project / "app/build/test-results/testDebugUnitTest/TEST-Foo.xml")
        _write(project / "app/build/reports/tests/testDebugUnitTest/index.html", b"<html/>")

    task = FakeTask("test", {"app": ["DebugUnitTest", "ReleaseUnitTest"]}, on_run=gradle_run)

    exit_code = _driver(project, tmp_path, task, variant="debug").run()

    assert exit_code == 0
    assert task.commands[0].arguments == ["app:testDebugUnitTest"]
    results = tmp_path / "results"
    assert (results / "app-debug" / "TEST-Foo.xml").exists()
    assert json.loads((results / "app-debug" / "test-info.json").read_text()) == {"test-name": "app-debug"}
    assert sorted(p.name for p in (tmp_path / "deploy").iterdir()) == ["app-test-results.zip", "app-tests.zip"]
    with zipfile.ZipFile(tmp_path / "deploy" / "app-tests.zip") as zf:
        assert "tests/testDebugUnitTest/index.html" in zf.namelist()


def test_failed_test_run_still_exports_then_fails(project: Path, tmp_path: Path) -> None:
    def gradle_run() -> None:
        _write(project / "app/build/test-results/testDebugUnitTest/TEST-Foo.xml")

    task = FakeTask("test", {"app": ["DebugUnitTest"]}, exit_code=1, on_run=gradle_run)

    exit_code = _driver(project, tmp_path, task).run()

    assert exit_code == 1
    assert (tmp_path / "results" / "app-debug" / "TEST-Foo.xml").exists()


def test_snapshot_run_exports_deltas_to_numbered_other_dirs(project: Path, tmp_path: Path) -> None:
    def gradle_run() -> None:
        _write(project / "app/build/test-results/testDebugUnitTest/TEST-Foo.xml")
        _write(project / "app/build/paparazzi/failures/delta-a.png", b"\x89PNG a")
        _write(project / "app/build/paparazzi/failures/delta-b.png", b"\x89PNG b")
        _write(project / "app/build/paparazzi/failures/actual-a.png", b"\x89PNG")

    task = FakeTask("verifySnapshots", {"app": ["Debug"]}, on_run=gradle_run)

    exit_code = _driver(project, tmp_path, task).run()

    assert exit_code == 0
    results = tmp_path / "results"
    assert (results / "app-debug" / "TEST-Foo.xml").exists()
    assert (results / "other" / "delta-a.png").read_bytes() == b"\x89PNG a"
    assert (results / "other-1" / "delta-b.png").read_bytes() == b"\x89PNG b"
    assert not list(results.rglob("actual-a.png"))
    assert (tmp_path / "deploy" / "app-failures.zip").exists()


def test_empty_selection_skips_run(project: Path, tmp_path: Path) -> None:
    task = FakeTask("test", {"app": ["DebugUnitTest"]})

    exit_code = _driver(project, tmp_path, task, variant="staging").run()

    assert exit_code == 0
    assert task.commands == []
    assert not (tmp_path / "results").exists()


def test_empty_selection_fails_when_configured(project: Path, tmp_path: Path) -> None:
    task = FakeTask("test", {"app": ["DebugUnitTest"]})

    exit_code = _driver(project, tmp_path, task, variant="staging", fail_on_empty_selection=True).run()

    assert exit_code == 1
    assert task.commands == []


def test_missing_module_fails_before_running(project: Path, tmp_path: Path) -> None:
    task = FakeTask("test", {"app": ["DebugUnitTest"]})

    exit_code = _driver(project, tmp_path, task, module="missing").run()

    assert exit_code == 1
    assert task.commands == []


def test_variant_listing_failure_fails(project: Path, tmp_path: Path) -> None:
    task = FakeTask("test", {}, error=GradleError("tasks listing failed"))
    assert _driver(project, tmp_path, task).run() == 1


def test_exports_disabled_without_output_dirs(project: Path, tmp_path: Path) -> None:
    def gradle_run() -> None:
        _write(project / "app/build/test-results/testDebugUnitTest/TEST-Foo.xml")

    task = FakeTask("test", {"app": ["DebugUnitTest"]}, on_run=gradle_run)
    config = StepConfig(project_location=str(project), task="test")

    exit_code = StepDriver(StepContext(config=config, project=FakeProject(task))).run()

    assert exit_code == 0
    assert not (tmp_path / "results").exists()
    assert not (tmp_path / "deploy").exists()


def test_task_profiles() -> None:
    unit = TaskProfile.for_task("test")
    assert unit.categories == (ArtifactCategory.HTML, ArtifactCategory.XML)
    assert unit.variant_suffix == "UnitTest"

    snapshots = TaskProfile.for_task("verifySnapshots")
    assert ArtifactCategory.SNAPSHOT in snapshots.categories
    assert snapshots.variant_suffix == ""


def test_unlaunchable_test_command_still_exports_then_fails(project: Path, tmp_path: Path) -> None:
    _write(project / "app/build/test-results/testDebugUnitTest/TEST-Foo.xml")

    def gradle_run() -> None:
        raise GradleError("Failed to execute gradlew: Permission denied")

    task = FakeTask("test", {"app": ["DebugUnitTest"]}, on_run=gradle_run)

    exit_code = _driver(project, tmp_path, task).run()

    assert exit_code == 1
    assert task.commands[0].ran
    assert (tmp_path / "results" / "app-debug" / "TEST-Foo.xml").exists()


class RecordingLog:
    def __init__(self):
        self.records = []

    def __getattr__(self, level):
        return lambda message: self.records.append((level, message))


def test_empty_selection_is_a_warning(project: Path, tmp_path: Path) -> None:
    task = FakeTask("test", {"app": ["DebugUnitTest"]})
    log = RecordingLog()
    step_config = StepConfig(project_location=str(project), task="test", variant="staging")

    exit_code = StepDriver(StepContext(config=step_config, project=FakeProject(task), log=log)).run()

    assert exit_code == 0
    assert ("warning", "No buildable variants found. Skipping test!") in log.records
    assert not [r for r in log.records if r[0] == "error"]
