from __future__ import annotations

import zipfile
from datetime import datetime
from pathlib import Path

from reporting.artifacts import Artifact, result_dirs
from reporting.deploy import deploy_zip_name, export_artifacts


def _fixed_now() -> datetime:
    return datetime(2024, 1, 2, 3, 4, 5)


def _report_dir(root: Path) -> Path:
    report = root / "app" / "build" / "reports" / "tests"
    report.mkdir(parents=True)
    (report / "index.html").write_text("<html></html>")
    return report


def test_deploy_zip_name_without_collision(tmp_path: Path) -> None:
    assert deploy_zip_name(str(tmp_path), "app-tests", _fixed_now) == "app-tests.zip"


def test_deploy_zip_name_with_collision(tmp_path: Path) -> None:
    (tmp_path / "app-tests.zip").write_bytes(b"")
    assert deploy_zip_name(str(tmp_path), "app-tests", _fixed_now) == "app-tests-20240102030405.zip"


def test_second_export_gets_timestamp_suffix(tmp_path: Path) -> None:
    report = _report_dir(tmp_path / "project")
    deploy = tmp_path / "deploy"
    artifact = Artifact(name="app-tests", path=str(report))

    first = export_artifacts(str(deploy), [artifact], now=_fixed_now)
    second = export_artifacts(str(deploy), [artifact], now=_fixed_now)

    assert Path(first[0]) == deploy / "app-tests.zip"
    assert Path(second[0]) == deploy / "app-tests-20240102030405.zip"
    assert (deploy / "app-tests.zip").exists()
    assert (deploy / "app-tests-20240102030405.zip").exists()


def test_zip_includes_result_dir_itself(tmp_path: Path) -> None:
    report = _report_dir(tmp_path / "project")
    deploy = tmp_path / "deploy"

    export_artifacts(str(deploy), [Artifact(name="app-tests", path=str(report))])

    with zipfile.ZipFile(deploy / "app-tests.zip") as zf:
        assert "tests/index.html" in zf.namelist()


def test_missing_result_dir_is_skipped(tmp_path: Path) -> None:
    report = _report_dir(tmp_path / "project")
    artifacts = [
        Artifact(name="lib-tests", path=str(tmp_path / "project" / "lib" / "build" / "reports" / "tests")),
        Artifact(name="app-tests", path=str(report)),
    ]

    exported = export_artifacts(str(tmp_path / "deploy"), artifacts)

    assert [Path(p).name for p in exported] == ["app-tests.zip"]


def test_result_dirs_names_by_module_and_pattern(tmp_path: Path) -> None:
    dirs = result_dirs(str(tmp_path), "feature:login", "build/reports/tests")
    assert dirs == [
        Artifact(
            name="feature-login-tests",
            path=str(tmp_path / "feature" / "login" / "build" / "reports" / "tests"),
        )
    ]


def test_result_dirs_expands_globs(tmp_path: Path) -> None:
    for name in ("testDebugUnitTest", "testReleaseUnitTest"):
        (tmp_path / "app" / "build" / "reports" / "tests" / name).mkdir(parents=True)

    dirs = result_dirs(str(tmp_path), "app", "build/reports/tests/*")

    assert [a.name for a in dirs] == ["app-testDebugUnitTest", "app-testReleaseUnitTest"]


def test_exports_within_same_second_never_overwrite(tmp_path: Path) -> None:
    report = _report_dir(tmp_path / "project")
    deploy = tmp_path / "deploy"
    artifact = Artifact(name="app-tests", path=str(report))

    exported = [export_artifacts(str(deploy), [artifact], now=_fixed_now)[0] for _ in range(3)]

    assert [Path(p).name for p in exported] == [
        "app-tests.zip",
        "app-tests-20240102030405.zip",
        "app-tests-20240102030405-1.zip",
    ]
    assert len(list(deploy.iterdir())) == 3
