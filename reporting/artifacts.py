"""Discovery of test result artifacts produced by a Gradle run."""

import fnmatch
import glob
import os
from enum import Enum
from pathlib import Path
from typing import List

from loguru import logger
from pydantic import BaseModel


class ArtifactCategory(str, Enum):
    """Result categories a test task can produce."""

    HTML = "html"
    XML = "xml"
    SNAPSHOT = "snapshot"


class Artifact(BaseModel):
    """One discovered output file or directory."""

    name: str
    path: str

    model_config = {"frozen": True}


def module_path(module: str) -> str:
    """Directory of a module id relative to the project, `feature:login` -> `feature/login`."""
    return module.lstrip(":").replace(":", "/")


def module_slug(module: str) -> str:
    """File name friendly module id, `feature:login` -> `feature-login`."""
    return module.lstrip(":").replace(":", "-")


def find_artifacts(folder: str, pattern: str) -> List[Artifact]:
    """
    Walk folder recursively and collect the files whose name matches pattern.

    A missing folder yields no artifacts. Unreadable sub directories are
    logged and skipped.
    """
    artifacts: List[Artifact] = []

    def _on_error(err: OSError) -> None:
        if os.path.exists(folder):
            logger.warning(f"failed to walk path: {err}")
        else:
            logger.debug(f"nothing to collect, {folder} does not exist")

    for dirpath, dirnames, filenames in os.walk(folder, onerror=_on_error):
        dirnames.sort()
        for filename in sorted(filenames):
            if not fnmatch.fnmatchcase(filename, pattern):
                continue
            path = os.path.join(dirpath, filename)
            artifacts.append(Artifact(name=extract_artifact_name(folder, path, "test"), path=path))
    return artifacts


def extract_artifact_name(root: str, path: str, prefix: str) -> str:
    """Artifact name: prefix plus the base name of path relative to root."""
    rel_path = os.path.relpath(path, root)
    return f"{prefix}-{os.path.basename(rel_path)}"


def result_dirs(project_location: str, module: str, pattern: str) -> List[Artifact]:
    """
    Result directories of one module for a path pattern.

    A pattern without glob characters names a single directory, which need
    not exist yet. Glob patterns expand to every matching directory.
    """
    base = os.path.join(project_location, module_path(module))
    full_path = os.path.join(base, pattern)
    slug = module_slug(module)

    if any(c in pattern for c in "*?["):
        paths = sorted(p for p in glob.glob(full_path) if os.path.isdir(p))
    else:
        paths = [full_path]

    artifacts = []
    for path in paths:
        name = os.path.basename(os.path.normpath(path))
        artifacts.append(Artifact(name=f"{slug}-{name}" if slug else name, path=path))
    return artifacts


def unit_test_result_dir(project_location: str, module: str, pattern: str, variant: str) -> Path:
    """Directory Gradle writes a variant's unit test XML results to."""
    base = variant[: -len("UnitTest")] if variant.endswith("UnitTest") else variant
    base = base[:1].upper() + base[1:]
    return Path(project_location) / module_path(module) / pattern / f"test{base}UnitTest"
