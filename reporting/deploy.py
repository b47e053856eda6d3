"""Export of result directories into the deploy directory as zip archives."""

import os
import shutil
from datetime import datetime
from typing import Callable, List, Optional

from loguru import logger

from tools.base import ExportError

from .artifacts import Artifact
from .testaddon import display_path

ZIP_EXT = ".zip"
TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def deploy_zip_name(deploy_dir: str, name: str, now: Optional[Callable[[], datetime]] = None) -> str:
    """
    File name of the zip for an artifact named name.

    An existing zip of the same name is never overwritten, the new one gets a
    timestamp suffix instead: app-tests.zip -> app-tests-20240101120000.zip,
    then app-tests-20240101120000-1.zip within the same second.
    """
    zip_name = name + ZIP_EXT
    if not os.path.exists(os.path.join(deploy_dir, zip_name)):
        return zip_name
    timestamp = (now or datetime.now)().strftime(TIMESTAMP_FORMAT)
    zip_name = f"{name}-{timestamp}{ZIP_EXT}"
    # same name exported again within the same second
    counter = 0
    while os.path.exists(os.path.join(deploy_dir, zip_name)):
        counter += 1
        zip_name = f"{name}-{timestamp}-{counter}{ZIP_EXT}"
    return zip_name


def export_zip(artifact: Artifact, deploy_dir: str, zip_name: str) -> str:
    """Zip the artifact's directory, itself included, into deploy_dir/zip_name."""
    if not os.path.isdir(artifact.path):
        raise ExportError(f"result directory does not exist: {artifact.path}")

    source = os.path.normpath(os.path.abspath(artifact.path))
    try:
        os.makedirs(deploy_dir, exist_ok=True)
        archive = shutil.make_archive(
            os.path.join(deploy_dir, zip_name[: -len(ZIP_EXT)]),
            "zip",
            root_dir=os.path.dirname(source),
            base_dir=os.path.basename(source),
        )
    except OSError as e:
        raise ExportError(f"failed to zip {artifact.path}: {e}") from e
    return archive


def export_artifacts(
    deploy_dir: str,
    artifacts: List[Artifact],
    log=logger,
    now: Optional[Callable[[], datetime]] = None,
) -> List[str]:
    """Export every artifact as a zip, return the paths of the created archives."""
    exported = []
    for artifact in artifacts:
        zip_name = deploy_zip_name(deploy_dir, artifact.name, now)
        log.info(f"  Export [ {display_path(artifact.path)} => $BITRISE_DEPLOY_DIR/{zip_name} ]")
        try:
            exported.append(export_zip(artifact, deploy_dir, zip_name))
        except ExportError as e:
            log.warning(f"failed to export artifact ({artifact.path}), error: {e}")
            continue
    return exported
