"""Export of test results into the test addon's directory layout.

Every export directory under the test result dir holds one result set plus
a `test-info.json` descriptor naming it:

    $BITRISE_TEST_RESULT_DIR/
        app-debug/
            test-info.json      {"test-name":"app-debug"}
            TEST-com.example.FooTest.xml
        other/
            test-info.json      {"test-name":"other"}
            delta-com.example_FooTest_render.png
        other-1/
            ...
"""

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Tuple, Union

from loguru import logger

from tools.base import ClassificationError, ExportError

from .artifacts import Artifact
from .classifier import VariantIdentity, classify

# Export directory of artifacts which are not Android unit test results
OTHER_DIR_NAME = "other"

RESULT_DESCRIPTOR_FILE_NAME = "test-info.json"


def allocate_export_dir(
    classification: Union[VariantIdentity, ClassificationError], last_other_idx: int
) -> Tuple[str, int]:
    """
    Export directory name for a classification result.

    Unclassified artifacts are numbered to avoid overriding each other:
    other, other-1, other-2, ... The index of the last numbered one is
    threaded through the calls of one export pass, starting from -1.

    Returns:
        The directory name and the updated last other index
    """
    if isinstance(classification, VariantIdentity):
        return classification.dir_name, last_other_idx

    last_other_idx += 1
    if last_other_idx > 0:
        return f"{OTHER_DIR_NAME}-{last_other_idx}", last_other_idx
    return OTHER_DIR_NAME, last_other_idx


def _generate_test_info_file(export_dir: Path, data: bytes) -> None:
    fd, tmp_name = tempfile.mkstemp(prefix=".test-info-", dir=export_dir)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, export_dir / RESULT_DESCRIPTOR_FILE_NAME)
    except OSError:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def ensure_descriptor(export_dir: Union[str, Path]) -> None:
    """Create export_dir and its descriptor unless the descriptor already exists."""
    export_dir = Path(export_dir)
    try:
        export_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ExportError(f"could not ensure unique export dir ({export_dir}): {e}") from e

    if (export_dir / RESULT_DESCRIPTOR_FILE_NAME).exists():
        return

    data = json.dumps({"test-name": export_dir.name}, separators=(",", ":")).encode("utf-8")
    try:
        _generate_test_info_file(export_dir, data)
    except OSError as e:
        raise ExportError(f"create test info descriptor: generate file: {e}") from e


def export_artifact(path: Union[str, Path], base_dir: Union[str, Path], unique_dir: str) -> Path:
    """
    Export the artifact found at path into unique_dir, rooted at base_dir.

    An artifact with the same file name already exported there is overwritten.

    Returns:
        Path of the copy
    """
    export_dir = Path(base_dir) / unique_dir
    try:
        ensure_descriptor(export_dir)
    except ExportError as e:
        raise ExportError(f"skipping artifact ({path}): {e}") from e

    name = os.path.basename(os.fspath(path))
    target = export_dir / name
    try:
        shutil.copyfile(path, target)
    except OSError as e:
        raise ExportError(f"failed to export artifact ({name}), error: {e}") from e
    return target


def display_path(path: str) -> str:
    """Path relative to the working directory when possible, for log lines."""
    try:
        rel = os.path.relpath(path)
    except ValueError:
        return path
    if rel.startswith(".."):
        return path
    return f"./{rel}"


class TestAddonExporter:
    """One export pass into the test result directory.

    All artifacts of a pass, whatever their category, share the numbering of
    the `other` directories.
    """

    __test__ = False

    def __init__(self, test_result_dir: str, log=logger):
        self.test_result_dir = test_result_dir
        self.log = log
        self.last_other_idx = -1
        self.exported = 0
        self.failed = 0

    def export_dir_for(self, path: str) -> str:
        """Allocate the export directory of the next artifact in this pass."""
        try:
            classification = classify(path)
        except ClassificationError as e:
            self.log.debug(f"{e}, exporting as {OTHER_DIR_NAME}")
            classification = e
        dir_name, self.last_other_idx = allocate_export_dir(classification, self.last_other_idx)
        return dir_name

    def export(self, artifact: Artifact) -> bool:
        """Export one artifact, failures are logged and reported as False."""
        dir_name = self.export_dir_for(artifact.path)
        try:
            export_artifact(artifact.path, self.test_result_dir, dir_name)
        except ExportError as e:
            self.failed += 1
            self.log.warning(f"Failed to export test results for test addon: {e}")
            return False

        self.exported += 1
        target = os.path.join("$BITRISE_TEST_RESULT_DIR", dir_name, os.path.basename(artifact.path))
        self.log.info(f"  Export [{display_path(artifact.path)} => {target}]")
        return True
