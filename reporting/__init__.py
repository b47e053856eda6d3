"""Test result collection: classification and export of Gradle outputs."""

from .artifacts import Artifact, ArtifactCategory, find_artifacts, result_dirs, unit_test_result_dir
from .classifier import VariantIdentity, classify
from .deploy import deploy_zip_name, export_artifacts
from .testaddon import (
    OTHER_DIR_NAME,
    RESULT_DESCRIPTOR_FILE_NAME,
    TestAddonExporter,
    allocate_export_dir,
    ensure_descriptor,
    export_artifact,
)

__all__ = [
    "Artifact",
    "ArtifactCategory",
    "find_artifacts",
    "result_dirs",
    "unit_test_result_dir",
    "VariantIdentity",
    "classify",
    "deploy_zip_name",
    "export_artifacts",
    "OTHER_DIR_NAME",
    "RESULT_DESCRIPTOR_FILE_NAME",
    "TestAddonExporter",
    "allocate_export_dir",
    "ensure_descriptor",
    "export_artifact",
]
