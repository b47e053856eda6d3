"""Classifies Gradle unit test result paths into module and variant."""

import os
from typing import List, NamedTuple, Union

from tools.base import MalformedTaskDir, MarkerNotFound, MarkerTooShallow

# Gradle writes unit test results to <module>/build/test-results/test<Variant>UnitTest/
TEST_RESULTS_DIR_NAME = "test-results"
TASK_DIR_PREFIX = "test"
TASK_DIR_SUFFIX = "UnitTest"


class VariantIdentity(NamedTuple):
    module: str
    variant: str

    @property
    def dir_name(self) -> str:
        return f"{self.module}-{self.variant}"


def split_path(path: Union[str, bytes, os.PathLike]) -> List[str]:
    pth = os.fsdecode(path)
    if os.sep != "/":
        pth = pth.replace(os.sep, "/")
    return pth.split("/")


def lowercase_first_letter(value: str) -> str:
    return value[:1].lower() + value[1:]


def index_of_test_results_dir(parts: List[str]) -> int:
    """Index of the first test-results segment, -1 when there is none."""
    # example: ./app/build/test-results/testDebugUnitTest/TEST-sample.UnitTest0.xml
    for i, part in enumerate(parts):
        if part == TEST_RESULTS_DIR_NAME:
            return i
    return -1


def parse_variant_name(parts: List[str], marker_idx: int, path: str) -> str:
    if marker_idx + 1 >= len(parts):
        raise MalformedTaskDir(path, "Local Unit Test task output dir should follow the test-results part")

    task_output_dir = parts[marker_idx + 1]
    if not task_output_dir.startswith(TASK_DIR_PREFIX) or not task_output_dir.endswith(TASK_DIR_SUFFIX):
        raise MalformedTaskDir(path, "Local Unit Test task output dir should match test*UnitTest pattern")

    if len(task_output_dir) <= len(TASK_DIR_PREFIX) + len(TASK_DIR_SUFFIX):
        raise MalformedTaskDir(path, "Local Unit Test task output dir should match test<Variant>UnitTest pattern")

    variant = task_output_dir[len(TASK_DIR_PREFIX):-len(TASK_DIR_SUFFIX)]
    return lowercase_first_letter(variant)


def parse_module_name(parts: List[str], marker_idx: int, path: str) -> str:
    if marker_idx < 2:
        raise MarkerTooShallow(path, "Local Unit Test task output dir should match <moduleName>/build/test-results")
    return parts[marker_idx - 2]


def classify(path: Union[str, bytes, os.PathLike]) -> VariantIdentity:
    """
    Derive the (module, variant) identity of a unit test result file.

    `app/build/test-results/testDebugUnitTest/TEST-Foo.xml` classifies to
    module `app`, variant `debug`.

    Raises:
        MarkerNotFound: no test-results segment in the path
        MalformedTaskDir: the segment after it is not test<Variant>UnitTest
        MarkerTooShallow: fewer than two segments before test-results
    """
    parts = split_path(path)
    display = "/".join(parts)

    marker_idx = index_of_test_results_dir(parts)
    if marker_idx == -1:
        raise MarkerNotFound(display, f"path does not contain '{TEST_RESULTS_DIR_NAME}' folder")

    variant = parse_variant_name(parts, marker_idx, display)
    module = parse_module_name(parts, marker_idx, display)
    return VariantIdentity(module, variant)
