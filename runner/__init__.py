"""Runner package: variant selection and step orchestration."""

from .driver import StepContext, StepDriver, TaskProfile
from .selector import log_variants, select_variants, variant_matches

__all__ = ["StepContext", "StepDriver", "TaskProfile", "log_variants", "select_variants", "variant_matches"]
