"""Selection of the build variants to run by module and variant filters."""

from typing import Optional

from loguru import logger

from tools.base import ModuleNotFound, VariantNotFound
from tools.gradle_tool import Variants


def _find_module(variants: Variants, module: str) -> Optional[str]:
    if module in variants:
        return module
    # ":app" and "app" name the same module
    wanted = module.lstrip(":")
    for key in variants:
        if key.lstrip(":") == wanted:
            return key
    return None


def variant_matches(name: str, wanted: str, suffix: str = "") -> bool:
    """Case insensitive exact match, also accepting wanted + suffix (e.g. debug -> DebugUnitTest)."""
    name = name.lower()
    if name == wanted.lower():
        return True
    return bool(suffix) and name == (wanted + suffix).lower()


def select_variants(
    variants: Variants,
    module: str = "",
    variant: str = "",
    variant_suffix: str = "",
    require_match: bool = False,
) -> Variants:
    """
    Narrow the discovered variants down to the ones to run.

    Args:
        variants: All variants per module, as the build driver reports them
        module: Keep only this module when set
        variant: Keep only variants with this name (case insensitive) when set
        variant_suffix: Task specific suffix of variant names, e.g. "UnitTest"
        require_match: Raise VariantNotFound instead of returning an empty selection

    Raises:
        ModuleNotFound: module is set but not among the discovered modules
        VariantNotFound: nothing matched and require_match is set
    """
    if module:
        key = _find_module(variants, module)
        if key is None:
            raise ModuleNotFound(module)
        variants = {key: variants[key]}

    if not variant:
        return variants

    selected: Variants = {}
    for m, names in variants.items():
        for name in names:
            if variant_matches(name, variant, variant_suffix):
                selected.setdefault(m, []).append(name)

    if not selected and require_match:
        raise VariantNotFound(variant)
    return selected


def log_variants(all_variants: Variants, selected: Variants, log=logger) -> None:
    """Log every discovered variant, marking the selected ones."""
    log.info("Variants:")
    for module, names in all_variants.items():
        log.info(f"{module or '<root>'}:")
        for name in names:
            if name in selected.get(module, []):
                log.success(f"✓ {name}")
            else:
                log.info(f"- {name}")
