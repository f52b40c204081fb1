"""Human-readable reporting of a measurement run."""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from constants import Stages
from modules.models import InstalledPackage, ResolvedInputs

logger = logging.getLogger(__name__)

UNITS = ["B", "kB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB"]


def format_size(num_bytes: int) -> str:
    """Format a byte count with decimal units, three significant digits.

    >>> format_size(1337)
    '1.34 kB'
    """
    if num_bytes < 0:
        raise ValueError("byte counts are never negative")
    if num_bytes < 1000:
        return f"{num_bytes} B"
    exponent = min(int(math.log10(num_bytes) // 3), len(UNITS) - 1)
    value = float(format(num_bytes / 1000 ** exponent, ".3g"))
    return f"{value:g} {UNITS[exponent]}"


def log_header(specs: Sequence[str], minifier_args: Optional[Sequence[str]]) -> None:
    logger.info("")
    logger.info("Calculating size of %s", ", ".join(specs))
    if minifier_args:
        logger.info("Using uglify arguments: %s", " ".join(minifier_args))
    logger.info("")


def log_modules(inputs: ResolvedInputs, packages: Sequence[InstalledPackage]) -> None:
    """List every file, builtin and installed package being weighed."""
    count = len(inputs.files) + len(inputs.builtins) + len(packages)
    logger.info("Weighing modules: %s", "" if count else "0")
    for path in inputs.files:
        logger.info("  [module]  %s", path)
    for name in inputs.builtins:
        logger.info("  [builtin] %s", name)
    for pkg in packages:
        logger.info("  [package] %s", pkg)
    logger.info("")


def stage_reporter(gzip_level: Optional[int]):
    """Return an ``on_result`` callback logging each stage as it completes."""
    level = "default" if gzip_level is None else gzip_level

    def on_result(stage: str, total: int) -> None:
        if stage == Stages.RAW.value:
            logger.info("Uncompressed: ~%s", format_size(total))
        elif stage == Stages.MINIFIED.value:
            logger.info("Minified: %s", format_size(total))
        elif stage == Stages.COMPRESSED.value:
            logger.info("Minified + gzipped (level: %s): ~%s", level, format_size(total))
        else:
            logger.info("%s: %s", stage, format_size(total))

    return on_result


def log_footer() -> None:
    logger.info("")
    logger.info("Note: these numbers are approximate.")
