"""bundlecost - estimate what a module adds to a browser bundle.

Installs requested packages into a module cache, bundles them together with
any local files and builtins, and reports the raw, minified and
minified+gzipped size of the result.
"""
import asyncio
import logging
import sys
from typing import List, Optional, Sequence

from args import parse_args
from cli_config import Settings, build_settings
from common.errors import BundleCostError
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import ExitCodes
from modules.models import MeasurementResult
from modules.resolver import resolve_all
from pipeline.measure import measure
from registry.npm.installer import install
import report

logger = logging.getLogger(__name__)


async def run(specs: List[str], settings: Settings) -> MeasurementResult:
    """Install, resolve and measure ``specs``; errors propagate unchanged."""
    report.log_header(specs, settings.minifier_args)

    packages = await install(specs, settings.cache_dir, settings.npm_command)
    inputs = resolve_all(specs, settings.cache_dir)
    report.log_modules(inputs, packages)

    result = await measure(
        inputs,
        settings.gzip_level,
        settings.minifier_args,
        bundler=settings.bundler_command,
        minifier=settings.minifier_command,
        env=settings.env,
        chunk_size=settings.chunk_size,
        on_result=report.stage_reporter(settings.gzip_level),
    )
    report.log_footer()
    return result


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL, args.LOG_FILE)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main",
                                count=len(args.modules))
        )

    try:
        settings = build_settings(args)
        if not args.modules:
            logger.error("No modules given.")
            sys.exit(ExitCodes.USAGE_ERROR.value)
        asyncio.run(run(args.modules, settings))
    except BundleCostError as e:
        logger.error("%s", e)
        sys.exit(e.exit_code.value)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)

    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
