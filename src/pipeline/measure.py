"""Measurement pipeline: bundle -> minify -> gzip with a byte counter per stage.

One bundle stream feeds three branches running as concurrent tasks:

    bundler stdout --raw--> minifier stdin
    minifier stdout --minified--> queue
    queue --gzip--> compressed

Each counter reports its total the moment its own stream ends.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, List, Optional, Sequence

from common.errors import BundleFailure, StreamFailure
from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants, Stages
from modules.models import MeasurementResult, ResolvedInputs

from .bundler import build_bundle_command
from .counter import ByteCounter
from .stages import GzipStage, StreamProcess, run_branches

logger = logging.getLogger(__name__)

_QUEUE_DEPTH = 16


def minifier_argv(minifier: Sequence[str], minifier_args: Optional[Sequence[str]]) -> List[str]:
    """Caller-supplied arguments win over the default compress/mangle pair."""
    args = list(minifier_args) if minifier_args else list(Constants.DEFAULT_MINIFIER_ARGS)
    return list(minifier) + args


async def measure(
    inputs: ResolvedInputs,
    gzip_level: Optional[int] = None,
    minifier_args: Optional[Sequence[str]] = None,
    *,
    bundler: Sequence[str] = tuple(Constants.BUNDLER_COMMAND),
    minifier: Sequence[str] = tuple(Constants.MINIFIER_COMMAND),
    env: Optional[Dict[str, str]] = None,
    chunk_size: int = Constants.CHUNK_SIZE,
    on_result: Optional[Callable[[str, int], None]] = None,
) -> MeasurementResult:
    """Bundle ``inputs`` and count bytes after each transformation stage.

    Raises:
        BundleFailure: The bundler could not start or exited non-zero.
        StreamFailure: The minifier could not start or exited non-zero.
    """
    if env is None:
        env = {"NODE_ENV": Constants.NODE_ENV}

    raw = ByteCounter(Stages.RAW.value, on_result)
    minified = ByteCounter(Stages.MINIFIED.value, on_result)
    compressed = ByteCounter(Stages.COMPRESSED.value, on_result)
    gzip = GzipStage(gzip_level)
    queue: asyncio.Queue = asyncio.Queue(maxsize=_QUEUE_DEPTH)

    bundle_proc = StreamProcess(
        build_bundle_command(bundler, inputs.entries, inputs.builtins, env),
        "bundler",
        BundleFailure,
    )
    minify_proc = StreamProcess(minifier_argv(minifier, minifier_args), "minifier", StreamFailure)

    async def raw_branch() -> None:
        async for chunk in bundle_proc.chunks(chunk_size):
            await minify_proc.write(raw.feed(chunk))
        await bundle_proc.finish()
        raw.close()
        await minify_proc.close_stdin()

    async def minify_branch() -> None:
        async for chunk in minify_proc.chunks(chunk_size):
            await queue.put(minified.feed(chunk))
        await minify_proc.finish()
        minified.close()
        await queue.put(None)

    async def compress_branch() -> None:
        while True:
            chunk = await queue.get()
            if chunk is None:
                break
            compressed.feed(gzip.compress(chunk))
        compressed.feed(gzip.flush())
        compressed.close()

    with Timer() as t:
        await bundle_proc.start(stdin=False)
        try:
            await minify_proc.start()
            await run_branches([raw_branch(), minify_branch(), compress_branch()])
        finally:
            bundle_proc.kill()
            minify_proc.kill()

    if is_debug_enabled(logger):
        logger.debug(
            "Measurement finished",
            extra=extra_context(
                event="function_exit",
                component="pipeline",
                action="measure",
                outcome="success",
                raw=raw.total,
                minified=minified.total,
                compressed=compressed.total,
                duration_ms=t.duration_ms(),
            ),
        )
    return MeasurementResult(
        raw_bytes=raw.total,
        minified_bytes=minified.total,
        compressed_bytes=compressed.total,
        gzip_level=gzip_level,
    )
