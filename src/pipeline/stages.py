"""Stream stages: external filter processes and in-process gzip."""

from __future__ import annotations

import asyncio
import logging
import zlib
from typing import AsyncIterator, Awaitable, List, Optional, Sequence, Type

from common.errors import BundleCostError, StreamFailure

logger = logging.getLogger(__name__)

GZIP_WBITS = 31  # zlib container with gzip header and trailer


class GzipStage:
    """Incremental gzip encoder; output is produced per fed chunk."""

    def __init__(self, level: Optional[int] = None):
        self.level = zlib.Z_DEFAULT_COMPRESSION if level is None else level
        self._encoder = zlib.compressobj(self.level, zlib.DEFLATED, GZIP_WBITS)

    def compress(self, chunk: bytes) -> bytes:
        return self._encoder.compress(chunk)

    def flush(self) -> bytes:
        return self._encoder.flush(zlib.Z_FINISH)


class StreamProcess:
    """An OS subprocess used as a byte-stream stage.

    With ``stdin=True`` it is a filter (stdin -> stdout), otherwise a source.
    Stderr is drained in the background and attached to failures.
    """

    def __init__(
        self,
        command: Sequence[str],
        label: str,
        error_cls: Type[BundleCostError] = StreamFailure,
    ):
        self.command = list(command)
        self.label = label
        self.error_cls = error_cls
        self._proc: Optional[asyncio.subprocess.Process] = None
        self._stderr: Optional[asyncio.Task] = None

    @property
    def proc(self) -> asyncio.subprocess.Process:
        if self._proc is None:
            raise RuntimeError(f"{self.label} has not been started")
        return self._proc

    async def start(self, stdin: bool = True) -> "StreamProcess":
        try:
            self._proc = await asyncio.create_subprocess_exec(
                *self.command,
                stdin=asyncio.subprocess.PIPE if stdin else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise self.error_cls(f"Unable to start {self.label} '{self.command[0]}': {e}") from e
        self._stderr = asyncio.ensure_future(self._proc.stderr.read())
        logger.debug("Started %s: %s", self.label, " ".join(self.command))
        return self

    async def write(self, chunk: bytes) -> None:
        stdin = self.proc.stdin
        try:
            stdin.write(chunk)
            await stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as e:
            raise self.error_cls(f"{self.label} stopped reading its input: {e}") from e

    async def close_stdin(self) -> None:
        stdin = self.proc.stdin
        if stdin is None or stdin.is_closing():
            return
        stdin.close()
        try:
            await stdin.wait_closed()
        except (BrokenPipeError, ConnectionResetError):
            pass  # exit status is checked in finish()

    async def chunks(self, size: int) -> AsyncIterator[bytes]:
        """Yield stdout in chunks of at most ``size`` bytes until EOF."""
        while True:
            chunk = await self.proc.stdout.read(size)
            if not chunk:
                return
            yield chunk

    async def finish(self) -> None:
        """Wait for exit; raise ``error_cls`` with stderr on a non-zero status."""
        returncode = await self.proc.wait()
        stderr = await self._stderr if self._stderr is not None else b""
        if returncode != 0:
            detail = stderr.decode("utf-8", "replace").strip()
            raise self.error_cls(
                f"{self.label} exited with status {returncode}"
                + (f": {detail}" if detail else "")
            )

    def kill(self) -> None:
        if self._proc is not None and self._proc.returncode is None:
            try:
                self._proc.kill()
            except ProcessLookupError:
                pass
        if self._stderr is not None and not self._stderr.done():
            self._stderr.cancel()


async def run_branches(branches: List[Awaitable[None]]) -> None:
    """Run branches concurrently; the first failure cancels the rest."""
    tasks = [asyncio.ensure_future(branch) for branch in branches]
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        raise
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)
    for task in tasks:
        if task in done and task.exception() is not None:
            raise task.exception()
