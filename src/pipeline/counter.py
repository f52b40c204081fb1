"""Pass-through byte counting stage."""

from __future__ import annotations

from typing import Callable, Optional


class ByteCounter:
    """Counts bytes flowing through a stream without altering them.

    The total grows with every chunk and is reported exactly once, when the
    stream is closed, through ``on_done``.
    """

    def __init__(self, name: str, on_done: Optional[Callable[[str, int], None]] = None):
        self.name = name
        self._on_done = on_done
        self._total = 0
        self._closed = False

    @property
    def total(self) -> int:
        return self._total

    @property
    def closed(self) -> bool:
        return self._closed

    def feed(self, chunk: bytes) -> bytes:
        if self._closed:
            raise RuntimeError(f"{self.name} counter already closed")
        self._total += len(chunk)
        return chunk

    def close(self) -> int:
        """Freeze the total and report it; later calls are no-ops."""
        if self._closed:
            return self._total
        self._closed = True
        if self._on_done is not None:
            self._on_done(self.name, self._total)
        return self._total
