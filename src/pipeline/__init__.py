"""Streaming size measurement: bundle, minify and gzip with byte counters."""

from .counter import ByteCounter
from .measure import measure
from .stages import GzipStage, StreamProcess

__all__ = [
    "ByteCounter",
    "GzipStage",
    "StreamProcess",
    "measure",
]
