"""filestreamer - stream a local file to an HTTP client with byte-range support."""

import asyncio

from .core.model import (                                              # re-export
    ByteRange, Disposition, Outcome, StreamConfig, StreamState,
    FileStreamerError, FileUnavailableError, RangeError,
    RangeUnitUnsupportedError, RangeUnsatisfiableError,
    CloseFailure, CompressionDisableFailure,
)
from .core.controller import StreamController
from .core.ranges import parse_range_header
from .io import MemorySink, OutputSink


def stream_file(path, sink, *, range_header: str | None = None, **options) -> Outcome:
    """Serve *path* to *sink* for one request and return how it ended."""
    return StreamController(path, sink, range_header=range_header, **options).start()


async def stream_file_async(path, sink, *, range_header: str | None = None, **options) -> Outcome:
    """Run :func:`stream_file` on a worker thread so the event loop stays free."""
    return await asyncio.to_thread(stream_file, path, sink, range_header=range_header, **options)


__all__ = [
    "stream_file", "stream_file_async", "parse_range_header", "StreamController",
    "ByteRange", "Disposition", "Outcome", "StreamConfig", "StreamState",
    "FileStreamerError", "FileUnavailableError", "RangeError",
    "RangeUnitUnsupportedError", "RangeUnsatisfiableError",
    "CloseFailure", "CompressionDisableFailure",
    "MemorySink", "OutputSink",
]
