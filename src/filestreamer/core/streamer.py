from __future__ import annotations
import time
from typing import Callable

from loguru import logger

from .model import ByteRange, StreamConfig

# errors a sink raises when the peer hung up mid-write
DISCONNECT_ERRORS = (BrokenPipeError, ConnectionResetError, ConnectionAbortedError)


class ContentStreamer:
    """Copy file segments to a sink in bounded, cancellable chunks.

    Every chunk is preceded by a peer check; once the peer is gone the
    streamer stops and ``cancelled`` stays True for the rest of the request.
    """

    def __init__(self, file, sink, config: StreamConfig | None = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.file = file
        self.sink = sink
        self.config = config or StreamConfig()
        self.bytes_sent = 0
        self.cancelled = False
        self._sleep = sleep

    def _alive(self) -> bool:
        if not self.cancelled and not self.sink.is_connected():
            logger.info("Peer disconnected after {} bytes", self.bytes_sent)
            self.cancelled = True
        return not self.cancelled

    def _emit(self, data: bytes) -> bool:
        try:
            self.sink.write(data)
            self.sink.flush()
        except DISCONNECT_ERRORS as e:
            logger.info("Write failed, peer gone: {}", e)
            self.cancelled = True
            return False
        self.bytes_sent += len(data)
        return True

    def send(self, data: bytes) -> bool:
        """Write framing bytes (multipart boundaries) if the peer is still there."""
        return self._alive() and self._emit(data)

    def copy(self, rng: ByteRange) -> bool:
        """Stream bytes ``rng.start..rng.end``; False if the stream was cancelled."""
        stop = rng.end + 1
        self.file.seek(rng.start)
        pos = rng.start

        while pos < stop:
            if not self._alive():
                return False
            chunk = self.file.read(min(self.config.chunk_size, stop - pos))
            if not chunk:
                break  # EOF, file shrank underneath us
            if not self._emit(chunk):
                return False
            pos += len(chunk)
            if self.config.delay:
                self._sleep(self.config.delay)

        return True
