from __future__ import annotations
import os
import time
from pathlib import Path
from typing import Callable

from loguru import logger

from ..io.base import MimeResolver
from ..io.local import open_local_file
from ..mime import guess_mime_type
from .headers import ResponseHeaderBuilder, range_not_satisfiable
from .model import (
    DEFAULT_MIME_TYPE, ByteRange, CloseFailure, CompressionDisableFailure, Disposition,
    FileUnavailableError, Outcome, RangeError, RangeSet, ResponseHead, StreamConfig, StreamState,
)
from .multipart import MultipartEncoder, boundary_token
from .ranges import parse_range_header
from .streamer import DISCONNECT_ERRORS, ContentStreamer

SERVED_MESSAGE = "File served"
DISCONNECTED_MESSAGE = "Client disconnected"


class StreamController:
    """Serve one file for one request.

    ``IDLE -> OPENED -> NO_RANGE | SINGLE_RANGE | MULTI_RANGE -> CLOSED | ABORTED``

    :meth:`start` runs the whole request and returns an :class:`Outcome`; the
    same outcome goes to ``on_complete`` when given. Fatal errors end in
    ``ABORTED`` instead of escaping as exceptions. Anything unexpected raised
    by the sink propagates once the file is closed.
    """

    def __init__(self, path: str | os.PathLike, sink, *,
                 range_header: str | None = None,
                 config: StreamConfig | None = None,
                 disposition: Disposition | None = None,
                 mime_type: str | None = None,
                 mime_resolver: MimeResolver | None = None,
                 opener: Callable | None = None,
                 on_complete: Callable[[Outcome], None] | None = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.path = path
        self.sink = sink
        self.range_header = range_header
        self.config = config or StreamConfig()
        self.disposition = disposition or self.config.disposition
        self.mime_type = mime_type
        self.mime_resolver = mime_resolver or guess_mime_type
        self.on_complete = on_complete
        self.state = StreamState.IDLE
        self._opener = opener or open_local_file
        self._sleep = sleep
        self._file = None
        self._ranges: RangeSet = ()
        self._warnings: list[str] = []

    @property
    def ranges(self) -> RangeSet:
        """Ranges parsed from the request, in request order."""
        return self._ranges

    def _finish(self, outcome: Outcome) -> Outcome:
        self.state = outcome.state
        outcome.warnings.extend(self._warnings)
        logger.debug("Request for {} ended {}: {}", self.path, outcome.state.value, outcome.message)
        if self.on_complete is not None:
            self.on_complete(outcome)
        return outcome

    def _warn(self, err: Exception):
        logger.warning("{}", err)
        self._warnings.append(str(err))

    def _disable_compression(self):
        try:
            self.sink.disable_compression()
        except CompressionDisableFailure as e:
            self._warn(e)
        except Exception as e:
            self._warn(CompressionDisableFailure(
                f"An error occurred while disabling output compression: {e}"))

    def _close(self):
        if self._file is None:
            return
        f, self._file = self._file, None
        try:
            f.close()
        except OSError as e:
            self._warn(CloseFailure(f"An error occurred while closing file {Path(self.path).name}: {e}"))

    def _send_head(self, head: ResponseHead) -> bool:
        try:
            self.sink.write_head(head.status, head.reason, head.headers)
        except DISCONNECT_ERRORS as e:
            logger.info("Peer gone before the head was sent: {}", e)
            return False
        return True

    def start(self) -> Outcome:
        if self.state is not StreamState.IDLE:
            raise RuntimeError("A StreamController serves a single request")

        try:
            self._file = self._opener(self.path)
        except FileUnavailableError as e:
            logger.warning("{}", e)
            return self._finish(Outcome(False, StreamState.ABORTED, str(e), error=e))
        self.state = StreamState.OPENED

        try:
            outcome = self._serve()
        finally:
            self._close()
        return self._finish(outcome)

    def _serve(self) -> Outcome:
        self._disable_compression()
        size = self._file.size

        try:
            self._ranges = parse_range_header(self.range_header, size)
        except RangeError as e:
            logger.info("Rejecting range {!r}: {}", self.range_header, e)
            if not self._send_head(range_not_satisfiable()):
                return Outcome(False, StreamState.ABORTED, DISCONNECTED_MESSAGE, error=e)
            return Outcome(False, StreamState.ABORTED, str(e), error=e)

        mime = self.mime_type or self.mime_resolver(self.path) or DEFAULT_MIME_TYPE
        encoder = None
        if len(self._ranges) > 1:
            self.state = StreamState.MULTI_RANGE
            encoder = MultipartEncoder(boundary_token(self.path), mime, size)
        elif self._ranges:
            self.state = StreamState.SINGLE_RANGE
        else:
            self.state = StreamState.NO_RANGE
        logger.debug("Serving {} as {} ({} ranges)", self.path, self.state.value, len(self._ranges))

        # partial content is always offered as a download
        disposition = Disposition.ATTACHMENT if self._ranges else self.disposition
        builder = ResponseHeaderBuilder(filename=Path(self.path).name, file_size=size,
                                        mime_type=mime, disposition=disposition,
                                        encoder=encoder)
        if not self._send_head(builder.build(self._ranges)):
            return Outcome(False, StreamState.ABORTED, DISCONNECTED_MESSAGE)
        # the body may take arbitrarily long from here on
        self.sink.extend_deadline()

        streamer = ContentStreamer(self._file, self.sink, self.config, sleep=self._sleep)
        if encoder is not None:
            completed = self._send_parts(streamer, encoder)
        elif self._ranges:
            completed = streamer.copy(self._ranges[0])
        else:
            completed = size == 0 or streamer.copy(ByteRange(0, size - 1))

        if not completed:
            return Outcome(False, StreamState.ABORTED, DISCONNECTED_MESSAGE, streamer.bytes_sent)
        return Outcome(True, StreamState.CLOSED, SERVED_MESSAGE, streamer.bytes_sent)

    def _send_parts(self, streamer: ContentStreamer, encoder: MultipartEncoder) -> bool:
        for part_header, rng in encoder.parts(self._ranges):
            if not (streamer.send(part_header) and streamer.copy(rng)):
                return False
        return streamer.send(encoder.closing())
