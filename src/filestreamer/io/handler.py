"""Serve a file over ``http.server`` through the streaming engine."""

import select
import socket
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Optional, Sequence

from loguru import logger

from ..core.controller import StreamController
from ..core.model import Disposition, FileUnavailableError, StreamConfig
from .base import PathLike


class HandlerSink:
    """OutputSink writing straight to a BaseHTTPRequestHandler's connection."""

    def __init__(self, handler: BaseHTTPRequestHandler):
        self._handler = handler

    def write_head(self, status: int, reason: str, headers: Sequence[tuple[str, str]]) -> None:
        self._handler.send_response(status, reason)
        for name, value in headers:
            self._handler.send_header(name, value)
        self._handler.end_headers()

    def write(self, data: bytes) -> None:
        self._handler.wfile.write(data)

    def flush(self) -> None:
        self._handler.wfile.flush()

    def is_connected(self) -> bool:
        sock = self._handler.connection
        try:
            readable, _, _ = select.select([sock], [], [], 0)
            if not readable:
                return True
            # readable with nothing to peek means the peer sent FIN
            return sock.recv(1, socket.MSG_PEEK) != b""
        except (OSError, ValueError):
            return False

    def disable_compression(self) -> None:
        # http.server never compresses responses
        pass

    def extend_deadline(self) -> None:
        self._handler.connection.settimeout(None)


class FileRequestHandler(BaseHTTPRequestHandler):
    """Answer every GET with the configured file."""

    file_path: PathLike
    config: StreamConfig = StreamConfig()
    mime_type: Optional[str] = None
    disposition: Optional[Disposition] = None

    def do_GET(self):
        controller = StreamController(
            self.file_path,
            HandlerSink(self),
            range_header=self.headers.get("Range"),
            config=self.config,
            disposition=self.disposition,
            mime_type=self.mime_type,
        )
        outcome = controller.start()
        if isinstance(outcome.error, FileUnavailableError):
            self.send_error(503, outcome.message)

    def log_message(self, format, *args):
        logger.info("{} - {}", self.address_string(), format % args)


def make_handler(path: PathLike, *, config: Optional[StreamConfig] = None,
                 mime_type: Optional[str] = None,
                 disposition: Optional[Disposition] = None) -> type[FileRequestHandler]:
    """Create a handler class bound to *path*."""
    return type("BoundFileRequestHandler", (FileRequestHandler,), {
        "file_path": path,
        "config": config or StreamConfig(),
        "mime_type": mime_type,
        "disposition": disposition,
    })


def make_server(path: PathLike, host: str = "127.0.0.1", port: int = 8000, **handler_options) -> ThreadingHTTPServer:
    """Bind a threading HTTP server for *path*; port 0 picks a free port."""
    return ThreadingHTTPServer((host, port), make_handler(path, **handler_options))


def serve(path: PathLike, host: str = "127.0.0.1", port: int = 8000, **handler_options):
    """Serve *path* until interrupted."""
    with make_server(path, host, port, **handler_options) as server:
        logger.info("Serving {} on http://{}:{}/", path, *server.server_address[:2])
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Shutting down")
