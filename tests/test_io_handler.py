"""End-to-end tests over a real HTTP server."""

import socket
import tempfile
import threading
import types
from pathlib import Path

import pytest
import requests
from loguru import logger

from filestreamer.core.model import Disposition, StreamConfig
from filestreamer.io.handler import HandlerSink, make_server


class TestFileServer:
    """Serve a 10 byte file and fetch it with requests."""

    def setup_method(self, method):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "dummyFile.txt"
        self.path.write_bytes(b"0123456789")
        self.server = make_server(self.path, port=0, mime_type="text/plain",
                                  config=StreamConfig(chunk_size=4))
        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self.thread.start()
        self.url = "http://127.0.0.1:%d/" % self.server.server_address[1]

    def teardown_method(self, method):
        self.server.shutdown()
        self.server.server_close()
        self.thread.join(timeout=5)
        self._tmp.cleanup()

    def test_full_file(self):
        """Test a plain GET."""
        r = requests.get(self.url, timeout=5)
        assert r.status_code == 200
        assert r.content == b"0123456789"
        assert r.headers["Content-Length"] == "10"
        assert r.headers["Accept-Ranges"] == "bytes"
        assert r.headers["Content-Disposition"] == 'attachment; filename="dummyFile.txt"'

    def test_single_range(self):
        """Test a single range request."""
        r = requests.get(self.url, headers={"Range": "bytes=3-7"}, timeout=5)
        assert r.status_code == 206
        assert r.content == b"34567"
        assert r.headers["Content-Range"] == "bytes 3-7/10"

    def test_multi_range(self):
        """Test that the advertised length matches what arrives."""
        r = requests.get(self.url, headers={"Range": "bytes=2-3,5-6,-1"}, timeout=5)
        assert r.status_code == 206
        assert r.headers["Content-Type"].startswith("multipart/byteranges; boundary=")
        assert int(r.headers["Content-Length"]) == len(r.content) == 330
        assert b"Content-range: bytes 9-9/10\r\n\r\n9" in r.content

    def test_unsatisfiable(self):
        """Test that a bad range gets a bare 416."""
        r = requests.get(self.url, headers={"Range": "bytes=9-7"}, timeout=5)
        assert r.status_code == 416
        assert r.content == b""
        assert "Content-Length" not in r.headers

    def test_missing_file(self):
        """Test that an unavailable file maps to 503."""
        self.path.unlink()
        r = requests.get(self.url, timeout=5)
        assert r.status_code == 503


class TestInlineServer:
    def test_inline_disposition(self, tmp_path):
        path = tmp_path / "clip.bin"
        path.write_bytes(b"abc")
        server = make_server(path, port=0, disposition=Disposition.INLINE)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        try:
            r = requests.get("http://127.0.0.1:%d/" % server.server_address[1], timeout=5)
        finally:
            server.shutdown()
            server.server_close()

        assert r.status_code == 200
        assert r.headers["Content-Disposition"] == "inline"
        assert r.headers["Content-Type"] == "application/octet-stream"
        assert r.content == b"abc"


class TestHandlerSink:
    def test_is_connected_tracks_peer(self):
        """Test that closing the other end is seen as a disconnect."""
        a, b = socket.socketpair()
        try:
            sink = HandlerSink(types.SimpleNamespace(connection=a))
            assert sink.is_connected() is True
            b.close()
            assert sink.is_connected() is False
        finally:
            a.close()
            b.close()

    def test_pending_request_bytes_are_not_a_disconnect(self):
        """Test that unread data from a live peer keeps the stream going."""
        a, b = socket.socketpair()
        try:
            b.sendall(b"x")
            assert HandlerSink(types.SimpleNamespace(connection=a)).is_connected() is True
        finally:
            a.close()
            b.close()


class TestClientDrop:
    """A client that hangs up mid-body stops a throttled stream."""

    def test_stream_stops_early(self, tmp_path):
        path = tmp_path / "big.bin"
        path.write_bytes(b"\x00" * 200 * 1024)
        # 200 chunks with a 10 ms pause: about 2 s if nothing stops it
        server = make_server(path, port=0, config=StreamConfig(delay=0.01))
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()

        ended = []
        done = threading.Event()

        def watch(message):
            if "ended" in message:
                ended.append(str(message))
                done.set()

        handler_id = logger.add(watch, level="DEBUG", format="{message}")
        try:
            with socket.create_connection(server.server_address[:2], timeout=5) as client:
                client.sendall(b"GET / HTTP/1.0\r\n\r\n")
                assert client.recv(1024)
            assert done.wait(timeout=10)
        finally:
            logger.remove(handler_id)
            server.shutdown()
            server.server_close()

        assert ended[0].endswith("ended aborted: Client disconnected")
