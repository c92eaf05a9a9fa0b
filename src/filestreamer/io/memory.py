"""In-memory sink that captures a response instead of sending it."""

from typing import Optional, Sequence

from ..core.model import CompressionDisableFailure


class MemorySink:
    """Collect the head and body of one response.

    ``disconnect_after`` makes :meth:`is_connected` report a gone peer once
    that many chunks have been written. ``fail_compression`` makes
    :meth:`disable_compression` raise.
    """

    def __init__(self, *, disconnect_after: Optional[int] = None, fail_compression: bool = False):
        self.status: Optional[int] = None
        self.reason: Optional[str] = None
        self.headers: list[tuple[str, str]] = []
        self.chunks: list[bytes] = []
        self.flushes = 0
        self.deadline_extended = False
        self._disconnect_after = disconnect_after
        self._fail_compression = fail_compression

    # --- OutputSink -----------------------------------------------------
    def write_head(self, status: int, reason: str, headers: Sequence[tuple[str, str]]) -> None:
        if self.status is not None:
            raise RuntimeError("Response head already written")
        self.status = status
        self.reason = reason
        self.headers.extend(headers)

    def write(self, data: bytes) -> None:
        self.chunks.append(bytes(data))

    def flush(self) -> None:
        self.flushes += 1

    def is_connected(self) -> bool:
        if self._disconnect_after is None:
            return True
        return len(self.chunks) < self._disconnect_after

    def disable_compression(self) -> None:
        if self._fail_compression:
            raise CompressionDisableFailure("Output compression cannot be disabled")

    def extend_deadline(self) -> None:
        self.deadline_extended = True

    # --- inspection -----------------------------------------------------
    @property
    def body(self) -> bytes:
        return b"".join(self.chunks)

    @property
    def status_line(self) -> Optional[str]:
        if self.status is None:
            return None
        return f"HTTP/1.1 {self.status} {self.reason}"

    def header_lines(self) -> list[str]:
        """Headers as ``"Name: value"`` strings, in send order."""
        return [f"{name}: {value}" for name, value in self.headers]

    def header(self, name: str) -> Optional[str]:
        for key, value in self.headers:
            if key.lower() == name.lower():
                return value
        return None
