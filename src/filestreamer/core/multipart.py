"""multipart/byteranges framing."""

from __future__ import annotations
import hashlib
import os
from dataclasses import dataclass

from .model import ByteRange, RangeSet

CRLF = "\r\n"
HEADER_ENCODING = "latin-1"


def boundary_token(path: str | os.PathLike) -> str:
    """Stable boundary for *path*: the same file always gets the same token."""
    return hashlib.md5(os.fspath(path).encode("utf-8")).hexdigest()


@dataclass(frozen=True, slots=True)
class MultipartEncoder:
    boundary: str
    mime_type: str
    file_size: int

    @property
    def content_type(self) -> str:
        return f"multipart/byteranges; boundary={self.boundary}"

    def part_header(self, rng: ByteRange) -> bytes:
        """Boundary marker plus the part's header block, up to the payload."""
        text = (
            f"{CRLF}--{self.boundary}{CRLF}"
            f"Content-Type: {self.mime_type}{CRLF}"
            f"Content-range: bytes {rng.start}-{rng.end}/{self.file_size}{CRLF}{CRLF}"
        )
        return text.encode(HEADER_ENCODING)

    def closing(self) -> bytes:
        return f"{CRLF}--{self.boundary}--{CRLF}".encode(HEADER_ENCODING)

    def body_length(self, ranges: RangeSet) -> int:
        """Exact byte count of the body :meth:`parts` and :meth:`closing` describe."""
        total = len(self.closing())
        for rng in ranges:
            total += len(self.part_header(rng)) + rng.length
        return total

    def parts(self, ranges: RangeSet):
        """Yield ``(header_bytes, range)`` pairs in request order."""
        for rng in ranges:
            yield self.part_header(rng), rng
