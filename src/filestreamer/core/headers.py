from __future__ import annotations
from urllib.parse import quote

from .model import DEFAULT_MIME_TYPE, Disposition, RangeSet, ResponseHead
from .multipart import MultipartEncoder

STATUS_OK = (200, "OK")
STATUS_PARTIAL = (206, "Partial Content")
STATUS_RANGE_INVALID = (416, "Requested Range Not Satisfiable")

# cache headers kept for old IE download handling
_CACHE_HEADERS = [
    ("Pragma", "public"),
    ("Expires", "-1"),
    ("Cache-Control", "public, must-revalidate, post-check=0, pre-check=0"),
]


def content_disposition(disposition: Disposition, filename: str) -> str:
    if disposition is Disposition.INLINE:
        return "inline"

    # CR/LF in a name would end the header line
    filename = filename.replace("\r", " ").replace("\n", " ")
    quoted = filename.replace("\\", "\\\\").replace('"', '\\"')
    if quoted.isascii():
        return f'attachment; filename="{quoted}"'
    fallback = quoted.encode("ascii", "replace").decode("ascii")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


def range_not_satisfiable() -> ResponseHead:
    """Status-only head sent when the Range header is rejected."""
    return ResponseHead(*STATUS_RANGE_INVALID)


class ResponseHeaderBuilder:
    """Derive the status and ordered header list for one response."""

    def __init__(self, *, filename: str, file_size: int, mime_type: str | None,
                 disposition: Disposition = Disposition.ATTACHMENT,
                 encoder: MultipartEncoder | None = None):
        self.filename = filename
        self.file_size = file_size
        self.mime_type = mime_type or DEFAULT_MIME_TYPE
        self.disposition = disposition
        self.encoder = encoder

    def _base(self, status: tuple[int, str], content_type: str, content_length: int) -> ResponseHead:
        head = ResponseHead(*status)
        head.headers.extend(_CACHE_HEADERS)
        head.headers.append(("Accept-Ranges", "bytes"))
        head.headers.append(("Content-Type", content_type))
        head.headers.append(("Content-Transfer-Encoding", "binary"))
        head.headers.append(("Content-Disposition", content_disposition(self.disposition, self.filename)))
        head.headers.append(("Content-Length", str(content_length)))
        return head

    def build(self, ranges: RangeSet) -> ResponseHead:
        if not ranges:
            return self._base(STATUS_OK, self.mime_type, self.file_size)

        if len(ranges) == 1:
            rng = ranges[0]
            head = self._base(STATUS_PARTIAL, self.mime_type, rng.length)
            head.headers.append(("Content-Range", f"bytes {rng.start}-{rng.end}/{self.file_size}"))
            return head

        if self.encoder is None:
            raise ValueError("A multipart encoder is required for multiple ranges")
        return self._base(STATUS_PARTIAL, self.encoder.content_type, self.encoder.body_length(ranges))
