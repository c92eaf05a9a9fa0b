from __future__ import annotations
import re

from .model import ByteRange, RangeSet, RangeUnitUnsupportedError, RangeUnsatisfiableError

RANGE_UNIT = "bytes"

# start-end | start- | -suffix
_SPEC_RE = re.compile(r"(\d*)-(\d*)", re.ASCII)


def _parse_spec(spec: str, file_size: int) -> ByteRange:
    m = _SPEC_RE.fullmatch(spec.strip())
    if not m or m.group(0) == "-":
        raise RangeUnsatisfiableError(f"Malformed range spec {spec!r}")

    start_s, end_s = m.groups()
    file_end = file_size - 1

    if start_s == "":
        # suffix form, "-500" is the last 500 bytes
        start = file_end - int(end_s) + 1
        end = file_end
    else:
        start = int(start_s)
        end = file_end if end_s == "" else int(end_s)

    start = max(start, 0)
    end = min(end, file_end)
    if start > end:
        raise RangeUnsatisfiableError(f"Range {spec.strip()!r} cannot be satisfied for {file_size} bytes")
    return ByteRange(start, end)


def parse_range_header(header: str | None, file_size: int) -> RangeSet:
    """Turn a ``Range`` header value into an ordered tuple of byte ranges.

    Valid values look like::

        bytes=0-500                  first 501 bytes
        bytes=-500                   last 500 bytes
        bytes=500-                   byte 500 to the end
        bytes=0-500,1000-1499,-200   several ranges, kept in request order

    Ranges are neither sorted, merged nor deduplicated. The first bad spec
    aborts the whole header; no partial result is returned.
    """
    if header is None:
        return ()

    unit, _, specs = header.partition("=")
    if unit.strip() != RANGE_UNIT:
        raise RangeUnitUnsupportedError(f"Unsupported range unit {unit.strip()!r}")

    return tuple(_parse_spec(spec, file_size) for spec in specs.split(","))
