from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum


DEFAULT_CHUNK_SIZE = 1024          # bytes per read/write cycle
DEFAULT_DELAY = 0.0                # seconds slept after every chunk
DEFAULT_MIME_TYPE = "application/octet-stream"


class Disposition(str, Enum):
    INLINE = "inline"
    ATTACHMENT = "attachment"


class StreamState(str, Enum):
    IDLE = "idle"
    OPENED = "opened"
    NO_RANGE = "no_range"
    SINGLE_RANGE = "single_range"
    MULTI_RANGE = "multi_range"
    CLOSED = "closed"
    ABORTED = "aborted"


@dataclass(frozen=True, slots=True)
class ByteRange:
    """Inclusive span ``[start, end]`` of file bytes."""
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1


RangeSet = tuple[ByteRange, ...]


@dataclass(frozen=True, slots=True)
class StreamConfig:
    """Read-only settings shared by every request."""
    chunk_size: int = DEFAULT_CHUNK_SIZE
    delay: float = DEFAULT_DELAY
    disposition: Disposition = Disposition.ATTACHMENT

    def __post_init__(self):
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if self.delay < 0:
            raise ValueError("delay cannot be negative")


@dataclass(slots=True)
class ResponseHead:
    status: int
    reason: str
    headers: list[tuple[str, str]] = field(default_factory=list)

    @property
    def status_line(self) -> str:
        return f"HTTP/1.1 {self.status} {self.reason}"


@dataclass(slots=True)
class Outcome:
    success: bool
    state: StreamState
    message: str
    bytes_sent: int = 0                      # body bytes handed to the sink
    error: FileStreamerError | None = None
    warnings: list[str] = field(default_factory=list)


class FileStreamerError(RuntimeError):
    """Base class for every error raised by the engine."""
    pass


class FileUnavailableError(FileStreamerError):
    """Raised when the file cannot be opened or share-locked."""
    pass


class RangeError(FileStreamerError):
    """Raised when the Range header cannot be served (HTTP 416)."""
    pass


class RangeUnitUnsupportedError(RangeError):
    """Raised when the Range header uses a unit other than ``bytes``."""
    pass


class RangeUnsatisfiableError(RangeError):
    """Raised when a range spec is malformed or its start lies past its end."""
    pass


class CloseFailure(FileStreamerError):
    """Closing the file handle failed after the response was sent."""
    pass


class CompressionDisableFailure(FileStreamerError):
    """The sink could not switch off output compression."""
    pass
