"""Protocols for the collaborators the engine talks to."""

import os
from typing import Protocol, Sequence, Union, runtime_checkable

PathLike = Union[str, os.PathLike]


@runtime_checkable
class OutputSink(Protocol):
    """Destination of one response: a head, then raw body bytes."""

    def write_head(self, status: int, reason: str, headers: Sequence[tuple[str, str]]) -> None:
        """Send the status line and headers, in the given order."""
        ...

    def write(self, data: bytes) -> None:
        ...

    def flush(self) -> None:
        ...

    def is_connected(self) -> bool:
        """Return False once the peer has gone away."""
        ...

    def disable_compression(self) -> None:
        """Best effort; raise if output compression cannot be switched off."""
        ...

    def extend_deadline(self) -> None:
        """Lift any wall-clock limit for the rest of the response."""
        ...


@runtime_checkable
class MimeResolver(Protocol):
    def __call__(self, path: PathLike) -> str | None:
        ...
