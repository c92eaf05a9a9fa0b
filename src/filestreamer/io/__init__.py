"""I/O layer for filestreamer - the file being served and where it goes."""

# Re-export these for import convenience
from .base import OutputSink, MimeResolver
from .local import LocalFile, open_local_file
from .memory import MemorySink

__all__ = ["OutputSink", "MimeResolver", "LocalFile", "open_local_file", "MemorySink"]
