"""MIME type detection for served files."""

import mimetypes
import os

import filetype
from loguru import logger

from .io.base import PathLike


def guess_mime_type(path: PathLike) -> str | None:
    """Sniff the file's magic bytes, falling back to its extension.

    Returns None when neither gives an answer; callers then use
    ``application/octet-stream``.
    """
    try:
        kind = filetype.guess(os.fspath(path))
    except OSError as e:
        logger.debug("Could not sniff {}: {}", path, e)
        kind = None

    if kind is not None:
        return kind.mime

    ctype, _ = mimetypes.guess_type(os.fspath(path))
    return ctype
