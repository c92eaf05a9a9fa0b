
"""CLI implementation for filestreamer."""

import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger

from . import stream_file
from .core.model import DEFAULT_CHUNK_SIZE, DEFAULT_DELAY, Disposition, StreamConfig
from .io.handler import serve as serve_forever
from .io.memory import MemorySink

app = typer.Typer(add_completion=False, help="Stream a local file with HTTP byte-range support.")


def _setup_logging(level: str):
    logger.remove()
    logger.add(sys.stderr, level=level.upper(),
               format="<green>{time:HH:mm:ss.SSS}</green> | <level>{level:<8}</level> | {message}")


def _config(chunk_size: int, delay: float, inline: bool) -> StreamConfig:
    return StreamConfig(chunk_size=chunk_size, delay=delay,
                        disposition=Disposition.INLINE if inline else Disposition.ATTACHMENT)


def render_response(sink: MemorySink) -> bytes:
    """Raw HTTP response bytes captured by *sink*."""
    lines = [sink.status_line or ""] + sink.header_lines()
    return ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1") + sink.body


@app.command()
def serve(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="File to serve"),
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int = typer.Option(8000, "--port", min=0, max=65535, help="Port to listen on"),
    inline: bool = typer.Option(False, "--inline", help="Use inline disposition instead of attachment"),
    mime_type: Optional[str] = typer.Option(None, "--mime-type", help="Override the detected MIME type"),
    chunk_size: int = typer.Option(DEFAULT_CHUNK_SIZE, "--chunk-size", min=1, help="Bytes per chunk"),
    delay: float = typer.Option(DEFAULT_DELAY, "--delay", min=0.0, help="Seconds to pause after each chunk"),
    log_level: str = typer.Option("INFO", "--log-level", help="Log level"),
):
    """Serve FILE to every GET request until interrupted."""
    _setup_logging(log_level)
    serve_forever(file, host, port, config=_config(chunk_size, delay, inline), mime_type=mime_type)


@app.command()
def dump(
    file: Path = typer.Argument(..., help="File to stream"),
    range_header: Optional[str] = typer.Option(None, "--range", "-r", help="Range header value, e.g. 'bytes=0-99'"),
    inline: bool = typer.Option(False, "--inline", help="Use inline disposition instead of attachment"),
    mime_type: Optional[str] = typer.Option(None, "--mime-type", help="Override the detected MIME type"),
    chunk_size: int = typer.Option(DEFAULT_CHUNK_SIZE, "--chunk-size", min=1, help="Bytes per chunk"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write to PATH instead of stdout"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level"),
):
    """Write the raw HTTP response for one request to stdout or a file."""
    _setup_logging(log_level)
    sink = MemorySink()
    outcome = stream_file(file, sink, range_header=range_header,
                          config=_config(chunk_size, DEFAULT_DELAY, inline), mime_type=mime_type)

    if sink.status is not None:
        data = render_response(sink)
        if output:
            output.write_bytes(data)
        else:
            sys.stdout.buffer.write(data)
            sys.stdout.buffer.flush()

    if not outcome.success:
        typer.echo(outcome.message, err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
