"""CLI implementation for bodybytes."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from . import collect, collect_with_limit, collect_sync, collect_with_limit_sync
from .core.model import Report
from .core.util import report_asdict
from .io import DEFAULT_CHUNK_SIZE, open_body, open_body_async, close_global_client

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False, help="Collect streamed bodies from files and URLs into single buffers.")


def iter_sources(files: list[str]) -> list[str]:
    """Get list of sources from files argument or stdin."""
    if "-" in files:
        # stdin mode
        stdin_lines = [ln.strip() for ln in sys.stdin if ln.strip()]
        if not stdin_lines:
            return []
        return stdin_lines
    elif files:
        return list(files)
    return []


def _failed(source: str, error: Exception, body, max_length: Optional[int]) -> Report:
    """Report a failure after reading started, keeping the body's counters."""
    logger.debug("Collecting %s failed after %d chunks: %r", source, body.chunks_read, error)
    return Report(False, source, None, str(error), body.chunks_read, body.bytes_read, max_length)


async def _collect_one(source: str, max_length: Optional[int], chunk_size: int) -> Report:
    body = await open_body_async(source, chunk_size)
    try:
        async with body:
            if max_length is None:
                data = await collect(body)
            else:
                data = await collect_with_limit(body, max_length)
    except Exception as e:
        return _failed(source, e, body, max_length)
    return Report(True, source, data, None, body.chunks_read, body.bytes_read, max_length)


def _collect_one_sync(source: str, max_length: Optional[int], chunk_size: int) -> Report:
    body = open_body(source, chunk_size)
    try:
        with body:
            if max_length is None:
                data = collect_sync(body)
            else:
                data = collect_with_limit_sync(body, max_length)
    except Exception as e:
        return _failed(source, e, body, max_length)
    return Report(True, source, data, None, body.chunks_read, body.bytes_read, max_length)


async def _batch_collect(sources: list[str], max_length: Optional[int], chunk_size: int) -> list[Report]:
    """Asynchronously collect bodies from a list of sources."""
    try:
        tasks = [_collect_one(src, max_length, chunk_size) for src in sources]
        results = await asyncio.gather(*tasks, return_exceptions=True)
    finally:
        await close_global_client()
    processed_results = []
    for src, res in zip(sources, results):
        if isinstance(res, Exception):
            logger.debug("Collecting %s failed: %r", src, res)
            processed_results.append(Report(False, src, None, str(res), max_length=max_length))
        else:
            processed_results.append(res)
    return processed_results


@app.command()
def main(
    files: list[str] = typer.Argument(None, help="Files or URLs to collect, or '-' for stdin"),
    max_length: Optional[int] = typer.Option(None, "--max-length", min=0, help="Stop reading once N bytes were collected"),
    chunk_size: int = typer.Option(DEFAULT_CHUNK_SIZE, "--chunk-size", min=1, help="Read files and URLs in N-byte chunks"),
    bytes: Optional[int] = typer.Option(None, "--bytes", min=0, help="Peek first N bytes (Base64)"),
    fields: Optional[str] = typer.Option(None, "--fields", help="Comma-separated subset of keys to emit"),
    jsonl: bool = typer.Option(False, "--jsonl", help="Force JSON-lines output"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write to PATH instead of stdout"),
    raw: bool = typer.Option(False, "--raw", help="Write the collected body instead of a report (single source)"),
    sync: bool = typer.Option(False, "--sync", help="Force synchronous I/O"),
    verbose: bool = typer.Option(False, "--verbose", help="Log debug output to stderr"),
):
    """Collect the body of one or many local paths or URLs."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)

    sel_fields = set(fields.split(",")) if fields else None
    sources = iter_sources(files or [])

    if not sources:
        typer.echo("No input files given.", err=True)
        raise typer.Exit(code=1)

    if raw and len(sources) != 1:
        typer.echo("--raw needs exactly one source.", err=True)
        raise typer.Exit(code=1)

    results: list[Report] = []
    if sync:
        for src in sources:
            try:
                res = _collect_one_sync(src, max_length, chunk_size)
            except Exception as e:
                logger.debug("Collecting %s failed: %r", src, e)
                res = Report(False, src, None, str(e), max_length=max_length)
            results.append(res)
    else:
        results = asyncio.run(_batch_collect(sources, max_length, chunk_size))

    if raw:
        _write_raw(results[0], output)
        return

    # open output sink
    sink = open(output, "w", encoding="utf-8") if output else sys.stdout
    try:
        # choose output style
        if len(sources) == 1 and not jsonl:
            obj = report_asdict(results[0], fields=sel_fields, bytes_peek=bytes)
            json.dump(obj, sink, indent=2)
            sink.write("\n")
        else:
            for res in results:
                obj = report_asdict(res, fields=sel_fields, bytes_peek=bytes)
                sink.write(json.dumps(obj))
                sink.write("\n")
    finally:
        if output:
            sink.close()

    # exit code
    if any(not r.success for r in results):
        raise typer.Exit(code=1)


def _write_raw(res: Report, output: Optional[Path]) -> None:
    if not res.success:
        typer.echo(f"{res.source}: {res.error}", err=True)
        raise typer.Exit(code=1)
    if output:
        output.write_bytes(res.body)
    else:
        stream = typer.get_binary_stream("stdout")
        stream.write(res.body)
        stream.flush()


if __name__ == "__main__":
    app()
