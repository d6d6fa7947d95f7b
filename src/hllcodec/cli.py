"""Command-line interface for hllcodec.

Commands:
    hllcodec count: Estimate distinct lines of a file and save the summary
    hllcodec merge: Union saved summaries
    hllcodec inspect: Show the state of a saved summary
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from hllcodec.compression.base import CodecError, InvalidEncoding
from hllcodec.config import configure_logging, load_settings
from hllcodec.hyperloglog import HyperLogLog, union_all
from hllcodec.serialization import (
    WireFormat,
    from_bytes,
    from_document,
    to_bytes,
    to_document,
)

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="hllcodec",
    help="Approximate distinct counting with compact HyperLogLog summaries",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


# =============================================================================
# Type Aliases
# =============================================================================

PrecisionOpt = Annotated[
    Optional[int],
    typer.Option("--precision", "-p", help="Precision bits (4-18), default from HLLCODEC_PRECISION"),
]

OutputOpt = Annotated[
    Optional[Path],
    typer.Option("--output", "-o", help="Write the summary to this file"),
]

FormatOpt = Annotated[
    Optional[str],
    typer.Option(
        "--format", "-f",
        help="Summary file format: text (JSON document) or binary (raw codec bytes)",
    ),
]


# =============================================================================
# Helper Functions
# =============================================================================


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(1)


def load_summary(path: Path, fmt: WireFormat, precision: int) -> HyperLogLog:
    """Load a summary written by ``count`` or ``merge``.

    Text summaries are JSON documents that carry their own precision; binary
    summaries are decoded at ``precision``.

    Raises:
        InvalidEncoding: If a text summary is not a JSON document.
    """
    if fmt is WireFormat.BINARY:
        return from_bytes(path.read_bytes(), precision)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise InvalidEncoding(f"{path} is not a summary document: {exc}") from exc
    return from_document(document)


def _resolve(format: str | None, precision: int | None) -> tuple[WireFormat, int]:
    settings = load_settings()
    fmt = WireFormat.from_string(format) if format else settings.wire_format
    return fmt, precision if precision is not None else settings.precision


def write_summary(hll: HyperLogLog, path: Path, fmt: WireFormat) -> None:
    if fmt is WireFormat.TEXT:
        path.write_text(json.dumps(to_document(hll)) + "\n", encoding="utf-8")
    else:
        path.write_bytes(to_bytes(hll))
    logger.info("Wrote %s summary to %s", fmt.value, path)


# =============================================================================
# Commands
# =============================================================================


@app.callback()
def main(
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="Logging level (debug, info, warning, error)"),
    ] = None,
) -> None:
    """Approximate distinct counting with compact HyperLogLog summaries."""
    try:
        settings = load_settings()
    except ValueError as e:
        raise _fail(str(e))
    configure_logging(log_level or settings.log_level)


@app.command(name="count")
def count_cmd(
    file: Annotated[
        Optional[Path],
        typer.Argument(help="Input file, one value per line (default: stdin)"),
    ] = None,
    precision: PrecisionOpt = None,
    output: OutputOpt = None,
    format: FormatOpt = None,
) -> None:
    """Estimate the number of distinct non-empty lines."""
    if file is not None and not file.exists():
        raise _fail(f"File not found: {file}")

    try:
        fmt, precision = _resolve(format, precision)
        hll = HyperLogLog.with_precision(precision, load_settings().word_type)
    except ValueError as e:
        raise _fail(str(e))

    stream = open(file, encoding="utf-8") if file is not None else sys.stdin
    try:
        hll.insert_many(line.rstrip("\r\n") for line in stream if line.strip())
    except UnicodeDecodeError as e:
        raise _fail(f"{file or 'stdin'} is not valid UTF-8 text: {e}")
    finally:
        if file is not None:
            stream.close()

    typer.echo(str(hll.estimate()))

    if output is not None:
        write_summary(hll, output, fmt)
        if fmt is WireFormat.BINARY:
            typer.echo(f"Summary written to {output} (precision {hll.precision})", err=True)


@app.command(name="merge")
def merge_cmd(
    inputs: Annotated[list[Path], typer.Argument(help="Summaries to merge")],
    output: OutputOpt = None,
    precision: PrecisionOpt = None,
    format: FormatOpt = None,
) -> None:
    """Merge summaries and print the estimate of their union.

    Binary summaries do not record their precision; pass ``--precision``.
    The merged summary is written in the input format.
    """
    try:
        fmt, precision = _resolve(format, precision)
        merged = union_all(load_summary(path, fmt, precision) for path in inputs)
    except (OSError, ValueError, CodecError) as e:
        raise _fail(str(e))

    typer.echo(str(merged.estimate()))
    if output is not None:
        write_summary(merged, output, fmt)


@app.command(name="inspect")
def inspect_cmd(
    input: Annotated[Path, typer.Argument(help="Summary to inspect")],
    precision: PrecisionOpt = None,
    format: FormatOpt = None,
) -> None:
    """Show precision, estimate and register statistics of a summary."""
    try:
        fmt, precision = _resolve(format, precision)
        hll = load_summary(input, fmt, precision)
    except (OSError, ValueError, CodecError) as e:
        raise _fail(str(e))

    metrics = hll.metrics()
    table = Table(title=f"Summary: {input.name}")
    table.add_column("Property", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Precision", str(hll.precision))
    table.add_row("Registers", f"{hll.num_registers:,}")
    table.add_row("Estimate", f"{hll.estimate():,}")
    table.add_row("Standard error", f"{hll.standard_error():.2%}")
    table.add_row("Fill ratio", f"{metrics.fill_ratio:.2%}")
    table.add_row("Compressed bytes", f"{len(to_bytes(hll)):,}")
    console.print(table)


if __name__ == "__main__":
    app()
