"""fullframe command-line interface.

Usage::

    fullframe --help
    fullframe decode tlm.ff 900 16 --words 800 --words 4 --first-frame 3901 --stride 4 --dump-file hexdump.txt
    fullframe inspect tlm.ff 900 16
    fullframe hexdump values.npy --element-size 2 --output values.txt
    fullframe stages
    fullframe version
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import NoReturn, Optional

import click
import numpy as np
import pandas as pd
from rich.console import Console
from rich.table import Table

from fullframe.__version__ import __version__
from fullframe.errors import FullFrameError
from fullframe.observability.logging import configure_logging

console = Console()
err_console = Console(stderr=True)


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    show_default=True,
    help="Log verbosity level.",
)
@click.option(
    "--log-format",
    default="console",
    type=click.Choice(["console", "json"], case_sensitive=False),
    show_default=True,
    help="Log output format.",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str, log_format: str) -> None:
    """Full frame telemetry reader: decode frames and dump words as hex."""
    ctx.ensure_object(dict)
    configure_logging(level=log_level, fmt=log_format.lower())  # type: ignore[arg-type]


# --------------------------------------------------------------------------- #
#  fullframe version                                                           #
# --------------------------------------------------------------------------- #


@cli.command()
def version() -> None:
    """Print the fullframe version."""
    console.print(f"[bold cyan]Full Frame Telemetry Reader[/] v{__version__}")


# --------------------------------------------------------------------------- #
#  fullframe stages                                                            #
# --------------------------------------------------------------------------- #


@cli.command()
def stages() -> None:
    """List all registered pipeline stage plugins."""
    import fullframe.plugins  # noqa: F401, PLC0415
    from fullframe.core.registry import registry  # noqa: PLC0415

    for category, names in registry.all_stages().items():
        table = Table(title=category.upper(), show_header=False, box=None)
        table.add_column("name", style="green")
        for n in names:
            table.add_row(n)
        console.print(table)


# --------------------------------------------------------------------------- #
#  fullframe inspect                                                           #
# --------------------------------------------------------------------------- #


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("frame_word_count", type=int)
@click.argument("word_size_bits", type=int)
def inspect(file: Path, frame_word_count: int, word_size_bits: int) -> None:
    """Show the frame geometry of FILE and how many frames it holds."""
    from fullframe.models.geometry import compute_geometry  # noqa: PLC0415

    try:
        geometry = compute_geometry(word_size_bits, frame_word_count)
    except FullFrameError as exc:
        _fail(exc)

    size = file.stat().st_size
    frames = geometry.complete_frames(size)
    leftover = size - frames * geometry.frame_size_bytes

    table = Table(title=f"[bold]{file.name}[/]", show_header=False)
    table.add_column("field", style="cyan")
    table.add_column("value", justify="right")
    table.add_row("file size (bytes)", f"{size:,}")
    table.add_row("word size (bits)", str(geometry.word_size_bits))
    table.add_row("word size (bytes)", str(geometry.word_size_bytes))
    table.add_row("words per frame", str(geometry.frame_word_count))
    table.add_row("data region (bytes)", str(geometry.data_region_bytes))
    table.add_row("frame size (bytes)", str(geometry.frame_size_bytes))
    table.add_row("complete frames", f"{frames:,}")
    table.add_row("trailing bytes", str(leftover))
    console.print(table)


# --------------------------------------------------------------------------- #
#  fullframe decode                                                            #
# --------------------------------------------------------------------------- #


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("frame_word_count", type=int)
@click.argument("word_size_bits", type=int)
@click.option("--words", "-w", "words", multiple=True, type=int, help="Word index to extract (repeatable, kept in order).")
@click.option("--first-frame", type=int, default=None, help="First frame to read (1-based).  [default: 1]")
@click.option("--last-frame", type=int, default=None, help="Last frame to read.  [default: last complete frame]")
@click.option("--stride", type=int, default=None, help="Read every Nth frame.  [default: 1]")
@click.option("--dump-file", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write the full hex dump here.")
@click.option("--append", is_flag=True, default=False, help="Append to --dump-file without a header row.")
@click.option("--delimiter", default=",", show_default=True, help="Dump field delimiter.")
@click.option("--chunk-frames", type=int, default=None, help="Frames read per chunk.")
@click.option("--workers", type=int, default=1, show_default=True, help="Decode worker threads.")
@click.option(
    "--on-bad-time",
    type=click.Choice(["raise", "mark"]),
    default="raise",
    show_default=True,
    help="Abort on a malformed BCD time field, or mark the frame and continue.",
)
@click.option("--export", "export_format", type=click.Choice(["parquet", "hdf5"]), default=None, help="Also archive decoded frames.")
@click.option("--export-path", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Archive file for --export.")
@click.option("--preview/--no-preview", default=True, show_default=True, help="Print header + first 30 rows to stdout.")
def decode(
    file: Path,
    frame_word_count: int,
    word_size_bits: int,
    words: tuple[int, ...],
    first_frame: Optional[int],
    last_frame: Optional[int],
    stride: Optional[int],
    dump_file: Optional[Path],
    append: bool,
    delimiter: str,
    chunk_frames: Optional[int],
    workers: int,
    on_bad_time: str,
    export_format: Optional[str],
    export_path: Optional[Path],
    preview: bool,
) -> None:
    """Decode FILE (FRAME_WORD_COUNT words of WORD_SIZE_BITS bits per frame)."""
    from fullframe.api import DecodeOptions, decode as run_decode  # noqa: PLC0415
    from fullframe.core.registry import registry  # noqa: PLC0415
    import fullframe.plugins  # noqa: F401, PLC0415

    if export_format and export_path is None:
        raise click.UsageError("--export requires --export-path")

    loaders = []
    if export_format:
        loaders.append(registry.create("loader", export_format, {"path": export_path}))

    options: dict[str, object] = {
        "get_words": list(words) or None,
        "first_frame": first_frame,
        "last_frame": last_frame,
        "frame_stride": stride,
        "dump_file": dump_file,
        "write_mode": "append" if append else "overwrite",
        "console_preview": preview,
        "delimiter": delimiter,
        "workers": workers,
        "on_bad_time": on_bad_time,
    }
    if chunk_frames is not None:
        options["chunk_frames"] = chunk_frames

    try:
        result = run_decode(
            file,
            frame_word_count,
            word_size_bits,
            DecodeOptions(**options),
            loaders=loaders,
        )
    except (FullFrameError, OSError, ValueError) as exc:
        _fail(exc)

    meta = result.metadata
    summary = Table(title="decode summary", show_header=False, box=None)
    summary.add_column("field", style="cyan")
    summary.add_column("value", justify="right")
    summary.add_row("frames decoded", f"{result.frame_count:,}")
    summary.add_row("planned frames", f"{meta['planned_frames']:,}")
    summary.add_row("words per frame", str(result.word_count))
    summary.add_row("truncated at EOF", "yes" if meta["truncated"] else "no")
    bad_times = int((~result.time_valid).sum())
    if bad_times:
        summary.add_row("bad time fields", f"[yellow]{bad_times}[/]")
    if dump_file:
        summary.add_row("dump file", str(dump_file))
    if export_path:
        summary.add_row(f"{export_format} export", str(export_path))
    summary.add_row("elapsed", f"{meta['elapsed_s']:.3f}s")
    err_console.print(summary)

    metrics = meta["metrics"]
    timing = Table(title="stage timing", box=None)
    timing.add_column("stage", style="cyan")
    timing.add_column("frames", justify="right")
    timing.add_column("busy", justify="right")
    timing.add_column("frames/s", justify="right")
    for stage_name, stage in metrics["stages"].items():
        timing.add_row(
            stage_name,
            f"{stage['frames']:,}",
            f"{stage['busy_s']:.3f}s",
            f"{stage['frames_per_s']:,.0f}",
        )
    timing.add_row("[bold]overall[/]", f"{metrics['frames']:,}", "", f"{metrics['frames_per_s']:,.0f}")
    err_console.print(timing)


# --------------------------------------------------------------------------- #
#  fullframe hexdump                                                           #
# --------------------------------------------------------------------------- #


@cli.command()
@click.argument("array_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--element-size", type=int, default=2, show_default=True, help="Bytes per element.")
@click.option("--delimiter", default=",", show_default=True)
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write lines here instead of stdout.")
@click.option("--append", is_flag=True, default=False, help="Append to --output.")
def hexdump(
    array_file: Path,
    element_size: int,
    delimiter: str,
    output: Optional[Path],
    append: bool,
) -> None:
    """Render the integers in ARRAY_FILE (.npy or headerless CSV) as fixed-width hex."""
    from fullframe.render.hexdump import render_hex, write_hex  # noqa: PLC0415

    try:
        array = _load_array(array_file)
        lines = render_hex(array, element_size_bytes=element_size, delimiter=delimiter)
    except (FullFrameError, ValueError, TypeError) as exc:
        _fail(exc)

    if output is None:
        for line in lines:
            click.echo(line)
        return
    write_hex(output, lines, write_mode="append" if append else "overwrite")
    err_console.print(f"[dim]Wrote {len(lines)} line(s) to {output}[/]")


def _load_array(path: Path) -> np.ndarray:
    if path.suffix == ".npy":
        return np.load(path, allow_pickle=False)
    return pd.read_csv(path, header=None).to_numpy()


def _fail(exc: Exception) -> NoReturn:
    err_console.print(f"[red]Error:[/] {exc}")
    sys.exit(1)
