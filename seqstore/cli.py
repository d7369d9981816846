"""Command line interface for seqstore."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

import click

from seqstore.demo import describe_packets, expected_contents, format_contents, shuffled_packets
from seqstore.errors import SeqStoreError
from seqstore.logging_utils import configure_logging, get_logger
from seqstore.parser import iter_udp_payloads
from seqstore.store import DEFAULT_CHUNK_SIZE, SpliceStore
from seqstore.viz import render_layout
from seqstore.writer import PacketWriter, WriteStatus

DEFAULT_OUTPUT = Path("results.dat")

ENV_OUTPUT = "SEQSTORE_OUTPUT"
ENV_CHUNK_SIZE = "SEQSTORE_CHUNK_SIZE"

LOGGER = get_logger(__name__)


@click.group()
@click.option(
    "--verbose",
    is_flag=True,
    default=False,
    help="Enable debug logging output.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Store out-of-order packet payloads in identifier order."""

    configure_logging(verbose)
    ctx.obj = {"verbose": verbose}


def _resolve_config(value, env_var: str, default, cast):
    if value is not None:
        return value
    raw = os.getenv(env_var)
    if raw is None:
        return default
    try:
        return cast(raw)
    except (ValueError, TypeError):
        LOGGER.warning("Invalid value for %s=%r; falling back to %s", env_var, raw, default)
        return default


def _open_writer(output: Path | None, chunk_size: int | None) -> PacketWriter:
    output_path = _resolve_config(output, ENV_OUTPUT, DEFAULT_OUTPUT, Path)
    chunk_value = _resolve_config(chunk_size, ENV_CHUNK_SIZE, DEFAULT_CHUNK_SIZE, int)
    if chunk_value <= 0:
        raise click.BadParameter(f"chunk size must be positive, got {chunk_value}")
    try:
        return PacketWriter(output_path, chunk_size=chunk_value)
    except SeqStoreError as exc:
        raise click.ClickException(str(exc))


def _write_all(writer: PacketWriter, packets: Iterable[bytes]) -> None:
    try:
        for packet in packets:
            writer.write(packet)
    except SeqStoreError as exc:
        raise click.ClickException(str(exc))


def _echo_stats(writer: PacketWriter) -> None:
    stats = writer.stats()
    click.echo(
        f"Stored {stats[WriteStatus.ACCEPTED.value]} packets "
        f"(dropped: {stats[WriteStatus.DROPPED.value]}, duplicates: {stats[WriteStatus.DUPLICATE.value]})"
    )
    click.echo(f"Backing file {writer.path}: {stats['total_bytes']} bytes in {stats['intervals']} runs")


def _maybe_plot(writer: PacketWriter, plot_dir: Path | None) -> None:
    if plot_dir is None:
        return
    output_path = render_layout(writer.intervals(), plot_dir)
    click.echo(f"Layout written to {output_path}")


_output_option = click.option(
    "--out",
    "output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Backing file path (default {DEFAULT_OUTPUT}; env {ENV_OUTPUT})",
)
_chunk_option = click.option(
    "--chunk-size",
    default=None,
    type=int,
    help=f"Copy chunk size in bytes (default {DEFAULT_CHUNK_SIZE}; env {ENV_CHUNK_SIZE})",
)
_plot_option = click.option(
    "--plot-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Write an interactive layout.html of the identifier runs to this directory",
)


@cli.command("demo")
@_output_option
@_chunk_option
@_plot_option
@click.option("--seed", type=int, default=None, help="Seed for the arrival order shuffle")
def demo_command(output: Path | None, chunk_size: int | None, plot_dir: Path | None, seed: int | None) -> None:
    """Write the 20 sample packets in shuffled order and print the result."""

    writer = _open_writer(output, chunk_size)
    packets = shuffled_packets(seed)

    click.echo("Arrival order:")
    for line in describe_packets(packets):
        click.echo(f"  {line}")

    _write_all(writer, packets)
    contents = writer.contents()
    click.echo(format_contents(contents))
    _echo_stats(writer)
    if contents != expected_contents():
        raise click.ClickException("backing file does not match the sorted sample payloads")
    _maybe_plot(writer, plot_dir)
    LOGGER.info("Demo wrote %s bytes to %s", len(contents), writer.path)


@cli.command("ingest-pcap")
@click.option("--in", "input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path), required=True, help="PCAP/PCAPNG input path")
@_output_option
@_chunk_option
@_plot_option
@click.option("--port", type=int, default=None, help="Only use UDP datagrams to or from this port")
def ingest_pcap_command(
    input_path: Path,
    output: Path | None,
    chunk_size: int | None,
    plot_dir: Path | None,
    port: int | None,
) -> None:
    """Store the payload of every UDP datagram in a capture."""

    writer = _open_writer(output, chunk_size)
    LOGGER.info("Ingesting UDP payloads from %s", input_path)
    _write_all(writer, iter_udp_payloads(input_path, port=port))
    _echo_stats(writer)
    _maybe_plot(writer, plot_dir)


@cli.command("show")
@click.option("--in", "input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path), required=True, help="Backing file path")
def show_command(input_path: Path) -> None:
    """Print the content of a backing file."""

    try:
        contents = SpliceStore(input_path).read_all()
    except SeqStoreError as exc:
        raise click.ClickException(str(exc))
    click.echo(format_contents(contents))


if __name__ == "__main__":
    cli()
