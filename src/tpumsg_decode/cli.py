"""tpumsg - A53LITE API capture decoder."""
from __future__ import annotations

import json
from pathlib import Path

import click

from tpumsg_core.protocol import BYTE_ORDERS

from .const import HaltReason
from .export import CANONICAL_JSON_KW, export_report
from .render import render_report
from .stream import StreamDecoder, open_capture

# Exit status when the capture ended mid-message
EXIT_TRUNCATED = 2


def decode_capture(capture: Path, byte_order: str = "native", export_dir: Path | None = None):
    """Decode one capture file, optionally exporting the report."""
    with open_capture(capture) as source:
        report = StreamDecoder(source, BYTE_ORDERS[byte_order]).decode()

    if export_dir is not None:
        export_report(report, export_dir, capture_path=capture)
    return report


@click.command()
@click.argument("capture", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--byte-order",
    type=click.Choice(sorted(BYTE_ORDERS)),
    default="native",
    show_default=True,
    help="Byte order of the platform that produced the capture",
)
@click.option("--export", "export_dir", type=click.Path(file_okay=False, path_type=Path),
              help="Write messages/warnings Parquet tables and a manifest here")
@click.option("--json", "as_json", is_flag=True, help="Print a JSON summary instead of the dump")
def main(capture: Path, byte_order: str, export_dir: Path | None, as_json: bool) -> None:
    """Decode an A53LITE API message capture."""
    try:
        report = decode_capture(capture, byte_order, export_dir)
    except OSError as e:
        # Fail closed with a single-line reason.
        click.echo(f"FATAL: {e}", err=True)
        raise SystemExit(1)

    if as_json:
        click.echo(json.dumps(report.summary(), **CANONICAL_JSON_KW))
    else:
        for block in render_report(report, source_name=str(capture)):
            click.echo(block)

    if report.halt_reason != HaltReason.END_OF_STREAM:
        raise SystemExit(EXIT_TRUNCATED)


if __name__ == "__main__":
    main()
