"""Command-line interface for iperfcompare."""

import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console

if TYPE_CHECKING:
    from iperfcompare.config.settings import AppConfig
    from iperfcompare.ingestion.batch import BatchResult

app = typer.Typer(
    name="iperfcompare",
    help="Normalize iperf3 JSON results and compare up to six runs.",
    no_args_is_help=True,
)

console = Console()

FilesArgument = Annotated[
    list[Path],
    typer.Argument(
        help="iperf3 JSON result files (as produced by `iperf3 --json`).",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration YAML file.",
        exists=True,
        dir_okay=False,
    ),
]


@app.callback()
def main(
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)."),
    ] = "WARNING",
    json_logs: Annotated[
        bool,
        typer.Option("--json-logs", help="Emit logs as JSON."),
    ] = False,
) -> None:
    """Configure logging before any command runs."""
    from iperfcompare.utils.logging import configure_logging

    configure_logging(level=log_level, json_output=json_logs)


def _run_batch(files: list[Path], app_config: "AppConfig") -> "BatchResult":
    """Process local files without deleting them."""
    from iperfcompare.errors import BatchSizeError
    from iperfcompare.ingestion.batch import UploadedFile, process_batch

    # Local files belong to the user; never delete them
    upload = app_config.upload.model_copy(update={"delete_after_processing": False})
    uploaded = [UploadedFile(name=path.name, path=path) for path in files]

    try:
        return process_batch(uploaded, upload)
    except BatchSizeError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e


@app.command()
def summarize(files: FilesArgument, config: ConfigOption = None) -> None:
    """Print the headline metrics of each run."""
    from iperfcompare.config.loader import load_config
    from iperfcompare.reporting.console import ConsoleReporter

    result = _run_batch(files, load_config(config))

    reporter = ConsoleReporter(console)
    reporter.print_summaries(result.measurements)
    reporter.print_failures(result.failures)

    if not result.measurements:
        raise typer.Exit(code=1)


@app.command()
def compare(
    files: FilesArgument,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write the comparison as JSON to this path ('-' for stdout).",
        ),
    ] = None,
    config: ConfigOption = None,
) -> None:
    """Align up to six runs and show which charts can be drawn."""
    from iperfcompare.config.loader import load_config
    from iperfcompare.reporting.console import ConsoleReporter

    result = _run_batch(files, load_config(config))
    comparison = result.comparison()

    payload = result.to_dict()
    payload["comparison"] = comparison.to_dict()

    if output is not None and str(output) == "-":
        sys.stdout.write(json.dumps(payload, indent=2) + "\n")
    else:
        reporter = ConsoleReporter(console)
        reporter.print_comparison(comparison)
        reporter.print_failures(result.failures)

        if output is not None:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            console.print(f"\n[green]Saved to: {output}[/green]")

    if not result.measurements:
        raise typer.Exit(code=1)


@app.command()
def serve(
    config: ConfigOption = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="Override the configured port."),
    ] = None,
) -> None:
    """Run the HTTP upload endpoint."""
    from iperfcompare.config.loader import load_config
    from iperfcompare.server import UPLOAD_PATH, start_upload_server
    from iperfcompare.utils.logging import configure_from_settings

    app_config = load_config(config)
    if config is not None:
        configure_from_settings(app_config.logging)
    if port is not None:
        app_config = app_config.model_copy(
            update={"server": app_config.server.model_copy(update={"port": port})}
        )

    server = app_config.server
    console.print(
        f"[blue]Upload endpoint: http://{server.host}:{server.port}{UPLOAD_PATH}[/blue]"
    )
    console.print(f"[dim]Max files per batch: {app_config.upload.max_files}[/dim]")
    console.print("[dim]Press Ctrl+C to stop[/dim]")

    start_upload_server(app_config)


@app.command()
def version() -> None:
    """Show version information."""
    from iperfcompare import __version__

    console.print(f"iperfcompare version {__version__}")


if __name__ == "__main__":
    app()
