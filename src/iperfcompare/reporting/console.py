"""
Console reporter for normalized runs and comparisons.

Formats per-source summaries, chart layouts and failures using Rich.
"""

from collections.abc import Sequence

from rich.console import Console
from rich.table import Table

from iperfcompare.alignment.charts import ChartDescriptor, Comparison
from iperfcompare.ingestion.batch import FileFailure
from iperfcompare.normalization.measurement import NormalizedMeasurement, Protocol
from iperfcompare.reporting.formatting import (
    NOT_AVAILABLE,
    format_bytes,
    format_count,
    format_duration,
    format_ms,
    format_throughput,
)


def summary_rows(measurement: NormalizedMeasurement) -> list[tuple[str, str]]:
    """
    Label/value pairs for one source's summary table.

    Protocol-specific rows appear only for the protocol they apply to.
    """
    summary = measurement.summary
    is_tcp = summary.protocol is Protocol.TCP

    rows = [
        ("Protocol", summary.protocol.value),
        ("Date and time", summary.timestamp or NOT_AVAILABLE),
        ("Duration", format_duration(summary.duration_seconds)),
        (
            "Retransmits" if is_tcp else "Total lost packets",
            format_count(summary.total_lost_or_retransmitted),
        ),
        ("Throughput", format_throughput(summary.final_throughput)),
    ]
    if is_tcp:
        rows.append(("Latency (RTT)", format_ms(summary.final_latency)))
        rows.append(("Sent bytes", format_bytes(summary.total_sent_bytes)))
    else:
        rows.append(("Jitter", format_ms(summary.final_jitter)))
        rows.append(("Sent packets", format_count(summary.total_sent_packets)))
    return rows


class ConsoleReporter:
    """Formats and displays results to the console."""

    def __init__(self, console: Console) -> None:
        """
        Initialize console reporter.

        Args:
            console: Rich Console instance for output.
        """
        self.console = console

    def print_summaries(self, measurements: Sequence[NormalizedMeasurement]) -> None:
        """Print one summary table per source, in upload order."""
        for measurement in measurements:
            table = Table(title=measurement.source_id, show_header=False)
            table.add_column("Metric", style="cyan", no_wrap=True)
            table.add_column("Value", style="green", justify="right")
            for label, value in summary_rows(measurement):
                table.add_row(label, value)
            self.console.print(table)

    def print_comparison(self, comparison: Comparison) -> None:
        """Print the chart grid as a table of two-slot rows."""
        if not comparison.charts:
            self.console.print("[yellow]Nothing to display[/yellow]")
            return

        table = Table(title="Charts", show_header=True)
        table.add_column("Left", style="cyan")
        table.add_column("Right", style="cyan")
        for left, right in comparison.rows:
            table.add_row(self._describe(left), self._describe(right))
        self.console.print(table)

        legend = Table(title="Sources", show_header=True)
        legend.add_column("Source", style="cyan")
        legend.add_column("Color")
        for source_id, color in comparison.colors.items():
            legend.add_row(source_id, f"[{color}]{color}[/]")
        self.console.print(legend)

    def print_failures(self, failures: Sequence[FileFailure]) -> None:
        """Print per-file failures, if any."""
        if not failures:
            return

        self.console.print()
        self.console.print("[bold red]Files not processed:[/bold red]")
        for failure in failures:
            self.console.print(f"  [bold]{failure.source_id}[/bold]: {failure.message}")

    def _describe(self, entry: object) -> str:
        if not isinstance(entry, ChartDescriptor):
            return "[dim]-[/dim]"
        return f"{entry.title} [dim]({len(entry.data)} {entry.kind.value} points)[/dim]"
