"""
Output formatting for ranked nameserver results.

Provides multiple output formats:
- JSON: the ranked records verbatim
- CSV: one row per reachable nameserver
- BIND: a named.conf.options forwarders block with the fastest servers
- Human-readable: Rich terminal table and summary
"""

import csv
import json
import logging
from io import StringIO
from pathlib import Path

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .models import RankedResult
from .statistics import StatisticsEngine


logger = logging.getLogger(__name__)

CSV_FIELDS = ["average", "address"]

BIND_CONFIG_FILENAME = "named.conf.options"

BIND_FORWARDER_COUNT = 4

BIND_CONFIG_TEMPLATE = """options {
        directory "/var/cache/bind";
        forwarders {
        ADDRESSES
        };
        dnssec-validation auto;
        listen-on-v6 { any; };
};
"""


class JSONOutput:
    """JSON output formatter."""

    @staticmethod
    def format(result: RankedResult) -> str:
        """Format the ranked result as a JSON array of records."""
        return json.dumps(result.to_records())

    @staticmethod
    def save(result: RankedResult, path: Path) -> Path:
        """Save ranked result to a JSON file."""
        with open(path, "w") as f:
            f.write(JSONOutput.format(result))
        logger.debug("Written to %s", path)
        return path


class CSVOutput:
    """CSV output formatter."""

    @staticmethod
    def format(result: RankedResult) -> str:
        """
        Format ranked result as CSV.

        Header and string values are quoted, latencies are not.
        """
        output = StringIO()
        writer = csv.DictWriter(
            output,
            fieldnames=CSV_FIELDS,
            quoting=csv.QUOTE_NONNUMERIC,
            lineterminator="\n",
        )

        writer.writeheader()
        for record in result.to_records():
            writer.writerow(record)

        return output.getvalue().rstrip("\n")

    @staticmethod
    def save(result: RankedResult, path: Path) -> Path:
        """Save ranked result to a CSV file."""
        with open(path, "w", newline="") as f:
            f.write(CSVOutput.format(result))
        logger.debug("Written to %s", path)
        return path


class BindConfigOutput:
    """BIND forwarders configuration formatter."""

    @staticmethod
    def format(result: RankedResult, count: int = BIND_FORWARDER_COUNT) -> str:
        """Substitute the fastest servers into the BIND options template."""
        addresses = "\n     ".join(
            f"    {outcome.address};" for outcome in result.top(count)
        )
        return BIND_CONFIG_TEMPLATE.replace("ADDRESSES", addresses)

    @staticmethod
    def save(result: RankedResult, directory: Path) -> Path:
        """Save the BIND options file into a directory."""
        path = Path(directory) / BIND_CONFIG_FILENAME
        with open(path, "w") as f:
            f.write(BindConfigOutput.format(result))
        logger.debug("Written to %s", path)
        return path


def write_all(result: RankedResult, directory: Path, stem: str) -> list[Path]:
    """
    Write the JSON, CSV and BIND outputs for a run.

    Args:
        result: Non-empty ranked result
        directory: Output directory (created if missing)
        stem: Base filename for the JSON and CSV files

    Returns:
        Paths written, in order
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    return [
        JSONOutput.save(result, directory / f"{stem}.json"),
        CSVOutput.save(result, directory / f"{stem}.csv"),
        BindConfigOutput.save(result, directory),
    ]


class RichConsoleOutput:
    """Rich library console output with colors and tables."""

    @staticmethod
    def print(result: RankedResult, console: Console = None, limit: int = 20) -> None:
        """
        Print the ranked result using rich.

        Args:
            result: RankedResult to display
            console: Console to print to (default: stdout)
            limit: Maximum rows in the table
        """
        console = console or Console()
        summary = StatisticsEngine.summarize(result)

        console.print()
        console.print(Panel.fit(
            "[bold blue]NAMESERVER LATENCY RANKING[/bold blue]",
            border_style="blue",
        ))
        console.print()

        console.print(f"  [dim]Duration:[/dim] {result.duration_seconds:.1f}s")
        console.print(f"  [dim]Probed:[/dim] {summary.candidates_probed} | "
                      f"[dim]Reachable:[/dim] {summary.reachable} "
                      f"({summary.reachable_rate:.1f}%)")
        console.print(f"  [dim]Latency:[/dim] median={summary.median_ms:.1f}ms, "
                      f"p95={summary.p95_ms:.1f}ms, "
                      f"max={summary.slowest_ms:.1f}ms")
        console.print()

        table = Table(
            title="Fastest Nameservers",
            box=box.ROUNDED,
            header_style="bold magenta",
        )

        table.add_column("#", justify="right", style="dim")
        table.add_column("Address", style="cyan")
        table.add_column("Family", style="dim")
        table.add_column("Avg (ms)", justify="right", style="green")

        for rank, outcome in enumerate(result.top(limit), start=1):
            table.add_row(
                str(rank),
                outcome.address,
                outcome.transport.value.upper(),
                f"{outcome.average_ms:.3f}",
            )

        console.print(table)
        console.print()

        fastest = result.fastest
        if fastest:
            console.print(Panel(
                f"[bold green]FASTEST: {fastest.address}[/bold green]\n"
                f"Average Latency: {fastest.average_ms:.3f}ms",
                border_style="green",
            ))
        else:
            console.print(Panel(
                "[bold yellow]No reachable nameservers[/bold yellow]",
                border_style="yellow",
            ))

        console.print()
