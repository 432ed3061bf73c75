"""
Command-line interface for nameserver-sort.

Fetches public nameservers for a country, ranks them by latency and
writes JSON, CSV and BIND forwarder outputs.
"""

import asyncio
import json as json_module
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn

from . import __version__
from .classifier import AddressClassifier
from .config import (
    DEFAULT_COUNTRY_CODE,
    DEFAULT_MAX_SERVERS,
    DEFAULT_METHOD,
    DEFAULT_MIN_REPLIES,
    DEFAULT_TIMEOUT_SECONDS,
    Settings,
)
from .errors import SourceUnavailable
from .logging_setup import setup_logging
from .output import RichConsoleOutput, write_all
from .runner import SortRunner
from .system_utils import find_ping_binary, get_platform
from .transports import TRANSPORTS


EXIT_SOURCE_UNAVAILABLE = 1
EXIT_NO_RESULTS = 2


def create_progress_callback():
    """Create a rich progress bar and the callback that drives it."""
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=Console(stderr=True),
        transient=True,
    )

    task_id = None

    def callback(message: str, current: int, total: int):
        nonlocal task_id
        if task_id is None:
            task_id = progress.add_task(message, total=total)
        progress.update(task_id, description=message, completed=current)

    return progress, callback


@click.group()
@click.version_option(__version__)
def main():
    """
    nameserver-sort - rank public DNS nameservers by latency.

    Uses the per-country listings from public-dns.info.
    """
    pass


@main.command()
@click.option(
    "--country-code", "-c",
    default=DEFAULT_COUNTRY_CODE,
    show_default=True,
    help="Country code to fetch DNS entries for",
)
@click.option(
    "--debug", "-d",
    is_flag=True,
    help="Output debug information",
)
@click.option(
    "--filename", "-f",
    help="Filename of outputs (default: results-<country code>)",
)
@click.option(
    "--max", "-m", "max_servers",
    type=click.IntRange(min=2),
    default=DEFAULT_MAX_SERVERS,
    show_default=True,
    help="Max number of nameservers to test",
)
@click.option(
    "--write", "-w", "output_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("./"),
    show_default=True,
    help="Write output files to this directory",
)
@click.option(
    "--timeout", "-t",
    type=click.FloatRange(min=0, min_open=True),
    default=DEFAULT_TIMEOUT_SECONDS,
    show_default=True,
    help="Timeout in seconds (IPv4/hostname probes)",
)
@click.option(
    "--replies", "-r",
    type=click.IntRange(min=1),
    default=DEFAULT_MIN_REPLIES,
    show_default=True,
    help="Min. number of replies (IPv4/hostname probes)",
)
@click.option(
    "--method",
    type=click.Choice(sorted(TRANSPORTS)),
    default=DEFAULT_METHOD,
    show_default=True,
    help="Probe method: ping (ICMP echo) or tcp (connect to port 53)",
)
@click.option(
    "--concurrency", "-p",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum probes in flight (default: all at once)",
)
@click.option(
    "--quiet", "-q",
    is_flag=True,
    help="Suppress progress and the results table",
)
@click.option(
    "--json",
    is_flag=True,
    help="Print ranked results as JSON to stdout",
)
@click.option(
    "--no-files",
    is_flag=True,
    help="Do not write output files",
)
def run(
    country_code: str,
    debug: bool,
    filename: Optional[str],
    max_servers: int,
    output_dir: Path,
    timeout: float,
    replies: int,
    method: str,
    concurrency: Optional[int],
    quiet: bool,
    json: bool,
    no_files: bool,
):
    """
    Rank a country's public nameservers by latency.

    Examples:

    \b
      # Rank US nameservers, write results-us.json/.csv and named.conf.options
      nameserver-sort run

    \b
      # German nameservers, 50 candidates, 3 replies each
      nameserver-sort run -c DE -m 50 -r 3

    \b
      # Probe with TCP connects where ICMP is filtered
      nameserver-sort run --method tcp -w ./out
    """
    setup_logging(debug)

    settings = Settings(
        country_code=country_code,
        max_servers=max_servers,
        timeout_seconds=timeout,
        min_replies=replies,
        output_dir=output_dir,
        filename=filename,
        method=method,
        concurrency=concurrency,
        debug=debug,
    )

    runner = SortRunner(settings)

    progress_ctx, progress_callback = None, None
    if not quiet and not debug:
        progress_ctx, progress_callback = create_progress_callback()

    async def run_sort():
        try:
            return await runner.run(progress_callback=progress_callback)
        finally:
            await runner.close()

    try:
        if progress_ctx:
            with progress_ctx:
                result = asyncio.run(run_sort())
        else:
            result = asyncio.run(run_sort())
    except SourceUnavailable as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_SOURCE_UNAVAILABLE)

    if result.is_empty:
        click.echo(
            f"No usable results: none of {result.candidates_probed} nameservers answered",
            err=True,
        )
        sys.exit(EXIT_NO_RESULTS)

    if json:
        click.echo(json_module.dumps(result.to_records(), indent=2))
    elif not quiet:
        RichConsoleOutput.print(result)

    if not no_files:
        written = write_all(result, settings.output_dir, settings.output_stem)
        if not quiet and not json:
            for path in written:
                click.echo(f"Results saved to {path}")


@main.command()
@click.argument("addresses", nargs=-1, required=True)
def classify(addresses: tuple):
    """Show which probe family each ADDRESS is handled as."""
    classifier = AddressClassifier()
    for address in addresses:
        profile = classifier.classify(address)
        click.echo(f"{address}\t{profile.transport.value}")


@main.command()
def info():
    """Show platform and probing prerequisites."""
    click.echo(f"Platform: {get_platform()}")
    click.echo(f"ping: {find_ping_binary() or 'not found'}")
    click.echo(f"ping (IPv6): {find_ping_binary(ipv6=True) or 'not found'}")


def entry_point():
    """Console script entry, reading options from NAMESERVER_SORT_* variables too."""
    main(auto_envvar_prefix="NAMESERVER_SORT")


if __name__ == "__main__":
    entry_point()
