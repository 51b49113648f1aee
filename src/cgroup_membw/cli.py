"""CLI for cgroup-membw.

Provides a command-line interface using Typer for:
- Processing one collection cycle against a persisted metric store
- Replaying a recorded sequence of snapshots
- Generating a sample configuration
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cgroup_membw.core.config import load_config, load_records
from cgroup_membw.core.schemas import FetcherConfig
from cgroup_membw.monitoring.bandwidth_fetcher import MemBandwidthFetcher
from cgroup_membw.monitoring.base import BandwidthUpdate
from cgroup_membw.storage.in_memory import InMemoryMetricStore
from cgroup_membw.storage.json_file import JsonFileMetricStore
from cgroup_membw.utils.logging import setup_logging

app = typer.Typer(
    name="cgroup-membw",
    help="Container memory bandwidth rates from cgroup hardware counters",
    add_completion=False,
)

console = Console()


def _format_rate(rate: float | None) -> str:
    return f"{rate:.4f}" if rate is not None else "[dim]skipped[/]"


@app.command()
def process(
    input_path: Path = typer.Option(
        ..., "--input", "-i", help="Collector records for one cycle (JSON, YAML or JSONL)"
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to fetcher configuration file (YAML/JSON)"
    ),
    state: Path | None = typer.Option(
        None, "--state", "-s", help="Metric state file (overrides config)"
    ),
    log_level: str | None = typer.Option(None, "--log-level", "-l", help="Logging level"),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file in addition to console"
    ),
    json_logs: bool = typer.Option(
        False, "--json-logs", help="Output logs in JSON format (for programmatic parsing)"
    ),
) -> None:
    """Process one collection cycle and update the persisted metric store."""
    # Command-line options override the config file
    overrides: dict[str, object] = {}
    if state is not None:
        overrides["state_path"] = state
    if log_level is not None:
        overrides["log_level"] = log_level

    try:
        base_config = load_config(config) if config is not None else FetcherConfig()
        fetcher_config = FetcherConfig.model_validate({**base_config.model_dump(), **overrides})
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error loading config: {escape(str(e))}[/]")
        raise typer.Exit(1) from e

    json_logs = json_logs or fetcher_config.json_logs

    setup_logging(
        level=fetcher_config.log_level,
        log_file=log_file,
        json_format=json_logs,
        rich_console=not json_logs,
    )

    store = JsonFileMetricStore(fetcher_config.state_path)
    try:
        records = load_records(input_path)
        store.load()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error: {escape(str(e))}[/]")
        raise typer.Exit(1) from e

    fetcher = MemBandwidthFetcher(store, record_raw_counters=fetcher_config.record_raw_counters)
    report = fetcher.process_cycle(records)
    store.save()

    _show_updates_table(report.updates, title="Memory Bandwidth (MB/s)")
    console.print(
        f"[bold green]{report.rates_written} rates written[/], "
        f"{report.rates_skipped} skipped across {report.containers_processed} containers"
    )


@app.command()
def replay(
    input_path: Path = typer.Option(
        ..., "--input", "-i", help="Chronological collector records (JSON, YAML or JSONL)"
    ),
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Logging level"),
) -> None:
    """Replay recorded snapshots in order and print every rate written."""
    setup_logging(level=log_level)

    try:
        records = load_records(input_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error: {escape(str(e))}[/]")
        raise typer.Exit(1) from e

    fetcher = MemBandwidthFetcher(InMemoryMetricStore())
    written = []
    for record in records:
        update = fetcher.process_container(record.pod_uid, record.container_name, record.cgroup)
        if update.rates_written:
            written.append(update)

    if not written:
        console.print("[bold yellow]No rates written (need two samples per container)[/]")
        return

    _show_updates_table(written, title="Replayed Memory Bandwidth (MB/s)")


@app.command()
def init_config(
    output: Path = typer.Option(
        Path("membw.yaml"), "--output", "-o", help="Output configuration file"
    ),
) -> None:
    """Generate a sample configuration file."""
    sample_config = """\
# cgroup-membw configuration

# JSON file holding raw counters and rate series between runs
state_path: "./membw-state.json"

# Store raw counters each cycle so the next cycle can compute rates.
# Disable when another component already records them in the shared store.
record_raw_counters: true

# Logging
log_level: INFO
json_logs: false
"""
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(sample_config)
    console.print(f"[bold green]Sample configuration written to {output}[/]")


def _show_updates_table(updates: list[BandwidthUpdate], title: str) -> None:
    """Display per-container bandwidth updates."""
    table = Table(title=title)
    table.add_column("Pod", style="cyan")
    table.add_column("Container", style="cyan")
    table.add_column("Read", justify="right", style="green")
    table.add_column("Write", justify="right", style="green")
    table.add_column("Raw Recorded", style="white")

    for u in updates:
        table.add_row(
            escape(u.pod_uid),
            escape(u.container_name),
            _format_rate(u.read_mbps),
            _format_rate(u.write_mbps),
            "yes" if u.raw_counters_recorded else "no",
        )

    console.print(table)


if __name__ == "__main__":
    app()
