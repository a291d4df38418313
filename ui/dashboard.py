"""
Rich-based terminal output for speed-test results.

All formatting helpers live in ``speedcore.stats`` -- this module only does
presentation via the ``rich`` library.
"""
from __future__ import annotations

from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from speedcore.latency import LatencyResult
from speedcore.sampler import ThroughputResult
from speedcore.servers import Server
from speedcore.stats import format_bytes, format_latency, format_speed

console = Console()


# ---------------------------------------------------------------------------
# Print helpers
# ---------------------------------------------------------------------------

def print_header(version: str) -> None:
    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]taierspeed[/bold cyan] [dim]v{version}[/dim]\n"
            "[dim]Throughput and latency against speed-test backends[/dim]",
            border_style="cyan",
        )
    )
    console.print()


def print_server(server: Server, isp_label: str = "") -> None:
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column(style="dim")
    table.add_column(style="bold")
    table.add_row("Server:", f"{server.name} [dim](id {server.id})[/dim]")
    table.add_row("Host:", f"{server.host}:{server.port}")
    table.add_row("Dialect:", server.type.name.lower())
    if server.city or server.province:
        table.add_row("Location:", " ".join(p for p in (server.province, server.city) if p))
    if isp_label:
        table.add_row("ISP:", isp_label)
    console.print(Panel(table, title="[bold]Selected Server[/bold]", border_style="blue"))


def print_latency(result: LatencyResult) -> None:
    console.print(
        f"[bold]Ping:[/bold]\t\t[yellow]{format_latency(result.ping_ms)}[/yellow]"
        f"  [dim]Jitter: {result.jitter_ms:.2f} ms ({result.method})[/dim]"
    )


def print_speed_result(result: ThroughputResult, use_bytes: bool, mebi: bool) -> None:
    """One line per direction, the way the progress spinner leaves it."""
    label = f"{result.direction.capitalize()}:"
    used = format_bytes(result.bytes_total, mebi)
    if use_bytes:
        seconds = result.duration_ms / 1000
        rate = result.bytes_total / seconds if seconds > 0 else 0.0
        speed = f"{format_bytes(rate, mebi)}/s"
    else:
        speed = format_speed(result.speed_mbps, mebi)
    console.print(f"[bold]{label}[/bold]\t[green]{speed}[/green] [dim](data used: {used})[/dim]")


def print_final_results(
    server: Server,
    latency: LatencyResult,
    download: Optional[ThroughputResult],
    upload: Optional[ThroughputResult],
    mebi: bool = False,
) -> None:
    table = Table(title="Results", box=box.ROUNDED)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Server", f"{server.name} ({server.host})")
    table.add_row("Ping", format_latency(latency.ping_ms))
    table.add_row("Jitter", f"{latency.jitter_ms:.2f} ms")
    if download is not None:
        table.add_row("Download", f"[green]{format_speed(download.speed_mbps, mebi)}[/green]")
    if upload is not None:
        table.add_row("Upload", f"[blue]{format_speed(upload.speed_mbps, mebi)}[/blue]")
    console.print()
    console.print(table)


# ---------------------------------------------------------------------------
# Progress display
# ---------------------------------------------------------------------------

class ProgressDisplay:
    """Manages a ``rich`` progress bar during download / upload tests."""

    def __init__(self) -> None:
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold]{task.description}"),
            BarColumn(bar_width=40),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TextColumn("[bold cyan]{task.fields[speed]}[/bold cyan]"),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        )
        self._task_id = None

    def start(self, description: str) -> None:
        self.progress.start()
        self._task_id = self.progress.add_task(description, total=100, speed="...")

    def update(self, progress: float, speed: str) -> None:
        if self._task_id is None:
            return
        self.progress.update(self._task_id, completed=progress * 100, speed=speed)

    def stop(self) -> None:
        self.progress.stop()
        self._task_id = None
