"""Console rendering and progress helpers for the workshop-up CLI."""
from __future__ import annotations

import time
from typing import Any, Dict, Optional, Sequence, Tuple

from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from .models import PackageHandle, PackageRecord, PublishOutcome, UpdateProgress
from .services.status import StatusMessage

console = Console()


def _echo(message: str) -> None:
    console.print(message)


def render_configuration_summary(config: Dict[str, Any]) -> None:
    """Render startup configuration summary."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        rendered = "-" if value is None else str(value)
        table.add_row(key, rendered)

    panel = Panel(
        table,
        title="[bold green]workshop-up[/bold green]",
        subtitle="[dim]workshop uploader CLI[/dim]",
        border_style="blue",
    )
    console.print(panel)


def render_package_table(
    rows: Sequence[Tuple[PackageHandle, Optional[PackageRecord], Optional[str]]],
) -> None:
    """Render one row per package; unreadable packages show their error."""
    if not rows:
        _echo("[dim]No packages found.[/dim]")
        return

    table = Table(title="Workshop packages")
    table.add_column("Name", style="bold cyan")
    table.add_column("Item ID")
    table.add_column("Title")
    table.add_column("Visibility")
    table.add_column("Preview")
    table.add_column("Tags")

    for handle, record, error in rows:
        if record is None:
            table.add_row(handle.name, "[red]unreadable[/red]", f"[dim]{error}[/dim]", "", "", "")
            continue
        table.add_row(
            handle.name,
            str(record.identity) if record.identity is not None else "[dim]-[/dim]",
            record.title,
            record.visibility.name.lower(),
            record.preview_file or "[dim]-[/dim]",
            ", ".join(record.tags) or "[dim]-[/dim]",
        )
    console.print(table)


def render_outcome(outcome: Optional[PublishOutcome]) -> None:
    if outcome is None:
        _echo("[yellow]No result was delivered.[/yellow]")
        return
    color = "green" if outcome.success else "red"
    _echo(f"[{color}]{outcome.message}[/{color}]")
    if outcome.url:
        _echo(f"  [link={outcome.url}]{outcome.url}[/link]")


class SubmitProgressDisplay:
    """Live progress bar for one package upload, fed by orchestrator ticks."""

    def __init__(self, package_name: str):
        self.package_name = package_name
        self._started = False
        self._live: Optional[Live] = None
        self._task_id: Optional[TaskID] = None
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold cyan]{task.fields[name]}", justify="left"),
            TextColumn("[dim]{task.fields[phase]}", justify="left"),
            BarColumn(bar_width=42),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            DownloadColumn(),
            TimeRemainingColumn(),
            expand=False,
            console=console,
        )

    def start(self) -> None:
        if self._started:
            return
        self._live = Live(
            self._progress,
            console=console,
            refresh_per_second=8,
            vertical_overflow="visible",
        )
        self._live.start()
        self._task_id = self._progress.add_task(
            "submit",
            name=self.package_name[:40],
            phase="waiting...",
            total=None,
        )
        self._started = True

    def update(self, progress: UpdateProgress) -> None:
        if not self._started:
            self.start()
        if not progress.active or self._task_id is None:
            return
        total = progress.bytes_total if progress.bytes_total > 0 else None
        self._progress.update(
            self._task_id,
            completed=progress.bytes_done,
            total=total,
            phase=progress.label or "",
        )

    def on_status(self, message: StatusMessage) -> None:
        """Status listener: print each shown status line above the bar."""
        stamp = time.strftime("%H:%M:%S")
        console.print(f"[dim]{stamp}[/dim] {message.text}")

    def stop(self) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None

    def complete(self, outcome: Optional[PublishOutcome]) -> None:
        self.stop()
        render_outcome(outcome)
