#!/usr/bin/env python3
"""
Rich formatting for Rituals CLI output.

Usage:
    from Rituals.rich_output import category_table, stats_panel

    category_table(view.load("morning"))
    stats_panel(progress.get_stats())
"""

from io import StringIO
from typing import Optional

from rich.box import ROUNDED
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from Rituals.overlay_store import ItemOrigin, ProgressStats, is_completed, is_skipped

# Global console instance
console = Console()

ORIGIN_MARKS = {
    ItemOrigin.DEFAULT: "",
    ItemOrigin.OVERRIDDEN: "[yellow]edited[/yellow]",
    ItemOrigin.CUSTOM: "[cyan]custom[/cyan]",
}


def get_progress_style(percentage: float) -> str:
    if percentage >= 100:
        return "green"
    elif percentage > 33:
        return "yellow"
    return "red"


def _emit(renderable, return_string: bool, width: int = 80) -> Optional[str]:
    if return_string:
        buffer = StringIO()
        temp_console = Console(file=buffer, force_terminal=False, width=width)
        temp_console.print(renderable)
        return buffer.getvalue()
    console.print(renderable)
    return None


def category_table(snapshot, return_string: bool = False) -> Optional[str]:
    """
    Render a category snapshot as a table.

    Args:
        snapshot: CategorySnapshot from CategoryView.load()
        return_string: If True, return as string instead of printing
    """
    remaining = len(snapshot.remaining_ids)
    style = get_progress_style(snapshot.percentage)
    title = (
        f"[bold]{snapshot.category_key}[/bold]  "
        f"[{style}]{len(snapshot.items) - remaining}/{len(snapshot.items)} done[/{style}]"
    )
    if snapshot.rolled_over:
        title += "  [dim](reset for another round)[/dim]"

    table = Table(title=title, box=ROUNDED, show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right", style="dim", no_wrap=True)
    table.add_column("Text")
    table.add_column("Progress", justify="right", no_wrap=True)
    table.add_column("", justify="center", no_wrap=True)

    favorites = set(snapshot.favorites)
    for item in snapshot.items:
        count = snapshot.counts.get(item.id, 0)
        target = snapshot.targets[item.id]
        if is_skipped(count):
            progress = "[dim]skipped[/dim]"
        elif is_completed(count, target):
            progress = f"[green]{count}/{target}[/green]"
        else:
            progress = f"{count}/{target}"

        marks = [m for m in (ORIGIN_MARKS[item.origin],
                             "[magenta]*[/magenta]" if item.id in favorites else "") if m]
        table.add_row(str(item.id), item.text, progress, " ".join(marks))

    return _emit(table, return_string)


def stats_panel(stats: ProgressStats, return_string: bool = False) -> Optional[str]:
    """Render history statistics as a panel."""
    lines = [
        f"[cyan]Today:[/cyan] {stats.today_count}",
        f"[cyan]Last 7 days:[/cyan] {stats.weekly_count}",
        f"[cyan]All time:[/cyan] {stats.total_completed}",
        f"[cyan]Current streak:[/cyan] {stats.current_streak} days",
        f"[cyan]Best streak:[/cyan] {stats.best_streak} days",
        f"[cyan]Skipped today:[/cyan] {stats.skipped_today}",
    ]
    panel = Panel("\n".join(lines), title="[bold]Statistics[/bold]", box=ROUNDED, expand=False)
    return _emit(panel, return_string)
