"""Rich UI components for championship summaries."""

from datetime import datetime

from rich import box
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TaskID, TextColumn
from rich.table import Table

from ladderkeeper.models import ChampionStats, Competitor, ReignView

# Shared console instance
console = Console()


def create_reigns_table(reigns: list[ReignView]) -> Table:
    """Create a Rich table listing reigns in the order given."""
    table = Table(
        title="[bold cyan]Championship Summary[/bold cyan]",
        box=box.ROUNDED,
        show_lines=False,
        header_style="bold magenta",
        title_justify="left",
    )

    table.add_column("#", style="dim", width=4, justify="center")
    table.add_column("Champion", style="cyan", max_width=30, overflow="ellipsis")
    table.add_column("Days", style="yellow", width=6, justify="right")
    table.add_column("From", style="green", width=12)
    table.add_column("To", style="green", width=18)

    for i, reign in enumerate(reigns, 1):
        name = reign.competitor_name or f"Competitor {reign.competitor_id}"
        if reign.ended_at is None:
            name = f"[bold gold1]👑 {name}[/bold gold1]"
            until = "[bold]Current Champion[/bold]"
        else:
            until = _date(reign.ended_at)

        table.add_row(str(i), name, str(reign.days), _date(reign.started_at), until)

    return table


def create_stats_table(stats: list[ChampionStats]) -> Table:
    """Create a Rich table of per-competitor championship totals."""
    table = Table(
        title="[bold green]Champions by Days Held[/bold green]",
        box=box.ROUNDED,
        show_lines=False,
        header_style="bold magenta",
    )

    table.add_column("Champion", style="cyan", max_width=30, overflow="ellipsis")
    table.add_column("Reigns", style="dim", width=7, justify="right")
    table.add_column("Total Days", style="yellow", width=11, justify="right")
    table.add_column("Longest", style="yellow", width=8, justify="right")
    table.add_column("First Crowned", style="green", width=14)

    for s in stats:
        name = s.competitor_name or f"Competitor {s.competitor_id}"
        if s.current_champion:
            name = f"[bold gold1]👑 {name}[/bold gold1]"
        table.add_row(
            name,
            str(s.total_reigns),
            str(s.total_days),
            str(s.longest_reign_days),
            _date(s.first_crowned),
        )

    return table


def create_leaderboard_table(competitors: list[Competitor], top_n: int = 10) -> Table:
    """Create a Rich table of the highest-rated competitors."""
    table = Table(
        title="[bold cyan]Leaderboard[/bold cyan]",
        box=box.ROUNDED,
        header_style="bold magenta",
        title_justify="left",
    )

    table.add_column("Rank", style="dim", width=5, justify="center")
    table.add_column("Rating", style="yellow", width=9, justify="right")
    table.add_column("W/L/D", style="green", width=10, justify="center")
    table.add_column("Name", style="cyan", max_width=30, overflow="ellipsis")

    ranked = sorted(competitors, key=lambda c: (-c.rating, c.id))
    for i, c in enumerate(ranked[:top_n], 1):
        if i == 1:
            rank_style = "[bold gold1]🥇 1[/bold gold1]"
        elif i == 2:
            rank_style = "[bold silver]🥈 2[/bold silver]"
        elif i == 3:
            rank_style = "[bold orange3]🥉 3[/bold orange3]"
        else:
            rank_style = f"[dim]{i}[/dim]"
        table.add_row(rank_style, f"{c.rating:.2f}", f"{c.wins}/{c.losses}/{c.draws}", c.name)

    if len(ranked) > top_n:
        table.add_row("...", "", "", f"[dim]and {len(ranked) - top_n} more competitors[/dim]")

    return table


def _date(value: datetime) -> str:
    return value.strftime("%Y-%m-%d")


class ReplayProgressHandler:
    """Event handler that drives a Rich progress bar during a replay."""

    def __init__(self, progress: Progress | None = None):
        self.progress = progress or Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=console,
        )
        self.task_id: TaskID | None = None

    def __enter__(self) -> "ReplayProgressHandler":
        self.progress.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.progress.stop()

    def on_progress(self, current: int, total: int, message: str, **kwargs) -> None:
        if self.task_id is None:
            self.task_id = self.progress.add_task(message, total=total)
        self.progress.update(self.task_id, completed=current)

    def on_reign_started(self, *args, **kwargs) -> None:
        pass

    def on_reign_closed(self, *args, **kwargs) -> None:
        pass

    def on_reigns_replaced(self, count: int, at: datetime, **kwargs) -> None:
        console.print(f"[green]✅ Stored {count} championship reigns[/green]")


def print_summary(reigns: list[ReignView], stats: list[ChampionStats]) -> None:
    """Print the reign timeline and the per-champion totals."""
    console.print(create_reigns_table(reigns))
    console.print(create_stats_table(stats))
