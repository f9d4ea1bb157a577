"""
Functions for formatting and displaying data in the console using Rich.
"""

from typing import Iterable, Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from modpkg.core.install_manager import InstallOutcome
from modpkg.models.catalog import CatalogEntry, RequirementKind
from modpkg.utils.formatting import format_size, shorten_name, simplify_number


def format_error_with_suggestions(error: Exception) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "NotFoundError": [
            "• Try `modpkg search <name>` to find the exact mod.",
            "• Run `modpkg refresh` if the mod was published recently.",
        ],
        "UnsupportedVersionError": [
            "• Pick a different game version with --game-version.",
            "• Check `modpkg show <mod>` for the versions it supports.",
        ],
        "CacheCorruptError": [
            "• Run `modpkg refresh` to download the mod database again.",
        ],
        "NetworkError": [
            "• A network connection issue occurred.",
            "• The mod database or metadata API might be temporarily unavailable.",
            "• Please try again in a few minutes.",
        ],
        "InstanceNotFoundError": [
            "• Run modpkg from your instance directory.",
            "• Launch the game once so its version directory exists.",
        ],
        "ConfigurationError": [
            "• Check the values in your config.ini.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -v for detailed logs."]
    )

    error_text = Text()
    error_text.append("💣 error: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row(Text("\n".join(suggestions), style="yellow"))

    return Panel(content, border_style="red", expand=False)


def print_search_table(console: Console, entries: Sequence[CatalogEntry]):
    """Prints one row per entry: shortened name, simplified downloads, id."""
    table = Table(box=box.SIMPLE, show_edge=False)
    table.add_column("Name", style="bold")
    table.add_column("Downloads", justify="right", style="green")
    table.add_column("Id", justify="right", style="cyan")
    for entry in entries:
        table.add_row(
            shorten_name(entry.name),
            simplify_number(entry.download_count),
            str(entry.id),
        )
    console.print(table)


def print_entry_details(console: Console, entry: CatalogEntry):
    """Prints some info about a mod."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Id:", str(entry.id))
    table.add_row("Downloads:", f"{entry.download_count:,}")
    table.add_row("URL:", f"[dim]{entry.web_site_url}[/dim]")
    releases = " · ".join(
        f"{r.game_version} ({r.release_type.value})" for r in entry.releases
    )
    table.add_row("Latest Releases:", releases or "[dim]none[/dim]")

    if entry.latest_files:
        latest = entry.latest_files[0]
        table.add_row("Latest File:", latest.file_name)
        table.add_row("Game Versions:", ", ".join(latest.game_versions))
        for kind in RequirementKind:
            ids = [str(d.entry_id) for d in latest.dependencies if d.kind is kind]
            table.add_row(
                f"{kind.value}:", f"{len(ids)} [dim]{', '.join(ids)}[/dim]"
            )

    console.print(
        Panel(table, title=f"[bold]{entry.name}[/bold]", border_style="cyan")
    )


def print_install_summary(
    console: Console, outcomes: Iterable[InstallOutcome], duration: float
):
    """Displays the written files and totals for an install run."""
    outcomes = list(outcomes)
    total_bytes = sum(o.bytes_written for o in outcomes)
    table = Table(box=box.SIMPLE, show_edge=False)
    table.add_column("File")
    table.add_column("Size", justify="right", style="green")
    for outcome in outcomes:
        table.add_row(outcome.path.name, format_size(outcome.bytes_written))
    console.print(table)
    console.print(
        f"[dim]{len(outcomes)} files, {format_size(total_bytes)} "
        f"in {duration:.1f}s[/dim]"
    )
