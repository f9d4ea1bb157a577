"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from modpkg import __version__
from modpkg.api.client import MetaAPIClient, create_session
from modpkg.core.catalog_index import CatalogIndex
from modpkg.core.install_manager import InstallManager
from modpkg.core.resolver import DependencyResolver
from modpkg.exceptions import InstanceNotFoundError, ModPkgError, NotFoundError
from modpkg.instance.detector import GameInstance, detect_instance
from modpkg.models.catalog import CatalogEntry
from modpkg.models.config import AppConfig, get_config_dir
from modpkg.storage.catalog_store import CatalogStore
from modpkg.storage.config_manager import ConfigManager

from .formatters import (
    format_error_with_suggestions,
    print_entry_details,
    print_install_summary,
    print_search_table,
)
from .progress_manager import ProgressManager

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("modpkg")

app = typer.Typer(
    name="modpkg",
    help="Game mod manager at your service.",
    epilog=(
        "Examples: modpkg install ender io • "
        "modpkg install https://minecraft.curseforge.com/projects/journeymap"
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)

CONFIG_FILE = get_config_dir() / "config.ini"


def _load_config() -> AppConfig:
    return ConfigManager(CONFIG_FILE).load_config()


@contextmanager
def _exit_on_error():
    """Turns application errors into a printed message and exit code 1."""
    try:
        yield
    except ModPkgError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e


async def _load_index(config: AppConfig) -> CatalogIndex:
    async with create_session(config) as session:
        async with ProgressManager(console) as progress_manager:
            store = CatalogStore(config, session, progress_manager)
            catalog = await store.load()
    return CatalogIndex(catalog)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Show debug logging.",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
):
    """modpkg - installs mods and their dependencies into your game instance."""
    if version:
        console.print(f"[bold]modpkg[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    logging.getLogger("modpkg").setLevel("DEBUG" if verbose >= 1 else "INFO")

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def refresh():
    """Fetches all mods that are available."""

    async def _refresh_async(config: AppConfig):
        console.print(" 🚛 [bold]Updating local mod database.[/bold]")
        async with create_session(config) as session:
            async with ProgressManager(console) as progress_manager:
                await CatalogStore(config, session, progress_manager).refresh()

    with _exit_on_error():
        asyncio.run(_refresh_async(_load_config()))


@app.command()
def search(
    query: List[str] = typer.Argument(..., help="The mod name to search for."),
):
    """Search for a mod in the local database."""
    with _exit_on_error():
        index = asyncio.run(_load_index(_load_config()))
    console.print(f"Mod db contains {len(index)} packages")
    print_search_table(console, index.search_by_name_substring(" ".join(query)))


@app.command(name="show")
def show_command(
    reference: List[str] = typer.Argument(..., help="The mod name, id or URL."),
):
    """Find a single mod, and display info about it."""
    with _exit_on_error():
        index = asyncio.run(_load_index(_load_config()))
        entry = _find_entry(index, " ".join(reference))
    print_entry_details(console, entry)


def _find_entry(index: CatalogIndex, reference: str) -> CatalogEntry:
    entry = index.resolve_reference(reference)
    if entry is None:
        raise NotFoundError("No mod found.")
    return entry


def _find_manifest_entries(
    index: CatalogIndex, instance: GameInstance
) -> List[CatalogEntry]:
    entries = []
    for dependency in instance.manifest().dependencies():
        entry = index.find_by_slug(dependency.name)
        if entry is None:
            raise NotFoundError(f"Mod '{dependency.name}' not found in local db.")
        console.print(f"    requires {entry.name} from CurseForge")
        entries.append(entry)
    return entries


async def _install_entries(
    config: AppConfig,
    instance: GameInstance,
    game_version: str,
    entries: List[CatalogEntry],
):
    """Resolves, downloads and records the given entries."""
    console.print(" 🔎 [bold][2 / 3] Resolving Dependencies[/bold]")
    start_time = time.monotonic()
    async with create_session(config) as session:
        api_client = MetaAPIClient(config, session)
        resolver = DependencyResolver(api_client, game_version)
        resolved = await resolver.resolve(*(entry.id for entry in entries))
        for file in resolved:
            console.print(f"    requires {file.file_name}")

        console.print(f" 🚚 [bold][3 / 3] Downloading {len(resolved)} mods[/bold]")
        async with ProgressManager(console) as progress_manager:
            manager = InstallManager(config, session, progress_manager)
            outcomes = await manager.install(resolved, instance.mods_dir)

    manifest = instance.manifest(game_version)
    for entry in entries:
        manifest.add_dependency(entry)
    manifest.save()
    print_install_summary(console, outcomes, time.monotonic() - start_time)


@app.command()
def install(
    reference: Optional[List[str]] = typer.Argument(
        None,
        help="The mod name, id or URL. Omit to install everything in minepkg.toml.",
    ),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Install without asking for confirmation."
    ),
    game_version: Optional[str] = typer.Option(
        None,
        "--game-version",
        "-g",
        help="Target this game version instead of the detected one.",
    ),
    directory: Path = typer.Option(
        Path("."),
        "--dir",
        "-d",
        help="The game instance directory.",
        file_okay=False,
    ),
):
    """Installs a new mod with the required dependencies."""
    with _exit_on_error():
        config = _load_config()
        instance = detect_instance(directory)
        target_version = game_version or instance.game_version
        if not target_version:
            raise InstanceNotFoundError(
                "Your instance does not have the game installed (yet)."
            )

        if reference:
            console.print(" 📚 [bold][1 / 3] Searching local mod DB[/bold]")
            index = asyncio.run(_load_index(config))
            entry = _find_entry(index, " ".join(reference).lower())
            entries = [entry]
            question = f"\n    Install [bold]{entry.name}[/bold] from CurseForge?"
        else:
            console.print(" 📔 [bold][1 / 3] Reading local modpack[/bold]")
            index = asyncio.run(_load_index(config))
            entries = _find_manifest_entries(index, instance)
            question = f"\n    Install [bold]{len(entries)}[/bold] packages?"

    if not entries:
        console.print("[yellow]Nothing to install.[/yellow]")
        raise typer.Exit()

    if not yes:
        console.print(question)
        if not typer.confirm("    Continue?", default=True):
            raise typer.Abort()

    with _exit_on_error():
        asyncio.run(_install_entries(config, instance, target_version, entries))
    names = ", ".join(entry.name for entry in entries)
    console.print(f"[green]  ✔ Successfully installed {names}[/green]")
