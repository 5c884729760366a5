"""
Defines the command-line interface for the storage library using Typer.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from localstore import __version__
from localstore.core.service import LocalStorageService
from localstore.models.config import StorageConfig
from localstore.storage.config_manager import ConfigManager
from localstore.storage.settings import AppSettings
from localstore.utils.path import get_config_dir, split_logical_path
from localstore.utils.structured_logger import create_structured_logger

from .formatters import build_config_table, build_listing_table

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
log = logging.getLogger("localstore")

app = typer.Typer(
    name="localstore",
    help=(
        "Inspect and edit an application-local storage root. Use 'localstore"
        " <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)
settings_app = typer.Typer(help="Read and write application settings.")
app.add_typer(settings_app, name="settings")

CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the effective configuration."
    ),
    backend: str | None = typer.Option(
        None,
        "--backend",
        "-b",
        help="Storage area: local, roaming, temporary or memory.",
    ),
    data_dir: str | None = typer.Option(
        None, "--data-dir", help="Override the application data directory."
    ),
    config_file: Path = typer.Option(  # noqa: B008
        CONFIG_FILE, "--config", help="Path to the INI configuration file."
    ),
):
    """localstore command-line interface"""
    if version:
        console.print(f"[bold]localstore[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("localstore").setLevel(log_level)

    config = ConfigManager(config_file).load_config(
        {"backend": backend, "data_dir": data_dir}
    )
    ctx.obj = config

    if show_config:
        console.print(build_config_table(config_file, config.model_dump()))
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def _build_service(ctx: typer.Context) -> LocalStorageService:
    config: StorageConfig = ctx.obj
    base, events = create_structured_logger(
        log_dir=CONFIG_DIR / "logs" if config.log_json else None,
        enable_json=config.log_json,
    )
    ctx.call_on_close(base.close)
    return LocalStorageService.from_config(config, events=events)


@app.command(name="ls")
def list_command(
    ctx: typer.Context,
    path: str = typer.Argument("", help="Folder to list, relative to the root."),
):
    """List the files and folders directly inside a folder."""
    service = _build_service(ctx)

    async def _list_async():
        folders = await service.list_folders(path)
        files = await service.list_files(path)
        return folders, files

    folders, files = asyncio.run(_list_async())
    if folders is None or files is None:
        console.print(f"[red]✗ Folder '{path}' not found.[/red]")
        raise typer.Exit(code=1)
    console.print(build_listing_table(path, folders, files))


@app.command(name="cat")
def cat_command(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File to print."),
):
    """Print the text contents of a file."""
    service = _build_service(ctx)
    text = asyncio.run(service.read_text(path))
    if text is None:
        console.print(f"[red]✗ File '{path}' not found.[/red]")
        raise typer.Exit(code=1)
    typer.echo(text, nl=False)


async def _ensure_parents(service: LocalStorageService, path: str) -> None:
    """Creates the folders leading up to a file path, one level at a time."""
    segments = split_logical_path(path)[:-1]
    for depth in range(1, len(segments) + 1):
        await service.create_or_get_folder("/".join(segments[:depth]))


@app.command(name="put")
def put_command(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File to write."),
    text: str | None = typer.Argument(None, help="Text to store."),
    source: Path | None = typer.Option(  # noqa: B008
        None,
        "--from",
        "-f",
        exists=True,
        dir_okay=False,
        help="Copy the bytes of a local file instead of TEXT.",
    ),
    parents: bool = typer.Option(
        False, "--parents", "-p", help="Create missing parent folders first."
    ),
):
    """Write text, a local file, or stdin into a file."""
    service = _build_service(ctx)
    stdin_text = sys.stdin.read() if source is None and text is None else None

    async def _put_async() -> bool:
        if parents:
            await _ensure_parents(service, path)
        if source is not None:
            return await service.write_bytes(path, open(source, "rb"))  # noqa: SIM115
        if text is not None:
            return await service.write_text(path, text)
        return await service.write_text(path, stdin_text)

    if not asyncio.run(_put_async()):
        console.print(
            f"[red]✗ The folder for '{path}' does not exist.[/red] "
            "Use [cyan]--parents[/cyan] to create it."
        )
        raise typer.Exit(code=1)
    console.print(f"[green]✓ Wrote '{path}'.[/green]")


@app.command(name="rm")
def remove_command(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File to delete."),
):
    """Delete a file. Deleting a missing file succeeds."""
    service = _build_service(ctx)
    asyncio.run(service.delete_file(path))
    console.print(f"[green]✓ Removed '{path}'.[/green]")


@app.command(name="mkdir")
def mkdir_command(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Folder to create."),
    replace: bool = typer.Option(
        False, "--replace", help="Replace an existing folder with an empty one."
    ),
):
    """Create a folder, or open it if it already exists."""
    service = _build_service(ctx)
    create = service.create_or_replace_folder if replace else service.create_or_get_folder
    folder = asyncio.run(create(path))
    if folder is None:
        console.print(f"[red]✗ Could not create folder '{path}'.[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]✓ Folder '{folder}' ready.[/green]")


@app.command(name="rmdir")
def rmdir_command(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Folder to delete recursively."),
):
    """Delete a folder and everything inside it."""
    service = _build_service(ctx)
    asyncio.run(service.delete_folder(path))
    console.print(f"[green]✓ Removed '{path}'.[/green]")


def _parse_setting_value(raw: str):
    """Interprets JSON literals (true, 3, "x") and falls back to the raw string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


@settings_app.command(name="get")
def settings_get_command(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Setting to show; all if omitted."),
):
    """Show one setting, or all of them."""
    settings = AppSettings(_build_service(ctx))
    asyncio.run(settings.load())

    names = [name] if name else settings.names()
    for key in names:
        value = settings.get_raw(key)
        if value is None:
            console.print(f"[yellow]{key}[/yellow] [dim](not set)[/dim]")
        else:
            console.print(f"[cyan]{key}[/cyan] = {json.dumps(value)}")


@settings_app.command(name="set")
def settings_set_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Setting name."),
    value: str = typer.Argument(..., help="New value (JSON literal or text)."),
):
    """Store a setting value."""
    settings = AppSettings(_build_service(ctx))

    async def _set_async() -> bool:
        await settings.load()
        settings.set_raw(name, _parse_setting_value(value))
        return await settings.save()

    if not asyncio.run(_set_async()):
        console.print("[red]✗ Failed to save settings.[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]✓ {name} saved.[/green]")
