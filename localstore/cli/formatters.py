"""
Functions for formatting and displaying storage data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich import box
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from localstore.models.handles import FileHandle, FolderHandle


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Check the values in your configuration file.",
            "• Run `localstore --show-config` to see the effective settings.",
        ],
        "InvalidPathError": [
            "• Paths are relative to the storage root; '.' and '..' are not allowed.",
            "• Names must be valid file names on this system.",
        ],
        "StorageBackendError": [
            "• Check that the data directory exists and is writable.",
            "• A file and a folder cannot share the same name.",
        ],
        "PermissionError": [
            "• The data directory is not accessible by the current user.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def build_listing_table(
    path: str, folders: list[FolderHandle], files: list[FileHandle]
) -> Table:
    """Builds a table of the immediate children of a folder."""
    table = Table(
        title=f"[bold]/{path.strip('/')}[/bold]",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Type", style="dim", width=6)
    table.add_column("Name")

    for folder in folders:
        table.add_row("dir", f"[blue]{folder.name}/[/blue]")
    for file in files:
        table.add_row("file", file.name)

    if not folders and not files:
        table.add_row("", "[dim](empty)[/dim]")
    return table


def build_config_table(config_file: Path, config_data: dict[str, Any]) -> Table:
    """Builds a table of the effective configuration."""
    table = Table(
        title=f"[bold]Configuration[/bold] [dim]({config_file})[/dim]",
        box=box.ROUNDED,
        show_header=False,
    )
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key in sorted(config_data):
        value = config_data[key]
        if isinstance(value, bool):
            rendered = "[green]yes[/green]" if value else "[dim]no[/dim]"
        elif value in ("", None):
            rendered = "[dim](default)[/dim]"
        else:
            rendered = str(value)
        table.add_row(key, rendered)
    return table
