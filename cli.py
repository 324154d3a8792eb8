#!/usr/bin/env python3
"""
Daybook CLI.

Command-line client for the backend API.
Built with Typer for type-safe commands and Rich for formatted output.

Usage:
    python cli.py --help                              # Show help

    # Notes
    python cli.py notes list --date 2024-01-01        # One day
    python cli.py notes list --from 2024-01-01        # Timeline from a day on
    python cli.py notes add "<p>Run</p>" --tag sport  # Create
    python cli.py notes pin 12                        # Toggle pin
    python cli.py notes delete 12                     # Move to trash
    python cli.py notes list --trash                  # Show trash
    python cli.py notes watch --date 2024-01-01       # Live listing

    # Server management
    python cli.py server start --reload

    # Database migrations
    python cli.py db upgrade
    python cli.py db current

    # Health checks
    python cli.py health status
    python cli.py health ping

Options:
    --verbose, -v     Enable verbose output
    --debug, -d       Enable debug mode (detailed logging)
    --help            Show help message
"""

import sys
from pathlib import Path

import typer
from rich.console import Console

# Add project root to path for absolute imports
project_root = Path(__file__).resolve().parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from daybook.cli.commands import db_app, health_app, notes_app, server_app

console = Console()


def _validate_project_root() -> None:
    """Validate that we're running from the project root."""
    if not (project_root / ".project_root").exists():
        console.print("[red]Error: .project_root not found. Run from project root.[/red]")
        raise typer.Exit(1)


app = typer.Typer(
    name="cli",
    help="Daybook CLI - notes, server management, database and health checks.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(notes_app, name="notes")
app.add_typer(server_app, name="server")
app.add_typer(db_app, name="db")
app.add_typer(health_app, name="health")


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output (INFO level logging)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode (DEBUG level logging)",
    ),
) -> None:
    """
    Daybook CLI.

    Browse and edit dated notes, run the server, migrate the database.
    """
    _validate_project_root()

    if debug:
        from daybook.backend.core.logging import setup_logging
        setup_logging(level="DEBUG", format_type="console")
        console.print("[dim]Debug mode enabled[/dim]")
    elif verbose:
        from daybook.backend.core.logging import setup_logging
        setup_logging(level="INFO", format_type="console")


if __name__ == "__main__":
    app()
