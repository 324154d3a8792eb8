"""
Server Commands.

Commands for starting the application server.
"""

import subprocess
import sys

import typer
from rich.console import Console

app = typer.Typer(help="Server management commands")
console = Console()


def _get_server_config():
    """Load server settings with error handling."""
    try:
        from daybook.backend.core.config import get_app_config
        return get_app_config().application.server
    except Exception as e:
        console.print("[red]Error: Could not load configuration.[/red]")
        console.print("[dim]Ensure config/settings/application.yaml exists and is valid.[/dim]")
        console.print(f"[dim]Error: {e}[/dim]")
        raise typer.Exit(1)


def build_server_command(host: str, port: int, reload: bool = False) -> list[str]:
    """uvicorn command line for the backend app."""
    cmd = [
        sys.executable, "-m", "uvicorn",
        "daybook.backend.main:app",
        "--host", host,
        "--port", str(port),
    ]
    if reload:
        cmd.append("--reload")
    return cmd


@app.command()
def start(
    host: str = typer.Option(None, "--host", "-h", help="Server host"),
    port: int = typer.Option(None, "--port", "-p", help="Server port"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload"),
) -> None:
    """
    Start the FastAPI development server.

    Examples:
        cli.py server start
        cli.py server start --reload
        cli.py server start --host 0.0.0.0 --port 8080
    """
    server = _get_server_config()

    server_host = host or server.host
    server_port = port or server.port
    cmd = build_server_command(server_host, server_port, reload)

    console.print(f"[bold]Starting server at http://{server_host}:{server_port}[/bold]")
    if reload:
        console.print("[dim]Auto-reload enabled[/dim]")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        console.print("\n[dim]Server stopped[/dim]")
    except subprocess.CalledProcessError as e:
        console.print(f"[red]Server failed to start (exit code: {e.returncode})[/red]")
        raise typer.Exit(e.returncode)
