"""
Health Check Commands.

Commands for checking backend health and status.
"""

import asyncio

import httpx
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from daybook.cli.client import get_api_client

app = typer.Typer(help="Health check commands")
console = Console()


def _status_color(status: str) -> str:
    if status == "healthy":
        return "green"
    if status == "unhealthy":
        return "red"
    return "yellow"


@app.command()
def status(
    detailed: bool = typer.Option(False, "--detailed", "-d", help="Show detailed status"),
) -> None:
    """
    Check backend health status (requires running server).

    Examples:
        cli.py health status
        cli.py health status -d
    """
    healthy = asyncio.run(_status(detailed))
    if not healthy:
        raise typer.Exit(1)


async def _status(detailed: bool) -> bool:
    """Async implementation of status command. Returns overall health."""
    client = get_api_client()

    try:
        path = "/health/detailed" if detailed else "/health/ready"
        response = await client.get(path)
    except httpx.ConnectError:
        console.print("[red]Error: Cannot connect to backend[/red]")
        console.print("[dim]Is the server running? Start with: cli.py server start[/dim]")
        return False
    except httpx.HTTPError as e:
        console.print(f"[red]Error: {e}[/red]")
        return False
    finally:
        await client.close()

    if response.status_code not in (200, 503):
        console.print(f"[red]Unexpected response: {response.status_code}[/red]")
        return False

    data = response.json()
    # 503 bodies come wrapped by HTTPException
    data = data.get("detail", data)
    _display_health(data, detailed)
    return response.status_code == 200 and data.get("status") == "healthy"


def _display_health(data: dict, detailed: bool) -> None:
    """Display health check results."""
    status = data.get("status", "unknown")
    status_color = _status_color(status)

    if detailed and "checks" in data:
        table = Table(title="Health Status", show_header=True)
        table.add_column("Component", style="cyan")
        table.add_column("Status")
        table.add_column("Details")

        for component, check_data in data.get("checks", {}).items():
            check_status = check_data.get("status", "unknown")
            color = _status_color(check_status)

            details = []
            if "latency_ms" in check_data:
                details.append(f"latency: {check_data['latency_ms']}ms")
            if "error" in check_data:
                details.append(f"error: {check_data['error']}")

            table.add_row(
                component,
                f"[{color}]{check_status}[/{color}]",
                ", ".join(details) if details else "-",
            )

        console.print(table)

        if "application" in data:
            app_info = data["application"]
            console.print(f"\n[dim]Application: {app_info.get('name', 'N/A')} v{app_info.get('version', 'N/A')}[/dim]")
            console.print(f"[dim]Environment: {app_info.get('env', 'N/A')}[/dim]")

    else:
        console.print(Panel(
            f"[{status_color}]{status.upper()}[/{status_color}]",
            title="Backend Status",
        ))


@app.command()
def ping() -> None:
    """
    Simple ping to check if backend is reachable.

    Examples:
        cli.py health ping
    """
    if not asyncio.run(_ping()):
        raise typer.Exit(1)


async def _ping() -> bool:
    """Async implementation of ping command."""
    client = get_api_client()

    try:
        response = await client.get("/health")
    except httpx.ConnectError:
        console.print("[red]✗ Backend is not reachable[/red]")
        return False
    except httpx.HTTPError as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        return False
    finally:
        await client.close()

    if response.status_code == 200:
        console.print("[green]✓ Backend is reachable[/green]")
    else:
        console.print(f"[yellow]Backend responded with status {response.status_code}[/yellow]")
    return True
