#!/usr/bin/env python3
"""
Application Entry Script.

Main entry point for the Daybook backend. All functionality is accessible
through command-line options.

Usage:
    python run.py --help
    python run.py --action server --verbose
    python run.py --action health --debug
    python run.py --action config
"""

import subprocess
import sys
from pathlib import Path

import click

# Ensure project root is in path for absolute imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from daybook.backend.core.logging import get_logger, setup_logging


def validate_project_root() -> Path:
    """Validate that we're running from the project root."""
    if not (PROJECT_ROOT / ".project_root").exists():
        click.echo(
            click.style("Error: .project_root not found. Run from project root.", fg="red"),
            err=True,
        )
        sys.exit(1)
    return PROJECT_ROOT


@click.command()
@click.option(
    "--action",
    type=click.Choice(["server", "health", "config", "info"]),
    default="info",
    help="Action to perform.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output (INFO level logging).",
)
@click.option(
    "--debug", "-d",
    is_flag=True,
    help="Enable debug output (DEBUG level logging).",
)
@click.option(
    "--host",
    default=None,
    help="Server host (for server action).",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Server port (for server action).",
)
@click.option(
    "--reload",
    is_flag=True,
    help="Enable auto-reload (for server action).",
)
def main(
    action: str,
    verbose: bool,
    debug: bool,
    host: str | None,
    port: int | None,
    reload: bool,
) -> None:
    """
    Daybook Entry Point.

    Run the application server, check health, or view configuration.

    Examples:

        # Start development server
        python run.py --action server --reload --verbose

        # Check application health
        python run.py --action health --debug

        # View loaded configuration
        python run.py --action config
    """
    # Validate project root
    validate_project_root()

    # Configure logging based on verbosity
    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    setup_logging(level=log_level, format_type="console")
    logger = get_logger(__name__)

    logger.debug("Starting application", extra={"action": action, "log_level": log_level})

    # Dispatch to action handlers
    if action == "server":
        run_server(logger, host, port, reload)
    elif action == "health":
        check_health(logger)
    elif action == "config":
        show_config(logger)
    elif action == "info":
        show_info(logger)


def run_server(logger, host: str | None, port: int | None, reload: bool) -> None:
    """Start the FastAPI development server."""
    from daybook.backend.core.config import get_app_config
    from daybook.cli.commands.server import build_server_command

    try:
        server = get_app_config().application.server
        server_host = host or server.host
        server_port = port or server.port
    except Exception as e:
        logger.warning(
            "Could not load settings, using defaults",
            extra={"error": str(e)},
        )
        server_host = host or "127.0.0.1"
        server_port = port or 8000

    logger.info(
        "Starting server",
        extra={"host": server_host, "port": server_port, "reload": reload},
    )

    cmd = build_server_command(server_host, server_port, reload)

    click.echo(f"Starting server at http://{server_host}:{server_port}")
    click.echo("Press Ctrl+C to stop\n")

    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except subprocess.CalledProcessError as e:
        logger.error("Server failed to start", extra={"exit_code": e.returncode})
        sys.exit(e.returncode)


def _check_core_imports() -> str | None:
    from daybook.backend.core.config import get_app_config, get_settings  # noqa: F401
    from daybook.backend.core.exceptions import ApplicationError  # noqa: F401
    return None


def _check_configuration() -> str:
    from daybook.backend.core.config import get_app_config

    app = get_app_config().application
    return f"App: {app.name}, {len(app.identities)} identities"


def _check_secrets() -> None:
    from daybook.backend.core.config import get_settings

    get_settings()


def _check_database_url() -> str:
    from daybook.backend.core.config import get_database_url

    # Only the driver; the URL may carry a password
    return f"Driver: {get_database_url().split('://', 1)[0]}"


def _check_app() -> str:
    from daybook.backend.main import get_app

    fastapi_app = get_app()
    return f"Title: {fastapi_app.title}, {len(fastapi_app.routes)} routes"


def _check_models() -> str:
    from daybook.backend.models.note import Note

    return f"Table: {Note.__tablename__}"


def _check_migrations() -> str:
    versions = PROJECT_ROOT / "daybook" / "backend" / "migrations" / "versions"
    revisions = sorted(p.stem for p in versions.glob("[0-9]*.py"))
    if not revisions:
        raise FileNotFoundError(f"No revisions in {versions}")
    return f"Head: {revisions[-1]}"


HEALTH_CHECKS = [
    ("Core imports", _check_core_imports),
    ("YAML configuration", _check_configuration),
    ("Secrets (.env)", _check_secrets),
    ("Database URL", _check_database_url),
    ("FastAPI application", _check_app),
    ("Database models", _check_models),
    ("Migrations", _check_migrations),
]


def check_health(logger) -> None:
    """Check that the backend imports, configures and finds its migrations."""
    click.echo("Checking application health...\n")

    # Each check returns an optional detail string or raises
    results = []
    for name, check in HEALTH_CHECKS:
        try:
            results.append((name, True, check()))
            logger.debug("Health check passed", extra={"check": name})
        except Exception as e:
            results.append((name, False, str(e)))
            logger.error("Health check failed", extra={"check": name, "error": str(e)})

    # Display results
    click.echo("Health Check Results:")
    click.echo("-" * 50)
    for name, passed, detail in results:
        status = click.style("✓ PASS", fg="green") if passed else click.style("✗ FAIL", fg="red")
        detail_str = f" ({detail})" if detail else ""
        click.echo(f"  {status}  {name}{detail_str}")
    click.echo("-" * 50)

    if all(passed for _, passed, _ in results):
        click.echo(click.style("\nAll checks passed!", fg="green"))
    else:
        click.echo(click.style("\nSome checks failed. See details above.", fg="yellow"))
        sys.exit(1)


def _echo_values(values: dict, indent: int = 2) -> None:
    pad = " " * indent
    for key, value in values.items():
        if isinstance(value, dict):
            click.echo(f"{pad}{key}:")
            _echo_values(value, indent + 2)
        else:
            click.echo(f"{pad}{key}: {value}")


def show_config(logger) -> None:
    """Display the loaded YAML configuration, one block per settings file."""
    from daybook.backend.core.config import get_app_config

    try:
        app_config = get_app_config()
    except Exception as e:
        logger.error("Failed to load configuration", extra={"error": str(e)})
        click.echo(click.style(f"Error loading configuration: {e}", fg="red"))
        sys.exit(1)

    sections = {
        "Application Settings": app_config.application,
        "Database Settings": app_config.database,
        "Logging Settings": app_config.logging,
        "Feature Flags": app_config.features,
    }
    for title, schema in sections.items():
        click.echo(f"\n{title}:")
        click.echo("-" * 40)
        _echo_values(schema.model_dump())


def show_info(logger) -> None:
    """Display what this deployment serves and how to reach it."""
    click.echo("Daybook")
    click.echo("=" * 40)

    try:
        from daybook.backend.core.config import get_app_config, get_server_base_url

        app = get_app_config().application
        base_url, _ = get_server_base_url()
        click.echo(f"Name: {app.name} {app.version}")
        click.echo(f"API: {base_url}{app.api_prefix}/notes")
        click.echo(f"Identities: {', '.join(app.identities) or '(any author)'}")
    except Exception as e:
        # Info still works on a fresh checkout without settings
        logger.debug("Configuration unavailable", extra={"error": str(e)})
        click.echo("Configuration not available (config/settings/application.yaml)")

    click.echo()
    click.echo("Available Actions:")
    click.echo("  --action server   Start the development server")
    click.echo("  --action health   Check application health")
    click.echo("  --action config   Display configuration")
    click.echo("  --action info     Show this information")
    click.echo()
    click.echo("Note commands live in the Typer CLI:")
    click.echo("  python cli.py notes list --date 2024-01-01")
    click.echo("  python cli.py notes watch --trash")


if __name__ == "__main__":
    main()
