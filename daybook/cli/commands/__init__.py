"""
CLI Commands.

Organized by domain/feature area.
"""

from daybook.cli.commands.db import app as db_app
from daybook.cli.commands.health import app as health_app
from daybook.cli.commands.notes import app as notes_app
from daybook.cli.commands.server import app as server_app

__all__ = [
    "db_app",
    "health_app",
    "notes_app",
    "server_app",
]
