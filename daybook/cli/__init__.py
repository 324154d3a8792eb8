"""
CLI Client Module.

Command-line client built with Typer for communicating with the
backend API.

Architecture:
- CLI is a thin presentation layer
- All business logic lives in the backend
- CLI calls backend via HTTP (httpx)
- NoteStore keeps an optimistic local copy of a note listing
- Sends X-Frontend-ID: cli header for log routing

Usage:
    python cli.py --help
    python cli.py notes list
    python cli.py notes add "Went for a run" --date 2024-01-01 --tag sport
    python cli.py health status
"""
