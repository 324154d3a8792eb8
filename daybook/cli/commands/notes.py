"""
Note Commands.

Browse and edit notes through the backend API. Mutations go through
NoteStore, so each one is followed by a fresh fetch of the listing.
"""

import asyncio
import datetime as dt
import re
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
import typer
from rich.console import Console
from rich.live import Live
from rich.table import Table

from daybook.backend.core.exceptions import ConflictError
from daybook.backend.repositories.note_query import NoteListQuery, SortBy
from daybook.cli.client import APIError, close_api_client, get_api_client, unwrap
from daybook.cli.store import NoteStore

app = typer.Typer(help="Note commands")
console = Console()

PREVIEW_LENGTH = 60
_TAG_RE = re.compile(r"<[^>]+>")


def preview(content: str, length: int = PREVIEW_LENGTH) -> str:
    """Plain-text, single-line preview of rich-text content."""
    text = " ".join(_TAG_RE.sub(" ", content or "").split())
    if len(text) > length:
        return text[: length - 1] + "…"
    return text


def notes_table(notes: list[dict[str, Any]], title: str = "Notes") -> Table:
    table = Table(title=title, show_header=True)
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Date")
    table.add_column("")
    table.add_column("Tags", style="magenta")
    table.add_column("Author", style="dim")
    table.add_column("Content")

    for note in notes:
        flags = ""
        if note.get("is_pinned"):
            flags += "📌"
        if note.get("is_archived"):
            flags += "🗄"
        table.add_row(
            str(note.get("id")),
            note.get("date", ""),
            flags,
            ", ".join(note.get("tags") or []),
            note.get("author") or "-",
            preview(note.get("content", "")),
        )
    return table


def _make_store(query: NoteListQuery | None = None, **kwargs: Any) -> NoteStore:
    return NoteStore.from_config(get_api_client(), query, **kwargs)


def _run(action: Callable[[], Awaitable[None]]) -> None:
    """Run an async command body, turning API failures into exit code 1."""

    async def runner() -> None:
        try:
            await action()
        finally:
            await close_api_client()

    try:
        asyncio.run(runner())
    except APIError as e:
        console.print(f"[red]Error ({e.status_code}): {e.message}[/red]")
        raise typer.Exit(1)
    except ConflictError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)
    except httpx.ConnectError:
        console.print("[red]Error: Cannot connect to backend[/red]")
        console.print("[dim]Is the server running? Start with: cli.py server start[/dim]")
        raise typer.Exit(1)
    except httpx.HTTPError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def _parse_date(value: str | None, option: str) -> dt.date | None:
    if value is None:
        return None
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"expected YYYY-MM-DD, got {value!r}", param_hint=option)


def _build_query(
    date: str | None,
    search: str | None,
    tag: str | None,
    archived: bool,
    trash: bool,
    sort: SortBy,
    start: str | None,
    end: str | None,
    ignore_pinned: bool,
) -> NoteListQuery:
    return NoteListQuery(
        search=search,
        tag=tag,
        show_archived=archived,
        show_deleted=trash,
        sort_by=sort,
        date=_parse_date(date, "--date"),
        start_date=_parse_date(start, "--from"),
        end_date=_parse_date(end, "--to"),
        ignore_pinned=ignore_pinned,
    )


def _listing_title(query: NoteListQuery) -> str:
    if query.show_deleted:
        return "Trash"
    if query.date is not None:
        return f"Notes for {query.date.isoformat()}"
    if query.start_date or query.end_date:
        start = query.start_date.isoformat() if query.start_date else "…"
        end = query.end_date.isoformat() if query.end_date else "…"
        return f"Notes {start} → {end}"
    return "Notes"


@app.command("list")
def list_notes(
    date: str = typer.Option(None, "--date", help="Exact day (YYYY-MM-DD)"),
    search: str = typer.Option(None, "--search", "-s", help="Content substring"),
    tag: str = typer.Option(None, "--tag", "-t", help="Only notes with this tag"),
    archived: bool = typer.Option(False, "--archived", "-a", help="Include archived notes"),
    trash: bool = typer.Option(False, "--trash", help="Show the trash"),
    sort: SortBy = typer.Option(SortBy.DATE, "--sort", help="Sort order"),
    start: str = typer.Option(None, "--from", help="Range start (YYYY-MM-DD)"),
    end: str = typer.Option(None, "--to", help="Range end (YYYY-MM-DD)"),
    ignore_pinned: bool = typer.Option(False, "--ignore-pinned", help="Do not float pinned notes"),
) -> None:
    """
    List notes.

    Examples:
        cli.py notes list --date 2024-01-01
        cli.py notes list --from 2024-01-01 --to 2024-01-31 --sort updated
        cli.py notes list --trash
    """
    query = _build_query(date, search, tag, archived, trash, sort, start, end, ignore_pinned)

    async def action() -> None:
        store = _make_store(query)
        notes = await store.load()
        if not notes:
            console.print("[dim]No notes[/dim]")
            return
        console.print(notes_table(notes, _listing_title(query)))

    _run(action)


@app.command()
def show(note_id: int = typer.Argument(..., help="Note ID")) -> None:
    """Show one note, trashed or not."""

    async def action() -> None:
        note = await _make_store().fetch(note_id)
        console.print(notes_table([note], title=f"Note {note_id}"))
        if note.get("deleted_at"):
            console.print(f"[yellow]In trash since {note['deleted_at']}[/yellow]")
        console.print(note.get("content", ""))

    _run(action)


@app.command()
def add(
    content: str = typer.Argument(..., help="Note content"),
    date: str = typer.Option(None, "--date", help="Day to file under (default: today)"),
    tags: list[str] = typer.Option(None, "--tag", "-t", help="Tag (repeatable)"),
    pin: bool = typer.Option(False, "--pin", help="Pin the note"),
    author: str = typer.Option(None, "--author", help="Identity to write as"),
) -> None:
    """
    Create a note.

    Examples:
        cli.py notes add "<p>Went for a run</p>" --tag sport --tag morning
        cli.py notes add "Dentist" --date 2024-02-03 --author Alice
    """
    day = _parse_date(date, "--date") or dt.date.today()
    content = content.strip()
    if not content:
        raise typer.BadParameter("content must not be empty", param_hint="CONTENT")

    async def action() -> None:
        store = _make_store(NoteListQuery(date=day))
        note = await store.create(content, day, tags=tags or [], is_pinned=pin, author=author)
        console.print(f"[green]Created note {note['id']} for {note['date']}[/green]")

    _run(action)


@app.command()
def edit(
    note_id: int = typer.Argument(..., help="Note ID"),
    content: str = typer.Option(None, "--content", "-c", help="New content"),
    date: str = typer.Option(None, "--date", help="Move to another day"),
    tags: list[str] = typer.Option(None, "--tag", "-t", help="Replace tags (repeatable)"),
) -> None:
    """
    Edit a note. Only the given options change.

    Examples:
        cli.py notes edit 12 --content "<p>Updated</p>"
        cli.py notes edit 12 --tag work --tag urgent
    """
    changes: dict[str, Any] = {
        "content": content,
        "date": _parse_date(date, "--date"),
        "tags": tags or None,
    }
    if all(value is None for value in changes.values()):
        console.print("[yellow]Nothing to change[/yellow]")
        return

    async def action() -> None:
        note = await _make_store().update(note_id, **changes)
        console.print(f"[green]Updated note {note['id']}[/green]")

    _run(action)


@app.command()
def pin(note_id: int = typer.Argument(..., help="Note ID")) -> None:
    """Pin or unpin a note."""

    async def action() -> None:
        note = await _make_store().toggle_pin(note_id)
        state = "Pinned" if note.get("is_pinned") else "Unpinned"
        console.print(f"[green]{state} note {note_id}[/green]")

    _run(action)


@app.command()
def archive(note_id: int = typer.Argument(..., help="Note ID")) -> None:
    """Archive or unarchive a note."""

    async def action() -> None:
        note = await _make_store().toggle_archive(note_id)
        state = "Archived" if note.get("is_archived") else "Unarchived"
        console.print(f"[green]{state} note {note_id}[/green]")

    _run(action)


@app.command()
def delete(note_id: int = typer.Argument(..., help="Note ID")) -> None:
    """Move a note to the trash."""

    async def action() -> None:
        await _make_store().soft_delete(note_id)
        console.print(f"[green]Moved note {note_id} to the trash[/green]")

    _run(action)


@app.command()
def restore(note_id: int = typer.Argument(..., help="Note ID")) -> None:
    """Take a note out of the trash."""

    async def action() -> None:
        await _make_store(NoteListQuery(show_deleted=True)).restore(note_id)
        console.print(f"[green]Restored note {note_id}[/green]")

    _run(action)


@app.command()
def purge(
    note_id: int = typer.Argument(..., help="Note ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Permanently delete a trashed note."""
    if not yes:
        typer.confirm(f"Permanently delete note {note_id}?", abort=True)

    async def action() -> None:
        await _make_store(NoteListQuery(show_deleted=True)).purge(note_id)
        console.print(f"[green]Deleted note {note_id} permanently[/green]")

    _run(action)


@app.command("empty-trash")
def empty_trash(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Permanently delete everything in the trash."""
    if not yes:
        typer.confirm("Permanently delete every note in the trash?", abort=True)

    async def action() -> None:
        store = _make_store(NoteListQuery(show_deleted=True))
        await store.load()
        deleted = await store.empty_trash()
        console.print(f"[green]Deleted {deleted} note(s) permanently[/green]")

    _run(action)


@app.command()
def tags(
    archived: bool = typer.Option(False, "--archived", "-a", help="Include tags of archived notes"),
) -> None:
    """List tags in use."""

    async def action() -> None:
        store = _make_store()
        params = {"showArchived": "true"} if archived else None
        names = unwrap(await store.client.get(f"{store.notes_path}/tags", params=params))
        if not names:
            console.print("[dim]No tags[/dim]")
            return
        for name in names:
            console.print(f"[magenta]{name}[/magenta]")

    _run(action)


@app.command()
def watch(
    date: str = typer.Option(None, "--date", help="Exact day (YYYY-MM-DD)"),
    search: str = typer.Option(None, "--search", "-s", help="Content substring"),
    tag: str = typer.Option(None, "--tag", "-t", help="Only notes with this tag"),
    archived: bool = typer.Option(False, "--archived", "-a", help="Include archived notes"),
    trash: bool = typer.Option(False, "--trash", help="Show the trash"),
    sort: SortBy = typer.Option(SortBy.DATE, "--sort", help="Sort order"),
    interval: float = typer.Option(None, "--interval", "-i", help="Seconds between refreshes"),
) -> None:
    """
    Keep a listing on screen, refreshed on an interval.

    Examples:
        cli.py notes watch --date 2024-01-01
        cli.py notes watch --trash --interval 2
    """
    query = _build_query(date, search, tag, archived, trash, sort, None, None, False)
    title = _listing_title(query)

    async def action() -> None:
        with Live(notes_table([], title), console=console, refresh_per_second=4) as live:
            store = _make_store(
                query,
                on_change=lambda notes: live.update(notes_table(notes, title)),
            )
            await store.load()
            await store.poll(interval)

    try:
        _run(action)
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped watching[/dim]")
