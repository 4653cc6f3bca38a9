"""CLI entry point using Typer."""

import asyncio
import json
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from functools import wraps
from typing import Annotated, Any, TypeVar

import typer

from inote.config import get_settings
from inote.logging_utils import setup_logging
from inote.models import Note
from inote.session import FORMAT_SNIPPETS, EditSession
from inote.storage import FsspecStorage, StorageReadError, StorageWriteError
from inote.store import NoteStore, ValidationError
from inote.utils import validate_id
from inote.vocab import (
    ALL_CATEGORY,
    CATEGORIES,
    NOTE_COLORS,
    PRIORITIES,
    TAGS,
    TEXT_COLORS,
    category_ids,
    find_category,
    priority_color,
)

R = TypeVar("R")
T = TypeVar("T")

app = typer.Typer(help="inote CLI - Local note store")

FAVORITE_MARK = "*"
FORMAT_HELP = "Append a formatting snippet (repeatable): " + ", ".join(FORMAT_SNIPPETS)


@dataclass
class CliState:
    """Options shared by every command."""

    root: str
    key: str


def handle_cli_errors(func: Callable[..., R]) -> Callable[..., R]:
    """Handle common CLI errors."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> R:  # noqa: ANN401
        try:
            return func(*args, **kwargs)
        except StorageWriteError as e:
            typer.echo(f"Error: {e}. Nothing was saved; please try again.", err=True)
            raise typer.Exit(code=1) from e
        except (ValidationError, StorageReadError, ValueError) as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1) from e

    return wrapper


def _run(coro: Coroutine[Any, Any, T]) -> T:
    return asyncio.run(coro)


def _store(ctx: typer.Context) -> NoteStore:
    state: CliState = ctx.obj
    return NoteStore(FsspecStorage(state.root), key=state.key)


def _format_line(note: Note) -> str:
    favorite = f" {FAVORITE_MARK}" if note.is_favorite else ""
    category = find_category(note.category)
    label = f" [{category.name}]" if category else ""
    return f"- {note.id}: {note.title}{label}{favorite}"


def _collect_changes(
    *,
    content: str | None,
    category: str | None,
    priority: str | None,
    tags: list[str] | None,
    images: list[str] | None,
    background_color: str | None,
    text_color: str | None,
    font_size: float | None,
) -> dict[str, Any]:
    changes = {
        "content": content,
        "category": category,
        "priority": priority,
        "tags": tags,
        "images": images,
        "background_color": background_color,
        "text_color": text_color,
        "font_size": font_size,
    }
    return {name: value for name, value in changes.items() if value is not None}


@app.callback()
def main_callback(
    ctx: typer.Context,
    root: Annotated[
        str | None,
        typer.Option(help="Storage root (path or fsspec URL)"),
    ] = None,
    key: Annotated[
        str | None,
        typer.Option(help="Storage slot holding the notes"),
    ] = None,
) -> None:
    """Resolve settings and configure logging."""
    settings = get_settings()
    setup_logging(settings.log_level)
    ctx.obj = CliState(root=root or settings.root, key=key or settings.storage_key)


@app.command("list")
@handle_cli_errors
def cmd_list(
    ctx: typer.Context,
    category: Annotated[
        str,
        typer.Option(help="Category id, or 'all'"),
    ] = ALL_CATEGORY,
    search: Annotated[str, typer.Option(help="Text to search for")] = "",
    favorites: Annotated[
        bool,
        typer.Option("--favorites", help="Only show favorites"),
    ] = False,
) -> None:
    """List notes, most recently edited first."""
    store = _store(ctx)
    notes = _run(store.load_all_or_empty())
    results = store.filter_and_sort(notes, category=category, search_text=search)
    if favorites:
        results = [note for note in results if note.is_favorite]

    if not results:
        typer.echo("No notes found.")
    else:
        for note in results:
            typer.echo(_format_line(note))


@app.command("show")
@handle_cli_errors
def cmd_show(
    ctx: typer.Context,
    note_id: Annotated[str, typer.Argument(help="ID of the note to show")],
) -> None:
    """Print a note as JSON."""
    validate_id(note_id, "note_id")
    note = _run(_store(ctx).get(note_id))
    if note is None:
        msg = f"Note {note_id} not found"
        raise ValueError(msg)
    payload = note.to_payload()
    payload["priorityColor"] = priority_color(note.priority)
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@app.command("add")
@handle_cli_errors
def cmd_add(
    ctx: typer.Context,
    title: Annotated[str, typer.Argument(help="Title of the note")],
    content: Annotated[str | None, typer.Option(help="Body text")] = None,
    category: Annotated[str | None, typer.Option(help="Category id")] = None,
    priority: Annotated[str | None, typer.Option(help="Priority id")] = None,
    tag: Annotated[list[str] | None, typer.Option(help="Tag id (repeatable)")] = None,
    image: Annotated[
        list[str] | None,
        typer.Option(help="Image URI (repeatable)"),
    ] = None,
    background_color: Annotated[str | None, typer.Option(help="Card color")] = None,
    text_color: Annotated[str | None, typer.Option(help="Text color")] = None,
    font_size: Annotated[float | None, typer.Option(help="Font size")] = None,
) -> None:
    """Create a new note."""
    session = EditSession.new(title=title)
    changes = _collect_changes(
        content=content,
        category=category,
        priority=priority,
        tags=tag,
        images=image,
        background_color=background_color,
        text_color=text_color,
        font_size=font_size,
    )
    if changes:
        session.update(**changes)
    saved = _run(session.commit(_store(ctx)))
    typer.echo(f"Note '{saved.id}' created successfully.")


@app.command("edit")
@handle_cli_errors
def cmd_edit(
    ctx: typer.Context,
    note_id: Annotated[str, typer.Argument(help="ID of the note to edit")],
    title: Annotated[str | None, typer.Option(help="New title")] = None,
    content: Annotated[str | None, typer.Option(help="Body text")] = None,
    category: Annotated[str | None, typer.Option(help="Category id")] = None,
    priority: Annotated[str | None, typer.Option(help="Priority id")] = None,
    tag: Annotated[
        list[str] | None,
        typer.Option(help="Toggle a tag id (repeatable)"),
    ] = None,
    image: Annotated[
        list[str] | None,
        typer.Option(help="Append an image URI (repeatable)"),
    ] = None,
    background_color: Annotated[str | None, typer.Option(help="Card color")] = None,
    text_color: Annotated[str | None, typer.Option(help="Text color")] = None,
    font_size: Annotated[float | None, typer.Option(help="Font size")] = None,
    text_format: Annotated[
        list[str] | None,
        typer.Option("--format", help=FORMAT_HELP),
    ] = None,
) -> None:
    """Edit an existing note."""
    validate_id(note_id, "note_id")
    store = _store(ctx)
    note = _run(store.get(note_id))
    if note is None:
        msg = f"Note {note_id} not found"
        raise ValueError(msg)

    session = EditSession(note)
    changes = _collect_changes(
        content=content,
        category=category,
        priority=priority,
        tags=None,
        images=None,
        background_color=background_color,
        text_color=text_color,
        font_size=font_size,
    )
    if title is not None:
        changes["title"] = title
    if changes:
        session.update(**changes)
    for tag_id in tag or []:
        session.toggle_tag(tag_id)
    for uri in image or []:
        session.add_image(uri)
    for kind in text_format or []:
        session.apply_format(kind)

    saved = _run(session.commit(store))
    typer.echo(f"Note '{saved.id}' updated successfully.")


@app.command("delete")
@handle_cli_errors
def cmd_delete(
    ctx: typer.Context,
    note_id: Annotated[str, typer.Argument(help="ID of the note to delete")],
) -> None:
    """Delete a note."""
    validate_id(note_id, "note_id")
    if _run(_store(ctx).delete(note_id)):
        typer.echo(f"Note '{note_id}' deleted.")
    else:
        typer.echo(f"Note '{note_id}' not found; nothing deleted.")


@app.command("favorite")
@handle_cli_errors
def cmd_favorite(
    ctx: typer.Context,
    note_id: Annotated[str, typer.Argument(help="ID of the note")],
    off: Annotated[
        bool,
        typer.Option("--off", help="Remove the favorite flag"),
    ] = False,
) -> None:
    """Mark a note as favorite."""
    validate_id(note_id, "note_id")
    result = _run(_store(ctx).set_favorite(note_id, not off))
    if result is None:
        msg = f"Note {note_id} not found"
        raise ValueError(msg)
    state = "removed from" if off else "added to"
    typer.echo(f"Note '{note_id}' {state} favorites.")


@app.command("toggle-favorite")
@handle_cli_errors
def cmd_toggle_favorite(
    ctx: typer.Context,
    note_id: Annotated[str, typer.Argument(help="ID of the note")],
) -> None:
    """Flip the favorite flag of a note."""
    validate_id(note_id, "note_id")
    result = _run(_store(ctx).toggle_favorite(note_id))
    if result is None:
        msg = f"Note {note_id} not found"
        raise ValueError(msg)
    typer.echo(f"Note '{note_id}' favorite: {'yes' if result else 'no'}")


@app.command("counts")
@handle_cli_errors
def cmd_counts(ctx: typer.Context) -> None:
    """Show how many notes each category holds."""
    store = _store(ctx)
    notes = _run(store.load_all_or_empty())
    counts = store.category_counts(notes, category_ids())
    for category in CATEGORIES:
        typer.echo(f"{category.name}: {counts[category.id]}")


@app.command("vocab")
def cmd_vocab() -> None:
    """Print the fixed vocabularies."""
    typer.echo("Categories:")
    for category in CATEGORIES:
        typer.echo(f"  {category.id}: {category.name}")
    typer.echo("Priorities:")
    for priority in PRIORITIES:
        typer.echo(f"  {priority.id}: {priority.name} ({priority.color})")
    typer.echo("Tags:")
    for tag in TAGS:
        typer.echo(f"  {tag.id}: {tag.name}")
    typer.echo("Colors:")
    for color in NOTE_COLORS:
        typer.echo(f"  {color.id}: {color.color} ({color.name})")
    typer.echo("Text colors: " + ", ".join(TEXT_COLORS))


def main() -> None:
    """Entry point for the inote CLI."""
    app()


if __name__ == "__main__":
    main()
