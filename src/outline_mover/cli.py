"""CLI for outline-mover: configure, browse collections, move document subtrees."""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from outline_mover.api import OutlineApi
from outline_mover.config import resolve_settings_file
from outline_mover.core.tree.builder import flatten_tree
from outline_mover.errors import OutlineError
from outline_mover.logging_config import configure_logging
from outline_mover.models.document import FlatEntry, MoveTask
from outline_mover.session import MoverSession, StaticSelection
from outline_mover.settings import (
    JsonSettingsStore,
    SettingsManager,
    check_connection,
    mask_token,
    normalize_outline_url,
)

app = typer.Typer(help="Move Outline documents, with their sub-trees, between collections.")

ROOT_OPTION_LABEL = "Collection Root"


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    settings_file: Annotated[
        Path | None,
        typer.Option("--settings-file", "-S", help="Settings JSON file"),
    ] = None,
) -> None:
    configure_logging(verbose=verbose)
    ctx.obj = SettingsManager(JsonSettingsStore(settings_file or resolve_settings_file()))


@contextmanager
def _reported_errors() -> Iterator[None]:
    """Turn API, transport and validation errors into a message and exit code 1."""
    try:
        yield
    except (OutlineError, ValueError) as e:
        logger.error("{}", e)
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e


def _open_api(ctx: typer.Context) -> OutlineApi:
    manager: SettingsManager = ctx.obj
    with _reported_errors():
        return manager.create_api()


def _format_option(entry: FlatEntry) -> str:
    return f"{' ' * (entry.indent * 2)}{entry.name}"


def _echo_entries(entries: list[FlatEntry]) -> None:
    for entry in entries:
        typer.echo(f"{_format_option(entry)}  [id={entry.id}]")


def _echo_tasks(tasks: list[MoveTask]) -> None:
    for task in tasks:
        parent = task.parent_document_id or "(root)"
        typer.echo(f"  {task.title} [id={task.document_id}] -> parent {parent}")


@app.command()
def configure(
    ctx: typer.Context,
    url: Annotated[str | None, typer.Option("--url", "-u", help="Outline base URL")] = None,
    token: Annotated[str | None, typer.Option("--token", "-t", help="Outline API token")] = None,
    collection: Annotated[
        str | None,
        typer.Option("--collection", "-c", help="Default source collection id"),
    ] = None,
) -> None:
    """Save connection settings."""
    manager: SettingsManager = ctx.obj
    with _reported_errors():
        current = manager.get_settings()
    outline_url = url if url is not None else current.outline_url
    api_token = (token if token is not None else current.api_token) or ""
    api_token = api_token.strip()

    if not outline_url or not api_token:
        typer.echo("Both the Outline API Base URL and API token are required.", err=True)
        raise typer.Exit(1)

    with _reported_errors():
        values = {"outline_url": normalize_outline_url(outline_url), "api_token": api_token}
        if collection is not None:
            values["collection_id"] = collection
        manager.set(values)
    typer.echo("Settings saved!")


@app.command(name="settings")
def show_settings(ctx: typer.Context) -> None:
    """Show the current settings, with the token masked."""
    manager: SettingsManager = ctx.obj
    with _reported_errors():
        settings = manager.get_settings()
    typer.echo(f"Outline URL:        {settings.outline_url or '(not set)'}")
    token = mask_token(settings.api_token) if settings.api_token else "(not set)"
    typer.echo(f"API token:          {token}")
    typer.echo(f"Default collection: {settings.collection_id or '(not set)'}")


@app.command()
def check(ctx: typer.Context) -> None:
    """Check that the configured URL and token are accepted."""
    api = _open_api(ctx)
    ok, status = check_connection(api)
    typer.echo(status)
    if not ok:
        raise typer.Exit(1)


@app.command()
def collections(ctx: typer.Context) -> None:
    """List all collections."""
    session = MoverSession(_open_api(ctx))
    with _reported_errors():
        found = session.load_collections()
    typer.echo(f"{len(found)} collections:\n")
    for c in found:
        typer.echo(f"  {c.name}  [id={c.id}]")


def _source_collection(ctx: typer.Context, collection: str | None) -> str:
    manager: SettingsManager = ctx.obj
    with _reported_errors():
        collection_id = collection or manager.get_settings().collection_id
    if not collection_id:
        typer.echo("No collection given and no default collection configured.", err=True)
        raise typer.Exit(1)
    return collection_id


@app.command()
def tree(
    ctx: typer.Context,
    collection: Annotated[
        str | None, typer.Argument(help="Collection id (default: configured collection)")
    ] = None,
) -> None:
    """Show the document tree of a collection."""
    collection_id = _source_collection(ctx, collection)
    session = MoverSession(_open_api(ctx))
    with _reported_errors():
        loaded = session.select_source_collection(collection_id)
    _echo_entries(flatten_tree(loaded.roots))


@app.command()
def folders(
    ctx: typer.Context,
    collection: str = typer.Argument(..., help="Destination collection id"),
    folder: Annotated[
        str | None,
        typer.Option("--folder", "-f", help="List the sub-folders of this folder instead"),
    ] = None,
) -> None:
    """List destination folder options of a collection."""
    session = MoverSession(_open_api(ctx))
    with _reported_errors():
        options = session.select_destination_collection(collection)
    if folder:
        if session.destination_tree.get(folder) is None:
            typer.echo(f"Folder '{folder}' not found.", err=True)
            raise typer.Exit(1)
        options = session.subfolder_options(folder)
    else:
        typer.echo(ROOT_OPTION_LABEL)
    _echo_entries(options)


@app.command()
def move(
    ctx: typer.Context,
    document_ids: list[str] = typer.Argument(..., help="Ids of the documents to move"),
    destination: str = typer.Option(..., "--to", "-T", help="Destination collection id"),
    source: Annotated[
        str | None,
        typer.Option("--from", "-F", help="Source collection id (default: configured)"),
    ] = None,
    folder: Annotated[
        str | None, typer.Option("--folder", "-f", help="Destination folder id")
    ] = None,
    subfolder: Annotated[
        str | None, typer.Option("--subfolder", "-s", help="Destination sub-folder id")
    ] = None,
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Only print the moves"),
) -> None:
    """Move documents, with their sub-trees, to another collection or folder."""
    source_id = _source_collection(ctx, source)
    session = MoverSession(_open_api(ctx))
    selection = StaticSelection(frozenset(document_ids))
    parent_id = MoverSession.resolve_destination_parent(folder, subfolder)

    with _reported_errors():
        session.select_source_collection(source_id)
        unknown = sorted(set(document_ids) - session.source_tree.index.keys())
        if unknown:
            logger.warning("Not in the source collection, ignored: {}", ", ".join(unknown))

        if dry_run:
            tasks = session.plan_selected(selection, destination, parent_id)
            typer.echo(f"Would move {len(tasks)} documents:")
            _echo_tasks(tasks)
            return

        try:
            done = session.move_selected(selection, destination, parent_id)
        finally:
            typer.echo("Source collection now:")
            _echo_entries(flatten_tree(session.source_tree.roots))

    typer.echo(f"Documents moved successfully! ({len(done)} moved)")


@app.command(name="create-collection")
def create_collection(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Collection name"),
) -> None:
    """Create a collection."""
    api = _open_api(ctx)
    with _reported_errors():
        collection_id = api.create_collection(name)
    typer.echo(f"Created collection {name!r} [id={collection_id}]")


@app.command(name="create-document")
def create_document(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Document title"),
    collection: Annotated[
        str | None,
        typer.Option("--collection", "-c", help="Collection id (default: configured)"),
    ] = None,
    parent: Annotated[
        str | None, typer.Option("--parent", "-p", help="Parent document id")
    ] = None,
    text: str = typer.Option("", "--text", help="Markdown body"),
    draft: bool = typer.Option(False, "--draft", help="Do not publish"),
) -> None:
    """Create a document."""
    collection_id = _source_collection(ctx, collection)
    api = _open_api(ctx)
    with _reported_errors():
        doc = api.create_document(
            title=title,
            text=text,
            collection_id=collection_id,
            publish=not draft,
            parent_document_id=parent,
        )
    typer.echo(f"Created document {title!r} [id={doc.get('id')}]")
