"""Command line interface for crawlgraph."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from crawlgraph.config import DB_ENV_VAR, AppConfig
from crawlgraph.index.loader import RecordLoader
from crawlgraph.index.reader import RecordReader
from crawlgraph.index.storage import SQLiteDocumentStore
from crawlgraph.models import RECORD_TYPES, RecordKind, record_key
from crawlgraph.utils.files import iter_record_paths, read_record_dicts
from crawlgraph.web.app import app as web_app


LOGGER = logging.getLogger(__name__)
console = Console()
app = typer.Typer(help="crawlgraph - web-crawl graph memory store")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _resolve_db(db: Path | None) -> Path:
    config = AppConfig(db_path=db if db is not None else AppConfig().db_path)
    return config.resolve_db_path(Path.cwd())


def _parse_kind(kind: str) -> RecordKind:
    try:
        return RecordKind.parse(kind)
    except ValueError:
        choices = ", ".join(k.value for k in RecordKind)
        raise typer.BadParameter(f"Unknown record kind {kind!r}. Choose from: {choices}")


def _summarize(data: dict) -> str:
    """Render the non-empty fields of a record as key=value pairs."""
    parts = [f"{name}={value}" for name, value in data.items() if value not in (None, "", [], {})]
    return ", ".join(parts)


def _open_existing(db: Path | None) -> SQLiteDocumentStore:
    resolved_db = _resolve_db(db)
    if not resolved_db.exists():
        raise typer.BadParameter(f"Database not found: {resolved_db}")
    return SQLiteDocumentStore(resolved_db)


@app.command()
def load(
    inputs: List[Path] = typer.Argument(
        ..., help="JSON or JSON-lines files with records.", resolve_path=True
    ),
    kind: str = typer.Option(..., "--kind", "-k", help="Record kind of every input record"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Encode records from files and write them to the store."""
    _setup_logging(verbose)
    record_kind = _parse_kind(kind)
    record_cls = RECORD_TYPES[record_kind]

    paths = list(iter_record_paths(inputs))
    if not paths:
        console.print("[yellow]No record files found.[/yellow]")
        return

    records = []
    invalid = 0
    for path in paths:
        try:
            rows = list(read_record_dicts(path))
        except ValueError as exc:
            raise typer.BadParameter(f"Unreadable record file {path}: {exc}")
        for data in rows:
            try:
                records.append(record_cls.from_dict(data))
            except (ValidationError, TypeError, ValueError) as exc:
                LOGGER.error("Invalid %s record in %s: %s", record_kind.value, path, exc)
                invalid += 1

    resolved_db = _resolve_db(db)
    _ensure_db_parent(resolved_db)
    store = SQLiteDocumentStore(resolved_db)
    try:
        console.print(f"Loading into [bold]{resolved_db}[/bold]...")
        stats = RecordLoader(store).load(records)
    finally:
        store.close()
    stats.failed += invalid

    console.print(
        f"Inserted: {stats.inserted}, updated: {stats.updated}, "
        f"refused: {stats.refused}, failed: {stats.failed}"
    )


@app.command("list")
def list_records(
    kind: str = typer.Argument(..., help="Record kind to list"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    limit: int = typer.Option(AppConfig().page_size, help="Maximum number of records"),
) -> None:
    """List decoded records of one kind."""
    record_kind = _parse_kind(kind)
    store = _open_existing(db)
    try:
        records = RecordReader(store).records(record_kind, limit=limit)
    finally:
        store.close()

    if not records:
        console.print(f"[yellow]No {record_kind.value} records found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Key")
    table.add_column("Record")
    for record in records:
        table.add_row(record_key(record) or "", _summarize(record.to_dict()))
    console.print(table)


@app.command()
def show(
    record_id: str = typer.Argument(..., help="Record ID, or LRU for precision exceptions"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
) -> None:
    """Print the stored fields of one document."""
    store = _open_existing(db)
    try:
        document = store.get(record_id)
    finally:
        store.close()

    if document is None:
        console.print(f"[yellow]No document with key {record_id}.[/yellow]")
        raise typer.Exit(code=1)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Field")
    table.add_column("Value")
    for name, value in document:
        table.add_row(name.value, value)
    console.print(table)


@app.command()
def stats(
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
) -> None:
    """Show document counts per record kind."""
    store = _open_existing(db)
    try:
        counts = store.count_by_type()
    finally:
        store.close()

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Kind")
    table.add_column("Documents")
    for record_kind in RecordKind:
        table.add_row(record_kind.value, str(counts.get(record_kind.value, 0)))
    console.print(table)


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
) -> None:
    """Start the HTTP API."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - defensive
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    resolved_db = _resolve_db(db)
    if not resolved_db.exists():
        console.print("[yellow]Warning: database not found, reads will fail until records are written.[/yellow]")
    os.environ[DB_ENV_VAR] = str(resolved_db)

    console.print(f"Starting API on http://{host}:{port} (database: {resolved_db})")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":  # pragma: no cover
    app()
