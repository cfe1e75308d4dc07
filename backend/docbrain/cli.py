import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from docbrain.config import Settings
from docbrain.database import build_engine, build_session_factory, create_tables
from docbrain.logging_config import configure_logging
from docbrain.repositories.file_records import FileRecordStore
from docbrain.services.blob_storage import BlobStore
from docbrain.services.reconcile import DEFAULT_MIN_AGE_SECONDS, find_orphans, repair

app = typer.Typer(help="Admin commands for the DocBrain PDF service.")
console = Console()


def _settings() -> Settings:
    settings = Settings()
    configure_logging(settings.LOG_LEVEL)
    return settings


async def _with_store(settings: Settings, fn):
    """Run ``fn(store)`` against a fresh engine, creating tables first."""
    engine = build_engine(settings)
    try:
        await create_tables(engine)
        async with build_session_factory(engine)() as session:
            return await fn(FileRecordStore(session))
    finally:
        await engine.dispose()


@app.command("init-db")
def init_db():
    """Create the database tables."""
    settings = _settings()

    async def _create():
        engine = build_engine(settings)
        try:
            await create_tables(engine)
        finally:
            await engine.dispose()

    try:
        asyncio.run(_create())
    except Exception as e:
        console.print(f"[bold red]✖[/bold red] Database initialization FAILED: {e}")
        raise typer.Exit(code=1)
    console.print("[bold green]✔[/bold green] Database tables created successfully.")


@app.command()
def records():
    """Print every stored PDF record, newest first."""
    settings = _settings()

    async def _load(store: FileRecordStore):
        return await store.list_all(), await store.count()

    rows, total = asyncio.run(_with_store(settings, _load))

    if not rows:
        console.print("No PDFs in database yet.")
        return

    table = Table(title="PDF Database Contents")
    table.add_column("#", justify="right")
    table.add_column("ID", no_wrap=True)
    table.add_column("Original Name")
    table.add_column("Stored Filename")
    table.add_column("Size (KB)", justify="right")
    table.add_column("Upload Date")
    table.add_column("MIME Type")
    for i, r in enumerate(rows, start=1):
        table.add_row(
            str(i),
            r.id,
            r.original_name,
            r.stored_name,
            f"{r.size_bytes / 1024:.2f}",
            r.uploaded_at.isoformat(),
            r.content_type,
        )
    console.print(table)
    console.print(f"Total records: {total}")


@app.command()
def reconcile(
    fix: bool = typer.Option(False, "--fix", help="Delete the orphans that were found."),
    min_age: float = typer.Option(
        DEFAULT_MIN_AGE_SECONDS,
        "--min-age",
        help="Ignore unreferenced blobs modified less than this many seconds ago.",
    ),
):
    """Report blobs without records and records without blobs."""
    settings = _settings()
    blobs = BlobStore(settings.FILE_STORAGE_PATH)

    async def _run(store: FileRecordStore):
        report = await find_orphans(store, blobs, min_age=min_age)
        if fix and not report.clean:
            await repair(report, store, blobs)
        return report

    report = asyncio.run(_with_store(settings, _run))

    if report.skipped_recent:
        console.print(
            f"Skipped {len(report.skipped_recent)} blob(s) newer than {min_age:g}s"
            " (possibly uploads in flight)."
        )
    if report.clean:
        console.print("[bold green]✔[/bold green] No orphans found.")
        return
    for name in report.orphan_blobs:
        console.print(f"orphan blob: {name}")
    for record_id in report.orphan_records:
        console.print(f"orphan record: {record_id}")
    summary = f"{len(report.orphan_blobs)} orphan blob(s), {len(report.orphan_records)} orphan record(s)"
    if fix:
        console.print(f"Removed {summary}.")
    else:
        console.print(f"Found {summary}. Re-run with --fix to remove them.")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Interface to bind."),
    port: Optional[int] = typer.Option(None, help="Port to listen on. Defaults to API_PORT."),
):
    """Run the HTTP API."""
    import uvicorn

    settings = _settings()
    uvicorn.run("docbrain.main:app", host=host, port=port or settings.API_PORT)


if __name__ == "__main__":
    app()
