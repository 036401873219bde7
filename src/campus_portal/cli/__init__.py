from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer

from campus_portal.app.core.logging import setup_logging
from campus_portal.app.settings import PortalSettings, get_portal_settings
from campus_portal.storage.attachments import DEFAULT_SWEEP_MIN_AGE

app = typer.Typer(no_args_is_help=True, add_completion=False, help="Campus portal service commands.")


def _settings(db_path: Optional[Path], upload_dir: Optional[Path] = None) -> PortalSettings:
    return get_portal_settings(db_path=db_path, upload_dir=upload_dir)


@app.callback()
def _root(
        log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
):
    setup_logging(level=log_level)


@app.command("serve")
def serve(
        host: Optional[str] = typer.Option(None, help="Bind address (defaults to PORTAL_HOST)"),
        port: Optional[int] = typer.Option(None, help="Port (defaults to PORTAL_PORT)"),
        reload: bool = typer.Option(False, help="Auto-reload on code changes"),
):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_portal_settings()
    uvicorn.run(
        "campus_portal.api.fastapi:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_config=None,  # keep our dictConfig
    )


@app.command("init-db")
def init_db(
        db_path: Optional[Path] = typer.Option(None, help="Document path (defaults to PORTAL_DB_PATH)"),
):
    """Create or normalize the document file and print collection sizes."""
    from campus_portal.db.document import DocumentStore

    settings = _settings(db_path)
    store = DocumentStore(settings.db_path)
    doc = store.load()
    store.save(doc)
    for name, records in doc.items():
        if isinstance(records, list):
            typer.echo(f"{name}: {len(records)}")


@app.command("sweep-attachments")
def sweep_attachments(
        db_path: Optional[Path] = typer.Option(None, help="Document path (defaults to PORTAL_DB_PATH)"),
        upload_dir: Optional[Path] = typer.Option(None, help="Upload directory (defaults to PORTAL_UPLOAD_DIR)"),
        dry_run: bool = typer.Option(False, "--dry-run", help="List orphans without deleting them"),
        min_age: float = typer.Option(
            DEFAULT_SWEEP_MIN_AGE, "--min-age", min=0, help="Keep files stored less than this many seconds ago"
        ),
):
    """Delete uploaded files that no record points at."""
    from campus_portal.db.document import DocumentStore
    from campus_portal.db.repository import CollectionRepository
    from campus_portal.storage.attachments import AttachmentManager
    from campus_portal.storage.backends.local import LocalBackend

    settings = _settings(db_path, upload_dir)
    manager = AttachmentManager(
        LocalBackend(settings.upload_dir, base_url=settings.upload_url),
        CollectionRepository(DocumentStore(settings.db_path)),
    )
    orphans = asyncio.run(manager.sweep(dry_run=dry_run, min_age=min_age))
    verb = "Would remove" if dry_run else "Removed"
    for name in orphans:
        typer.echo(f"{verb} {name}")
    typer.echo(f"{verb} {len(orphans)} file(s)")


@app.command("create-user")
def create_user(
        username: str = typer.Argument(..., help="Login name"),
        password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
        db_path: Optional[Path] = typer.Option(None, help="Document path (defaults to PORTAL_DB_PATH)"),
):
    """Register a user from the shell."""
    from campus_portal.auth.service import AuthService
    from campus_portal.db.document import DocumentStore
    from campus_portal.db.repository import CollectionRepository
    from campus_portal.exceptions import PortalError

    settings = _settings(db_path)
    service = AuthService(CollectionRepository(DocumentStore(settings.db_path)))
    try:
        user = service.register(username, password)
    except PortalError as exc:
        typer.echo(f"Error: {exc.message}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Created user {user['username']} (id {user['id']})")


def main() -> None:
    app()
