"""CLI for fieldblob."""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .attachment_service import AttachmentService
from .config import DatabaseConfig, FieldBlobConfig, load_config, save_config
from .constants import FIELDBLOB_DIR
from .context import ProjectContext
from .errors import ConfigError, FieldBlobError, NotFoundError
from .policy import StoragePolicy
from .utils import humanize_size, parse_field_ids


app = typer.Typer(help="""\
Binary field attachments: store files for content fields, share them
between translations and versions, and delete blobs once nothing
references them.""")

console = Console()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log storage and gateway activity"),
):
    """Configure logging for all commands."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


def require_project_context() -> ProjectContext:
    """Ensure project is initialized and return context.

    Raises:
        typer.Exit: If not in a project directory
    """
    try:
        return ProjectContext()
    except ValueError as e:
        console.print(f"[red]✗[/red] {e}")
        console.print()
        console.print("To initialize a new project, run:")
        console.print("  [cyan]fieldblob init[/cyan]")
        raise typer.Exit(1)


def _get_service() -> AttachmentService:
    """Build the attachment service for the current project."""
    ctx = require_project_context()
    try:
        return AttachmentService(ctx=ctx)
    except (ConfigError, FileNotFoundError, ValueError) as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)


def _fail(e: Exception) -> None:
    console.print(f"[red]✗[/red] {e}")
    raise typer.Exit(1)


@app.command()
def init(
    path: Optional[Path] = typer.Argument(None, help="Directory to initialize (default: current directory)"),
    provider: str = typer.Option("fs", "--provider", help="Object store provider: fs or azure"),
    container: str = typer.Option("var/storage", "--container", help="Directory (fs) or container name (azure)"),
    prefix: str = typer.Option("", "--prefix", help="Key prefix inside the container"),
    gateway: str = typer.Option("sqlite", "--gateway", help="Reference gateway: sqlite or memory"),
):
    """Initialize a fieldblob project.

    Examples:
        # Initialize current directory with local storage
        fieldblob init

        # Keep blobs in Azure
        fieldblob init --provider azure --container attachments
    """
    target_dir = (path or Path.cwd()).resolve()
    if ProjectContext.is_initialized(target_dir):
        console.print(f"[red]error:[/red] Project already initialized in `{target_dir}` ({FIELDBLOB_DIR} exists)")
        raise typer.Exit(1)

    try:
        config = FieldBlobConfig(
            storage=StoragePolicy(provider=provider, container=container, prefix=prefix),
            database=DatabaseConfig(gateway=gateway),
        )
    except (FieldBlobError, ValueError) as e:
        _fail(e)

    target_dir.mkdir(parents=True, exist_ok=True)
    ctx = ProjectContext.init(target_dir)
    save_config(config, ctx)

    try:
        # Creates the database schema and the storage root
        AttachmentService(ctx=ctx).close()
    except (FieldBlobError, ValueError) as e:
        _fail(e)

    console.print(f"[green]✓[/green] Initialized project in `{target_dir}`")
    console.print(f"[dim]Storage: {config.storage.provider} ({config.storage.container})[/dim]")
    console.print(f"[dim]Gateway: {config.database.gateway}[/dim]")


@app.command()
def store(
    field_id: int = typer.Argument(..., help="Field id"),
    version: int = typer.Argument(..., help="Version number"),
    file: Path = typer.Argument(..., help="Local file to store"),
    mime_type: Optional[str] = typer.Option(None, "--mime-type", help="Mime type (detected when omitted)"),
    language: str = typer.Option("eng-GB", "--language", "-l", help="Language code of the field"),
    name: Optional[str] = typer.Option(None, "--name", help="File name to record (default: input name)"),
):
    """Store a local file as a field's attachment."""
    with _get_service() as service:
        try:
            result = service.store_file(
                field_id,
                version,
                file,
                language_code=language,
                mime_type=mime_type,
                file_name=name,
            )
        except (FieldBlobError, FileNotFoundError) as e:
            _fail(e)

    console.print(f"[green]✓[/green] Stored field {field_id} v{version} → {result.blob_id}")
    console.print(f"[dim]{result.mime_type}, {humanize_size(result.size)}[/dim]")


@app.command()
def show(
    field_id: int = typer.Argument(..., help="Field id"),
    version: int = typer.Argument(..., help="Version number"),
):
    """Show a field's attachment with live object store metadata."""
    with _get_service() as service:
        try:
            info = service.load(field_id, version)
        except NotFoundError as e:
            _fail(e)

    table = Table(show_header=False, box=None)
    table.add_column("key", style="cyan")
    table.add_column("value")
    table.add_row("Field", f"{info.field_id} v{info.version_no}")
    table.add_row("Blob", info.blob_id)
    table.add_row("File name", info.file_name or "-")
    table.add_row("Mime type", info.mime_type or "-")
    table.add_row("Size", humanize_size(info.size))
    table.add_row("URI", info.uri)
    console.print(table)


@app.command()
def copy(
    source_field_id: int = typer.Argument(..., help="Field id to copy from"),
    target_field_id: int = typer.Argument(..., help="Field id to copy to"),
    version: int = typer.Argument(..., help="Version number of the target"),
    source_version: Optional[int] = typer.Option(None, "--source-version", help="Version of the source (default: same)"),
):
    """Reference the source field's blob from another field without uploading."""
    with _get_service() as service:
        try:
            info = service.copy(source_field_id, target_field_id, version, source_version_no=source_version)
        except FieldBlobError as e:
            _fail(e)

    console.print(f"[green]✓[/green] Field {target_field_id} v{version} now references {info.blob_id}")


@app.command()
def delete(
    version: int = typer.Argument(..., help="Version number"),
    field_ids: List[str] = typer.Argument(..., help="Field ids (space or comma separated)"),
):
    """Delete field attachments in one version; orphaned blobs are removed."""
    try:
        ids = parse_field_ids(field_ids)
    except ValueError as e:
        _fail(e)

    with _get_service() as service:
        try:
            result = service.delete(version, ids)
        except FieldBlobError as e:
            _fail(e)

    console.print(f"[green]✓[/green] Removed references of {len(result.field_ids)} field(s) in v{version}")
    for blob_id in result.blobs_deleted:
        console.print(f"  [red]deleted[/red] {blob_id}")
    for blob_id in result.blobs_kept:
        console.print(f"  [dim]kept (still referenced)[/dim] {blob_id}")


@app.command()
def refs(
    blob_id: Optional[str] = typer.Argument(None, help="Blob id (default: list all references)"),
):
    """List reference rows, or the references of one blob."""
    with _get_service() as service:
        if blob_id is not None:
            usage = service.usage(blob_id)
        else:
            rows = service.gateway.list_references()

    if blob_id is not None:
        console.print(f"[bold]{usage.blob_id}[/bold]: {usage.count} reference(s)")
        for ref in usage.references:
            console.print(f"  • {ref}")
        return

    if not rows:
        console.print("[dim]No references[/dim]")
        return

    table = Table(title="Attachment references")
    table.add_column("Field", justify="right")
    table.add_column("Version", justify="right")
    table.add_column("Blob")
    table.add_column("Mime type")
    for ref in rows:
        table.add_row(str(ref.field_id), str(ref.version_no), ref.blob_id, ref.mime_type or "-")
    console.print(table)


@app.command()
def config():
    """Print the project configuration."""
    ctx = require_project_context()
    try:
        cfg = load_config(ctx)
    except (FileNotFoundError, FieldBlobError, ValueError) as e:
        _fail(e)
    console.print_json(cfg.model_dump_json())


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
