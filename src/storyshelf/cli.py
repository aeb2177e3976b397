"""Command line interface for StoryShelf."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from storyshelf.catalog.manifest import update_manifest
from storyshelf.config import AppConfig, build_service
from storyshelf.models import CatalogResult, LineFormat, ManifestError
from storyshelf.utils.text import preview
from storyshelf.web import deps
from storyshelf.web.app import app as web_app


console = Console()
app = typer.Typer(help="StoryShelf - a story gallery driven by a file manifest")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _build_config(content_dir: Optional[Path], remote: Optional[str], timeout: float) -> AppConfig:
    return AppConfig(
        content_dir=content_dir if content_dir is not None else AppConfig().content_dir,
        remote_url=remote,
        fetch_timeout=timeout,
    )


def _exit_on_failure(result: CatalogResult) -> None:
    if result.success:
        return
    if result.error is not None:
        console.print(f"[red]{result.error.kind.value}: {result.error.message}[/red]")
    raise typer.Exit(code=1)


@app.command()
def manifest(
    directory: Path = typer.Argument(
        ..., help="Directory holding the story .txt files.", resolve_path=True
    ),
    folder_path: str = typer.Option("./", help="Prefix written in front of every entry path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Scan a directory and (re)write its file-manifest.json."""
    _setup_logging(verbose)
    console.print(f"Scanning [bold]{directory}[/bold]...")
    try:
        result = update_manifest(directory, folder_path=folder_path)
    except ManifestError as exc:
        console.print(f"[red]Error updating manifest: {exc}[/red]")
        raise typer.Exit(code=1)

    console.print(f"Manifest updated. Found {result.total_files} text files.")
    for entry in result.text_files:
        console.print(f"  - {entry.title} ({entry.path})")


@app.command("list")
def list_stories(
    content_dir: Path = typer.Option(None, "--content-dir", help="Local story directory"),
    remote: Optional[str] = typer.Option(None, "--remote", help="Fetch stories from this base URL"),
    timeout: float = typer.Option(AppConfig().fetch_timeout, help="Per-fetch timeout in seconds"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """List the stories described by the manifest."""
    _setup_logging(verbose)
    config = _build_config(content_dir, remote, timeout)
    service = build_service(config, Path.cwd())

    result = asyncio.run(service.list_documents(config.base_path))
    _exit_on_failure(result)

    records = result.data or []
    if not records:
        console.print("[yellow]No stories found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Title")
    table.add_column("File")
    table.add_column("Lines")
    table.add_column("Words")
    table.add_column("Info")

    for record in records:
        table.add_row(
            record.title,
            f"{record.file_name}.txt",
            str(record.line_count),
            str(record.word_count),
            preview(record.info),
        )

    console.print(table)


@app.command()
def show(
    path: str = typer.Argument(..., help="Location of the story, e.g. ./my-story.txt"),
    content_dir: Path = typer.Option(None, "--content-dir", help="Local story directory"),
    remote: Optional[str] = typer.Option(None, "--remote", help="Fetch stories from this base URL"),
    remove_empty_lines: bool = typer.Option(False, "--remove-empty-lines", help="Drop blank lines"),
    trim: bool = typer.Option(False, "--trim", help="Strip whitespace around the text and each line"),
    timeout: float = typer.Option(AppConfig().fetch_timeout, help="Per-fetch timeout in seconds"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Print a single story with its metadata."""
    _setup_logging(verbose)
    config = _build_config(content_dir, remote, timeout)
    service = build_service(config, Path.cwd())

    line_format = None
    if remove_empty_lines or trim:
        line_format = LineFormat(remove_empty_lines=remove_empty_lines, trim_whitespace=trim)
    result = asyncio.run(service.get_document(path, line_format=line_format))
    _exit_on_failure(result)

    record = result.data
    console.print(f"[bold]{record.title}[/bold]")
    console.print(
        f"{record.file_size} bytes | LINES: {record.line_count} | WORDS: {record.word_count}"
    )
    console.print(record.info, style="dim")
    console.print()
    console.print(record.content, markup=False, highlight=False)


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    content_dir: Path = typer.Option(None, "--content-dir", help="Local story directory"),
    remote: Optional[str] = typer.Option(None, "--remote", help="Fetch stories from this base URL"),
) -> None:
    """Start the web interface."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - defensive
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    config = _build_config(content_dir, remote, AppConfig().fetch_timeout)
    deps.set_config(config)

    source = config.remote_url or config.resolve_content_dir(Path.cwd())
    if not config.remote_url and not Path(source).exists():
        console.print("[yellow]Warning: content directory not found, only the fallback story will be tried.[/yellow]")

    console.print(f"Starting web interface on http://{host}:{port} (stories: {source})")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
