"""Main CLI application."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from epubkit.cache.manager import CacheManager
from epubkit.commands.chapter import execute_chapter
from epubkit.commands.info import display_info, display_toc
from epubkit.config import ReaderConfig
from epubkit.core.errors import EpubError
from epubkit.core.reader import EpubReader
from epubkit.models.book import Book

app = typer.Typer(
    name="epubkit",
    help="Parse EPUB files into a structured document model.",
    add_completion=False,
)

console = Console()

# Cache subcommand group
cache_app = typer.Typer(help="Extraction cache commands")
app.add_typer(cache_app, name="cache")

BookPath = Annotated[
    Path,
    typer.Argument(
        help="Path to the EPUB file or an extracted EPUB directory",
        exists=True,
        file_okay=True,
        dir_okay=True,
        resolve_path=True,
    ),
]

CacheDir = Annotated[
    Optional[Path],
    typer.Option(
        "--cache-dir",
        help="Directory holding extracted books (default: ~/.cache/epubkit)",
    ),
]


def _config(cache_dir: Path | None) -> ReaderConfig:
    if cache_dir is None:
        return ReaderConfig()
    return ReaderConfig(cache_dir=cache_dir.resolve())


def _read_book(reader: EpubReader, book_path: Path) -> Book:
    try:
        return reader.read_epub(book_path)
    except EpubError as e:
        console.print(f"[red]Error reading book: {e.message}[/]")
        raise typer.Exit(1)


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log parsing details"),
    ] = False,
) -> None:
    """Parse EPUB files into a structured document model."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@app.command()
def info(book_path: BookPath, cache_dir: CacheDir = None) -> None:
    """Display book metadata and reading order."""
    reader = EpubReader(_config(cache_dir))
    book = _read_book(reader, book_path)
    display_info(book, console)


@app.command()
def toc(book_path: BookPath, cache_dir: CacheDir = None) -> None:
    """Display the table of contents."""
    reader = EpubReader(_config(cache_dir))
    book = _read_book(reader, book_path)
    display_toc(book, console)


@app.command()
def chapter(
    book_path: BookPath,
    chapters: Annotated[
        str,
        typer.Argument(
            help="Spine entries to parse: '1,3,5-7' or 'all' (use 'epubkit info' to see indices)",
        ),
    ] = "all",
    output_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--output-dir",
            "-o",
            help="Output directory (default: {book_name}_nodes/)",
        ),
    ] = None,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress progress output",
        ),
    ] = False,
    cache_dir: CacheDir = None,
) -> None:
    """Parse chapters into content node trees and write them as JSON."""
    reader = EpubReader(_config(cache_dir))
    book = _read_book(reader, book_path)

    try:
        execute_chapter(
            reader=reader,
            book=book,
            book_path=book_path,
            chapters=chapters,
            output_dir=output_dir,
            quiet=quiet,
            console=console,
        )
    except (OSError, ValueError) as e:
        console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)


@cache_app.command("clear")
def cache_clear(cache_dir: CacheDir = None) -> None:
    """Clear all extracted books."""
    cache_manager = CacheManager(_config(cache_dir).cache_dir)
    count = cache_manager.clear_cache()

    if count > 0:
        console.print(f"[green]Cleared {count} cached book(s)[/]")
    else:
        console.print("[dim]No cache to clear[/]")


@cache_app.command("list")
def cache_list(cache_dir: CacheDir = None) -> None:
    """List all extracted books."""
    cache_manager = CacheManager(_config(cache_dir).cache_dir)
    cached = cache_manager.list_cached()

    if not cached:
        console.print("[dim]No cached books[/]")
        return

    table = Table(title="Cached Books", show_header=True, header_style="bold cyan")
    table.add_column("Path", style="white")
    table.add_column("Hash", style="dim", width=12)

    for path, file_hash in cached:
        # Truncate path for display
        display_path = path if len(path) < 60 else "..." + path[-57:]
        table.add_row(display_path, file_hash[:12])

    console.print(table)


if __name__ == "__main__":
    app()
