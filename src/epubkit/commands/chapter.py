"""Chapter export command implementation."""

import re
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress

from epubkit.core.output_writer import OutputWriter
from epubkit.core.reader import EpubReader
from epubkit.models.book import Book


_RANGE_RE = re.compile(r"(\d+)(?:\s*-\s*(\d+))?")


def parse_chapter_selection(selection: str, total_chapters: int) -> list[int]:
    """Turn a 1-based selection such as "1,3,5-7" or "all" into spine indices.

    Raises:
        ValueError: If a part is not a position or range, or falls outside the spine
    """
    selection = selection.strip().lower()
    if selection == "all":
        return list(range(total_chapters))

    indices: set[int] = set()
    for part in filter(None, (p.strip() for p in selection.split(","))):
        match = _RANGE_RE.fullmatch(part)
        if match is None:
            raise ValueError(f"Not a spine position or range: {part!r}")
        first = int(match.group(1))
        last = int(match.group(2) or first)
        if first > last:
            raise ValueError(f"Range runs backwards: {part!r}")
        if first < 1 or last > total_chapters:
            raise ValueError(f"{part!r} is outside the spine (1-{total_chapters})")
        indices.update(range(first - 1, last))
    return sorted(indices)


def get_default_output_dir(book_path: Path) -> Path:
    """Get default output directory based on book filename."""
    clean_stem = re.sub(r"[^\w\s-]", "", book_path.stem).strip()
    clean_stem = re.sub(r"[-\s]+", "_", clean_stem)
    return book_path.parent / f"{clean_stem}_nodes"


def execute_chapter(
    reader: EpubReader,
    book: Book,
    book_path: Path,
    chapters: str,
    output_dir: Path | None,
    quiet: bool,
    console: Console,
) -> None:
    """Parse the selected spine entries and write their node trees."""
    spine = book.spine_resources
    selected_indices = parse_chapter_selection(chapters, len(spine))

    if not selected_indices:
        console.print("[yellow]No chapters selected. Exiting.[/]")
        return

    final_output_dir = output_dir or get_default_output_dir(book_path)
    writer = OutputWriter(final_output_dir, book_path)
    chapter_metadata = []

    with Progress(console=console, disable=quiet) as progress:
        task = progress.add_task("Parsing chapters...", total=len(selected_indices))

        for idx in selected_indices:
            chapter = reader.load_chapter(book, spine[idx])
            _, metadata = writer.write_chapter(chapter, idx)
            chapter_metadata.append(metadata)
            progress.update(
                task, advance=1, description=f"Parsing: {spine[idx].href[:40]}..."
            )

    manifest_path = writer.write_manifest(book, selected_indices, chapter_metadata)

    if quiet:
        return

    failed = [m for m in chapter_metadata if m.error]
    summary_lines = [
        f"[green]Exported {len(chapter_metadata) - len(failed)} chapter(s)[/]",
        "",
        f"[dim]Output directory:[/] {final_output_dir}",
        f"[dim]Manifest:[/] {manifest_path.name}",
    ]
    for metadata in failed:
        summary_lines.append(f"[yellow]! {metadata.source_file}: {metadata.error}[/]")

    console.print()
    console.print(Panel("\n".join(summary_lines), title="Complete", border_style="green"))
