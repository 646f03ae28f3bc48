"""Info and toc command implementations."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from epubkit.models.book import Book, TocReference


def build_info_lines(book: Book) -> list[str]:
    """Lines of the book information panel."""
    metadata = book.metadata
    info_lines = [
        f"[bold]{book.title or book.name}[/]",
        "",
        f"[dim]Author(s):[/] {', '.join(book.authors) or 'Unknown'}",
        f"[dim]EPUB version:[/] {book.version:g}",
    ]

    if metadata is not None:
        info_lines.append(f"[dim]Language:[/] {metadata.language}")
        info_lines.append(
            f"[dim]Publisher:[/] {', '.join(metadata.publishers) or 'Unknown'}"
        )
        if metadata.identifiers:
            info_lines.append(f"[dim]Identifier:[/] {metadata.identifiers[0].value}")

    info_lines.append(f"[dim]Resources:[/] {len(book.manifest)}")
    info_lines.append(f"[dim]Spine entries:[/] {len(book.spine_resources)}")
    if book.spine is not None and book.spine.is_rtl:
        info_lines.append("[dim]Direction:[/] right to left")
    info_lines.append(
        f"[dim]Cover:[/] {book.cover_image.href if book.cover_image else 'None'}"
    )
    info_lines.append(
        f"[dim]TOC:[/] {book.toc_resource.href if book.toc_resource else 'None'}"
    )

    if book.warnings:
        info_lines.append("")
        for warning in book.warnings:
            info_lines.append(f"[yellow]! {warning}[/]")

    return info_lines


def display_info(book: Book, console: Console) -> None:
    """Display book metadata and reading order."""
    console.print()
    console.print(
        Panel(
            "\n".join(build_info_lines(book)),
            title="Book Information",
            border_style="green",
        )
    )

    console.print()
    table = Table(title="Reading Order", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Id", style="white")
    table.add_column("Href", style="white")
    table.add_column("Linear", justify="center", style="green")

    if book.spine is not None:
        for index, ref in enumerate(book.spine.spine_references):
            table.add_row(
                str(index + 1),
                ref.resource.id,
                ref.resource.href,
                "yes" if ref.linear else "no",
            )

    console.print(table)
    console.print()


def _add_toc_branch(tree: Tree, reference: TocReference) -> None:
    target = reference.resource.href if reference.resource else "[red]unresolved[/]"
    if reference.fragment_id:
        target = f"{target}#{reference.fragment_id}"
    branch = tree.add(f"{reference.title} [dim]({target})[/]")
    for child in reference.children:
        _add_toc_branch(branch, child)


def display_toc(book: Book, console: Console) -> None:
    """Display the table of contents as a tree."""
    if not book.table_of_contents:
        console.print("[yellow]No table of contents found[/]")
        return

    tree = Tree(f"[bold cyan]{book.title or book.name}[/]")
    for reference in book.table_of_contents:
        _add_toc_branch(tree, reference)
    console.print(tree)
