"""Write parsed chapters to output directory."""

from datetime import datetime
from pathlib import Path

from epubkit.models.book import Book
from epubkit.models.chapter import ParsedChapter
from epubkit.models.nodes import child_nodes
from epubkit.models.output import BookOutput, ChapterMetadata, ChapterOutput


def count_nodes(nodes: list) -> int:
    """Number of nodes in a forest, descendants included."""
    return sum(1 + count_nodes(child_nodes(node)) for node in nodes)


class OutputWriter:
    """Write chapter node trees as JSON files."""

    def __init__(self, output_dir: Path, source_path: Path):
        """Initialize output writer.

        Args:
            output_dir: Directory to write output files
            source_path: Path to the source EPUB
        """
        self.output_dir = output_dir
        self.source_path = source_path
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def write_chapter(
        self, chapter: ParsedChapter, spine_index: int
    ) -> tuple[Path, ChapterMetadata]:
        """Write single chapter to JSON file."""
        metadata = ChapterMetadata(
            chapter_id=chapter.resource.id,
            spine_index=spine_index,
            title=chapter.title,
            source_file=chapter.resource.href,
            source_path=str(self.source_path),
            extracted_at=datetime.now(),
            word_count=chapter.word_count,
            node_count=count_nodes(chapter.nodes),
            error=chapter.error,
        )
        output = ChapterOutput(metadata=metadata, nodes=chapter.nodes)

        filepath = self.output_dir / f"chapter_{spine_index + 1:03d}.json"
        filepath.write_text(output.model_dump_json(indent=2))

        return filepath, metadata

    def write_manifest(
        self,
        book: Book,
        exported_indices: list[int],
        chapter_metadata: list[ChapterMetadata],
    ) -> Path:
        """Write book manifest file."""
        manifest = BookOutput(
            book_title=book.title,
            authors=book.authors,
            version=book.version,
            total_chapters=len(book.spine_resources),
            exported_chapters=exported_indices,
            output_directory=str(self.output_dir),
            created_at=datetime.now(),
            chapters=chapter_metadata,
            warnings=book.warnings,
        )

        filepath = self.output_dir / "manifest.json"
        filepath.write_text(manifest.model_dump_json(indent=2))
        return filepath
