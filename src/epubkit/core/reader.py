"""Read EPUB files into a Book and parse chapters on demand."""

import logging
from pathlib import Path
from typing import Iterator

from lxml import etree

from epubkit.cache.manager import CacheManager
from epubkit.config import ReaderConfig
from epubkit.core.archive import extract, is_extracted
from epubkit.core.container import resolve_container
from epubkit.core.css_parser import CSSParser
from epubkit.core.errors import BookNotAvailableError, InvalidPathError
from epubkit.core.html_transformer import ChapterContext, HTMLTransformer, load_document
from epubkit.core.media_types import XHTML
from epubkit.core.package_parser import PackageParser
from epubkit.core.toc_builder import build_table_of_contents
from epubkit.models.book import Book, EpubResource
from epubkit.models.chapter import ParsedChapter
from epubkit.models.nodes import ContentNode

log = logging.getLogger(__name__)


class EpubReader:
    """Entry point of the parsing pipeline.

    Holds configuration only; every call works on the values passed in, so a
    reader can be shared and chapter parses can run concurrently.
    """

    def __init__(self, config: ReaderConfig | None = None, use_cache: bool = True):
        self.config = config or ReaderConfig()
        self.use_cache = use_cache

    def _unpack(self, epub_path: Path, unzip_dir: Path | None) -> Path:
        """Return a directory holding the extracted book."""
        if epub_path.is_dir():
            if not is_extracted(epub_path):
                raise InvalidPathError("Directory is not an extracted EPUB", str(epub_path))
            return epub_path

        if unzip_dir is not None:
            return extract(epub_path, unzip_dir / epub_path.stem)
        if self.use_cache:
            return CacheManager(self.config.cache_dir).extract(epub_path)
        raise InvalidPathError(
            "No extraction directory given and caching is disabled", str(epub_path)
        )

    def read_epub(self, epub_path: Path | str, unzip_dir: Path | None = None) -> Book:
        """Load the book structure: metadata, manifest, spine and TOC.

        Args:
            epub_path: Path to an .epub archive or an already extracted directory
            unzip_dir: Directory to extract into instead of the cache

        Raises:
            BookNotAvailableError: If nothing exists at epub_path
            InvalidPathError: If the path cannot be read as an EPUB
            PackageParseError: If the package document is unreadable or malformed
        """
        epub_path = Path(epub_path)
        if not epub_path.exists():
            raise BookNotAvailableError("No book at path", str(epub_path))
        if epub_path.is_file() and epub_path.suffix.lower() != ".epub":
            raise InvalidPathError(f"Not an .epub file: {epub_path.suffix}", str(epub_path))

        extracted_dir = self._unpack(epub_path, unzip_dir)
        container = resolve_container(extracted_dir)

        parser = PackageParser(container.base_path, container.opf_href, self.config)
        package = parser.parse_file(extracted_dir / container.opf_href)

        book = Book(
            name=epub_path.stem,
            version=package.version,
            unique_identifier=package.unique_identifier,
            extracted_dir=str(extracted_dir),
            base_path=str(container.base_path),
            opf_resource=package.opf_resource,
            toc_resource=package.toc_resource,
            manifest=package.manifest,
            metadata=package.metadata,
            spine=package.spine,
            guide=package.guide,
            cover_image=package.cover_image,
            css_string=package.css_string,
            warnings=package.warnings,
        )

        toc = build_table_of_contents(book.resolver(), book.toc_resource, book.version)
        book.table_of_contents = toc.references
        if toc.warning and toc.warning not in book.warnings:
            book.warnings.append(toc.warning)

        log.info(
            "Read %s: %d resources, %d spine entries, %d TOC entries",
            book.name,
            len(book.manifest),
            len(book.spine_resources),
            len(book.table_of_contents),
        )
        return book

    def chapter_context(self, book: Book) -> ChapterContext:
        return ChapterContext(
            resolver=book.resolver(),
            base_path=Path(book.base_path),
            css=CSSParser(book.css_string),
            config=self.config,
        )

    def load_chapter(self, book: Book, resource: EpubResource) -> ParsedChapter:
        """Parse one chapter, reporting failure through ParsedChapter.error."""
        try:
            data = Path(resource.full_href).read_bytes()
            soup = load_document(data, strict=resource.media_type == XHTML)
            title, nodes = HTMLTransformer(self.chapter_context(book)).transform_document(soup)
        except (OSError, ValueError, RecursionError, etree.XMLSyntaxError) as e:
            log.warning("Could not parse chapter %s: %s", resource.href, e)
            return ParsedChapter(resource=resource, error=str(e))
        return ParsedChapter(resource=resource, title=title, nodes=nodes)

    def parse_chapter(self, book: Book, resource: EpubResource) -> list[ContentNode]:
        """Content nodes of a chapter; empty when the chapter cannot be parsed."""
        return self.load_chapter(book, resource).nodes

    def iter_chapters(self, book: Book, linear_only: bool = False) -> Iterator[ParsedChapter]:
        """Parse every spine entry in reading order."""
        if book.spine is None:
            return
        for ref in book.spine.spine_references:
            if linear_only and not ref.linear:
                continue
            yield self.load_chapter(book, ref.resource)
