from .config import ReaderConfig
from .core.errors import (
    BookNotAvailableError,
    EpubError,
    InvalidPathError,
    PackageParseError,
)
from .core.reader import EpubReader
from .models import Book, EpubResource, ParsedChapter, TocReference

__all__ = [
    "EpubReader",
    "ReaderConfig",
    "Book",
    "EpubResource",
    "ParsedChapter",
    "TocReference",
    "EpubError",
    "BookNotAvailableError",
    "InvalidPathError",
    "PackageParseError",
]
