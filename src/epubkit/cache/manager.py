"""Extraction cache with hash/mtime invalidation."""

import hashlib
import json
import logging
import shutil
from datetime import datetime
from pathlib import Path

from epubkit.cache.models import CacheIndex, ExtractionRecord
from epubkit.core.archive import extract, is_extracted

log = logging.getLogger(__name__)


class CacheManager:
    """Keeps one extracted copy of every archive, keyed by content hash."""

    INDEX_FILE = "index.json"
    RECORD_FILE = "extraction.json"
    BOOKS_DIR = "books"
    CACHE_VERSION = "1.0"

    def __init__(self, cache_root: Path):
        self.cache_root = cache_root
        self.index_path = self.cache_root / self.INDEX_FILE
        self._index: CacheIndex | None = None

    def _ensure_cache_dir(self) -> None:
        self.cache_root.mkdir(parents=True, exist_ok=True)

    def _load_index(self) -> CacheIndex:
        """Load or create cache index."""
        if self._index is not None:
            return self._index

        if self.index_path.exists():
            try:
                data = json.loads(self.index_path.read_text())
                self._index = CacheIndex.model_validate(data)
            except (OSError, ValueError):
                log.warning("Cache index %s is unreadable, starting over", self.index_path)
                self._index = CacheIndex()
        else:
            self._index = CacheIndex()

        return self._index

    def _save_index(self) -> None:
        self._ensure_cache_dir()
        index = self._load_index()
        self.index_path.write_text(index.model_dump_json(indent=2))

    def _book_dir(self, file_hash: str) -> Path:
        return self.cache_root / self.BOOKS_DIR / file_hash

    def get_file_hash(self, file_path: Path) -> str:
        """Compute SHA-256 hash of a file."""
        sha256 = hashlib.sha256()
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(8192), b""):
                sha256.update(chunk)
        return sha256.hexdigest()

    def _load_record(self, file_hash: str) -> ExtractionRecord | None:
        record_file = self._book_dir(file_hash) / self.RECORD_FILE
        if not record_file.exists():
            return None
        try:
            return ExtractionRecord.model_validate_json(record_file.read_text())
        except (OSError, ValueError):
            return None

    def cached_dir(self, archive_path: Path) -> Path | None:
        """Return the extraction directory if it is still valid for the archive."""
        if not self.cache_root.exists():
            return None

        index = self._load_index()
        path_key = str(archive_path.resolve())
        file_hash = index.entries.get(path_key)
        if file_hash is None:
            return None

        record = self._load_record(file_hash)
        if record is None or record.cache_version != self.CACHE_VERSION:
            return None

        content_dir = self._book_dir(file_hash) / "content"
        if not is_extracted(content_dir):
            log.debug("Cached extraction %s is incomplete", content_dir)
            return None

        stat = archive_path.stat()

        # Fast path: check mtime and size first
        if record.file_mtime == stat.st_mtime and record.file_size == stat.st_size:
            return content_dir

        # Slow path: mtime changed, verify with hash
        if self.get_file_hash(archive_path) == record.file_hash:
            record.file_mtime = stat.st_mtime
            (self._book_dir(file_hash) / self.RECORD_FILE).write_text(
                record.model_dump_json(indent=2)
            )
            return content_dir

        return None

    def extract(self, archive_path: Path) -> Path:
        """Extract the archive into the cache unless a valid copy exists."""
        cached = self.cached_dir(archive_path)
        if cached is not None:
            log.debug("Using cached extraction %s", cached)
            return cached

        stat = archive_path.stat()
        file_hash = self.get_file_hash(archive_path)
        book_dir = self._book_dir(file_hash)
        if self._load_record(file_hash) is None and (book_dir / "content").exists():
            # Left behind by an interrupted extraction
            shutil.rmtree(book_dir / "content")
        content_dir = extract(archive_path, book_dir / "content")

        record = ExtractionRecord(
            archive_path=str(archive_path.resolve()),
            file_hash=file_hash,
            file_size=stat.st_size,
            file_mtime=stat.st_mtime,
            extracted_at=datetime.now(),
            cache_version=self.CACHE_VERSION,
        )
        (book_dir / self.RECORD_FILE).write_text(record.model_dump_json(indent=2))

        index = self._load_index()
        index.entries[str(archive_path.resolve())] = file_hash
        self._save_index()
        return content_dir

    def clear_cache(self) -> int:
        """Remove extracted books and the index. Returns number of books removed.

        Only files the cache wrote are deleted; anything else under the cache
        root is left alone.
        """
        books_dir = self.cache_root / self.BOOKS_DIR
        count = 0
        if books_dir.is_dir():
            count = sum(1 for entry in books_dir.iterdir() if entry.is_dir())
            shutil.rmtree(books_dir)
        self.index_path.unlink(missing_ok=True)
        self._index = None
        return count

    def list_cached(self) -> list[tuple[str, str]]:
        """List all cached archives. Returns list of (path, hash)."""
        index = self._load_index()
        return list(index.entries.items())
