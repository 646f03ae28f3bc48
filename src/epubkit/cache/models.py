"""Cache data models."""

from datetime import datetime

from pydantic import BaseModel, Field


class ExtractionRecord(BaseModel):
    """Metadata for extraction cache invalidation."""

    archive_path: str
    file_hash: str
    file_size: int
    file_mtime: float
    extracted_at: datetime = Field(default_factory=datetime.now)
    cache_version: str = "1.0"


class CacheIndex(BaseModel):
    """Index mapping archive paths to cache entries."""

    entries: dict[str, str] = Field(default_factory=dict)  # path -> hash
