"""Data models for output format."""

from datetime import datetime

from pydantic import BaseModel, Field

from epubkit.models.nodes import ContentNode


class ChapterMetadata(BaseModel):
    """Metadata accompanying an exported chapter."""

    chapter_id: str
    spine_index: int
    title: str | None = None
    source_file: str
    source_path: str
    extracted_at: datetime = Field(default_factory=datetime.now)
    word_count: int
    node_count: int
    error: str | None = None


class ChapterOutput(BaseModel):
    """Complete chapter output: metadata plus the node tree."""

    metadata: ChapterMetadata
    nodes: list[ContentNode] = Field(default_factory=list)


class BookOutput(BaseModel):
    """Book manifest written next to exported chapters."""

    book_title: str | None = None
    authors: list[str] = Field(default_factory=list)
    version: float
    total_chapters: int
    exported_chapters: list[int]
    output_directory: str
    created_at: datetime = Field(default_factory=datetime.now)
    chapters: list[ChapterMetadata] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
