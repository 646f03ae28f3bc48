"""Data models."""

from epubkit.models.book import (
    Book,
    EpubResource,
    GuideReference,
    Spine,
    SpineReference,
    TocReference,
)
from epubkit.models.chapter import ParsedChapter
from epubkit.models.metadata import Author, EventDate, Identifier, Meta, Metadata
from epubkit.models.nodes import (
    Align,
    AnchorNode,
    ContentNode,
    DivNode,
    FieldsetNode,
    HeadingNode,
    ImageNode,
    LineBreakNode,
    ListItemNode,
    ListNode,
    Margin,
    NodeStyle,
    ParagraphNode,
    SpanNode,
    TextNode,
)
from epubkit.models.output import BookOutput, ChapterMetadata, ChapterOutput

__all__ = [
    # Book models
    "Book",
    "EpubResource",
    "GuideReference",
    "Spine",
    "SpineReference",
    "TocReference",
    "ParsedChapter",
    # Metadata models
    "Author",
    "EventDate",
    "Identifier",
    "Meta",
    "Metadata",
    # Content nodes
    "Align",
    "AnchorNode",
    "ContentNode",
    "DivNode",
    "FieldsetNode",
    "HeadingNode",
    "ImageNode",
    "LineBreakNode",
    "ListItemNode",
    "ListNode",
    "Margin",
    "NodeStyle",
    "ParagraphNode",
    "SpanNode",
    "TextNode",
    # Output models
    "BookOutput",
    "ChapterMetadata",
    "ChapterOutput",
]
