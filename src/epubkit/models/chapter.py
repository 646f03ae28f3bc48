"""Result of parsing one chapter document."""

from pydantic import BaseModel, Field

from epubkit.models.book import EpubResource
from epubkit.models.nodes import ContentNode, node_text


class ParsedChapter(BaseModel):
    """Nodes of a chapter, or the reason it could not be parsed."""

    resource: EpubResource
    title: str | None = None
    nodes: list[ContentNode] = Field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def text(self) -> str:
        return "\n".join(t for t in (node_text(node) for node in self.nodes) if t)

    @property
    def word_count(self) -> int:
        return len(self.text.split())
