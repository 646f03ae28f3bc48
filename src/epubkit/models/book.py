"""Data models for book structure."""

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from epubkit.core.media_types import MediaType
from epubkit.models.metadata import Metadata

if TYPE_CHECKING:
    from epubkit.core.resources import ResourceResolver


class EpubResource(BaseModel):
    """One manifest entry."""

    model_config = ConfigDict(frozen=True)

    id: str
    properties: str | None = None
    media_type: MediaType
    href: str  # relative to the OPF document
    full_href: str  # absolute path on disk

    def has_property(self, name: str) -> bool:
        return name in (self.properties or "").split()


class SpineReference(BaseModel):
    """Single entry in the reading order."""

    resource: EpubResource
    linear: bool = True


class Spine(BaseModel):
    """Ordered reading sequence."""

    spine_references: list[SpineReference] = Field(default_factory=list)
    toc_id: str | None = None
    page_progression_direction: str | None = None

    @property
    def is_rtl(self) -> bool:
        return self.page_progression_direction == "rtl"


class GuideReference(BaseModel):
    """Entry of the EPUB 2 <guide> element."""

    type: str
    title: str | None = None
    href: str
    resource: EpubResource | None = None


class TocReference(BaseModel):
    """Single entry in table of contents."""

    title: str
    resource: EpubResource | None = None
    fragment_id: str | None = None
    children: list["TocReference"] = Field(default_factory=list)

    def flatten(self, level: int = 0) -> list[tuple[int, "TocReference"]]:
        """Depth-first list of (level, reference) pairs, self included."""
        entries = [(level, self)]
        for child in self.children:
            entries.extend(child.flatten(level + 1))
        return entries


class Book(BaseModel):
    """Complete parsed EPUB structure."""

    name: str
    version: float = 3.0
    unique_identifier: str | None = None
    extracted_dir: str
    base_path: str
    opf_resource: EpubResource
    toc_resource: EpubResource | None = None
    manifest: list[EpubResource] = Field(default_factory=list)
    metadata: Metadata | None = None
    spine: Spine | None = None
    guide: list[GuideReference] = Field(default_factory=list)
    cover_image: EpubResource | None = None
    css_string: str = ""
    table_of_contents: list[TocReference] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def title(self) -> str | None:
        return self.metadata.title if self.metadata else None

    @property
    def authors(self) -> list[str]:
        if self.metadata is None:
            return []
        return [author.name for author in self.metadata.creators]

    @property
    def spine_resources(self) -> list[EpubResource]:
        if self.spine is None:
            return []
        return [ref.resource for ref in self.spine.spine_references]

    def resolver(self) -> "ResourceResolver":
        from epubkit.core.resources import ResourceResolver

        return ResourceResolver(self.manifest)
