"""Data models for OPF package metadata."""

from pydantic import BaseModel, Field

DEFAULT_LANGUAGE = "en-US"


class Author(BaseModel):
    """A dc:creator or dc:contributor entry."""

    name: str
    role: str | None = None
    file_as: str | None = None
    # Element id, used to apply EPUB 3 refinements
    element_id: str | None = Field(default=None, exclude=True)


class Identifier(BaseModel):
    """A dc:identifier entry."""

    id: str | None = None
    scheme: str | None = None
    value: str


class EventDate(BaseModel):
    """A dc:date entry with its optional opf:event."""

    date: str
    event: str | None = None


class Meta(BaseModel):
    """A non Dublin Core <meta> tag (EPUB 2 name/content or EPUB 3 property)."""

    name: str | None = None
    content: str | None = None
    id: str | None = None
    property: str | None = None
    value: str | None = None
    refines: str | None = None


class Metadata(BaseModel):
    """Book-level metadata collected from the package document."""

    titles: list[str] = Field(default_factory=list)
    creators: list[Author] = Field(default_factory=list)
    identifiers: list[Identifier] = Field(default_factory=list)
    dates: list[EventDate] = Field(default_factory=list)
    language: str = DEFAULT_LANGUAGE
    declared_language: str | None = None
    subjects: list[str] = Field(default_factory=list)
    descriptions: list[str] = Field(default_factory=list)
    publishers: list[str] = Field(default_factory=list)
    rights: list[str] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)
    format: str | None = None
    meta_attributes: list[Meta] = Field(default_factory=list)

    @property
    def title(self) -> str | None:
        return self.titles[0] if self.titles else None

    def find_meta(
        self, name: str | None = None, property: str | None = None
    ) -> Meta | None:
        """Return the first <meta> matching the given name or property."""
        for meta in self.meta_attributes:
            if name is not None and meta.name == name:
                return meta
            if property is not None and meta.property == property:
                return meta
        return None
