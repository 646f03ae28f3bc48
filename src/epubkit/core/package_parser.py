"""OPF package document parsing: manifest, metadata, spine and guide."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from lxml import etree

from epubkit.config import ReaderConfig
from epubkit.core.errors import PackageParseError
from epubkit.core.media_types import NCX, OPF, MediaType
from epubkit.core.resources import ResourceResolver, resolve_full_href
from epubkit.core.xmlutils import (
    children_named,
    element_text,
    first_child_named,
    get_attr,
    local_name,
    namespace,
    parse_xml,
)
from epubkit.models.book import EpubResource, GuideReference, Spine, SpineReference
from epubkit.models.metadata import Author, EventDate, Identifier, Meta, Metadata

log = logging.getLogger(__name__)

DC_NS = "http://purl.org/dc/elements/1.1/"
DEFAULT_VERSION = 3.0


@dataclass
class PackageDocument:
    """Everything the OPF contributes to a Book."""

    opf_resource: EpubResource
    version: float
    unique_identifier: str | None
    manifest: list[EpubResource]
    metadata: Metadata
    spine: Spine
    guide: list[GuideReference]
    cover_image: EpubResource | None
    toc_resource: EpubResource | None
    css_string: str
    warnings: list[str] = field(default_factory=list)


class PackageParser:
    """Parse an OPF document relative to its base path."""

    def __init__(self, base_path: Path, opf_href: str, config: ReaderConfig | None = None):
        self.base_path = base_path
        self.opf_href = opf_href
        self.config = config or ReaderConfig()
        self.warnings: list[str] = []

    def _warn(self, message: str) -> None:
        log.warning(message)
        self.warnings.append(message)

    def parse_file(self, opf_path: Path) -> PackageDocument:
        try:
            data = opf_path.read_bytes()
        except OSError as e:
            raise PackageParseError(f"Cannot read package document: {e}", str(opf_path)) from e
        return self.parse(data)

    def parse(self, opf_bytes: bytes) -> PackageDocument:
        """Parse the package document.

        Raises:
            PackageParseError: If the document is not well-formed XML
        """
        try:
            root = parse_xml(opf_bytes)
        except etree.XMLSyntaxError as e:
            raise PackageParseError(f"Malformed package document: {e}", self.opf_href) from e

        version = self._parse_version(root.get("version"))
        unique_identifier = root.get("unique-identifier")

        manifest = self._parse_manifest(first_child_named(root, "manifest"))
        resolver = ResourceResolver(manifest)
        metadata = self._parse_metadata(first_child_named(root, "metadata"))
        spine = self._parse_spine(first_child_named(root, "spine"), resolver)
        guide = self._parse_guide(first_child_named(root, "guide"), resolver)

        cover_image = self._find_cover(metadata, resolver)
        if cover_image is None:
            log.debug("No cover image declared in %s", self.opf_href)

        toc_resource = self._find_toc(resolver)
        if toc_resource is None:
            self._warn("No table of contents resource in manifest")

        return PackageDocument(
            opf_resource=EpubResource(
                id=unique_identifier or "opf",
                media_type=OPF,
                href=self.opf_href,
                full_href=str(self.base_path / Path(self.opf_href).name),
            ),
            version=version,
            unique_identifier=unique_identifier,
            manifest=manifest,
            metadata=metadata,
            spine=spine,
            guide=guide,
            cover_image=cover_image,
            toc_resource=toc_resource,
            css_string=self._load_stylesheet(manifest),
            warnings=list(self.warnings),
        )

    def _parse_version(self, value: str | None) -> float:
        if value is None:
            return DEFAULT_VERSION
        try:
            return float(value.strip())
        except ValueError:
            self._warn(f"Unparsable package version {value!r}, assuming {DEFAULT_VERSION}")
            return DEFAULT_VERSION

    def _parse_manifest(self, manifest_el: etree._Element | None) -> list[EpubResource]:
        if manifest_el is None:
            self._warn("Package document has no manifest")
            return []

        resources = []
        for item in children_named(manifest_el, "item"):
            item_id = item.get("id")
            href = item.get("href")
            if not item_id or not href:
                self._warn(f"Skipping manifest item without id or href: {item_id or href}")
                continue
            resources.append(
                EpubResource(
                    id=item_id,
                    properties=item.get("properties"),
                    media_type=MediaType.by(item.get("media-type", ""), href),
                    href=href,
                    full_href=resolve_full_href(self.base_path, href),
                )
            )
        return resources

    def _parse_metadata(self, metadata_el: etree._Element | None) -> Metadata:
        metadata = Metadata(language=self.config.default_language)
        if metadata_el is None:
            self._warn("Package document has no metadata")
            return metadata

        # iter() also reaches EPUB 2 <dc-metadata>/<x-metadata> wrappers
        for child in metadata_el.iter():
            if child is metadata_el:
                continue
            name = local_name(child)
            if name is None:
                continue
            text = element_text(child)

            if namespace(child) == DC_NS:
                self._apply_dc_element(metadata, name, child, text)
            elif name == "meta":
                metadata.meta_attributes.append(
                    Meta(
                        name=child.get("name"),
                        content=child.get("content"),
                        id=child.get("id"),
                        property=child.get("property"),
                        value=text or None,
                        refines=child.get("refines"),
                    )
                )

        self._apply_refinements(metadata)
        return metadata

    def _apply_dc_element(
        self, metadata: Metadata, name: str, element: etree._Element, text: str
    ) -> None:
        if name == "title":
            if text:
                metadata.titles.append(text)
        elif name in ("creator", "contributor"):
            if text:
                metadata.creators.append(
                    Author(
                        name=text,
                        role=get_attr(element, "role"),
                        file_as=get_attr(element, "file-as"),
                        element_id=element.get("id"),
                    )
                )
        elif name == "identifier":
            metadata.identifiers.append(
                Identifier(id=element.get("id"), scheme=get_attr(element, "scheme"), value=text)
            )
        elif name == "date":
            metadata.dates.append(EventDate(date=text, event=get_attr(element, "event")))
        elif name == "language":
            if metadata.declared_language is None and text:
                metadata.declared_language = text
                # A bare "en" keeps the regional default
                if text != "en":
                    metadata.language = text
        elif name == "subject":
            metadata.subjects.append(text)
        elif name == "description":
            metadata.descriptions.append(text)
        elif name == "publisher":
            metadata.publishers.append(text)
        elif name == "rights":
            metadata.rights.append(text)
        elif name == "source":
            metadata.sources.append(text)
        elif name == "format":
            metadata.format = text or None

    def _apply_refinements(self, metadata: Metadata) -> None:
        """Copy EPUB 3 role/file-as refinements onto the creators they refine."""
        creators = {a.element_id: a for a in metadata.creators if a.element_id}
        for meta in metadata.meta_attributes:
            if not meta.refines or not meta.value:
                continue
            author = creators.get(meta.refines.lstrip("#"))
            if author is None:
                continue
            if meta.property == "role" and author.role is None:
                author.role = meta.value
            elif meta.property == "file-as" and author.file_as is None:
                author.file_as = meta.value

    def _parse_spine(
        self, spine_el: etree._Element | None, resolver: ResourceResolver
    ) -> Spine:
        if spine_el is None:
            self._warn("Package document has no spine")
            return Spine()

        spine = Spine(
            toc_id=spine_el.get("toc"),
            page_progression_direction=spine_el.get("page-progression-direction"),
        )
        for itemref in children_named(spine_el, "itemref"):
            idref = itemref.get("idref")
            resource = resolver.find_by_id(idref)
            if resource is None:
                self._warn(f"Spine entry {idref!r} is not in the manifest")
                continue
            spine.spine_references.append(
                SpineReference(resource=resource, linear=itemref.get("linear", "yes") != "no")
            )
        return spine

    def _parse_guide(
        self, guide_el: etree._Element | None, resolver: ResourceResolver
    ) -> list[GuideReference]:
        if guide_el is None:
            return []

        references = []
        for reference in children_named(guide_el, "reference"):
            href = reference.get("href")
            ref_type = reference.get("type")
            if not href or not ref_type:
                continue
            references.append(
                GuideReference(
                    type=ref_type,
                    title=reference.get("title"),
                    href=href,
                    resource=resolver.find_by_href(href),
                )
            )
        return references

    def _find_cover(
        self, metadata: Metadata, resolver: ResourceResolver
    ) -> EpubResource | None:
        """Cover by <meta name="cover">, then by id, then by cover-image property."""
        meta = metadata.find_meta(name="cover")
        if meta is not None and meta.content:
            cover = resolver.find_by_id(meta.content) or resolver.find_by_href(meta.content)
            if cover is not None:
                return cover

        for resource in resolver.resources:
            if "cover" in resource.id and resource.media_type.is_image:
                return resource

        return resolver.find_by_property("cover-image")

    def _find_toc(self, resolver: ResourceResolver) -> EpubResource | None:
        return (
            resolver.find_by_media_type(NCX)
            or resolver.find_by_extension(NCX.default_extension)
            or resolver.find_by_property("nav")
        )

    def _load_stylesheet(self, manifest: list[EpubResource]) -> str:
        """Text of the first resource whose id mentions 'style'."""
        stylesheet = next((r for r in manifest if "style" in r.id), None)
        if stylesheet is None:
            return ""
        try:
            return Path(stylesheet.full_href).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            self._warn(f"Cannot read stylesheet {stylesheet.href}: {e}")
            return ""
