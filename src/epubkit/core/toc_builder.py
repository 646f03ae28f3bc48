"""Build the table of contents from an NCX or EPUB 3 navigation document."""

import logging
import warnings
from dataclasses import dataclass
from pathlib import Path

from bs4 import BeautifulSoup, Tag, XMLParsedAsHTMLWarning
from lxml import etree

from epubkit.core.media_types import NCX
from epubkit.core.resources import ResourceResolver, split_fragment
from epubkit.core.xmlutils import children_named, element_text, first_child_named, parse_xml
from epubkit.models.book import EpubResource, TocReference

log = logging.getLogger(__name__)

# Navigation documents are XHTML; parse them as HTML like every other chapter
warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)


@dataclass
class TocResult:
    references: list[TocReference]
    warning: str | None = None


def is_ncx_mode(toc_resource: EpubResource, version: float) -> bool:
    """NCX parsing applies to NCX resources and to EPUB 2 books."""
    return toc_resource.media_type == NCX or version < 3.0


class TocBuilder:
    """Turn a TOC resource into a forest of TocReferences."""

    def __init__(self, resolver: ResourceResolver, toc_resource: EpubResource, version: float):
        self.resolver = resolver
        self.toc_resource = toc_resource
        self.version = version

    def build(self) -> TocResult:
        try:
            data = Path(self.toc_resource.full_href).read_bytes()
        except OSError as e:
            return self._failed(f"Cannot read table of contents {self.toc_resource.href}: {e}")

        if is_ncx_mode(self.toc_resource, self.version):
            references = self._build_from_ncx(data)
        else:
            references = self._build_from_nav(data)

        if references is None:
            return self._failed(
                f"No recognizable table of contents in {self.toc_resource.href}"
            )
        return TocResult(references=references)

    def _failed(self, message: str) -> TocResult:
        log.warning(message)
        return TocResult(references=[], warning=message)

    def _reference(self, title: str, href: str | None) -> TocReference:
        if not href:
            return TocReference(title=title)
        path, fragment = split_fragment(href)
        resource = self.resolver.find_by_href(path, relative_to=self.toc_resource.href) if path else None
        if resource is None and path:
            log.debug("TOC entry %r points to unknown resource %s", title, path)
        if resource is None and not path:
            # Fragment-only link into the TOC document itself
            resource = self.resolver.find_by_href(self.toc_resource.href)
        return TocReference(title=title, resource=resource, fragment_id=fragment)

    # NCX

    def _build_from_ncx(self, data: bytes) -> list[TocReference] | None:
        try:
            root = parse_xml(data)
        except etree.XMLSyntaxError as e:
            log.warning("Malformed NCX %s: %s", self.toc_resource.href, e)
            return None

        nav_map = first_child_named(root, "navMap")
        if nav_map is None:
            return None
        return [self._nav_point(point) for point in children_named(nav_map, "navPoint")]

    def _nav_point(self, nav_point: etree._Element) -> TocReference:
        label = first_child_named(nav_point, "navLabel")
        text_el = first_child_named(label, "text") if label is not None else None
        content = first_child_named(nav_point, "content")

        reference = self._reference(
            element_text(text_el if text_el is not None else label),
            content.get("src") if content is not None else None,
        )
        reference.children = [
            self._nav_point(child) for child in children_named(nav_point, "navPoint")
        ]
        return reference

    # Navigation document

    def _build_from_nav(self, data: bytes) -> list[TocReference] | None:
        soup = BeautifulSoup(data, "lxml")
        body = soup.body
        if body is None:
            return None

        nav = find_nav_element(body)
        if nav is None:
            return None

        ol = nav.find("ol")
        if ol is None:
            return None
        return self._list_items(ol)

    def _list_items(self, ol: Tag) -> list[TocReference]:
        references = []
        for li in ol.find_all("li", recursive=False):
            label = li.find("a", recursive=False) or li.find("span", recursive=False)
            if label is None:
                # Anchors of nested entries belong to those entries
                label = next((a for a in li.find_all("a") if a.find_parent("ol") is ol), None)
            title = label.get_text(" ", strip=True) if label is not None else ""
            href = label.get("href") if label is not None and label.name == "a" else None

            reference = self._reference(title, href)
            nested = li.find("ol", recursive=False)
            if nested is not None:
                reference.children = self._list_items(nested)
            references.append(reference)
        return references


def _is_toc_nav(nav: Tag) -> bool:
    nav_type = nav.get("epub:type") or nav.get("type") or ""
    return "toc" in str(nav_type).split()


def find_nav_element(body: Tag) -> Tag | None:
    """Find the <nav> of a navigation document.

    Direct children of <body> are checked first, then the whole body tree
    depth-first. At each stage a nav typed as 'toc' wins over the first nav.
    """
    for candidates in (
        body.find_all("nav", recursive=False),
        body.find_all("nav"),
    ):
        if candidates:
            return next((nav for nav in candidates if _is_toc_nav(nav)), candidates[0])
    return None


def build_table_of_contents(
    resolver: ResourceResolver, toc_resource: EpubResource | None, version: float
) -> TocResult:
    """Build the TOC forest; a missing resource yields an empty forest."""
    if toc_resource is None:
        return TocResult(references=[], warning="No table of contents resource")
    return TocBuilder(resolver, toc_resource, version).build()
