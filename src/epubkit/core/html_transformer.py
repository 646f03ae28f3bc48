"""Convert chapter XHTML into the content node tree.

Each element is dispatched on its tag name and produces exactly one node.
Tags outside the table become an empty text node. Paragraphs and spans keep
their inline markup as child nodes (text runs, links, spans, breaks and
images) instead of a flattened string.
"""

import logging
import os
import re
import warnings
from dataclasses import dataclass, field
from html.entities import name2codepoint
from pathlib import Path
from urllib.parse import unquote

from bs4 import BeautifulSoup, CData, NavigableString, Tag, XMLParsedAsHTMLWarning
from bs4.element import PreformattedString

from epubkit.config import ReaderConfig
from epubkit.core.css_parser import (
    CSSParser,
    apply_margin,
    em_to_points,
    parse_alignment,
    parse_inline_style,
)
from epubkit.core.resources import ResourceResolver, strip_parent_segments
from epubkit.core.xmlutils import parse_xml
from epubkit.models.nodes import (
    AnchorNode,
    ContentNode,
    DivNode,
    FieldsetNode,
    HeadingNode,
    ImageNode,
    LineBreakNode,
    ListItemNode,
    ListNode,
    NodeStyle,
    ParagraphNode,
    SpanNode,
    TextNode,
)

log = logging.getLogger(__name__)

warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)

HEADING_LEVELS = {"h1": 1, "h2": 2, "h3": 3, "h4": 4}
CONTAINER_TAGS = frozenset({"div", "nav", "section", "figure"})

# Inline formatting whose text is kept but whose markup is dropped
FORMATTING_TAGS = frozenset(
    {
        "em", "strong", "i", "b", "u", "small", "sub", "sup",
        "code", "cite", "q", "abbr", "mark", "s", "big", "tt",
    }
)

_WHITESPACE_RE = re.compile(r"\s+")
_ENTITY_RE = re.compile(rb"&([A-Za-z][A-Za-z0-9]*);")
_XML_ENTITIES = frozenset({b"amp", b"lt", b"gt", b"quot", b"apos"})


@dataclass
class ChapterContext:
    """Read-only book state a chapter is transformed against."""

    resolver: ResourceResolver
    base_path: Path
    css: CSSParser = field(default_factory=CSSParser)
    config: ReaderConfig = field(default_factory=ReaderConfig)


def _numeric_entities(data: bytes) -> bytes:
    """Rewrite HTML named entities as numeric references XML understands."""

    def replace(match: re.Match) -> bytes:
        name = match.group(1)
        if name in _XML_ENTITIES:
            return match.group(0)
        codepoint = name2codepoint.get(name.decode("ascii"))
        if codepoint is None:
            return match.group(0)
        return b"&#%d;" % codepoint

    return _ENTITY_RE.sub(replace, data)


def load_document(data: bytes, strict: bool = True) -> BeautifulSoup:
    """Parse chapter markup.

    With strict, the document must be well-formed XML (as XHTML requires)
    once HTML named entities are rewritten.

    Raises:
        lxml.etree.XMLSyntaxError: If strict and the document is malformed
    """
    if not strict:
        return BeautifulSoup(data, "lxml")

    data = _numeric_entities(data)
    parse_xml(data)
    return BeautifulSoup(data, "lxml-xml")


def _collapse(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text)


def _text(element: Tag) -> str:
    return " ".join(element.get_text().split())


def _class_names(element: Tag) -> list[str]:
    value = element.get("class")
    if not value:
        return []
    if isinstance(value, str):
        return value.split()
    return list(value)


def _tidy_inline(nodes: list) -> list:
    """Merge adjacent text runs, trim the edges and drop empty runs."""
    merged: list = []
    for node in nodes:
        if isinstance(node, TextNode) and merged and isinstance(merged[-1], TextNode):
            merged[-1] = TextNode(text=merged[-1].text + node.text)
        else:
            merged.append(node)

    for index, node in enumerate(merged):
        if not isinstance(node, TextNode):
            continue
        text = node.text
        if index == 0 or isinstance(merged[index - 1], LineBreakNode):
            text = text.lstrip()
        if index == len(merged) - 1 or isinstance(merged[index + 1], LineBreakNode):
            text = text.rstrip()
        merged[index] = TextNode(text=text)

    return [node for node in merged if not (isinstance(node, TextNode) and not node.text)]


class HTMLTransformer:
    """Turn a parsed chapter document into content nodes."""

    def __init__(self, context: ChapterContext):
        self.context = context
        self.config = context.config

    def transform_document(self, soup: BeautifulSoup) -> tuple[str | None, list[ContentNode]]:
        """Return the document title and the nodes of its body."""
        title_el = soup.find("title")
        title = _text(title_el) if title_el is not None else None

        body = soup.find("body")
        if body is None:
            return title or None, []
        return title or None, self.transform_children(body)

    def transform_children(self, element: Tag) -> list[ContentNode]:
        return [self.transform(child) for child in element.children if isinstance(child, Tag)]

    def transform(self, element: Tag) -> ContentNode:
        """Map one element to its node."""
        name = (element.name or "").lower()

        if name in HEADING_LEVELS:
            level = HEADING_LEVELS[name]
            return HeadingNode(
                level=level,
                text=_text(element),
                style=self.resolve_style(element, self._default_style(self.config.heading_font_size(level))),
            )
        if name == "p":
            return ParagraphNode(
                children=self.inline_children(element),
                style=self.resolve_style(element, self._default_style(self.config.paragraph_font_size)),
            )
        if name == "span":
            return self._span(element)
        if name in CONTAINER_TAGS:
            return DivNode(
                children=self.transform_children(element),
                padding=self._padding(element),
            )
        if name in ("ul", "ol"):
            return ListNode(ordered=name == "ol", items=self.transform_children(element))
        if name == "li":
            anchor = element.find("a")
            if anchor is not None:
                return AnchorNode(text=_text(element), href=anchor.get("href", ""))
            return ListItemNode(text=_text(element))
        if name == "a":
            return self._anchor(element)
        if name == "img":
            return self._image(element)
        if name == "br":
            return LineBreakNode()
        if name == "fieldset":
            legend = element.find("legend", recursive=False)
            return FieldsetNode(
                legend=_text(legend) if legend is not None else None,
                children=[
                    self.transform(child)
                    for child in element.children
                    if isinstance(child, Tag) and child is not legend
                ],
            )

        log.debug("Dropping unsupported <%s> element", name)
        return TextNode(text="")

    # Inline content

    def inline_children(self, element: Tag) -> list[ContentNode]:
        nodes: list = []
        for child in element.children:
            self._collect_inline(child, nodes)
        return _tidy_inline(nodes)

    def _collect_inline(self, child, nodes: list) -> None:
        if isinstance(child, NavigableString):
            # Comments, doctypes and processing instructions carry no text
            if isinstance(child, PreformattedString) and not isinstance(child, CData):
                return
            nodes.append(TextNode(text=_collapse(str(child))))
            return
        if not isinstance(child, Tag):
            return

        name = (child.name or "").lower()
        if name == "a":
            nodes.append(self._anchor(child))
        elif name == "span":
            nodes.append(self._span(child))
        elif name == "br":
            nodes.append(LineBreakNode())
        elif name == "img":
            nodes.append(self._image(child))
        elif name in FORMATTING_TAGS:
            for grandchild in child.children:
                self._collect_inline(grandchild, nodes)
        else:
            nodes.append(TextNode(text=_collapse(child.get_text())))

    def _span(self, element: Tag) -> SpanNode:
        return SpanNode(
            children=self.inline_children(element),
            style=self.resolve_style(element, self._default_style(self.config.paragraph_font_size)),
        )

    def _anchor(self, element: Tag) -> AnchorNode:
        return AnchorNode(text=_text(element), href=element.get("href", ""))

    def _image(self, element: Tag) -> ImageNode:
        return ImageNode(src=self.resolve_image_src(element.get("src", "")), alt=element.get("alt"))

    def resolve_image_src(self, src: str) -> str:
        """Absolute path of an image, with leading '../' segments dropped."""
        if not src:
            return ""
        relative = strip_parent_segments(unquote(src))
        return os.path.normpath(os.path.join(str(self.context.base_path), relative))

    # Styles

    def _default_style(self, font_size: float) -> NodeStyle:
        return NodeStyle(font_size=font_size)

    def _style_layers(self, element: Tag) -> list[dict[str, str]]:
        """Class declarations in attribute order, then the inline style."""
        layers = []
        if len(self.context.css):
            layers.extend(self.context.css.class_properties(name) for name in _class_names(element))
        layers.append(parse_inline_style(element.get("style")))
        return layers

    def resolve_style(self, element: Tag, default: NodeStyle) -> NodeStyle:
        base = self.config.base_font_size
        style = default.model_copy(deep=True)

        for properties in self._style_layers(element):
            if not properties:
                continue
            font_size = properties.get("font-size")
            if font_size is not None:
                size = em_to_points(font_size, base)
                if size is not None:
                    style.font_size = size
            style.margin = apply_margin(style.margin, properties, base)
            align = properties.get("text-align")
            if align is not None:
                parsed = parse_alignment(align)
                if parsed is not None:
                    style.align = parsed
        return style

    def _padding(self, element: Tag) -> float | None:
        padding = None
        for properties in self._style_layers(element):
            raw = properties.get("padding")
            if not raw:
                continue
            size = em_to_points(raw.split()[0], self.config.base_font_size)
            if size is not None:
                padding = size
        return padding
