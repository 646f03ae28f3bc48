"""Content node tree produced for a chapter.

Every node kind is its own model tagged by ``kind``; ``ContentNode`` is the
discriminated union of all of them, so a tree round-trips through JSON.
"""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class Align(str, Enum):
    """Horizontal alignment of a block."""

    LEADING = "leading"
    CENTER = "center"
    TRAILING = "trailing"


class Margin(BaseModel):
    top: float = 0.0
    bottom: float = 0.0
    left: float = 0.0
    right: float = 0.0


class NodeStyle(BaseModel):
    """Resolved style of a styleable node."""

    font_size: float = 16.0
    margin: Margin = Field(default_factory=Margin)
    align: Align = Align.LEADING


class TextNode(BaseModel):
    kind: Literal["text"] = "text"
    text: str = ""


class LineBreakNode(BaseModel):
    kind: Literal["line_break"] = "line_break"


class ImageNode(BaseModel):
    kind: Literal["image"] = "image"
    src: str
    alt: str | None = None


class AnchorNode(BaseModel):
    kind: Literal["anchor"] = "anchor"
    text: str
    href: str = ""


class HeadingNode(BaseModel):
    kind: Literal["heading"] = "heading"
    level: int = Field(ge=1, le=4)
    text: str
    style: NodeStyle = Field(default_factory=NodeStyle)


class ListItemNode(BaseModel):
    kind: Literal["list_item"] = "list_item"
    text: str


class ParagraphNode(BaseModel):
    kind: Literal["paragraph"] = "paragraph"
    children: list["ContentNode"] = Field(default_factory=list)
    style: NodeStyle = Field(default_factory=NodeStyle)


class SpanNode(BaseModel):
    kind: Literal["span"] = "span"
    children: list["ContentNode"] = Field(default_factory=list)
    style: NodeStyle = Field(default_factory=NodeStyle)


class ListNode(BaseModel):
    kind: Literal["list"] = "list"
    ordered: bool = False
    items: list["ContentNode"] = Field(default_factory=list)


class DivNode(BaseModel):
    kind: Literal["div"] = "div"
    children: list["ContentNode"] = Field(default_factory=list)
    padding: float | None = None


class FieldsetNode(BaseModel):
    kind: Literal["fieldset"] = "fieldset"
    legend: str | None = None
    children: list["ContentNode"] = Field(default_factory=list)


ContentNode = Annotated[
    Union[
        TextNode,
        LineBreakNode,
        ImageNode,
        AnchorNode,
        HeadingNode,
        ListItemNode,
        ParagraphNode,
        SpanNode,
        ListNode,
        DivNode,
        FieldsetNode,
    ],
    Field(discriminator="kind"),
]

for _model in (ParagraphNode, SpanNode, ListNode, DivNode, FieldsetNode):
    _model.model_rebuild()


def child_nodes(node: BaseModel) -> list[BaseModel]:
    """Direct children of a node, whatever field holds them."""
    if isinstance(node, ListNode):
        return list(node.items)
    return list(getattr(node, "children", []))


def node_text(node: BaseModel) -> str:
    """Plain text carried by a node and its descendants."""
    if isinstance(node, (TextNode, AnchorNode, HeadingNode, ListItemNode)):
        return node.text
    if isinstance(node, LineBreakNode):
        return "\n"
    parts = []
    if isinstance(node, FieldsetNode) and node.legend:
        parts.append(node.legend)
    parts.extend(node_text(child) for child in child_nodes(node))
    separator = "" if isinstance(node, (ParagraphNode, SpanNode)) else "\n"
    return separator.join(part for part in parts if part)
