"""Data models for the rich-text tree consumed by the CMS.

The shape mirrors the CMS richtext JSON: every node has a ``type`` tag,
container nodes hold their children in ``content`` and node-specific data
lives in ``attrs``. ``Doc`` is always the root.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# === MARKS ===


class BoldMark(BaseModel):
    type: Literal["bold"] = "bold"


class ItalicMark(BaseModel):
    type: Literal["italic"] = "italic"


class UnderlineMark(BaseModel):
    type: Literal["underline"] = "underline"


class StrikeMark(BaseModel):
    type: Literal["strike"] = "strike"


class LinkAttrs(BaseModel):
    href: str
    target: str = "_blank"
    rel: str | None = None  # Only set for external links


class LinkMark(BaseModel):
    type: Literal["link"] = "link"
    attrs: LinkAttrs


class ColorAttrs(BaseModel):
    color: str  # rgb(r, g, b)


class TextStyleMark(BaseModel):
    type: Literal["textStyle"] = "textStyle"
    attrs: ColorAttrs


class HighlightMark(BaseModel):
    type: Literal["highlight"] = "highlight"
    attrs: ColorAttrs


Mark = BoldMark | ItalicMark | UnderlineMark | StrikeMark | LinkMark | TextStyleMark | HighlightMark


# === INLINE NODES ===


class TextNode(BaseModel):
    type: Literal["text"] = "text"
    text: str
    marks: list[Mark] = Field(default_factory=list)

    def mark_types(self) -> set[str]:
        return {mark.type for mark in self.marks}


class ImageAttrs(BaseModel):
    src: str
    alt: str = ""
    title: str = ""
    caption: str = ""


class ImageNode(BaseModel):
    type: Literal["image"] = "image"
    attrs: ImageAttrs


InlineNode = TextNode | ImageNode


# === BLOCK NODES ===


class ParagraphNode(BaseModel):
    type: Literal["paragraph"] = "paragraph"
    content: list[InlineNode] = Field(default_factory=list)


class HeadingAttrs(BaseModel):
    level: int


class HeadingNode(BaseModel):
    type: Literal["heading"] = "heading"
    attrs: HeadingAttrs
    content: list[InlineNode] = Field(default_factory=list)

    @property
    def level(self) -> int:
        return self.attrs.level


class BlokComponent(BaseModel):
    """A named CMS component embedded in richtext; fields besides ``component`` are opaque."""

    component: str

    model_config = ConfigDict(extra="allow")


class BlokAttrs(BaseModel):
    body: list[BlokComponent]


class BlokNode(BaseModel):
    type: Literal["blok"] = "blok"
    attrs: BlokAttrs

    @classmethod
    def single(cls, component: str, **payload: Any) -> "BlokNode":
        return cls(attrs=BlokAttrs(body=[BlokComponent(component=component, **payload)]))


class ListItemNode(BaseModel):
    type: Literal["list_item"] = "list_item"
    content: list["ListItemChild"] = Field(default_factory=list)


class BulletListNode(BaseModel):
    type: Literal["bullet_list"] = "bullet_list"
    content: list["ListChild"] = Field(default_factory=list)


class OrderedListNode(BaseModel):
    type: Literal["ordered_list"] = "ordered_list"
    content: list["ListChild"] = Field(default_factory=list)


ListNode = BulletListNode | OrderedListNode

# Per-item nesting wraps lists directly inside lists until normalized
ListChild = ListItemNode | BulletListNode | OrderedListNode
ListItemChild = ParagraphNode | BulletListNode | OrderedListNode

BlockNode = ParagraphNode | HeadingNode | BulletListNode | OrderedListNode | BlokNode | ImageNode

# Update forward references
ListItemNode.model_rebuild()
BulletListNode.model_rebuild()
OrderedListNode.model_rebuild()

LIST_TYPES = frozenset({"bullet_list", "ordered_list"})


def is_list(node: BaseModel) -> bool:
    return getattr(node, "type", None) in LIST_TYPES


# === DOCUMENT ===


class Doc(BaseModel):
    """Root of a richtext tree."""

    type: Literal["doc"] = "doc"
    content: list[BlockNode] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON shape stored in a story's body field."""
        return self.model_dump(mode="json", exclude_none=True)
