"""Read-only models of the Google Docs document tree.

Only the fields the converter reads are modelled; everything else returned by
the Docs API is ignored. Field names are snake_case with camelCase aliases so
raw API JSON validates directly.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SourceModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True)


# === STYLES ===


class RgbColor(SourceModel):
    red: float = 0.0
    green: float = 0.0
    blue: float = 0.0


class Color(SourceModel):
    rgb_color: RgbColor | None = None


class OptionalColor(SourceModel):
    color: Color | None = None


class Link(SourceModel):
    url: str | None = None


class TextStyle(SourceModel):
    bold: bool | None = None
    italic: bool | None = None
    underline: bool | None = None
    strikethrough: bool | None = None
    link: Link | None = None
    foreground_color: OptionalColor | None = None
    background_color: OptionalColor | None = None


class ParagraphStyle(SourceModel):
    named_style_type: str | None = None

    model_config = ConfigDict(extra="allow")


class NamedStyle(SourceModel):
    named_style_type: str
    paragraph_style: ParagraphStyle | None = None


class NamedStyles(SourceModel):
    styles: list[NamedStyle] = Field(default_factory=list)


# === PARAGRAPH ELEMENTS ===


class TextRun(SourceModel):
    content: str = ""
    text_style: TextStyle = Field(default_factory=TextStyle)


class InlineObjectElement(SourceModel):
    inline_object_id: str


class ParagraphElement(SourceModel):
    text_run: TextRun | None = None
    inline_object_element: InlineObjectElement | None = None


class Bullet(SourceModel):
    list_id: str
    nesting_level: int = 0


class Paragraph(SourceModel):
    elements: list[ParagraphElement] = Field(default_factory=list)
    paragraph_style: ParagraphStyle | None = None
    bullet: Bullet | None = None


# === TABLES ===


class TableCell(SourceModel):
    content: list["StructuralElement"] = Field(default_factory=list)


class TableRow(SourceModel):
    table_cells: list[TableCell] = Field(default_factory=list)


class Table(SourceModel):
    rows: int | None = None
    columns: int | None = None
    table_rows: list[TableRow] = Field(default_factory=list)


class SectionBreak(SourceModel):
    model_config = ConfigDict(extra="allow")


ElementKind = Literal["paragraph", "table", "section_break", "unknown"]


class StructuralElement(SourceModel):
    """A body element; exactly one of the variant fields is set by the Docs API."""

    paragraph: Paragraph | None = None
    table: Table | None = None
    section_break: SectionBreak | None = None

    @property
    def kind(self) -> ElementKind:
        if self.paragraph is not None:
            return "paragraph"
        if self.table is not None:
            return "table"
        if self.section_break is not None:
            return "section_break"
        return "unknown"


TableCell.model_rebuild()


class Body(SourceModel):
    content: list[StructuralElement] = Field(default_factory=list)


# === SIDE TABLES ===


class NestingLevel(SourceModel):
    glyph_type: str | None = None


class ListProperties(SourceModel):
    nesting_levels: list[NestingLevel] = Field(default_factory=list)


class SourceList(SourceModel):
    list_properties: ListProperties = Field(default_factory=ListProperties)


class ImageProperties(SourceModel):
    content_uri: str | None = None


class EmbeddedObject(SourceModel):
    title: str | None = None
    description: str | None = None
    image_properties: ImageProperties | None = None


class InlineObjectProperties(SourceModel):
    embedded_object: EmbeddedObject | None = None


class InlineObject(SourceModel):
    inline_object_properties: InlineObjectProperties | None = None

    @property
    def image(self) -> EmbeddedObject | None:
        """The embedded object if it is an image, else None."""
        props = self.inline_object_properties
        if props and props.embedded_object and props.embedded_object.image_properties:
            return props.embedded_object
        return None


# === DOCUMENT ===


class SourceDocument(SourceModel):
    """A Google Docs document as returned by ``documents.get``."""

    document_id: str | None = None
    title: str | None = None
    body: Body = Field(default_factory=Body)
    lists: dict[str, SourceList] = Field(default_factory=dict)
    inline_objects: dict[str, InlineObject] = Field(default_factory=dict)
    named_styles: NamedStyles = Field(default_factory=NamedStyles)
