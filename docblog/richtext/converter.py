"""Convert a Google Docs document tree to a CMS richtext tree.

Walks the body elements, dispatching by element kind, and rebuilds headings,
paragraphs, per-item nested lists, tables and inline images. Image uploads
happen inline and sequentially so upload order matches document order.
"""

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from urllib.parse import urlparse

from loguru import logger

from docblog.richtext.lists import normalize_lists
from docblog.richtext.models import (
    BlockNode,
    BoldMark,
    BulletListNode,
    ColorAttrs,
    Doc,
    HeadingAttrs,
    HeadingNode,
    HighlightMark,
    ImageAttrs,
    ImageNode,
    InlineNode,
    ItalicMark,
    LinkAttrs,
    LinkMark,
    ListItemNode,
    ListNode,
    Mark,
    OrderedListNode,
    ParagraphNode,
    StrikeMark,
    TextNode,
    TextStyleMark,
    UnderlineMark,
)
from docblog.richtext.policies import ConversionPolicy
from docblog.richtext.source import (
    InlineObject,
    InlineObjectElement,
    OptionalColor,
    Paragraph,
    ParagraphElement,
    ParagraphStyle,
    SourceDocument,
    SourceList,
    StructuralElement,
    Table,
    TableCell,
    TextRun,
    TextStyle,
)
from docblog.storage import ImageUploader

DEFAULT_OWNED_DOMAIN = "notta.ai"
EXTERNAL_LINK_REL = "nofollow noreferrer"

_HEADING_PATTERN = re.compile(r"HEADING_(\d+)")
_ORDERED_GLYPHS = ("DECIMAL", "ALPHA", "ROMAN")


def is_external_link(url: str, owned_domain: str = DEFAULT_OWNED_DOMAIN) -> bool:
    """True if url points outside owned_domain.

    Relative, fragment and scheme-less URLs are internal. Absolute URLs whose
    host cannot be determined are treated as external.
    """
    if not url or url.startswith(("/", "#")) or "://" not in url:
        return False
    try:
        hostname = (urlparse(url).hostname or "").lower()
    except ValueError:
        return True
    if not hostname:
        return True
    domain = owned_domain.lower()
    return not (hostname == domain or hostname.endswith("." + domain))


def color_to_rgb(color: OptionalColor | None) -> str | None:
    """Scale normalized channels to 0-255 and format as an rgb() string."""
    if color is None or color.color is None or color.color.rgb_color is None:
        return None
    rgb = color.color.rgb_color
    # Round half up, not to even
    r, g, b = (math.floor(channel * 255 + 0.5) for channel in (rgb.red, rgb.green, rgb.blue))
    return f"rgb({r}, {g}, {b})"


def heading_level(style: ParagraphStyle) -> int | None:
    if style.named_style_type:
        match = _HEADING_PATTERN.fullmatch(style.named_style_type)
        if match:
            return int(match.group(1))
    return None


def is_ordered_glyph(glyph_type: str | None) -> bool:
    return bool(glyph_type) and any(kind in glyph_type for kind in _ORDERED_GLYPHS)


@dataclass(frozen=True)
class ConversionContext:
    """Side tables of one document, read-only for the duration of a conversion."""

    lists: Mapping[str, SourceList]
    inline_objects: Mapping[str, InlineObject]
    named_styles: Mapping[str, ParagraphStyle]

    @classmethod
    def from_document(cls, document: SourceDocument) -> "ConversionContext":
        named_styles = {
            style.named_style_type: style.paragraph_style
            for style in document.named_styles.styles
            if style.paragraph_style is not None
        }
        return cls(
            lists=MappingProxyType(dict(document.lists)),
            inline_objects=MappingProxyType(dict(document.inline_objects)),
            named_styles=MappingProxyType(named_styles),
        )


class DocumentConverter:
    """Converts SourceDocument to a richtext Doc.

    The converter itself holds no per-document state, so one instance can
    serve concurrent conversions.
    """

    def __init__(
        self,
        uploader: ImageUploader | None = None,
        policy: ConversionPolicy | None = None,
        owned_domain: str = DEFAULT_OWNED_DOMAIN,
    ):
        self.uploader = uploader
        self.policy = policy or ConversionPolicy()
        self.owned_domain = owned_domain

    async def convert(self, document: SourceDocument) -> Doc:
        """Convert the document body. Lists are left one-per-item (see normalize_lists)."""
        ctx = ConversionContext.from_document(document)
        blocks: list[BlockNode] = []
        for element in document.body.content:
            blocks.extend(await self._convert_element(element, ctx))
        return Doc(content=blocks)

    async def _convert_element(self, element: StructuralElement, ctx: ConversionContext) -> list[BlockNode]:
        handlers = {
            "paragraph": self._convert_paragraph,
            "table": self._convert_table,
        }

        handler = handlers.get(element.kind)
        if handler:
            return await handler(element, ctx)

        # Section breaks and unknown elements produce nothing
        return []

    # === PARAGRAPHS ===

    async def _convert_paragraph(self, element: StructuralElement, ctx: ConversionContext) -> list[BlockNode]:
        paragraph = element.paragraph
        assert paragraph is not None

        if paragraph.bullet is not None:
            return [await self._convert_list_item(paragraph, ctx)]

        style = self._resolve_style(paragraph, ctx)
        level = heading_level(style)
        content = await self._convert_inline(paragraph.elements, ctx)

        if level is None:
            return [ParagraphNode(content=content)]

        text = "".join(node.text for node in content if isinstance(node, TextNode))
        heading = HeadingNode(attrs=HeadingAttrs(level=level), content=content)
        return [*self.policy.heading_prelude(level, text), heading]

    def _resolve_style(self, paragraph: Paragraph, ctx: ConversionContext) -> ParagraphStyle:
        """Merge the named style under the paragraph's direct style."""
        direct = paragraph.paragraph_style
        if direct is None:
            return ParagraphStyle()

        merged = {}
        if direct.named_style_type:
            named = ctx.named_styles.get(direct.named_style_type)
            if named is not None:
                merged.update(named.model_dump(exclude_none=True))
        merged.update(direct.model_dump(exclude_none=True))
        return ParagraphStyle.model_validate(merged)

    async def _convert_list_item(self, paragraph: Paragraph, ctx: ConversionContext) -> ListNode:
        """Build one list item wrapped in nesting_level + 1 lists of the resolved kind."""
        bullet = paragraph.bullet
        assert bullet is not None
        nesting_level = max(bullet.nesting_level, 0)

        ordered = False
        list_data = ctx.lists.get(bullet.list_id)
        if list_data is not None:
            levels = list_data.list_properties.nesting_levels
            if nesting_level < len(levels):
                ordered = is_ordered_glyph(levels[nesting_level].glyph_type)
        list_cls = OrderedListNode if ordered else BulletListNode

        content = await self._convert_inline(paragraph.elements, ctx)
        node: ListNode | ListItemNode = ListItemNode(content=[ParagraphNode(content=content)])
        for _ in range(nesting_level + 1):
            node = list_cls(content=[node])
        assert not isinstance(node, ListItemNode)
        return node

    # === TABLES ===

    async def _convert_table(self, element: StructuralElement, ctx: ConversionContext) -> list[BlockNode]:
        table = element.table
        assert table is not None
        rows = [[self._cell_text(cell) for cell in row.table_cells] for row in table.table_rows]
        return [self.policy.table_block(rows)]

    def _cell_text(self, cell: TableCell) -> str:
        """Flatten a cell to plain text; inline styling and images are dropped."""
        parts = []
        for element in cell.content:
            if element.paragraph is not None:
                parts.append(
                    "".join(e.text_run.content for e in element.paragraph.elements if e.text_run is not None)
                )
            elif element.table is not None:
                parts.append(" ".join(self._table_text(element.table)))
        return "".join(parts).strip()

    def _table_text(self, table: Table) -> list[str]:
        return [self._cell_text(cell) for row in table.table_rows for cell in row.table_cells]

    # === INLINE CONTENT ===

    async def _convert_inline(self, elements: list[ParagraphElement], ctx: ConversionContext) -> list[InlineNode]:
        # The paragraph terminator lives at the end of the last text run
        last_run_idx = max((i for i, e in enumerate(elements) if e.text_run is not None), default=-1)

        content: list[InlineNode] = []
        for i, element in enumerate(elements):
            if element.text_run is not None:
                node = self._convert_text_run(element.text_run, strip_terminator=i == last_run_idx)
            elif element.inline_object_element is not None:
                node = await self._convert_inline_object(element.inline_object_element, ctx)
            else:
                node = None
            if node is not None:
                content.append(node)
        return content

    def _convert_text_run(self, run: TextRun, strip_terminator: bool) -> TextNode | None:
        text = run.content
        if strip_terminator and text.endswith("\n"):
            text = text[:-1]
        if not text:
            return None
        return TextNode(text=text, marks=self._marks(run.text_style))

    def _marks(self, style: TextStyle) -> list[Mark]:
        marks: list[Mark] = []
        if style.bold:
            marks.append(BoldMark())
        if style.italic:
            marks.append(ItalicMark())
        if style.underline:
            marks.append(UnderlineMark())
        if style.strikethrough:
            marks.append(StrikeMark())

        if style.link is not None and style.link.url:
            url = style.link.url
            rel = EXTERNAL_LINK_REL if is_external_link(url, self.owned_domain) else None
            marks.append(LinkMark(attrs=LinkAttrs(href=url, rel=rel)))

        color = color_to_rgb(style.foreground_color)
        if color:
            marks.append(TextStyleMark(attrs=ColorAttrs(color=color)))
        background = color_to_rgb(style.background_color)
        if background:
            marks.append(HighlightMark(attrs=ColorAttrs(color=background)))
        return marks

    async def _convert_inline_object(self, element: InlineObjectElement, ctx: ConversionContext) -> ImageNode | None:
        inline_object = ctx.inline_objects.get(element.inline_object_id)
        image = inline_object.image if inline_object is not None else None
        if image is None or image.image_properties is None:
            return None

        original_src = image.image_properties.content_uri or ""
        alt = image.description or image.title or ""

        src = original_src
        if self.uploader is not None and original_src:
            logger.info(f"Uploading image {element.inline_object_id}")
            try:
                src = await self.uploader.upload(original_src, alt)
            except Exception as e:
                logger.warning(f"Image upload failed for {element.inline_object_id}, keeping source URI: {e}")
                src = original_src

        return ImageNode(
            attrs=ImageAttrs(
                src=src,
                alt=alt,
                title=image.title or "",
                caption=image.description or "",
            )
        )


async def convert_document(
    document: SourceDocument,
    uploader: ImageUploader | None = None,
    policy: ConversionPolicy | None = None,
    owned_domain: str = DEFAULT_OWNED_DOMAIN,
) -> Doc:
    """Convert a document and merge adjacent lists."""
    doc = await DocumentConverter(uploader=uploader, policy=policy, owned_domain=owned_domain).convert(document)
    return Doc(content=normalize_lists(doc.content))
