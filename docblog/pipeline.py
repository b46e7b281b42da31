"""End-to-end conversion of one Google Docs document into blog content."""

import asyncio
from dataclasses import dataclass
from typing import Any

from loguru import logger

from docblog.cms import Story, StoryStore, build_blog_payload, publish_story
from docblog.constants import BLOG_COMPONENT
from docblog.metadata.extractor import MetadataExtractor, generate_metadata
from docblog.metadata.models import MetadataRecord
from docblog.richtext.converter import DocumentConverter
from docblog.richtext.extraction import extract_and_remove_first_h1, first_image_src
from docblog.richtext.lists import normalize_lists
from docblog.richtext.models import Doc
from docblog.sources import DocumentSource


@dataclass
class ConversionResult:
    richtext: Doc  # First H1 removed
    markdown: str
    metadata: MetadataRecord
    title: str | None  # Text of the removed first H1
    cover_image: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "richtext": self.richtext.to_payload(),
            "markdown": self.markdown,
            "metadata": self.metadata.model_dump(),
            "title": self.title,
            "cover_image": self.cover_image,
        }


async def convert_document(
    document_id: str,
    source: DocumentSource,
    converter: DocumentConverter,
    extractor: MetadataExtractor,
    language_override: str | None = None,
) -> ConversionResult:
    """Fetch, convert and describe a document.

    Richtext conversion and metadata generation run concurrently. Raises
    DocumentFetchError if the document cannot be fetched; every other failure
    degrades locally.
    """
    logger.info(f"Converting document {document_id}")
    tree, markdown = await asyncio.gather(
        source.fetch_tree(document_id),
        source.fetch_rendered_text(document_id),
    )

    async def build_richtext() -> Doc:
        doc = await converter.convert(tree)
        return Doc(content=normalize_lists(doc.content))

    richtext, metadata = await asyncio.gather(
        build_richtext(),
        generate_metadata(extractor, markdown, language_override),
    )

    richtext, title = extract_and_remove_first_h1(richtext)
    cover_image = first_image_src(richtext)
    logger.info(
        f"Converted document {document_id}: {len(richtext.content)} blocks, "
        f"title={title!r}, cover={'yes' if cover_image else 'no'}, fallback_metadata={metadata.is_fallback}"
    )
    return ConversionResult(
        richtext=richtext,
        markdown=markdown,
        metadata=metadata,
        title=title,
        cover_image=cover_image,
    )


async def publish_conversion(
    store: StoryStore,
    result: ConversionResult,
    *,
    slug_prefix: str = "",
    parent_id: int | None = None,
    component: str = BLOG_COMPONENT,
) -> Story:
    """Create or update the blog story for a converted document under slug_prefix."""
    metadata = result.metadata
    payload = build_blog_payload(
        name=metadata.heading_h1,
        slug=metadata.slug,
        component=component,
        seo_title=metadata.seo_title,
        seo_description=metadata.seo_description,
        heading_h1=metadata.heading_h1,
        body=result.richtext.to_payload(),
        cover_url=result.cover_image,
        cover_alt=metadata.cover_alt,
        reading_time=metadata.reading_time,
        parent_id=parent_id,
    )
    full_slug = f"{slug_prefix}{metadata.slug}"
    story = await publish_story(store, payload, full_slug)
    logger.info(f"Published {full_slug} as story {story.get('id')}")
    return story
