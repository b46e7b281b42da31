"""Deterministic metadata derived from document structure, used when the AI path fails."""

import re

from docblog.metadata.keyinfo import estimate_reading_time, extract_key_info
from docblog.metadata.language import resolve_language
from docblog.metadata.models import Language, MetadataRecord
from docblog.metadata.slug import generate_slug

MAX_SEO_TITLE_CHARS = 60
MAX_DESCRIPTION_CHARS = 160

DEFAULT_TITLES: dict[Language, str] = {
    "en": "Article Title",
    "jp": "記事タイトル",
    "zh": "文章标题",
}
DEFAULT_DESCRIPTIONS: dict[Language, str] = {
    "en": "Learn more about this article.",
    "jp": "この記事について詳しく解説します。",
    "zh": "详细介绍本文内容。",
}
DESCRIPTION_TEMPLATES: dict[Language, str] = {
    "en": "Learn more about {title} in this comprehensive guide.",
    "jp": "{title}について詳しく解説します。",
    "zh": "详细介绍{title}。",
}
KEYWORD_SUFFIXES: dict[Language, str] = {
    "en": " Key topics include: {keywords}",
    "jp": "主な内容: {keywords}",
    "zh": "主要内容: {keywords}",
}
ALT_TEMPLATES: dict[Language, str] = {
    "en": "Image representing {title}",
    "jp": "{title}のイメージ画像",
    "zh": "{title}的示意图",
}

_INLINE_MARKUP = re.compile(r"[#*_`]")
_MARKDOWN_LINK = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")


def clean_inline(text: str) -> str:
    return _INLINE_MARKUP.sub("", _MARKDOWN_LINK.sub(r"\1", text)).strip()


def default_title(language: Language) -> str:
    return DEFAULT_TITLES[language]


def default_description(language: Language) -> str:
    return DEFAULT_DESCRIPTIONS[language]


def alt_text(title: str, language: Language) -> str:
    return ALT_TEMPLATES[language].format(title=title)


def describe(title: str, language: Language, keywords: list[str]) -> str:
    description = DESCRIPTION_TEMPLATES[language].format(title=title)
    if keywords:
        description += KEYWORD_SUFFIXES[language].format(keywords=", ".join(keywords))
    return description


def generate_fallback(
    markdown: str,
    language_override: str | None = None,
    words_per_minute: int = 200,
) -> MetadataRecord:
    """Metadata from the first heading, first paragraph and keyword frequency. Never raises."""
    language = resolve_language(markdown, language_override)
    info = extract_key_info(markdown, language)

    title = info.title or next((h.text for h in info.headings), "")
    title = clean_inline(title) or default_title(language)

    paragraph = clean_inline(info.first_paragraph)
    if paragraph:
        description = paragraph[:MAX_DESCRIPTION_CHARS]
    else:
        description = describe(title, language, info.top_keywords(5))[:MAX_DESCRIPTION_CHARS]

    return MetadataRecord(
        seo_title=title[:MAX_SEO_TITLE_CHARS],
        seo_description=description,
        heading_h1=title,
        slug=generate_slug(title),
        reading_time=estimate_reading_time(markdown, language, words_per_minute),
        language=language,
        cover_alt=alt_text(title, language),
        is_fallback=True,
    )
