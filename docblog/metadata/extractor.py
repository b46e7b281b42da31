"""AI extraction of article metadata with deterministic validation.

Short documents are sent in full. Longer ones are replaced by a structural
summary and the AI result is reconciled with what the full document says.
Whatever the AI returns, the final record satisfies the MetadataRecord
invariants.
"""

import math
from typing import Any

from loguru import logger

from docblog.ai.base import CompletionOptions, CompletionService
from docblog.config import Settings
from docblog.exceptions import AIRequestError
from docblog.metadata.fallback import (
    MAX_SEO_TITLE_CHARS,
    alt_text,
    default_description,
    default_title,
    generate_fallback,
)
from docblog.metadata.keyinfo import KeyInfo, create_summary, estimate_reading_time, extract_key_info
from docblog.metadata.language import resolve_language
from docblog.metadata.models import (
    MAX_READING_TIME,
    MIN_READING_TIME,
    Language,
    MetadataRecord,
    metadata_output_schema,
)
from docblog.metadata.slug import DEFAULT_SLUG, generate_slug, is_valid_slug

LANGUAGE_NAMES: dict[Language, str] = {"en": "English", "jp": "Japanese", "zh": "Chinese"}

SYSTEM_PROMPT = """You are a content analysis assistant. Analyze the provided Markdown document and extract SEO metadata for publishing it as a blog article.

The document language is {language_name}. All text fields except slug MUST be written in {language_name}.

Fields:
- seo_title: SEO-optimized title. Short, impactful, contains relevant keywords, used for the meta title.
- seo_description: SEO-optimized description under 100 characters, contains relevant keywords, used for the meta description.
- heading_h1: Main heading (H1). Can be longer and more descriptive than seo_title.
- slug: URL-friendly English path using only lowercase a-z, 0-9 and hyphens. Even for non-English articles, write a concise English slug reflecting the topic.
- reading_time: Estimated reading time in whole minutes, between 1 and 12.
- language: MUST be exactly "{language}".
- cover_alt: Alt text for the cover image, describing it for SEO and accessibility.

Good slugs: "web-development-guide", "javascript-tutorial". Bad slugs: "Web_Development", "API Design"."""

USER_PROMPT = """Here is the Markdown document content to analyze:

```
{content}
```

Remember: all text fields must be in {language_name}, and the slug must be lowercase English only."""


def _clean_string(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _valid_reading_time(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    minutes = round(value)
    if MIN_READING_TIME <= minutes <= MAX_READING_TIME:
        return minutes
    return None


def validate_and_fix(
    raw: dict[str, Any],
    language: Language,
    document_text: str,
    words_per_minute: int = 200,
) -> MetadataRecord:
    """Force raw AI output into a valid MetadataRecord, correcting fields in place of failing."""
    seo_title = _clean_string(raw.get("seo_title")) or default_title(language)
    heading_h1 = _clean_string(raw.get("heading_h1")) or seo_title
    seo_description = _clean_string(raw.get("seo_description")) or default_description(language)
    cover_alt = _clean_string(raw.get("cover_alt")) or alt_text(seo_title, language)

    slug = raw.get("slug")
    if not is_valid_slug(slug):
        slug = generate_slug(seo_title or heading_h1)

    reading_time = _valid_reading_time(raw.get("reading_time"))
    if reading_time is None:
        reading_time = estimate_reading_time(document_text, language, words_per_minute)

    return MetadataRecord(
        seo_title=seo_title,
        seo_description=seo_description,
        heading_h1=heading_h1,
        slug=slug,
        reading_time=reading_time,
        language=language,
        cover_alt=cover_alt,
    )


def reconcile_with_key_info(raw: dict[str, Any], info: KeyInfo, words_per_minute: int = 200) -> dict[str, Any]:
    """Correct a summary-based result with facts from the full document."""
    result = dict(raw)

    if info.title and len(info.title) > len(_clean_string(result.get("seo_title"))):
        result["seo_title"] = info.title[:MAX_SEO_TITLE_CHARS]
        result["heading_h1"] = info.title

    minutes = math.ceil(info.word_count / words_per_minute)
    result["reading_time"] = max(MIN_READING_TIME, min(MAX_READING_TIME, minutes))

    if info.title:
        slug = generate_slug(info.title)
        if slug != DEFAULT_SLUG:
            result["slug"] = slug

    return result


class MetadataExtractor:
    def __init__(
        self,
        completion: CompletionService,
        settings: Settings,
        options: CompletionOptions | None = None,
    ):
        self.completion = completion
        self.direct_process_limit = settings.direct_process_limit
        self.summary_process_limit = settings.summary_process_limit
        self.summary_target_tokens = settings.summary_target_tokens
        self.words_per_minute = settings.words_per_minute
        self.options = options or CompletionOptions(temperature=0.0)

    async def extract(self, document_text: str, language_override: str | None = None) -> MetadataRecord:
        """Extract metadata with the AI service. Raises AIRequestError once retries are exhausted."""
        language = resolve_language(document_text, language_override)
        length = len(document_text)

        if length <= self.direct_process_limit:
            logger.info(f"Metadata extraction: direct strategy ({length} chars, language={language})")
            raw = await self._request(document_text, language)
            return validate_and_fix(raw, language, document_text, self.words_per_minute)

        if length > self.summary_process_limit:
            logger.warning(
                f"Document has {length} chars, above the {self.summary_process_limit} char ceiling; "
                f"proceeding with summary"
            )
        logger.info(f"Metadata extraction: summary strategy ({length} chars, language={language})")

        info = extract_key_info(document_text, language)
        summary = create_summary(document_text, info, self.summary_target_tokens)
        logger.info(f"Summary built: {length} -> {len(summary)} chars")

        raw = await self._request(summary, language)
        raw = reconcile_with_key_info(raw, info, self.words_per_minute)
        return validate_and_fix(raw, language, document_text, self.words_per_minute)

    async def _request(self, content: str, language: Language) -> dict[str, Any]:
        language_name = LANGUAGE_NAMES[language]
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT.format(language=language, language_name=language_name)},
            {"role": "user", "content": USER_PROMPT.format(content=content, language_name=language_name)},
        ]
        return await self.completion.complete(messages, metadata_output_schema(language), self.options)


async def generate_metadata(
    extractor: MetadataExtractor,
    document_text: str,
    language_override: str | None = None,
) -> MetadataRecord:
    """AI metadata, or the deterministic fallback when the AI path fails."""
    try:
        return await extractor.extract(document_text, language_override)
    except AIRequestError as e:
        logger.warning(f"AI metadata extraction failed after {e.attempts} attempts, using fallback: {e}")
        return generate_fallback(document_text, language_override, extractor.words_per_minute)
