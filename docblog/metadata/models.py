"""Structured metadata record produced for a blog article."""

from typing import Any, Literal

from pydantic import BaseModel, Field

Language = Literal["en", "jp", "zh"]
SUPPORTED_LANGUAGES: tuple[Language, ...] = ("en", "jp", "zh")

SLUG_PATTERN = r"^[a-z0-9-]+$"
MIN_READING_TIME = 1
MAX_READING_TIME = 12


class MetadataRecord(BaseModel):
    seo_title: str = Field(min_length=1)
    seo_description: str = Field(min_length=1)
    heading_h1: str = Field(min_length=1)
    slug: str = Field(pattern=SLUG_PATTERN)
    reading_time: int = Field(ge=MIN_READING_TIME, le=MAX_READING_TIME)
    language: Language
    cover_alt: str = Field(min_length=1)
    is_fallback: bool = False  # True when derived without the AI call


def metadata_output_schema(language: Language) -> dict[str, Any]:
    """JSON schema sent with the extraction request, pinning the language field."""
    return {
        "type": "object",
        "properties": {
            "seo_title": {"type": "string"},
            "seo_description": {"type": "string"},
            "heading_h1": {"type": "string"},
            "slug": {"type": "string", "pattern": SLUG_PATTERN},
            "reading_time": {"type": "integer", "minimum": MIN_READING_TIME, "maximum": MAX_READING_TIME},
            "language": {"type": "string", "enum": [language]},
            "cover_alt": {"type": "string"},
        },
        "required": [
            "seo_title",
            "seo_description",
            "heading_h1",
            "slug",
            "reading_time",
            "language",
            "cover_alt",
        ],
    }
