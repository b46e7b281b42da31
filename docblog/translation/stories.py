"""Translate whole CMS stories into per-language story payloads."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from docblog.constants import ALL_LANGUAGES, BLOG_COMPONENT, DEFAULT_SITE_LANGUAGE
from docblog.exceptions import UnsupportedStoryError
from docblog.translation.translator import Translator

URL_FIELDS = ("og_url", "canonical", "url", "cached_url")


@dataclass(frozen=True)
class StorySchema:
    """Translatable shape of one story component."""

    schema: dict[str, Any]
    blok_templates: dict[str, Any] = field(default_factory=dict)
    parent_ids: dict[str, int] = field(default_factory=dict)  # language -> parent folder id


BLOG_STORY_SCHEMA = StorySchema(
    schema={
        "title": "str",
        "description": "str",
        "heading_h1": "str",
        "body": "doc",
        "cover": {"alt": "str"},
    },
    blok_templates={"anchor": {"description": "str"}},
)

DEFAULT_STORY_SCHEMAS: dict[str, StorySchema] = {BLOG_COMPONENT: BLOG_STORY_SCHEMA}


@dataclass
class TranslatedStory:
    language: str
    story: dict[str, Any]


def split_full_slug(full_slug: str) -> tuple[str, str]:
    """Split into (source language, path without the language prefix).

    The source language is empty when the first segment is not a language code.
    """
    parts = full_slug.strip("/").split("/")
    if parts and parts[0] in ALL_LANGUAGES:
        return parts[0], "/".join(parts[1:])
    return "", "/".join(parts)


def localize_urls(
    content: Any,
    full_slug: str,
    language: str,
    site_url: str,
    signup_url: str,
) -> Any:
    """Point self-referencing URLs and the signup link at the language's version of the page."""
    source_language, path = split_full_slug(full_slug)
    full_slug = full_slug.strip("/")
    site_url = site_url.rstrip("/")
    target_path = f"/{language}/{path}/"

    url_map = {
        "og_url": {f"{site_url}/{full_slug}/": f"{site_url}{target_path}"},
        "canonical": {f"{site_url}/{full_slug}": f"{site_url}{target_path}"},
        "url": {f"/{full_slug}/": target_path},
        "cached_url": {f"/{full_slug}/": target_path},
    }
    signup_from = f"{signup_url}?language={source_language or DEFAULT_SITE_LANGUAGE}&from=official"
    signup_to = f"{signup_url}?language={language}&from=official"

    def rewrite(node: Any) -> Any:
        if isinstance(node, dict):
            result = {}
            for key, value in node.items():
                if key in URL_FIELDS and isinstance(value, str) and value in url_map[key]:
                    result[key] = url_map[key][value]
                else:
                    result[key] = rewrite(value)
            return result
        if isinstance(node, list):
            return [rewrite(item) for item in node]
        if isinstance(node, str):
            return node.replace(signup_from, signup_to)
        return node

    return rewrite(content)


async def translate_story(
    story: dict[str, Any],
    languages: list[str],
    translator: Translator,
    *,
    site_url: str,
    signup_url: str,
    schemas: Mapping[str, StorySchema] = DEFAULT_STORY_SCHEMAS,
) -> list[TranslatedStory]:
    """Translate a story into one new story payload per language.

    Raises UnsupportedStoryError if the story's component has no registered schema.
    """
    content = story.get("content") or {}
    component = content.get("component")
    story_schema = schemas.get(component)
    if story_schema is None:
        raise UnsupportedStoryError(component)

    slug = story.get("slug", "")
    full_slug = story.get("full_slug", "")
    group_id = story.get("group_id", "")

    logger.info(f"Translating story {full_slug or slug!r} ({component}) into {', '.join(languages)}")
    translated = await translator.translate(content, story_schema.schema, story_schema.blok_templates, languages)

    stories = []
    for lng in languages:
        code = lng.lower()
        localized = localize_urls(translated[lng], full_slug, code, site_url, signup_url)
        stories.append(
            TranslatedStory(
                language=lng,
                story={
                    "slug": slug,
                    "name": f"{slug}-{code}",
                    "content": {**localized, "component": component},
                    "group_id": group_id,
                    "parent_id": story_schema.parent_ids.get(lng, story_schema.parent_ids.get(code)),
                },
            )
        )
    return stories
