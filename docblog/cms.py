"""CMS story store (Storyblok management API) and create-or-update publishing."""

from abc import ABC, abstractmethod
from typing import Any

import httpx
from loguru import logger

from docblog.config import Settings
from docblog.exceptions import StoreError

Story = dict[str, Any]


class StoryStore(ABC):
    """Story CRUD used by publishing."""

    @abstractmethod
    async def get_by_path(self, full_slug: str) -> Story | None:
        """The story at full_slug, or None."""

    @abstractmethod
    async def create(self, payload: Story) -> Story: ...

    @abstractmethod
    async def update(self, story_id: int, payload: Story) -> Story: ...


class StoryblokStore(StoryStore):
    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None):
        if not settings.storyblok_oauth_token or not settings.storyblok_space_id:
            raise ValueError("STORYBLOK_OAUTH_TOKEN and STORYBLOK_SPACE_ID are required")
        self._base_url = f"{settings.storyblok_api_url.rstrip('/')}/spaces/{settings.storyblok_space_id}/stories"
        self._client = client or httpx.AsyncClient(timeout=30.0)
        self._headers = {"Authorization": settings.storyblok_oauth_token}

    async def close(self) -> None:
        await self._client.aclose()

    async def get_by_path(self, full_slug: str) -> Story | None:
        data = await self._request("GET", self._base_url, params={"with_slug": full_slug.strip("/"), "per_page": 1})
        stories = data.get("stories") or []
        return stories[0] if stories else None

    async def create(self, payload: Story) -> Story:
        data = await self._request("POST", self._base_url, json={"story": payload})
        return data["story"]

    async def update(self, story_id: int, payload: Story) -> Story:
        data = await self._request("PUT", f"{self._base_url}/{story_id}", json={"story": payload})
        return data["story"]

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._client.request(method, url, headers=self._headers, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            code = e.response.status_code
            raise StoreError(f"Storyblok {method} failed ({code}): {e.response.text[:200]}", status_code=code) from e
        except httpx.RequestError as e:
            raise StoreError(f"Storyblok {method} request failed: {e}") from e


async def publish_story(store: StoryStore, payload: Story, full_slug: str) -> Story:
    """Update the story at full_slug if it exists, otherwise create it."""
    existing = await store.get_by_path(full_slug)
    if existing is not None:
        logger.info(f"Story exists, updating: {full_slug}")
        return await store.update(existing["id"], payload)

    logger.info(f"Story not found, creating: {full_slug}")
    return await store.create(payload)


def build_blog_payload(
    *,
    name: str,
    slug: str,
    component: str,
    seo_title: str,
    seo_description: str,
    heading_h1: str,
    body: dict[str, Any],
    cover_url: str | None,
    cover_alt: str,
    reading_time: int,
    parent_id: int | None = None,
) -> Story:
    """Story payload for a blog article."""
    return {
        "name": name,
        "slug": slug,
        "parent_id": parent_id,
        "content": {
            "component": component,
            "title": seo_title,
            "description": seo_description,
            "heading_h1": heading_h1,
            "body": body,
            "cover": {
                "filename": cover_url or "",
                "alt": cover_alt,
                "title": "",
                "copyright": "",
                "fieldtype": "asset",
                "is_external_url": True,
            },
            "reading_time": str(reading_time),
        },
    }
