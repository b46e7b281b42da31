"""Document source: Google Docs document trees and their markdown rendering."""

import asyncio
import random
from abc import ABC, abstractmethod

import httpx
from loguru import logger
from pydantic import ValidationError

from docblog.config import Settings
from docblog.exceptions import DocumentFetchError
from docblog.richtext.source import SourceDocument

DOCS_API_BASE = "https://docs.googleapis.com/v1/documents"
DRIVE_API_BASE = "https://www.googleapis.com/drive/v3/files"
TOKEN_URL = "https://oauth2.googleapis.com/token"

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
BASE_DELAY_SECONDS = 1.0
MAX_DELAY_SECONDS = 10.0


class DocumentSource(ABC):
    """Read-only access to source documents."""

    @abstractmethod
    async def fetch_tree(self, document_id: str) -> SourceDocument:
        """The structured document tree."""

    @abstractmethod
    async def fetch_rendered_text(self, document_id: str) -> str:
        """The document rendered as markdown, used for metadata extraction."""


class GoogleDocsSource(DocumentSource):
    """Google Docs and Drive REST APIs with OAuth refresh-token credentials."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None):
        if not settings.google_access_token and not (
            settings.google_client_id and settings.google_client_secret and settings.google_refresh_token
        ):
            raise ValueError(
                "GOOGLE_ACCESS_TOKEN or GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET and GOOGLE_REFRESH_TOKEN are required"
            )
        self._settings = settings
        self._client = client or httpx.AsyncClient(timeout=settings.fetch_timeout_seconds)
        self._access_token = settings.google_access_token
        self._token_lock = asyncio.Lock()
        self.max_attempts = max(settings.fetch_retries, 1)

    async def close(self) -> None:
        await self._client.aclose()

    async def fetch_tree(self, document_id: str) -> SourceDocument:
        response = await self._get(document_id, f"{DOCS_API_BASE}/{document_id}")
        try:
            return SourceDocument.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise DocumentFetchError(document_id, f"unparseable document: {e}") from e

    async def fetch_rendered_text(self, document_id: str) -> str:
        response = await self._get(
            document_id,
            f"{DRIVE_API_BASE}/{document_id}/export",
            params={"mimeType": "text/markdown"},
        )
        return response.text

    async def _token(self) -> str:
        async with self._token_lock:
            if self._access_token:
                return self._access_token
            response = await self._client.post(
                TOKEN_URL,
                data={
                    "client_id": self._settings.google_client_id,
                    "client_secret": self._settings.google_client_secret,
                    "refresh_token": self._settings.google_refresh_token,
                    "grant_type": "refresh_token",
                },
            )
            response.raise_for_status()
            self._access_token = response.json()["access_token"]
            logger.debug("Refreshed Google access token")
            return self._access_token

    async def _get(self, document_id: str, url: str, params: dict | None = None) -> httpx.Response:
        """GET with bearer auth, retrying transient failures with exponential backoff."""
        last_error: Exception | None = None
        for attempt in range(self.max_attempts):
            try:
                token = await self._token()
                response = await self._client.get(url, params=params, headers={"Authorization": f"Bearer {token}"})
                if response.status_code == 401 and self._settings.google_refresh_token:
                    # Expired token, refresh on the next attempt
                    self._access_token = None
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as e:
                last_error = e
                code = e.response.status_code
                if code not in RETRYABLE_STATUS_CODES and not (code == 401 and self._access_token is None):
                    raise DocumentFetchError(document_id, f"HTTP {code}: {e.response.text[:200]}") from e
                reason = str(code)
            except (httpx.RequestError, KeyError) as e:
                last_error = e
                reason = str(e) or type(e).__name__

            if attempt < self.max_attempts - 1:
                delay = min(BASE_DELAY_SECONDS * (2**attempt), MAX_DELAY_SECONDS)
                wait_time = delay + random.uniform(0, delay * 0.5)
                logger.warning(
                    f"Fetch {document_id}: attempt {attempt + 1}/{self.max_attempts} failed ({reason}), "
                    f"retrying in {wait_time:.1f}s"
                )
                await asyncio.sleep(wait_time)

        raise DocumentFetchError(
            document_id, f"failed after {self.max_attempts} attempts: {last_error}"
        ) from last_error
