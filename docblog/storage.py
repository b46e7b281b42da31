"""Image upload: download a source image, optionally compress it, store it in S3."""

import asyncio
import io
import mimetypes
import uuid
from abc import ABC, abstractmethod

import aioboto3
import httpx
from botocore.client import Config
from loguru import logger
from PIL import Image, UnidentifiedImageError

from docblog.config import Settings
from docblog.exceptions import ImageUploadError


class ImageUploader(ABC):
    """Abstract interface for image upload backends."""

    @abstractmethod
    async def upload(self, source_uri: str, alt_text: str) -> str:
        """Upload the image at source_uri and return its public URL."""


def compress_image(data: bytes, max_width: int, quality: int) -> bytes:
    """Resize to max_width and re-encode as JPEG. Returns the input on decode failure."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            image = image.convert("RGB")
            if image.width > max_width:
                height = round(image.height * max_width / image.width)
                image = image.resize((max_width, height), Image.Resampling.LANCZOS)
            out = io.BytesIO()
            image.save(out, format="JPEG", quality=quality, optimize=True)
            return out.getvalue()
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Image compression failed, using original bytes: {e}")
        return data


class S3ImageUploader(ImageUploader):
    """Upload images to S3, served via the assets CDN."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None):
        if not settings.aws_bucket_name:
            raise ValueError("AWS_BUCKET_NAME is required for S3 image uploads")

        self.bucket_name = settings.aws_bucket_name
        self.folder_prefix = settings.s3_folder_prefix
        self.file_prefix = settings.image_file_prefix
        self.cdn_url = settings.assets_cdn_url
        self.compress_threshold_bytes = settings.image_compress_threshold_kb * 1024
        self.max_width = settings.image_max_width
        self.quality = settings.image_quality
        self._http = http_client
        self._session = aioboto3.Session()
        self._client_config = {
            "aws_access_key_id": settings.aws_access_key_id,
            "aws_secret_access_key": settings.aws_secret_access_key,
            "region_name": settings.aws_region,
            "config": Config(signature_version="s3v4"),
        }

    async def upload(self, source_uri: str, alt_text: str) -> str:
        data, content_type = await self._download(source_uri)

        size_kb = len(data) / 1024
        if len(data) > self.compress_threshold_bytes:
            data = await asyncio.to_thread(compress_image, data, self.max_width, self.quality)
            content_type = "image/jpeg"
            logger.info(f"Compressed image {size_kb:.1f}KB -> {len(data) / 1024:.1f}KB")

        ext = (mimetypes.guess_extension(content_type) or ".jpg").lstrip(".")
        if ext == "jpe":
            ext = "jpg"
        key = f"{self.folder_prefix}{self.file_prefix}-{uuid.uuid4()}.{ext}"

        try:
            async with self._session.client("s3", **self._client_config) as s3:
                await s3.put_object(
                    Bucket=self.bucket_name,
                    Key=key,
                    Body=data,
                    ContentType=content_type,
                    StorageClass="INTELLIGENT_TIERING",
                )
        except Exception as e:
            raise ImageUploadError(f"S3 upload failed for {source_uri}: {e}") from e

        logger.debug(f"Uploaded image (alt={alt_text!r}) to {key}")
        return f"{self.cdn_url}{key}"

    async def _download(self, source_uri: str) -> tuple[bytes, str]:
        try:
            if self._http is not None:
                response = await self._http.get(source_uri)
            else:
                async with httpx.AsyncClient(follow_redirects=True, timeout=30.0) as client:
                    response = await client.get(source_uri)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ImageUploadError(f"Image download failed for {source_uri}: {e}") from e

        content_type = response.headers.get("content-type", "application/octet-stream").split(";")[0].strip()
        return response.content, content_type
