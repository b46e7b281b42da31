import os

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # AI completion
    google_api_key: str | None = None
    ai_model: str = "gemini-2.5-flash"
    ai_max_tokens: int = 8192
    ai_temperature: float = 0.3
    ai_timeout_seconds: float = 30.0
    ai_retries: int = 3
    ai_retry_delay_seconds: float = 1.0
    ai_max_retry_delay_seconds: float = 30.0
    translation_model: str = "gemini-2.5-flash"
    translation_temperature: float = 0.5

    # Conversion
    owned_domain: str = "notta.ai"
    anchor_heading_level: int | None = 2

    # Metadata extraction size tiers, in characters
    direct_process_limit: int = 15_000
    summary_process_limit: int = 150_000
    summary_target_tokens: int = 45_000
    words_per_minute: int = 200

    # Google Docs source
    google_client_id: str | None = None
    google_client_secret: str | None = None
    google_refresh_token: str | None = None
    google_access_token: str | None = None  # Static token, skips the refresh flow
    fetch_retries: int = 3
    fetch_timeout_seconds: float = 30.0

    # Image storage
    aws_bucket_name: str | None = None
    aws_region: str = "ap-northeast-1"
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    s3_folder_prefix: str = "pictures/"
    assets_cdn_url: str = "https://www.notta.ai/"
    image_file_prefix: str = "notta-blog"
    image_compress_threshold_kb: int = 200
    image_max_width: int = 1200
    image_quality: int = 70

    # CMS
    storyblok_oauth_token: str | None = None
    storyblok_space_id: str | None = None
    storyblok_api_url: str = "https://mapi.storyblok.com/v1"
    site_url: str = "https://www.notta.ai"
    app_signup_url: str = "https://app.notta.ai/signup"
    # Blog folders per metadata language, e.g. BLOG_PARENT_IDS={"en": 123}
    blog_parent_ids: dict[str, int] = {}
    blog_slug_prefixes: dict[str, str] = {"en": "en/blog/", "jp": "blog/", "zh": "zh/blog/"}

    log_dir: str = "logs"

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=[os.getenv("ENV_FILE", ""), ".env"],
        extra="ignore",
    )
