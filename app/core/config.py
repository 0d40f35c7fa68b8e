"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "IA-Showcase"
    app_version: str = "0.1.0"
    api_prefix: str = "/api"
    database_url: str = "sqlite:///./ia_showcase.db"
    # Shared secret carried by every mutating moderation call
    admin_password: str = ""
    # Blob storage (local object store served under /media)
    storage_root: str = "./data/storage"
    storage_bucket: str = "submissions"
    public_base_url: str = "http://localhost:8000"
    media_prefix: str = "/media"
    max_upload_bytes: int = 10 * 1024 * 1024
    max_images_per_submission: int = 10
    allowed_image_formats: tuple[str, ...] = ("JPEG", "PNG", "WEBP")
    # Dashboard -> API client
    api_base_url: str = "http://localhost:8000/api"
    api_timeout: float = 30.0
    overview_limit: int = 10

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()

__all__ = ["settings", "Settings"]
