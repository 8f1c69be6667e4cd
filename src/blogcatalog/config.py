"""Application configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    content_dir: Path = Path("src/blog")
    pattern: str = "**/*.md"
    load_workers: int = 4
    debug: bool = False
    app_title: str = "Blog"

    model_config = SettingsConfigDict(
        env_prefix="BLOG_",
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()
