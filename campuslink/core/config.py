"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # PostgreSQL (accounts)
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "campuslink_user"
    postgres_password: str = "password"
    postgres_db: str = "campuslink_db"
    # Full SQLAlchemy URL, overrides the postgres_* parts when set
    database_url: str = ""

    # MongoDB (documents)
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "campuslink_docs"

    # Gemini AI (OpenAI-compatible endpoint)
    gemini_api_key: str = ""
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    gemini_model: str = "gemini-1.5-flash"

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # Sign-up rules
    allowed_email_domains: List[str] = ["campus.edu"]
    admin_emails: List[str] = []

    # Issue images
    upload_dir: str = "uploads"
    max_image_size_mb: int = 5

    # Mentor matching
    mentor_match_max_candidates: int = 20
    mentor_match_default_limit: int = 10

    # App
    debug: bool = False
    log_level: str = "INFO"

    @property
    def postgres_url(self) -> str:
        """Construct PostgreSQL connection URL"""
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def sql_url(self) -> str:
        return self.database_url or self.postgres_url

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
