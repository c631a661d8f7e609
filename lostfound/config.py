"""Pydantic Settings loaded from environment."""
import os
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

_PACKAGE_DIR = os.path.dirname(__file__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LOSTFOUND_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    secret_key: str = "dev-secret-change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    reset_token_expire_minutes: int = 10
    email_change_token_expire_minutes: int = 30
    verification_code_ttl_minutes: int = 15

    data_dir: str = os.path.join(_PACKAGE_DIR, "data")
    upload_dir: str = os.path.join(_PACKAGE_DIR, "data", "uploads")
    media_base_url: str = ""
    cors_origins: str = "http://localhost:3000"

    comment_max_length: int = 2000
    comment_max_depth: int = 5  # replies allowed while depth < this
    max_upload_bytes: int = 5 * 1024 * 1024
    max_report_photos: int = 5

    default_locale: str = "en"
    log_level: str = "INFO"

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
