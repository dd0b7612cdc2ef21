from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "ocr"
    db_username: str = "postgres"
    db_password: str = "secret"
    db_role: str = ""

    ocr_provider: str = "ocr_space"
    ocr_api_url: str = "https://api.ocr.space/parse/image"
    ocr_api_key: str = ""
    ocr_timeout_seconds: int = 30

    storage_backend: str = "supabase"
    storage_url: str = ""
    storage_api_key: str = ""
    storage_bucket: str = "ocr-images"
    storage_cache_seconds: int = 3600
    local_storage_root: str = "storage"
    local_storage_public_url: str = "http://localhost:8000/storage"

    history_read_error_policy: Literal["empty", "propagate"] = "empty"

    download_dir: str = "."
