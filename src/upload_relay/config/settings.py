# src/upload_relay/config/settings.py
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
LEDGER_FILE_NAME = "file-uploads-tracker.xlsx"
STORAGE_BACKENDS = ("local", "s3", "drive")


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Usage:
        from upload_relay.config import get_settings
        settings = get_settings()
        bucket_name = settings.s3_bucket_name
    """

    app_name: str = Field(
        default="upload-relay",
        description="Application name"
    )

    # Storage backend selection
    storage_backend: str = Field(
        default="local",
        description="Object store backend: local, s3 or drive"
    )

    # AWS / S3
    aws_region: str = Field(
        default="us-east-1",
        alias="AWS_DEFAULT_REGION"
    )

    aws_endpoint_url: Optional[str] = Field(
        default=None,
        alias="AWS_ENDPOINT_URL"
    )

    s3_bucket_name: str = Field(
        default="upload-relay-storage",
        description="S3 bucket for uploaded files and the ledger"
    )

    # Google Drive
    drive_folder_id: Optional[str] = Field(
        default=None,
        alias="GOOGLE_DRIVE_FOLDER_ID",
        description="Drive folder that receives uploads"
    )

    drive_access_token: Optional[str] = Field(
        default=None,
        alias="GOOGLE_DRIVE_ACCESS_TOKEN",
        description="OAuth access token used for Drive API calls"
    )

    drive_token_file: Optional[str] = Field(
        default=None,
        alias="GOOGLE_DRIVE_TOKEN_FILE",
        description="Credentials file holding a Drive access token"
    )

    # Local storage
    storage_dir: str = Field(
        default="storage",
        description="Root directory for the local backend"
    )

    upload_tmp_dir: str = Field(
        default="uploads",
        description="Directory for temporary copies of incoming payloads"
    )

    # Upload handling
    key_prefix: str = Field(
        default="uploads/",
        description="Prefix for generated storage keys"
    )

    ledger_file_name: str = Field(
        default=LEDGER_FILE_NAME,
        description="Name of the shared upload ledger spreadsheet"
    )

    max_upload_bytes: int = Field(
        default=MAX_UPLOAD_BYTES,
        gt=0,
        description="Largest accepted payload in bytes"
    )

    make_public: bool = Field(
        default=False,
        description="Make stored uploads publicly readable"
    )

    # Web
    frontend_url: str = Field(
        default="http://localhost:3000",
        alias="FRONTEND_URL",
        description="Origin allowed by the CORS policy"
    )

    backend_url: str = Field(
        default="http://localhost:3001",
        alias="BACKEND_URL",
        description="Base URL the upload client posts to"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator("storage_backend", mode="before")
    @classmethod
    def normalize_storage_backend(cls, v):
        """Accept a few spellings of the backend names."""
        if isinstance(v, str):
            mode_mapping = {
                "gcs": "s3",
                "bucket": "s3",
                "google-drive": "drive",
                "filesystem": "local",
            }
            v = v.strip().lower()
            return mode_mapping.get(v, v)
        return v

    @field_validator("storage_backend")
    @classmethod
    def validate_storage_backend(cls, v):
        if v not in STORAGE_BACKENDS:
            raise ValueError(f"Invalid storage_backend: {v}. Must be one of {list(STORAGE_BACKENDS)}")
        return v

    @field_validator("key_prefix")
    @classmethod
    def ensure_trailing_slash(cls, v):
        if v and not v.endswith("/"):
            return f"{v}/"
        return v

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
