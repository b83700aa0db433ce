# /markhub-backend/app/core/config.py

"""
Central configuration for the MarkHub backend.

All settings come from environment variables, with a `.env` file loaded for
local development. Modules read the shared `settings` instance instead of
calling `os.getenv` themselves.
"""

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()

MIB = 1024 * 1024


def _split_csv(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    database_url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///./markhub.db"))

    # --- Credential provider (external) ---
    auth_jwt_secret: str = field(default_factory=lambda: os.getenv("AUTH_JWT_SECRET", "dev-only-auth-secret"))
    auth_jwt_audience: str = field(default_factory=lambda: os.getenv("AUTH_JWT_AUDIENCE", "authenticated"))

    # --- Blob storage ---
    blob_storage_dir: str = field(default_factory=lambda: os.getenv("BLOB_STORAGE_DIR", "./blob_storage"))
    blob_signing_secret: str = field(default_factory=lambda: os.getenv("BLOB_SIGNING_SECRET", "dev-only-blob-secret"))
    public_base_url: str = field(default_factory=lambda: os.getenv("PUBLIC_BASE_URL", "http://localhost:8000"))
    signed_url_ttl_seconds: int = field(default_factory=lambda: int(os.getenv("SIGNED_URL_TTL_SECONDS", "300")))

    # --- Upload rules ---
    max_upload_bytes: int = field(default_factory=lambda: int(os.getenv("MAX_UPLOAD_BYTES", str(10 * MIB))))

    # --- Service ---
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    cors_origins: List[str] = field(default_factory=lambda: _split_csv(os.getenv("CORS_ORIGINS", "*")))


settings = Settings()
