# app/config.py
import os
from typing import List

from pydantic import BaseModel


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    database_url: str = "sqlite:///./store.db"
    media_root: str = "uploads"
    media_url: str = "/uploads"
    max_upload_bytes: int = 10 * 1024 * 1024
    secret_key: str = "dev-secret-change-me"
    token_ttl_seconds: int = 24 * 60 * 60
    require_auth: bool = False
    cors_origins: List[str] = ["*"]
    host: str = "127.0.0.1"
    port: int = 5000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///./store.db"),
            media_root=os.getenv("MEDIA_ROOT", "uploads"),
            media_url=os.getenv("MEDIA_URL", "/uploads").rstrip("/") or "/uploads",
            max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024))),
            secret_key=os.getenv("SECRET_KEY", "dev-secret-change-me"),
            token_ttl_seconds=int(os.getenv("TOKEN_TTL_SECONDS", str(24 * 60 * 60))),
            require_auth=_env_bool("REQUIRE_AUTH", False),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            host=os.getenv("HOST", "127.0.0.1"),
            port=int(os.getenv("PORT", "5000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
