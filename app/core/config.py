# app/core/config.py
import os
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    source_mode: str = "http"
    api_url: str = "http://127.0.0.1:9000"
    username: str = ""
    password: str = ""
    data_dir: str = "data"
    fetch_timeout: float = 30.0
    fetch_workers: int = 8
    preserve_collisions: bool = False
    log_level: str = "INFO"
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            source_mode=os.getenv("SOURCE_MODE", "http").strip().lower(),
            api_url=os.getenv("INCIDENT_API_URL", "http://127.0.0.1:9000").rstrip("/"),
            username=os.getenv("HTTP_USERNAME", ""),
            password=os.getenv("HTTP_PASSWORD", ""),
            data_dir=os.getenv("DATA_DIR", "data"),
            fetch_timeout=float(os.getenv("FETCH_TIMEOUT", "30")),
            fetch_workers=int(os.getenv("FETCH_WORKERS", "8")),
            preserve_collisions=_flag("PRESERVE_TIMESTAMP_COLLISIONS"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            # CORS: allow list from env (fallback "*")
            cors_origins=[o for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o],
        )


def build_source(settings: Settings):
    """Return the incident source selected by SOURCE_MODE."""
    # imported here so config stays importable without the transport modules
    from app.sources.file_source import FileIncidentSource
    from app.sources.http_source import HttpIncidentSource

    if settings.source_mode == "http":
        return HttpIncidentSource(
            settings.api_url,
            settings.username,
            settings.password,
            timeout=settings.fetch_timeout,
        )
    if settings.source_mode == "file":
        return FileIncidentSource(settings.data_dir)
    raise ValueError(f"unknown SOURCE_MODE {settings.source_mode!r} (expected 'http' or 'file')")
