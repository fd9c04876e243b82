from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

ENV_FILE = Path(".env")

SUPPORTED_BACKENDS: tuple[str, ...] = ("s3", "gcs")

# google-cloud-storage requires resumable chunks in multiples of 256 KiB.
GCS_CHUNK_UNIT = 256 * 1024
DEFAULT_GCS_UPLOAD_CHUNK_SIZE = 8 * 1024 * 1024


def _load_env_file() -> None:
    if not ENV_FILE.exists():
        return
    for raw_line in ENV_FILE.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "y", "on"}


@dataclass
class Settings:
    STORAGE_BACKEND: str = "s3"
    S3_ENDPOINT_URL: str | None = None
    S3_REGION: str = "us-east-1"
    S3_ACCESS_KEY_ID: str | None = None
    S3_SECRET_ACCESS_KEY: str | None = None
    S3_SESSION_TOKEN: str | None = None
    S3_USE_SSL: bool = True
    S3_ADDRESSING_STYLE: str = "auto"
    GCS_PROJECT: str | None = None
    GCS_CREDENTIALS_FILE: str | None = None
    GCS_UPLOAD_CHUNK_SIZE: int = DEFAULT_GCS_UPLOAD_CHUNK_SIZE
    LOG_LEVEL: str = "INFO"
    ENABLE_METRICS: bool = True

    def __post_init__(self) -> None:
        backend = self.STORAGE_BACKEND.strip().lower()
        if backend not in SUPPORTED_BACKENDS:
            raise ValueError(
                f"STORAGE_BACKEND must be one of {', '.join(SUPPORTED_BACKENDS)}; "
                f"got {self.STORAGE_BACKEND!r}."
            )
        self.STORAGE_BACKEND = backend
        self.LOG_LEVEL = self.LOG_LEVEL.strip().upper()
        if self.GCS_UPLOAD_CHUNK_SIZE <= 0 or self.GCS_UPLOAD_CHUNK_SIZE % GCS_CHUNK_UNIT:
            raise ValueError(
                "GCS_UPLOAD_CHUNK_SIZE must be a positive multiple of 262144 bytes."
            )

    @classmethod
    def from_environment(cls) -> "Settings":
        _load_env_file()
        return cls(
            STORAGE_BACKEND=os.environ.get("STORAGE_BACKEND", cls.STORAGE_BACKEND),
            S3_ENDPOINT_URL=os.environ.get("S3_ENDPOINT_URL") or None,
            S3_REGION=os.environ.get("S3_REGION", cls.S3_REGION),
            S3_ACCESS_KEY_ID=os.environ.get("S3_ACCESS_KEY_ID"),
            S3_SECRET_ACCESS_KEY=os.environ.get("S3_SECRET_ACCESS_KEY"),
            S3_SESSION_TOKEN=os.environ.get("S3_SESSION_TOKEN"),
            S3_USE_SSL=_as_bool(os.environ.get("S3_USE_SSL"), cls.S3_USE_SSL),
            S3_ADDRESSING_STYLE=os.environ.get(
                "S3_ADDRESSING_STYLE", cls.S3_ADDRESSING_STYLE
            ),
            GCS_PROJECT=os.environ.get("GCS_PROJECT"),
            GCS_CREDENTIALS_FILE=os.environ.get("GCS_CREDENTIALS_FILE"),
            GCS_UPLOAD_CHUNK_SIZE=int(
                os.environ.get("GCS_UPLOAD_CHUNK_SIZE", cls.GCS_UPLOAD_CHUNK_SIZE)
            ),
            LOG_LEVEL=os.environ.get("LOG_LEVEL", cls.LOG_LEVEL),
            ENABLE_METRICS=_as_bool(
                os.environ.get("ENABLE_METRICS"), cls.ENABLE_METRICS
            ),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_environment()
