from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

ENV_FILE = Path(".env")

SIGNATURE_VERSIONS: tuple[str, ...] = ("s3v4", "s3")
MAX_LIST_CAP = 1000


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
    S3_HOSTNAME: str = "s3.amazonaws.com"
    S3_REGION: str = "us-east-1"
    S3_ACCESS_KEY_ID: str | None = None
    S3_SECRET_ACCESS_KEY: str | None = None
    S3_SESSION_TOKEN: str | None = None
    S3_SIGNATURE_VERSION: str = "s3v4"
    S3_USE_SSL: bool = False
    S3_TIMEOUT: float = 120
    S3_MAX_LIST: int = MAX_LIST_CAP
    TRACE_HTTP: bool = False
    ENABLE_METRICS: bool = True

    def __post_init__(self) -> None:
        hostname = self.S3_HOSTNAME.strip()
        if not hostname or "://" in hostname or "/" in hostname:
            raise ValueError(
                "S3_HOSTNAME must be a bare hostname (e.g. s3.amazonaws.com)."
            )
        self.S3_HOSTNAME = hostname
        if self.S3_SIGNATURE_VERSION not in SIGNATURE_VERSIONS:
            raise ValueError(
                f"S3_SIGNATURE_VERSION must be one of {', '.join(SIGNATURE_VERSIONS)}."
            )
        if not 1 <= self.S3_MAX_LIST <= MAX_LIST_CAP:
            raise ValueError(f"S3_MAX_LIST must be between 1 and {MAX_LIST_CAP}.")

    @classmethod
    def from_environment(cls) -> "Settings":
        _load_env_file()
        return cls(
            S3_HOSTNAME=os.environ.get("S3_HOSTNAME", cls.S3_HOSTNAME),
            S3_REGION=os.environ.get("S3_REGION", cls.S3_REGION),
            S3_ACCESS_KEY_ID=os.environ.get("S3_ACCESS_KEY_ID"),
            S3_SECRET_ACCESS_KEY=os.environ.get("S3_SECRET_ACCESS_KEY"),
            S3_SESSION_TOKEN=os.environ.get("S3_SESSION_TOKEN"),
            S3_SIGNATURE_VERSION=os.environ.get(
                "S3_SIGNATURE_VERSION", cls.S3_SIGNATURE_VERSION
            ),
            S3_USE_SSL=_as_bool(os.environ.get("S3_USE_SSL"), cls.S3_USE_SSL),
            S3_TIMEOUT=float(os.environ.get("S3_TIMEOUT", cls.S3_TIMEOUT)),
            S3_MAX_LIST=int(os.environ.get("S3_MAX_LIST", cls.S3_MAX_LIST)),
            TRACE_HTTP=_as_bool(os.environ.get("TRACE_HTTP"), cls.TRACE_HTTP),
            ENABLE_METRICS=_as_bool(
                os.environ.get("ENABLE_METRICS"), cls.ENABLE_METRICS
            ),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_environment()
