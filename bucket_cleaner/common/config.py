from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

ENV_FILE = Path(".env")

DEFAULT_REGION = "auto"
DEFAULT_ADDRESSING_STYLE = "path"
ADDRESSING_STYLES: tuple[str, ...] = ("path", "virtual", "auto")
LOG_FORMATS: tuple[str, ...] = ("plain", "json")
LOG_LEVELS: tuple[str, ...] = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
R2_ENDPOINT_TEMPLATE = "https://{account_id}.r2.cloudflarestorage.com"


class ConfigurationError(ValueError):
    """Raised when connection settings are missing or invalid."""


def _load_env_file(path: Path | None = None) -> None:
    env_file = path or ENV_FILE
    if not env_file.exists():
        return
    for raw_line in env_file.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _env(name: str) -> str:
    return (os.environ.get(name) or "").strip()


def build_endpoint_url(account_id: str) -> str:
    return R2_ENDPOINT_TEMPLATE.format(account_id=account_id)


@dataclass(frozen=True)
class Settings:
    """Connection descriptor for the bucket being emptied."""

    BUCKET: str
    ENDPOINT_URL: str
    ACCESS_KEY_ID: str
    SECRET_ACCESS_KEY: str
    REGION: str = DEFAULT_REGION
    ADDRESSING_STYLE: str = DEFAULT_ADDRESSING_STYLE
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "plain"
    METRICS_TEXTFILE: str | None = None

    def __post_init__(self) -> None:
        missing = [
            name
            for name, value in (
                ("R2_BUCKET", self.BUCKET),
                ("S3_ENDPOINT_URL or R2_ACCOUNT_ID", self.ENDPOINT_URL),
                ("R2_ACCESS_KEY_ID", self.ACCESS_KEY_ID),
                ("R2_SECRET_ACCESS_KEY", self.SECRET_ACCESS_KEY),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                "Missing required configuration: " + ", ".join(missing)
            )
        if self.ADDRESSING_STYLE not in ADDRESSING_STYLES:
            raise ConfigurationError(
                f"S3_ADDRESSING_STYLE must be one of {', '.join(ADDRESSING_STYLES)}"
                f" (got {self.ADDRESSING_STYLE!r})."
            )
        if self.LOG_LEVEL not in LOG_LEVELS:
            raise ConfigurationError(
                f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}"
                f" (got {self.LOG_LEVEL!r})."
            )
        if self.LOG_FORMAT not in LOG_FORMATS:
            raise ConfigurationError(
                f"LOG_FORMAT must be one of {', '.join(LOG_FORMATS)}"
                f" (got {self.LOG_FORMAT!r})."
            )

    @classmethod
    def from_environment(cls, env_file: Path | None = None) -> "Settings":
        _load_env_file(env_file)
        endpoint_url = _env("S3_ENDPOINT_URL")
        account_id = _env("R2_ACCOUNT_ID")
        if not endpoint_url and account_id:
            endpoint_url = build_endpoint_url(account_id)

        return cls(
            BUCKET=_env("R2_BUCKET"),
            ENDPOINT_URL=endpoint_url,
            ACCESS_KEY_ID=_env("R2_ACCESS_KEY_ID"),
            SECRET_ACCESS_KEY=_env("R2_SECRET_ACCESS_KEY"),
            REGION=_env("S3_REGION") or DEFAULT_REGION,
            ADDRESSING_STYLE=(
                _env("S3_ADDRESSING_STYLE") or DEFAULT_ADDRESSING_STYLE
            ).lower(),
            LOG_LEVEL=(_env("LOG_LEVEL") or "INFO").upper(),
            LOG_FORMAT=(_env("LOG_FORMAT") or "plain").lower(),
            METRICS_TEXTFILE=_env("METRICS_TEXTFILE") or None,
        )


@lru_cache(maxsize=1)
def get_settings(env_file: Path | None = None) -> Settings:
    return Settings.from_environment(env_file)
