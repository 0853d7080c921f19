from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from bucket_cleaner.common.config import get_settings

SETTINGS_ENV_VARS = (
    "R2_BUCKET",
    "R2_ACCOUNT_ID",
    "R2_ACCESS_KEY_ID",
    "R2_SECRET_ACCESS_KEY",
    "S3_ENDPOINT_URL",
    "S3_REGION",
    "S3_ADDRESSING_STYLE",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "METRICS_TEXTFILE",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Run every test without ambient credentials or a stray .env file."""
    # .env loading writes straight into os.environ
    with patch.dict(os.environ):
        for name in SETTINGS_ENV_VARS:
            os.environ.pop(name, None)
        monkeypatch.chdir(tmp_path)
        get_settings.cache_clear()  # type: ignore[attr-defined]
        yield
        get_settings.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture
def r2_environment(monkeypatch):
    monkeypatch.setenv("R2_BUCKET", "test-bucket")
    monkeypatch.setenv("R2_ACCOUNT_ID", "abc123")
    monkeypatch.setenv("R2_ACCESS_KEY_ID", "test-key")
    monkeypatch.setenv("R2_SECRET_ACCESS_KEY", "test-secret")
