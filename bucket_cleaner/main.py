#!/usr/bin/env python3
"""Empty an S3-compatible bucket.

Usage:
  bucket-cleaner
  bucket-cleaner --env-file deploy/.env.staging --log-format json

Aborts every incomplete multipart upload, then deletes every object.
Connection settings come from R2_* / S3_* environment variables or the
env file.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Sequence

from bucket_cleaner.common.config import (
    LOG_FORMATS,
    LOG_LEVELS,
    ConfigurationError,
    Settings,
    get_settings,
)
from bucket_cleaner.common.logging import setup_logging
from bucket_cleaner.infra.observability.metrics import write_metrics
from bucket_cleaner.infra.storage.s3_client import S3StorageClient
from bucket_cleaner.services.cleaner import BucketCleaner

logger = logging.getLogger("bucket_cleaner")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Abort multipart uploads and delete every object in a bucket"
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Read KEY=VALUE settings from this file (default: ./.env)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Root log level, overrides LOG_LEVEL (default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Console log format, overrides LOG_FORMAT (default: plain)",
    )
    return parser.parse_args(argv)


def _load_settings(args: argparse.Namespace) -> Settings:
    settings = get_settings(args.env_file)
    overrides: dict[str, str] = {}
    if args.log_level:
        overrides["LOG_LEVEL"] = args.log_level
    if args.log_format:
        overrides["LOG_FORMAT"] = args.log_format
    if overrides:
        settings = dataclasses.replace(settings, **overrides)
    return settings


def _export_metrics(path: str | None) -> None:
    if not path:
        return
    try:
        write_metrics(path)
    except OSError as exc:
        logger.warning("Could not write metrics to %s: %s", path, exc)


def run(settings: Settings) -> int:
    try:
        client = S3StorageClient(settings=settings)
        report = BucketCleaner(client, settings.BUCKET).clean_bucket()
    except Exception:
        logger.exception(
            "Error cleaning bucket",
            extra={"extra": {"bucket": settings.BUCKET}},
        )
        return 1
    finally:
        _export_metrics(settings.METRICS_TEXTFILE)

    if report.uploads.failed:
        logger.warning(
            "%d of %d multipart uploads could not be aborted",
            len(report.uploads.failed),
            report.uploads.found,
        )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        settings = _load_settings(args)
    except ConfigurationError as exc:
        setup_logging(args.log_level or "INFO", args.log_format or "plain")
        logger.error("Invalid configuration: %s", exc)
        return 1

    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    return run(settings)


if __name__ == "__main__":
    sys.exit(main())
