"""Object storage abstraction layer.

This module provides a protocol-based abstraction for object storage backends,
enabling support for R2, S3, MinIO, and other S3-compatible services.
"""

from .client import (
    MAX_DELETE_BATCH,
    AbortFailure,
    DeleteError,
    DeleteResult,
    ObjectPage,
    PendingUpload,
    StorageClient,
    StorageError,
    TransportError,
    UploadPage,
)

__all__ = [
    "MAX_DELETE_BATCH",
    "AbortFailure",
    "DeleteError",
    "DeleteResult",
    "ObjectPage",
    "PendingUpload",
    "StorageClient",
    "StorageError",
    "TransportError",
    "UploadPage",
]
