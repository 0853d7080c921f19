"""Storage client protocol and data types.

This module defines the abstract interface for the object storage operations
needed to empty a bucket: paginated listing of objects and multipart uploads,
batched object deletion and multipart upload abort.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Sequence

# Maximum number of keys accepted by a single DeleteObjects request
MAX_DELETE_BATCH = 1000


class StorageError(RuntimeError):
    """Raised when object storage operations fail."""


class TransportError(StorageError):
    """Raised when a listing or batch-delete request fails."""


class AbortFailure(StorageError):
    """Raised when aborting a single multipart upload fails."""


@dataclass(frozen=True, slots=True)
class ObjectPage:
    """One page of an object listing."""

    keys: tuple[str, ...] = ()
    next_token: str | None = None


@dataclass(frozen=True, slots=True)
class PendingUpload:
    """An incomplete multipart upload."""

    key: str
    upload_id: str


@dataclass(frozen=True, slots=True)
class UploadPage:
    """One page of a multipart upload listing.

    The two markers advance together; ``next_key_marker`` decides whether
    another page is requested.
    """

    uploads: tuple[PendingUpload, ...] = ()
    next_key_marker: str | None = None
    next_upload_id_marker: str | None = None


@dataclass(frozen=True, slots=True)
class DeleteError:
    """A per-key error reported inside a DeleteObjects response."""

    key: str
    code: str | None
    message: str | None


@dataclass(frozen=True, slots=True)
class DeleteResult:
    """Result of a batch delete request."""

    deleted: int
    errors: tuple[DeleteError, ...] = field(default_factory=tuple)


class StorageClient(Protocol):
    """Protocol defining the storage operations used by the bucket cleaner.

    Implementations must provide all methods defined here.
    """

    def list_objects(
        self,
        *,
        bucket: str,
        continuation_token: str | None = None,
    ) -> ObjectPage:
        """List one page of object keys.

        Args:
            bucket: Bucket name.
            continuation_token: Token returned by the previous page, if any.

        Returns:
            ObjectPage with the keys and the token for the next page.

        Raises:
            TransportError: If the request fails.
        """
        ...

    def delete_objects(self, *, bucket: str, keys: Sequence[str]) -> DeleteResult:
        """Delete up to MAX_DELETE_BATCH objects in one request.

        Args:
            bucket: Bucket name.
            keys: Object keys to delete (1..MAX_DELETE_BATCH).

        Returns:
            DeleteResult with the per-key errors reported by the service.

        Raises:
            TransportError: If the request fails.
        """
        ...

    def list_multipart_uploads(
        self,
        *,
        bucket: str,
        key_marker: str | None = None,
        upload_id_marker: str | None = None,
    ) -> UploadPage:
        """List one page of incomplete multipart uploads.

        Args:
            bucket: Bucket name.
            key_marker: Key marker returned by the previous page.
            upload_id_marker: Upload-id marker returned by the previous page.

        Returns:
            UploadPage with the uploads and both continuation markers.

        Raises:
            TransportError: If the request fails.
        """
        ...

    def abort_multipart_upload(
        self,
        *,
        bucket: str,
        object_key: str,
        upload_id: str,
    ) -> None:
        """Abort a multipart upload and clean up uploaded parts.

        Args:
            bucket: Bucket name.
            object_key: Object key of the upload.
            upload_id: Multipart upload ID to abort.

        Raises:
            AbortFailure: If the operation fails.
        """
        ...
