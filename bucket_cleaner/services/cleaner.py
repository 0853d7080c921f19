"""Bucket cleanup service.

Empties a bucket in two sequential phases: every incomplete multipart
upload is aborted first, so that uploaded parts invisible to the object
listing are released, then every object is deleted in batches.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from bucket_cleaner.infra.observability import metrics
from bucket_cleaner.infra.storage.client import (
    MAX_DELETE_BATCH,
    AbortFailure,
    PendingUpload,
    StorageClient,
)

logger = logging.getLogger("bucket_cleaner.cleaner")


@dataclass(frozen=True, slots=True)
class AbortSummary:
    """Outcome of aborting the pending multipart uploads."""

    found: int = 0
    aborted: int = 0
    failed: tuple[PendingUpload, ...] = ()


@dataclass(frozen=True, slots=True)
class DeleteSummary:
    """Outcome of deleting every object."""

    deleted: int = 0
    batches: int = 0


@dataclass(frozen=True, slots=True)
class CleanupReport:
    """Outcome of a full bucket cleanup."""

    uploads: AbortSummary
    objects_deleted: int
    delete_batches: int


class BucketCleaner:
    """Aborts multipart uploads and deletes every object of one bucket."""

    def __init__(
        self,
        client: StorageClient,
        bucket: str,
        *,
        batch_size: int = MAX_DELETE_BATCH,
    ) -> None:
        if not 1 <= batch_size <= MAX_DELETE_BATCH:
            raise ValueError(f"batch_size must be between 1 and {MAX_DELETE_BATCH}")
        self._client = client
        self._bucket = bucket
        self._batch_size = batch_size

    @property
    def bucket(self) -> str:
        return self._bucket

    def list_all_objects(self) -> list[str]:
        """Return every object key in the bucket, in listing order.

        Raises:
            TransportError: If any page request fails.
        """
        keys: list[str] = []
        token: str | None = None
        while True:
            page = self._client.list_objects(
                bucket=self._bucket, continuation_token=token
            )
            keys.extend(key for key in page.keys if key)
            token = page.next_token
            if not token:
                return keys

    def _list_pending_uploads(self) -> list[PendingUpload]:
        uploads: list[PendingUpload] = []
        key_marker: str | None = None
        upload_id_marker: str | None = None
        while True:
            page = self._client.list_multipart_uploads(
                bucket=self._bucket,
                key_marker=key_marker,
                upload_id_marker=upload_id_marker,
            )
            uploads.extend(page.uploads)
            key_marker = page.next_key_marker
            upload_id_marker = page.next_upload_id_marker
            # An upload-id marker alone does not request another page.
            if not key_marker:
                return uploads

    def abort_multipart_uploads(self) -> AbortSummary:
        """Abort every pending multipart upload.

        Individual abort failures are logged and collected in the returned
        summary; they never interrupt the loop. Listing failures propagate
        as ``TransportError``.
        """
        logger.info("Checking for ongoing multipart uploads...")
        uploads = self._list_pending_uploads()
        if not uploads:
            logger.info("No ongoing multipart uploads found.")
            return AbortSummary()

        logger.info(
            "Found %d ongoing multipart uploads. Aborting...",
            len(uploads),
            extra={"extra": {"bucket": self._bucket, "uploads": len(uploads)}},
        )
        aborted = 0
        failed: list[PendingUpload] = []
        for upload in uploads:
            try:
                self._client.abort_multipart_upload(
                    bucket=self._bucket,
                    object_key=upload.key,
                    upload_id=upload.upload_id,
                )
            except AbortFailure as exc:
                failed.append(upload)
                metrics.ABORT_FAILURES.inc()
                logger.warning(
                    "Failed to abort upload %s: %s",
                    upload.key,
                    exc,
                    extra={
                        "extra": {
                            "key": upload.key,
                            "upload_id": upload.upload_id,
                        }
                    },
                )
                continue
            aborted += 1
            metrics.UPLOADS_ABORTED.inc()
            logger.info("Aborted multipart upload: %s", upload.key)

        logger.info("All multipart uploads aborted!")
        return AbortSummary(
            found=len(uploads),
            aborted=aborted,
            failed=tuple(failed),
        )

    def delete_all_objects(self) -> DeleteSummary:
        """Delete every object in the bucket.

        Returns the number of keys sent for deletion and the number of
        DeleteObjects requests issued.

        Raises:
            TransportError: If listing or a batch delete fails. Batches after
                the failing one are not attempted.
        """
        remaining = self.list_all_objects()

        if not remaining:
            logger.info("The bucket is already empty!")
            return DeleteSummary()

        logger.info(
            "Found %d objects. Starting deletion...",
            len(remaining),
            extra={"extra": {"bucket": self._bucket, "objects": len(remaining)}},
        )
        deleted = 0
        batches = 0
        while remaining:
            batch = remaining[: self._batch_size]
            del remaining[: self._batch_size]
            result = self._client.delete_objects(bucket=self._bucket, keys=batch)
            batches += 1
            deleted += len(batch)
            metrics.DELETE_BATCHES.inc()
            metrics.OBJECTS_DELETED.inc(len(batch))
            for error in result.errors:
                metrics.DELETE_ERRORS.inc()
                logger.warning(
                    "Service reported an error deleting %s: %s %s",
                    error.key,
                    error.code,
                    error.message,
                )
            logger.info(
                "Deleted %d objects (total: %d)",
                len(batch),
                deleted,
                extra={"extra": {"batch": len(batch), "total": deleted}},
            )

        logger.info("All objects deleted!")
        return DeleteSummary(deleted=deleted, batches=batches)

    def clean_bucket(self) -> CleanupReport:
        """Abort pending multipart uploads, then delete all objects."""
        logger.info(
            "Starting bucket cleanup...",
            extra={"extra": {"bucket": self._bucket}},
        )
        uploads = self.abort_multipart_uploads()
        deletes = self.delete_all_objects()
        logger.info("Bucket cleaned successfully!")
        return CleanupReport(
            uploads=uploads,
            objects_deleted=deletes.deleted,
            delete_batches=deletes.batches,
        )
