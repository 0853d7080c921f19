"""S3-compatible storage client implementation.

This module provides an S3-compatible storage client that works with
Cloudflare R2, AWS S3, MinIO and other S3-compatible object storage services.

Dependencies:
    - boto3
    - botocore
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

from bucket_cleaner.infra.storage.client import (
    MAX_DELETE_BATCH,
    AbortFailure,
    DeleteError,
    DeleteResult,
    ObjectPage,
    PendingUpload,
    StorageError,
    TransportError,
    UploadPage,
)

if TYPE_CHECKING:
    from bucket_cleaner.common.config import Settings


class S3StorageClient:
    """S3-compatible object storage client.

    Uses boto3 for all storage operations. Retries and timeouts are the
    botocore defaults.
    """

    def __init__(self, *, settings: "Settings") -> None:
        """Initialize the S3 client with configuration from settings.

        Args:
            settings: Connection descriptor with endpoint and credentials.

        Raises:
            StorageError: If boto3 is not installed.
        """
        self._settings = settings
        self._client = self._build_client(settings)

    @staticmethod
    def _build_client(settings: "Settings") -> Any:
        """Create a boto3 S3 client from settings."""
        try:
            import boto3
            from botocore.config import Config
        except ImportError as exc:
            raise StorageError(
                "boto3 and botocore are required for S3 storage backend. "
                "Install with: pip install boto3"
            ) from exc

        config = Config(
            signature_version="s3v4",
            s3={"addressing_style": settings.ADDRESSING_STYLE},
        )

        return boto3.client(
            "s3",
            endpoint_url=settings.ENDPOINT_URL,
            region_name=settings.REGION,
            aws_access_key_id=settings.ACCESS_KEY_ID,
            aws_secret_access_key=settings.SECRET_ACCESS_KEY,
            config=config,
        )

    def list_objects(
        self,
        *,
        bucket: str,
        continuation_token: str | None = None,
    ) -> ObjectPage:
        """List one page of object keys."""
        params: dict[str, Any] = {"Bucket": bucket}
        if continuation_token:
            params["ContinuationToken"] = continuation_token

        try:
            response = self._client.list_objects_v2(**params)
        except Exception as exc:
            raise TransportError(f"Failed to list objects: {exc}") from exc

        keys = tuple(
            str(item["Key"])
            for item in response.get("Contents") or []
            if item.get("Key")
        )
        return ObjectPage(
            keys=keys,
            next_token=response.get("NextContinuationToken") or None,
        )

    def delete_objects(self, *, bucket: str, keys: Sequence[str]) -> DeleteResult:
        """Delete up to MAX_DELETE_BATCH objects in one request."""
        if not keys:
            raise ValueError("delete_objects requires at least one key")
        if len(keys) > MAX_DELETE_BATCH:
            raise ValueError(
                f"delete_objects accepts at most {MAX_DELETE_BATCH} keys "
                f"(got {len(keys)})"
            )

        try:
            response = self._client.delete_objects(
                Bucket=bucket,
                Delete={"Objects": [{"Key": key} for key in keys]},
            )
        except Exception as exc:
            raise TransportError(f"Failed to delete objects: {exc}") from exc

        errors = tuple(
            DeleteError(
                key=str(item.get("Key", "")),
                code=item.get("Code"),
                message=item.get("Message"),
            )
            for item in response.get("Errors") or []
        )
        return DeleteResult(deleted=len(response.get("Deleted") or []), errors=errors)

    def list_multipart_uploads(
        self,
        *,
        bucket: str,
        key_marker: str | None = None,
        upload_id_marker: str | None = None,
    ) -> UploadPage:
        """List one page of incomplete multipart uploads."""
        params: dict[str, Any] = {"Bucket": bucket}
        if key_marker:
            params["KeyMarker"] = key_marker
        if upload_id_marker:
            params["UploadIdMarker"] = upload_id_marker

        try:
            response = self._client.list_multipart_uploads(**params)
        except Exception as exc:
            raise TransportError(f"Failed to list multipart uploads: {exc}") from exc

        uploads = tuple(
            PendingUpload(key=str(item["Key"]), upload_id=str(item["UploadId"]))
            for item in response.get("Uploads") or []
        )
        return UploadPage(
            uploads=uploads,
            next_key_marker=response.get("NextKeyMarker") or None,
            next_upload_id_marker=response.get("NextUploadIdMarker") or None,
        )

    def abort_multipart_upload(
        self,
        *,
        bucket: str,
        object_key: str,
        upload_id: str,
    ) -> None:
        """Abort a multipart upload and clean up uploaded parts."""
        try:
            self._client.abort_multipart_upload(
                Bucket=bucket,
                Key=object_key,
                UploadId=upload_id,
            )
        except Exception as exc:
            raise AbortFailure(f"Failed to abort multipart upload: {exc}") from exc
