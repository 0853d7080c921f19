from prometheus_client import REGISTRY, CollectorRegistry, Counter, write_to_textfile

OBJECTS_DELETED = Counter(
    "bucket_cleaner_objects_deleted",
    "Object keys sent for deletion",
)

DELETE_BATCHES = Counter(
    "bucket_cleaner_delete_batches",
    "DeleteObjects requests issued",
)

DELETE_ERRORS = Counter(
    "bucket_cleaner_delete_errors",
    "Per-key errors reported by DeleteObjects responses",
)

UPLOADS_ABORTED = Counter(
    "bucket_cleaner_multipart_aborted",
    "Multipart uploads aborted",
)

ABORT_FAILURES = Counter(
    "bucket_cleaner_multipart_abort_failures",
    "Multipart upload aborts that failed",
)


def write_metrics(path: str, registry: CollectorRegistry = REGISTRY) -> None:
    """Dump the registry in the node-exporter textfile format."""
    write_to_textfile(path, registry)
