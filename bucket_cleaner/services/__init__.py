from .cleaner import AbortSummary, BucketCleaner, CleanupReport, DeleteSummary

__all__ = [
    "AbortSummary",
    "BucketCleaner",
    "CleanupReport",
    "DeleteSummary",
]
