"""Hierarchical filesystem view over S3-compatible object storage.

Object stores address content by (bucket, key) and have no directories.
This package emulates files and directories on top of them: a directory is a
key prefix with no content of its own, listings walk paginated prefix
queries, and rename is a copy followed by a delete.

Recommended Usage:
    >>> from bucketfs import BucketFS, S3ClientConfig, S3ObjectStore
    >>> store = S3ObjectStore.from_config(S3ClientConfig(aws_profile="dev"))
    >>> fs = BucketFS("my-bucket", store)
    >>> with fs.create("/reports/q1.txt") as f:
    ...     f.write(b"totals")
    >>> fs.stat("/reports/q1.txt").size
    6

The store is reached only through the ``ObjectStore`` protocol, so any object
exposing the same seven primitives can stand in for S3.
"""

__version__ = "0.1.0"

from .core.exceptions import (
    BucketFSError,
    DeletedError,
    ListingInterruptedError,
    NotAListingError,
    NotFoundError,
    NothingToDeleteError,
    NotReadableError,
    StoreReadError,
    StoreWriteError,
    UnsupportedError,
    ValidationError,
    WaitTimeoutError,
)
from .filesystem import BucketFile, BucketFS, EntryInfo, SourceKind
from .objectstorage import (
    FetchedObject,
    ListedObject,
    ListPage,
    ObjectStore,
    S3ClientConfig,
    S3ObjectStore,
)

__all__ = [
    # Filesystem
    "BucketFS",
    "BucketFile",
    "EntryInfo",
    "SourceKind",
    # Object store
    "ObjectStore",
    "S3ObjectStore",
    "S3ClientConfig",
    "FetchedObject",
    "ListedObject",
    "ListPage",
    # Errors
    "BucketFSError",
    "DeletedError",
    "ListingInterruptedError",
    "NotAListingError",
    "NotFoundError",
    "NothingToDeleteError",
    "NotReadableError",
    "StoreReadError",
    "StoreWriteError",
    "UnsupportedError",
    "ValidationError",
    "WaitTimeoutError",
]
