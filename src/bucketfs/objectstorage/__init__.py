"""Object storage collaborators for the filesystem layer."""

from .base import (
    FetchedObject,
    ListedObject,
    ListPage,
    ObjectStore,
    copy_source,
    parse_copy_source,
)
from .clients import S3ClientConfig, S3ClientManager
from .s3_store import S3ObjectStore

__all__ = [
    "FetchedObject",
    "ListedObject",
    "ListPage",
    "ObjectStore",
    "S3ClientConfig",
    "S3ClientManager",
    "S3ObjectStore",
    "copy_source",
    "parse_copy_source",
]
