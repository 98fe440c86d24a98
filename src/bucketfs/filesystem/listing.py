"""Directory listing over paginated prefix queries.

A directory listing is rebuilt from scratch on every call: the store keeps no
listing state, so each read walks the continuation tokens again. The
delimiter form of the query lets the store collapse nested keys, leaving one
level of objects plus one common prefix per subdirectory.
"""

from typing import Iterator, Optional

from bucketfs.core import get_logger, settings
from bucketfs.core.exceptions import BucketFSError, ListingInterruptedError
from bucketfs.objectstorage.base import ListPage, ObjectStore

from .info import EntryInfo, basename

logger = get_logger(__name__)

SEPARATOR = "/"


def normalize_key(path: str) -> str:
    """Strip leading separators from a filesystem path to get a store key."""
    return path.lstrip(SEPARATOR)


def directory_prefix(path: str) -> str:
    """Prefix that selects the children of a directory path."""
    prefix = normalize_key(path)
    if prefix and not prefix.endswith(SEPARATOR):
        prefix += SEPARATOR
    return prefix


def iter_pages(
    store: ObjectStore,
    bucket: str,
    prefix: str,
    page_size: int,
    delimiter: Optional[str] = None,
) -> Iterator[ListPage]:
    """Yield listing pages until the store stops reporting more results.

    Paging stops as soon as the store says the listing is complete or fails
    to hand back a continuation token, whichever comes first.
    """
    token: Optional[str] = None
    while True:
        page = store.list_prefix(
            bucket,
            prefix,
            delimiter=delimiter,
            continuation_token=token,
            max_keys=page_size,
        )
        yield page

        token = page.next_token
        if not page.is_truncated or not token:
            break


def list_directory(
    store: ObjectStore, bucket: str, path: str, count: int
) -> list[EntryInfo]:
    """List the immediate children of a directory path.

    Args:
        store: Object store to query
        bucket: Bucket holding the directory
        path: Directory path (leading separators are ignored)
        count: Page size; values <= 0 use the configured default

    Returns:
        Entries in listing order, one per child name

    Raises:
        NotFoundError: If the bucket does not exist
        ListingInterruptedError: If a page fails after entries were
            collected; ``partial`` holds them
    """
    prefix = directory_prefix(path)
    page_size = count if count > 0 else settings.list_page_size
    entries: dict[str, EntryInfo] = {}

    logger.debug("Listing directory", bucket=bucket, prefix=prefix, page_size=page_size)

    try:
        for page in iter_pages(store, bucket, prefix, page_size, SEPARATOR):
            for obj in page.objects:
                if obj.key == prefix:
                    continue
                name = basename(obj.key)
                # a subdirectory of the same name takes precedence
                if name not in entries:
                    entries[name] = EntryInfo(key=obj.key, source=obj)
            for common_prefix in page.common_prefixes:
                entries[basename(common_prefix)] = EntryInfo(key=common_prefix)
    except BucketFSError as e:
        if not entries:
            raise
        error_msg = f"Failed to list directory '{bucket}/{prefix}': {e}"
        logger.error(error_msg, error=str(e), collected=len(entries))
        raise ListingInterruptedError(error_msg, partial=entries.values()) from e

    logger.debug("Directory listed", bucket=bucket, prefix=prefix, count=len(entries))
    return list(entries.values())
