"""Filesystem operations over a flat object namespace.

``BucketFS`` maps paths onto keys of a single bucket. There are no directory
objects in the store: a directory is whatever a key prefix implies, so
creating one is a single empty put and removing one is a list followed by a
batch delete. Rename is a copy, a delete, and a wait for the new key to show
up. Neither of those multi-step operations is atomic, and no rollback is
attempted when a step fails part way.
"""

import os
from datetime import datetime
from typing import Optional

from bucketfs.core import get_logger, get_tracer, settings
from bucketfs.core.exceptions import DeletedError, NothingToDeleteError, NotFoundError
from bucketfs.objectstorage.base import ObjectStore, copy_source

from .handle import BucketFile
from .info import EntryInfo
from .listing import SEPARATOR, iter_pages, normalize_key

logger = get_logger(__name__)
tracer = get_tracer(__name__)


class BucketFS:
    """Hierarchical filesystem view of one bucket.

    Example:
        fs = BucketFS("my-bucket", S3ObjectStore.from_config(S3ClientConfig()))
        with fs.create("/reports/q1.txt") as f:
            f.write(b"hello")
    """

    def __init__(self, bucket: str, store: ObjectStore):
        self.bucket = bucket
        self.store = store
        logger.info("Bucket filesystem initialized", bucket=bucket)

    @property
    def name(self) -> str:
        return "bucketfs"

    def create(self, path: str) -> BucketFile:
        """Create an empty file and open it.

        A path ending with the separator yields a directory-only handle
        without touching the store: the directory only comes into being once
        something is written beneath it.

        Raises:
            StoreWriteError: If the empty put fails
        """
        if path.endswith(SEPARATOR):
            logger.debug("Directory handle created", bucket=self.bucket, path=path)
            return BucketFile(self.store, self.bucket, path)

        with tracer.start_as_current_span("bucketfs.create"):
            key = normalize_key(path)
            self.store.put(self.bucket, key, b"")
            logger.info("File created", bucket=self.bucket, key=key)
            return self.open(path)

    def open(self, path: str) -> BucketFile:
        """Open an existing object for reading.

        Raises:
            NotFoundError: If the key does not exist
            DeletedError: If the object is marked as deleted
        """
        with tracer.start_as_current_span("bucketfs.open"):
            key = normalize_key(path)
            fetched = self.store.get(self.bucket, key)
            if fetched.delete_marker:
                fetched.body.close()
                raise DeletedError(f"File is marked as deleted: {path}")
            return BucketFile(self.store, self.bucket, key, fetched)

    def open_file(
        self, path: str, flags: int = os.O_RDONLY, perm: int = 0o666
    ) -> BucketFile:
        """Open with os-style flags. Only O_CREAT is honoured; perm is ignored."""
        try:
            return self.open(path)
        except NotFoundError:
            if not flags & os.O_CREAT:
                raise
        return self.create(path)

    def mkdir(self, path: str, perm: int = 0o777) -> None:
        self.mkdir_all(path, perm)

    def mkdir_all(self, path: str, perm: int = 0o777) -> None:
        """Materialize a directory marker at the literal path.

        Missing parents need no handling: the store has no intermediate
        directories to create.
        """
        with tracer.start_as_current_span("bucketfs.mkdir"):
            self.store.put(self.bucket, path, b"")
            logger.info("Directory marker created", bucket=self.bucket, key=path)

    def remove(self, path: str) -> None:
        self.remove_all(path)

    def remove_all(self, path: str) -> None:
        """Delete every key that starts with the path.

        Keys written under the prefix between the listing and the delete
        survive.

        Raises:
            NothingToDeleteError: If no key starts with the path
            StoreWriteError: If the batch delete fails
        """
        with tracer.start_as_current_span("bucketfs.remove_all"):
            prefix = normalize_key(path)
            keys = [
                obj.key
                for page in iter_pages(
                    self.store, self.bucket, prefix, settings.list_page_size
                )
                for obj in page.objects
            ]
            if not keys:
                raise NothingToDeleteError(f"No objects under '{self.bucket}/{prefix}'")

            self.store.delete_batch(self.bucket, keys)
            logger.info(
                "Objects removed", bucket=self.bucket, prefix=prefix, count=len(keys)
            )

    def rename(self, old_path: str, new_path: str) -> None:
        """Move an object by copying it, deleting the original, then waiting.

        A failed delete leaves the object at both keys; a failed copy leaves
        it only at the old one.

        Raises:
            StoreWriteError: If the copy or the delete fails
            WaitTimeoutError: If the new key never becomes visible
        """
        with tracer.start_as_current_span("bucketfs.rename"):
            old_key = normalize_key(old_path)
            new_key = normalize_key(new_path)

            self.store.copy(self.bucket, copy_source(self.bucket, old_key), new_key)
            self.store.delete(self.bucket, old_key)
            self.store.wait_until_exists(self.bucket, new_key)
            logger.info("Object renamed", bucket=self.bucket, old=old_key, new=new_key)

    def stat(self, path: str) -> EntryInfo:
        """Fetch an object and describe it.

        A prefix-only directory has no object to fetch, so this raises
        NotFoundError for it; list the parent to tell directories apart.
        """
        with tracer.start_as_current_span("bucketfs.stat"):
            key = normalize_key(path)
            fetched = self.store.get(self.bucket, key)
            fetched.body.close()
            return EntryInfo(key=key, source=fetched)

    def chmod(self, path: str, mode: int) -> None:
        """No-op: the store has no permission model."""
        return None

    def chown(self, path: str, uid: int, gid: int) -> None:
        """No-op: the store has no ownership model."""
        return None

    def chtimes(
        self, path: str, atime: Optional[datetime], mtime: Optional[datetime]
    ) -> None:
        """No-op: modification times are set by the store."""
        return None
