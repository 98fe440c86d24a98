"""Open file and directory handles.

A ``BucketFile`` wraps one key and, when it was opened from a fetched object,
the object's body stream. Object stores only support whole-object replace, so
writes upload the full payload every time and random access is not offered.
"""

import os
from typing import Optional

from readerwriterlock import rwlock

from bucketfs.core import get_logger
from bucketfs.core.exceptions import (
    BucketFSError,
    ListingInterruptedError,
    NotAListingError,
    NotReadableError,
    UnsupportedError,
)
from bucketfs.objectstorage.base import FetchedObject, ObjectStore

from .info import EntryInfo, basename
from .listing import list_directory, normalize_key

logger = get_logger(__name__)


class BucketFile:
    """A handle on one key of a bucket.

    Reads share the handle's lock; close and write take it exclusively, so a
    stream is never released while a read is in flight. Separate handles
    share nothing.
    """

    def __init__(
        self,
        store: ObjectStore,
        bucket: str,
        key: str,
        fetched: Optional[FetchedObject] = None,
    ):
        self.store = store
        self.bucket = bucket
        self.key = key
        self._fetched = fetched
        self._lock = rwlock.RWLockFair()
        # Set after a write whose re-fetch has not happened yet
        self._stale = False

    def __enter__(self) -> "BucketFile":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"BucketFile(bucket={self.bucket!r}, key={self.key!r})"

    def name(self) -> str:
        return basename(self.key)

    def stat(self) -> EntryInfo:
        """Describe the handle without another store round trip."""
        return EntryInfo(key=self.key, source=self._fetched)

    def read(self, size: int = -1) -> bytes:
        """Read up to size bytes (everything when size < 0) from the stream.

        Raises:
            NotReadableError: If the handle holds no stream
        """
        self._ensure_fresh()
        with self._lock.gen_rlock():
            if self._fetched is None:
                raise NotReadableError(f"Cannot read '{self.key}': no open stream")
            if size is None or size < 0:
                return self._fetched.body.read()
            return self._fetched.body.read(size)

    def readinto(self, buffer) -> int:
        """Read into a writable buffer, returning the number of bytes read."""
        view = memoryview(buffer).cast("B")
        data = self.read(len(view))
        view[: len(data)] = data
        return len(data)

    def read_at(self, buffer, offset: int) -> int:
        """Random-access reads are not offered; reads nothing."""
        return 0

    def write(self, data: bytes) -> int:
        """Replace the whole object with data.

        The upload is the commit. The previous stream is then released and the
        object fetched again so later reads see the new body; if that fetch
        fails it is retried on the next read or listing.

        Returns:
            Number of bytes accepted (always len(data))

        Raises:
            StoreWriteError: If the upload fails
        """
        payload = bytes(data)
        key = normalize_key(self.key)
        with self._lock.gen_wlock():
            self.store.put(self.bucket, key, payload)
            self._release()
            self._stale = True
            try:
                self._refresh()
            except BucketFSError as e:
                logger.warning(
                    "Object written but not re-fetched",
                    bucket=self.bucket,
                    key=key,
                    error=str(e),
                )
        logger.debug("Object written", bucket=self.bucket, key=key, size=len(payload))
        return len(payload)

    def write_string(self, text: str) -> int:
        return self.write(text.encode("utf-8"))

    def write_at(self, data: bytes, offset: int) -> int:
        """Partial writes are not offered; writes nothing."""
        return 0

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        raise UnsupportedError("Seek is not supported on object storage")

    def truncate(self, size: int = 0) -> None:
        """Accepted and ignored."""
        return None

    def sync(self) -> None:
        """Accepted and ignored; writes are already uploaded."""
        return None

    def close(self) -> None:
        """Release the stream, if any. Safe to call more than once."""
        with self._lock.gen_wlock():
            self._release()
            self._stale = False

    def readdir(self, count: int = 0) -> list[EntryInfo]:
        """List the entries under this handle's key.

        Args:
            count: Maximum entries per listing page; <= 0 uses the default

        Raises:
            NotAListingError: If the handle holds no stream context
            ListingInterruptedError: If listing fails part way through
        """
        self._ensure_fresh()
        with self._lock.gen_rlock():
            if self._fetched is None:
                raise NotAListingError(f"Cannot read directory '{self.key}'")
        return list_directory(self.store, self.bucket, self.key, count)

    def readdirnames(self, count: int = 0) -> list[str]:
        """Names of the entries under this handle's key.

        Raises:
            ListingInterruptedError: With the names collected before the
                failure in ``partial``
        """
        try:
            entries = self.readdir(count)
        except ListingInterruptedError as e:
            names = [entry.name for entry in e.partial]
            raise ListingInterruptedError(str(e), partial=names) from e
        return [entry.name for entry in entries]

    def _ensure_fresh(self) -> None:
        if self._stale:
            with self._lock.gen_wlock():
                self._refresh()

    def _refresh(self) -> None:
        # Callers hold the write lock
        if self._stale:
            self._fetched = self.store.get(self.bucket, normalize_key(self.key))
            self._stale = False

    def _release(self) -> None:
        # Callers hold the write lock
        if self._fetched is None:
            return
        fetched, self._fetched = self._fetched, None
        fetched.body.close()
