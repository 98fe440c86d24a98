"""Object store capability surface consumed by the filesystem layer.

The filesystem adapter never talks to an SDK client directly. It depends on
the narrow ``ObjectStore`` protocol below, which exposes exactly the seven
primitives needed to emulate a hierarchy over a flat (bucket, key) namespace.
``S3ObjectStore`` implements it over boto3; tests substitute an in-memory fake.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import BinaryIO, Optional, Protocol, Sequence

DEFAULT_MAX_KEYS = 1000


@dataclass(frozen=True)
class FetchedObject:
    """An object returned by ``get``, owning its open body stream.

    Attributes:
        key: Key the object was fetched from
        body: Readable stream over the object content
        content_length: Declared length of the body, if the store reported one
        last_modified: Store-reported modification time, if any
        delete_marker: True when the store flags the object as logically deleted
    """

    key: str
    body: BinaryIO
    content_length: Optional[int] = None
    last_modified: Optional[datetime] = None
    delete_marker: bool = False


@dataclass(frozen=True)
class ListedObject:
    """An object entry returned by a prefix listing."""

    key: str
    size: Optional[int] = None
    last_modified: Optional[datetime] = None


@dataclass(frozen=True)
class ListPage:
    """One page of a prefix listing.

    Attributes:
        objects: Objects whose keys start with the prefix
        common_prefixes: Prefixes collapsed at the delimiter (when one was given)
        is_truncated: Whether the store holds more results after this page
        next_token: Continuation token for the next page, if any
    """

    objects: Sequence[ListedObject] = field(default_factory=tuple)
    common_prefixes: Sequence[str] = field(default_factory=tuple)
    is_truncated: bool = False
    next_token: Optional[str] = None


class ObjectStore(Protocol):
    """Minimal object store surface used by the filesystem adapter."""

    def get(self, bucket: str, key: str) -> FetchedObject:
        """Fetch an object. Raises NotFoundError when the key is absent."""
        ...

    def put(self, bucket: str, key: str, body: bytes) -> None:
        """Replace the whole object at key. Raises StoreWriteError."""
        ...

    def delete(self, bucket: str, key: str) -> None:
        """Delete a single object. Raises StoreWriteError."""
        ...

    def delete_batch(self, bucket: str, keys: Sequence[str]) -> None:
        """Delete several objects at once. Raises StoreWriteError."""
        ...

    def copy(self, bucket: str, source_ref: str, dest_key: str) -> None:
        """Copy the object referenced by source_ref to dest_key."""
        ...

    def list_prefix(
        self,
        bucket: str,
        prefix: str,
        delimiter: Optional[str] = None,
        continuation_token: Optional[str] = None,
        max_keys: int = DEFAULT_MAX_KEYS,
    ) -> ListPage:
        """List one page of keys starting with prefix."""
        ...

    def wait_until_exists(self, bucket: str, key: str) -> None:
        """Block until key is visible. Raises WaitTimeoutError."""
        ...


def copy_source(bucket: str, key: str) -> str:
    """Build a copy source reference ("bucket/key").

    Left unescaped: botocore percent-encodes string CopySource values.
    """
    return f"{bucket}/{key.lstrip('/')}"


def parse_copy_source(source_ref: str) -> tuple[str, str]:
    """Split a copy source reference back into (bucket, key)."""
    bucket, _, key = source_ref.partition("/")
    return bucket, key
