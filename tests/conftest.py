"""Test configuration and fixtures for bucketfs."""

import io
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

import pytest

from bucketfs.core.exceptions import NotFoundError, StoreWriteError, WaitTimeoutError
from bucketfs.filesystem import BucketFS
from bucketfs.objectstorage import (
    FetchedObject,
    ListedObject,
    ListPage,
    parse_copy_source,
)

BUCKET = "test-bucket"


class InMemoryObjectStore:
    """ObjectStore fake keeping buckets in dictionaries.

    Listing follows S3 semantics: keys come back sorted, a delimiter collapses
    nested keys into common prefixes, and objects plus prefixes together count
    toward max_keys. Every call is recorded in ``calls``; ``fail`` arms an
    exception for a given primitive.
    """

    def __init__(self):
        self.buckets: dict[str, dict[str, dict]] = {}
        self.calls: list[tuple] = []
        self._failures: dict[str, tuple[Exception, int]] = {}
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def fail(self, operation: str, error: Exception, after: int = 0) -> None:
        """Raise error from operation once it has succeeded ``after`` times."""
        self._failures[operation] = (error, after)

    def recover(self, operation: str) -> None:
        """Disarm a failure set with ``fail``."""
        self._failures.pop(operation, None)

    def _record(self, operation: str, *args) -> None:
        self.calls.append((operation, *args))
        if operation in self._failures:
            error, remaining = self._failures[operation]
            if remaining <= 0:
                raise error
            self._failures[operation] = (error, remaining - 1)

    def _bucket(self, bucket: str) -> dict[str, dict]:
        if bucket not in self.buckets:
            raise NotFoundError(f"Bucket not found: {bucket}")
        return self.buckets[bucket]

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def create_bucket(self, bucket: str) -> None:
        self.buckets.setdefault(bucket, {})

    def content(self, bucket: str, key: str) -> bytes:
        return self.buckets[bucket][key]["body"]

    def mark_deleted(self, bucket: str, key: str) -> None:
        self.buckets[bucket][key]["delete_marker"] = True

    def get(self, bucket: str, key: str) -> FetchedObject:
        self._record("get", bucket, key)
        objects = self._bucket(bucket)
        if key not in objects:
            raise NotFoundError(f"Key not found: {bucket}/{key}")
        obj = objects[key]
        return FetchedObject(
            key=key,
            body=io.BytesIO(obj["body"]),
            content_length=len(obj["body"]),
            last_modified=obj["last_modified"],
            delete_marker=obj["delete_marker"],
        )

    def put(self, bucket: str, key: str, body: bytes) -> None:
        self._record("put", bucket, key, body)
        self.buckets.setdefault(bucket, {})[key] = {
            "body": bytes(body),
            "last_modified": self._tick(),
            "delete_marker": False,
        }

    def delete(self, bucket: str, key: str) -> None:
        self._record("delete", bucket, key)
        self._bucket(bucket).pop(key, None)

    def delete_batch(self, bucket: str, keys: Sequence[str]) -> None:
        self._record("delete_batch", bucket, list(keys))
        objects = self._bucket(bucket)
        for key in keys:
            objects.pop(key, None)

    def copy(self, bucket: str, source_ref: str, dest_key: str) -> None:
        self._record("copy", bucket, source_ref, dest_key)
        source_bucket, source_key = parse_copy_source(source_ref)
        source = self.buckets.get(source_bucket, {}).get(source_key)
        if source is None:
            raise StoreWriteError(f"Copy source not found: {source_ref}")
        self._bucket(bucket)[dest_key] = dict(source, last_modified=self._tick())

    def list_prefix(
        self,
        bucket: str,
        prefix: str,
        delimiter: Optional[str] = None,
        continuation_token: Optional[str] = None,
        max_keys: int = 1000,
    ) -> ListPage:
        self._record("list_prefix", bucket, prefix, delimiter, continuation_token)
        objects = self._bucket(bucket)

        items: list[tuple[str, Optional[ListedObject]]] = []
        seen_prefixes: set[str] = set()
        for key in sorted(objects):
            if not key.startswith(prefix):
                continue
            rest = key[len(prefix) :]
            if delimiter and delimiter in rest:
                common = prefix + rest[: rest.index(delimiter) + len(delimiter)]
                if common not in seen_prefixes:
                    seen_prefixes.add(common)
                    items.append((common, None))
                continue
            obj = objects[key]
            items.append(
                (
                    key,
                    ListedObject(
                        key=key,
                        size=len(obj["body"]),
                        last_modified=obj["last_modified"],
                    ),
                )
            )

        start = int(continuation_token) if continuation_token else 0
        window = items[start : start + max_keys]
        more = start + max_keys < len(items)
        return ListPage(
            objects=tuple(obj for _, obj in window if obj is not None),
            common_prefixes=tuple(name for name, obj in window if obj is None),
            is_truncated=more,
            next_token=str(start + max_keys) if more else None,
        )

    def wait_until_exists(self, bucket: str, key: str) -> None:
        self._record("wait_until_exists", bucket, key)
        if key not in self._bucket(bucket):
            raise WaitTimeoutError(f"Object '{bucket}/{key}' did not become visible")


@pytest.fixture
def store():
    """Empty in-memory store with one bucket."""
    fake = InMemoryObjectStore()
    fake.create_bucket(BUCKET)
    return fake


@pytest.fixture
def fs(store):
    """Filesystem over the in-memory store."""
    return BucketFS(BUCKET, store)


@pytest.fixture
def nested_tree(store):
    """Objects laid out as a small directory tree under test/."""
    for key in ("test/path", "test/path/sub", "test/alt", "test/subtest/path"):
        store.put(BUCKET, key, b"")
    store.calls.clear()
    return store
