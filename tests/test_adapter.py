"""Tests for the bucket filesystem adapter."""

import os
from datetime import datetime, timezone

import pytest

from bucketfs.core import settings
from bucketfs.core.exceptions import (
    DeletedError,
    NotFoundError,
    NothingToDeleteError,
    StoreReadError,
    StoreWriteError,
    WaitTimeoutError,
)
from bucketfs.filesystem import BucketFile, SourceKind

BUCKET = "test-bucket"


class TestCreateAndOpen:
    """Test creating and opening files."""

    def test_create_then_write(self, fs, store):
        """Test the create, write, get round trip on an empty bucket."""
        f = fs.create("/a/b.txt")

        assert store.content(BUCKET, "a/b.txt") == b""
        assert f.stat().size == 0

        assert f.write(b"hi") == 2

        fetched = store.get(BUCKET, "a/b.txt")
        assert fetched.body.read() == b"hi"
        assert fetched.content_length == 2

    def test_write_after_create_survives_refetch_failure(self, fs, store):
        """Test write reports success once the upload has landed."""
        f = fs.create("/a/b.txt")
        store.fail("get", StoreReadError("throttled"))

        assert f.write(b"hi") == 2
        assert store.content(BUCKET, "a/b.txt") == b"hi"

        store.recover("get")
        assert f.read() == b"hi"
        assert f.stat().size == 2

    def test_create_directory_path_skips_store(self, fs, store):
        """Test a trailing separator yields a directory handle with no calls."""
        f = fs.create("reports/")

        assert isinstance(f, BucketFile)
        assert f.stat().is_dir is True
        assert store.calls == []

    def test_create_put_failure(self, fs, store):
        """Test create surfaces a failed put."""
        store.fail("put", StoreWriteError("denied"))

        with pytest.raises(StoreWriteError):
            fs.create("x.txt")

    def test_open_existing(self, fs, store):
        """Test open wraps the fetched object."""
        store.put(BUCKET, "docs/a.txt", b"content")

        with fs.open("/docs/a.txt") as f:
            assert f.name() == "a.txt"
            assert f.read() == b"content"
            assert f.stat().kind is SourceKind.FETCHED_OBJECT

    def test_open_missing(self, fs):
        """Test open of an absent key."""
        with pytest.raises(NotFoundError):
            fs.open("missing.txt")

    def test_open_deleted(self, fs, store):
        """Test an object with a deletion marker is treated as absent."""
        store.put(BUCKET, "gone.txt", b"old")
        store.mark_deleted(BUCKET, "gone.txt")

        with pytest.raises(DeletedError):
            fs.open("gone.txt")

    def test_open_file_ignores_flags_for_existing(self, fs, store):
        """Test open_file opens existing objects regardless of flags."""
        store.put(BUCKET, "a.txt", b"abc")

        f = fs.open_file("a.txt", os.O_RDWR | os.O_CREAT, 0o644)

        assert f.read() == b"abc"

    def test_open_file_creates_when_asked(self, fs, store):
        """Test O_CREAT creates a missing file."""
        fs.open_file("/new.txt", os.O_WRONLY | os.O_CREAT)

        assert store.content(BUCKET, "new.txt") == b""

    def test_open_file_without_create(self, fs):
        """Test a missing file without O_CREAT fails."""
        with pytest.raises(NotFoundError):
            fs.open_file("new.txt", os.O_RDONLY)


class TestMkdir:
    """Test directory markers."""

    def test_mkdir_puts_literal_key(self, fs, store):
        """Test mkdir writes an empty object at the unnormalized path."""
        fs.mkdir("/data/raw", 0o755)

        assert store.content(BUCKET, "/data/raw") == b""

    def test_mkdir_all_is_a_single_put(self, fs, store):
        """Test mkdir_all does not create intermediate levels."""
        fs.mkdir_all("a/b/c", 0o755)

        assert [call[0] for call in store.calls] == ["put"]
        assert list(store.buckets[BUCKET]) == ["a/b/c"]


class TestRemove:
    """Test recursive removal."""

    def test_remove_all(self, fs, store):
        """Test every key under the prefix is removed in one batch."""
        for key in ("logs/1", "logs/2", "logs/old/3", "keep/4"):
            store.put(BUCKET, key, b"x")

        fs.remove_all("/logs")

        assert list(store.buckets[BUCKET]) == ["keep/4"]
        batches = [call for call in store.calls if call[0] == "delete_batch"]
        assert len(batches) == 1
        assert sorted(batches[0][2]) == ["logs/1", "logs/2", "logs/old/3"]

    def test_remove_delegates(self, fs, store):
        """Test remove behaves like remove_all."""
        store.put(BUCKET, "file.txt", b"x")

        fs.remove("file.txt")

        assert store.buckets[BUCKET] == {}

    def test_remove_nothing(self, fs):
        """Test removing an empty prefix fails."""
        with pytest.raises(NothingToDeleteError):
            fs.remove_all("nothing")

    def test_remove_spans_listing_pages(self, fs, store, monkeypatch):
        """Test keys on later listing pages are removed too."""
        monkeypatch.setattr(settings, "list_page_size", 2)
        for i in range(5):
            store.put(BUCKET, f"bulk/{i}", b"x")

        fs.remove_all("bulk/")

        assert store.buckets[BUCKET] == {}

    def test_remove_batch_failure(self, fs, store):
        """Test a failed batch delete propagates and removes nothing."""
        store.put(BUCKET, "a/1", b"x")
        store.fail("delete_batch", StoreWriteError("denied"))

        with pytest.raises(StoreWriteError):
            fs.remove_all("a")
        assert "a/1" in store.buckets[BUCKET]


class TestRename:
    """Test copy, delete and wait renames."""

    def test_rename(self, fs, store):
        """Test the content moves to the new key."""
        store.put(BUCKET, "old.txt", b"payload")

        fs.rename("/old.txt", "/new.txt")

        assert store.get(BUCKET, "new.txt").body.read() == b"payload"
        with pytest.raises(NotFoundError):
            store.get(BUCKET, "old.txt")

    def test_rename_call_sequence(self, fs, store):
        """Test copy, delete and wait are issued in order."""
        store.put(BUCKET, "dir/old.txt", b"x")
        store.calls.clear()

        fs.rename("dir/old.txt", "dir/new.txt")

        assert store.calls == [
            ("copy", BUCKET, f"{BUCKET}/dir/old.txt", "dir/new.txt"),
            ("delete", BUCKET, "dir/old.txt"),
            ("wait_until_exists", BUCKET, "dir/new.txt"),
        ]

    def test_rename_copy_failure_keeps_original(self, fs, store):
        """Test a failed copy aborts before deleting."""
        store.put(BUCKET, "old.txt", b"x")
        store.fail("copy", StoreWriteError("denied"))

        with pytest.raises(StoreWriteError):
            fs.rename("old.txt", "new.txt")

        assert "old.txt" in store.buckets[BUCKET]
        assert "new.txt" not in store.buckets[BUCKET]

    def test_rename_delete_failure_leaves_duplicate(self, fs, store):
        """Test a failed delete is not rolled back."""
        store.put(BUCKET, "old.txt", b"x")
        store.fail("delete", StoreWriteError("denied"))

        with pytest.raises(StoreWriteError):
            fs.rename("old.txt", "new.txt")

        assert "old.txt" in store.buckets[BUCKET]
        assert "new.txt" in store.buckets[BUCKET]

    def test_rename_wait_timeout(self, fs, store):
        """Test the wait failure surfaces after copy and delete happened."""
        store.put(BUCKET, "old.txt", b"x")
        store.fail("wait_until_exists", WaitTimeoutError("never visible"))

        with pytest.raises(WaitTimeoutError):
            fs.rename("old.txt", "new.txt")

        assert "old.txt" not in store.buckets[BUCKET]


class TestStat:
    """Test adapter-level stat and the no-op metadata calls."""

    def test_stat_file(self, fs, store):
        """Test stat fetches and describes the object."""
        store.put(BUCKET, "docs/a.txt", b"hello")

        info = fs.stat("/docs/a.txt")

        assert info.name == "a.txt"
        assert info.size == 5
        assert info.is_dir is False
        assert info.mod_time.year == 2024
        assert info.sys.body.closed

    def test_stat_missing(self, fs):
        """Test stat of an absent key."""
        with pytest.raises(NotFoundError):
            fs.stat("nope")

    def test_metadata_calls_are_no_ops(self, fs, store):
        """Test chmod, chown and chtimes never fail and never change stat."""
        store.put(BUCKET, "a.txt", b"abc")
        before = fs.stat("a.txt")
        store.calls.clear()

        fs.chmod("a.txt", 0o600)
        fs.chown("a.txt", 1000, 1000)
        fs.chtimes("a.txt", None, datetime(2000, 1, 1, tzinfo=timezone.utc))
        fs.chmod("does-not-exist", 0o600)

        assert store.calls == []
        after = fs.stat("a.txt")
        assert (after.size, after.mod_time, after.mode) == (
            before.size,
            before.mod_time,
            before.mode,
        )

    def test_name(self, fs):
        """Test the filesystem name."""
        assert fs.name == "bucketfs"
