"""Entry metadata derived from store records.

An ``EntryInfo`` never stores a directory flag. It carries the record it was
built from (a fetched object, a listed object, or nothing at all for a bare
prefix) and derives size, modification time and directory-ness from that.
"""

import posixpath
import stat
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union

from bucketfs.objectstorage.base import FetchedObject, ListedObject

# Equivalent of an unset timestamp
ZERO_TIME = datetime.min.replace(tzinfo=timezone.utc)

EntrySource = Union[FetchedObject, ListedObject, None]


class SourceKind(str, Enum):
    """Which store record an entry was derived from."""

    FETCHED_OBJECT = "fetched_object"
    LISTED_OBJECT = "listed_object"
    PREFIX_ONLY = "prefix_only"


def basename(key: str) -> str:
    """Last path element of a key, ignoring trailing separators."""
    stripped = key.rstrip("/")
    if not stripped:
        return "/" if key else "."
    return posixpath.basename(stripped)


@dataclass(frozen=True)
class EntryInfo:
    """Immutable stat-like snapshot of one key.

    Attributes:
        key: Store key (or handle path) the entry describes
        source: Record the entry was derived from; None for a prefix-only entry
    """

    key: str
    source: EntrySource = None

    @property
    def kind(self) -> SourceKind:
        if isinstance(self.source, FetchedObject):
            return SourceKind.FETCHED_OBJECT
        if isinstance(self.source, ListedObject):
            return SourceKind.LISTED_OBJECT
        return SourceKind.PREFIX_ONLY

    @property
    def name(self) -> str:
        return basename(self.key)

    @property
    def size(self) -> int:
        if isinstance(self.source, FetchedObject):
            return self.source.content_length or 0
        if isinstance(self.source, ListedObject):
            return self.source.size or 0
        return 0

    @property
    def mod_time(self) -> datetime:
        last_modified: Optional[datetime] = None
        if self.source is not None:
            last_modified = self.source.last_modified
        return last_modified or ZERO_TIME

    @property
    def is_dir(self) -> bool:
        return self.kind is SourceKind.PREFIX_ONLY

    @property
    def mode(self) -> int:
        """File mode; the store has no permissions, only files and directories."""
        if self.is_dir:
            return stat.S_IFDIR | 0o777
        return stat.S_IFREG | 0o777

    @property
    def sys(self) -> EntrySource:
        """The underlying store record."""
        return self.source
