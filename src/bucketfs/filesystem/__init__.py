"""Hierarchical filesystem emulation over an object store."""

from .adapter import BucketFS
from .handle import BucketFile
from .info import ZERO_TIME, EntryInfo, SourceKind
from .listing import directory_prefix, iter_pages, list_directory, normalize_key

__all__ = [
    "BucketFS",
    "BucketFile",
    "EntryInfo",
    "SourceKind",
    "ZERO_TIME",
    "directory_prefix",
    "iter_pages",
    "list_directory",
    "normalize_key",
]
