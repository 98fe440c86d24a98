"""Exception hierarchy for bucketfs."""


class BucketFSError(Exception):
    """Base exception for all bucketfs errors."""

    pass


class ValidationError(BucketFSError):
    """Raised when validation fails."""

    pass


class NotFoundError(BucketFSError):
    """Raised when a key (or bucket) does not exist in the store."""

    pass


class DeletedError(BucketFSError):
    """Raised when a key resolves but the object carries a deletion marker."""

    pass


class StoreReadError(BucketFSError):
    """Raised when a get or list fails for a reason other than absence."""

    pass


class StoreWriteError(BucketFSError):
    """Raised when a put, delete, delete-batch or copy fails at the store."""

    pass


class NothingToDeleteError(BucketFSError):
    """Raised when a recursive remove finds no keys under the prefix."""

    pass


class UnsupportedError(BucketFSError):
    """Raised for operations that have no object store equivalent."""

    pass


class NotReadableError(BucketFSError):
    """Raised when reading from a handle that holds no stream."""

    pass


class NotAListingError(BucketFSError):
    """Raised when listing a handle that has no stream context to list from."""

    pass


class WaitTimeoutError(BucketFSError):
    """Raised when the store never confirms that a key became visible."""

    pass


class ListingInterruptedError(BucketFSError):
    """Raised when a directory listing fails part way through.

    Attributes:
        partial: Whatever was collected before the failure (entries or names)
    """

    def __init__(self, message: str, partial=None):
        super().__init__(message)
        self.partial = list(partial or [])
