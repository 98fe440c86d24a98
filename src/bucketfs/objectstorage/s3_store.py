"""boto3-backed implementation of the ObjectStore protocol.

Each primitive is a single S3 API call (delete_batch may fan out into several
DeleteObjects calls to respect the 1000-key limit). botocore errors are
translated into the bucketfs exception hierarchy here, so nothing above this
module ever needs to know about ClientError.
"""

from typing import Any, Dict, Optional, Sequence

from botocore.exceptions import BotoCoreError, ClientError, WaiterError

from bucketfs.core import get_logger, settings
from bucketfs.core.exceptions import (
    DeletedError,
    NotFoundError,
    StoreReadError,
    StoreWriteError,
    WaitTimeoutError,
)

from .base import DEFAULT_MAX_KEYS, FetchedObject, ListedObject, ListPage
from .clients import S3ClientConfig, S3ClientManager

logger = get_logger(__name__)

# DeleteObjects accepts at most this many keys per request
DELETE_BATCH_LIMIT = 1000

_NOT_FOUND_CODES = {"NoSuchKey", "NoSuchBucket", "NotFound", "404"}


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def _is_delete_marker(error: ClientError) -> bool:
    headers = error.response.get("ResponseMetadata", {}).get("HTTPHeaders", {})
    return headers.get("x-amz-delete-marker") == "true"


class S3ObjectStore:
    """ObjectStore over a boto3 S3 client."""

    def __init__(self, client_manager: S3ClientManager):
        self.client_manager = client_manager
        logger.info("S3 object store initialized")

    @classmethod
    def from_config(cls, config: S3ClientConfig) -> "S3ObjectStore":
        """Build a store from client configuration."""
        return cls(S3ClientManager(config))

    @property
    def client(self):
        return self.client_manager.client

    def get(self, bucket: str, key: str) -> FetchedObject:
        logger.debug("Getting object", bucket=bucket, key=key)
        try:
            response = self.client.get_object(Bucket=bucket, Key=key)
        except ClientError as e:
            if _is_delete_marker(e):
                raise DeletedError(f"Object is marked as deleted: {bucket}/{key}")
            if _error_code(e) in _NOT_FOUND_CODES:
                raise NotFoundError(f"Key not found: {bucket}/{key}")
            error_msg = f"Failed to get object '{bucket}/{key}': {e}"
            logger.error(error_msg, error=str(e))
            raise StoreReadError(error_msg)
        except BotoCoreError as e:
            error_msg = f"Failed to get object '{bucket}/{key}': {e}"
            logger.error(error_msg, error=str(e))
            raise StoreReadError(error_msg)

        return FetchedObject(
            key=key,
            body=response["Body"],
            content_length=response.get("ContentLength"),
            last_modified=response.get("LastModified"),
            delete_marker=bool(response.get("DeleteMarker", False)),
        )

    def put(self, bucket: str, key: str, body: bytes) -> None:
        logger.debug("Putting object", bucket=bucket, key=key, size=len(body))
        self._write(
            f"put object '{bucket}/{key}'",
            self.client.put_object,
            Bucket=bucket,
            Key=key,
            Body=body,
        )

    def delete(self, bucket: str, key: str) -> None:
        logger.debug("Deleting object", bucket=bucket, key=key)
        self._write(
            f"delete object '{bucket}/{key}'",
            self.client.delete_object,
            Bucket=bucket,
            Key=key,
        )

    def delete_batch(self, bucket: str, keys: Sequence[str]) -> None:
        keys = list(keys)
        logger.debug("Deleting objects", bucket=bucket, key_count=len(keys))

        for start in range(0, len(keys), DELETE_BATCH_LIMIT):
            chunk = keys[start : start + DELETE_BATCH_LIMIT]
            response = self._write(
                f"delete {len(chunk)} objects from '{bucket}'",
                self.client.delete_objects,
                Bucket=bucket,
                Delete={"Objects": [{"Key": key} for key in chunk], "Quiet": True},
            )
            errors = response.get("Errors") or []
            if errors:
                failed = ", ".join(err.get("Key", "?") for err in errors)
                error_msg = f"Failed to delete objects from '{bucket}': {failed}"
                logger.error(error_msg, failed_count=len(errors))
                raise StoreWriteError(error_msg)

    def copy(self, bucket: str, source_ref: str, dest_key: str) -> None:
        logger.debug("Copying object", bucket=bucket, source=source_ref, key=dest_key)
        self._write(
            f"copy '{source_ref}' to '{bucket}/{dest_key}'",
            self.client.copy_object,
            Bucket=bucket,
            CopySource=source_ref,
            Key=dest_key,
        )

    def list_prefix(
        self,
        bucket: str,
        prefix: str,
        delimiter: Optional[str] = None,
        continuation_token: Optional[str] = None,
        max_keys: int = DEFAULT_MAX_KEYS,
    ) -> ListPage:
        kwargs: Dict[str, Any] = {
            "Bucket": bucket,
            "Prefix": prefix,
            "MaxKeys": max_keys,
        }
        if delimiter:
            kwargs["Delimiter"] = delimiter
        if continuation_token:
            kwargs["ContinuationToken"] = continuation_token

        logger.debug("Listing prefix", bucket=bucket, prefix=prefix, max_keys=max_keys)
        try:
            response = self.client.list_objects_v2(**kwargs)
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                raise NotFoundError(f"Bucket not found: {bucket}")
            error_msg = f"Failed to list prefix '{bucket}/{prefix}': {e}"
            logger.error(error_msg, error=str(e))
            raise StoreReadError(error_msg)
        except BotoCoreError as e:
            error_msg = f"Failed to list prefix '{bucket}/{prefix}': {e}"
            logger.error(error_msg, error=str(e))
            raise StoreReadError(error_msg)

        objects = tuple(
            ListedObject(
                key=obj["Key"],
                size=obj.get("Size"),
                last_modified=obj.get("LastModified"),
            )
            for obj in response.get("Contents", [])
        )
        common_prefixes = tuple(
            info["Prefix"] for info in response.get("CommonPrefixes", [])
        )
        return ListPage(
            objects=objects,
            common_prefixes=common_prefixes,
            is_truncated=bool(response.get("IsTruncated", False)),
            next_token=response.get("NextContinuationToken"),
        )

    def wait_until_exists(self, bucket: str, key: str) -> None:
        logger.debug("Waiting for object", bucket=bucket, key=key)
        waiter = self.client.get_waiter("object_exists")
        try:
            waiter.wait(
                Bucket=bucket,
                Key=key,
                WaiterConfig={
                    "Delay": settings.wait_delay_seconds,
                    "MaxAttempts": settings.wait_max_attempts,
                },
            )
        except WaiterError as e:
            error_msg = f"Object '{bucket}/{key}' did not become visible: {e}"
            logger.error(error_msg, error=str(e))
            raise WaitTimeoutError(error_msg)

    def _write(self, description: str, call, **kwargs) -> Dict[str, Any]:
        """Run a mutating S3 call, translating failures to StoreWriteError."""
        try:
            return call(**kwargs)
        except (ClientError, BotoCoreError) as e:
            error_msg = f"Failed to {description}: {e}"
            logger.error(error_msg, error=str(e))
            raise StoreWriteError(error_msg)
