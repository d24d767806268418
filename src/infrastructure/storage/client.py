"""
Object storage client for buckets and objects.

R2StorageClient talks to Cloudflare R2 through boto3;
MockStorageClient keeps everything in memory.
The same S3 API means any S3-compatible service (AWS S3, MinIO) works by
pointing the endpoint elsewhere.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, NoReturn, Optional

from src.core.objects.errors import ObjectNotFoundError, StorageOperationFailed
from src.core.objects.gateway import ObjectStore
from src.core.objects.models import ObjectMetadataSnapshot, ObjectSummary

logger = logging.getLogger(__name__)

# Error codes S3-compatible services use for a missing bucket or key
NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound", "NoSuchBucket"})

DOWNLOAD_CHUNK_SIZE = 64 * 1024


def write_file_atomically(path: str, chunks: Iterable[bytes]) -> None:
    """
    Write chunks to a sibling temp file, then move it onto path.

    On any failure the temp file is removed and path is left untouched.
    """
    target = Path(path)
    fd, partial_path = tempfile.mkstemp(
        prefix=f".{target.name}.", suffix=".part", dir=target.parent
    )
    try:
        with os.fdopen(fd, "wb") as f:
            for chunk in chunks:
                f.write(chunk)
        os.replace(partial_path, target)
    except BaseException:
        Path(partial_path).unlink(missing_ok=True)
        raise


@dataclass
class StorageConfig:
    """
    Configuration for R2/S3-compatible storage.

    endpoint_url may be None to use the AWS default endpoint (tests use
    this with moto).
    """
    access_key_id: str
    secret_access_key: str
    endpoint_url: Optional[str] = None
    region: str = "auto"  # R2 uses 'auto' for region
    connect_timeout_seconds: int = 30
    read_timeout_seconds: int = 120


class R2StorageClient:
    """
    Cloudflare R2 object storage client.

    Uses boto3 because R2 is S3-compatible. Every boto3 failure is logged
    and translated into ObjectNotFoundError or StorageOperationFailed with
    the original exception chained.
    """

    def __init__(self, config: StorageConfig) -> None:
        """
        Initialize R2 client with boto3.

        R2 needs v4 signatures and path-style addressing, and rejects the
        newer default request checksums, so those are only sent when an
        operation requires them.
        """
        import boto3
        from botocore.config import Config

        boto_config = Config(
            signature_version="s3v4",
            s3={"addressing_style": "path"},
            connect_timeout=config.connect_timeout_seconds,
            read_timeout=config.read_timeout_seconds,
            request_checksum_calculation="when_required",
            response_checksum_validation="when_required",
        )

        kwargs: dict = {
            "aws_access_key_id": config.access_key_id,
            "aws_secret_access_key": config.secret_access_key,
            "region_name": config.region,
            "config": boto_config,
        }
        if config.endpoint_url:
            kwargs["endpoint_url"] = config.endpoint_url

        self._s3_client = boto3.client("s3", **kwargs)

        logger.info(
            "Initialized R2 storage client",
            extra={"endpoint": config.endpoint_url, "region": config.region},
        )

    # -- buckets -------------------------------------------------------------

    def list_buckets(self) -> list[str]:
        try:
            response = self._s3_client.list_buckets()
        except Exception as e:
            self._raise_storage_error("list buckets", e)

        return [bucket["Name"] for bucket in response.get("Buckets", [])]

    def create_bucket(self, bucket_name: str) -> None:
        try:
            self._s3_client.create_bucket(Bucket=bucket_name)
        except Exception as e:
            self._raise_storage_error(f"create bucket '{bucket_name}'", e)

        logger.info("Bucket created", extra={"bucket": bucket_name})

    def delete_bucket(self, bucket_name: str) -> None:
        try:
            self._s3_client.delete_bucket(Bucket=bucket_name)
        except Exception as e:
            self._raise_storage_error(f"delete bucket '{bucket_name}'", e)

        logger.info("Bucket deleted", extra={"bucket": bucket_name})

    def list_objects(self, bucket_name: str, prefix: str = "") -> list[ObjectSummary]:
        """List every object under a prefix, following pagination."""
        objects: list[ObjectSummary] = []
        try:
            paginator = self._s3_client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=bucket_name, Prefix=prefix):
                for obj in page.get("Contents", []):
                    objects.append(ObjectSummary(
                        key=obj["Key"],
                        size=obj.get("Size", 0),
                        last_modified=obj.get("LastModified"),
                    ))
        except Exception as e:
            self._raise_storage_error(
                f"list objects in bucket '{bucket_name}' with prefix '{prefix}'", e
            )

        logger.info(
            "Listed objects",
            extra={"bucket": bucket_name, "prefix": prefix, "count": len(objects)},
        )
        return objects

    # -- objects -------------------------------------------------------------

    def put_object(self, bucket_name: str, key: str, data: bytes, content_type: str) -> str:
        try:
            response = self._s3_client.put_object(
                Bucket=bucket_name,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except Exception as e:
            self._raise_storage_error(
                f"upload object to bucket '{bucket_name}' with key '{key}'", e
            )

        logger.debug(
            "Uploaded object",
            extra={"bucket": bucket_name, "key": key, "size_bytes": len(data)},
        )
        return response.get("ETag", "")

    def get_object(self, bucket_name: str, key: str) -> bytes:
        try:
            response = self._s3_client.get_object(Bucket=bucket_name, Key=key)
            return response["Body"].read()
        except Exception as e:
            self._raise_storage_error(
                f"read object from bucket '{bucket_name}' with key '{key}'", e
            )

    def download_to_file(self, bucket_name: str, key: str, path: str) -> None:
        """Stream the body in chunks into place; a failed transfer leaves no file."""
        try:
            response = self._s3_client.get_object(Bucket=bucket_name, Key=key)
            write_file_atomically(
                path, response["Body"].iter_chunks(chunk_size=DOWNLOAD_CHUNK_SIZE)
            )
        except Exception as e:
            self._raise_storage_error(
                f"download object from bucket '{bucket_name}' with key '{key}' to '{path}'", e
            )

    def head_object(self, bucket_name: str, key: str) -> ObjectMetadataSnapshot:
        try:
            response = self._s3_client.head_object(Bucket=bucket_name, Key=key)
        except Exception as e:
            self._raise_storage_error(
                f"access object in bucket '{bucket_name}' with key '{key}'", e
            )

        snapshot = ObjectMetadataSnapshot(
            content_type=response.get("ContentType"),
            content_length=response.get("ContentLength", 0),
            last_modified=response.get("LastModified"),
            metadata=dict(response.get("Metadata", {})),
        )

        logger.info(
            "Fetched object metadata",
            extra={
                "bucket": bucket_name,
                "key": key,
                "content_type": snapshot.content_type,
                "content_length": snapshot.content_length,
            },
        )
        return snapshot

    def delete_object(self, bucket_name: str, key: str) -> None:
        try:
            self._s3_client.delete_object(Bucket=bucket_name, Key=key)
        except Exception as e:
            self._raise_storage_error(
                f"delete object from bucket '{bucket_name}' with key '{key}'", e
            )

        logger.info("Object deleted", extra={"bucket": bucket_name, "key": key})

    @staticmethod
    def _raise_storage_error(action: str, error: Exception) -> NoReturn:
        """Log a boto3 or I/O failure and re-raise it as a gateway error."""
        code = ""
        response = getattr(error, "response", None)
        if isinstance(response, dict):
            code = str(response.get("Error", {}).get("Code", ""))

        logger.error(
            f"Failed to {action}",
            extra={"error": str(error), "error_code": code},
        )

        if code in NOT_FOUND_CODES:
            raise ObjectNotFoundError(f"Failed to {action}: not found ({error})") from error
        raise StorageOperationFailed(f"Failed to {action}: {error}") from error


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

@dataclass
class _StoredObject:
    data: bytes
    content_type: str
    last_modified: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: dict[str, str] = field(default_factory=dict)


class MockStorageClient:
    """
    In-memory storage for local development.

    Buckets are dictionaries of key -> stored object. Missing buckets and
    keys raise ObjectNotFoundError like the real service does.

    State lives only as long as the process.
    """

    def __init__(self) -> None:
        self._buckets: dict[str, dict[str, _StoredObject]] = {}
        logger.info("Initialized mock storage client (in-memory)")

    def _bucket(self, bucket_name: str) -> dict[str, _StoredObject]:
        if bucket_name not in self._buckets:
            raise ObjectNotFoundError(f"Bucket not found: {bucket_name}")
        return self._buckets[bucket_name]

    def _object(self, bucket_name: str, key: str) -> _StoredObject:
        bucket = self._bucket(bucket_name)
        if key not in bucket:
            raise ObjectNotFoundError(f"Object not found: {bucket_name}/{key}")
        return bucket[key]

    def list_buckets(self) -> list[str]:
        return sorted(self._buckets)

    def create_bucket(self, bucket_name: str) -> None:
        if bucket_name in self._buckets:
            raise StorageOperationFailed(f"Bucket already exists: {bucket_name}")
        self._buckets[bucket_name] = {}

    def delete_bucket(self, bucket_name: str) -> None:
        if self._bucket(bucket_name):
            raise StorageOperationFailed(f"Bucket not empty: {bucket_name}")
        del self._buckets[bucket_name]

    def list_objects(self, bucket_name: str, prefix: str = "") -> list[ObjectSummary]:
        bucket = self._bucket(bucket_name)
        return [
            ObjectSummary(key=key, size=len(obj.data), last_modified=obj.last_modified)
            for key, obj in sorted(bucket.items())
            if key.startswith(prefix)
        ]

    def put_object(self, bucket_name: str, key: str, data: bytes, content_type: str) -> str:
        bucket = self._bucket(bucket_name)
        bucket[key] = _StoredObject(data=bytes(data), content_type=content_type)

        logger.debug(
            "Stored object in mock storage",
            extra={"bucket": bucket_name, "key": key, "size_bytes": len(data)},
        )
        return f'"mock-{len(data)}"'

    def get_object(self, bucket_name: str, key: str) -> bytes:
        return self._object(bucket_name, key).data

    def download_to_file(self, bucket_name: str, key: str, path: str) -> None:
        data = self._object(bucket_name, key).data
        try:
            write_file_atomically(path, [data])
        except OSError as e:
            raise StorageOperationFailed(f"Failed to write '{path}': {e}") from e

    def head_object(self, bucket_name: str, key: str) -> ObjectMetadataSnapshot:
        obj = self._object(bucket_name, key)
        return ObjectMetadataSnapshot(
            content_type=obj.content_type,
            content_length=len(obj.data),
            last_modified=obj.last_modified,
            metadata=dict(obj.metadata),
        )

    def delete_object(self, bucket_name: str, key: str) -> None:
        # S3 deletes are idempotent: a missing key is not an error
        self._bucket(bucket_name).pop(key, None)


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_storage_client(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> ObjectStore:
    """
    Build the object store the gateway talks to.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return mock client for testing

    Returns:
        ObjectStore implementation (R2 or Mock)
    """
    if mock_mode:
        return MockStorageClient()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return R2StorageClient(config)
