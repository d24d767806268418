"""
Tool-facing object gateway.

Each public method here is one operation an agent can call. Uploads and
downloads go through the normalizer and selector; bucket lifecycle, listing,
metadata and deletion pass straight through to the object store.

This module knows nothing about boto3 or HTTP.
"""

import logging
from typing import Optional, Protocol

from .errors import InvalidArgumentError
from .models import DownloadRequest, DownloadResult, ObjectMetadataSnapshot, ObjectSummary, UploadRequest
from .normalizer import ContentNormalizer, is_blank
from .selector import ResponseSelector

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class ObjectStore(Protocol):
    """
    Interface for an S3-compatible object store.

    Implementations raise ObjectNotFoundError when a bucket or key is
    absent and StorageOperationFailed for every other service or I/O error.
    """

    def list_buckets(self) -> list[str]:
        ...

    def create_bucket(self, bucket_name: str) -> None:
        ...

    def delete_bucket(self, bucket_name: str) -> None:
        ...

    def list_objects(self, bucket_name: str, prefix: str = "") -> list[ObjectSummary]:
        ...

    def put_object(self, bucket_name: str, key: str, data: bytes, content_type: str) -> str:
        """Store bytes and return the ETag."""
        ...

    def get_object(self, bucket_name: str, key: str) -> bytes:
        ...

    def download_to_file(self, bucket_name: str, key: str, path: str) -> None:
        """Stream the object body into a local file."""
        ...

    def head_object(self, bucket_name: str, key: str) -> ObjectMetadataSnapshot:
        ...

    def delete_object(self, bucket_name: str, key: str) -> None:
        ...


# ---------------------------------------------------------------------------
# Gateway Service
# ---------------------------------------------------------------------------

def _require(value: Optional[str], message: str) -> str:
    if is_blank(value):
        raise InvalidArgumentError(message)
    return value


class ObjectGateway:
    """
    The operations exposed to tool callers.

    Stateless beyond its collaborators, so one instance can be shared by
    concurrent requests.
    """

    def __init__(
        self,
        store: ObjectStore,
        normalizer: Optional[ContentNormalizer] = None,
        selector: Optional[ResponseSelector] = None,
    ) -> None:
        self._store = store
        self._normalizer = normalizer or ContentNormalizer()
        self._selector = selector or ResponseSelector()

    # -- buckets -------------------------------------------------------------

    def list_buckets(self) -> list[str]:
        """List all buckets."""
        logger.info("Fetching list of buckets")
        buckets = self._store.list_buckets()
        logger.info("Buckets found", extra={"count": len(buckets)})
        return buckets

    def create_bucket(self, bucket_name: str) -> str:
        """Create a new bucket."""
        _require(bucket_name, "container name required")
        logger.info("Creating bucket", extra={"bucket": bucket_name})
        self._store.create_bucket(bucket_name)
        return f"Bucket '{bucket_name}' created successfully."

    def delete_bucket(self, bucket_name: str) -> str:
        """Delete a bucket."""
        _require(bucket_name, "container name required")
        logger.info("Deleting bucket", extra={"bucket": bucket_name})
        self._store.delete_bucket(bucket_name)
        return f"Bucket '{bucket_name}' deleted successfully."

    def list_objects(self, bucket_name: str, prefix: Optional[str] = None) -> list[dict[str, str]]:
        """List objects in a bucket, optionally under a key prefix."""
        _require(bucket_name, "container name required")
        logger.info(
            "Listing objects",
            extra={"bucket": bucket_name, "prefix": prefix or ""},
        )
        objects = self._store.list_objects(bucket_name, prefix or "")
        return [summary.as_dict() for summary in objects]

    # -- objects -------------------------------------------------------------

    def upload_object(
        self,
        bucket_name: str,
        key: str,
        content: Optional[str],
        content_type: Optional[str] = None,
        content_format: Optional[str] = None,
    ) -> str:
        """
        Upload an object of any type.

        content is raw text, base64-encoded bytes, or a local file path
        depending on content_format ("text" by default). The MIME type is
        inferred when content_type is not given.
        """
        request = UploadRequest(
            bucket_name=bucket_name,
            key=key,
            content=content,
            content_type=content_type,
            content_format=content_format,
        )
        logger.info(
            "Uploading object",
            extra={"bucket": bucket_name, "key": key, "content_format": content_format or "text"},
        )

        payload = self._normalizer.normalize(request)
        etag = self._store.put_object(bucket_name, key, payload.data, payload.content_type)

        logger.info(
            "Object uploaded",
            extra={
                "bucket": bucket_name,
                "key": key,
                "etag": etag,
                "content_type": payload.content_type,
                "size_bytes": payload.size_bytes,
            },
        )
        return f"Object uploaded successfully to bucket: '{bucket_name}' with key: '{key}'."

    def download(self, request: DownloadRequest) -> DownloadResult:
        """
        Download an object inline or to a file.

        The head call happens first; if it fails nothing is transferred and
        no file is created.
        """
        _require(request.bucket_name, "container name required")
        _require(request.key, "key required")

        logger.info(
            "Downloading object",
            extra={
                "bucket": request.bucket_name,
                "key": request.key,
                "destination_path": request.destination_path,
                "response_type": request.response_type,
            },
        )

        metadata = self._store.head_object(request.bucket_name, request.key)
        return self._selector.deliver(self._store, request, metadata)

    def download_object(
        self,
        bucket_name: str,
        key: str,
        destination_path: Optional[str] = None,
        response_type: Optional[str] = None,
    ) -> str:
        """
        Download an object.

        Returns the content for text objects without a destination path,
        otherwise the absolute path of the saved file. response_type "text"
        or "file" overrides the automatic choice.
        """
        result = self.download(DownloadRequest(
            bucket_name=bucket_name,
            key=key,
            destination_path=destination_path,
            response_type=response_type,
        ))
        return result.value

    def get_object_metadata(self, bucket_name: str, key: str) -> dict[str, str]:
        """Get content type, length, last-modified time and custom metadata."""
        _require(bucket_name, "container name required")
        _require(key, "key required")
        logger.info("Getting object metadata", extra={"bucket": bucket_name, "key": key})
        return self._store.head_object(bucket_name, key).as_dict()

    def delete_object(self, bucket_name: str, key: str) -> str:
        """Delete an object."""
        _require(bucket_name, "container name required")
        _require(key, "key required")
        logger.info("Deleting object", extra={"bucket": bucket_name, "key": key})
        self._store.delete_object(bucket_name, key)
        return f"Object deleted successfully from bucket: '{bucket_name}' with key: '{key}'."
