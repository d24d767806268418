"""
Object upload/download logic.

Contains the MIME table, the upload normalizer, the download response
selector and the gateway service that ties them to an object store.
"""

from .errors import (
    InvalidArgumentError,
    ObjectGatewayError,
    ObjectNotFoundError,
    StorageOperationFailed,
)
from .gateway import ObjectGateway, ObjectStore
from .mime import infer_content_type, is_text_like
from .models import (
    ContentFormat,
    DownloadRequest,
    DownloadResult,
    NormalizedPayload,
    ObjectMetadataSnapshot,
    ObjectSummary,
    ResponseMode,
    UploadRequest,
)
from .normalizer import ContentNormalizer
from .selector import ResponseSelector, choose_response_mode

__all__ = [
    "ContentFormat",
    "ContentNormalizer",
    "DownloadRequest",
    "DownloadResult",
    "InvalidArgumentError",
    "NormalizedPayload",
    "ObjectGateway",
    "ObjectGatewayError",
    "ObjectMetadataSnapshot",
    "ObjectNotFoundError",
    "ObjectStore",
    "ObjectSummary",
    "ResponseMode",
    "ResponseSelector",
    "StorageOperationFailed",
    "UploadRequest",
    "choose_response_mode",
    "infer_content_type",
    "is_text_like",
]
