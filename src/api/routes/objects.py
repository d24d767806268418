"""
Object endpoints: upload, download, metadata, delete.

These are the tool-facing operations. Uploads accept content as raw text,
base64, or a local file path on the gateway host; downloads come back
either inline as text or as the path of a file saved on the gateway host.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, Field

from ...core.objects.models import DownloadRequest, ResponseMode
from ..dependencies import AuthenticatedUser, ObjectGatewayDep
from .buckets import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter()


UPLOAD_DESCRIPTION = """
Upload an object to a bucket. Supports ALL file types, text (txt, xml, html,
csv, md, json, ...) and binary (pdf, docx, xlsx, images, audio, video, ...).

`content` is interpreted according to `content_format`:
- `text` (default): raw text, stored as UTF-8
- `base64`: base64-encoded binary data
- `path`: path of a local file on the gateway host

`content_type` is inferred from the key's extension when omitted (from the
file's own name for `path` uploads).
"""

DOWNLOAD_DESCRIPTION = """
Download an object from a bucket.

Text objects (text/*, JSON, XML, ...) without a `destination_path` are
returned inline. Binary objects, or any object with a `destination_path`,
are saved to a file and its path is returned. `response_type` forces
`text` or `file` handling.
"""


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class UploadObjectRequest(BaseModel):
    """Request to upload an object."""
    bucket_name: str = Field(description="Name of the bucket")
    key: str = Field(description="Object key with extension, e.g. 'folder/file.txt'")
    content: Optional[str] = Field(description="Text, base64 data, or local file path")
    content_type: Optional[str] = Field(
        default=None,
        description="MIME type; inferred from the extension if omitted",
    )
    content_format: Optional[str] = Field(
        default=None,
        description="'text' (default), 'base64' or 'path'",
    )


class DownloadObjectRequest(BaseModel):
    """Request to download an object."""
    bucket_name: str = Field(description="Name of the bucket")
    key: str = Field(description="Object key to download")
    destination_path: Optional[str] = Field(
        default=None,
        description="Local path to save to; a temporary file is used if omitted in file mode",
    )
    response_type: Optional[str] = Field(
        default=None,
        description="'text' or 'file' to force handling; auto-detected if omitted",
    )


class DownloadObjectResponse(BaseModel):
    """Inline content (text mode) or saved file path (file mode)."""
    mode: ResponseMode
    content: Optional[str] = None
    path: Optional[str] = None


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/upload",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload object",
    description=UPLOAD_DESCRIPTION,
)
def upload_object(
    request: UploadObjectRequest,
    gateway: ObjectGatewayDep,
    api_key: AuthenticatedUser,
) -> MessageResponse:
    message = gateway.upload_object(
        bucket_name=request.bucket_name,
        key=request.key,
        content=request.content,
        content_type=request.content_type,
        content_format=request.content_format,
    )
    return MessageResponse(message=message)


@router.post(
    "/download",
    response_model=DownloadObjectResponse,
    summary="Download object",
    description=DOWNLOAD_DESCRIPTION,
)
def download_object(
    request: DownloadObjectRequest,
    gateway: ObjectGatewayDep,
    api_key: AuthenticatedUser,
) -> DownloadObjectResponse:
    result = gateway.download(DownloadRequest(
        bucket_name=request.bucket_name,
        key=request.key,
        destination_path=request.destination_path,
        response_type=request.response_type,
    ))
    return DownloadObjectResponse(mode=result.mode, content=result.content, path=result.path)


@router.get(
    "/metadata",
    response_model=dict[str, str],
    summary="Get object metadata",
)
def get_object_metadata(
    gateway: ObjectGatewayDep,
    api_key: AuthenticatedUser,
    bucket_name: str = Query(description="Name of the bucket"),
    key: str = Query(description="Object key"),
) -> dict[str, str]:
    """Content type, length, last-modified time and any custom metadata."""
    return gateway.get_object_metadata(bucket_name, key)


@router.delete(
    "",
    response_model=MessageResponse,
    summary="Delete object",
)
def delete_object(
    gateway: ObjectGatewayDep,
    api_key: AuthenticatedUser,
    bucket_name: str = Query(description="Name of the bucket"),
    key: str = Query(description="Object key"),
) -> MessageResponse:
    """Delete an object. Deleting a missing key succeeds."""
    return MessageResponse(message=gateway.delete_object(bucket_name, key))
