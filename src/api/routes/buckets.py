"""
Bucket endpoints.

Thin wrappers over the gateway's bucket operations: list, create, delete,
and list the objects inside a bucket.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, Field

from ..dependencies import AuthenticatedUser, ObjectGatewayDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class CreateBucketRequest(BaseModel):
    """Request to create a bucket."""
    bucket_name: str = Field(description="Name of the bucket to create")


class BucketListResponse(BaseModel):
    """All bucket names."""
    buckets: list[str]


class ObjectListResponse(BaseModel):
    """Objects in a bucket with their key, size and lastModified."""
    bucket_name: str
    prefix: str
    objects: list[dict[str, str]]


class MessageResponse(BaseModel):
    """Human-readable outcome of an operation."""
    message: str


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=BucketListResponse,
    summary="List buckets",
)
def list_buckets(
    gateway: ObjectGatewayDep,
    api_key: AuthenticatedUser,
) -> BucketListResponse:
    """List all buckets in the object store."""
    return BucketListResponse(buckets=gateway.list_buckets())


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create bucket",
)
def create_bucket(
    request: CreateBucketRequest,
    gateway: ObjectGatewayDep,
    api_key: AuthenticatedUser,
) -> MessageResponse:
    """Create a new bucket."""
    return MessageResponse(message=gateway.create_bucket(request.bucket_name))


@router.delete(
    "/{bucket_name}",
    response_model=MessageResponse,
    summary="Delete bucket",
)
def delete_bucket(
    bucket_name: str,
    gateway: ObjectGatewayDep,
    api_key: AuthenticatedUser,
) -> MessageResponse:
    """Delete an empty bucket."""
    return MessageResponse(message=gateway.delete_bucket(bucket_name))


@router.get(
    "/{bucket_name}/objects",
    response_model=ObjectListResponse,
    summary="List objects",
)
def list_objects(
    bucket_name: str,
    gateway: ObjectGatewayDep,
    api_key: AuthenticatedUser,
    prefix: Optional[str] = Query(default=None, description="Only keys starting with this prefix"),
) -> ObjectListResponse:
    """List objects in a bucket."""
    objects = gateway.list_objects(bucket_name, prefix)
    return ObjectListResponse(bucket_name=bucket_name, prefix=prefix or "", objects=objects)
