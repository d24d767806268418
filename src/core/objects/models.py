"""
Value objects for uploads and downloads.

None of these know about boto3 or HTTP. The storage client produces
ObjectMetadataSnapshot / ObjectSummary, the normalizer produces
NormalizedPayload, and the selector produces DownloadResult.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from .errors import InvalidArgumentError


class ContentFormat(Enum):
    """How the upload payload string is encoded."""
    TEXT = "text"
    BASE64 = "base64"
    PATH = "path"  # content is a local file path

    @classmethod
    def parse(cls, value: Optional[str]) -> "ContentFormat":
        """Parse a caller-supplied format; blank means text."""
        if value is None or not value.strip():
            return cls.TEXT
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise InvalidArgumentError(
                f"unsupported encoding: {value!r}. Must be 'text', 'base64', or 'path'."
            ) from None


class ResponseMode(Enum):
    """How a download is handed back to the caller."""
    TEXT = "text"
    FILE = "file"


@dataclass(frozen=True)
class UploadRequest:
    """
    A single upload as received from the caller.

    content_format stays a raw string here; it is parsed only after the
    bucket/key/content checks so those are always reported first.
    """
    bucket_name: str
    key: str
    content: Optional[str]
    content_type: Optional[str] = None
    content_format: Optional[str] = None


@dataclass(frozen=True)
class NormalizedPayload:
    """Bytes and MIME type ready for a put."""
    data: bytes
    content_type: str

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class DownloadRequest:
    """A single download as received from the caller."""
    bucket_name: str
    key: str
    destination_path: Optional[str] = None
    response_type: Optional[str] = None  # "text", "file" or None for auto-detect


@dataclass(frozen=True)
class ObjectMetadataSnapshot:
    """
    What a head call tells us about a stored object.

    Fetched fresh for every download decision, never cached.
    """
    content_type: Optional[str]
    content_length: int
    last_modified: Optional[datetime] = None
    metadata: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.content_length < 0:
            raise ValueError("content_length cannot be negative")

    def as_dict(self) -> dict[str, str]:
        """Flatten into the string mapping returned by get_object_metadata."""
        result = {
            "contentType": self.content_type or "",
            "contentLength": str(self.content_length),
            "lastModified": self.last_modified.isoformat() if self.last_modified else "",
        }
        result.update(self.metadata)
        return result


@dataclass(frozen=True)
class ObjectSummary:
    """One entry of a bucket listing."""
    key: str
    size: int
    last_modified: Optional[datetime] = None

    def as_dict(self) -> dict[str, str]:
        return {
            "key": self.key,
            "size": str(self.size),
            "lastModified": self.last_modified.isoformat() if self.last_modified else "",
        }


@dataclass(frozen=True)
class DownloadResult:
    """Outcome of a download: inline text or a path on local disk."""
    mode: ResponseMode
    content: Optional[str] = None
    path: Optional[str] = None

    @property
    def value(self) -> str:
        """The string handed back to a tool caller."""
        if self.mode is ResponseMode.TEXT:
            return self.content or ""
        return self.path or ""
