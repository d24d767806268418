"""
Upload payload normalization.

Callers hand us a string in one of three encodings. Everything below this
module only ever sees bytes plus a MIME type, so the storage client has a
single put path regardless of where the content came from.
"""

import base64
import binascii
import logging
from pathlib import Path
from typing import Optional

from .errors import InvalidArgumentError
from .mime import infer_content_type
from .models import ContentFormat, NormalizedPayload, UploadRequest

logger = logging.getLogger(__name__)


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class ContentNormalizer:
    """
    Turns an UploadRequest into a NormalizedPayload.

    Stateless; one instance can serve every request.
    """

    def normalize(self, request: UploadRequest) -> NormalizedPayload:
        """
        Validate the request and decode its content.

        Checks run in a fixed order (bucket, key, content, encoding) and
        fail on the first problem, before any file is read.

        Raises:
            InvalidArgumentError: if any check or decode fails
        """
        if is_blank(request.bucket_name):
            raise InvalidArgumentError("container name required")
        if is_blank(request.key):
            raise InvalidArgumentError("key required")
        if request.content is None:
            raise InvalidArgumentError("content required")

        content_format = ContentFormat.parse(request.content_format)

        if content_format is ContentFormat.TEXT:
            data = request.content.encode("utf-8")
            logger.info(
                "Processing as text content",
                extra={"key": request.key, "size_chars": len(request.content)},
            )
        elif content_format is ContentFormat.BASE64:
            data = self._decode_base64(request.content)
            logger.info(
                "Decoded base64 content",
                extra={"key": request.key, "size_bytes": len(data)},
            )
        else:
            return self._read_local_file(request.content, request.content_type)

        content_type = request.content_type
        if is_blank(content_type):
            content_type = infer_content_type(request.key)
            logger.info(
                "Content type inferred from key",
                extra={"key": request.key, "content_type": content_type},
            )

        return NormalizedPayload(data=data, content_type=content_type)

    @staticmethod
    def _decode_base64(content: str) -> bytes:
        """Strict standard-alphabet decode; trailing padding may be omitted."""
        padded = content + "=" * (-len(content) % 4)
        try:
            return base64.b64decode(padded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidArgumentError(f"invalid base64 content: {e}") from e

    @staticmethod
    def _read_local_file(
        path_value: str,
        declared_content_type: Optional[str],
    ) -> NormalizedPayload:
        """
        Read an upload from local disk.

        The MIME type comes from the file's own name rather than the
        object key when none was declared.
        """
        path = Path(path_value)
        if not path.exists():
            raise InvalidArgumentError(f"File does not exist: {path_value}")
        if not path.is_file():
            raise InvalidArgumentError(f"Path is not a file: {path_value}")

        try:
            data = path.read_bytes()
        except OSError as e:
            raise InvalidArgumentError(f"Failed to read file: {path_value} - {e}") from e

        content_type = declared_content_type
        if is_blank(content_type):
            content_type = infer_content_type(path.name)

        logger.info(
            "Read upload from file",
            extra={
                "path": path_value,
                "size_bytes": len(data),
                "content_type": content_type,
            },
        )

        return NormalizedPayload(data=data, content_type=content_type)
