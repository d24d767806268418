"""
Download response selection.

A download either comes back inline as text or lands in a local file.
The decision is made once, from the head metadata and the caller's hints,
and then a single transfer step carries it out.

Precedence: explicit response type > explicit destination > inferred type.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from .errors import StorageOperationFailed
from .mime import is_text_like, key_extension
from .models import DownloadRequest, DownloadResult, ObjectMetadataSnapshot, ResponseMode
from .normalizer import is_blank

if TYPE_CHECKING:
    from .gateway import ObjectStore

logger = logging.getLogger(__name__)

DEFAULT_TEMP_PREFIX = "r2download_"


def choose_response_mode(
    metadata: ObjectMetadataSnapshot,
    destination_path: Optional[str] = None,
    response_type: Optional[str] = None,
) -> ResponseMode:
    """
    Pick text or file mode for a download.

    Any non-blank response_type other than "text" forces file mode. Without
    one, text mode needs a text-like content type and no destination path.
    """
    if not is_blank(response_type):
        if response_type.strip().lower() == ResponseMode.TEXT.value:
            return ResponseMode.TEXT
        if response_type.strip().lower() != ResponseMode.FILE.value:
            logger.warning(
                "Unrecognized response type, saving to file",
                extra={"response_type": response_type},
            )
        return ResponseMode.FILE

    if is_text_like(metadata.content_type) and is_blank(destination_path):
        return ResponseMode.TEXT
    return ResponseMode.FILE


class ResponseSelector:
    """
    Carries out a download in the chosen mode.

    Args:
        temp_dir: Directory for synthesized download files (system default if None)
        temp_prefix: File name prefix for synthesized download files
    """

    def __init__(
        self,
        temp_dir: Optional[str] = None,
        temp_prefix: str = DEFAULT_TEMP_PREFIX,
    ) -> None:
        self._temp_dir = temp_dir
        self._temp_prefix = temp_prefix

    def deliver(
        self,
        store: "ObjectStore",
        request: DownloadRequest,
        metadata: ObjectMetadataSnapshot,
    ) -> DownloadResult:
        """Decide the mode and move the object's bytes accordingly."""
        mode = choose_response_mode(
            metadata,
            destination_path=request.destination_path,
            response_type=request.response_type,
        )

        logger.info(
            "Selected response mode",
            extra={
                "bucket": request.bucket_name,
                "key": request.key,
                "mode": mode.value,
                "forced": not is_blank(request.response_type),
                "content_type": metadata.content_type,
            },
        )

        if mode is ResponseMode.TEXT:
            return self._deliver_text(store, request)
        return self._deliver_file(store, request)

    def _deliver_text(self, store: "ObjectStore", request: DownloadRequest) -> DownloadResult:
        data = store.get_object(request.bucket_name, request.key)
        # Forced text on binary content must not blow up; bad bytes become U+FFFD.
        text = data.decode("utf-8", errors="replace")

        logger.info(
            "Object downloaded as text",
            extra={"key": request.key, "size_chars": len(text)},
        )
        return DownloadResult(mode=ResponseMode.TEXT, content=text)

    def _deliver_file(self, store: "ObjectStore", request: DownloadRequest) -> DownloadResult:
        synthesized = is_blank(request.destination_path)
        created_dirs: list[Path] = []
        if synthesized:
            target = self._create_temp_file(request.key)
            existed = True
        else:
            target = os.path.abspath(request.destination_path)
            existed = os.path.exists(target)
            created_dirs = self._ensure_parent_dir(target)

        try:
            store.download_to_file(request.bucket_name, request.key, target)
        except StorageOperationFailed:
            # Leave nothing behind that this call created
            if synthesized or not existed:
                Path(target).unlink(missing_ok=True)
            self._remove_dirs(created_dirs)
            raise

        logger.info(
            "Object downloaded to file",
            extra={"key": request.key, "path": target},
        )
        return DownloadResult(mode=ResponseMode.FILE, path=target)

    def _create_temp_file(self, key: str) -> str:
        """Create an empty, uniquely named file carrying the key's extension."""
        extension = key_extension(key)
        suffix = f".{extension}" if extension else ""
        try:
            fd, path = tempfile.mkstemp(
                prefix=self._temp_prefix,
                suffix=suffix,
                dir=self._temp_dir,
            )
        except OSError as e:
            logger.error(
                "Failed to create temporary file",
                extra={"key": key, "error": str(e)},
            )
            raise StorageOperationFailed(
                f"Failed to create temporary file for download: {e}"
            ) from e
        os.close(fd)

        logger.info("Created temporary file for download", extra={"path": path})
        return os.path.abspath(path)

    @staticmethod
    def _ensure_parent_dir(target: str) -> list[Path]:
        """
        Create missing parent directories, outermost first.

        Returns the directories that were created. A failure is only logged;
        the write that follows reports it.
        """
        parent = Path(target).parent
        missing = []
        while not parent.exists() and parent != parent.parent:
            missing.append(parent)
            parent = parent.parent
        missing.reverse()
        if not missing:
            return []

        try:
            missing[-1].mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(
                "Failed to create directory",
                extra={"path": str(missing[-1]), "error": str(e)},
            )
        return [d for d in missing if d.is_dir()]

    @staticmethod
    def _remove_dirs(created_dirs: list[Path]) -> None:
        for directory in reversed(created_dirs):
            try:
                directory.rmdir()
            except OSError as e:
                logger.warning(
                    "Failed to remove directory after failed download",
                    extra={"path": str(directory), "error": str(e)},
                )
                return
