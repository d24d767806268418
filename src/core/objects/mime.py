"""
MIME type inference from file names and text/binary classification.

The extension table is read-only after import. Unknown extensions map to
application/octet-stream, and an unknown content type is classified as
binary: saving bytes to a file never corrupts them, decoding them as text can.
"""

import logging
from types import MappingProxyType
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

EXTENSION_CONTENT_TYPES: Mapping[str, str] = MappingProxyType({
    # Text
    "txt": "text/plain",
    "html": "text/html",
    "htm": "text/html",
    "xml": "text/xml",
    "csv": "text/csv",
    "md": "text/markdown",
    "markdown": "text/markdown",
    "json": "application/json",
    "js": "application/javascript",
    "ts": "application/typescript",
    "css": "text/css",
    "rtf": "application/rtf",
    "yaml": "text/yaml",
    "yml": "text/yaml",
    # Documents
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "ppt": "application/vnd.ms-powerpoint",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "odt": "application/vnd.oasis.opendocument.text",
    "ods": "application/vnd.oasis.opendocument.spreadsheet",
    "odp": "application/vnd.oasis.opendocument.presentation",
    # Images
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "webp": "image/webp",
    "ico": "image/x-icon",
    "bmp": "image/bmp",
    "tiff": "image/tiff",
    "tif": "image/tiff",
    # Audio
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "m4a": "audio/mp4",
    "flac": "audio/flac",
    "aac": "audio/aac",
    # Video
    "mp4": "video/mp4",
    "avi": "video/x-msvideo",
    "webm": "video/webm",
    "mkv": "video/x-matroska",
    "mov": "video/quicktime",
    "wmv": "video/x-ms-wmv",
    "flv": "video/x-flv",
    # Archives
    "zip": "application/zip",
    "rar": "application/vnd.rar",
    "7z": "application/x-7z-compressed",
    "tar": "application/x-tar",
    "gz": "application/gzip",
    # Fonts
    "ttf": "font/ttf",
    "otf": "font/otf",
    "woff": "font/woff",
    "woff2": "font/woff2",
    # Source code
    "java": "text/x-java-source",
    "py": "text/x-python",
    "cpp": "text/x-c++src",
    "c": "text/x-csrc",
    "cs": "text/x-csharp",
    "php": "application/x-php",
    "rb": "text/x-ruby",
    "go": "text/x-go",
    "swift": "text/x-swift",
    # Generic binaries
    "exe": "application/x-msdownload",
    "bin": "application/octet-stream",
    "dll": "application/x-msdownload",
    "iso": "application/x-iso9660-image",
    "apk": "application/vnd.android.package-archive",
    "dmg": "application/x-apple-diskimage",
})

# Structured formats that can be returned inline
TEXT_LIKE_CONTENT_TYPES = frozenset({
    "application/json",
    "application/xml",
    "application/javascript",
    "application/typescript",
    "application/xhtml+xml",
    "application/x-www-form-urlencoded",
})


def key_extension(name: str) -> str:
    """
    Return the text after the last dot of a key or file name.

    Empty when there is no dot, when the dot is the first character
    (".env"), or when the dot sits in a directory segment ("v1.2/readme").
    Case is preserved.
    """
    last_dot = name.rfind(".")
    if last_dot <= 0:
        return ""
    extension = name[last_dot + 1:]
    if "/" in extension or "\\" in extension:
        return ""
    return extension


def infer_content_type(key: str) -> str:
    """
    Map a key's extension to a MIME type.

    Never fails: missing or unknown extensions give application/octet-stream.

    Examples:
        >>> infer_content_type("reports/q3.PDF")
        'application/pdf'
        >>> infer_content_type("README")
        'application/octet-stream'
    """
    extension = key_extension(key).lower()
    content_type = EXTENSION_CONTENT_TYPES.get(extension, DEFAULT_CONTENT_TYPE)
    logger.debug(
        "Inferred content type",
        extra={"extension": extension, "content_type": content_type},
    )
    return content_type


def is_text_like(content_type: Optional[str]) -> bool:
    """
    Decide whether a MIME type can be returned inline as text.

    Absent types are treated as binary.
    """
    if not content_type:
        return False

    normalized = content_type.lower().strip()
    base_type = normalized.split(";")[0].strip()

    return (
        normalized.startswith("text/")
        or base_type in TEXT_LIKE_CONTENT_TYPES
        or "+json" in normalized
        or "+xml" in normalized
    )
