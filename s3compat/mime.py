"""MIME type lookup for object keys.

Listings decorate each object with a MIME type and a coarse category
(image, video, audio, document, archive, other). The lookup sits behind
the MimeResolver interface so callers can plug in their own table.
"""

import mimetypes
from abc import ABC, abstractmethod

DEFAULT_MIME_TYPE = "application/octet-stream"

DOCUMENT_TYPES = frozenset({
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "text/plain",
    "text/csv",
    "application/rtf",
})

ARCHIVE_TYPES = frozenset({
    "application/zip",
    "application/x-rar-compressed",
    "application/x-tar",
    "application/gzip",
})

# Extensions missing from, or mapped differently by, the stdlib table
EXTRA_TYPES = {
    ".rar": "application/x-rar-compressed",
    ".gz": "application/gzip",
    ".tgz": "application/gzip",
    ".rtf": "application/rtf",
    ".webp": "image/webp",
}


class MimeResolver(ABC):
    """Maps object keys to MIME types."""

    @abstractmethod
    def guess(self, key: str) -> str:
        """Return the MIME type for a key, or a generic binary type."""
        pass


class MimetypesResolver(MimeResolver):
    """Resolver backed by the standard library's built-in type table.

    A private MimeTypes instance is used so the result does not depend
    on the host's /etc/mime.types.
    """

    def __init__(self):
        self._types = mimetypes.MimeTypes()
        for extension, mime_type in EXTRA_TYPES.items():
            self._types.add_type(mime_type, extension)

    def guess(self, key: str) -> str:
        filename = key.rstrip("/").rsplit("/", 1)[-1]
        if not filename:
            return DEFAULT_MIME_TYPE
        lowered = filename.lower()
        for extension, mime_type in EXTRA_TYPES.items():
            if lowered.endswith(extension):
                return mime_type
        mime_type, _ = self._types.guess_type(filename, strict=False)
        return mime_type or DEFAULT_MIME_TYPE


def category_for(mime_type: str) -> str:
    """Coarse file category for a MIME type."""
    for family in ("image", "video", "audio"):
        if mime_type.startswith(family + "/"):
            return family
    if mime_type in DOCUMENT_TYPES:
        return "document"
    if mime_type in ARCHIVE_TYPES:
        return "archive"
    return "other"
