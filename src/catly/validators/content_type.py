"""Content classification for uploads.

Sniffs the payload's media type, restricts it to the supported image types,
and cross-checks it against the type implied by the name's extension. The
cross-check stops content/extension spoofing such as an executable renamed
to ".jpg".
"""

from __future__ import annotations

import mimetypes
from collections.abc import Callable

from catly.validators.content_sniffer import sniff_media_type
from catly.validators.types import RejectionKind, UploadRejection

ContentDetector = Callable[[bytes], str]

SUPPORTED_MEDIA_TYPES = frozenset({"image/jpeg", "image/png", "image/gif"})

# built-in table only, so results do not depend on the host's mime.types
_MIME_TYPES = mimetypes.MimeTypes()


def object_extension(name: str) -> str:
    """Return the extension of a name: everything from the last dot.

    "cat.jpg" -> ".jpg", "archive.tar.gz" -> ".gz", ".jpg" -> ".jpg",
    "cat" -> "".
    """
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def media_type_for_extension(ext: str) -> str | None:
    """Map an extension to its canonical media type via the standard table.

    Exact lookup first, then the lower-cased extension, which is the
    standard table's own behaviour. No alternate spellings are added.
    """
    if not ext:
        return None
    types_map = _MIME_TYPES.types_map[True]
    return types_map.get(ext) or types_map.get(ext.lower())


class ContentClassifier:
    """Classifies upload payloads.

    The detector is a strategy parameter so validation logic can be tested
    with a deterministic classifier instead of byte-sniffing heuristics.
    """

    def __init__(self, detector: ContentDetector = sniff_media_type) -> None:
        self._detector = detector

    def detect(self, payload: bytes) -> str:
        """Return the best-effort media type of a non-empty payload."""
        return self._detector(payload)

    def check_supported(self, media_type: str) -> UploadRejection | None:
        """Reject media types outside the supported image set."""
        if media_type in SUPPORTED_MEDIA_TYPES:
            return None
        return UploadRejection(
            kind=RejectionKind.UNSUPPORTED_CONTENT_TYPE,
            message=f"uploaded image content of '{media_type}' is not supported",
            details={"media_type": media_type},
        )

    def check_extension(self, name: str, media_type: str) -> UploadRejection | None:
        """Reject names whose extension maps to a different media type."""
        ext = object_extension(name)
        if media_type_for_extension(ext) == media_type:
            return None
        return UploadRejection(
            kind=RejectionKind.EXTENSION_MISMATCH,
            message=(
                f"uploaded image extension '{ext}' does not match "
                f"its content type of '{media_type}'"
            ),
            details={"extension": ext, "media_type": media_type},
        )
