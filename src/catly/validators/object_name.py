"""Object name validation.

A name is the external lookup key and, for the filesystem backend, a single
path segment. Rejecting separators here is the only guard against directory
traversal, so it runs before any path is built.

Length is measured in UTF-8 bytes, the unit filesystems limit directory
entries by.
"""

from __future__ import annotations

from catly.validators.types import RejectionKind, UploadRejection

MIN_OBJECT_NAME_LENGTH = 1
MAX_OBJECT_NAME_LENGTH = 256

INVALID_NAME_CHARACTERS = frozenset({"/", "\\", "\x00"})

NAME_LENGTH_MESSAGE = (
    f"image name should be between {MIN_OBJECT_NAME_LENGTH} "
    f"and {MAX_OBJECT_NAME_LENGTH} characters"
)
NAME_CHARACTERS_MESSAGE = "image name contains invalid characters"


def validate_object_name(name: str) -> UploadRejection | None:
    """Check an object name's length and characters.

    Args:
        name: Candidate object name.

    Returns:
        None if the name is acceptable, otherwise the first rejection
        (length is checked before characters).
    """
    length = len(name.encode("utf-8", errors="surrogatepass"))
    if not MIN_OBJECT_NAME_LENGTH <= length <= MAX_OBJECT_NAME_LENGTH:
        return UploadRejection(
            kind=RejectionKind.NAME_LENGTH,
            message=NAME_LENGTH_MESSAGE,
            details={"length_bytes": length},
        )

    if any(ch in INVALID_NAME_CHARACTERS for ch in name):
        return UploadRejection(kind=RejectionKind.NAME_CHARACTERS, message=NAME_CHARACTERS_MESSAGE)

    return None
