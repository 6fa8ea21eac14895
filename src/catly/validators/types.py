"""Result types shared by the upload validators."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class RejectionKind(str, Enum):
    """Why an upload was refused, in gateway priority order."""

    NAME_LENGTH = "name_length"
    NAME_CHARACTERS = "name_characters"
    EMPTY_PAYLOAD = "empty_payload"
    UNSUPPORTED_CONTENT_TYPE = "unsupported_content_type"
    EXTENSION_MISMATCH = "extension_mismatch"


@dataclass(frozen=True)
class UploadRejection:
    """A single structured rejection.

    Attributes:
        kind: Machine-readable rejection kind.
        message: Human-readable reason, surfaced verbatim to the caller.
        details: Diagnostic values (detected type, extension, ...).
    """

    kind: RejectionKind
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "details": self.details,
        }


@dataclass(frozen=True)
class UploadValidationResult:
    """Outcome of the upload gateway: proceed to write, or a rejection."""

    accepted: bool
    media_type: str | None = None
    rejection: UploadRejection | None = None

    @classmethod
    def accept(cls, media_type: str) -> UploadValidationResult:
        """Create an accepting result."""
        return cls(accepted=True, media_type=media_type)

    @classmethod
    def reject(cls, rejection: UploadRejection) -> UploadValidationResult:
        """Create a rejecting result."""
        return cls(accepted=False, rejection=rejection)


class ObjectValidationError(Exception):
    """Raised when a name or payload is refused before reaching storage.

    Always recoverable and caused by the caller; never a system fault.
    """

    def __init__(self, rejection: UploadRejection) -> None:
        super().__init__(rejection.message)
        self.rejection = rejection

    @property
    def kind(self) -> RejectionKind:
        return self.rejection.kind

    @property
    def message(self) -> str:
        return self.rejection.message
