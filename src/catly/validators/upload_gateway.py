"""Upload validation gateway.

Decides, before any byte reaches storage, whether a name/payload pair may be
written. Checks run in a fixed order and stop at the first failure so the
reported reason is stable:

1. name length bounds
2. name character safety
3. payload non-empty
4. sniffed content type is a supported image type
5. name extension agrees with the sniffed content type
"""

from __future__ import annotations

import logging

from catly.validators.content_type import ContentClassifier
from catly.validators.object_name import validate_object_name
from catly.validators.types import RejectionKind, UploadRejection, UploadValidationResult

logger = logging.getLogger(__name__)

EMPTY_PAYLOAD_MESSAGE = "image upload contains no valid data"


class UploadValidationGateway:
    """Ordered, short-circuiting validation pipeline with no side effects."""

    def __init__(self, classifier: ContentClassifier | None = None) -> None:
        """Initialize the gateway.

        Args:
            classifier: Content classifier to use. Defaults to one backed by
                magic-byte sniffing.
        """
        self._classifier = classifier if classifier is not None else ContentClassifier()

    def validate(self, name: str, payload: bytes) -> UploadValidationResult:
        """Validate an upload.

        Args:
            name: Caller-supplied object name.
            payload: Upload bytes.

        Returns:
            An accepting result carrying the sniffed media type, or a
            rejecting result carrying the first failed check.
        """
        rejection = validate_object_name(name)
        if rejection is not None:
            return self._reject(rejection)

        if not payload:
            return self._reject(
                UploadRejection(kind=RejectionKind.EMPTY_PAYLOAD, message=EMPTY_PAYLOAD_MESSAGE)
            )

        media_type = self._classifier.detect(payload)

        rejection = self._classifier.check_supported(media_type)
        if rejection is not None:
            return self._reject(rejection)

        rejection = self._classifier.check_extension(name, media_type)
        if rejection is not None:
            return self._reject(rejection)

        return UploadValidationResult.accept(media_type)

    def _reject(self, rejection: UploadRejection) -> UploadValidationResult:
        logger.info("upload rejected: kind=%s", rejection.kind.value)
        return UploadValidationResult.reject(rejection)
