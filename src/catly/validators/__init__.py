"""Catly Upload Validation Gateway - rejects bad uploads before storage."""

from catly.validators.content_sniffer import sniff_media_type
from catly.validators.content_type import (
    SUPPORTED_MEDIA_TYPES,
    ContentClassifier,
    ContentDetector,
    media_type_for_extension,
    object_extension,
)
from catly.validators.object_name import MAX_OBJECT_NAME_LENGTH, validate_object_name
from catly.validators.types import (
    ObjectValidationError,
    RejectionKind,
    UploadRejection,
    UploadValidationResult,
)
from catly.validators.upload_gateway import UploadValidationGateway

__all__ = [
    "UploadValidationGateway",
    "ContentClassifier",
    "ContentDetector",
    "SUPPORTED_MEDIA_TYPES",
    "sniff_media_type",
    "media_type_for_extension",
    "object_extension",
    "validate_object_name",
    "MAX_OBJECT_NAME_LENGTH",
    "RejectionKind",
    "UploadRejection",
    "UploadValidationResult",
    "ObjectValidationError",
]
