"""Catly services."""

from catly.services.objects import ObjectService, UploadReceipt

__all__ = ["ObjectService", "UploadReceipt"]
