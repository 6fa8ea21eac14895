"""Catly object storage data models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class StoredObjectMetadata:
    """Metadata describing one stored object.

    Media type is deliberately absent: it is derived from the payload at
    validation time and never stored.

    Attributes:
        name: Object name, also the external lookup key.
        sha256: SHA256 hash of the payload (hex string).
        size_bytes: Payload size in bytes.
        created_at: Time the winning write completed.
    """

    name: str
    sha256: str
    size_bytes: int
    created_at: datetime

    def to_dict(self) -> dict[str, str | int]:
        """Convert metadata to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "sha256": self.sha256,
            "size_bytes": self.size_bytes,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True, eq=False)
class StoredObject:
    """An immutable payload together with its metadata.

    Compared by identity: the in-memory backend decides which writer won by
    checking which instance ended up in the table.
    """

    metadata: StoredObjectMetadata
    body: bytes
