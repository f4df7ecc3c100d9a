from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from metasync.core.descriptors.models import MetadataKind

from .models import MetadataRecord


class MetadataStore(ABC):
    name: str

    @abstractmethod
    def find_by_key(self, key: str) -> Optional[MetadataRecord]:
        """Return the record stored under key, or None.

        Raises StoreUnavailable when the backing store cannot be read.
        """

    @abstractmethod
    def create(self, record: MetadataRecord) -> MetadataRecord:
        """Persist a new record. The key must not exist yet."""

    @abstractmethod
    def update(self, record: MetadataRecord) -> MetadataRecord:
        """Overwrite the mutable fields of an existing record (sync policy only)."""

    @abstractmethod
    def list_records(self, kind: Optional[MetadataKind] = None) -> List[MetadataRecord]:
        ...
