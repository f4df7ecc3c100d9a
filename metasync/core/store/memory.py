from __future__ import annotations

from typing import Dict, List, Optional

from metasync.core.descriptors.models import MetadataKind

from .base import MetadataStore
from .models import MetadataRecord


def _copy(rec: MetadataRecord) -> MetadataRecord:
    return MetadataRecord.from_dict(rec.to_dict())


class InMemoryMetadataStore(MetadataStore):
    """Dict-backed store. Returns copies so callers cannot mutate stored state."""

    name = "memory"

    def __init__(self) -> None:
        self._records: Dict[str, MetadataRecord] = {}

    def find_by_key(self, key: str) -> Optional[MetadataRecord]:
        rec = self._records.get(key)
        return _copy(rec) if rec is not None else None

    def create(self, record: MetadataRecord) -> MetadataRecord:
        if record.key in self._records:
            raise ValueError(f"record already exists: key={record.key}")
        self._records[record.key] = _copy(record)
        return _copy(record)

    def update(self, record: MetadataRecord) -> MetadataRecord:
        if record.key not in self._records:
            raise KeyError(f"record not found: key={record.key}")
        self._records[record.key] = _copy(record)
        return _copy(record)

    def list_records(self, kind: Optional[MetadataKind] = None) -> List[MetadataRecord]:
        out = [_copy(r) for r in self._records.values() if kind is None or r.kind == kind]
        return sorted(out, key=lambda r: (r.kind.value, r.key))

    def __len__(self) -> int:
        return len(self._records)
