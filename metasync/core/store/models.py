from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from metasync.core.descriptors.models import MetadataKind, MetadataRecordDescriptor


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class MetadataRecord:
    kind: MetadataKind
    key: str
    name: str
    created_ts: str
    updated_ts: str

    description: Optional[str] = None
    validation_rule: Optional[Dict[str, Any]] = None
    ordering: Optional[float] = None
    attributes: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_descriptor(d: MetadataRecordDescriptor) -> "MetadataRecord":
        now = _utc_now_iso()
        fields = d.mutable_fields()
        return MetadataRecord(
            kind=d.kind,
            key=d.key,
            name=fields["name"],
            created_ts=now,
            updated_ts=now,
            description=fields["description"],
            validation_rule=fields["validation_rule"],
            ordering=fields["ordering"],
            attributes=fields["attributes"],
        )

    def mutable_fields(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "validation_rule": self.validation_rule,
            "ordering": self.ordering,
            "attributes": dict(sorted((self.attributes or {}).items())),
        }

    def apply(self, d: MetadataRecordDescriptor) -> "MetadataRecord":
        """Copy the descriptor's mutable fields onto this record. Identity is untouched."""
        fields = d.mutable_fields()
        self.name = fields["name"]
        self.description = fields["description"]
        self.validation_rule = fields["validation_rule"]
        self.ordering = fields["ordering"]
        self.attributes = fields["attributes"]
        self.updated_ts = _utc_now_iso()
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "key": self.key,
            "name": self.name,
            "description": self.description,
            "validation_rule": self.validation_rule,
            "ordering": self.ordering,
            "attributes": self.attributes or {},
            "created_ts": self.created_ts,
            "updated_ts": self.updated_ts,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "MetadataRecord":
        return MetadataRecord(
            kind=MetadataKind(d["kind"]),
            key=d["key"],
            name=d["name"],
            created_ts=d.get("created_ts") or _utc_now_iso(),
            updated_ts=d.get("updated_ts") or _utc_now_iso(),
            description=d.get("description"),
            validation_rule=d.get("validation_rule"),
            ordering=d.get("ordering"),
            attributes=d.get("attributes") or {},
        )
