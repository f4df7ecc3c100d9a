from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class MetadataKind(str, Enum):
    ENCOUNTER_TYPE = "encounter_type"
    FORM = "form"
    GLOBAL_PROPERTY = "global_property"
    LOCATION_ATTRIBUTE_TYPE = "location_attribute_type"
    PATIENT_IDENTIFIER_TYPE = "patient_identifier_type"
    PERSON_ATTRIBUTE_TYPE = "person_attribute_type"
    VISIT_ATTRIBUTE_TYPE = "visit_attribute_type"
    VISIT_TYPE = "visit_type"


# attribute name -> kind the referenced key must resolve to
REFERENCE_ATTRIBUTES: Dict[MetadataKind, Dict[str, MetadataKind]] = {
    MetadataKind.FORM: {"encounter_type": MetadataKind.ENCOUNTER_TYPE},
}


class ValidationRule(BaseModel):
    pattern: Optional[str] = None
    pattern_description: Optional[str] = None
    validator: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.pattern or self.validator)


class MetadataRecordDescriptor(BaseModel):
    kind: MetadataKind
    key: str
    name: str
    description: Optional[str] = None
    validation_rule: Optional[ValidationRule] = None
    ordering: Optional[float] = None

    # kind-specific extras: datatype, min/max occurs, form version, ...
    attributes: Dict[str, Any] = Field(default_factory=dict)

    def mutable_fields(self) -> Dict[str, Any]:
        """Everything except identity (kind, key). Used for drift comparison."""
        rule = self.validation_rule
        return {
            "name": self.name,
            "description": self.description,
            "validation_rule": None if rule is None or rule.is_empty() else rule.model_dump(),
            "ordering": self.ordering,
            "attributes": dict(sorted((self.attributes or {}).items())),
        }

    def references(self) -> Dict[str, MetadataKind]:
        """Returns {referenced_key: expected_kind} for reference attributes that are set."""
        out: Dict[str, MetadataKind] = {}
        for attr, ref_kind in REFERENCE_ATTRIBUTES.get(self.kind, {}).items():
            ref = (self.attributes or {}).get(attr)
            if ref:
                out[str(ref)] = ref_kind
        return out
