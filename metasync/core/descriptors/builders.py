"""Kind-specific descriptor constructors.

Each helper mirrors one registration call of a metadata installer and folds
the kind-specific arguments into ``attributes`` so the reconciler only ever
sees plain descriptors.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from .models import MetadataKind, MetadataRecordDescriptor, ValidationRule

# Location behaviour of patient identifier types
LOCATION_REQUIRED = "REQUIRED"
LOCATION_NOT_USED = "NOT_USED"


def _clean(attrs: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in attrs.items() if v is not None}


def _rule(pattern: Optional[str], pattern_description: Optional[str], validator: Optional[str]) -> Optional[ValidationRule]:
    if not (pattern or validator):
        return None
    return ValidationRule(pattern=pattern, pattern_description=pattern_description, validator=validator)


def encounter_type(name: str, description: Optional[str], key: str) -> MetadataRecordDescriptor:
    return MetadataRecordDescriptor(kind=MetadataKind.ENCOUNTER_TYPE, key=key, name=name, description=description)


def form(
    name: str,
    description: Optional[str],
    encounter_type: str,
    version: str,
    key: str,
) -> MetadataRecordDescriptor:
    return MetadataRecordDescriptor(
        kind=MetadataKind.FORM,
        key=key,
        name=name,
        description=description,
        attributes=_clean({"encounter_type": encounter_type, "version": version}),
    )


def global_property(
    property_name: str,
    description: Optional[str],
    datatype: Optional[str],
    datatype_config: Optional[str],
    value: Optional[str],
    key: str,
) -> MetadataRecordDescriptor:
    return MetadataRecordDescriptor(
        kind=MetadataKind.GLOBAL_PROPERTY,
        key=key,
        name=property_name,
        description=description,
        attributes=_clean({"datatype": datatype, "datatype_config": datatype_config, "value": value}),
    )


def _attribute_type(
    kind: MetadataKind,
    name: str,
    description: Optional[str],
    datatype: str,
    datatype_config: Optional[str],
    min_occurs: int,
    max_occurs: Optional[int],
    key: str,
) -> MetadataRecordDescriptor:
    # regex-validated text carries its pattern in datatype_config
    rule = None
    if datatype == "regex_validated_text" and datatype_config:
        rule = ValidationRule(pattern=datatype_config)
    return MetadataRecordDescriptor(
        kind=kind,
        key=key,
        name=name,
        description=description,
        validation_rule=rule,
        attributes=_clean({
            "datatype": datatype,
            "datatype_config": datatype_config,
            "min_occurs": int(min_occurs),
            "max_occurs": max_occurs,
        }),
    )


def location_attribute_type(
    name: str,
    description: Optional[str],
    datatype: str,
    datatype_config: Optional[str],
    min_occurs: int,
    max_occurs: Optional[int],
    key: str,
) -> MetadataRecordDescriptor:
    return _attribute_type(
        MetadataKind.LOCATION_ATTRIBUTE_TYPE, name, description, datatype, datatype_config, min_occurs, max_occurs, key
    )


def visit_attribute_type(
    name: str,
    description: Optional[str],
    datatype: str,
    datatype_config: Optional[str],
    min_occurs: int,
    max_occurs: Optional[int],
    key: str,
) -> MetadataRecordDescriptor:
    return _attribute_type(
        MetadataKind.VISIT_ATTRIBUTE_TYPE, name, description, datatype, datatype_config, min_occurs, max_occurs, key
    )


def patient_identifier_type(
    name: str,
    description: Optional[str],
    pattern: Optional[str],
    pattern_description: Optional[str],
    validator: Optional[str],
    location_behavior: Optional[str],
    required: bool,
    key: str,
) -> MetadataRecordDescriptor:
    return MetadataRecordDescriptor(
        kind=MetadataKind.PATIENT_IDENTIFIER_TYPE,
        key=key,
        name=name,
        description=description,
        validation_rule=_rule(pattern, pattern_description, validator),
        attributes=_clean({"location_behavior": location_behavior, "required": bool(required)}),
    )


def person_attribute_type(
    name: str,
    description: Optional[str],
    format: str,
    foreign_key: Optional[int],
    searchable: bool,
    sort_weight: float,
    key: str,
) -> MetadataRecordDescriptor:
    return MetadataRecordDescriptor(
        kind=MetadataKind.PERSON_ATTRIBUTE_TYPE,
        key=key,
        name=name,
        description=description,
        ordering=float(sort_weight),
        attributes=_clean({"format": format, "foreign_key": foreign_key, "searchable": bool(searchable)}),
    )


def visit_type(name: str, description: Optional[str], key: str) -> MetadataRecordDescriptor:
    return MetadataRecordDescriptor(kind=MetadataKind.VISIT_TYPE, key=key, name=name, description=description)
