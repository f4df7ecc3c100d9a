"""
Descriptor file loader.

A descriptor file (YAML or JSON) declares one provider:

    provider: facility_extras
    descriptors:
      - kind: encounter_type
        key: 0f1c2d3e-...
        name: Discharge
        description: Patient discharge summary
      - kind: patient_identifier_type
        key: 6a1b...
        name: Insurance Number
        validation_rule: {pattern: "\\d{8}", pattern_description: "8 digits"}

Keys are copied verbatim; the loader never generates one.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Tuple

import yaml
from pydantic import ValidationError

from .models import MetadataRecordDescriptor

_log = logging.getLogger("metasync.registry")

DESCRIPTOR_SUFFIXES = (".json", ".yaml", ".yml")


class DescriptorFileError(ValueError):
    pass


def _parse_text(path: Path, raw_text: str) -> Any:
    if path.suffix.lower() == ".json":
        try:
            return json.loads(raw_text)
        except json.JSONDecodeError as exc:
            raise DescriptorFileError(f"{path.name}: invalid JSON: {exc}") from exc
    try:
        return yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
        raise DescriptorFileError(f"{path.name}: invalid YAML: {exc}") from exc


def parse_descriptors(raw: Any, *, source: str = "<memory>") -> Tuple[str, List[MetadataRecordDescriptor]]:
    """Validate a decoded mapping into (provider_name, descriptors)."""
    if not isinstance(raw, dict):
        raise DescriptorFileError(f"{source}: expected a mapping, got {type(raw).__name__}")

    name = str(raw.get("provider") or "").strip()
    if not name:
        raise DescriptorFileError(f"{source}: missing 'provider'")

    items = raw.get("descriptors") or []
    if not isinstance(items, list):
        raise DescriptorFileError(f"{source}: 'descriptors' must be a list")

    out: List[MetadataRecordDescriptor] = []
    for i, item in enumerate(items):
        try:
            out.append(MetadataRecordDescriptor(**item))
        except (TypeError, ValidationError) as exc:
            raise DescriptorFileError(f"{source}: descriptor #{i} is invalid: {exc}") from exc
    return name, out


def load_descriptor_file(path: Path) -> Tuple[str, List[MetadataRecordDescriptor]]:
    path = Path(path)
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DescriptorFileError(f"cannot read {path}: {exc}") from exc

    name, descriptors = parse_descriptors(_parse_text(path, raw_text), source=path.name)
    _log.debug("loaded provider=%s descriptors=%d from %s", name, len(descriptors), path)
    return name, descriptors
