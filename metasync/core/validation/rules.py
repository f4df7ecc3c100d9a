from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Pattern

from metasync.core.descriptors.models import MetadataRecordDescriptor, ValidationRule
from metasync.core.errors import InvalidRule

from .luhn import LuhnMod10Validator, LuhnMod25Validator

VALIDATORS: Dict[str, Any] = {
    "luhn_mod25": LuhnMod25Validator(),
    "luhn_mod10": LuhnMod10Validator(),
}


@dataclass(frozen=True)
class CompiledRule:
    pattern: Optional[Pattern[str]]
    validator: Optional[Any]
    pattern_description: Optional[str] = None

    def matches(self, value: Optional[str]) -> bool:
        """Full-match against the pattern, then the check-digit validator, when present."""
        if value is None:
            return False
        if self.pattern is not None and self.pattern.fullmatch(value) is None:
            return False
        if self.validator is not None and not self.validator.is_valid(value):
            return False
        return True


def compile_rule(rule: Optional[ValidationRule], *, key: Optional[str] = None, kind: Optional[str] = None) -> Optional[CompiledRule]:
    """
    Returns None when there is no rule to enforce.
    Raises InvalidRule for an unparseable pattern or an unregistered validator.
    """
    if rule is None or rule.is_empty():
        return None

    compiled = None
    if rule.pattern:
        try:
            compiled = re.compile(rule.pattern)
        except re.error as e:
            raise InvalidRule(f"invalid pattern {rule.pattern!r}: {e}", key=key, kind=kind) from e

    validator = None
    if rule.validator:
        validator = VALIDATORS.get(rule.validator.strip().lower())
        if validator is None:
            raise InvalidRule(
                f"unknown validator {rule.validator!r} (known: {', '.join(sorted(VALIDATORS))})",
                key=key,
                kind=kind,
            )

    return CompiledRule(pattern=compiled, validator=validator, pattern_description=rule.pattern_description)


def compile_descriptor_rule(d: MetadataRecordDescriptor) -> Optional[CompiledRule]:
    return compile_rule(d.validation_rule, key=d.key, kind=d.kind.value)
