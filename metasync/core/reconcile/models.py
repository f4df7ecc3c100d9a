from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ReconcilePolicy(str, Enum):
    INSTALL_ONCE = "install_once"  # existing records are never overwritten
    SYNC = "sync"  # existing records are updated in place when they drift


class Outcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class DescriptorFailure:
    key: str
    kind: str
    code: str  # "rule.invalid" | "identity.conflict" | "reference.unresolved"
    message: str
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ReconcileResult:
    policy: ReconcilePolicy
    created: int = 0
    updated: int = 0
    skipped: int = 0
    failures: List[DescriptorFailure] = field(default_factory=list)
    drifted: List[str] = field(default_factory=list)
    outcomes: Dict[str, Outcome] = field(default_factory=dict)

    # set when StoreUnavailable aborted the batch
    aborted: bool = False
    abort_reason: Optional[str] = None

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures and not self.aborted

    def counts(self) -> Dict[str, int]:
        return {
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "failed": self.failed,
        }

    def failed_keys(self) -> List[str]:
        return [f.key for f in self.failures]

    def failures_by_code(self, code: str) -> List[DescriptorFailure]:
        return [f for f in self.failures if f.code == code]

    def merge(self, other: "ReconcileResult") -> "ReconcileResult":
        self.created += other.created
        self.updated += other.updated
        self.skipped += other.skipped
        self.failures.extend(other.failures)
        self.drifted.extend(other.drifted)
        self.outcomes.update(other.outcomes)
        if other.aborted:
            self.aborted = True
            self.abort_reason = other.abort_reason
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "policy": self.policy.value,
            "counts": self.counts(),
            "failures": [
                {"key": f.key, "kind": f.kind, "code": f.code, "message": f.message, "data": f.data}
                for f in self.failures
            ],
            "drifted": list(self.drifted),
            "aborted": self.aborted,
            "abort_reason": self.abort_reason,
        }
