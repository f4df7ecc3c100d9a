from __future__ import annotations

from collections import Counter
from typing import Dict, Optional

from prometheus_client import Counter as PromCounter

# Named counters (custom)
_NAMED = Counter()

_PROM_RECORDS = PromCounter(
    "metasync_reconcile_records_total",
    "Descriptors processed by the reconciler",
    ["kind", "outcome"],
)


def reset_metrics() -> None:
    """
    Test helper: clears in-process counters to avoid cross-test leakage.
    Prometheus counters are process-global and are not reset.
    """
    _NAMED.clear()


def inc_record(kind: Optional[str], outcome: str) -> None:
    """
    Canonical per-descriptor increment used by the reconciler.
    outcome: created | updated | skipped | failed
    """
    k = kind or "unknown"
    _NAMED["records_total"] += 1
    _NAMED[f"records_{outcome}"] += 1
    _NAMED[f"kind_{k}|{outcome}"] += 1
    _PROM_RECORDS.labels(kind=k, outcome=outcome).inc()


def inc_named(name: str, value: int = 1) -> None:
    if not name:
        return
    _NAMED[name] += int(value)


def snapshot_named() -> Dict[str, int]:
    return dict(_NAMED)
