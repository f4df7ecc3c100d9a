from __future__ import annotations

import logging
import time
from collections import defaultdict
from typing import Dict, Iterable, List, Set

from metasync.core.descriptors.models import MetadataKind, MetadataRecordDescriptor
from metasync.core.errors import (
    DescriptorError,
    IdentityConflict,
    StoreUnavailable,
    UnresolvedReference,
)
from metasync.core.observability.metrics import inc_record
from metasync.core.store.base import MetadataStore
from metasync.core.store.models import MetadataRecord
from metasync.core.validation.rules import compile_descriptor_rule

from .models import DescriptorFailure, Outcome, ReconcilePolicy, ReconcileResult

log = logging.getLogger("metasync.reconcile")


def batch_kind_conflicts(descriptors: Iterable[MetadataRecordDescriptor]) -> Dict[str, Set[MetadataKind]]:
    """Keys declared with more than one kind inside a single batch."""
    kinds: Dict[str, Set[MetadataKind]] = defaultdict(set)
    for d in descriptors:
        kinds[d.key].add(d.kind)
    return {k: v for k, v in kinds.items() if len(v) > 1}


class MetadataReconciler:
    """
    Brings a target store into agreement with an ordered list of descriptors.

    - Declaration order, one descriptor at a time
    - Missing records are created; existing ones are handled per policy
    - Descriptor-level failures are collected into the result
    - StoreUnavailable aborts the remaining batch and propagates
    """

    def __init__(self, store: MetadataStore, *, policy: ReconcilePolicy = ReconcilePolicy.INSTALL_ONCE):
        self.store = store
        self.policy = ReconcilePolicy(policy)

    def reconcile(self, descriptors: Iterable[MetadataRecordDescriptor]) -> ReconcileResult:
        items: List[MetadataRecordDescriptor] = list(descriptors)
        result = ReconcileResult(policy=self.policy)
        conflicts = batch_kind_conflicts(items)

        # keys reconciled successfully in this batch -> kind (for reference resolution)
        resolved: Dict[str, MetadataKind] = {}

        t0 = time.perf_counter()
        for i, d in enumerate(items):
            try:
                outcome = self._reconcile_one(d, conflicts=conflicts, resolved=resolved, result=result)
            except DescriptorError as e:
                self._record_failure(result, d, e)
                continue
            except StoreUnavailable as e:
                result.aborted = True
                result.abort_reason = str(e)
                e.partial = result
                log.error(
                    "reconcile.aborted store=%s key=%s processed=%d remaining=%d reason=%s",
                    getattr(self.store, "name", type(self.store).__name__),
                    d.key,
                    i,
                    len(items) - i,
                    e,
                )
                raise

            resolved[d.key] = d.kind
            result.outcomes[d.key] = outcome
            inc_record(d.kind.value, outcome.value)
            if outcome == Outcome.CREATED:
                result.created += 1
            elif outcome == Outcome.UPDATED:
                result.updated += 1
            else:
                result.skipped += 1

        log.info(
            "reconcile.done policy=%s descriptors=%d created=%d updated=%d skipped=%d failed=%d drifted=%d ms=%d",
            self.policy.value,
            len(items),
            result.created,
            result.updated,
            result.skipped,
            result.failed,
            len(result.drifted),
            int(round((time.perf_counter() - t0) * 1000)),
        )
        return result

    # --- internals ---

    def _reconcile_one(
        self,
        d: MetadataRecordDescriptor,
        *,
        conflicts: Dict[str, Set[MetadataKind]],
        resolved: Dict[str, MetadataKind],
        result: ReconcileResult,
    ) -> Outcome:
        if d.key in conflicts:
            declared = sorted(k.value for k in conflicts[d.key])
            raise IdentityConflict(
                f"key {d.key} is declared with several kinds in one batch: {', '.join(declared)}",
                key=d.key,
                kind=d.kind.value,
            )

        compile_descriptor_rule(d)
        self._check_references(d, resolved)

        existing = self.store.find_by_key(d.key)
        if existing is None:
            self.store.create(MetadataRecord.from_descriptor(d))
            log.debug("reconcile.created kind=%s key=%s name=%s", d.kind.value, d.key, d.name)
            return Outcome.CREATED

        if existing.kind != d.kind:
            raise IdentityConflict(
                f"key {d.key} is stored as {existing.kind.value}, declared as {d.kind.value}",
                key=d.key,
                kind=d.kind.value,
                existing_kind=existing.kind.value,
            )

        if existing.mutable_fields() == d.mutable_fields():
            return Outcome.SKIPPED

        if self.policy == ReconcilePolicy.SYNC:
            self.store.update(existing.apply(d))
            log.info("reconcile.updated kind=%s key=%s name=%s", d.kind.value, d.key, d.name)
            return Outcome.UPDATED

        result.drifted.append(d.key)
        log.warning(
            "reconcile.drift kind=%s key=%s stored_name=%s declared_name=%s (install_once: left untouched)",
            d.kind.value,
            d.key,
            existing.name,
            d.name,
        )
        return Outcome.SKIPPED

    def _check_references(self, d: MetadataRecordDescriptor, resolved: Dict[str, MetadataKind]) -> None:
        for ref_key, ref_kind in d.references().items():
            kind = resolved.get(ref_key)
            if kind is None:
                rec = self.store.find_by_key(ref_key)
                kind = rec.kind if rec is not None else None
            if kind != ref_kind:
                found = "missing" if kind is None else f"stored as {kind.value}"
                raise UnresolvedReference(
                    f"{d.kind.value} {d.key} references {ref_kind.value} {ref_key} ({found})",
                    key=d.key,
                    kind=d.kind.value,
                )

    def _record_failure(self, result: ReconcileResult, d: MetadataRecordDescriptor, e: DescriptorError) -> None:
        data = {}
        existing_kind = getattr(e, "existing_kind", None)
        if existing_kind:
            data["existing_kind"] = existing_kind
        result.failures.append(
            DescriptorFailure(key=d.key, kind=d.kind.value, code=e.code, message=str(e), data=data)
        )
        result.outcomes[d.key] = Outcome.FAILED
        inc_record(d.kind.value, Outcome.FAILED.value)
        log.warning("reconcile.failed code=%s kind=%s key=%s: %s", e.code, d.kind.value, d.key, e)
