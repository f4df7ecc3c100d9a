"""
Startup install entry point.

Runs every provider against one store, in order, and aggregates the results.
Whether a failed descriptor halts startup is the caller's decision
(ReconcileConfig.halt_on_failure). Store outages always propagate.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from metasync.core.config import ReconcileConfig
from metasync.core.errors import InstallFailed, StoreUnavailable
from metasync.core.observability.audit import audit_event
from metasync.core.reconcile.models import ReconcileResult
from metasync.core.reconcile.reconciler import MetadataReconciler
from metasync.core.store.base import MetadataStore
from metasync.core.store.file_store import FileMetadataStore

from .base import MetadataProvider
from .registry import DescriptorRegistry

log = logging.getLogger("metasync.install")


def _audit(cfg: ReconcileConfig, event_type: str, provider: Optional[str], store: MetadataStore, extra: dict) -> None:
    if not cfg.audit_enabled:
        return
    audit_event(
        event_type,
        provider=provider,
        store=getattr(store, "name", type(store).__name__),
        policy=cfg.policy.value,
        extra=extra,
        audit_path=cfg.audit_path,
    )


def install_all(
    providers: Optional[Iterable[MetadataProvider]] = None,
    *,
    store: Optional[MetadataStore] = None,
    config: Optional[ReconcileConfig] = None,
) -> ReconcileResult:
    cfg = config or ReconcileConfig.from_env()
    if store is None:
        store = FileMetadataStore(store_path=cfg.store_path)
    if providers is None:
        providers = DescriptorRegistry(descriptor_dir=cfg.descriptor_dir).providers()

    reconciler = MetadataReconciler(store, policy=cfg.policy)
    total = ReconcileResult(policy=cfg.policy)

    for provider in providers:
        log.info("install.provider name=%s policy=%s", provider.name, cfg.policy.value)
        try:
            res = provider.install(reconciler)
        except StoreUnavailable as e:
            if isinstance(e.partial, ReconcileResult):
                total.merge(e.partial)
            total.aborted = True
            total.abort_reason = str(e)
            e.partial = total
            _audit(cfg, "install.aborted", provider.name, store, {"reason": str(e), "counts": total.counts()})
            raise

        total.merge(res)
        _audit(cfg, "install.provider", provider.name, store, res.to_dict())
        for f in res.failures:
            _audit(cfg, "install.failure", provider.name, store, {"key": f.key, "kind": f.kind, "code": f.code, "message": f.message})

    log.info(
        "install.done created=%d updated=%d skipped=%d failed=%d",
        total.created,
        total.updated,
        total.skipped,
        total.failed,
    )

    if total.failures and cfg.halt_on_failure:
        raise InstallFailed(result=total, failed=total.failed)
    return total
