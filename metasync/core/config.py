"""
Install-time configuration.

Environment variables (all optional):
    METASYNC_RECONCILE_POLICY: "install_once" (default) or "sync"
    METASYNC_STORE_PATH      : file store location (default .metasync/metadata.json)
    METASYNC_AUDIT_ENABLED   : "1"/"true" to write the JSONL audit log
    METASYNC_AUDIT_PATH      : audit log location (default .metasync/audit.log)
    METASYNC_HALT_ON_FAILURE : "0"/"false" to keep starting up when descriptors fail
    METASYNC_DESCRIPTOR_DIR  : extra descriptor files (default <project_root>/templates/metadata)
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from metasync.core.observability.audit import DEFAULT_AUDIT_PATH
from metasync.core.reconcile.models import ReconcilePolicy
from metasync.core.store.file_store import DEFAULT_STORE_PATH

_log = logging.getLogger("metasync.config")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _as_bool(raw: Any, default: bool) -> bool:
    if isinstance(raw, bool):
        return raw
    s = str(raw if raw is not None else "").strip().lower()
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    return default


def _as_policy(raw: Any) -> ReconcilePolicy:
    if isinstance(raw, ReconcilePolicy):
        return raw
    s = str(raw or "").strip().lower().replace("-", "_")
    if not s:
        return ReconcilePolicy.INSTALL_ONCE
    try:
        return ReconcilePolicy(s)
    except ValueError:
        raise ValueError(
            f"unknown reconcile policy {raw!r} (expected one of: {', '.join(p.value for p in ReconcilePolicy)})"
        ) from None


@dataclass
class ReconcileConfig:
    policy: ReconcilePolicy = ReconcilePolicy.INSTALL_ONCE
    store_path: Path = DEFAULT_STORE_PATH
    audit_enabled: bool = False
    audit_path: Path = DEFAULT_AUDIT_PATH
    halt_on_failure: bool = True
    descriptor_dir: Optional[Path] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ReconcileConfig":
        env = os.environ if environ is None else environ

        descriptor_dir = (env.get("METASYNC_DESCRIPTOR_DIR") or "").strip()
        cfg = cls(
            policy=_as_policy(env.get("METASYNC_RECONCILE_POLICY")),
            store_path=Path((env.get("METASYNC_STORE_PATH") or "").strip() or DEFAULT_STORE_PATH),
            audit_enabled=_as_bool(env.get("METASYNC_AUDIT_ENABLED"), False),
            audit_path=Path((env.get("METASYNC_AUDIT_PATH") or "").strip() or DEFAULT_AUDIT_PATH),
            halt_on_failure=_as_bool(env.get("METASYNC_HALT_ON_FAILURE"), True),
            descriptor_dir=Path(descriptor_dir) if descriptor_dir else None,
        )
        _log.debug("config policy=%s store=%s audit=%s", cfg.policy.value, cfg.store_path, cfg.audit_enabled)
        return cfg

    @classmethod
    def from_payload(cls, payload: Any) -> "ReconcileConfig":
        """
        Accepts:
          - None
          - "sync" / "install_once"
          - {"policy": "sync", "store_path": "...", "audit": true, "halt_on_failure": false}
        Also tolerates {"audit_enabled": ...} and {"descriptors": "<dir>"}.
        """
        if payload is None:
            return cls()

        if isinstance(payload, (str, ReconcilePolicy)):
            return cls(policy=_as_policy(payload))

        if isinstance(payload, dict):
            store_path = payload.get("store_path")
            audit_path = payload.get("audit_path")
            descriptor_dir = payload.get("descriptor_dir", payload.get("descriptors"))
            return cls(
                policy=_as_policy(payload.get("policy")),
                store_path=Path(store_path) if store_path else DEFAULT_STORE_PATH,
                audit_enabled=_as_bool(payload.get("audit_enabled", payload.get("audit")), False),
                audit_path=Path(audit_path) if audit_path else DEFAULT_AUDIT_PATH,
                halt_on_failure=_as_bool(payload.get("halt_on_failure"), True),
                descriptor_dir=Path(descriptor_dir) if isinstance(descriptor_dir, str) and descriptor_dir else None,
            )

        return cls()
