"""
Install audit trail.

One JSON object per line, appended to a size-rotated file:

    {"ts": "2024-05-01T09:30:00.123456Z", "type": "install.provider",
     "provider": "common", "store": "file", "policy": "install_once",
     "extra": {...}}

Handlers are opened lazily, one per resolved path, and kept until
close_audit_handlers().
"""
from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from metasync.core.store.models import _utc_now_iso

DEFAULT_AUDIT_PATH = Path(".metasync") / "audit.log"

AUDIT_MAX_BYTES = 10 * 1024 * 1024
AUDIT_BACKUPS = 5

_handlers: Dict[Path, RotatingFileHandler] = {}


def _handler_for(path: Path) -> RotatingFileHandler:
    path = path.resolve()
    h = _handlers.get(path)
    if h is None:
        path.parent.mkdir(parents=True, exist_ok=True)
        h = RotatingFileHandler(path, maxBytes=AUDIT_MAX_BYTES, backupCount=AUDIT_BACKUPS, encoding="utf-8")
        h.setFormatter(logging.Formatter("%(message)s"))
        _handlers[path] = h
    return h


def close_audit_handlers() -> None:
    while _handlers:
        _, h = _handlers.popitem()
        h.close()


def audit_event(
    event_type: str,
    provider: Optional[str],
    store: Optional[str],
    policy: Optional[str],
    extra: Optional[Dict[str, Any]] = None,
    audit_path: Path = DEFAULT_AUDIT_PATH,
) -> None:
    entry: Dict[str, Any] = {
        "ts": _utc_now_iso(),
        "type": event_type,
        "provider": provider,
        "store": store,
        "policy": policy,
    }
    if extra:
        entry["extra"] = extra

    line = json.dumps(entry, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)
    _handler_for(Path(audit_path)).handle(
        logging.makeLogRecord({"name": "metasync.audit", "levelno": logging.INFO, "levelname": "INFO", "msg": line})
    )
