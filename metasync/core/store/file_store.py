from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

from metasync.core.descriptors.models import MetadataKind
from metasync.core.errors import StoreUnavailable

from .base import MetadataStore
from .models import MetadataRecord

_log = logging.getLogger("metasync.store")

try:
    import fcntl as _fcntl
    _HAS_FCNTL = True
except ImportError:
    _HAS_FCNTL = False
    _log.warning(
        "fcntl not available (non-POSIX). File locking is disabled. "
        "Do not run concurrent metadata installs against one store file on this platform."
    )

DEFAULT_STORE_PATH = Path(".metasync") / "metadata.json"


@contextmanager
def _locked_file(path: Path, mode: str) -> Generator:
    """Open a file and apply an exclusive flock (POSIX only). No-op on Windows."""
    with open(path, mode, encoding="utf-8") as fh:
        if _HAS_FCNTL:
            _fcntl.flock(fh, _fcntl.LOCK_EX)
        try:
            yield fh
        finally:
            if _HAS_FCNTL:
                _fcntl.flock(fh, _fcntl.LOCK_UN)


class FileMetadataStore(MetadataStore):
    """File-backed metadata store.

    Path: <store_path> (default .metasync/metadata.json)

    Layout: {"kind": "metadata_store", "records": {<key>: <record>}}
    """

    name = "file"

    def __init__(self, *, store_path: Path = DEFAULT_STORE_PATH):
        self.store_path = Path(store_path)

    def _load(self) -> Dict[str, Any]:
        p = self.store_path
        if not p.exists():
            return {"kind": "metadata_store", "records": {}}
        try:
            with _locked_file(p, "r") as fh:
                obj = json.loads(fh.read() or "{}")
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise StoreUnavailable(f"cannot read metadata store {p}: {exc}") from exc
        if not isinstance(obj, dict):
            raise StoreUnavailable(f"cannot read metadata store {p}: expected an object, got {type(obj).__name__}")
        if not isinstance(obj.get("records"), dict):
            obj["records"] = {}
        return obj

    def _save(self, obj: Dict[str, Any]) -> None:
        p = self.store_path
        # encode first: opening with "w" truncates the previous contents
        try:
            payload = json.dumps(obj, indent=2, sort_keys=True)
        except (TypeError, ValueError) as exc:
            raise StoreUnavailable(f"cannot encode metadata store {p}: {exc}") from exc
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            with _locked_file(p, "w") as fh:
                fh.write(payload)
        except OSError as exc:
            raise StoreUnavailable(f"cannot write metadata store {p}: {exc}") from exc

    def find_by_key(self, key: str) -> Optional[MetadataRecord]:
        raw = self._load()["records"].get(key)
        if raw is None:
            return None
        return MetadataRecord.from_dict(raw)

    def create(self, record: MetadataRecord) -> MetadataRecord:
        obj = self._load()
        if record.key in obj["records"]:
            raise ValueError(f"record already exists: key={record.key}")
        obj["kind"] = "metadata_store"
        obj["records"][record.key] = record.to_dict()
        self._save(obj)
        _log.debug("store.create kind=%s key=%s", record.kind.value, record.key)
        return record

    def update(self, record: MetadataRecord) -> MetadataRecord:
        obj = self._load()
        if record.key not in obj["records"]:
            raise KeyError(f"record not found: key={record.key}")
        obj["records"][record.key] = record.to_dict()
        self._save(obj)
        _log.debug("store.update kind=%s key=%s", record.kind.value, record.key)
        return record

    def list_records(self, kind: Optional[MetadataKind] = None) -> List[MetadataRecord]:
        out = [MetadataRecord.from_dict(v) for v in self._load()["records"].values()]
        if kind is not None:
            out = [r for r in out if r.kind == kind]
        return sorted(out, key=lambda r: (r.kind.value, r.key))
