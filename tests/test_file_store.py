import json
from datetime import date
from pathlib import Path

import pytest

from metasync.core.descriptors import builders as b
from metasync.core.descriptors.models import MetadataKind, MetadataRecordDescriptor
from metasync.core.errors import StoreUnavailable
from metasync.core.reconcile import MetadataReconciler, ReconcilePolicy
from metasync.core.store.file_store import FileMetadataStore
from metasync.core.store.models import MetadataRecord


def test_records_survive_a_new_store_instance(tmp_path: Path):
    path = tmp_path / ".metasync" / "metadata.json"
    MetadataReconciler(FileMetadataStore(store_path=path)).reconcile([
        b.encounter_type("Consultation", "main consult", "A"),
        b.person_attribute_type("Telephone contact", None, "string", None, False, 1.0, "P"),
    ])

    reopened = FileMetadataStore(store_path=path)
    rec = reopened.find_by_key("P")
    assert rec.kind == MetadataKind.PERSON_ATTRIBUTE_TYPE
    assert rec.ordering == 1.0
    assert rec.attributes == {"format": "string", "searchable": False}

    res = MetadataReconciler(reopened).reconcile([
        b.encounter_type("Consultation", "main consult", "A"),
        b.person_attribute_type("Telephone contact", None, "string", None, False, 1.0, "P"),
    ])
    assert res.created == 0
    assert res.skipped == 2
    assert res.drifted == []


def test_file_layout(tmp_path: Path):
    path = tmp_path / "m.json"
    MetadataReconciler(FileMetadataStore(store_path=path)).reconcile([b.visit_type("Outpatient", None, "V")])

    obj = json.loads(path.read_text(encoding="utf-8"))
    assert obj["kind"] == "metadata_store"
    assert obj["records"]["V"]["kind"] == "visit_type"
    assert obj["records"]["V"]["created_ts"].endswith("Z")


def test_missing_file_is_empty_store(tmp_path: Path):
    s = FileMetadataStore(store_path=tmp_path / "nope.json")
    assert s.find_by_key("x") is None
    assert s.list_records() == []


@pytest.mark.parametrize(
    "raw",
    [
        b"{not json",
        b'{"records": {"\xff": 1}}',
        b"[]",
    ],
    ids=["bad-json", "bad-utf8", "not-an-object"],
)
def test_corrupt_file_is_store_unavailable(tmp_path: Path, raw: bytes):
    path = tmp_path / "m.json"
    path.write_bytes(raw)

    with pytest.raises(StoreUnavailable) as ei:
        MetadataReconciler(FileMetadataStore(store_path=path)).reconcile([b.visit_type("Outpatient", None, "V")])
    assert ei.value.partial.aborted
    assert ei.value.partial.created == 0


def test_unencodable_attribute_keeps_existing_records(tmp_path: Path):
    path = tmp_path / "m.json"
    MetadataReconciler(FileMetadataStore(store_path=path)).reconcile([b.encounter_type("Consultation", None, "A")])
    before = path.read_bytes()

    dated = MetadataRecordDescriptor(
        kind=MetadataKind.VISIT_TYPE,
        key="V",
        name="Outpatient",
        attributes={"effective": date(2023, 1, 1)},
    )
    with pytest.raises(StoreUnavailable) as ei:
        MetadataReconciler(FileMetadataStore(store_path=path)).reconcile([dated])

    assert ei.value.partial.aborted
    assert path.read_bytes() == before
    reopened = FileMetadataStore(store_path=path)
    assert reopened.find_by_key("A").kind == MetadataKind.ENCOUNTER_TYPE
    assert reopened.find_by_key("V") is None


def test_create_existing_key_raises(tmp_path: Path):
    s = FileMetadataStore(store_path=tmp_path / "m.json")
    rec = MetadataRecord.from_descriptor(b.visit_type("Outpatient", None, "V"))
    s.create(rec)
    with pytest.raises(ValueError):
        s.create(rec)


def test_sync_update_persists(tmp_path: Path):
    path = tmp_path / "m.json"
    MetadataReconciler(FileMetadataStore(store_path=path)).reconcile([b.visit_type("Outpatient", "a", "V")])
    MetadataReconciler(FileMetadataStore(store_path=path), policy=ReconcilePolicy.SYNC).reconcile(
        [b.visit_type("Outpatient", "b", "V")]
    )
    assert FileMetadataStore(store_path=path).find_by_key("V").description == "b"


def test_list_records_filters_by_kind(tmp_path: Path):
    s = FileMetadataStore(store_path=tmp_path / "m.json")
    MetadataReconciler(s).reconcile([
        b.visit_type("Outpatient", None, "V2"),
        b.encounter_type("Triage", None, "E"),
        b.visit_type("Inpatient", None, "V1"),
    ])
    assert [r.key for r in s.list_records(MetadataKind.VISIT_TYPE)] == ["V1", "V2"]
    assert len(s.list_records()) == 3
