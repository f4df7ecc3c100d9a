from __future__ import annotations

import logging

import pytest

from metasync.core.descriptors import builders as b
from metasync.core.descriptors.models import MetadataKind
from metasync.core.errors import StoreUnavailable
from metasync.core.reconcile import MetadataReconciler, Outcome, ReconcilePolicy
from metasync.core.store.memory import InMemoryMetadataStore


class FlakyStore(InMemoryMetadataStore):
    """Goes away after a fixed number of successful creates."""

    def __init__(self, creates_before_outage: int):
        super().__init__()
        self.remaining = creates_before_outage
        self.lookups = []

    def find_by_key(self, key):
        self.lookups.append(key)
        return super().find_by_key(key)

    def create(self, record):
        if self.remaining <= 0:
            raise StoreUnavailable("connection refused")
        self.remaining -= 1
        return super().create(record)


def test_single_encounter_type_on_empty_store(store, consultation):
    res = MetadataReconciler(store).reconcile([consultation])

    assert res.counts() == {"created": 1, "updated": 0, "skipped": 0, "failed": 0}
    assert res.ok

    rec = store.find_by_key("A")
    assert rec is not None
    assert rec.name == "Consultation"
    assert rec.kind == MetadataKind.ENCOUNTER_TYPE


def test_second_run_creates_nothing(store):
    batch = [
        b.encounter_type("Consultation", None, "A"),
        b.visit_type("Outpatient", None, "B"),
        b.form("Progress Note", None, "A", "1", "C"),
    ]
    r = MetadataReconciler(store)

    first = r.reconcile(batch)
    second = r.reconcile(batch)

    assert first.created == 3
    assert second.created == 0
    assert second.skipped == 3
    assert second.drifted == []
    assert len(store) == 3


def test_install_once_keeps_identity_and_stored_name(store):
    r = MetadataReconciler(store, policy=ReconcilePolicy.INSTALL_ONCE)
    r.reconcile([b.encounter_type("Consultation", None, "A")])

    for new_name in ("Consult", "Main Consultation", "Consultation v3"):
        res = r.reconcile([b.encounter_type(new_name, None, "A")])
        assert res.created == 0
        assert res.skipped == 1
        assert res.drifted == ["A"]

    rec = store.find_by_key("A")
    assert rec.key == "A"
    assert rec.name == "Consultation"
    assert len(store) == 1


def test_sync_policy_updates_drifted_record(store):
    MetadataReconciler(store).reconcile([b.encounter_type("Consultation", "old", "A")])
    created_ts = store.find_by_key("A").created_ts

    res = MetadataReconciler(store, policy=ReconcilePolicy.SYNC).reconcile(
        [b.encounter_type("Consultation", "new description", "A")]
    )

    assert res.counts() == {"created": 0, "updated": 1, "skipped": 0, "failed": 0}
    assert res.outcomes["A"] == Outcome.UPDATED
    rec = store.find_by_key("A")
    assert rec.description == "new description"
    assert rec.created_ts == created_ts


def test_sync_policy_skips_matching_record(store, consultation):
    MetadataReconciler(store).reconcile([consultation])
    res = MetadataReconciler(store, policy=ReconcilePolicy.SYNC).reconcile([consultation])
    assert res.skipped == 1
    assert res.updated == 0


def test_one_malformed_rule_does_not_stop_the_batch(store):
    batch = [
        b.encounter_type("Consultation", None, "A"),
        b.patient_identifier_type("Broken", None, "[unclosed", None, None, None, False, "B"),
        b.visit_type("Outpatient", None, "C"),
        b.patient_identifier_type("National ID", None, r"\d{5,10}", "digits", None, b.LOCATION_NOT_USED, False, "D"),
    ]

    res = MetadataReconciler(store).reconcile(batch)

    assert res.created == 3
    assert res.failed == 1
    invalid = res.failures_by_code("rule.invalid")
    assert [f.key for f in invalid] == ["B"]
    assert store.find_by_key("B") is None
    assert store.find_by_key("C") is not None
    assert not res.ok


def test_unknown_validator_is_invalid_rule(store):
    d = b.patient_identifier_type("OpenMRS ID", None, None, None, "no_such_check", None, True, "X")
    res = MetadataReconciler(store).reconcile([d])
    assert res.failed_keys() == ["X"]
    assert res.failures[0].code == "rule.invalid"


def test_same_key_different_kinds_in_one_batch(store):
    batch = [
        b.encounter_type("Consultation", None, "K"),
        b.visit_type("Outpatient", None, "K"),
    ]

    res = MetadataReconciler(store).reconcile(batch)

    assert res.created == 0
    assert {f.code for f in res.failures} == {"identity.conflict"}
    assert {f.kind for f in res.failures} == {"encounter_type", "visit_type"}
    assert store.find_by_key("K") is None


def test_stored_key_with_other_kind_conflicts(store):
    MetadataReconciler(store).reconcile([b.encounter_type("Consultation", None, "K")])

    res = MetadataReconciler(store).reconcile([
        b.visit_type("Outpatient", None, "K"),
        b.visit_type("Inpatient", None, "L"),
    ])

    assert res.created == 1
    assert res.failed == 1
    f = res.failures[0]
    assert f.code == "identity.conflict"
    assert f.data == {"existing_kind": "encounter_type"}
    assert store.find_by_key("K").kind == MetadataKind.ENCOUNTER_TYPE


def test_duplicate_descriptor_same_kind_is_skipped(store, consultation):
    res = MetadataReconciler(store).reconcile([consultation, consultation])
    assert res.created == 1
    assert res.skipped == 1


def test_form_needs_its_encounter_type(store):
    res = MetadataReconciler(store).reconcile([
        b.form("Triage", None, "missing-enc", "1", "F1"),
        b.encounter_type("Triage", None, "E1"),
        b.form("Triage", None, "E1", "1", "F2"),
    ])

    assert res.failed_keys() == ["F1"]
    assert res.failures[0].code == "reference.unresolved"
    assert store.find_by_key("F2").attributes["encounter_type"] == "E1"


def test_form_reference_to_wrong_kind_is_unresolved(store):
    res = MetadataReconciler(store).reconcile([
        b.visit_type("Outpatient", None, "V1"),
        b.form("Triage", None, "V1", "1", "F1"),
    ])
    assert res.failed_keys() == ["F1"]
    assert "stored as visit_type" in res.failures[0].message


def test_store_outage_aborts_remaining_batch():
    flaky = FlakyStore(creates_before_outage=1)
    batch = [
        b.encounter_type("Consultation", None, "A"),
        b.encounter_type("Lab Results", None, "B"),
        b.encounter_type("Triage", None, "C"),
    ]

    with pytest.raises(StoreUnavailable) as ei:
        MetadataReconciler(flaky).reconcile(batch)

    partial = ei.value.partial
    assert partial.aborted
    assert partial.created == 1
    assert "connection refused" in partial.abort_reason
    assert flaky.find_by_key("A") is not None
    assert "C" not in flaky.lookups


def test_outage_log_counts_duplicate_keys(caplog):
    flaky = FlakyStore(creates_before_outage=1)
    batch = [
        b.encounter_type("Consultation", None, "A"),
        b.encounter_type("Consultation", None, "A"),
        b.encounter_type("Lab Results", None, "B"),
        b.encounter_type("Triage", None, "C"),
    ]

    with caplog.at_level(logging.ERROR, logger="metasync.reconcile"):
        with pytest.raises(StoreUnavailable):
            MetadataReconciler(flaky).reconcile(batch)

    assert "key=B processed=2 remaining=2" in caplog.text


def test_declaration_order_is_kept(store):
    keys = ["k3", "k1", "k2"]
    res = MetadataReconciler(store).reconcile([b.visit_type(k, None, k) for k in keys])
    assert list(res.outcomes) == keys


def test_result_to_dict_shape(store):
    res = MetadataReconciler(store).reconcile([
        b.patient_identifier_type("Broken", None, "(", None, None, None, False, "B"),
    ])
    out = res.to_dict()
    assert out["policy"] == "install_once"
    assert out["counts"]["failed"] == 1
    assert out["failures"][0]["key"] == "B"
    assert out["aborted"] is False
