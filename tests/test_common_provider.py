import uuid
from collections import Counter

from metasync.core.descriptors.models import MetadataKind
from metasync.core.providers import CommonMetadataProvider
from metasync.core.providers import common
from metasync.core.reconcile import MetadataReconciler
from metasync.core.validation import LuhnMod25Validator, compile_descriptor_rule


def test_keys_are_unique_uuids():
    ds = CommonMetadataProvider().descriptors()
    keys = [d.key for d in ds]
    assert len(keys) == len(set(keys)) == 25
    for k in keys:
        assert str(uuid.UUID(k)) == k


def test_kind_breakdown():
    counts = Counter(d.kind for d in CommonMetadataProvider().descriptors())
    assert counts == {
        MetadataKind.ENCOUNTER_TYPE: 4,
        MetadataKind.FORM: 7,
        MetadataKind.GLOBAL_PROPERTY: 1,
        MetadataKind.LOCATION_ATTRIBUTE_TYPE: 1,
        MetadataKind.PATIENT_IDENTIFIER_TYPE: 4,
        MetadataKind.PERSON_ATTRIBUTE_TYPE: 6,
        MetadataKind.VISIT_ATTRIBUTE_TYPE: 1,
        MetadataKind.VISIT_TYPE: 1,
    }


def test_forms_are_declared_after_their_encounter_types():
    seen = set()
    for d in CommonMetadataProvider().descriptors():
        for ref in d.references():
            assert ref in seen, f"{d.name} references {ref} before it is declared"
        seen.add(d.key)


def test_every_rule_compiles():
    for d in CommonMetadataProvider().descriptors():
        compile_descriptor_rule(d)


def test_install_is_idempotent(store):
    r = MetadataReconciler(store)
    first = CommonMetadataProvider().install(r)
    second = CommonMetadataProvider().install(r)

    assert first.counts() == {"created": 25, "updated": 0, "skipped": 0, "failed": 0}
    assert second.counts() == {"created": 0, "updated": 0, "skipped": 25, "failed": 0}


def test_installed_records(store):
    CommonMetadataProvider().install(MetadataReconciler(store))

    form = store.find_by_key(common.FORM_PROGRESS_NOTE)
    assert form.attributes == {"encounter_type": common.ENCOUNTER_CONSULTATION, "version": "1"}

    mfl = store.find_by_key(common.LOCATION_ATTRIBUTE_MASTER_FACILITY_CODE)
    assert mfl.validation_rule["pattern"] == r"\d{5}"
    assert mfl.attributes["min_occurs"] == 0
    assert mfl.attributes["max_occurs"] == 1

    openmrs_id = store.find_by_key(common.IDENTIFIER_OPENMRS_ID)
    assert openmrs_id.validation_rule["validator"] == "luhn_mod25"
    assert openmrs_id.attributes == {"location_behavior": "REQUIRED", "required": True}

    weights = [r.ordering for r in store.list_records(MetadataKind.PERSON_ATTRIBUTE_TYPE)]
    assert sorted(weights) == [1.0, 2.0, 3.0, 3.1, 3.2, 3.3]

    gp = store.find_by_key(common.GLOBAL_PROPERTY_DEFAULT_LOCATION)
    assert gp.name == common.GP_DEFAULT_LOCATION


def test_openmrs_id_rule_accepts_generated_identifiers():
    d = next(x for x in CommonMetadataProvider().descriptors() if x.key == common.IDENTIFIER_OPENMRS_ID)
    rule = compile_descriptor_rule(d)
    assert rule.matches(LuhnMod25Validator().get_valid_identifier("10000"))


def test_reference_only_keys_are_not_installed():
    keys = {d.key for d in CommonMetadataProvider().descriptors()}
    assert common.LOCATION_UNKNOWN not in keys
    assert common.ORDER_TYPE_DRUG not in keys
    assert common.PROVIDER_UNKNOWN not in keys
