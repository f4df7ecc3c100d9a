import pytest

from metasync.core.descriptors import builders as b
from metasync.core.observability.audit import close_audit_handlers
from metasync.core.observability.metrics import reset_metrics
from metasync.core.store.memory import InMemoryMetadataStore


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # Make config resolution deterministic regardless of the caller's shell
    for name in (
        "METASYNC_RECONCILE_POLICY",
        "METASYNC_STORE_PATH",
        "METASYNC_AUDIT_ENABLED",
        "METASYNC_AUDIT_PATH",
        "METASYNC_HALT_ON_FAILURE",
        "METASYNC_DESCRIPTOR_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_metrics()
    yield
    close_audit_handlers()


@pytest.fixture()
def store():
    return InMemoryMetadataStore()


@pytest.fixture()
def consultation():
    return b.encounter_type("Consultation", "Collection of clinical data during the main consultation", "A")
