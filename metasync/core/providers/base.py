from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from metasync.core.descriptors.models import MetadataRecordDescriptor
from metasync.core.reconcile.models import ReconcileResult
from metasync.core.reconcile.reconciler import MetadataReconciler


class MetadataProvider(ABC):
    name: str

    @abstractmethod
    def descriptors(self) -> List[MetadataRecordDescriptor]:
        """Declaration-ordered descriptors. Referenced records must come first."""

    def install(self, reconciler: MetadataReconciler) -> ReconcileResult:
        return reconciler.reconcile(self.descriptors())


class StaticMetadataProvider(MetadataProvider):
    """Provider over a fixed descriptor list (e.g. one loaded from a descriptor file)."""

    def __init__(self, name: str, descriptors: List[MetadataRecordDescriptor]):
        self.name = name
        self._descriptors = list(descriptors)

    def descriptors(self) -> List[MetadataRecordDescriptor]:
        return list(self._descriptors)
