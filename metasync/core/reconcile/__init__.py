from .models import DescriptorFailure, Outcome, ReconcilePolicy, ReconcileResult
from .reconciler import MetadataReconciler

__all__ = [
    "MetadataReconciler",
    "ReconcilePolicy",
    "ReconcileResult",
    "DescriptorFailure",
    "Outcome",
]
