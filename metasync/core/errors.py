from __future__ import annotations

from typing import Any, Optional


class MetasyncError(Exception):
    pass


class DescriptorError(MetasyncError):
    """Failure scoped to a single descriptor. Collected, never raised out of reconcile()."""

    code = "descriptor.failed"

    def __init__(self, message: str, *, key: Optional[str] = None, kind: Optional[str] = None):
        self.key = key
        self.kind = kind
        super().__init__(message)


class InvalidRule(DescriptorError):
    code = "rule.invalid"


class IdentityConflict(DescriptorError):
    code = "identity.conflict"

    def __init__(
        self,
        message: str,
        *,
        key: Optional[str] = None,
        kind: Optional[str] = None,
        existing_kind: Optional[str] = None,
    ):
        self.existing_kind = existing_kind
        super().__init__(message, key=key, kind=kind)


class UnresolvedReference(DescriptorError):
    code = "reference.unresolved"


class StoreUnavailable(MetasyncError):
    """The target store cannot be reached. Aborts the remaining batch."""

    def __init__(self, message: str, *, partial: Any = None):
        # partial: ReconcileResult accumulated before the failure (set by the reconciler)
        self.partial = partial
        super().__init__(message)


class InstallFailed(MetasyncError):
    def __init__(self, *, result: Any, failed: int):
        self.result = result
        self.failed = int(failed)
        super().__init__(f"metadata install finished with {failed} failed descriptor(s)")
