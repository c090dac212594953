"""Exception hierarchy for the bootstrapctl package."""
from typing import Any, Optional


class BootstrapCtlError(Exception):
    """Base class for all bootstrapctl errors."""
    # Partial reconcile report, set when a pass fails midway
    report: Optional[Any] = None


class ConfigurationError(BootstrapCtlError):
    """Raised when a tenant manifest or the controller config is invalid."""
    pass


class PhaseError(BootstrapCtlError):
    """Base class for errors raised while reconciling a kubeadm phase."""
    pass


class UnsupportedPhaseError(PhaseError):
    """Raised when no apply function is registered for a phase."""

    def __init__(self, phase: Any):
        self.phase = phase
        super().__init__(f"no available functionality for phase {_display(phase)}")


class StatusLookupError(PhaseError):
    """Raised when the persisted status of a phase cannot be found."""
    pass


class UnknownPhaseError(StatusLookupError):
    """Raised when a phase has no status field on the tenant control plane."""

    def __init__(self, phase: Any):
        self.phase = phase
        super().__init__(f"{_display(phase)} is not a right kubeadm phase")


class ApplyError(PhaseError):
    """Raised when a kubeadm routine fails against the tenant API server."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed: {reason}")


class EnrichmentError(PhaseError):
    """Raised when bootstrap token material cannot be generated securely."""
    pass


class StoreError(BootstrapCtlError):
    """Raised when the tenant control plane cannot be read or written."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class StatusConflictError(StoreError):
    """Raised when the status commit keeps losing the resourceVersion race."""
    pass


class ContextCancelled(Exception):
    """Raised when a reconciliation context is cancelled or its deadline passed."""

    def __init__(self, reason: str = "context canceled"):
        self.reason = reason
        super().__init__(reason)


def _display(phase: Any) -> str:
    return getattr(phase, "display_name", None) or str(phase)
