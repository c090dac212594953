"""
bootstrapctl

Checksum-gated reconciliation of the kubeadm bootstrap phases of tenant
control planes: upload the kubeadm and kubelet configuration, issue
bootstrap tokens, and record in the tenant status which configuration was
last applied so unchanged passes do not rewrite it.
"""

from .context import ReconcileContext, background
from .exceptions import (
    BootstrapCtlError,
    ApplyError,
    ContextCancelled,
    EnrichmentError,
    PhaseError,
    StatusLookupError,
    UnknownPhaseError,
    UnsupportedPhaseError,
)
from .models import BootstrapToken, BootstrapTokenString, OperationResult, PhaseIdentity, TenantControlPlane

__all__ = [
    'ReconcileContext',
    'background',
    'BootstrapCtlError',
    'ApplyError',
    'ContextCancelled',
    'EnrichmentError',
    'PhaseError',
    'StatusLookupError',
    'UnknownPhaseError',
    'UnsupportedPhaseError',
    'BootstrapToken',
    'BootstrapTokenString',
    'OperationResult',
    'PhaseIdentity',
    'TenantControlPlane',
]

__version__ = "0.1.0"
