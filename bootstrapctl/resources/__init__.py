"""
Reconciled resources of a tenant control plane.
"""
from .base import Resource
from .dispatch import PHASE_FUNCTIONS, issue_bootstrap_token, resolve
from .handler import HandleResult, handle, kubeadm_phases, resource_name
from .kubeadm_phases import KubeadmPhase, kubeadm_phase_create
from .status import get_status, update_status
from .tokens import enrich_bootstrap_token, enrich_bootstrap_tokens, generate_token

__all__ = [
    'Resource',
    'KubeadmPhase',
    'kubeadm_phase_create',
    'PHASE_FUNCTIONS',
    'resolve',
    'issue_bootstrap_token',
    'get_status',
    'update_status',
    'enrich_bootstrap_token',
    'enrich_bootstrap_tokens',
    'generate_token',
    'HandleResult',
    'handle',
    'kubeadm_phases',
    'resource_name',
]
