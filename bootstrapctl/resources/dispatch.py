"""Resolve a kubeadm phase to the routine applying it."""
from typing import Any, Callable, Dict, Optional

from kubernetes import client

from .. import kubeadm
from ..exceptions import UnsupportedPhaseError
from ..models import PhaseIdentity
from .tokens import enrich_bootstrap_tokens

ApplyFunction = Callable[[client.ApiClient, kubeadm.Configuration], Optional[bytes]]


def issue_bootstrap_token(api_client: client.ApiClient, config: kubeadm.Configuration) -> Optional[bytes]:
    """Enrich the configured tokens, then issue them.

    The caller's configuration is left untouched; the enriched tokens only
    live in the copy handed to the kubeadm routine.
    """
    enriched = config.with_bootstrap_tokens(enrich_bootstrap_tokens(config.bootstrap_tokens))
    kubeadm.bootstrap_token(api_client, enriched)
    return None


def _upload_kubeadm_config(api_client: client.ApiClient, config: kubeadm.Configuration) -> Optional[bytes]:
    return kubeadm.upload_kubeadm_config(api_client, config)


def _upload_kubelet_config(api_client: client.ApiClient, config: kubeadm.Configuration) -> Optional[bytes]:
    return kubeadm.upload_kubelet_config(api_client, config)


PHASE_FUNCTIONS: Dict[PhaseIdentity, ApplyFunction] = {
    PhaseIdentity.UPLOAD_CONFIG_KUBEADM: _upload_kubeadm_config,
    PhaseIdentity.UPLOAD_CONFIG_KUBELET: _upload_kubelet_config,
    PhaseIdentity.BOOTSTRAP_TOKEN: issue_bootstrap_token,
}

_missing = [p.display_name for p in PhaseIdentity if p not in PHASE_FUNCTIONS]
if _missing:
    raise RuntimeError(f"kubeadm phases without an apply function: {', '.join(_missing)}")


def resolve(phase: Any) -> ApplyFunction:
    """Return the apply function of ``phase``.

    Raises:
        UnsupportedPhaseError: If ``phase`` is not a known kubeadm phase
    """
    try:
        return PHASE_FUNCTIONS[phase]
    except (KeyError, TypeError):
        raise UnsupportedPhaseError(phase) from None
