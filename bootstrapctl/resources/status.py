"""Map kubeadm phases to their persisted status on the tenant control plane."""
from typing import Any, Dict

from ..exceptions import StatusLookupError, UnknownPhaseError
from ..models import KubeadmPhaseStatus, PhaseIdentity, TenantControlPlane

# PhaseIdentity -> attribute of TenantControlPlaneStatus.kubeadm_phase
STATUS_FIELDS: Dict[PhaseIdentity, str] = {
    PhaseIdentity.UPLOAD_CONFIG_KUBEADM: 'upload_config_kubeadm',
    PhaseIdentity.UPLOAD_CONFIG_KUBELET: 'upload_config_kubelet',
    PhaseIdentity.BOOTSTRAP_TOKEN: 'bootstrap_token',
}

_missing = [p.display_name for p in PhaseIdentity if p not in STATUS_FIELDS]
if _missing:
    raise RuntimeError(f"kubeadm phases without a status field: {', '.join(_missing)}")


def get_status(phase: Any, tcp: TenantControlPlane) -> KubeadmPhaseStatus:
    """Return the status record of ``phase``.

    Raises:
        UnknownPhaseError: If the phase has no status field
        StatusLookupError: If the tenant status block is not initialised
    """
    try:
        attribute = STATUS_FIELDS[phase]
    except (KeyError, TypeError):
        raise UnknownPhaseError(phase) from None

    phases = tcp.status.kubeadm_phase if tcp.status is not None else None
    if phases is None:
        raise StatusLookupError(
            f"TenantControlPlane {tcp.namespace}/{tcp.name} has no kubeadm phase status"
        )

    status = getattr(phases, attribute, None)
    if status is None:
        raise StatusLookupError(
            f"TenantControlPlane {tcp.namespace}/{tcp.name} has no status for {phase}"
        )
    return status


def update_status(phase: Any, tcp: TenantControlPlane, checksum: str) -> KubeadmPhaseStatus:
    """Overwrite the stored checksum of ``phase`` in memory."""
    status = get_status(phase, tcp)
    status.set_checksum(checksum)
    return status
