"""Drive a single resource through its reconciliation contract."""
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from kubernetes import client

from ..context import ReconcileContext
from ..models import OperationResult, PhaseIdentity, TenantControlPlane
from .base import Resource
from .kubeadm_phases import KubeadmPhase


@dataclass
class HandleResult:
    result: OperationResult
    status_updated: bool = False
    cleaned_up: bool = False


def handle(ctx: ReconcileContext, resource: Resource, tcp: TenantControlPlane) -> HandleResult:
    """Clean up, or define, create-or-update and project the status."""
    ctx.check()
    if resource.should_cleanup(tcp):
        cleaned = resource.clean_up(ctx, tcp)
        return HandleResult(result=OperationResult.UNCHANGED, cleaned_up=cleaned)

    resource.define(ctx, tcp)
    result = resource.create_or_update(ctx, tcp)

    updated = False
    if resource.should_status_be_updated(ctx, tcp):
        resource.update_tenant_control_plane_status(ctx, tcp)
        updated = True
    return HandleResult(result=result, status_updated=updated)


def kubeadm_phases(
    api_client: client.ApiClient,
    phases: Optional[Iterable[Any]] = None,
    **kwargs,
) -> List[KubeadmPhase]:
    """Fresh phase handles in declaration order."""
    selected = list(phases) if phases is not None else list(PhaseIdentity)
    return [
        KubeadmPhase(client=api_client, name=resource_name(phase), phase=phase, **kwargs)
        for phase in selected
    ]


def resource_name(phase: Any) -> str:
    names = {
        PhaseIdentity.UPLOAD_CONFIG_KUBEADM: 'upload-config-kubeadm',
        PhaseIdentity.UPLOAD_CONFIG_KUBELET: 'upload-config-kubelet',
        PhaseIdentity.BOOTSTRAP_TOKEN: 'bootstrap-token',
    }
    return names.get(phase, str(phase))
