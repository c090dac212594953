"""Reconcile the kubeadm phases of one tenant control plane."""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from kubernetes import client

from .context import ReconcileContext
from .exceptions import BootstrapCtlError
from .models import KubeadmPhasesStatus, OperationResult
from .resources import handle, kubeadm_phases
from .store import TenantControlPlaneStore

logger = logging.getLogger("bootstrapctl.reconciler")


@dataclass
class PhaseResult:
    phase: str
    result: OperationResult
    status_updated: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'phase': self.phase,
            'result': self.result.value,
            'statusUpdated': self.status_updated,
            'error': self.error,
        }


@dataclass
class ReconcileReport:
    name: str
    namespace: str
    phases: List[PhaseResult] = field(default_factory=list)
    committed: bool = False

    @property
    def succeeded(self) -> bool:
        return all(p.result != OperationResult.ERROR for p in self.phases)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'namespace': self.namespace,
            'committed': self.committed,
            'succeeded': self.succeeded,
            'phases': [p.to_dict() for p in self.phases],
        }


class Reconciler:
    """Runs kubeadm phases in declaration order and commits the status once.

    The first failing phase stops the pass. Statuses already projected by
    the phases that succeeded before it are still committed, since each of
    them was written only after its own apply succeeded. The failure is then
    re-raised with the partial report attached as ``report``. A cancelled
    context aborts without committing.
    """

    def __init__(
        self,
        api_client: client.ApiClient,
        store: Optional[TenantControlPlaneStore] = None,
        **phase_options,
    ):
        self.api_client = api_client
        self.store = store or TenantControlPlaneStore.from_config(api_client)
        self.phase_options = phase_options

    def reconcile(
        self,
        ctx: ReconcileContext,
        name: str,
        namespace: str,
        phases: Optional[Iterable[Any]] = None,
    ) -> ReconcileReport:
        ctx = ctx.with_values(tenant=f"{namespace}/{name}")
        log = ctx.logger()
        report = ReconcileReport(name=name, namespace=namespace)

        tcp = self.store.get(ctx, name, namespace)
        dirty = False
        if tcp.status.kubeadm_phase is None:
            tcp.status.kubeadm_phase = KubeadmPhasesStatus()
            dirty = True

        failure: Optional[BootstrapCtlError] = None
        for resource in kubeadm_phases(self.api_client, phases, **self.phase_options):
            try:
                outcome = handle(ctx, resource, tcp)
            except BootstrapCtlError as e:
                log.error(f"{resource.phase_name} failed: {e}")
                report.phases.append(PhaseResult(resource.phase_name, OperationResult.ERROR, error=str(e)))
                failure = e
                break
            report.phases.append(PhaseResult(resource.phase_name, outcome.result, outcome.status_updated))
            dirty = dirty or outcome.status_updated

        if dirty:
            self.store.commit_status(ctx, tcp)
            report.committed = True
            log.info("status committed")

        if failure is not None:
            failure.report = report
            raise failure
        return report
