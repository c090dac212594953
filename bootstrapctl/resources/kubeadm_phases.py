"""kubeadm phases reconciled against a tenant control plane.

A :class:`KubeadmPhase` is built for every reconciliation pass. It applies
its phase unconditionally, remembers the checksum of the configuration it
applied, and reports whether that checksum differs from the one persisted in
the tenant status so the caller only writes the status when it changed.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict

from kubernetes import client

from ..config import get_config
from ..context import ReconcileContext
from ..exceptions import StatusLookupError
from ..kubeadm import Configuration
from ..models import OperationResult, TenantControlPlane
from ..utils.kube import get_tenant_kubeconfig, tenant_api_client
from .dispatch import ApplyFunction, resolve
from .status import get_status, update_status

logger = logging.getLogger("bootstrapctl.resources.kubeadm_phases")

KubeconfigLoader = Callable[[client.ApiClient, TenantControlPlane], Dict[str, Any]]
ClientFactory = Callable[[Dict[str, Any]], client.ApiClient]


def load_tenant_kubeconfig(api_client: client.ApiClient, tcp: TenantControlPlane) -> Dict[str, Any]:
    return get_tenant_kubeconfig(api_client, tcp, key=get_config().kubernetes.admin_kubeconfig_key)


@dataclass
class KubeadmPhase:
    client: client.ApiClient
    name: str
    phase: Any
    kubeconfig_loader: KubeconfigLoader = load_tenant_kubeconfig
    tenant_client_factory: ClientFactory = tenant_api_client
    checksum: str = field(default='', init=False)

    @property
    def phase_name(self) -> str:
        return getattr(self.phase, 'display_name', None) or str(self.phase)

    def get_name(self) -> str:
        return self.name

    def get_client(self) -> client.ApiClient:
        return self.client

    def get_tmp_directory(self) -> str:
        return ""

    def set_kubeadm_config_checksum(self, checksum: str) -> None:
        self.checksum = checksum

    def is_status_equal(self, tcp: TenantControlPlane) -> bool:
        """Compare the applied checksum with the persisted one.

        An unreadable status counts as equal so that an uninitialised status
        block does not trigger a write.
        """
        try:
            status = get_status(self.phase, tcp)
        except StatusLookupError as e:
            logger.warning(f"cannot read status of {self.phase_name} for {self.name}: {e}")
            return True
        return status.checksum == self.checksum

    def should_status_be_updated(self, ctx: ReconcileContext, tcp: TenantControlPlane) -> bool:
        ctx.check()
        return not self.is_status_equal(tcp)

    def should_cleanup(self, tcp: TenantControlPlane) -> bool:
        return False

    def clean_up(self, ctx: ReconcileContext, tcp: TenantControlPlane) -> bool:
        return False

    def define(self, ctx: ReconcileContext, tcp: TenantControlPlane) -> None:
        return None

    def get_kubeadm_function(self) -> ApplyFunction:
        return resolve(self.phase)

    def update_tenant_control_plane_status(self, ctx: ReconcileContext, tcp: TenantControlPlane) -> None:
        ctx.check()
        log = ctx.logger(resource=self.get_name(), phase=self.phase_name)

        try:
            update_status(self.phase, tcp, self.checksum)
        except StatusLookupError as e:
            log.error(f"unable to update the status: {e}")
            raise

    def create_or_update(self, ctx: ReconcileContext, tcp: TenantControlPlane) -> OperationResult:
        ctx.check()
        log = ctx.logger(resource=self.get_name(), phase=self.phase_name)

        return kubeadm_phase_create(ctx, self, log, tcp)


def kubeadm_phase_create(
    ctx: ReconcileContext,
    resource: KubeadmPhase,
    log: logging.LoggerAdapter,
    tcp: TenantControlPlane,
) -> OperationResult:
    """Apply a kubeadm phase and record the checksum it was applied with.

    Errors from dispatch and from the apply function propagate unchanged and
    leave both the handle and the persisted status as they were.
    """
    fun = resource.get_kubeadm_function()

    kubeconfig = resource.kubeconfig_loader(resource.get_client(), tcp)
    config = Configuration.from_tenant_control_plane(tcp, kubeconfig)
    checksum = config.checksum()

    try:
        previous = get_status(resource.phase, tcp).checksum
    except StatusLookupError as e:
        log.debug(f"no persisted checksum, treating as never applied: {e}")
        previous = ''

    tenant_client = resource.tenant_client_factory(kubeconfig)
    try:
        ctx.check()
        log.debug("applying kubeadm phase")
        fun(tenant_client, config)
    finally:
        tenant_client.close()

    resource.set_kubeadm_config_checksum(checksum)

    if not previous:
        result = OperationResult.CREATED
    elif previous == checksum:
        result = OperationResult.UNCHANGED
    else:
        result = OperationResult.UPDATED
    log.info(f"kubeadm phase {result.value}")
    return result
