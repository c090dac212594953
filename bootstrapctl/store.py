"""Read tenant control planes and commit their status."""
import logging
from typing import Optional

from kubernetes import client
from kubernetes.client.rest import ApiException

from .config import ControllerConfig, get_config
from .context import ReconcileContext
from .exceptions import ConfigurationError, StatusConflictError, StoreError
from .models import TenantControlPlane

logger = logging.getLogger("bootstrapctl.store")


class TenantControlPlaneStore:
    """Custom-object access for TenantControlPlane resources.

    Status commits are compare-and-write against ``resourceVersion``; on a
    conflict the object is re-read, the in-memory kubeadm phase status is
    carried over and the write is retried.
    """

    def __init__(
        self,
        api_client: client.ApiClient,
        group: str,
        version: str,
        plural: str,
        retries: int = 3,
    ):
        self.api = client.CustomObjectsApi(api_client)
        self.group = group
        self.version = version
        self.plural = plural
        self.retries = max(retries, 1)

    @classmethod
    def from_config(
        cls,
        api_client: client.ApiClient,
        config: Optional[ControllerConfig] = None,
    ) -> 'TenantControlPlaneStore':
        config = config or get_config()
        return cls(
            api_client,
            group=config.kubernetes.group,
            version=config.kubernetes.version,
            plural=config.kubernetes.plural,
            retries=config.reconcile.status_retries,
        )

    def get(self, ctx: ReconcileContext, name: str, namespace: str) -> TenantControlPlane:
        ctx.check()
        try:
            obj = self.api.get_namespaced_custom_object(
                group=self.group,
                version=self.version,
                namespace=namespace,
                plural=self.plural,
                name=name,
            )
        except ApiException as e:
            raise StoreError(
                f"cannot get TenantControlPlane {namespace}/{name}: {e.status} {e.reason}", status=e.status
            ) from e

        try:
            return TenantControlPlane.from_dict(obj)
        except ConfigurationError as e:
            raise StoreError(str(e)) from e

    def commit_status(self, ctx: ReconcileContext, tcp: TenantControlPlane) -> TenantControlPlane:
        """Persist the status of ``tcp``, returning the stored object."""
        current = tcp
        for attempt in range(1, self.retries + 1):
            ctx.check()
            try:
                obj = self.api.replace_namespaced_custom_object_status(
                    group=self.group,
                    version=self.version,
                    namespace=current.namespace,
                    plural=self.plural,
                    name=current.name,
                    body=current.to_dict(),
                )
                return TenantControlPlane.from_dict(obj)
            except ApiException as e:
                if e.status != 409:
                    raise StoreError(
                        f"cannot update status of {current.namespace}/{current.name}: {e.status} {e.reason}",
                        status=e.status,
                    ) from e
                logger.warning(
                    f"Attempt {attempt} to update {current.namespace}/{current.name} conflicted, re-reading"
                )

            fresh = self.get(ctx, current.name, current.namespace)
            fresh.status.kubeadm_phase = tcp.status.kubeadm_phase
            current = fresh

        raise StatusConflictError(
            f"status of {tcp.namespace}/{tcp.name} still conflicting after {self.retries} attempts"
        )
