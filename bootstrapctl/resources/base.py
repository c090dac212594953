"""The contract every reconciled resource fulfils."""
from typing import Protocol

from kubernetes import client

from ..context import ReconcileContext
from ..models import OperationResult, TenantControlPlane


class Resource(Protocol):
    def get_name(self) -> str: ...

    def get_client(self) -> client.ApiClient: ...

    def define(self, ctx: ReconcileContext, tcp: TenantControlPlane) -> None: ...

    def should_cleanup(self, tcp: TenantControlPlane) -> bool: ...

    def clean_up(self, ctx: ReconcileContext, tcp: TenantControlPlane) -> bool: ...

    def create_or_update(self, ctx: ReconcileContext, tcp: TenantControlPlane) -> OperationResult: ...

    def should_status_be_updated(self, ctx: ReconcileContext, tcp: TenantControlPlane) -> bool: ...

    def update_tenant_control_plane_status(self, ctx: ReconcileContext, tcp: TenantControlPlane) -> None: ...
