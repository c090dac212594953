import copy
import logging
from unittest.mock import MagicMock

import pytest

from bootstrapctl.config import ControllerConfig, set_config
from bootstrapctl.context import background
from bootstrapctl.models import KubeadmPhasesStatus, TenantControlPlane
from bootstrapctl.resources import KubeadmPhase

TENANT_KUBECONFIG = {
    "apiVersion": "v1",
    "kind": "Config",
    "clusters": [{
        "name": "tenant-00",
        "cluster": {
            "server": "https://10.0.0.100:6443",
            "certificate-authority-data": "Q0EtREFUQQ==",
        },
    }],
}

MANIFEST = {
    "apiVersion": "kamaji.clastix.io/v1alpha1",
    "kind": "TenantControlPlane",
    "metadata": {"name": "tenant-00", "namespace": "tenants", "resourceVersion": "1"},
    "spec": {
        "kubernetes": {"version": "v1.27.3", "kubelet": {"cgroupfs": "systemd"}},
        "networkProfile": {
            "address": "10.0.0.100",
            "port": 6443,
            "serviceCidr": "10.96.0.0/16",
            "podCidr": "10.244.0.0/16",
            "dnsServiceIPs": ["10.96.0.10"],
            "certSANs": ["tenant-00.example.com"],
        },
    },
    "status": {
        "kubeconfig": {"admin": {"secretName": "tenant-00-admin-kubeconfig"}},
    },
}


@pytest.fixture(autouse=True)
def isolated_config():
    """Every test starts from default configuration and clean log handlers."""
    set_config(ControllerConfig())
    yield
    set_config(None)
    package_logger = logging.getLogger("bootstrapctl")
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)


@pytest.fixture
def manifest():
    return copy.deepcopy(MANIFEST)


@pytest.fixture
def tcp(manifest):
    tenant = TenantControlPlane.from_dict(manifest)
    tenant.status.kubeadm_phase = KubeadmPhasesStatus()
    return tenant


@pytest.fixture
def ctx():
    return background()


@pytest.fixture
def tenant_client():
    return MagicMock(name="tenant-client")


@pytest.fixture
def phase_options(tenant_client):
    return {
        "kubeconfig_loader": lambda api_client, tenant: TENANT_KUBECONFIG,
        "tenant_client_factory": lambda kubeconfig: tenant_client,
    }


@pytest.fixture
def make_phase(phase_options):
    def _make(phase, name="test-phase"):
        return KubeadmPhase(client=MagicMock(name="management-client"), name=name, phase=phase, **phase_options)
    return _make
