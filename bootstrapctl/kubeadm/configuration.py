"""kubeadm configuration generation.

A :class:`Configuration` is derived from a tenant control plane's spec and
renders the documents uploaded by the kubeadm phases. Its checksum is the
fingerprint stored in the tenant status once a phase has been applied.
"""
import hashlib
import json
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Optional

import yaml

from ..models import BootstrapToken, TenantControlPlane

KUBEADM_API_VERSION = 'kubeadm.k8s.io/v1beta3'
KUBELET_API_VERSION = 'kubelet.config.k8s.io/v1beta1'


@dataclass
class Parameters:
    """Tenant-specific values fed into the kubeadm documents."""
    tenant_control_plane_name: str
    tenant_control_plane_address: str
    tenant_control_plane_port: int
    tenant_control_plane_version: str
    tenant_control_plane_service_cidr: str
    tenant_control_plane_pod_cidr: str
    tenant_dns_service_ips: List[str] = field(default_factory=list)
    tenant_control_plane_cert_sans: List[str] = field(default_factory=list)
    tenant_control_plane_cgroup_driver: str = 'systemd'
    dns_domain: str = 'cluster.local'
    image_repository: str = 'registry.k8s.io'


@dataclass
class Configuration:
    parameters: Parameters
    bootstrap_tokens: List[BootstrapToken] = field(default_factory=list)
    # Admin kubeconfig of the tenant; not part of the checksum
    kubeconfig: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_tenant_control_plane(
        cls,
        tcp: TenantControlPlane,
        kubeconfig: Optional[Dict[str, Any]] = None,
    ) -> 'Configuration':
        spec = tcp.spec
        version = spec.version if spec.version.startswith('v') else f"v{spec.version}"
        return cls(
            parameters=Parameters(
                tenant_control_plane_name=tcp.name,
                tenant_control_plane_address=spec.network.address,
                tenant_control_plane_port=spec.network.port,
                tenant_control_plane_version=version,
                tenant_control_plane_service_cidr=spec.network.service_cidr,
                tenant_control_plane_pod_cidr=spec.network.pod_cidr,
                tenant_dns_service_ips=list(spec.network.dns_service_ips),
                tenant_control_plane_cert_sans=list(spec.network.cert_sans),
                tenant_control_plane_cgroup_driver=spec.cgroup_driver,
            ),
            bootstrap_tokens=list(spec.bootstrap_tokens),
            kubeconfig=kubeconfig or {},
        )

    def with_bootstrap_tokens(self, tokens: List[BootstrapToken]) -> 'Configuration':
        return replace(self, bootstrap_tokens=list(tokens))

    @property
    def control_plane_endpoint(self) -> str:
        p = self.parameters
        return f"{p.tenant_control_plane_address}:{p.tenant_control_plane_port}"

    def checksum(self) -> str:
        """SHA-256 over the canonical JSON form of the configuration."""
        payload = {
            'parameters': asdict(self.parameters),
            'bootstrapTokens': [t.to_dict() for t in self.bootstrap_tokens],
        }
        encoded = json.dumps(payload, sort_keys=True, separators=(',', ':')).encode()
        return hashlib.sha256(encoded).hexdigest()

    def cluster_configuration(self) -> Dict[str, Any]:
        p = self.parameters
        return {
            'apiVersion': KUBEADM_API_VERSION,
            'kind': 'ClusterConfiguration',
            'clusterName': p.tenant_control_plane_name,
            'kubernetesVersion': p.tenant_control_plane_version,
            'controlPlaneEndpoint': self.control_plane_endpoint,
            'imageRepository': p.image_repository,
            'certificatesDir': '/etc/kubernetes/pki',
            'networking': {
                'dnsDomain': p.dns_domain,
                'serviceSubnet': p.tenant_control_plane_service_cidr,
                'podSubnet': p.tenant_control_plane_pod_cidr,
            },
            'apiServer': {
                'certSANs': [p.tenant_control_plane_address] + p.tenant_control_plane_cert_sans,
            },
        }

    def kubelet_configuration(self) -> Dict[str, Any]:
        p = self.parameters
        return {
            'apiVersion': KUBELET_API_VERSION,
            'kind': 'KubeletConfiguration',
            'cgroupDriver': p.tenant_control_plane_cgroup_driver,
            'clusterDNS': list(p.tenant_dns_service_ips),
            'clusterDomain': p.dns_domain,
            'rotateCertificates': True,
            'staticPodPath': '/etc/kubernetes/manifests',
            'authentication': {
                'anonymous': {'enabled': False},
                'webhook': {'enabled': True, 'cacheTTL': '0s'},
                'x509': {'clientCAFile': '/etc/kubernetes/pki/ca.crt'},
            },
            'authorization': {'mode': 'Webhook'},
        }

    def cluster_info_kubeconfig(self) -> Dict[str, Any]:
        """Public kubeconfig published in kube-public/cluster-info."""
        ca_data = ''
        for entry in self.kubeconfig.get('clusters') or []:
            ca_data = (entry.get('cluster') or {}).get('certificate-authority-data', '')
            if ca_data:
                break
        return {
            'apiVersion': 'v1',
            'kind': 'Config',
            'clusters': [{
                'name': '',
                'cluster': {
                    'server': f"https://{self.control_plane_endpoint}",
                    'certificate-authority-data': ca_data,
                },
            }],
            'contexts': [],
            'users': [],
            'preferences': {},
        }


def render(document: Dict[str, Any]) -> str:
    return yaml.safe_dump(document, default_flow_style=False, sort_keys=False)
