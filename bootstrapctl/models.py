"""
Data models for tenant control planes and kubeadm phases.
"""
import copy
import ipaddress
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from jsonschema import Draft7Validator

from .exceptions import ConfigurationError

DEFAULT_TOKEN_GROUP = "system:bootstrappers:kubeadm:default-node-token"
DEFAULT_TOKEN_USAGES = ("signing", "authentication")
DEFAULT_TOKEN_TTL_SECONDS = 24 * 60 * 60


class PhaseIdentity(str, Enum):
    """kubeadm phases driven against a tenant control plane."""
    UPLOAD_CONFIG_KUBEADM = 'PhaseUploadConfigKubeadm'
    UPLOAD_CONFIG_KUBELET = 'PhaseUploadConfigKubelet'
    BOOTSTRAP_TOKEN = 'PhaseBootstrapToken'

    @property
    def display_name(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


class OperationResult(str, Enum):
    """Outcome of a single create-or-update pass."""
    UNCHANGED = 'unchanged'
    CREATED = 'created'
    UPDATED = 'updated'
    ERROR = 'error'


@dataclass(frozen=True)
class BootstrapTokenString:
    """A bootstrap token split into its public id and private secret."""
    id: str = ''
    secret: str = ''

    def __str__(self) -> str:
        return f"{self.id}.{self.secret}"


@dataclass
class BootstrapToken:
    """A bootstrap token as declared in the kubeadm InitConfiguration."""
    token: Optional[BootstrapTokenString] = None
    description: str = ''
    ttl_seconds: Optional[int] = DEFAULT_TOKEN_TTL_SECONDS
    usages: List[str] = field(default_factory=lambda: list(DEFAULT_TOKEN_USAGES))
    groups: List[str] = field(default_factory=lambda: [DEFAULT_TOKEN_GROUP])

    def to_dict(self) -> Dict[str, Any]:
        return {
            'token': str(self.token) if self.token else '',
            'description': self.description,
            'ttlSeconds': self.ttl_seconds,
            'usages': list(self.usages),
            'groups': list(self.groups),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BootstrapToken':
        """Parse a declared token; ``token`` is ``<id>.<secret>`` when present."""
        token = None
        if data.get('token'):
            token_id, _, secret = data['token'].partition('.')
            token = BootstrapTokenString(id=token_id, secret=secret)
        return cls(
            token=token,
            description=data.get('description', ''),
            ttl_seconds=data.get('ttlSeconds', DEFAULT_TOKEN_TTL_SECONDS),
            usages=list(data.get('usages') or DEFAULT_TOKEN_USAGES),
            groups=list(data.get('groups') or [DEFAULT_TOKEN_GROUP]),
        )


@dataclass
class KubeadmPhaseStatus:
    """Checksum of the last configuration successfully applied by a phase."""
    checksum: str = ''
    last_update: Optional[str] = None

    def set_checksum(self, checksum: str) -> None:
        self.checksum = checksum
        self.last_update = datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'checksum': self.checksum}
        if self.last_update:
            data['lastUpdate'] = self.last_update
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'KubeadmPhaseStatus':
        data = data or {}
        return cls(checksum=data.get('checksum') or '', last_update=data.get('lastUpdate'))


@dataclass
class KubeadmPhasesStatus:
    upload_config_kubeadm: KubeadmPhaseStatus = field(default_factory=KubeadmPhaseStatus)
    upload_config_kubelet: KubeadmPhaseStatus = field(default_factory=KubeadmPhaseStatus)
    bootstrap_token: KubeadmPhaseStatus = field(default_factory=KubeadmPhaseStatus)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'uploadConfigKubeadm': self.upload_config_kubeadm.to_dict(),
            'uploadConfigKubelet': self.upload_config_kubelet.to_dict(),
            'bootstrapToken': self.bootstrap_token.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'KubeadmPhasesStatus':
        data = data or {}
        return cls(
            upload_config_kubeadm=KubeadmPhaseStatus.from_dict(data.get('uploadConfigKubeadm')),
            upload_config_kubelet=KubeadmPhaseStatus.from_dict(data.get('uploadConfigKubelet')),
            bootstrap_token=KubeadmPhaseStatus.from_dict(data.get('bootstrapToken')),
        )


@dataclass
class NetworkProfile:
    address: str
    port: int = 6443
    service_cidr: str = '10.96.0.0/16'
    pod_cidr: str = '10.244.0.0/16'
    dns_service_ips: List[str] = field(default_factory=lambda: ['10.96.0.10'])
    cert_sans: List[str] = field(default_factory=list)


@dataclass
class TenantControlPlaneSpec:
    version: str
    network: NetworkProfile
    cgroup_driver: str = 'systemd'
    bootstrap_tokens: List[BootstrapToken] = field(default_factory=list)


@dataclass
class TenantControlPlaneStatus:
    # None until the controller has initialised the status block
    kubeadm_phase: Optional[KubeadmPhasesStatus] = None
    admin_kubeconfig_secret: Optional[str] = None


@dataclass
class TenantControlPlane:
    """The owning resource whose status holds the per-phase checksums."""
    name: str
    namespace: str
    spec: TenantControlPlaneSpec
    status: TenantControlPlaneStatus = field(default_factory=TenantControlPlaneStatus)
    resource_version: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> 'TenantControlPlane':
        """Build a tenant control plane from its custom-resource dict."""
        validate_manifest(obj)
        metadata = obj['metadata']
        spec = obj['spec']
        network = spec['networkProfile']
        status = obj.get('status') or {}

        kubeconfig = (status.get('kubeconfig') or {}).get('admin') or {}
        phases = status.get('kubeadmPhase')

        return cls(
            name=metadata['name'],
            namespace=metadata.get('namespace', 'default'),
            spec=TenantControlPlaneSpec(
                version=spec['kubernetes']['version'],
                cgroup_driver=(spec['kubernetes'].get('kubelet') or {}).get('cgroupfs', 'systemd'),
                bootstrap_tokens=[
                    BootstrapToken.from_dict(t) for t in spec['kubernetes'].get('bootstrapTokens') or []
                ],
                network=NetworkProfile(
                    address=network['address'],
                    port=int(network.get('port', 6443)),
                    service_cidr=network.get('serviceCidr', '10.96.0.0/16'),
                    pod_cidr=network.get('podCidr', '10.244.0.0/16'),
                    dns_service_ips=list(network.get('dnsServiceIPs') or ['10.96.0.10']),
                    cert_sans=list(network.get('certSANs') or []),
                ),
            ),
            status=TenantControlPlaneStatus(
                kubeadm_phase=KubeadmPhasesStatus.from_dict(phases) if phases is not None else None,
                admin_kubeconfig_secret=kubeconfig.get('secretName'),
            ),
            resource_version=metadata.get('resourceVersion'),
            raw=copy.deepcopy(obj),
        )

    def status_dict(self) -> Dict[str, Any]:
        """The status block with the in-memory phase checksums merged in."""
        status = copy.deepcopy(self.raw.get('status') or {})
        if self.status.kubeadm_phase is not None:
            status['kubeadmPhase'] = self.status.kubeadm_phase.to_dict()
        return status

    def to_dict(self) -> Dict[str, Any]:
        obj = copy.deepcopy(self.raw)
        obj.setdefault('metadata', {})
        obj['metadata']['name'] = self.name
        obj['metadata']['namespace'] = self.namespace
        if self.resource_version:
            obj['metadata']['resourceVersion'] = self.resource_version
        obj['status'] = self.status_dict()
        return obj


TENANT_CONTROL_PLANE_SCHEMA = {
    "type": "object",
    "properties": {
        "metadata": {
            "type": "object",
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "namespace": {"type": "string"},
            },
            "required": ["name"],
        },
        "spec": {
            "type": "object",
            "properties": {
                "kubernetes": {
                    "type": "object",
                    "properties": {
                        "version": {"type": "string", "pattern": "^v?[0-9]+\\.[0-9]+\\.[0-9]+"},
                        "kubelet": {
                            "type": "object",
                            "properties": {"cgroupfs": {"enum": ["systemd", "cgroupfs"]}},
                        },
                        "bootstrapTokens": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "token": {"type": "string", "pattern": "^[a-z0-9]{6}\\.[a-z0-9]{16}$"},
                                    "description": {"type": "string"},
                                    "ttlSeconds": {"type": ["integer", "null"], "minimum": 0},
                                    "usages": {"type": "array", "items": {"type": "string"}},
                                    "groups": {"type": "array", "items": {"type": "string"}},
                                },
                            },
                        },
                    },
                    "required": ["version"],
                },
                "networkProfile": {
                    "type": "object",
                    "properties": {
                        "address": {"type": "string", "minLength": 1},
                        "port": {"type": "integer", "minimum": 1, "maximum": 65535},
                        "serviceCidr": {"type": "string"},
                        "podCidr": {"type": "string"},
                        "dnsServiceIPs": {"type": "array", "items": {"type": "string"}},
                        "certSANs": {"type": "array", "items": {"type": "string"}},
                    },
                    "required": ["address"],
                },
            },
            "required": ["kubernetes", "networkProfile"],
        },
        "status": {"type": ["object", "null"]},
    },
    "required": ["metadata", "spec"],
}

_validator = Draft7Validator(TENANT_CONTROL_PLANE_SCHEMA)


def validate_manifest(obj: Dict[str, Any]) -> None:
    """Validate a tenant control plane dict, raising ConfigurationError."""
    errors = sorted(_validator.iter_errors(obj), key=lambda e: list(e.path))
    if errors:
        details = "; ".join(
            f"{'.'.join(str(p) for p in e.path) or '<root>'}: {e.message}" for e in errors
        )
        raise ConfigurationError(f"Invalid TenantControlPlane: {details}")


def network_problems(tcp: TenantControlPlane) -> List[str]:
    """Semantic checks of the network profile the schema cannot express."""
    problems = []
    network = tcp.spec.network
    try:
        service = ipaddress.ip_network(network.service_cidr)
    except ValueError as e:
        return [f"invalid serviceCidr: {e}"]
    try:
        pods = ipaddress.ip_network(network.pod_cidr)
    except ValueError as e:
        return [f"invalid podCidr: {e}"]

    if service.version == pods.version and service.overlaps(pods):
        problems.append(f"serviceCidr {service} overlaps podCidr {pods}")
    for ip in network.dns_service_ips:
        try:
            if ipaddress.ip_address(ip) not in service:
                problems.append(f"DNS service IP {ip} is outside serviceCidr {service}")
        except ValueError:
            problems.append(f"invalid DNS service IP: {ip}")
    return problems
