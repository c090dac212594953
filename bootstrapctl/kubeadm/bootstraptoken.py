"""Issue bootstrap tokens on the tenant cluster.

Equivalent of ``kubeadm init phase bootstrap-token``: each token becomes a
``bootstrap.kubernetes.io/token`` Secret, the RBAC rules letting token holders
join are installed, and the public ``cluster-info`` ConfigMap is published.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from kubernetes import client
from kubernetes.client.rest import ApiException

from ..exceptions import ApplyError
from ..models import BootstrapToken
from ..utils.kube import create_or_replace
from .configuration import Configuration, render

logger = logging.getLogger("bootstrapctl.kubeadm.bootstraptoken")

KUBE_SYSTEM = 'kube-system'
KUBE_PUBLIC = 'kube-public'
SECRET_TYPE = 'bootstrap.kubernetes.io/token'
SECRET_PREFIX = 'bootstrap-token-'
CLUSTER_INFO = 'cluster-info'
CLUSTER_INFO_ROLE = 'kubeadm:bootstrap-signer-clusterinfo'
GET_NODES_ROLE = 'kubeadm:get-nodes'
RBAC_GROUP = 'rbac.authorization.k8s.io'
BOOTSTRAPPERS_GROUP = 'system:bootstrappers:kubeadm:default-node-token'
NODES_GROUP = 'system:nodes'

# (binding name, cluster role, subject group)
BOOTSTRAP_BINDINGS = (
    ('kubeadm:kubelet-bootstrap', 'system:node-bootstrapper', BOOTSTRAPPERS_GROUP),
    ('kubeadm:node-autoapprove-bootstrap',
     'system:certificates.k8s.io:certificatesigningrequests:nodeclient', BOOTSTRAPPERS_GROUP),
    ('kubeadm:node-autoapprove-certificate-rotation',
     'system:certificates.k8s.io:certificatesigningrequests:selfnodeclient', NODES_GROUP),
    (GET_NODES_ROLE, GET_NODES_ROLE, BOOTSTRAPPERS_GROUP),
)


def bootstrap_token(api_client: client.ApiClient, config: Configuration) -> None:
    """Create or update every bootstrap token of the configuration."""
    core = client.CoreV1Api(api_client)
    rbac = client.RbacAuthorizationV1Api(api_client)
    try:
        for token in config.bootstrap_tokens:
            secret = token_secret(token)
            create_or_replace(
                core.create_namespaced_secret,
                core.replace_namespaced_secret,
                name=secret.metadata.name,
                body=secret,
                namespace=KUBE_SYSTEM,
            )
            logger.info(f"Issued bootstrap token {token.token.id}")

        _install_bootstrap_rbac(rbac)
        _publish_cluster_info(core, rbac, config)
    except ApiException as e:
        raise ApplyError("issue bootstrap token", f"{e.status} {e.reason}") from e


def token_secret(token: BootstrapToken, now: Optional[datetime] = None) -> client.V1Secret:
    """Encode a bootstrap token as its Secret."""
    if token.token is None or not token.token.id or not token.token.secret:
        raise ValueError("bootstrap token must have both an id and a secret")

    data: Dict[str, str] = {
        'token-id': token.token.id,
        'token-secret': token.token.secret,
    }
    if token.description:
        data['description'] = token.description
    if token.ttl_seconds:
        now = now or datetime.now(timezone.utc)
        expiration = now + timedelta(seconds=token.ttl_seconds)
        data['expiration'] = expiration.strftime('%Y-%m-%dT%H:%M:%SZ')
    for usage in token.usages:
        data[f'usage-bootstrap-{usage}'] = 'true'
    if token.groups:
        data['auth-extra-groups'] = ','.join(token.groups)

    return client.V1Secret(
        metadata=client.V1ObjectMeta(name=f"{SECRET_PREFIX}{token.token.id}", namespace=KUBE_SYSTEM),
        type=SECRET_TYPE,
        string_data=data,
    )


def _install_bootstrap_rbac(rbac: client.RbacAuthorizationV1Api) -> None:
    get_nodes = client.V1ClusterRole(
        metadata=client.V1ObjectMeta(name=GET_NODES_ROLE),
        rules=[client.V1PolicyRule(api_groups=[''], resources=['nodes'], verbs=['get'])],
    )
    create_or_replace(rbac.create_cluster_role, rbac.replace_cluster_role, name=GET_NODES_ROLE, body=get_nodes)

    for name, role, group in BOOTSTRAP_BINDINGS:
        binding = client.V1ClusterRoleBinding(
            metadata=client.V1ObjectMeta(name=name),
            role_ref=client.V1RoleRef(api_group=RBAC_GROUP, kind='ClusterRole', name=role),
            subjects=[client.RbacV1Subject(kind='Group', name=group, api_group=RBAC_GROUP)],
        )
        create_or_replace(
            rbac.create_cluster_role_binding,
            rbac.replace_cluster_role_binding,
            name=name,
            body=binding,
        )


def _publish_cluster_info(
    core: client.CoreV1Api,
    rbac: client.RbacAuthorizationV1Api,
    config: Configuration,
) -> None:
    config_map = client.V1ConfigMap(
        metadata=client.V1ObjectMeta(name=CLUSTER_INFO, namespace=KUBE_PUBLIC),
        data={'kubeconfig': render(config.cluster_info_kubeconfig())},
    )
    create_or_replace(
        core.create_namespaced_config_map,
        core.replace_namespaced_config_map,
        name=CLUSTER_INFO,
        body=config_map,
        namespace=KUBE_PUBLIC,
    )

    role = client.V1Role(
        metadata=client.V1ObjectMeta(name=CLUSTER_INFO_ROLE, namespace=KUBE_PUBLIC),
        rules=[client.V1PolicyRule(
            api_groups=[''],
            resources=['configmaps'],
            resource_names=[CLUSTER_INFO],
            verbs=['get'],
        )],
    )
    binding = client.V1RoleBinding(
        metadata=client.V1ObjectMeta(name=CLUSTER_INFO_ROLE, namespace=KUBE_PUBLIC),
        role_ref=client.V1RoleRef(api_group=RBAC_GROUP, kind='Role', name=CLUSTER_INFO_ROLE),
        subjects=[client.RbacV1Subject(kind='User', name='system:anonymous', api_group=RBAC_GROUP)],
    )
    create_or_replace(
        rbac.create_namespaced_role,
        rbac.replace_namespaced_role,
        name=CLUSTER_INFO_ROLE,
        body=role,
        namespace=KUBE_PUBLIC,
    )
    create_or_replace(
        rbac.create_namespaced_role_binding,
        rbac.replace_namespaced_role_binding,
        name=CLUSTER_INFO_ROLE,
        body=binding,
        namespace=KUBE_PUBLIC,
    )
