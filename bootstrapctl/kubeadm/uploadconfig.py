"""Upload the kubeadm and kubelet configuration to the tenant cluster.

Both routines mirror ``kubeadm init phase upload-config``: the rendered
document is stored in a ConfigMap in ``kube-system`` together with a Role
and RoleBinding that let joining nodes read it.
"""
import logging
from typing import List, Optional

from kubernetes import client
from kubernetes.client.rest import ApiException

from ..exceptions import ApplyError
from ..utils.kube import create_or_replace
from .configuration import Configuration, render

logger = logging.getLogger("bootstrapctl.kubeadm.uploadconfig")

KUBE_SYSTEM = 'kube-system'
KUBEADM_CONFIG_MAP = 'kubeadm-config'
KUBEADM_CONFIG_KEY = 'ClusterConfiguration'
KUBELET_CONFIG_MAP = 'kubelet-config'
KUBELET_CONFIG_KEY = 'kubelet'
NODES_KUBEADM_CONFIG_ROLE = 'kubeadm:nodes-kubeadm-config'
KUBELET_CONFIG_ROLE = 'kubeadm:kubelet-config'
NODES_GROUP = 'system:nodes'
BOOTSTRAPPERS_GROUP = 'system:bootstrappers:kubeadm:default-node-token'


def upload_kubeadm_config(api_client: client.ApiClient, config: Configuration) -> Optional[bytes]:
    """Store the ClusterConfiguration in kube-system/kubeadm-config."""
    content = render(config.cluster_configuration())
    try:
        _upload(api_client, KUBEADM_CONFIG_MAP, KUBEADM_CONFIG_KEY, content)
        _allow_read(
            api_client,
            NODES_KUBEADM_CONFIG_ROLE,
            KUBEADM_CONFIG_MAP,
            [BOOTSTRAPPERS_GROUP, NODES_GROUP],
        )
    except ApiException as e:
        raise ApplyError("upload kubeadm configuration", f"{e.status} {e.reason}") from e
    logger.info(f"Uploaded {KUBE_SYSTEM}/{KUBEADM_CONFIG_MAP}")
    return content.encode()


def upload_kubelet_config(api_client: client.ApiClient, config: Configuration) -> Optional[bytes]:
    """Store the KubeletConfiguration in kube-system/kubelet-config."""
    content = render(config.kubelet_configuration())
    try:
        _upload(api_client, KUBELET_CONFIG_MAP, KUBELET_CONFIG_KEY, content)
        _allow_read(
            api_client,
            KUBELET_CONFIG_ROLE,
            KUBELET_CONFIG_MAP,
            [BOOTSTRAPPERS_GROUP, NODES_GROUP],
        )
    except ApiException as e:
        raise ApplyError("upload kubelet configuration", f"{e.status} {e.reason}") from e
    logger.info(f"Uploaded {KUBE_SYSTEM}/{KUBELET_CONFIG_MAP}")
    return content.encode()


def _upload(api_client: client.ApiClient, name: str, key: str, content: str) -> None:
    core = client.CoreV1Api(api_client)
    body = client.V1ConfigMap(
        metadata=client.V1ObjectMeta(name=name, namespace=KUBE_SYSTEM),
        data={key: content},
    )
    create_or_replace(
        core.create_namespaced_config_map,
        core.replace_namespaced_config_map,
        name=name,
        body=body,
        namespace=KUBE_SYSTEM,
    )


def _allow_read(api_client: client.ApiClient, role_name: str, config_map: str, groups: List[str]) -> None:
    rbac = client.RbacAuthorizationV1Api(api_client)
    role = client.V1Role(
        metadata=client.V1ObjectMeta(name=role_name, namespace=KUBE_SYSTEM),
        rules=[client.V1PolicyRule(
            api_groups=[''],
            resources=['configmaps'],
            resource_names=[config_map],
            verbs=['get'],
        )],
    )
    binding = client.V1RoleBinding(
        metadata=client.V1ObjectMeta(name=role_name, namespace=KUBE_SYSTEM),
        role_ref=client.V1RoleRef(api_group='rbac.authorization.k8s.io', kind='Role', name=role_name),
        subjects=[
            client.RbacV1Subject(kind='Group', name=group, api_group='rbac.authorization.k8s.io')
            for group in groups
        ],
    )
    create_or_replace(
        rbac.create_namespaced_role,
        rbac.replace_namespaced_role,
        name=role_name,
        body=role,
        namespace=KUBE_SYSTEM,
    )
    create_or_replace(
        rbac.create_namespaced_role_binding,
        rbac.replace_namespaced_role_binding,
        name=role_name,
        body=binding,
        namespace=KUBE_SYSTEM,
    )
