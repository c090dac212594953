import base64
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from ..exceptions import StoreError

logger = logging.getLogger("bootstrapctl.kube")


def load_api_client(path: Optional[str] = None, context: Optional[str] = None) -> client.ApiClient:
    """
    Build an ApiClient for the management cluster.

    Tries KUBECONFIG_CONTENT (CI/CD secret), then the given path, then the
    in-cluster service account.
    """
    if "KUBECONFIG_CONTENT" in os.environ:
        kubeconfig = yaml.safe_load(os.environ["KUBECONFIG_CONTENT"])
        return config.new_client_from_config_dict(kubeconfig, context=context)

    if path:
        resolved = Path(os.path.expanduser(path)).resolve()
        if not resolved.exists():
            raise FileNotFoundError(f"Kubeconfig not found: {resolved}")
        return config.new_client_from_config(config_file=str(resolved), context=context)

    config.load_incluster_config()
    return client.ApiClient()


def get_tenant_kubeconfig(api_client: client.ApiClient, tcp, key: str = "admin.conf") -> Dict[str, Any]:
    """Read the admin kubeconfig of a tenant control plane from its Secret."""
    secret_name = tcp.status.admin_kubeconfig_secret
    if not secret_name:
        raise StoreError(f"TenantControlPlane {tcp.namespace}/{tcp.name} has no admin kubeconfig yet")

    core = client.CoreV1Api(api_client)
    try:
        secret = core.read_namespaced_secret(name=secret_name, namespace=tcp.namespace)
    except ApiException as e:
        raise StoreError(f"cannot read secret {tcp.namespace}/{secret_name}: {e.reason}") from e

    data = (secret.data or {}).get(key)
    if not data:
        raise StoreError(f"secret {tcp.namespace}/{secret_name} has no {key} key")
    return yaml.safe_load(base64.b64decode(data))


def tenant_api_client(kubeconfig: Dict[str, Any]) -> client.ApiClient:
    """Build an ApiClient talking to the tenant API server."""
    try:
        return config.new_client_from_config_dict(kubeconfig)
    except ConfigException as e:
        raise StoreError(f"invalid tenant kubeconfig: {e}") from e


def create_or_replace(
    create: Callable[..., Any],
    replace: Callable[..., Any],
    name: str,
    body: Any,
    namespace: Optional[str] = None,
) -> Any:
    """Create an object, replacing it when it already exists."""
    scope = {"namespace": namespace} if namespace else {}
    try:
        return create(body=body, **scope)
    except ApiException as e:
        if e.status != 409:
            raise
    logger.debug(f"{namespace + '/' if namespace else ''}{name} exists, replacing")
    return replace(name=name, body=body, **scope)
