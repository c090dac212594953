from typing import Iterator

from kubernetes import client

from bootstrapctl.config import get_config
from bootstrapctl.utils.kube import load_api_client


def get_api_client() -> Iterator[client.ApiClient]:
    config = get_config()
    api_client = load_api_client(config.kubernetes.kubeconfig, config.kubernetes.context)
    try:
        yield api_client
    finally:
        api_client.close()
