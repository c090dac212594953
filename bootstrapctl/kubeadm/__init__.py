"""kubeadm configuration generation and upload routines.

Every apply routine takes a tenant ``ApiClient`` and a :class:`Configuration`
and returns the rendered artifact (or ``None``), raising ``ApplyError`` when
the tenant API server rejects a write.
"""

from .configuration import Configuration, Parameters, render
from .uploadconfig import upload_kubeadm_config, upload_kubelet_config
from .bootstraptoken import bootstrap_token, token_secret

__all__ = [
    'Configuration',
    'Parameters',
    'render',
    'upload_kubeadm_config',
    'upload_kubelet_config',
    'bootstrap_token',
    'token_secret',
]
