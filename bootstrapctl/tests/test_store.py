import copy
from unittest.mock import MagicMock, patch

import pytest
from kubernetes.client.rest import ApiException

from bootstrapctl.config import ControllerConfig
from bootstrapctl.exceptions import StatusConflictError, StoreError
from bootstrapctl.store import TenantControlPlaneStore


@pytest.fixture
def custom_objects():
    with patch("bootstrapctl.store.client.CustomObjectsApi") as api:
        yield api.return_value


@pytest.fixture
def store(custom_objects):
    return TenantControlPlaneStore.from_config(MagicMock(), ControllerConfig())


def test_get(store, custom_objects, manifest, ctx):
    custom_objects.get_namespaced_custom_object.return_value = manifest

    tcp = store.get(ctx, "tenant-00", "tenants")

    assert tcp.name == "tenant-00"
    kwargs = custom_objects.get_namespaced_custom_object.call_args.kwargs
    assert kwargs["group"] == "kamaji.clastix.io"
    assert kwargs["plural"] == "tenantcontrolplanes"


def test_get_missing(store, custom_objects, ctx):
    custom_objects.get_namespaced_custom_object.side_effect = ApiException(status=404, reason="Not Found")

    with pytest.raises(StoreError) as excinfo:
        store.get(ctx, "tenant-00", "tenants")
    assert excinfo.value.status == 404


def test_commit_status(store, custom_objects, tcp, manifest, ctx):
    tcp.status.kubeadm_phase.upload_config_kubeadm.set_checksum("abc123")
    custom_objects.replace_namespaced_custom_object_status.return_value = tcp.to_dict()

    stored = store.commit_status(ctx, tcp)

    body = custom_objects.replace_namespaced_custom_object_status.call_args.kwargs["body"]
    assert body["metadata"]["resourceVersion"] == "1"
    assert body["status"]["kubeadmPhase"]["uploadConfigKubeadm"]["checksum"] == "abc123"
    assert stored.status.kubeadm_phase.upload_config_kubeadm.checksum == "abc123"


def test_commit_status_retries_on_conflict(store, custom_objects, tcp, manifest, ctx):
    fresh = copy.deepcopy(manifest)
    fresh["metadata"]["resourceVersion"] = "2"
    custom_objects.get_namespaced_custom_object.return_value = fresh
    tcp.status.kubeadm_phase.bootstrap_token.set_checksum("abc123")
    custom_objects.replace_namespaced_custom_object_status.side_effect = [
        ApiException(status=409, reason="Conflict"),
        tcp.to_dict(),
    ]

    store.commit_status(ctx, tcp)

    calls = custom_objects.replace_namespaced_custom_object_status.call_args_list
    assert len(calls) == 2
    retried = calls[1].kwargs["body"]
    assert retried["metadata"]["resourceVersion"] == "2"
    assert retried["status"]["kubeadmPhase"]["bootstrapToken"]["checksum"] == "abc123"


def test_commit_status_gives_up(store, custom_objects, tcp, manifest, ctx):
    custom_objects.get_namespaced_custom_object.return_value = manifest
    custom_objects.replace_namespaced_custom_object_status.side_effect = ApiException(status=409, reason="Conflict")

    with pytest.raises(StatusConflictError):
        store.commit_status(ctx, tcp)
    assert custom_objects.replace_namespaced_custom_object_status.call_count == 3


def test_commit_status_other_errors(store, custom_objects, tcp, ctx):
    custom_objects.replace_namespaced_custom_object_status.side_effect = ApiException(status=422, reason="Invalid")

    with pytest.raises(StoreError) as excinfo:
        store.commit_status(ctx, tcp)
    assert excinfo.value.status == 422
    assert not isinstance(excinfo.value, StatusConflictError)
