from unittest.mock import MagicMock

import pytest
from kubernetes.config.config_exception import ConfigException

from bootstrapctl import kubeadm
from bootstrapctl.context import ReconcileContext
from bootstrapctl.exceptions import ApplyError, ContextCancelled, StoreError
from bootstrapctl.models import OperationResult, PhaseIdentity, TenantControlPlane
from bootstrapctl.reconciler import Reconciler
from bootstrapctl.resources import dispatch, handle
from bootstrapctl.utils import kube


@pytest.fixture
def applied(monkeypatch):
    calls = []
    for phase in PhaseIdentity:
        monkeypatch.setitem(
            dispatch.PHASE_FUNCTIONS, phase,
            lambda client, config, phase=phase: calls.append(phase),
        )
    return calls


@pytest.fixture
def fresh_tcp(manifest):
    return TenantControlPlane.from_dict(manifest)


@pytest.fixture
def store(fresh_tcp):
    store = MagicMock()
    store.get.return_value = fresh_tcp
    return store


def test_first_pass_applies_every_phase_and_commits_once(ctx, store, fresh_tcp, phase_options, applied):
    report = Reconciler(MagicMock(), store=store, **phase_options).reconcile(ctx, "tenant-00", "tenants")

    assert applied == list(PhaseIdentity)
    assert [p.phase for p in report.phases] == [p.display_name for p in PhaseIdentity]
    assert all(p.result == OperationResult.CREATED for p in report.phases)
    assert all(p.status_updated for p in report.phases)
    assert report.committed
    store.commit_status.assert_called_once()
    assert fresh_tcp.status.kubeadm_phase.bootstrap_token.checksum


def test_second_pass_does_not_commit(ctx, store, fresh_tcp, phase_options, applied):
    reconciler = Reconciler(MagicMock(), store=store, **phase_options)
    reconciler.reconcile(ctx, "tenant-00", "tenants")
    store.commit_status.reset_mock()

    report = reconciler.reconcile(ctx, "tenant-00", "tenants")

    assert all(p.result == OperationResult.UNCHANGED for p in report.phases)
    assert not any(p.status_updated for p in report.phases)
    assert not report.committed
    store.commit_status.assert_not_called()
    assert len(applied) == 6


def test_selected_phases_only(ctx, store, phase_options, applied):
    report = Reconciler(MagicMock(), store=store, **phase_options).reconcile(
        ctx, "tenant-00", "tenants", phases=[PhaseIdentity.BOOTSTRAP_TOKEN],
    )

    assert applied == [PhaseIdentity.BOOTSTRAP_TOKEN]
    assert len(report.phases) == 1


def test_failure_stops_the_pass_but_keeps_earlier_statuses(ctx, store, fresh_tcp, phase_options, applied, monkeypatch):
    def fail(client, config):
        raise ApplyError("upload kubelet configuration", "500 boom")

    monkeypatch.setitem(dispatch.PHASE_FUNCTIONS, PhaseIdentity.UPLOAD_CONFIG_KUBELET, fail)

    with pytest.raises(ApplyError):
        Reconciler(MagicMock(), store=store, **phase_options).reconcile(ctx, "tenant-00", "tenants")

    phases = fresh_tcp.status.kubeadm_phase
    assert phases.upload_config_kubeadm.checksum
    assert phases.upload_config_kubelet.checksum == ""
    assert phases.bootstrap_token.checksum == ""
    assert applied == [PhaseIdentity.UPLOAD_CONFIG_KUBEADM]
    store.commit_status.assert_called_once()


def test_cancellation_skips_the_commit(store, phase_options, applied):
    ctx = ReconcileContext()
    ctx.cancel()

    with pytest.raises(ContextCancelled):
        Reconciler(MagicMock(), store=store, **phase_options).reconcile(ctx, "tenant-00", "tenants")

    assert applied == []
    store.commit_status.assert_not_called()


def test_report_serialisation(ctx, store, phase_options, applied):
    report = Reconciler(MagicMock(), store=store, **phase_options).reconcile(ctx, "tenant-00", "tenants")

    data = report.to_dict()
    assert data["succeeded"] is True
    assert data["phases"][0] == {
        "phase": "PhaseUploadConfigKubeadm",
        "result": "created",
        "statusUpdated": True,
        "error": None,
    }


def test_handle_cleans_up_instead_of_applying(ctx, tcp):
    resource = MagicMock()
    resource.should_cleanup.return_value = True
    resource.clean_up.return_value = True

    outcome = handle(ctx, resource, tcp)

    assert outcome.cleaned_up
    resource.create_or_update.assert_not_called()


def test_declared_bootstrap_token_is_reused_across_passes(ctx, manifest, phase_options, monkeypatch):
    manifest["spec"]["kubernetes"]["bootstrapTokens"] = [{"token": "abcdef.0123456789abcdef"}]
    store = MagicMock()
    store.get.return_value = TenantControlPlane.from_dict(manifest)
    issued = []
    monkeypatch.setattr(
        kubeadm, "bootstrap_token",
        lambda client, config: issued.extend(str(t.token) for t in config.bootstrap_tokens),
    )
    reconciler = Reconciler(MagicMock(), store=store, **phase_options)

    first = reconciler.reconcile(ctx, "tenant-00", "tenants", [PhaseIdentity.BOOTSTRAP_TOKEN])
    second = reconciler.reconcile(ctx, "tenant-00", "tenants", [PhaseIdentity.BOOTSTRAP_TOKEN])

    assert issued == ["abcdef.0123456789abcdef", "abcdef.0123456789abcdef"]
    assert first.phases[0].result == OperationResult.CREATED
    assert second.phases[0].result == OperationResult.UNCHANGED


def test_kubeconfig_failure_still_commits_earlier_statuses(ctx, store, fresh_tcp, phase_options, applied):
    loader = phase_options["kubeconfig_loader"]
    calls = []

    def flaky_loader(api_client, tenant):
        calls.append(tenant)
        if len(calls) == 2:
            raise StoreError("cannot read secret tenants/tenant-00-admin-kubeconfig: Forbidden")
        return loader(api_client, tenant)

    phase_options["kubeconfig_loader"] = flaky_loader

    with pytest.raises(StoreError) as excinfo:
        Reconciler(MagicMock(), store=store, **phase_options).reconcile(ctx, "tenant-00", "tenants")

    assert fresh_tcp.status.kubeadm_phase.upload_config_kubeadm.checksum
    assert fresh_tcp.status.kubeadm_phase.upload_config_kubelet.checksum == ""
    store.commit_status.assert_called_once()
    report = excinfo.value.report
    assert [p.result for p in report.phases] == [OperationResult.CREATED, OperationResult.ERROR]
    assert "Forbidden" in report.phases[1].error
    assert report.committed


def test_invalid_tenant_kubeconfig_is_a_store_error(monkeypatch):
    def broken(kubeconfig):
        raise ConfigException("Invalid kube-config file. No configuration found.")

    monkeypatch.setattr(kube.config, "new_client_from_config_dict", broken)

    with pytest.raises(StoreError, match="invalid tenant kubeconfig"):
        kube.tenant_api_client({})
