import re
from unittest.mock import MagicMock

from typer.testing import CliRunner

from bootstrapctl.cli import app
from bootstrapctl.commands import reconcile
from bootstrapctl.exceptions import ApplyError
from bootstrapctl.models import OperationResult
from bootstrapctl.reconciler import PhaseResult, ReconcileReport
from bootstrapctl.resources import handler

runner = CliRunner()


def run_cli_command(cmd):
    return runner.invoke(app, cmd.split())


def test_help():
    result = run_cli_command("--help")
    assert "Usage" in result.stdout


def test_reconcile_help():
    result = run_cli_command("reconcile tenant --help")
    assert "--name" in result.stdout
    assert "--phase" in result.stdout


def test_phases_list(monkeypatch):
    monkeypatch.setattr(handler, "KubeadmPhase", MagicMock(side_effect=AssertionError("no handles needed")))

    result = run_cli_command("phases list")
    assert result.exit_code == 0
    assert "PhaseUploadConfigKubeadm" in result.stdout
    assert "bootstrap-token" in result.stdout


def test_token_generate():
    result = run_cli_command("token generate")
    assert result.exit_code == 0
    assert re.match(r"^[a-z0-9]{6}\.[a-z0-9]{16}$", result.stdout.strip())


def test_config_show_redacts_api_key():
    result = run_cli_command("config show")
    assert result.exit_code == 0
    assert "[REDACTED]" in result.stdout
    assert "bootstrapctl-secret" not in result.stdout


class FakeReconciler:
    error = None

    def __init__(self, api_client):
        self.api_client = api_client

    def reconcile(self, ctx, name, namespace, phases=None):
        if self.error:
            raise self.error
        self.phases = phases
        return ReconcileReport(
            name=name,
            namespace=namespace,
            phases=[PhaseResult("PhaseBootstrapToken", OperationResult.CREATED, True)],
            committed=True,
        )


def test_reconcile_tenant(monkeypatch):
    monkeypatch.setattr(reconcile, "load_api_client", lambda *args: MagicMock())
    monkeypatch.setattr(reconcile, "Reconciler", FakeReconciler)

    result = run_cli_command("reconcile tenant --name tenant-00 --namespace tenants --phase bootstrap-token")

    assert result.exit_code == 0
    assert "PhaseBootstrapToken: created" in result.stdout
    assert "Status committed" in result.stdout


def test_reconcile_tenant_failure(monkeypatch):
    class Failing(FakeReconciler):
        error = ApplyError("issue bootstrap token", "403 Forbidden")

    monkeypatch.setattr(reconcile, "load_api_client", lambda *args: MagicMock())
    monkeypatch.setattr(reconcile, "Reconciler", Failing)

    result = run_cli_command("reconcile tenant --name tenant-00")

    assert result.exit_code == 1
    assert "403 Forbidden" in result.stdout


def test_reconcile_unknown_phase(monkeypatch):
    monkeypatch.setattr(reconcile, "load_api_client", lambda *args: MagicMock())

    result = run_cli_command("reconcile tenant --name tenant-00 --phase addon-coredns")

    assert result.exit_code != 0


def test_reconcile_tenant_failure_prints_partial_report(monkeypatch):
    error = ApplyError("upload kubelet configuration", "500 boom")
    error.report = ReconcileReport(
        name="tenant-00",
        namespace="default",
        phases=[
            PhaseResult("PhaseUploadConfigKubeadm", OperationResult.CREATED, True),
            PhaseResult("PhaseUploadConfigKubelet", OperationResult.ERROR, error=str(error)),
        ],
        committed=True,
    )

    class Failing(FakeReconciler):
        pass

    Failing.error = error
    monkeypatch.setattr(reconcile, "load_api_client", lambda *args: MagicMock())
    monkeypatch.setattr(reconcile, "Reconciler", Failing)

    result = run_cli_command("reconcile tenant --name tenant-00")

    assert result.exit_code == 1
    assert "PhaseUploadConfigKubeadm: created" in result.stdout
    assert "PhaseUploadConfigKubelet: error" in result.stdout
    assert "Status committed" in result.stdout
