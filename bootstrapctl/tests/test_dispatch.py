from unittest.mock import MagicMock

import pytest

from bootstrapctl import kubeadm
from bootstrapctl.exceptions import UnsupportedPhaseError
from bootstrapctl.kubeadm import Configuration
from bootstrapctl.models import PhaseIdentity
from bootstrapctl.resources import dispatch


def test_every_phase_resolves():
    for phase in PhaseIdentity:
        assert callable(dispatch.resolve(phase))


def test_unknown_phase_is_unsupported():
    with pytest.raises(UnsupportedPhaseError) as excinfo:
        dispatch.resolve("PhaseAddonCoreDNS")

    assert "PhaseAddonCoreDNS" in str(excinfo.value)
    assert excinfo.value.phase == "PhaseAddonCoreDNS"


def test_unhashable_phase_is_unsupported():
    with pytest.raises(UnsupportedPhaseError):
        dispatch.resolve(["not", "a", "phase"])


def test_upload_phases_return_the_rendered_artifact(monkeypatch, tcp):
    config = Configuration.from_tenant_control_plane(tcp)
    monkeypatch.setattr(kubeadm, "upload_kubeadm_config", lambda client, cfg: b"cluster-configuration")
    monkeypatch.setattr(kubeadm, "upload_kubelet_config", lambda client, cfg: b"kubelet-configuration")

    kubeadm_fn = dispatch.resolve(PhaseIdentity.UPLOAD_CONFIG_KUBEADM)
    kubelet_fn = dispatch.resolve(PhaseIdentity.UPLOAD_CONFIG_KUBELET)

    assert kubeadm_fn(MagicMock(), config) == b"cluster-configuration"
    assert kubelet_fn(MagicMock(), config) == b"kubelet-configuration"


def test_bootstrap_token_phase_enriches_a_copy(monkeypatch, tcp):
    issued = []
    monkeypatch.setattr(kubeadm, "bootstrap_token", lambda client, cfg: issued.append(cfg))
    config = Configuration.from_tenant_control_plane(tcp)

    payload = dispatch.resolve(PhaseIdentity.BOOTSTRAP_TOKEN)(MagicMock(), config)

    assert payload is None
    assert len(issued) == 1
    assert len(issued[0].bootstrap_tokens) == 1
    assert issued[0].bootstrap_tokens[0].token.id
    assert issued[0].bootstrap_tokens[0].token.secret
    assert config.bootstrap_tokens == []


def test_bootstrap_token_phase_propagates_errors(monkeypatch, tcp):
    def fail(client, cfg):
        raise RuntimeError("tenant API unavailable")

    monkeypatch.setattr(kubeadm, "bootstrap_token", fail)

    with pytest.raises(RuntimeError, match="tenant API unavailable"):
        dispatch.issue_bootstrap_token(MagicMock(), Configuration.from_tenant_control_plane(tcp))
