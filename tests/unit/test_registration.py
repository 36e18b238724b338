"""Unit tests for target cluster registration."""

from unittest.mock import MagicMock, call, patch

import pytest

from gitops_demo.bootstrap.registration import TargetCluster, TargetRegistrar
from gitops_demo.errors import PreconditionError

from ..conftest import completed


def make_registrar(tmp_path, clusters=("cluster1", "cluster2", "cluster3")):
    kind = MagicMock()
    kind.list_clusters.return_value = list(clusters)
    kubectl = MagicMock()
    registrar = TargetRegistrar(kind=kind, kubectl=kubectl, work_dir=tmp_path, sleep=MagicMock())
    return registrar, kind, kubectl


class TestTargetCluster:
    """Tests for derived names."""

    def test_names(self, tmp_path):
        """Test secret, ProviderConfig and probe names."""
        target = TargetCluster("cluster2", tmp_path / "cluster2-kubeconfig.yaml")
        assert target.secret_name == "cluster2-kubeconfig"
        assert target.provider_config == "cluster2-config"
        assert target.test_object == "test-connectivity-cluster2"
        assert target.test_namespace == "crossplane-test-cluster2"


class TestTargetRegistrar:
    """Tests for TargetRegistrar."""

    def test_target_kubeconfig_in_work_dir(self, tmp_path):
        """Test extracted kubeconfigs live under the work dir."""
        registrar, _, _ = make_registrar(tmp_path)
        assert registrar.target("cluster3").kubeconfig == tmp_path / "cluster3-kubeconfig.yaml"

    def test_require_clusters(self, tmp_path):
        """Test the first missing cluster is named."""
        registrar, _, _ = make_registrar(tmp_path, clusters=("cluster1", "cluster2"))
        with pytest.raises(PreconditionError) as exc_info:
            registrar.require_clusters(("cluster1", "cluster2", "cluster3"))
        assert str(exc_info.value) == "cluster3 does not exist."
        assert "cluster-setup" in exc_info.value.hint

    def test_extract_kubeconfig_rewrites_server(self, tmp_path):
        """Test the kubeconfig points at the control-plane container."""
        kubeconfig = "clusters:\n- cluster:\n    server: https://127.0.0.1:40123\n"
        with patch("subprocess.run", return_value=completed(kubeconfig)):
            registrar = TargetRegistrar(kubectl=MagicMock(), work_dir=tmp_path, sleep=MagicMock())
            target = registrar.extract_kubeconfig(registrar.target("cluster2"))

        assert target.server == "https://cluster2-control-plane:6443"
        assert "https://cluster2-control-plane:6443" in target.kubeconfig.read_text()

    def test_prepare_host(self, tmp_path):
        """Test the host context is selected."""
        registrar, _, kubectl = make_registrar(tmp_path)
        registrar.prepare_host()
        kubectl.use_context.assert_called_once_with("kind-cluster1")
        kubectl.ensure_namespace.assert_called_once_with("crossplane-system")

    def test_create_secret(self, tmp_path):
        """Test the kubeconfig secret key."""
        registrar, _, kubectl = make_registrar(tmp_path)
        target = registrar.target("cluster2")
        registrar.create_secret(target)
        kubectl.create_secret_from_file.assert_called_once_with(
            "cluster2-kubeconfig", "crossplane-system", "kubeconfig", target.kubeconfig
        )

    def test_wait_providers(self, tmp_path):
        """Test provider waits are soft and reported per provider."""
        registrar, _, kubectl = make_registrar(tmp_path)
        kubectl.wait.side_effect = [True, False]
        assert registrar.wait_providers() == {"provider-kubernetes": True, "provider-helm": False}

    def test_verify_connectivity(self, tmp_path):
        """Test ready probes are cleaned up and failed ones kept."""
        registrar, _, kubectl = make_registrar(tmp_path)
        kubectl.get_jsonpath.side_effect = ["True", ""]
        targets = [registrar.target("cluster2"), registrar.target("cluster3")]

        results = registrar.verify_connectivity(targets, settle_seconds=5)

        assert results == {"cluster2": True, "cluster3": False}
        registrar.sleep.assert_called_once_with(5)
        assert kubectl.apply_manifest.call_count == 2
        kubectl.delete.assert_any_call("object.kubernetes.crossplane.io/test-connectivity-cluster2")
        kubectl.delete.assert_any_call("namespace/crossplane-test-cluster2", ignore_not_found=True)
        assert kubectl.delete.call_count == 2
        assert kubectl.use_context.call_args_list == [call("kind-cluster2"), call("kind-cluster1")]

    def test_cleanup_restores_host_context(self, tmp_path):
        """Test the host context comes back even if deletion blows up."""
        registrar, _, kubectl = make_registrar(tmp_path)
        kubectl.delete.side_effect = [True, RuntimeError("boom")]

        with pytest.raises(RuntimeError):
            registrar.cleanup_connectivity_test(registrar.target("cluster3"))

        assert kubectl.use_context.call_args_list[-1] == call("kind-cluster1")
