"""Unit tests for kind cluster management."""

from unittest.mock import patch

import pytest

from gitops_demo.bootstrap.kind import (
    DockerNetworkInspector,
    KindClusterManager,
    kind_context,
    rewrite_kubeconfig_server,
)
from gitops_demo.bootstrap.manifests import KindClusterConfig
from gitops_demo.errors import CommandError

from ..conftest import completed

KUBECONFIG = """\
apiVersion: v1
clusters:
- cluster:
    server: https://127.0.0.1:38211
  name: kind-workload
"""


class TestKindClusterManager:
    """Tests for KindClusterManager."""

    def test_list_clusters(self, tmp_path):
        """Test cluster names are parsed line by line."""
        with patch("subprocess.run", return_value=completed("management\nworkload\n")):
            assert KindClusterManager(tmp_path).list_clusters() == ["management", "workload"]

    def test_list_clusters_failure(self, tmp_path):
        """Test kind errors mean no clusters."""
        with patch("subprocess.run", return_value=completed(returncode=1)):
            assert KindClusterManager(tmp_path).list_clusters() == []

    def test_exists(self, tmp_path):
        """Test exact name match."""
        with patch("subprocess.run", return_value=completed("management\n")):
            manager = KindClusterManager(tmp_path)
            assert manager.exists("management") is True
            assert manager.exists("manage") is False

    def test_create_by_name(self, tmp_path):
        """Test a plain single-node cluster."""
        with patch("subprocess.run", return_value=completed()) as mock_run:
            KindClusterManager(tmp_path).create("management")
        assert mock_run.call_args[0][0] == ["kind", "create", "cluster", "--name", "management"]

    def test_create_from_config(self, tmp_path):
        """Test a multi-node cluster writes a config file first."""
        with patch("subprocess.run", return_value=completed()) as mock_run:
            KindClusterManager(tmp_path).create(
                "cluster2", KindClusterConfig(name="cluster2", roles=["control-plane", "worker"])
            )
        config_path = tmp_path / "cluster2-config.yaml"
        assert config_path.exists()
        assert mock_run.call_args[0][0] == ["kind", "create", "cluster", "--config", str(config_path)]

    def test_create_failure(self, tmp_path):
        """Test a kind failure raises CommandError."""
        with patch("subprocess.run", return_value=completed(returncode=1, stderr="node exists")):
            with pytest.raises(CommandError) as exc_info:
                KindClusterManager(tmp_path).create("workload")
        assert "Failed to create cluster workload" in str(exc_info.value)

    def test_export_kubeconfig(self, tmp_path):
        """Test the kubeconfig is written to the target path."""
        path = tmp_path / "sub" / "workload-kubeconfig.yaml"
        with patch("subprocess.run", return_value=completed(KUBECONFIG)):
            KindClusterManager(tmp_path).export_kubeconfig("workload", path)
        assert path.read_text() == KUBECONFIG


class TestKubeconfigRewrite:
    """Tests for the in-network server rewrite."""

    def test_rewrite(self, tmp_path):
        """Test the host-mapped address is replaced."""
        path = tmp_path / "kc.yaml"
        path.write_text(KUBECONFIG)

        server = rewrite_kubeconfig_server(path, "workload-control-plane")

        assert server == "https://workload-control-plane:6443"
        assert "server: https://workload-control-plane:6443" in path.read_text()
        assert "127.0.0.1" not in path.read_text()

    def test_kind_context(self):
        """Test context naming."""
        assert kind_context("cluster2") == "kind-cluster2"


class TestDockerNetworkInspector:
    """Tests for DockerNetworkInspector."""

    def test_container_ip(self):
        """Test the IP is stripped."""
        with patch("subprocess.run", return_value=completed("172.18.0.3\n")):
            assert DockerNetworkInspector().container_ip("cluster1-control-plane") == "172.18.0.3"

    def test_container_missing(self):
        """Test an unknown container returns None."""
        with patch("subprocess.run", return_value=completed(returncode=1)):
            assert DockerNetworkInspector().network_name("cluster9-control-plane") is None
