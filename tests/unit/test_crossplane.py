"""Unit tests for Crossplane installation and the helm wrapper."""

from unittest.mock import MagicMock, patch

import pytest

from gitops_demo.bootstrap.crossplane import CrossplaneInstaller
from gitops_demo.bootstrap.helm import HelmClient
from gitops_demo.errors import CommandError

from ..conftest import completed


class TestHelmClient:
    """Tests for HelmClient."""

    def test_install_args(self):
        """Test install argv with version and wait."""
        with patch("subprocess.run", return_value=completed()) as mock_run:
            HelmClient().install("crossplane", "crossplane-stable/crossplane", "crossplane-system", version="1.17.0")
        assert mock_run.call_args[0][0] == [
            "helm", "install", "crossplane", "crossplane-stable/crossplane",
            "--namespace", "crossplane-system", "--create-namespace",
            "--version", "1.17.0", "--wait",
        ]

    def test_repo_add_tolerated(self):
        """Test an existing repo is not fatal when tolerated."""
        with patch("subprocess.run", return_value=completed(returncode=1, stderr="already exists")):
            assert HelmClient().repo_add("crossplane-stable", "https://x", tolerate_existing=True) is False

    def test_repo_add_strict(self):
        """Test repo add failures raise by default."""
        with patch("subprocess.run", return_value=completed(returncode=1)):
            with pytest.raises(CommandError):
                HelmClient().repo_add("crossplane-stable", "https://x")


class TestCrossplaneInstaller:
    """Tests for CrossplaneInstaller."""

    def test_install(self):
        """Test repo add, update and chart install."""
        helm = MagicMock()
        CrossplaneInstaller(kubectl=MagicMock(), helm=helm).install("1.17.0")

        helm.repo_add.assert_called_once_with(
            "crossplane-stable", "https://charts.crossplane.io/stable", tolerate_existing=False
        )
        helm.repo_update.assert_called_once()
        assert helm.install.call_args.kwargs["version"] == "1.17.0"

    def test_wait_ready(self):
        """Test both core deployments are awaited."""
        kubectl = MagicMock()
        CrossplaneInstaller(kubectl=kubectl, helm=MagicMock()).wait_ready()
        waited = [c.args[0] for c in kubectl.wait_deployment_available.call_args_list]
        assert waited == ["crossplane", "crossplane-rbac-manager"]

    def test_install_provider(self):
        """Test a provider is applied, settled and awaited."""
        kubectl = MagicMock()
        kubectl.wait.return_value = True
        sleep = MagicMock()

        result = CrossplaneInstaller(kubectl=kubectl, helm=MagicMock(), sleep=sleep).install_provider(
            "provider-kubernetes", "v0.14.1"
        )

        assert result.healthy is True
        assert result.name == "provider-kubernetes"
        sleep.assert_called_once_with(15)
        kubectl.wait.assert_called_once_with(
            "provider.pkg.crossplane.io/provider-kubernetes",
            condition="Healthy",
            timeout_seconds=300,
            strict=True,
        )

    def test_install_function_soft(self):
        """Test a function that never turns healthy is reported, not raised."""
        kubectl = MagicMock()
        kubectl.wait.return_value = False

        result = CrossplaneInstaller(kubectl=kubectl, helm=MagicMock(), sleep=MagicMock()).install_function(
            "function-patch-and-transform", "v0.6.0"
        )

        assert result.healthy is False
        assert kubectl.wait.call_args.kwargs["strict"] is False

    def test_no_settle(self):
        """Test settle_seconds=0 skips the pause."""
        sleep = MagicMock()
        CrossplaneInstaller(kubectl=MagicMock(), helm=MagicMock(), sleep=sleep).install_provider(
            "provider-helm", "v0.19.0", settle_seconds=0
        )
        sleep.assert_not_called()

    def test_provider_configs(self):
        """Test both provider kinds get a ProviderConfig."""
        kubectl = MagicMock()
        CrossplaneInstaller(kubectl=kubectl, helm=MagicMock()).configure_provider_configs(
            "workload-cluster", "workload-cluster-kubeconfig"
        )
        api_versions = [c.args[0]["apiVersion"] for c in kubectl.apply_manifest.call_args_list]
        assert api_versions == ["kubernetes.crossplane.io/v1alpha1", "helm.crossplane.io/v1beta1"]
