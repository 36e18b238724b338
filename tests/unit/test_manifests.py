"""Unit tests for manifest builders."""

import yaml

from gitops_demo.bootstrap.manifests import (
    ApplicationSpec,
    KindClusterConfig,
    build_application,
    build_connectivity_object,
    build_function,
    build_provider,
    build_provider_config,
    ignore_status,
    to_yaml,
    write_kind_config,
)


class TestPackages:
    """Tests for provider and function manifests."""

    def test_provider(self):
        """Test Provider package reference."""
        provider = build_provider("provider-kubernetes", "v0.14.1")
        assert provider["kind"] == "Provider"
        assert provider["spec"]["package"] == "xpkg.upbound.io/crossplane-contrib/provider-kubernetes:v0.14.1"

    def test_function(self):
        """Test Function uses the v1beta1 API."""
        function = build_function("function-patch-and-transform", "v0.6.0")
        assert function["apiVersion"] == "pkg.crossplane.io/v1beta1"
        assert function["metadata"]["name"] == "function-patch-and-transform"

    def test_provider_config_helm(self):
        """Test helm ProviderConfig API version and secret reference."""
        config = build_provider_config("helm", "workload-cluster", "workload-cluster-kubeconfig")
        assert config["apiVersion"] == "helm.crossplane.io/v1beta1"
        assert config["spec"]["credentials"]["secretRef"] == {
            "namespace": "crossplane-system",
            "name": "workload-cluster-kubeconfig",
            "key": "kubeconfig",
        }

    def test_connectivity_object(self):
        """Test the test Object wraps a namespace manifest."""
        obj = build_connectivity_object("test-connectivity-cluster2", "cluster2-config", "crossplane-test-cluster2")
        assert obj["spec"]["providerConfigRef"] == {"name": "cluster2-config"}
        assert obj["spec"]["forProvider"]["manifest"]["metadata"]["name"] == "crossplane-test-cluster2"


class TestApplication:
    """Tests for ArgoCD Application manifests."""

    def test_application_sync_policy(self):
        """Test wave annotation, directory filter and automated sync."""
        spec = ApplicationSpec(
            name="crossplane-xrds",
            repo_url="file:///tmp/platform-repo",
            path="manifests/crossplane",
            include="xrd-*.yaml",
            sync_wave=1,
        )
        app = build_application(spec)

        assert app["metadata"]["annotations"]["argocd.argoproj.io/sync-wave"] == "1"
        assert app["spec"]["source"]["directory"] == {"recurse": False, "include": "xrd-*.yaml"}
        assert app["spec"]["source"]["targetRevision"] == "HEAD"
        assert app["spec"]["syncPolicy"]["automated"]["selfHeal"] is True
        assert app["spec"]["syncPolicy"]["retry"]["limit"] == 5
        assert "ignoreDifferences" not in app["spec"]

    def test_application_ignore_differences(self):
        """Test ignoreDifferences is only set when given."""
        spec = ApplicationSpec(
            name="crossplane-clusters",
            repo_url="https://gitlab.com/demo/platform.git",
            path="manifests/crossplane/clusters",
            include="*.yaml",
            sync_wave=3,
            ignore_differences=[ignore_status("platform.io", "BootstrapStack")],
        )
        app = build_application(spec)
        assert app["spec"]["ignoreDifferences"] == [
            {"group": "platform.io", "kind": "BootstrapStack", "jsonPointers": ["/status"]}
        ]


class TestSerialization:
    """Tests for YAML output."""

    def test_to_yaml_multi_document(self):
        """Test a list renders as several documents."""
        text = to_yaml([{"a": 1}, {"b": 2}])
        assert list(yaml.safe_load_all(text)) == [{"a": 1}, {"b": 2}]

    def test_write_kind_config(self, tmp_path):
        """Test kind config file layout."""
        path = write_kind_config(
            KindClusterConfig(name="cluster2", roles=["control-plane", "worker"]),
            tmp_path / "kind" / "cluster2-config.yaml",
        )
        data = yaml.safe_load(path.read_text())
        assert data["apiVersion"] == "kind.x-k8s.io/v1alpha4"
        assert data["name"] == "cluster2"
        assert data["nodes"] == [{"role": "control-plane"}, {"role": "worker"}]
