"""Crossplane installation: Helm chart, provider/function packages and ProviderConfigs."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from ..shared.logging import get_logger
from .helm import HelmClient
from .kubectl import Kubectl
from .manifests import (
    CROSSPLANE_NAMESPACE,
    build_function,
    build_provider,
    build_provider_config,
)

logger = get_logger(__name__)

CROSSPLANE_REPO_NAME = "crossplane-stable"
CROSSPLANE_REPO_URL = "https://charts.crossplane.io/stable"
CROSSPLANE_CHART = f"{CROSSPLANE_REPO_NAME}/crossplane"
CROSSPLANE_DEPLOYMENTS = ("crossplane", "crossplane-rbac-manager")

PROVIDER_KUBERNETES = "provider-kubernetes"
PROVIDER_HELM = "provider-helm"
FUNCTION_PATCH_AND_TRANSFORM = "function-patch-and-transform"


@dataclass
class PackageResult:
    """Outcome of installing a provider or function package."""

    name: str
    healthy: bool


class CrossplaneInstaller:
    """Install Crossplane and its packages into the current context."""

    def __init__(
        self,
        kubectl: Kubectl | None = None,
        helm: HelmClient | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        self.kubectl = kubectl or Kubectl()
        self.helm = helm or HelmClient()
        self.sleep = sleep or time.sleep

    def is_installed(self) -> bool:
        return self.kubectl.namespace_exists(CROSSPLANE_NAMESPACE)

    def install(self, version: str | None = None, tolerate_existing_repo: bool = False) -> None:
        """Add the chart repo and helm install Crossplane (waits for the release).

        Args:
            version: Chart version; the chart default when None.
            tolerate_existing_repo: Ignore a failing ``helm repo add``.
        """
        self.helm.repo_add(CROSSPLANE_REPO_NAME, CROSSPLANE_REPO_URL,
                           tolerate_existing=tolerate_existing_repo)
        self.helm.repo_update()
        self.helm.install(
            "crossplane",
            CROSSPLANE_CHART,
            namespace=CROSSPLANE_NAMESPACE,
            version=version,
        )

    def wait_ready(self, timeout_seconds: int = 300) -> None:
        for deployment in CROSSPLANE_DEPLOYMENTS:
            self.kubectl.wait_deployment_available(deployment, CROSSPLANE_NAMESPACE, timeout_seconds)

    def _install_package(
        self,
        manifest: dict,
        resource: str,
        settle_seconds: float,
        timeout_seconds: int,
        strict: bool,
    ) -> PackageResult:
        name = manifest["metadata"]["name"]
        self.kubectl.apply_manifest(manifest)
        logger.info("package applied", package=manifest["spec"]["package"])
        if settle_seconds:
            self.sleep(settle_seconds)
        healthy = self.kubectl.wait(
            f"{resource}/{name}",
            condition="Healthy",
            timeout_seconds=timeout_seconds,
            strict=strict,
        )
        return PackageResult(name=name, healthy=healthy)

    def install_provider(
        self,
        name: str,
        version: str,
        settle_seconds: float = 15,
        timeout_seconds: int = 300,
        strict: bool = True,
    ) -> PackageResult:
        """Apply a Provider and wait for it to report Healthy.

        Args:
            name: Provider name (package name under crossplane-contrib).
            version: Package tag.
            settle_seconds: Pause before waiting, while the package manager
                creates the provider revision.
            timeout_seconds: kubectl wait timeout.
            strict: Raise when the provider is not healthy in time.
        """
        return self._install_package(
            build_provider(name, version),
            "provider.pkg.crossplane.io",
            settle_seconds,
            timeout_seconds,
            strict,
        )

    def install_function(
        self,
        name: str,
        version: str,
        settle_seconds: float = 10,
        timeout_seconds: int = 300,
        strict: bool = False,
    ) -> PackageResult:
        """Apply a composition Function and wait for it to report Healthy."""
        return self._install_package(
            build_function(name, version),
            "function.pkg.crossplane.io",
            settle_seconds,
            timeout_seconds,
            strict,
        )

    def wait_provider_healthy(self, name: str, timeout_seconds: int = 60) -> bool:
        """Soft wait for an already-applied provider."""
        return self.kubectl.wait(
            f"provider.pkg.crossplane.io/{name}",
            condition="Healthy",
            timeout_seconds=timeout_seconds,
            strict=False,
        )

    def configure_provider_config(self, provider: str, name: str, secret_name: str) -> None:
        """Create one ProviderConfig ("kubernetes" or "helm") for a kubeconfig secret."""
        self.kubectl.apply_manifest(build_provider_config(provider, name, secret_name))

    def configure_provider_configs(self, name: str, secret_name: str) -> None:
        """Point both provider-kubernetes and provider-helm at a kubeconfig secret."""
        for provider in ("kubernetes", "helm"):
            self.configure_provider_config(provider, name, secret_name)
