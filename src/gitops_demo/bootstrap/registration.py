"""Register kind target clusters with Crossplane on the POC host cluster."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ..errors import PreconditionError
from ..shared.logging import get_logger
from ..shared.paths import DEFAULT_WORK_DIR, cluster_kubeconfig
from .crossplane import PROVIDER_HELM, PROVIDER_KUBERNETES, CrossplaneInstaller
from .kind import KindClusterManager, control_plane_container, kind_context, rewrite_kubeconfig_server
from .kubectl import Kubectl
from .manifests import CROSSPLANE_NAMESPACE, build_connectivity_object

logger = get_logger(__name__)

HOST_CLUSTER = "cluster1"
TARGET_CLUSTERS = ("cluster2", "cluster3")
CONNECTIVITY_OBJECT = "object.kubernetes.crossplane.io"
READY_CONDITION = '{.status.conditions[?(@.type=="Ready")].status}'


@dataclass
class TargetCluster:
    """Names derived from a target cluster."""

    name: str
    kubeconfig: Path
    server: str = ""

    @property
    def secret_name(self) -> str:
        return f"{self.name}-kubeconfig"

    @property
    def provider_config(self) -> str:
        return f"{self.name}-config"

    @property
    def test_object(self) -> str:
        return f"test-connectivity-{self.name}"

    @property
    def test_namespace(self) -> str:
        return f"crossplane-test-{self.name}"


class TargetRegistrar:
    """Give Crossplane on the host cluster credentials for each target cluster."""

    def __init__(
        self,
        kind: KindClusterManager | None = None,
        kubectl: Kubectl | None = None,
        host: str = HOST_CLUSTER,
        work_dir: Path = DEFAULT_WORK_DIR,
        sleep: Callable[[float], None] | None = None,
    ):
        self.kind = kind or KindClusterManager(work_dir)
        self.kubectl = kubectl or Kubectl()
        self.crossplane = CrossplaneInstaller(self.kubectl, sleep=sleep)
        self.host = host
        self.work_dir = work_dir
        self.sleep = sleep or time.sleep

    def target(self, name: str) -> TargetCluster:
        return TargetCluster(name=name, kubeconfig=cluster_kubeconfig(name, self.work_dir))

    def require_clusters(self, names: tuple[str, ...]) -> None:
        """Raise PreconditionError naming the first missing cluster."""
        existing = self.kind.list_clusters()
        for name in names:
            if name not in existing:
                raise PreconditionError(
                    message=f"{name} does not exist.",
                    hint="Run 'gitops-demo cluster-setup' first.",
                )

    def extract_kubeconfig(self, target: TargetCluster) -> TargetCluster:
        """Export the kubeconfig and point it at the control-plane container."""
        self.kind.export_kubeconfig(target.name, target.kubeconfig)
        target.server = rewrite_kubeconfig_server(target.kubeconfig, control_plane_container(target.name))
        return target

    def prepare_host(self) -> None:
        self.kubectl.use_context(kind_context(self.host))
        self.kubectl.ensure_namespace(CROSSPLANE_NAMESPACE)

    def create_secret(self, target: TargetCluster) -> None:
        self.kubectl.create_secret_from_file(
            target.secret_name, CROSSPLANE_NAMESPACE, "kubeconfig", target.kubeconfig
        )

    def wait_providers(self) -> dict[str, bool]:
        """Soft wait on both providers; False entries mean they may not be ready yet."""
        return {
            provider: self.crossplane.wait_provider_healthy(provider)
            for provider in (PROVIDER_KUBERNETES, PROVIDER_HELM)
        }

    def create_provider_configs(self, target: TargetCluster) -> None:
        self.crossplane.configure_provider_configs(target.provider_config, target.secret_name)

    def apply_connectivity_test(self, target: TargetCluster) -> None:
        self.kubectl.apply_manifest(
            build_connectivity_object(target.test_object, target.provider_config, target.test_namespace)
        )

    def connectivity_ready(self, target: TargetCluster) -> bool:
        status = self.kubectl.get_jsonpath(f"{CONNECTIVITY_OBJECT}/{target.test_object}", READY_CONDITION)
        return bool(status) and "True" in status

    def cleanup_connectivity_test(self, target: TargetCluster) -> None:
        """Remove the probe Object and the namespace it created on the target."""
        self.kubectl.delete(f"{CONNECTIVITY_OBJECT}/{target.test_object}")
        self.kubectl.use_context(kind_context(target.name))
        try:
            self.kubectl.delete(f"namespace/{target.test_namespace}", ignore_not_found=True)
        finally:
            self.kubectl.use_context(kind_context(self.host))

    def verify_connectivity(self, targets: list[TargetCluster], settle_seconds: float = 5) -> dict[str, bool]:
        """Apply a probe Object per target, wait, and report which became Ready.

        Ready probes are cleaned up; the others are left for inspection.
        """
        for target in targets:
            self.apply_connectivity_test(target)
        if settle_seconds:
            self.sleep(settle_seconds)

        results = {}
        for target in targets:
            ready = self.connectivity_ready(target)
            if ready:
                self.cleanup_connectivity_test(target)
            logger.info("connectivity check", cluster=target.name, ready=ready)
            results[target.name] = ready
        return results
