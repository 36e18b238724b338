"""Tear down the demo environment."""

from __future__ import annotations

import shutil
from collections.abc import Callable
from dataclasses import dataclass, field

from ..config import DemoConfig
from ..shared.logging import get_logger
from .argocd import PortForwardManager
from .kind import KindClusterManager
from .registration import HOST_CLUSTER, TARGET_CLUSTERS

logger = get_logger(__name__)


@dataclass
class CleanupReport:
    """What cleanup removed and what it did not find."""

    port_forward_stopped: bool = False
    deleted_clusters: list[str] = field(default_factory=list)
    missing_clusters: list[str] = field(default_factory=list)
    removed_paths: list[str] = field(default_factory=list)


class EnvironmentCleaner:
    """Stop the port-forward, delete the kind clusters and remove scratch files."""

    def __init__(
        self,
        config: DemoConfig,
        kind: KindClusterManager | None = None,
        port_forward: PortForwardManager | None = None,
    ):
        self.config = config
        self.kind = kind or KindClusterManager(config.work_dir)
        self.port_forward = port_forward or PortForwardManager(config.pid_file)

    def clusters(self, include_poc: bool = False) -> list[str]:
        names = [self.config.management_cluster, self.config.workload_cluster]
        if include_poc:
            names.extend([HOST_CLUSTER, *TARGET_CLUSTERS])
        return names

    def stop_port_forward(self) -> bool:
        if not self.config.pid_file.exists():
            return False
        return self.port_forward.stop()

    def delete_cluster(self, name: str, existing: list[str]) -> bool:
        if name not in existing:
            return False
        self.kind.delete(name)
        return True

    def remove_scratch_files(self) -> list[str]:
        removed = []
        if self.config.platform_repo.is_dir():
            shutil.rmtree(self.config.platform_repo)
            removed.append(str(self.config.platform_repo))
        if self.config.workload_kubeconfig.exists():
            self.config.workload_kubeconfig.unlink()
            removed.append(str(self.config.workload_kubeconfig))
        return removed

    def run(
        self,
        include_poc: bool = False,
        on_cluster: Callable[[str, bool], None] | None = None,
    ) -> CleanupReport:
        """Remove everything the demo created.

        Args:
            include_poc: Also delete the three-cluster POC clusters.
            on_cluster: Called with (name, deleted) after each cluster.

        Returns:
            CleanupReport of what was done.
        """
        report = CleanupReport()
        report.port_forward_stopped = self.stop_port_forward()

        existing = self.kind.list_clusters()
        for name in self.clusters(include_poc):
            deleted = self.delete_cluster(name, existing)
            (report.deleted_clusters if deleted else report.missing_clusters).append(name)
            if on_cluster:
                on_cluster(name, deleted)

        report.removed_paths = self.remove_scratch_files()
        logger.info(
            "cleanup finished",
            deleted=report.deleted_clusters,
            missing=report.missing_clusters,
        )
        return report
