"""Demo environment state detection.

Used by ``status`` to tell the user what exists already and what to run
next, without changing anything.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..config import DemoConfig
from .argocd import PortForwardManager
from .kind import KindClusterManager
from .registration import HOST_CLUSTER, TARGET_CLUSTERS


class EnvironmentAction(Enum):
    """What the user should do given the detected state."""

    FRESH_SETUP = "fresh_setup"  # No demo clusters
    READY = "ready"  # Both demo clusters up
    PARTIAL = "partial"  # Only one demo cluster; clean up and set up again


@dataclass
class EnvironmentState:
    """Current state of the demo environment."""

    management_exists: bool = False
    workload_exists: bool = False
    poc_clusters: list[str] = field(default_factory=list)
    port_forward_running: bool = False
    port_forward_pid: int | None = None
    has_platform_repo: bool = False
    has_workload_kubeconfig: bool = False
    suggested_action: EnvironmentAction = EnvironmentAction.FRESH_SETUP


class EnvironmentStateDetector:
    """Detect which parts of the demo environment exist."""

    def __init__(
        self,
        config: DemoConfig,
        kind: KindClusterManager | None = None,
        port_forward: PortForwardManager | None = None,
    ):
        self.config = config
        self.kind = kind or KindClusterManager(config.work_dir)
        self.port_forward = port_forward or PortForwardManager(config.pid_file)

    def detect(self) -> EnvironmentState:
        """Detect current environment state.

        Returns:
            EnvironmentState with a suggested action.
        """
        clusters = self.kind.list_clusters()
        state = EnvironmentState(
            management_exists=self.config.management_cluster in clusters,
            workload_exists=self.config.workload_cluster in clusters,
            poc_clusters=[name for name in (HOST_CLUSTER, *TARGET_CLUSTERS) if name in clusters],
            has_platform_repo=(self.config.platform_repo / ".git").is_dir(),
            has_workload_kubeconfig=self.config.workload_kubeconfig.exists(),
        )

        if self.port_forward.is_running():
            state.port_forward_running = True
            state.port_forward_pid = self.port_forward.read_pid()

        if state.management_exists and state.workload_exists:
            state.suggested_action = EnvironmentAction.READY
        elif state.management_exists or state.workload_exists:
            state.suggested_action = EnvironmentAction.PARTIAL
        else:
            state.suggested_action = EnvironmentAction.FRESH_SETUP

        return state
