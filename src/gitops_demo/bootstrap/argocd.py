"""ArgoCD installation, cluster registration and UI port-forward."""

from __future__ import annotations

import os
import signal
from pathlib import Path

from ..errors import CommandError
from ..shared.logging import get_logger
from .kubectl import Kubectl
from .manifests import ARGOCD_NAMESPACE
from .runner import run_command

logger = get_logger(__name__)

ARGOCD_DEPLOYMENTS = (
    "argocd-server",
    "argocd-repo-server",
    "argocd-applicationset-controller",
)
ADMIN_SECRET = "argocd-initial-admin-secret"
ARGOCD_SERVER_SERVICE = "argocd-server"


class ArgoCDInstaller:
    """Install ArgoCD from the upstream manifest."""

    def __init__(self, kubectl: Kubectl | None = None):
        self.kubectl = kubectl or Kubectl()

    def install(self, manifest_url: str) -> None:
        self.kubectl.ensure_namespace(ARGOCD_NAMESPACE)
        self.kubectl.apply_url(manifest_url, namespace=ARGOCD_NAMESPACE)

    def wait_ready(self, timeout_seconds: int = 300) -> None:
        for deployment in ARGOCD_DEPLOYMENTS:
            self.kubectl.wait_deployment_available(deployment, ARGOCD_NAMESPACE, timeout_seconds)

    def admin_password(self) -> str | None:
        """Initial admin password, or None when the secret is gone."""
        return self.kubectl.get_secret_value(ADMIN_SECRET, ARGOCD_NAMESPACE, "password")

    def register_cluster(self, context: str, kubeconfig: Path, name: str) -> bool:
        """Register a cluster with ``argocd cluster add``.

        Returns:
            False when registration failed and needs to be done by hand.
        """
        try:
            run_command(
                [
                    "argocd",
                    "cluster",
                    "add",
                    context,
                    "--kubeconfig",
                    str(kubeconfig),
                    "--name",
                    name,
                    "--yes",
                    "--grpc-web",
                    "--insecure",
                ],
                error_message="ArgoCD cluster registration failed",
            )
        except CommandError as e:
            logger.info("argocd cluster add failed", cluster=name, error=str(e))
            return False
        return True


def pid_alive(pid: int) -> bool:
    """Check whether a process exists (signal 0)."""
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists but owned by someone else
        return True
    return True


class PortForwardManager:
    """Background kubectl port-forward tracked through a PID file."""

    def __init__(self, pid_file: Path, kubectl: Kubectl | None = None):
        self.pid_file = pid_file
        self.kubectl = kubectl or Kubectl()

    def read_pid(self) -> int | None:
        try:
            return int(self.pid_file.read_text().strip())
        except (OSError, ValueError):
            return None

    def is_running(self) -> bool:
        pid = self.read_pid()
        return pid is not None and pid_alive(pid)

    def start(
        self,
        local_port: int = 8080,
        remote_port: int = 443,
        namespace: str = ARGOCD_NAMESPACE,
        service: str = ARGOCD_SERVER_SERVICE,
        address: str | None = "0.0.0.0",
    ) -> int:
        """Start the port-forward in the background and record its PID.

        An already-running forward from a previous run is stopped first.

        Returns:
            PID of the port-forward process.
        """
        if self.is_running():
            self.stop()
        process = self.kubectl.port_forward(namespace, service, local_port, remote_port, address)
        self.pid_file.parent.mkdir(parents=True, exist_ok=True)
        self.pid_file.write_text(f"{process.pid}\n")
        logger.info("port-forward started", pid=process.pid, local_port=local_port)
        return process.pid

    def stop(self) -> bool:
        """Stop the port-forward if alive and remove the PID file.

        Returns:
            True when a live process was signalled.
        """
        pid = self.read_pid()
        stopped = False
        if pid is not None and pid_alive(pid):
            try:
                os.kill(pid, signal.SIGTERM)
                stopped = True
            except ProcessLookupError:
                pass
        self.pid_file.unlink(missing_ok=True)
        return stopped
