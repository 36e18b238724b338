"""kind cluster lifecycle and docker network inspection."""

from __future__ import annotations

import re
from pathlib import Path

from ..shared.logging import get_logger
from ..shared.paths import DEFAULT_WORK_DIR, kind_config_file
from .manifests import KindClusterConfig, write_kind_config
from .runner import run_command

logger = get_logger(__name__)

API_SERVER_PORT = 6443
LOCAL_SERVER_PATTERN = re.compile(r"https://(?:127\.0\.0\.1|localhost):[0-9]*")


def kind_context(cluster: str) -> str:
    """kube context name kind creates for a cluster."""
    return f"kind-{cluster}"


def control_plane_container(cluster: str) -> str:
    return f"{cluster}-control-plane"


class KindClusterManager:
    """Create, delete and inspect kind clusters."""

    def __init__(self, work_dir: Path = DEFAULT_WORK_DIR):
        """Initialize cluster manager.

        Args:
            work_dir: Directory for generated kind config files.
        """
        self.work_dir = work_dir

    def list_clusters(self) -> list[str]:
        """Names of existing kind clusters."""
        result = run_command(["kind", "get", "clusters"], check=False)
        if result.returncode != 0:
            return []
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def exists(self, name: str) -> bool:
        return name in self.list_clusters()

    def create(self, name: str, config: KindClusterConfig | None = None) -> None:
        """Create a cluster, from a generated config file when one is given.

        Raises:
            CommandError: If kind fails to create the cluster.
        """
        if config is not None:
            config_path = write_kind_config(config, kind_config_file(name, self.work_dir))
            argv = ["kind", "create", "cluster", "--config", str(config_path)]
        else:
            argv = ["kind", "create", "cluster", "--name", name]
        logger.info("creating kind cluster", cluster=name)
        run_command(argv, error_message=f"Failed to create cluster {name}")

    def delete(self, name: str) -> None:
        logger.info("deleting kind cluster", cluster=name)
        run_command(["kind", "delete", "cluster", "--name", name],
                    error_message=f"Failed to delete cluster {name}")

    def export_kubeconfig(self, name: str, path: Path) -> Path:
        """Write the cluster's kubeconfig to path."""
        result = run_command(["kind", "get", "kubeconfig", "--name", name],
                             error_message=f"Failed to get kubeconfig for {name}")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(result.stdout)
        return path


def rewrite_kubeconfig_server(path: Path, host: str, port: int = API_SERVER_PORT) -> str:
    """Point a kubeconfig at the cluster's in-network API server address.

    kind writes the host-mapped ``127.0.0.1:<random>`` endpoint, which is
    unreachable from inside another cluster on the docker network.

    Returns:
        The new server URL.
    """
    server = f"https://{host}:{port}"
    content = LOCAL_SERVER_PATTERN.sub(server, path.read_text())
    path.write_text(content)
    return server


class DockerNetworkInspector:
    """Read kind node container addresses from docker."""

    def container_ip(self, container: str) -> str | None:
        result = run_command(
            [
                "docker",
                "inspect",
                "-f",
                "{{range .NetworkSettings.Networks}}{{.IPAddress}}{{end}}",
                container,
            ],
            check=False,
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def network_name(self, container: str) -> str | None:
        result = run_command(
            [
                "docker",
                "inspect",
                "-f",
                "{{range $k, $v := .NetworkSettings.Networks}}{{$k}}{{end}}",
                container,
            ],
            check=False,
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None
