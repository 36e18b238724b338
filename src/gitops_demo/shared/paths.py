"""Path management for gitops-demo.

The demo keeps its scratch artifacts under a work directory (``/tmp`` by
default) so they survive between commands but not between reboots.
"""

from pathlib import Path

# Base directory for persistent CLI settings
DEMO_DIR = Path.home() / ".gitops-demo"

# Scratch directory for kubeconfig extracts, PID file and platform repo
DEFAULT_WORK_DIR = Path("/tmp")

WORKLOAD_KUBECONFIG_NAME = "workload-kubeconfig.yaml"
PORTFORWARD_PID_NAME = "argocd-portforward.pid"
PLATFORM_REPO_NAME = "platform-repo"


def workload_kubeconfig(work_dir: Path = DEFAULT_WORK_DIR) -> Path:
    """Path of the extracted workload cluster kubeconfig."""
    return work_dir / WORKLOAD_KUBECONFIG_NAME


def portforward_pid_file(work_dir: Path = DEFAULT_WORK_DIR) -> Path:
    """Path of the PID file for the background ArgoCD port-forward."""
    return work_dir / PORTFORWARD_PID_NAME


def platform_repo_dir(work_dir: Path = DEFAULT_WORK_DIR) -> Path:
    """Path of the local Git repository ArgoCD watches in local mode."""
    return work_dir / PLATFORM_REPO_NAME


def cluster_kubeconfig(cluster: str, work_dir: Path = DEFAULT_WORK_DIR) -> Path:
    """Path of an extracted kubeconfig for a registered target cluster."""
    return work_dir / f"{cluster}-kubeconfig.yaml"


def kind_config_file(cluster: str, work_dir: Path = DEFAULT_WORK_DIR) -> Path:
    """Path of the generated kind cluster config for a cluster."""
    return work_dir / f"{cluster}-config.yaml"
