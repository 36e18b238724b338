"""Shared modules for gitops-demo.

This module provides functionality used by every command:
- Logging configuration
- Scratch file locations
"""

from .logging import configure_logging, get_logger, level_for_verbosity
from .paths import (
    DEFAULT_WORK_DIR,
    DEMO_DIR,
    cluster_kubeconfig,
    kind_config_file,
    platform_repo_dir,
    portforward_pid_file,
    workload_kubeconfig,
)

__all__ = [
    # Paths
    "DEMO_DIR",
    "DEFAULT_WORK_DIR",
    "workload_kubeconfig",
    "portforward_pid_file",
    "platform_repo_dir",
    "cluster_kubeconfig",
    "kind_config_file",
    # Logging
    "configure_logging",
    "get_logger",
    "level_for_verbosity",
]
