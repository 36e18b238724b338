"""Subcommands of the gitops-demo CLI."""

from .cleanup import cleanup
from .cluster_setup import cluster_setup
from .credentials import credentials
from .increase_limits import increase_limits
from .init_gitops import init_gitops
from .provision import provision
from .register_targets import register_targets
from .setup import setup
from .status import status
from .update_demo import update_demo

COMMANDS = [
    setup,
    credentials,
    init_gitops,
    provision,
    update_demo,
    cluster_setup,
    register_targets,
    increase_limits,
    cleanup,
    status,
]

__all__ = ["COMMANDS"]
