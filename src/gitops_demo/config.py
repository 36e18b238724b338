"""CLI configuration management.

Handles demo configuration stored in ~/.gitops-demo/config.yaml.
Supports environment variable overrides and CLI flag precedence.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .shared.paths import (
    DEFAULT_WORK_DIR,
    DEMO_DIR,
    platform_repo_dir,
    portforward_pid_file,
    workload_kubeconfig,
)

DEFAULT_ARGOCD_INSTALL_URL = (
    "https://raw.githubusercontent.com/argoproj/argo-cd/stable/manifests/install.yaml"
)

# Environment variable mappings
ENV_VARS = {
    "repo_url": "GITLAB_REPO_URL",
    "git_username": "GITLAB_USERNAME",
    "git_token": "GITLAB_TOKEN",
    "git_branch": "GIT_BRANCH",
    "work_dir": "GITOPS_DEMO_WORK_DIR",
    "manifests_dir": "GITOPS_DEMO_MANIFESTS_DIR",
}

SECRET_KEYS = {"git_token"}


@dataclass
class DemoConfig:
    """Demo environment configuration."""

    management_cluster: str = "management"
    workload_cluster: str = "workload"
    crossplane_version: str = "1.17.0"
    provider_kubernetes_version: str = "v0.14.1"
    provider_helm_version: str = "v0.19.0"
    function_version: str = "v0.6.0"
    argocd_install_url: str = DEFAULT_ARGOCD_INSTALL_URL
    argocd_port: int = 8080
    git_branch: str = "main"
    repo_url: str | None = None
    git_username: str | None = None
    git_token: str | None = None
    work_dir: Path = DEFAULT_WORK_DIR
    manifests_dir: Path = Path("gitops-demo/manifests")

    # Track where each value came from
    _sources: dict[str, str] = field(default_factory=dict, repr=False)

    def get_source(self, key: str) -> str:
        """Get the source of a config value."""
        return self._sources.get(key, "default")

    @property
    def management_context(self) -> str:
        return f"kind-{self.management_cluster}"

    @property
    def workload_context(self) -> str:
        return f"kind-{self.workload_cluster}"

    @property
    def workload_kubeconfig(self) -> Path:
        return workload_kubeconfig(self.work_dir)

    @property
    def pid_file(self) -> Path:
        return portforward_pid_file(self.work_dir)

    @property
    def platform_repo(self) -> Path:
        return platform_repo_dir(self.work_dir)

    def override(self, key: str, value: Any) -> None:
        """Apply a CLI flag value (highest precedence)."""
        if value is None:
            return
        setattr(self, key, _coerce(key, value))
        self._sources[key] = "flag"

    def to_display_dict(self) -> dict[str, Any]:
        """Values for display, with secrets masked."""
        data: dict[str, Any] = {}
        for key in config_keys():
            value = getattr(self, key)
            if key in SECRET_KEYS and value:
                value = "****"
            elif isinstance(value, Path):
                value = str(value)
            data[key] = value
        return data


def config_keys() -> list[str]:
    """Public configuration keys in declaration order."""
    return [f.name for f in fields(DemoConfig) if not f.name.startswith("_")]


def _coerce(key: str, value: Any) -> Any:
    if key in ("work_dir", "manifests_dir"):
        return Path(str(value)).expanduser()
    if key == "argocd_port":
        return int(value)
    return str(value)


def get_config_path() -> Path:
    """Get the CLI config file path.

    Returns:
        Path to ~/.gitops-demo/config.yaml
    """
    return DEMO_DIR / "config.yaml"


def load_config(
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> DemoConfig:
    """Load demo configuration.

    Precedence (highest to lowest):
    1. CLI flags (applied later with DemoConfig.override)
    2. Environment variables
    3. Config file (--config or ~/.gitops-demo/config.yaml)
    4. Defaults

    Args:
        config_path: Explicit config file; must exist when given.
        env: Environment mapping (defaults to os.environ)

    Returns:
        DemoConfig with values and sources

    Raises:
        FileNotFoundError: If an explicit config_path does not exist.
        ValueError: If the config file is not a YAML mapping or has bad values.
    """
    env = os.environ if env is None else env
    config = DemoConfig()
    sources: dict[str, str] = {key: "default" for key in config_keys()}

    path = Path(config_path) if config_path else get_config_path()
    if config_path and not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValueError(f"Config file {path} must contain a mapping")

        for key in config_keys():
            if key in file_config and file_config[key] is not None:
                setattr(config, key, _coerce(key, file_config[key]))
                sources[key] = "config file"

    for key, var in ENV_VARS.items():
        if env.get(var):
            setattr(config, key, _coerce(key, env[var]))
            sources[key] = "environment"

    config._sources = sources
    return config
