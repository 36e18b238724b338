"""Bootstrap package for the Crossplane + ArgoCD demo environment.

This package drives the external CLIs the demo depends on:
1. Detects kind/kubectl/helm/argocd/git/docker and host limits
2. Creates kind clusters and extracts their kubeconfigs
3. Installs Crossplane, its packages and ArgoCD
4. Wires ArgoCD to a Git repository and runs the update/rollback demo
5. Registers target clusters, reports state and cleans up
"""

from .argocd import ArgoCDInstaller, PortForwardManager
from .cleanup import CleanupReport, EnvironmentCleaner
from .crossplane import (
    FUNCTION_PATCH_AND_TRANSFORM,
    PROVIDER_HELM,
    PROVIDER_KUBERNETES,
    CrossplaneInstaller,
    PackageResult,
)
from .demo import ClusterReport, WorkloadInspector, bootstrap_manifest, read_field, set_field
from .git import GitRepository
from .gitops import GitOpsWiring, RepoLayout, RepositoryCredentials, init_local_repository
from .health import HealthCheckResult, HealthPoller, ResourceWaiter
from .helm import HelmClient
from .kind import DockerNetworkInspector, KindClusterManager, kind_context, rewrite_kubeconfig_server
from .kubectl import Kubectl
from .limits import HostLimitsManager, LimitsUpdate
from .manifests import ApplicationSpec, KindClusterConfig
from .prerequisites import LimitsReport, SystemLimitsChecker, ToolDetector, ToolInfo
from .registration import TargetCluster, TargetRegistrar
from .state import EnvironmentAction, EnvironmentState, EnvironmentStateDetector

__all__ = [
    # Prerequisites
    "ToolDetector",
    "ToolInfo",
    "SystemLimitsChecker",
    "LimitsReport",
    "HostLimitsManager",
    "LimitsUpdate",
    # Clusters
    "KindClusterManager",
    "KindClusterConfig",
    "DockerNetworkInspector",
    "kind_context",
    "rewrite_kubeconfig_server",
    "Kubectl",
    # Packages
    "HelmClient",
    "CrossplaneInstaller",
    "PackageResult",
    "PROVIDER_KUBERNETES",
    "PROVIDER_HELM",
    "FUNCTION_PATCH_AND_TRANSFORM",
    "ArgoCDInstaller",
    "PortForwardManager",
    # Health polling
    "HealthPoller",
    "HealthCheckResult",
    "ResourceWaiter",
    # GitOps
    "GitRepository",
    "GitOpsWiring",
    "RepoLayout",
    "RepositoryCredentials",
    "ApplicationSpec",
    "init_local_repository",
    # Demo
    "WorkloadInspector",
    "ClusterReport",
    "bootstrap_manifest",
    "read_field",
    "set_field",
    # Target registration
    "TargetRegistrar",
    "TargetCluster",
    # State management
    "EnvironmentAction",
    "EnvironmentState",
    "EnvironmentStateDetector",
    "EnvironmentCleaner",
    "CleanupReport",
]
