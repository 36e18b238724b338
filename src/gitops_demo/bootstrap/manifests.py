"""Kubernetes manifest builders for the demo.

Resources are built as plain dicts and piped to ``kubectl apply -f -`` as
YAML. Nothing here talks to a cluster.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

CROSSPLANE_NAMESPACE = "crossplane-system"
ARGOCD_NAMESPACE = "argocd"
IN_CLUSTER_SERVER = "https://kubernetes.default.svc"

XPKG_REGISTRY = "xpkg.upbound.io/crossplane-contrib"

REPOSITORY_SECRET_LABEL = "argocd.argoproj.io/secret-type=repository"


def package_ref(name: str, version: str) -> str:
    """Full xpkg reference for a crossplane-contrib package."""
    return f"{XPKG_REGISTRY}/{name}:{version}"


def to_yaml(manifests: dict[str, Any] | list[dict[str, Any]]) -> str:
    """Serialize one or more manifests (multi-document YAML)."""
    if isinstance(manifests, dict):
        manifests = [manifests]
    return yaml.dump_all(manifests, default_flow_style=False, sort_keys=False)


def build_namespace(name: str) -> dict[str, Any]:
    return {"apiVersion": "v1", "kind": "Namespace", "metadata": {"name": name}}


def build_provider(name: str, version: str) -> dict[str, Any]:
    """Crossplane Provider package."""
    return {
        "apiVersion": "pkg.crossplane.io/v1",
        "kind": "Provider",
        "metadata": {"name": name},
        "spec": {"package": package_ref(name, version)},
    }


def build_function(name: str, version: str) -> dict[str, Any]:
    """Crossplane composition Function package."""
    return {
        "apiVersion": "pkg.crossplane.io/v1beta1",
        "kind": "Function",
        "metadata": {"name": name},
        "spec": {"package": package_ref(name, version)},
    }


PROVIDER_CONFIG_API_VERSIONS = {
    "kubernetes": "kubernetes.crossplane.io/v1alpha1",
    "helm": "helm.crossplane.io/v1beta1",
}


def build_provider_config(
    provider: str,
    name: str,
    secret_name: str,
    secret_namespace: str = CROSSPLANE_NAMESPACE,
    secret_key: str = "kubeconfig",
) -> dict[str, Any]:
    """ProviderConfig pointing a provider at a kubeconfig secret.

    Args:
        provider: "kubernetes" or "helm".
        name: ProviderConfig name.
        secret_name: Secret holding the target cluster kubeconfig.
        secret_namespace: Namespace of that secret.
        secret_key: Key of the kubeconfig inside the secret.
    """
    return {
        "apiVersion": PROVIDER_CONFIG_API_VERSIONS[provider],
        "kind": "ProviderConfig",
        "metadata": {"name": name},
        "spec": {
            "credentials": {
                "source": "Secret",
                "secretRef": {
                    "namespace": secret_namespace,
                    "name": secret_name,
                    "key": secret_key,
                },
            }
        },
    }


def build_connectivity_object(name: str, provider_config: str, namespace: str) -> dict[str, Any]:
    """provider-kubernetes Object that creates a namespace on the target cluster."""
    return {
        "apiVersion": "kubernetes.crossplane.io/v1alpha2",
        "kind": "Object",
        "metadata": {"name": name},
        "spec": {
            "providerConfigRef": {"name": provider_config},
            "forProvider": {"manifest": build_namespace(namespace)},
        },
    }


@dataclass
class ApplicationSpec:
    """Inputs for an ArgoCD Application that syncs a manifest directory."""

    name: str
    repo_url: str
    path: str
    include: str
    sync_wave: int
    target_revision: str = "HEAD"
    recurse: bool = False
    destination_namespace: str = CROSSPLANE_NAMESPACE
    ignore_differences: list[dict[str, Any]] = field(default_factory=list)


def build_application(spec: ApplicationSpec) -> dict[str, Any]:
    """ArgoCD Application with automated prune/self-heal sync and retry backoff."""
    application: dict[str, Any] = {
        "apiVersion": "argoproj.io/v1alpha1",
        "kind": "Application",
        "metadata": {
            "name": spec.name,
            "namespace": ARGOCD_NAMESPACE,
            "annotations": {"argocd.argoproj.io/sync-wave": str(spec.sync_wave)},
            "finalizers": ["resources-finalizer.argocd.argoproj.io"],
        },
        "spec": {
            "project": "default",
            "source": {
                "repoURL": spec.repo_url,
                "targetRevision": spec.target_revision,
                "path": spec.path,
                "directory": {"recurse": spec.recurse, "include": spec.include},
            },
            "destination": {
                "server": IN_CLUSTER_SERVER,
                "namespace": spec.destination_namespace,
            },
            "syncPolicy": {
                "automated": {"prune": True, "selfHeal": True, "allowEmpty": False},
                "syncOptions": [
                    "CreateNamespace=true",
                    "PrunePropagationPolicy=foreground",
                ],
                "retry": {
                    "limit": 5,
                    "backoff": {"duration": "5s", "factor": 2, "maxDuration": "3m"},
                },
            },
        },
    }
    if spec.ignore_differences:
        application["spec"]["ignoreDifferences"] = spec.ignore_differences
    return application


def ignore_status(group: str, kind: str, *extra_pointers: str) -> dict[str, Any]:
    """ignoreDifferences entry for fields owned by the controllers."""
    return {"group": group, "kind": kind, "jsonPointers": ["/status", *extra_pointers]}


@dataclass
class KindClusterConfig:
    """kind cluster definition: a name and one entry per node role."""

    name: str
    roles: list[str] = field(default_factory=lambda: ["control-plane"])


def build_kind_config(config: KindClusterConfig) -> dict[str, Any]:
    return {
        "kind": "Cluster",
        "apiVersion": "kind.x-k8s.io/v1alpha4",
        "name": config.name,
        "nodes": [{"role": role} for role in config.roles],
    }


def write_kind_config(config: KindClusterConfig, path: Path) -> Path:
    """Write a kind cluster config file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(build_kind_config(config), f, default_flow_style=False, sort_keys=False)
    return path
