"""GitOps wiring: repository credentials, ArgoCD Applications, local platform repo."""

from __future__ import annotations

import shutil
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import questionary

from ..errors import PreconditionError
from ..shared.logging import get_logger
from .git import GitRepository
from .health import ResourceWaiter
from .kubectl import Kubectl
from .manifests import (
    ARGOCD_NAMESPACE,
    REPOSITORY_SECRET_LABEL,
    ApplicationSpec,
    build_application,
    ignore_status,
)

logger = get_logger(__name__)

REPO_SECRET_NAME = "gitlab-repo-creds"
BOOTSTRAP_XRD = "bootstrapstacks.platform.io"
DEMO_GIT_EMAIL = "demo@example.com"
DEMO_GIT_NAME = "Demo User"
INITIAL_COMMIT_MESSAGE = "Initial Crossplane XRDs and compositions"

CONFIG_APPLICATION = "crossplane-config"
CONFIG_INCLUDE = "{xrds/*.yaml,compositions/*.yaml}"
CLUSTERS_INCLUDE = "*.yaml"


class RepoLayout(Enum):
    """Where ArgoCD reads the manifests from."""

    REMOTE = "remote"  # Hosted Git repository (credentials in gitlab-repo-creds)
    LOCAL = "local"  # file:// repository under the work directory


@dataclass
class LayoutPaths:
    """Application names and source paths for one repository layout."""

    cluster_application: str
    config_path: str
    clusters_path: str
    recurse: bool


LAYOUTS = {
    RepoLayout.REMOTE: LayoutPaths(
        cluster_application="cluster-bootstrapping",
        config_path="crossplane-argocd/gitops-demo/manifests/crossplane",
        clusters_path="crossplane-argocd/gitops-demo/manifests/crossplane/clusters",
        recurse=True,
    ),
    RepoLayout.LOCAL: LayoutPaths(
        cluster_application="cluster-provisioning",
        config_path="manifests/crossplane",
        clusters_path="manifests/crossplane/clusters",
        recurse=False,
    ),
}


@dataclass
class RepositoryCredentials:
    """Git repository URL and access token for ArgoCD."""

    url: str
    username: str
    token: str

    @classmethod
    def resolve(
        cls,
        url: str | None = None,
        username: str | None = None,
        token: str | None = None,
        prompt: bool = True,
    ) -> RepositoryCredentials:
        """Use the given values, asking interactively for any that are missing.

        Raises:
            PreconditionError: If a value is missing and prompting is disabled
                or the user cancelled.
        """
        if prompt:
            if not username:
                username = questionary.text("GitLab Username:").ask()
            if not token:
                token = questionary.password("GitLab Token (glpat-...):").ask()
            if not url:
                url = questionary.text("GitLab Repo URL (https://gitlab.com/...):").ask()

        missing = [
            var
            for var, value in (
                ("GITLAB_REPO_URL", url),
                ("GITLAB_USERNAME", username),
                ("GITLAB_TOKEN", token),
            )
            if not value
        ]
        if missing:
            raise PreconditionError(
                message=f"Missing repository credentials: {', '.join(missing)}",
                hint="Set the environment variables or run interactively.",
            )
        return cls(url=url, username=username, token=token)


class GitOpsWiring:
    """Connect ArgoCD on the management cluster to a Git repository."""

    def __init__(
        self,
        kubectl: Kubectl | None = None,
        management_context: str = "kind-management",
        sleep: Callable[[float], None] | None = None,
    ):
        self.kubectl = kubectl or Kubectl()
        self.management_context = management_context
        self.sleep = sleep or time.sleep
        self.waiter = ResourceWaiter(self.kubectl)

    # ── Preconditions ──

    def require_management_context(self) -> None:
        current = self.kubectl.current_context()
        if self.management_context not in current:
            raise PreconditionError(
                message="Not connected to management cluster",
                hint=f"Run: kubectl config use-context {self.management_context}",
            )

    def require_argocd(self) -> None:
        if not self.kubectl.namespace_exists(ARGOCD_NAMESPACE):
            raise PreconditionError(
                message="ArgoCD namespace not found!",
                hint="Please run 'gitops-demo setup' first",
            )

    def has_credentials(self) -> bool:
        return self.kubectl.resource_exists("secret", REPO_SECRET_NAME, ARGOCD_NAMESPACE)

    # ── Credentials ──

    def store_credentials(self, creds: RepositoryCredentials) -> None:
        """Create the repository secret ArgoCD picks up by label."""
        self.require_argocd()
        self.kubectl.create_secret_from_literals(
            REPO_SECRET_NAME,
            ARGOCD_NAMESPACE,
            {"url": creds.url, "username": creds.username, "password": creds.token},
        )
        self.kubectl.label("secret", REPO_SECRET_NAME, ARGOCD_NAMESPACE, REPOSITORY_SECRET_LABEL)
        logger.info("repository credentials stored", url=creds.url, username=creds.username)

    def repository_url(self) -> str:
        """Repository URL stored in the credentials secret.

        Raises:
            PreconditionError: If the secret is missing or has no URL.
        """
        if not self.has_credentials():
            raise PreconditionError(
                message="GitLab repository credentials not found!",
                hint="Please run 'gitops-demo credentials' first to configure the "
                "repository URL, username and access token.",
            )
        url = self.kubectl.get_secret_value(REPO_SECRET_NAME, ARGOCD_NAMESPACE, "url")
        if not url:
            raise PreconditionError(message="Could not retrieve GitLab repository URL from secret")
        return url

    # ── Applications ──

    def application_specs(self, repo_url: str, revision: str, layout: RepoLayout) -> list[ApplicationSpec]:
        """The two Applications: XRDs/Compositions first, cluster claims second."""
        paths = LAYOUTS[layout]
        return [
            ApplicationSpec(
                name=CONFIG_APPLICATION,
                repo_url=repo_url,
                target_revision=revision,
                path=paths.config_path,
                include=CONFIG_INCLUDE,
                recurse=paths.recurse,
                sync_wave=1,
                ignore_differences=[
                    ignore_status("apiextensions.crossplane.io", "CompositeResourceDefinition"),
                    ignore_status("apiextensions.crossplane.io", "Composition"),
                ],
            ),
            ApplicationSpec(
                name=paths.cluster_application,
                repo_url=repo_url,
                target_revision=revision,
                path=paths.clusters_path,
                include=CLUSTERS_INCLUDE,
                recurse=paths.recurse,
                sync_wave=2,
                ignore_differences=[
                    ignore_status(
                        "platform.io",
                        "BootstrapStack",
                        "/metadata/generation",
                        "/metadata/resourceVersion",
                    ),
                ],
            ),
        ]

    def create_applications(
        self,
        repo_url: str,
        revision: str,
        layout: RepoLayout,
        on_created: Callable[[str], None] | None = None,
    ) -> list[str]:
        """Apply the Applications in sync-wave order.

        Returns:
            Names of the created Applications.
        """
        names = []
        for spec in self.application_specs(repo_url, revision, layout):
            self.kubectl.apply_manifest(build_application(spec))
            names.append(spec.name)
            if on_created:
                on_created(spec.name)
        return names

    def wait_for_xrds(self, settle_seconds: float = 10, timeout_seconds: int = 120) -> bool:
        """Give ArgoCD time to sync, then wait for the demo XRD (soft)."""
        if settle_seconds:
            self.sleep(settle_seconds)
        return self.waiter.wait_xrd_established(BOOTSTRAP_XRD, timeout_seconds)

    def application_status(self) -> str | None:
        return self.kubectl.get_text("get", "applications", "-n", ARGOCD_NAMESPACE)


def init_local_repository(manifests_dir: Path, repo_dir: Path) -> tuple[GitRepository, bool]:
    """Create the local platform repo from a manifests directory.

    Any existing repo at repo_dir is removed first.

    Returns:
        The repository and whether a previous one was replaced.

    Raises:
        PreconditionError: If manifests_dir does not exist.
    """
    if not manifests_dir.is_dir():
        raise PreconditionError(
            message=f"manifests directory not found at {manifests_dir}",
            hint="Pass --manifests or set manifests_dir in the config file",
        )

    replaced = repo_dir.exists()
    if replaced:
        shutil.rmtree(repo_dir)

    repo = GitRepository(repo_dir)
    repo.init()
    repo.configure_identity(DEMO_GIT_EMAIL, DEMO_GIT_NAME)
    shutil.copytree(manifests_dir, repo_dir / "manifests")
    repo.add(".")
    repo.commit(INITIAL_COMMIT_MESSAGE)
    logger.info("platform repository initialized", path=str(repo_dir))
    return repo, replaced


def local_repo_url(repo_dir: Path) -> str:
    return f"file://{repo_dir}"
