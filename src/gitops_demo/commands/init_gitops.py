"""Init-gitops command - point ArgoCD at the platform manifests.

Remote mode reads the repository URL from the credentials secret and
tracks a branch. Local mode builds a throwaway Git repository under the
work directory and tracks its HEAD.
"""

from __future__ import annotations

from pathlib import Path

import click

from ..bootstrap import GitOpsWiring, Kubectl, RepoLayout, init_local_repository
from ..bootstrap.gitops import LAYOUTS, local_repo_url
from ..config import DemoConfig
from ..decorators import handles_demo_errors, pass_config
from ..errors import PreconditionError
from ..formatters import (
    print_banner,
    print_block,
    print_next_steps,
    print_step,
    print_success,
    print_warning,
)


@click.command("init-gitops")
@click.option("--local", "local", is_flag=True, help="Use a local file:// repository instead of GitLab")
@click.option(
    "--manifests",
    "manifests_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Manifests directory (default: manifests_dir from config)",
)
@click.option("--branch", default=None, help="Branch ArgoCD tracks in remote mode (default: GIT_BRANCH or main)")
@pass_config
@handles_demo_errors
def init_gitops(config: DemoConfig, local: bool, manifests_dir: Path | None, branch: str | None):
    """Create the ArgoCD Applications that sync XRDs, Compositions and cluster claims."""
    config.override("manifests_dir", manifests_dir)
    config.override("git_branch", branch)

    wiring = GitOpsWiring(Kubectl(), config.management_context)
    wiring.require_management_context()

    layout = RepoLayout.LOCAL if local else RepoLayout.REMOTE
    if layout is RepoLayout.LOCAL:
        print_step("Initializing GitOps configuration...")
        if config.platform_repo.exists():
            print_warning(f"Platform repo already exists at {config.platform_repo}, removing...")
        print_step("Creating local platform repository...")
        init_local_repository(config.manifests_dir, config.platform_repo)
        print_success(f"Platform repository initialized at {config.platform_repo}")
        repo_url = local_repo_url(config.platform_repo)
        revision = "HEAD"
    else:
        print_step("Initializing GitOps configuration with real GitLab repository...")
        repo_url = wiring.repository_url()
        print_success(f"Using GitLab repository: {repo_url}")
        revision = config.git_branch
        print_step(f"Target branch: {revision}")
        if not config.manifests_dir.is_dir():
            raise PreconditionError(
                message=f"gitops-demo/manifests directory not found at {config.manifests_dir}",
                hint="Please ensure the manifests directory exists with your Crossplane configurations",
            )

    click.echo("")
    print_step("Creating ArgoCD Applications...")
    wiring.create_applications(
        repo_url,
        revision,
        layout,
        on_created=lambda name: print_success(f"{name} Application created"),
    )

    click.echo("")
    print_step("Waiting for ArgoCD to sync XRDs and Compositions from Git...")
    print_step("Waiting for XRDs to be established...")
    if wiring.wait_for_xrds():
        print_success("XRDs are established")
    else:
        print_warning("XRD taking longer than expected (ArgoCD may still be syncing)")

    print_step("Checking ArgoCD Application status...")
    print_block(wiring.application_status() or "", fallback="  (no applications found)")

    cluster_application = LAYOUTS[layout].cluster_application
    click.echo("")
    print_banner("✓ GitOps Setup Complete!", color="green")
    click.echo("")
    if layout is RepoLayout.LOCAL:
        click.echo(f"Platform Repository: {config.platform_repo}")
    else:
        click.echo(f"GitLab Repository: {repo_url}")
        click.echo(f"Branch: {revision}")
    click.echo("ArgoCD Applications:")
    click.echo("  - crossplane-config (XRDs and Compositions)")
    click.echo(f"  - {cluster_application} (Cluster XRs)")
    click.echo("")
    click.echo("Verify setup:")
    click.echo("  kubectl get applications -n argocd")
    click.echo("  kubectl get xrd")
    click.echo("  kubectl get compositions")
    print_next_steps(["Run 'gitops-demo provision' to create cluster instances"])
