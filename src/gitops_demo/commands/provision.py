"""Provision command - walk through the prod and staging BootstrapStack claims."""

from __future__ import annotations

import time
from pathlib import Path

import click

from ..bootstrap import (
    GitOpsWiring,
    GitRepository,
    Kubectl,
    ResourceWaiter,
    WorkloadInspector,
    bootstrap_manifest,
)
from ..bootstrap.demo import DEMO_ENVIRONMENTS
from ..bootstrap.gitops import local_repo_url
from ..config import DemoConfig
from ..decorators import handles_demo_errors, pass_config
from ..errors import PreconditionError
from ..formatters import (
    BANNER,
    print_banner,
    print_block,
    print_next_steps,
    print_step,
    print_success,
    print_warning,
)

PENDING = "  (Being provisioned...)"


def resolve_repo_dir(config: DemoConfig, repo_dir: Path | None) -> Path:
    """The repo holding the cluster claims: explicit, local platform repo, or cwd."""
    if repo_dir is not None:
        return repo_dir
    if (config.platform_repo / ".git").is_dir():
        return config.platform_repo
    return Path.cwd()


def show_environment(
    environment: str,
    repo: GitRepository,
    inspector: WorkloadInspector,
    waiter: ResourceWaiter,
    settle_seconds: float,
) -> None:
    manifest = bootstrap_manifest(repo.path, environment)
    if not manifest.is_file():
        raise PreconditionError(message=f"{manifest} not found")
    print_step(f"{environment.capitalize()} cluster configuration (from Git repository):")
    print_block(manifest.read_text())

    click.echo("")
    print_step("Git log:")
    print_block(repo.log_oneline(3))

    click.echo("")
    print_step(f"ArgoCD will automatically sync {environment} (automated sync policy enabled)...")
    print_success("Waiting for ArgoCD to detect and sync...")
    time.sleep(settle_seconds)

    print_step(f"Waiting for {environment} bootstrap to complete...")
    if waiter.wait_bootstrap_ready(environment):
        print_success(f"{environment} bootstrap complete!")
    else:
        print_warning(
            f"{environment} bootstrap still in progress "
            "(this is expected with Crossplane reconciliation)"
        )

    report = inspector.report(environment)
    click.echo("")
    print_step(f"Checking {environment} cluster resources:")
    click.echo("")
    click.echo("On MANAGEMENT cluster - BootstrapStack:")
    print_block(report.bootstrap_stack or "", fallback="  (Still being created...)")
    click.echo("")
    click.echo("On MANAGEMENT cluster - Status tracking:")
    print_block(report.status_configmaps or "", fallback=PENDING)
    click.echo("")
    click.echo("On WORKLOAD cluster - Deployed namespaces and resources:")
    print_block(report.workload_namespaces or "", fallback=PENDING)
    print_block(report.workload_configmaps or "", fallback=PENDING)
    click.echo("")
    print_success(f"{environment.capitalize()} cluster provisioning initiated")


@click.command("provision")
@click.option(
    "--repo-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Git checkout holding manifests/crossplane/clusters (default: local platform repo or cwd)",
)
@click.option("--settle", type=float, default=10.0, show_default=True, help="Seconds to wait for ArgoCD to sync")
@pass_config
@handles_demo_errors
def provision(config: DemoConfig, repo_dir: Path | None, settle: float):
    """Show the cluster claims syncing from Git and what Crossplane creates."""
    management = Kubectl()
    wiring = GitOpsWiring(management, config.management_context)
    wiring.require_management_context()

    repo = GitRepository(resolve_repo_dir(config, repo_dir))
    if not repo.is_repository():
        raise PreconditionError(
            message=f"{repo.path} is not a git repository",
            hint="Run 'gitops-demo init-gitops --local', or initialize git and push to GitLab first",
        )
    repo_url = wiring.repository_url() if wiring.has_credentials() else local_repo_url(repo.path)

    inspector = WorkloadInspector(management, management.with_context(config.workload_context))
    waiter = ResourceWaiter(management)

    print_banner("Cluster Provisioning Demo")
    click.echo("")
    click.echo(f"Repository: {repo_url}")
    click.echo("")

    for step, environment in enumerate(DEMO_ENVIRONMENTS, start=1):
        if step > 1:
            time.sleep(settle / 2)
            click.echo("")
            click.echo(BANNER)
        print_step(f"Step {step}: Provisioning {environment.upper()} cluster...")
        click.echo("")
        show_environment(environment, repo, inspector, waiter, settle)

    click.echo("")
    print_banner("✓ Cluster Provisioning Complete!", color="green")
    click.echo("")
    click.echo("MANAGEMENT cluster - All BootstrapStacks:")
    print_block(inspector.bootstrap_stacks() or "")
    click.echo("")
    click.echo("MANAGEMENT cluster - Status tracking ConfigMaps:")
    print_block(inspector.status_configmaps() or "")
    click.echo("")
    click.echo("WORKLOAD cluster - Deployed namespaces:")
    print_block(inspector.workload_namespaces(header=True) or "", fallback=PENDING)
    click.echo("")
    click.echo("WORKLOAD cluster - Resources in monitoring namespace:")
    print_block(inspector.monitoring_resources() or "", fallback="  (Namespace being created...)")
    click.echo("")
    click.echo("Git commit history:")
    print_block(repo.log_oneline())

    click.echo("")
    print_banner("Detailed status of PROD cluster:")
    print_block(inspector.describe_bootstrap("prod") or "", fallback="Still being created...")

    click.echo("")
    click.echo("Verification commands:")
    click.echo("  kubectl get bootstrapstacks -n crossplane-system")
    click.echo(f"  kubectl --context {config.workload_context} get namespaces")
    click.echo(f"  kubectl --context {config.workload_context} get configmap -n monitoring")
    click.echo("  kubectl describe bootstrapstack prod-cluster -n crossplane-system")
    print_next_steps(["Run 'gitops-demo update-demo' to demonstrate GitOps updates"])
