"""Update-demo command - change Prometheus in Git, watch it roll out, then revert."""

from __future__ import annotations

import time

import click

from ..bootstrap import (
    GitOpsWiring,
    GitRepository,
    Kubectl,
    WorkloadInspector,
    bootstrap_manifest,
    set_field,
)
from ..bootstrap.demo import VERSION_FIELD, section_lines
from ..config import DemoConfig
from ..decorators import handles_demo_errors, pass_config
from ..errors import CommandError, PreconditionError
from ..formatters import BANNER, print_banner, print_block, print_step, print_success

ENVIRONMENT = "prod"


def show_version(inspector: WorkloadInspector, title: str, fallback: str) -> None:
    print_step(title)
    click.echo(inspector.deployed_version() or fallback)


def wait_for_rollout(sync_seconds: float, reconcile_seconds: float) -> None:
    print_success("Waiting for ArgoCD to sync...")
    time.sleep(sync_seconds)
    click.echo("")
    print_step("Waiting for Crossplane to reconcile...")
    time.sleep(reconcile_seconds)


def print_section_header(title: str) -> None:
    click.echo(BANNER)
    print_step(title)
    click.echo(BANNER)
    click.echo("")


@click.command("update-demo")
@click.option("--from-version", default="45.0.0", show_default=True, help="Current Prometheus version")
@click.option("--to-version", default="46.0.0", show_default=True, help="Prometheus version to roll out")
@click.option("--sync-wait", type=float, default=10.0, show_default=True, help="Seconds to wait for ArgoCD")
@click.option("--reconcile-wait", type=float, default=5.0, show_default=True, help="Seconds to wait for Crossplane")
@click.option("--yes", "-y", is_flag=True, help="Roll back without asking")
@pass_config
@handles_demo_errors
def update_demo(
    config: DemoConfig,
    from_version: str,
    to_version: str,
    sync_wait: float,
    reconcile_wait: float,
    yes: bool,
):
    """Demonstrate a GitOps update and a rollback with git revert."""
    management = Kubectl()
    GitOpsWiring(management, config.management_context).require_management_context()

    repo = GitRepository(config.platform_repo)
    if not repo.is_repository():
        raise PreconditionError(
            message=f"Platform repository not found at {config.platform_repo}",
            hint="Please run 'gitops-demo init-gitops --local' first",
        )
    manifest = bootstrap_manifest(repo.path, ENVIRONMENT)
    if not manifest.is_file():
        raise PreconditionError(message=f"{manifest} not found")
    manifest_rel = str(manifest.relative_to(repo.path))
    inspector = WorkloadInspector(management, management.with_context(config.workload_context))

    print_banner("GitOps Update Demo")
    click.echo("")

    print_step(f"Current {ENVIRONMENT} cluster configuration:")
    click.echo("")
    print_block(section_lines(manifest, "monitoring"))
    click.echo("")
    show_version(inspector, "Current deployed Prometheus version (on WORKLOAD cluster):", "Not yet deployed")

    click.echo("")
    print_section_header("Step 1: Updating Prometheus version in Git")
    print_step(f"Modifying {manifest.name}...")
    set_field(manifest, VERSION_FIELD, from_version, to_version)

    print_step("New configuration:")
    print_block(section_lines(manifest, "monitoring"))

    click.echo("")
    print_step("Committing change to Git...")
    try:
        repo.add(manifest_rel)
        repo.commit(f"{ENVIRONMENT}: Update Prometheus to {to_version}")
    except CommandError:
        repo.restore(manifest_rel)
        raise
    print_success("Change committed")

    click.echo("")
    print_step("Git history:")
    print_block(repo.log_oneline(5))
    click.echo("")
    print_step("Git diff of the change:")
    print_block(repo.show_head(stat=True))
    print_block(repo.show_head())

    click.echo("")
    print_section_header("Step 2: ArgoCD Auto-Sync")
    print_step("ArgoCD detects Git change and syncs automatically...")
    print_step("No manual intervention needed (automated sync policy)")
    wait_for_rollout(sync_wait, reconcile_wait)
    click.echo("")
    show_version(inspector, "New Prometheus version on WORKLOAD cluster:", "Still updating...")

    click.echo("")
    print_step(f"Complete {ENVIRONMENT} cluster status:")
    print_block(inspector.bootstrap_status(ENVIRONMENT) or "")

    click.echo("")
    print_section_header("Step 3: Demonstrating rollback")
    print_step("Current Git history:")
    print_block(repo.log_oneline(5))
    click.echo("")
    if not yes:
        click.prompt(
            f"Press Enter to rollback to Prometheus {from_version}...",
            default="",
            show_default=False,
            prompt_suffix="",
        )

    click.echo("")
    print_step("Reverting the commit...")
    repo.revert_head()
    print_success("Rollback committed")

    click.echo("")
    print_step("Updated Git history:")
    print_block(repo.log_oneline(5))
    click.echo("")
    print_step("Configuration after rollback:")
    print_block(section_lines(manifest, "monitoring"))

    click.echo("")
    print_step("ArgoCD automatically syncing rollback...")
    wait_for_rollout(sync_wait, reconcile_wait)
    click.echo("")
    show_version(inspector, "Prometheus version after rollback (WORKLOAD cluster):", "Still updating...")

    click.echo("")
    print_banner("✓ GitOps Update Demo Complete!", color="green")
    click.echo("")
    click.echo("What we demonstrated:")
    click.echo(f"  1. Git commit: Updated Prometheus from {from_version} to {to_version}")
    click.echo("  2. ArgoCD sync: Applied changes from Git to cluster")
    click.echo("  3. Crossplane reconciliation: Updated ConfigMaps")
    click.echo("  4. Git rollback: Reverted to previous version")
    click.echo(f"  5. Automatic reconciliation: Crossplane updated back to {from_version}")
    click.echo("")
    click.echo("Complete audit trail:")
    print_block(repo.log_oneline())
    click.echo("")
    click.echo("Verification commands:")
    click.echo(f"  View Git log: cd {repo.path} && git log")
    click.echo("  View cluster: kubectl get bootstrapstacks -n crossplane-system")
    click.echo(
        f"  Check version: kubectl --context {config.workload_context} get configmap "
        "prod-monitoring -n monitoring -o jsonpath='{.data.version}'"
    )
    click.echo("")
