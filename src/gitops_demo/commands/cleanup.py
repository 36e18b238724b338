"""Cleanup command - remove the demo clusters and scratch files."""

from __future__ import annotations

import click

from ..bootstrap import EnvironmentCleaner
from ..config import DemoConfig
from ..decorators import handles_demo_errors, pass_config
from ..formatters import print_banner, print_step, print_success, print_warning


@click.command("cleanup")
@click.option("--all", "include_poc", is_flag=True, help="Also delete the POC clusters cluster1..3")
@pass_config
@handles_demo_errors
def cleanup(config: DemoConfig, include_poc: bool):
    """Stop the port-forward, delete the kind clusters and remove /tmp artifacts."""
    print_banner("Cleanup Demo Environment")
    click.echo("")

    def on_cluster(name: str, deleted: bool) -> None:
        if deleted:
            print_success(f"{name.capitalize()} cluster deleted")
        else:
            print_warning(f"{name.capitalize()} cluster not found")

    print_step("Stopping ArgoCD port-forward and deleting clusters...")
    report = EnvironmentCleaner(config).run(include_poc=include_poc, on_cluster=on_cluster)

    if report.port_forward_stopped:
        print_success("Port-forward stopped")
    for path in report.removed_paths:
        print_success(f"Removed {path}")

    click.echo("")
    print_banner("✓ Cleanup Complete!", color="green")
    click.echo("")
    click.echo("All demo resources have been removed.")
    click.echo("")
    click.echo("To run the demo again:")
    click.echo("  gitops-demo setup")
    click.echo("")
