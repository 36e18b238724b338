"""Status command - report what parts of the demo environment exist."""

from __future__ import annotations

import json
from dataclasses import asdict

import click

from ..bootstrap import EnvironmentAction, EnvironmentStateDetector
from ..config import DemoConfig
from ..decorators import handles_demo_errors, pass_config

NEXT_STEP = {
    EnvironmentAction.FRESH_SETUP: "No demo clusters found. Run: gitops-demo setup",
    EnvironmentAction.READY: "Demo clusters are up. Next: gitops-demo init-gitops",
    EnvironmentAction.PARTIAL: "Only one demo cluster exists. Run: gitops-demo cleanup && gitops-demo setup",
}


def mark(present: bool) -> str:
    return "✓" if present else "✗"


@click.command("status")
@pass_config
@handles_demo_errors
def status(config: DemoConfig):
    """Show demo clusters, port-forward and scratch files."""
    state = EnvironmentStateDetector(config).detect()

    if click.get_current_context().obj.get("json_output"):
        data = asdict(state)
        data["suggested_action"] = state.suggested_action.value
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"Environment state: {state.suggested_action.value}")
    click.echo("Clusters:")
    click.echo(f"  {mark(state.management_exists)} {config.management_cluster}")
    click.echo(f"  {mark(state.workload_exists)} {config.workload_cluster}")
    if state.poc_clusters:
        click.echo(f"  POC clusters: {', '.join(state.poc_clusters)}")
    if state.port_forward_running:
        click.echo(f"  ✓ ArgoCD port-forward (pid {state.port_forward_pid}) on :{config.argocd_port}")
    else:
        click.echo("  ✗ ArgoCD port-forward")
    click.echo(f"  {mark(state.has_workload_kubeconfig)} {config.workload_kubeconfig}")
    click.echo(f"  {mark(state.has_platform_repo)} {config.platform_repo}")
    click.echo("")
    click.echo(NEXT_STEP[state.suggested_action])
