"""Cluster-setup command - three kind clusters for the Crossplane multi-cluster POC.

cluster1 runs Crossplane; cluster2 and cluster3 are the targets it
provisions into (one control-plane and one worker each).
"""

from __future__ import annotations

import time

import click

from ..bootstrap import (
    PROVIDER_HELM,
    PROVIDER_KUBERNETES,
    CrossplaneInstaller,
    DockerNetworkInspector,
    KindClusterConfig,
    KindClusterManager,
    Kubectl,
    SystemLimitsChecker,
    kind_context,
)
from ..bootstrap.limits import INOTIFY_SETTINGS
from ..bootstrap.prerequisites import format_limit
from ..bootstrap.registration import HOST_CLUSTER, TARGET_CLUSTERS
from ..config import DemoConfig
from ..decorators import handles_demo_errors, pass_config
from ..errors import CommandError, PreconditionError
from ..formatters import (
    print_banner,
    print_error,
    print_next_steps,
    print_section,
    print_success,
    print_warning,
)

POC_PROVIDER_KUBERNETES_VERSION = "v0.15.0"

POC_CLUSTERS = [
    KindClusterConfig(HOST_CLUSTER, ["control-plane"]),
    *(KindClusterConfig(name, ["control-plane", "worker"]) for name in TARGET_CLUSTERS),
]
CLUSTER_ROLES = {
    "cluster1": "Control Plane with Crossplane",
    "cluster2": "Static Pattern Target",
    "cluster3": "Dynamic Pattern Target",
}


def check_limits(yes: bool) -> None:
    print_section("Step 0: Configuring System Limits")
    report = SystemLimitsChecker().check()
    click.echo("Current limits:")
    click.echo(f"  - File descriptors: {format_limit(report.nofile_before)}")
    click.echo(f"  - Max user processes: {format_limit(report.nproc_before)}")
    for warning in report.warnings:
        print_warning(f"Warning: {warning}")
    click.echo("")
    click.echo("New limits:")
    click.echo(f"  - File descriptors: {format_limit(report.nofile)}")
    click.echo(f"  - Max user processes: {format_limit(report.nproc)}")

    click.echo("")
    click.echo("Checking inotify limits (important for multiple clusters)...")
    click.echo(f"  - Current max_user_watches: {format_limit(report.max_user_watches)}")
    click.echo(f"  - Current max_user_instances: {format_limit(report.max_user_instances)}")

    if report.watches_too_low:
        click.echo("")
        print_warning("WARNING: inotify watches might be too low for 3 kind clusters.")
        click.echo("  To increase, run (requires sudo):")
        click.echo("    sudo gitops-demo increase-limits")
        click.echo("  or:")
        for key, value in INOTIFY_SETTINGS.items():
            click.echo(f"    sudo sysctl -w {key}={value}")
        click.echo("")
        if not yes and not click.confirm("  Continue anyway?", default=False):
            raise PreconditionError(
                message="Setup cancelled. Please increase system limits and try again."
            )


def create_cluster(kind: KindClusterManager, config: KindClusterConfig, yes: bool) -> bool:
    """Create one POC cluster unless it exists.

    Returns:
        False when a failed cluster was skipped with the user's consent.
    """
    if kind.exists(config.name):
        click.echo(f"{config.name.capitalize()} already exists. Skipping creation.")
        return True

    click.echo(f"Creating {config.name}...")
    try:
        kind.create(config.name, config)
    except CommandError as e:
        if config.name != TARGET_CLUSTERS[-1]:
            e.hint = "Check system resources and limits."
            raise
        print_error(f"Failed to create {config.name}. Check system resources and limits.")
        click.echo("You may need to:")
        click.echo("  1. Increase system limits (see Step 0 warnings)")
        click.echo("  2. Free up system resources")
        click.echo(f"  3. Try creating {config.name} manually later")
        if yes or click.confirm(f"Continue without {config.name}?", default=False):
            return False
        raise SystemExit(1) from e
    print_success(f"{config.name.capitalize()} created successfully.")
    return True


def show_network() -> str | None:
    print_section("Step 4: Verifying Cluster Network")
    docker = DockerNetworkInspector()
    for name in (HOST_CLUSTER, *TARGET_CLUSTERS):
        ip = docker.container_ip(f"{name}-control-plane")
        click.echo(f"{name.capitalize()} control-plane IP: {ip or 'unknown'}")
    network = docker.network_name(f"{HOST_CLUSTER}-control-plane")
    click.echo(f"All clusters are on Docker network: {network or 'unknown'}")
    return network


def install_crossplane(provider_kubernetes_version: str, provider_helm_version: str) -> None:
    print_section(f"Step 5: Installing Crossplane on {HOST_CLUSTER.capitalize()}")
    kubectl = Kubectl()
    kubectl.use_context(kind_context(HOST_CLUSTER))
    crossplane = CrossplaneInstaller(kubectl)

    if crossplane.is_installed():
        click.echo("Crossplane namespace already exists. Skipping installation.")
    else:
        click.echo("Installing Crossplane...")
        crossplane.install(tolerate_existing_repo=True)
        print_success("Crossplane installed successfully.")

    print_section(f"Step 6: Installing Crossplane Providers on {HOST_CLUSTER.capitalize()}")
    click.echo("Waiting for providers to become healthy...")
    for name, version in (
        (PROVIDER_KUBERNETES, provider_kubernetes_version),
        (PROVIDER_HELM, provider_helm_version),
    ):
        result = crossplane.install_provider(name, version, settle_seconds=5, strict=False)
        if result.healthy:
            print_success(f"{name} is healthy")
        else:
            print_warning(f"{name} is not healthy yet")


@click.command("cluster-setup")
@click.option("--yes", "-y", is_flag=True, help="Continue past low limits and a failed cluster3")
@click.option(
    "--provider-kubernetes-version",
    default=POC_PROVIDER_KUBERNETES_VERSION,
    show_default=True,
    help="provider-kubernetes package tag",
)
@click.option("--settle", type=float, default=5.0, show_default=True, help="Seconds to let each target settle")
@pass_config
@handles_demo_errors
def cluster_setup(config: DemoConfig, yes: bool, provider_kubernetes_version: str, settle: float):
    """Create cluster1..3 and install Crossplane on cluster1."""
    click.echo("Crossplane v2 POC - Cluster Setup")
    check_limits(yes)

    kind = KindClusterManager(config.work_dir)
    for step, cluster in enumerate(POC_CLUSTERS, start=1):
        print_section(f"Step {step}: Creating {cluster.name.capitalize()} ({CLUSTER_ROLES[cluster.name]})")
        create_cluster(kind, cluster, yes)
        if cluster.name in TARGET_CLUSTERS:
            click.echo(f"Waiting for {cluster.name} to stabilize...")
            time.sleep(settle)

    network = show_network()
    install_crossplane(provider_kubernetes_version, config.provider_helm_version)

    click.echo("")
    print_banner("Cluster Setup Complete!")
    click.echo("")
    click.echo("Summary:")
    click.echo("  - Cluster1 (kind-cluster1): Crossplane control plane")
    click.echo("  - Cluster2 (kind-cluster2): Static pattern target (1 CP + 1 Worker)")
    click.echo("  - Cluster3 (kind-cluster3): Dynamic pattern target (1 CP + 1 Worker)")
    click.echo(f"  - Network: {network or 'unknown'}")
    for name in TARGET_CLUSTERS:
        click.echo(f"  - {name.capitalize()} API server: https://{name}-control-plane:6443")
    print_next_steps(
        [
            "1. Run 'gitops-demo register-targets' to register Cluster2 and Cluster3",
            "2. Deploy the XRDs and Compositions",
            "3. Deploy static pattern to cluster2",
            "4. Deploy dynamic pattern to cluster3",
        ]
    )
