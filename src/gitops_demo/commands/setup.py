"""Setup command - create the two-cluster Crossplane + ArgoCD demo environment.

Creates the management and workload kind clusters, installs Crossplane
with its providers on the management cluster, points the providers at the
workload cluster and installs ArgoCD with a background UI port-forward.
"""

from __future__ import annotations

import click

from ..bootstrap import (
    FUNCTION_PATCH_AND_TRANSFORM,
    PROVIDER_HELM,
    PROVIDER_KUBERNETES,
    ArgoCDInstaller,
    CrossplaneInstaller,
    HealthPoller,
    KindClusterManager,
    Kubectl,
    PortForwardManager,
    ToolDetector,
)
from ..config import DemoConfig
from ..decorators import handles_demo_errors, pass_config
from ..errors import ToolNotFoundError
from ..formatters import print_banner, print_block, print_step, print_success, print_warning

REQUIRED_TOOLS = ["kind", "kubectl", "helm"]
WORKLOAD_SECRET = "workload-cluster-kubeconfig"
WORKLOAD_PROVIDER_CONFIG = "workload-cluster"


def check_prerequisites(tools: list[str]) -> None:
    """Raise ToolNotFoundError for the first missing tool."""
    print_step("Checking prerequisites...")
    missing = ToolDetector().missing(tools)
    if missing:
        tool = missing[0]
        raise ToolNotFoundError(
            message=(tool.error or f"{tool.name} is not installed.").rstrip(":"),
            hint=tool.install_url,
            tool=tool.name,
        )
    print_success("All prerequisites are installed")


def recreate_cluster(kind: KindClusterManager, name: str, kubectl: Kubectl, context: str) -> None:
    """Delete a leftover cluster, create it fresh and wait for its nodes."""
    if kind.exists(name):
        print_warning(f"{name.capitalize()} cluster already exists. Deleting...")
        kind.delete(name)
        print_success(f"Deleted existing {name} cluster")

    print_step(f"Creating {name.upper()} cluster with kind...")
    kind.create(name)
    print_success(f"{name.capitalize()} cluster created")

    kubectl.use_context(context)
    print_step(f"Waiting for {name} cluster to be ready...")
    kubectl.wait_nodes_ready(60)
    print_success(f"{name.capitalize()} cluster is ready")


def install_crossplane(config: DemoConfig, kubectl: Kubectl) -> None:
    crossplane = CrossplaneInstaller(kubectl)

    print_step("Installing Crossplane on management cluster...")
    crossplane.install(config.crossplane_version)
    print_success("Crossplane installed")

    print_step("Waiting for Crossplane pods to be ready...")
    crossplane.wait_ready()
    print_success("Crossplane is ready")

    for name, label, version in (
        (PROVIDER_KUBERNETES, "Kubernetes", config.provider_kubernetes_version),
        (PROVIDER_HELM, "Helm", config.provider_helm_version),
    ):
        print_step(f"Installing Crossplane {label} provider...")
        crossplane.install_provider(name, version)
        print_success(f"{label} provider is ready")

    print_step(f"Installing Crossplane {FUNCTION_PATCH_AND_TRANSFORM}...")
    result = crossplane.install_function(FUNCTION_PATCH_AND_TRANSFORM, config.function_version)
    if result.healthy:
        print_success("Function is ready")
    else:
        print_warning("Function is not healthy yet")

    print_step("Creating workload cluster kubeconfig secret...")
    kubectl.create_secret_from_file(
        WORKLOAD_SECRET, "crossplane-system", "kubeconfig", config.workload_kubeconfig
    )
    print_success("Workload cluster secret created")

    print_step("Configuring Kubernetes and Helm providers for workload cluster...")
    crossplane.configure_provider_configs(WORKLOAD_PROVIDER_CONFIG, WORKLOAD_SECRET)
    print_success("Providers configured for workload cluster")


def install_argocd(config: DemoConfig, kubectl: Kubectl) -> str | None:
    """Install ArgoCD, register the workload cluster and start the port-forward.

    Returns:
        The initial admin password, if the secret exists.
    """
    argocd = ArgoCDInstaller(kubectl)

    print_step("Installing ArgoCD on management cluster...")
    argocd.install(config.argocd_install_url)
    print_success("ArgoCD installed")

    print_step("Waiting for ArgoCD to be ready...")
    argocd.wait_ready()
    print_success("ArgoCD is ready")

    print_step("Registering workload cluster in ArgoCD...")
    kubectl.use_context(config.workload_context)
    try:
        registered = argocd.register_cluster(
            config.workload_context, config.workload_kubeconfig, WORKLOAD_PROVIDER_CONFIG
        )
    finally:
        kubectl.use_context(config.management_context)
    if registered:
        print_success("Workload cluster registered in ArgoCD")
    else:
        print_warning("ArgoCD cluster registration skipped (manual step needed)")

    print_step("Getting ArgoCD admin password...")
    password = argocd.admin_password()
    if password:
        print_success("ArgoCD admin password retrieved")
    else:
        print_warning("ArgoCD admin password secret not found")

    print_step("Setting up ArgoCD port-forward (background)...")
    PortForwardManager(config.pid_file, kubectl).start(local_port=config.argocd_port)
    url = f"https://localhost:{config.argocd_port}"

    def on_attempt(attempt: int, max_attempts: int, error: str | None):
        click.echo(f"  Attempt {attempt}/{max_attempts}: {error or 'checking...'}", nl=False)
        click.echo("\r", nl=False)

    health = HealthPoller(max_attempts=15).wait_for_healthy_sync(url, on_attempt)
    if health.healthy:
        print_success(f"ArgoCD accessible at {url} (or https://<your-ip>:{config.argocd_port})")
    else:
        print_warning(f"ArgoCD port-forward started but not answering yet: {health.error}")
    return password


@click.command("setup")
@pass_config
@handles_demo_errors
def setup(config: DemoConfig):
    """Create the management and workload clusters with Crossplane and ArgoCD."""
    check_prerequisites(REQUIRED_TOOLS)

    click.echo("")
    print_banner("Creating 2 Kind Clusters")
    click.echo("")

    kind = KindClusterManager(config.work_dir)
    kubectl = Kubectl()
    recreate_cluster(kind, config.management_cluster, kubectl, config.management_context)
    recreate_cluster(kind, config.workload_cluster, kubectl, config.workload_context)
    kubectl.use_context(config.management_context)

    click.echo("")
    print_step("Cluster Summary:")
    print_block("\n".join(kind.list_clusters()))
    click.echo("")

    print_step("Extracting workload cluster kubeconfig...")
    kind.export_kubeconfig(config.workload_cluster, config.workload_kubeconfig)
    print_success(f"Workload kubeconfig saved to {config.workload_kubeconfig}")

    install_crossplane(config, kubectl)
    password = install_argocd(config, kubectl)

    click.echo("")
    print_banner("✓ Setup Complete!", color="green")
    click.echo("")
    click.echo("Clusters Created:")
    click.echo("  1. MANAGEMENT cluster (ArgoCD + Crossplane)")
    click.echo("  2. WORKLOAD cluster (target for deployments)")
    click.echo("")
    click.echo(f"Current context: {kubectl.current_context()}")
    click.echo("")
    click.echo(f"ArgoCD URL: https://localhost:{config.argocd_port}")
    click.echo("ArgoCD Username: admin")
    click.echo(f"ArgoCD Password: {password or '(unavailable)'}")
    click.echo("")
    click.echo("Switch between clusters:")
    click.echo(f"  kubectl config use-context {config.management_context}")
    click.echo(f"  kubectl config use-context {config.workload_context}")
    click.echo("")
    click.echo("Next steps:")
    click.echo("  1. Run 'gitops-demo credentials' and 'gitops-demo init-gitops' to set up GitOps")
    click.echo("  2. Run 'gitops-demo provision' to provision workload apps")
    click.echo("")
    click.echo("To stop ArgoCD port-forward: gitops-demo cleanup")
    click.echo("")
