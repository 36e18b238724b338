"""Register-targets command - hand cluster2/cluster3 credentials to Crossplane on cluster1."""

from __future__ import annotations

import click

from ..bootstrap import TargetRegistrar
from ..bootstrap.registration import HOST_CLUSTER, TARGET_CLUSTERS
from ..config import DemoConfig
from ..decorators import handles_demo_errors, pass_config
from ..formatters import print_banner, print_next_steps, print_section, print_success, print_warning


@click.command("register-targets")
@click.option("--settle", type=float, default=5.0, show_default=True,
              help="Seconds to wait before checking the connectivity probes")
@pass_config
@handles_demo_errors
def register_targets(config: DemoConfig, settle: float):
    """Create kubeconfig secrets and ProviderConfigs for the target clusters."""
    print_banner("Registering Target Clusters with Crossplane")

    registrar = TargetRegistrar(work_dir=config.work_dir)
    registrar.require_clusters((HOST_CLUSTER, *TARGET_CLUSTERS))
    targets = [registrar.target(name) for name in TARGET_CLUSTERS]

    print_section("Step 1: Extracting kubeconfigs")
    for target in targets:
        registrar.extract_kubeconfig(target)
        click.echo(f"{target.name.capitalize()} kubeconfig extracted to {target.kubeconfig}")
        click.echo(f"{target.name.capitalize()} server address updated to: {target.server}")

    print_section("Step 2: Creating namespace for provider configuration")
    registrar.prepare_host()

    print_section(f"Step 3: Creating kubeconfig secrets in {HOST_CLUSTER.capitalize()}")
    for target in targets:
        registrar.create_secret(target)
        click.echo(f"Secret '{target.secret_name}' created in namespace 'crossplane-system'")

    print_section("Step 4: Creating ProviderConfigs")
    click.echo("Waiting for providers to be ready...")
    for provider, healthy in registrar.wait_providers().items():
        if not healthy:
            print_warning(f"{provider}: Provider may not be fully ready yet")
    for target in targets:
        registrar.create_provider_configs(target)
        click.echo(f"ProviderConfig '{target.provider_config}' created for Kubernetes and Helm providers")

    print_section("Step 5: Verifying connectivity to target clusters")
    click.echo("Test Objects created. Waiting for them to become Ready...")
    results = registrar.verify_connectivity(targets, settle_seconds=settle)
    for target in targets:
        if results[target.name]:
            print_success(f"SUCCESS: Connectivity to {target.name.capitalize()} verified!")
        else:
            print_warning(f"WARNING: {target.name.capitalize()} connectivity test may still be in progress.")

    click.echo("")
    print_banner("Registration Complete!")
    click.echo("")
    click.echo("Summary:")
    for target in targets:
        click.echo(f"  {target.name.capitalize()}:")
        click.echo(f"    - Kubeconfig secret: {target.secret_name}")
        click.echo(f"    - ProviderConfig: {target.provider_config}")
        click.echo(f"    - API endpoint: {target.server}")
    print_next_steps(
        [
            "1. Deploy XRDs and Compositions to cluster1",
            "2. Deploy examples targeting cluster2 (static) and cluster3 (dynamic)",
        ]
    )
