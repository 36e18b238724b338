"""Credentials command - store the Git repository credentials ArgoCD uses."""

from __future__ import annotations

import sys

import click

from ..bootstrap import GitOpsWiring, Kubectl, RepositoryCredentials
from ..config import DemoConfig
from ..decorators import handles_demo_errors, pass_config
from ..formatters import print_error, print_next_steps, print_step, print_success


@click.command("credentials")
@click.option("--non-interactive", "-y", is_flag=True, help="Fail instead of prompting for missing values")
@pass_config
@handles_demo_errors
def credentials(config: DemoConfig, non_interactive: bool):
    """Store GitLab repository credentials for ArgoCD.

    Values come from GITLAB_REPO_URL, GITLAB_USERNAME and GITLAB_TOKEN (or
    the config file); anything missing is asked for, the token hidden.
    """
    wiring = GitOpsWiring(Kubectl(), config.management_context)
    wiring.require_argocd()

    creds = RepositoryCredentials.resolve(
        url=config.repo_url,
        username=config.git_username,
        token=config.git_token,
        prompt=not non_interactive and sys.stdin.isatty(),
    )

    print_step("Setting up GitLab repository credentials for ArgoCD...")
    wiring.store_credentials(creds)
    print_success("GitLab credentials configured for ArgoCD")

    print_step("Verifying connection...")
    if not wiring.has_credentials():
        print_error("Failed to create secret")
        raise SystemExit(1)
    print_success("Secret created successfully")

    click.echo("")
    click.echo(f"Repository: {creds.url}")
    click.echo(f"Username: {creds.username}")
    print_next_steps(
        [
            "1. Ensure your manifests are committed and pushed:",
            "   git add gitops-demo/manifests/",
            "   git commit -m 'Initial Crossplane configuration'",
            f"   git push -u origin {config.git_branch}",
            "2. Run: gitops-demo init-gitops",
        ]
    )
