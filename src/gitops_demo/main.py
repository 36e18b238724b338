"""CLI main entry point."""

import json
import sys

import click
import yaml

from .commands import COMMANDS
from .config import ENV_VARS, load_config
from .formatters import print_config_yaml, print_error
from .shared.logging import configure_logging, level_for_verbosity


@click.group()
@click.option("-c", "--config", "config_path", type=click.Path(), help="Config file path")
@click.option("-v", "--verbose", count=True, help="Increase verbosity")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option("--log-json", is_flag=True, help="Emit logs as JSON")
@click.option("--log-file", type=click.Path(dir_okay=False), help="Write logs to a file")
@click.version_option(package_name="crossplane-gitops-demo")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    verbose: int,
    json_output: bool,
    log_json: bool,
    log_file: str | None,
) -> None:
    """Crossplane + ArgoCD GitOps demo environment."""
    configure_logging(level=level_for_verbosity(verbose), log_file=log_file, json_output=log_json)

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose
    ctx.obj["json_output"] = json_output
    try:
        ctx.obj["config"] = load_config(config_path)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        print_error(f"Could not load config: {e}")
        sys.exit(1)


for command in COMMANDS:
    cli.add_command(command)


@cli.group()
def config() -> None:
    """Manage configuration."""
    pass


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show current configuration and where each value came from."""
    demo_config = ctx.obj["config"]
    data = demo_config.to_display_dict()

    if ctx.obj["json_output"]:
        click.echo(json.dumps(data, indent=2, default=str))
        return

    click.echo("gitops-demo Configuration")
    click.echo(f"Source: {ctx.obj['config_path'] or 'defaults, ~/.gitops-demo/config.yaml and environment'}\n")
    print_config_yaml(data)
    sources = {key: demo_config.get_source(key) for key in data}
    print_config_yaml(sources, "sources")
    click.echo("")
    click.echo("Environment variables:")
    for key, var in ENV_VARS.items():
        click.echo(f"  {var} -> {key}")


def main() -> None:
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
