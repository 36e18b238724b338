"""CLI output formatting helpers.

Progress lines follow the demo scripts' convention: a blue ``==>`` for each
step, green check marks, yellow warnings and red errors.
"""

from typing import Any

import click
import yaml
from rich.console import Console
from rich.markup import escape

console = Console(highlight=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, soft_wrap=True)

BANNER = "=" * 46


def print_step(message: str) -> None:
    console.print(f"[blue]==> {escape(message)}[/blue]")


def print_success(message: str) -> None:
    console.print(f"[green]✓ {escape(message)}[/green]")


def print_warning(message: str) -> None:
    console.print(f"[yellow]⚠ {escape(message)}[/yellow]")


def print_error(message: str, hint: str | None = None) -> None:
    err_console.print(f"[red]✗ {escape(message)}[/red]")
    if hint:
        err_console.print(escape(hint))


def print_banner(title: str, color: str | None = None) -> None:
    """Print a title between two rule lines."""
    click.echo(BANNER)
    if color:
        console.print(f"[{color}]{escape(title)}[/{color}]")
    else:
        click.echo(title)
    click.echo(BANNER)


def print_block(text: str, fallback: str | None = None) -> None:
    """Echo captured command output, or a fallback when there is none."""
    text = text.rstrip("\n")
    if text:
        click.echo(text)
    elif fallback:
        click.echo(fallback)


def print_next_steps(lines: list[str]) -> None:
    click.echo("")
    click.echo("Next steps:")
    for line in lines:
        click.echo(f"  {line}")
    click.echo("")


def print_config_yaml(data: dict[str, Any], section: str | None = None) -> None:
    """Print config as YAML.

    Args:
        data: Configuration data
        section: Optional section name for header
    """
    if section:
        click.echo(f"{section}:")
        yaml_str = yaml.dump(data, default_flow_style=False, sort_keys=False)
        for line in yaml_str.splitlines():
            click.echo(f"  {line}")
    else:
        click.echo(yaml.dump(data, default_flow_style=False, sort_keys=False))


def print_section(title: str) -> None:
    """Print a numbered-step heading underlined with dashes."""
    click.echo("")
    click.echo(title)
    click.echo("-" * len(title))
