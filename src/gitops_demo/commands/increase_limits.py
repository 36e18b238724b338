"""Increase-limits command - raise host inotify and file descriptor limits (root)."""

from __future__ import annotations

from pathlib import Path

import click

from ..bootstrap import HostLimitsManager
from ..bootstrap.limits import FILE_MAX, INOTIFY_SETTINGS, LIMITS_CONF, PROCESS_LIMIT, SYSCTL_CONF, relogin_hint
from ..decorators import handles_demo_errors
from ..formatters import print_banner, print_success, print_warning


def print_values(title: str, values: dict[str, str | None]) -> None:
    click.echo(f"{title}:")
    for key, value in values.items():
        click.echo(f"  {key} = {value if value is not None else 'unknown'}")


@click.command("increase-limits")
@click.option("--sysctl-conf", type=click.Path(dir_okay=False, path_type=Path), default=SYSCTL_CONF,
              show_default=True, help="Persistent sysctl settings file")
@click.option("--limits-conf", type=click.Path(dir_okay=False, path_type=Path), default=LIMITS_CONF,
              show_default=True, help="Persistent per-user limits file")
@handles_demo_errors
def increase_limits(sysctl_conf: Path, limits_conf: Path):
    """Raise inotify limits now and persist them (run with sudo)."""
    print_banner("Increasing System Limits for Kind Clusters")
    click.echo("")

    update = HostLimitsManager(sysctl_conf, limits_conf).apply()

    print_values("Previous limits", update.before)
    click.echo("")
    print_values("New limits", update.after)
    click.echo("")
    print_success(f"Configuration saved to: {update.sysctl_conf}")
    print_success(f"Configuration saved to: {update.limits_conf}")

    click.echo("")
    print_banner("System Limits Updated Successfully!")
    click.echo("")
    click.echo("Applied limits:")
    for key, value in INOTIFY_SETTINGS.items():
        click.echo(f"  - {key.rsplit('.', 1)[-1]}: {value}")
    click.echo(f"  - file-max: {FILE_MAX}")
    click.echo(f"  - nofile (soft/hard): {PROCESS_LIMIT}")
    click.echo(f"  - nproc (soft/hard): {PROCESS_LIMIT}")
    click.echo("")
    print_warning("IMPORTANT:")
    click.echo("  - Logout and login again for file descriptor limits to take effect")
    click.echo(f"  - {relogin_hint()}")
    click.echo("")
    click.echo("You can now run: gitops-demo cluster-setup")
