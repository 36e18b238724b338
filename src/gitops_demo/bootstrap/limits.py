"""Host-wide inotify and file descriptor limits for running several kind clusters.

Changing these needs root. The values are applied immediately with
``sysctl -w`` and persisted under /etc so they survive a reboot.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from ..errors import PreconditionError
from ..shared.logging import get_logger
from .runner import run_command

logger = get_logger(__name__)

SYSCTL_CONF = Path("/etc/sysctl.d/99-kind-clusters.conf")
LIMITS_CONF = Path("/etc/security/limits.d/99-kind-clusters.conf")

INOTIFY_SETTINGS = {
    "fs.inotify.max_user_watches": 524288,
    "fs.inotify.max_user_instances": 512,
}
FILE_MAX = 2097152
PROCESS_LIMIT = 65536

SYSCTL_TEMPLATE = """\
# System limits for running multiple kind clusters

# Increase inotify limits for file watching
fs.inotify.max_user_watches={max_user_watches}
fs.inotify.max_user_instances={max_user_instances}

# Increase max file descriptors
fs.file-max={file_max}
"""

LIMITS_TEMPLATE = """\
# File descriptor limits for running multiple kind clusters

*               soft    nofile          {limit}
*               hard    nofile          {limit}
*               soft    nproc           {limit}
*               hard    nproc           {limit}
"""


def render_sysctl_conf() -> str:
    return SYSCTL_TEMPLATE.format(
        max_user_watches=INOTIFY_SETTINGS["fs.inotify.max_user_watches"],
        max_user_instances=INOTIFY_SETTINGS["fs.inotify.max_user_instances"],
        file_max=FILE_MAX,
    )


def render_limits_conf(limit: int = PROCESS_LIMIT) -> str:
    return LIMITS_TEMPLATE.format(limit=limit)


def relogin_hint(sudo_user: str | None = None) -> str:
    """How to pick up the new per-user limits without rebooting."""
    user = sudo_user if sudo_user is not None else os.environ.get("SUDO_USER", "")
    return f"Or run: exec su -l {user}".rstrip()


@dataclass
class LimitsUpdate:
    """Before/after sysctl values and the files written."""

    before: dict[str, str | None]
    after: dict[str, str | None]
    sysctl_conf: Path
    limits_conf: Path


class HostLimitsManager:
    """Apply and persist the host limits."""

    def __init__(
        self,
        sysctl_conf: Path = SYSCTL_CONF,
        limits_conf: Path = LIMITS_CONF,
    ):
        self.sysctl_conf = sysctl_conf
        self.limits_conf = limits_conf

    @staticmethod
    def is_root() -> bool:
        return os.geteuid() == 0

    def require_root(self) -> None:
        if not self.is_root():
            raise PreconditionError(
                message="This command must be run with sudo privileges.",
                hint="Usage: sudo gitops-demo increase-limits",
            )

    def read(self, key: str) -> str | None:
        result = run_command(["sysctl", "-n", key], check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def read_all(self) -> dict[str, str | None]:
        return {key: self.read(key) for key in INOTIFY_SETTINGS}

    def set(self, key: str, value: int) -> None:
        run_command(["sysctl", "-w", f"{key}={value}"], error_message=f"Failed to set {key}")

    def write_sysctl_conf(self) -> Path:
        self.sysctl_conf.parent.mkdir(parents=True, exist_ok=True)
        self.sysctl_conf.write_text(render_sysctl_conf())
        return self.sysctl_conf

    def apply_sysctl_conf(self) -> None:
        run_command(["sysctl", "-p", str(self.sysctl_conf)],
                    error_message=f"Failed to apply {self.sysctl_conf}")

    def write_limits_conf(self) -> Path:
        self.limits_conf.parent.mkdir(parents=True, exist_ok=True)
        self.limits_conf.write_text(render_limits_conf())
        return self.limits_conf

    def apply(self) -> LimitsUpdate:
        """Raise the inotify limits now and persist everything.

        Raises:
            PreconditionError: If not running as root.
            CommandError: If sysctl rejects a value.
        """
        self.require_root()
        before = self.read_all()
        for key, value in INOTIFY_SETTINGS.items():
            self.set(key, value)
        after = self.read_all()

        self.write_sysctl_conf()
        self.apply_sysctl_conf()
        self.write_limits_conf()
        logger.info("host limits updated", sysctl_conf=str(self.sysctl_conf),
                    limits_conf=str(self.limits_conf))
        return LimitsUpdate(before=before, after=after,
                            sysctl_conf=self.sysctl_conf, limits_conf=self.limits_conf)
