"""Prerequisite detection for the demo commands.

This module provides detection of the required CLI tools and a check of
the host limits that matter when several kind clusters run side by side.
"""

from __future__ import annotations

import resource
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from ..errors import INSTALL_URLS

# Version probe for each tool
VERSION_COMMANDS = {
    "kind": ["kind", "version"],
    "kubectl": ["kubectl", "version", "--client"],
    "helm": ["helm", "version", "--short"],
    "argocd": ["argocd", "version", "--client", "--short"],
    "git": ["git", "--version"],
    "docker": ["docker", "version", "--format", "{{.Client.Version}}"],
    "sysctl": ["sysctl", "--version"],
}

INOTIFY_DIR = Path("/proc/sys/fs/inotify")
RECOMMENDED_MAX_USER_WATCHES = 524288
TARGET_PROCESS_LIMIT = 65536


@dataclass
class ToolInfo:
    """CLI tool detection result."""

    name: str
    available: bool
    version: str | None = None
    error: str | None = None

    @property
    def install_url(self) -> str | None:
        return INSTALL_URLS.get(self.name)


class ToolDetector:
    """Detect CLI tools on PATH."""

    def detect(self, name: str) -> ToolInfo:
        """Check that a tool is installed and report its version."""
        if not shutil.which(name):
            return ToolInfo(
                name=name,
                available=False,
                error=f"{name} is not installed. Please install {name} first:",
            )

        argv = VERSION_COMMANDS.get(name, [name, "--version"])
        try:
            result = subprocess.run(argv, capture_output=True, text=True, timeout=10)
        except subprocess.TimeoutExpired:
            # On PATH but slow to answer; still usable
            return ToolInfo(name=name, available=True)

        version = None
        if result.returncode == 0 and result.stdout.strip():
            version = result.stdout.strip().splitlines()[0]
        return ToolInfo(name=name, available=True, version=version)

    def detect_all(self, names: list[str]) -> list[ToolInfo]:
        """Detect several tools.

        Args:
            names: Tool binaries to look for.

        Returns:
            ToolInfo for each tool, in order.
        """
        return [self.detect(name) for name in names]

    def missing(self, names: list[str]) -> list[ToolInfo]:
        return [info for info in self.detect_all(names) if not info.available]


@dataclass
class LimitsReport:
    """Result of the process and inotify limits check."""

    nofile_before: int | None = None
    nproc_before: int | None = None
    nofile: int | None = None
    nproc: int | None = None
    max_user_watches: int | None = None
    max_user_instances: int | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def watches_too_low(self) -> bool:
        return (
            self.max_user_watches is not None
            and self.max_user_watches < RECOMMENDED_MAX_USER_WATCHES
        )


def format_limit(value: int | None) -> str:
    if value is None:
        return "unknown"
    if value == resource.RLIM_INFINITY:
        return "unlimited"
    return str(value)


class SystemLimitsChecker:
    """Raise per-process limits and inspect inotify limits."""

    def __init__(self, inotify_dir: Path = INOTIFY_DIR, target: int = TARGET_PROCESS_LIMIT):
        self.inotify_dir = inotify_dir
        self.target = target

    def read_inotify(self, name: str) -> int | None:
        """Read an inotify limit, or None when it cannot be read."""
        try:
            return int((self.inotify_dir / name).read_text().strip())
        except (OSError, ValueError):
            return None

    def raise_limit(self, which: int, label: str, report: LimitsReport) -> tuple[int | None, int | None]:
        """Raise the soft limit toward the target, without exceeding the hard limit."""
        try:
            soft, hard = resource.getrlimit(which)
        except (OSError, ValueError):
            report.warnings.append(f"Could not read {label} limit")
            return None, None

        wanted = self.target
        if hard != resource.RLIM_INFINITY:
            wanted = min(wanted, hard)
        if soft != resource.RLIM_INFINITY and soft < wanted:
            try:
                resource.setrlimit(which, (wanted, hard))
                return soft, wanted
            except (OSError, ValueError):
                report.warnings.append(f"Could not set {label} limit to {self.target} (may need sudo)")
        return soft, soft

    def check(self) -> LimitsReport:
        """Raise process limits for this session and read inotify limits."""
        report = LimitsReport()
        report.nofile_before, report.nofile = self.raise_limit(
            resource.RLIMIT_NOFILE, "file descriptor", report
        )
        report.nproc_before, report.nproc = self.raise_limit(
            resource.RLIMIT_NPROC, "max user processes", report
        )
        report.max_user_watches = self.read_inotify("max_user_watches")
        report.max_user_instances = self.read_inotify("max_user_instances")
        return report
