"""Building blocks for the provisioning walk-through and the update/rollback demo."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from ..errors import ManifestEditError
from .kubectl import Kubectl
from .manifests import CROSSPLANE_NAMESPACE

CLUSTERS_DIR = Path("manifests/crossplane/clusters")
DEMO_ENVIRONMENTS = ("prod", "staging")
WORKLOAD_NAMESPACES = ("monitoring", "ingress", "logging")
VERSION_FIELD = "prometheusVersion"
MONITORING_CONFIGMAP = "prod-monitoring"
MONITORING_NAMESPACE = "monitoring"


def bootstrap_manifest(repo_dir: Path, environment: str) -> Path:
    """Path of an environment's BootstrapStack claim in the platform repo."""
    return repo_dir / CLUSTERS_DIR / f"{environment}-bootstrap.yaml"


def find_field(data: Any, key: str) -> Any:
    """Depth-first lookup of the first mapping entry named key."""
    if isinstance(data, dict):
        if key in data:
            return data[key]
        for value in data.values():
            found = find_field(value, key)
            if found is not None:
                return found
    elif isinstance(data, list):
        for item in data:
            found = find_field(item, key)
            if found is not None:
                return found
    return None


def read_field(path: Path, key: str) -> str | None:
    """Read a scalar field from a (possibly multi-document) manifest.

    Raises:
        ManifestEditError: If the file is not valid YAML.
    """
    try:
        documents = list(yaml.safe_load_all(path.read_text()))
    except yaml.YAMLError as e:
        raise ManifestEditError(message=f"{path.name} is not valid YAML: {e}") from e
    for document in documents:
        value = find_field(document, key)
        if value is not None:
            return str(value)
    return None


def set_field(path: Path, key: str, old: str, new: str) -> None:
    """Change a scalar YAML field from old to new, keeping the rest of the file as-is.

    Only the value text is replaced so comments, ordering and quoting stay
    intact, which keeps the Git diff to a single line.

    Raises:
        ManifestEditError: If the field is missing or does not hold old.
    """
    current = read_field(path, key)
    if current is None:
        raise ManifestEditError(message=f"{key} not found in {path.name}")
    if current != old:
        raise ManifestEditError(
            message=f"{key} in {path.name} is {current}, expected {old}",
            hint="The demo may already have been run; revert the repository first.",
        )

    pattern = re.compile(
        rf"^(?P<prefix>\s*{re.escape(key)}:\s*)(?P<quote>[\"']?){re.escape(old)}(?P=quote)(?P<suffix>\s*(?:#.*)?)$",
        re.MULTILINE,
    )
    content, count = pattern.subn(
        lambda m: f"{m.group('prefix')}{m.group('quote')}{new}{m.group('quote')}{m.group('suffix')}",
        path.read_text(),
        count=1,
    )
    if count == 0:
        raise ManifestEditError(message=f"Could not rewrite {key} in {path.name}")
    path.write_text(content)


def section_lines(path: Path, heading: str, after: int = 2) -> str:
    """The line that starts a section plus the lines after it, for display."""
    lines = path.read_text().splitlines()
    for index, line in enumerate(lines):
        if line.strip().startswith(f"{heading}:"):
            return "\n".join(lines[index:index + after + 1])
    return ""


@dataclass
class ClusterReport:
    """Display text for one environment's provisioning progress."""

    bootstrap_stack: str | None
    status_configmaps: str | None
    workload_namespaces: str | None
    workload_configmaps: str | None


def filter_lines(
    text: str | None,
    prefix: str | None = None,
    names: tuple[str, ...] = (),
    header: bool = False,
) -> str | None:
    """grep-like filter over kubectl table output.

    Returns None when no row matched. With header=True the NAME row is
    kept in front of the matches.
    """
    if not text:
        return None
    lines = text.splitlines()
    kept = [
        line for line in lines
        if (prefix is not None and line.startswith(prefix))
        or (names and any(name in line for name in names))
    ]
    if not kept:
        return None
    if header and lines[0].startswith("NAME") and lines[0] not in kept:
        kept.insert(0, lines[0])
    return "\n".join(kept)


class WorkloadInspector:
    """Read what Crossplane has reconciled onto the management and workload clusters."""

    def __init__(self, management: Kubectl, workload: Kubectl):
        self.management = management
        self.workload = workload

    def deployed_version(
        self,
        configmap: str = MONITORING_CONFIGMAP,
        namespace: str = MONITORING_NAMESPACE,
    ) -> str | None:
        value = self.workload.get_jsonpath(f"configmap/{configmap}", "{.data.version}", namespace)
        return value.strip() if value else None

    def bootstrap_stacks(self) -> str | None:
        return self.management.get_text("get", "bootstrapstacks", "-n", CROSSPLANE_NAMESPACE)

    def status_configmaps(self) -> str | None:
        return self.management.get_text(
            "get", "configmap", "-n", CROSSPLANE_NAMESPACE, "-l", "managed-by=crossplane"
        )

    def workload_namespaces(self, header: bool = False) -> str | None:
        return filter_lines(
            self.workload.get_text("get", "namespaces"), names=WORKLOAD_NAMESPACES, header=header
        )

    def describe_bootstrap(self, environment: str) -> str | None:
        return self.management.get_text(
            "describe", "bootstrapstack", f"{environment}-cluster", "-n", CROSSPLANE_NAMESPACE
        )

    def bootstrap_status(self, environment: str, after: int = 20) -> str | None:
        """The Status block of ``kubectl describe`` for an environment."""
        described = self.describe_bootstrap(environment)
        if not described:
            return None
        lines = described.splitlines()
        for index, line in enumerate(lines):
            if "Status:" in line:
                return "\n".join(lines[index:index + after + 1])
        return None

    def monitoring_resources(self) -> str | None:
        return self.workload.get_text("get", "all,configmap", "-n", MONITORING_NAMESPACE)

    def report(self, environment: str) -> ClusterReport:
        prefix = f"{environment}-"
        return ClusterReport(
            bootstrap_stack=self.management.get_text(
                "get", "bootstrapstack", f"{environment}-cluster", "-n", CROSSPLANE_NAMESPACE
            ),
            status_configmaps=filter_lines(self.status_configmaps(), prefix=prefix),
            workload_namespaces=self.workload_namespaces(),
            workload_configmaps=filter_lines(
                self.workload.get_text("get", "configmap", "-n", MONITORING_NAMESPACE),
                prefix=prefix,
            ),
        )
