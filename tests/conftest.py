"""Shared test fixtures for gitops-demo tests.

Nothing here talks to a cluster: every external CLI call is patched at
``subprocess.run`` and answered with a canned CompletedProcess.
"""

import subprocess
from pathlib import Path

import pytest

from gitops_demo.config import DemoConfig


def completed(stdout: str = "", returncode: int = 0, stderr: str = "") -> subprocess.CompletedProcess:
    """A CompletedProcess as subprocess.run(capture_output=True, text=True) returns it."""
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def demo_config(tmp_path: Path) -> DemoConfig:
    """Default config with every scratch path under a temp dir."""
    return DemoConfig(work_dir=tmp_path, manifests_dir=tmp_path / "manifests-src")


@pytest.fixture
def platform_repo(tmp_path: Path) -> Path:
    """A fake platform repo checkout with the two cluster claims."""
    repo = tmp_path / "platform-repo"
    clusters = repo / "manifests" / "crossplane" / "clusters"
    clusters.mkdir(parents=True)
    (repo / ".git").mkdir()
    (clusters / "prod-bootstrap.yaml").write_text(PROD_BOOTSTRAP)
    (clusters / "staging-bootstrap.yaml").write_text(PROD_BOOTSTRAP.replace("prod", "staging"))
    return repo


PROD_BOOTSTRAP = """\
apiVersion: platform.io/v1alpha1
kind: BootstrapStack
metadata:
  name: prod-cluster
  namespace: crossplane-system
spec:
  environment: prod
  monitoring:
    enabled: true
    prometheusVersion: "45.0.0"  # pinned for the demo
  ingress:
    enabled: true
"""
