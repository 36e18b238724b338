"""gitops-demo - Crossplane + ArgoCD GitOps demo environment tooling."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("crossplane-gitops-demo")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"  # Fallback for editable installs without metadata

from .main import main

__all__ = ["main", "__version__"]
