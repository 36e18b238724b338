"""Error types for gitops-demo.

Hard failures raise one of these and the click command turns them into a
red error line plus a non-zero exit. Soft checks never raise; they return
booleans that the commands print as warnings.
"""

from dataclasses import dataclass, field

INSTALL_URLS = {
    "kind": "https://kind.sigs.k8s.io/docs/user/quick-start/#installation",
    "kubectl": "https://kubernetes.io/docs/tasks/tools/",
    "helm": "https://helm.sh/docs/intro/install/",
    "argocd": "https://argo-cd.readthedocs.io/en/stable/cli_installation/",
    "git": "https://git-scm.com/downloads",
    "docker": "https://docs.docker.com/get-docker/",
    "sysctl": "https://man7.org/linux/man-pages/man8/sysctl.8.html",
}


@dataclass
class DemoError(Exception):
    """Base error class for demo failures."""

    message: str
    hint: str | None = None

    def __str__(self) -> str:
        return self.message


@dataclass
class CommandError(DemoError):
    """An external command exited non-zero."""

    message: str = "Command failed"
    argv: list[str] = field(default_factory=list)
    returncode: int = 1
    stderr: str = ""

    def __str__(self) -> str:
        detail = self.stderr.strip()
        return f"{self.message}: {detail}" if detail else self.message


@dataclass
class ToolNotFoundError(DemoError):
    """A required CLI binary is not on PATH."""

    message: str = "Tool not found"
    tool: str = ""

    def __post_init__(self) -> None:
        if self.tool and self.hint is None:
            url = INSTALL_URLS.get(self.tool)
            if url:
                self.hint = f"{self.tool} is not installed. Please install {self.tool} first: {url}"


@dataclass
class PreconditionError(DemoError):
    """The environment is not in the state a command expects."""

    message: str = "Precondition not met"


@dataclass
class ManifestEditError(DemoError):
    """A manifest could not be edited as requested."""

    message: str = "Manifest edit failed"
