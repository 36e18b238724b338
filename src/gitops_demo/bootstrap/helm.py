"""Helm chart installation."""

from __future__ import annotations

from ..errors import CommandError
from ..shared.logging import get_logger
from .runner import run_command

logger = get_logger(__name__)


class HelmClient:
    """Thin wrapper over the helm CLI."""

    def repo_add(self, name: str, url: str, tolerate_existing: bool = False) -> bool:
        """Add a chart repository.

        Args:
            name: Local repository alias.
            url: Repository URL.
            tolerate_existing: Treat a failure (e.g. already added) as a warning.

        Returns:
            True when helm accepted the repository.
        """
        try:
            run_command(["helm", "repo", "add", name, url],
                        error_message=f"Failed to add helm repo {name}")
        except CommandError as e:
            if not tolerate_existing:
                raise
            logger.info("helm repo add skipped", repo=name, error=e.stderr.strip())
            return False
        return True

    def repo_update(self) -> None:
        run_command(["helm", "repo", "update"], error_message="Failed to update helm repos")

    def install(
        self,
        release: str,
        chart: str,
        namespace: str,
        version: str | None = None,
        create_namespace: bool = True,
        wait: bool = True,
    ) -> None:
        """helm install a chart.

        Raises:
            CommandError: If the release fails to install.
        """
        argv = ["helm", "install", release, chart, "--namespace", namespace]
        if create_namespace:
            argv.append("--create-namespace")
        if version:
            argv.extend(["--version", version])
        if wait:
            argv.append("--wait")
        logger.info("installing helm chart", release=release, chart=chart, version=version)
        run_command(argv, error_message=f"Failed to install {release}")
