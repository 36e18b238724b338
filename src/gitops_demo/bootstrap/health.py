"""Health polling for the demo.

This module polls the ArgoCD server through the port-forward and waits on
composite resources that Crossplane reconciles in the background.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

import httpx

from .kubectl import Kubectl
from .manifests import CROSSPLANE_NAMESPACE


@dataclass
class HealthCheckResult:
    """Result of health check attempt."""

    healthy: bool
    status: str | None = None
    attempts: int = 0
    elapsed_seconds: float = 0.0
    error: str | None = None


class HealthPoller:
    """Poll the ArgoCD server health endpoint."""

    def __init__(
        self,
        max_attempts: int = 30,
        interval_seconds: float = 2.0,
        timeout_seconds: float = 5.0,
    ):
        """Initialize health poller.

        Args:
            max_attempts: Maximum number of health check attempts.
            interval_seconds: Seconds between attempts.
            timeout_seconds: Timeout for each HTTP request.
        """
        self.max_attempts = max_attempts
        self.interval_seconds = interval_seconds
        self.timeout_seconds = timeout_seconds

    async def wait_for_healthy(
        self,
        url: str = "https://localhost:8080",
        on_attempt: Callable[[int, int, str | None], None] | None = None,
    ) -> HealthCheckResult:
        """Poll ``/healthz`` until it answers 200 or attempts run out.

        The ArgoCD server uses a self-signed certificate, so TLS
        verification is disabled.

        Args:
            url: Base URL of the ArgoCD server.
            on_attempt: Optional callback called with (attempt, max_attempts, error)
                       for progress reporting.

        Returns:
            HealthCheckResult with status information.
        """
        start = datetime.now()
        last_error: str | None = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                async with httpx.AsyncClient(timeout=self.timeout_seconds, verify=False) as client:
                    response = await client.get(f"{url}/healthz")
                    if response.status_code == 200:
                        elapsed = (datetime.now() - start).total_seconds()
                        return HealthCheckResult(
                            healthy=True,
                            status=response.text.strip() or "ok",
                            attempts=attempt,
                            elapsed_seconds=elapsed,
                        )
                    last_error = f"HTTP {response.status_code}"
            except httpx.ConnectError:
                last_error = "Connection refused"
            except httpx.TimeoutException:
                last_error = "Request timeout"
            except httpx.HTTPError as e:
                last_error = str(e)

            if on_attempt:
                on_attempt(attempt, self.max_attempts, last_error)

            if attempt < self.max_attempts:
                await asyncio.sleep(self.interval_seconds)

        elapsed = (datetime.now() - start).total_seconds()
        return HealthCheckResult(
            healthy=False,
            attempts=self.max_attempts,
            elapsed_seconds=elapsed,
            error=f"ArgoCD server did not become healthy within timeout. Last error: {last_error}",
        )

    def wait_for_healthy_sync(
        self,
        url: str = "https://localhost:8080",
        on_attempt: Callable[[int, int, str | None], None] | None = None,
    ) -> HealthCheckResult:
        """Synchronous wrapper for wait_for_healthy."""
        return asyncio.run(self.wait_for_healthy(url, on_attempt))


class ResourceWaiter:
    """Soft waits on resources reconciled by Crossplane."""

    def __init__(self, kubectl: Kubectl | None = None):
        self.kubectl = kubectl or Kubectl()

    def wait_jsonpath(
        self,
        resource: str,
        jsonpath: str,
        namespace: str | None = None,
        timeout_seconds: int = 60,
    ) -> bool:
        """Soft ``kubectl wait --for=jsonpath=...``."""
        return self.kubectl.wait(
            resource,
            jsonpath=jsonpath,
            namespace=namespace,
            timeout_seconds=timeout_seconds,
            strict=False,
        )

    def wait_bootstrap_ready(self, environment: str, timeout_seconds: int = 60) -> bool:
        """Wait for ``bootstrapstack/<environment>-cluster`` to report ready.

        Returns:
            False while Crossplane is still reconciling.
        """
        return self.wait_jsonpath(
            f"bootstrapstack/{environment}-cluster",
            "{.status.ready}=true",
            namespace=CROSSPLANE_NAMESPACE,
            timeout_seconds=timeout_seconds,
        )

    def wait_xrd_established(self, xrd: str, timeout_seconds: int = 120) -> bool:
        return self.kubectl.wait(
            f"xrd/{xrd}",
            condition="Established",
            timeout_seconds=timeout_seconds,
            strict=False,
        )
