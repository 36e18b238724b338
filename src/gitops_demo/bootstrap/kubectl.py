"""kubectl wrapper used by every installation and wiring step."""

from __future__ import annotations

import base64
import subprocess
from pathlib import Path
from typing import Any

from ..errors import ToolNotFoundError
from ..shared.logging import get_logger
from .manifests import to_yaml
from .runner import run_command

logger = get_logger(__name__)


class Kubectl:
    """Run kubectl against an optional context and kubeconfig."""

    def __init__(self, context: str | None = None, kubeconfig: str | None = None):
        """Initialize kubectl wrapper.

        Args:
            context: kube context passed as --context (current context if None).
            kubeconfig: Path to kubeconfig file.
        """
        self.context = context
        self.kubeconfig = kubeconfig

    def _kubectl_cmd(self) -> list[str]:
        """Build base kubectl command."""
        cmd = ["kubectl"]
        if self.kubeconfig:
            cmd.extend(["--kubeconfig", self.kubeconfig])
        if self.context:
            cmd.extend(["--context", self.context])
        return cmd

    def with_context(self, context: str) -> Kubectl:
        """Same kubeconfig, different context."""
        return Kubectl(context=context, kubeconfig=self.kubeconfig)

    def run(self, *args: str, input: str | None = None, check: bool = True,
            error_message: str | None = None) -> subprocess.CompletedProcess:
        return run_command(
            self._kubectl_cmd() + list(args),
            input=input,
            check=check,
            error_message=error_message,
        )

    # ── Contexts ──

    def current_context(self) -> str:
        """Name of the current kube context ("" when none is set)."""
        result = self.run("config", "current-context", check=False)
        return result.stdout.strip() if result.returncode == 0 else ""

    def use_context(self, context: str) -> None:
        self.run("config", "use-context", context,
                 error_message=f"Failed to switch to context {context}")

    # ── Apply / create ──

    def apply_manifest(self, manifests: dict[str, Any] | list[dict[str, Any]],
                       namespace: str | None = None) -> str:
        """Apply manifests from YAML on stdin.

        Returns:
            kubectl's output.
        """
        args = ["apply", "-f", "-"]
        if namespace:
            args.extend(["-n", namespace])
        result = self.run(*args, input=to_yaml(manifests), error_message="Failed to apply manifest")
        return result.stdout

    def apply_url(self, url: str, namespace: str | None = None) -> None:
        args = ["apply"]
        if namespace:
            args.extend(["-n", namespace])
        args.extend(["-f", url])
        self.run(*args, error_message=f"Failed to apply {url}")

    def _apply_dry_run(self, create_args: list[str], error_message: str) -> None:
        """Render with ``create --dry-run=client -o yaml`` and pipe into apply.

        This keeps ``create`` semantics idempotent across re-runs.
        """
        rendered = self.run(*create_args, "--dry-run=client", "-o", "yaml",
                            error_message=error_message)
        self.run("apply", "-f", "-", input=rendered.stdout, error_message=error_message)

    def ensure_namespace(self, namespace: str) -> None:
        self._apply_dry_run(["create", "namespace", namespace],
                            f"Failed to create namespace {namespace}")

    def create_secret_from_file(self, name: str, namespace: str, key: str, path: Path) -> None:
        self._apply_dry_run(
            ["create", "secret", "generic", name, "-n", namespace, f"--from-file={key}={path}"],
            f"Failed to create secret {name}",
        )

    def create_secret_from_literals(self, name: str, namespace: str, values: dict[str, str]) -> None:
        literals = [f"--from-literal={key}={value}" for key, value in values.items()]
        self._apply_dry_run(
            ["create", "secret", "generic", name, "-n", namespace, *literals],
            f"Failed to create secret {name}",
        )

    def label(self, kind: str, name: str, namespace: str | None, label: str,
              overwrite: bool = True) -> None:
        args = ["label", kind, name]
        if namespace:
            args.extend(["-n", namespace])
        args.append(label)
        if overwrite:
            args.append("--overwrite")
        self.run(*args, error_message=f"Failed to label {kind} {name}")

    def delete(self, resource: str, namespace: str | None = None,
               ignore_not_found: bool = False) -> bool:
        """Delete a resource. Returns True when kubectl succeeded."""
        args = ["delete", resource]
        if namespace:
            args.extend(["-n", namespace])
        if ignore_not_found:
            args.append("--ignore-not-found=true")
        return self.run(*args, check=False).returncode == 0

    # ── Queries ──

    def namespace_exists(self, namespace: str) -> bool:
        return self.resource_exists("namespace", namespace)

    def resource_exists(self, kind: str, name: str, namespace: str | None = None) -> bool:
        args = ["get", kind, name]
        if namespace:
            args.extend(["-n", namespace])
        return self.run(*args, check=False).returncode == 0

    def get_jsonpath(self, resource: str, jsonpath: str, namespace: str | None = None) -> str | None:
        """Read a field with -o jsonpath. None when the resource is missing."""
        args = ["get", resource]
        if namespace:
            args.extend(["-n", namespace])
        args.extend(["-o", f"jsonpath={jsonpath}"])
        result = self.run(*args, check=False)
        if result.returncode != 0:
            return None
        return result.stdout

    def get_secret_value(self, name: str, namespace: str, key: str) -> str | None:
        """Base64-decoded value of a secret key. None when absent."""
        encoded = self.get_jsonpath(f"secret/{name}", f"{{.data.{key}}}", namespace)
        if not encoded:
            return None
        return base64.b64decode(encoded.strip()).decode()

    def get_text(self, *args: str) -> str | None:
        """Plain ``kubectl <args>`` output for display. None on failure."""
        result = self.run(*args, check=False)
        if result.returncode != 0:
            return None
        return result.stdout

    # ── Waiting ──

    def wait(
        self,
        resource: str,
        *,
        condition: str | None = None,
        jsonpath: str | None = None,
        namespace: str | None = None,
        timeout_seconds: int = 300,
        all_resources: bool = False,
        strict: bool = True,
    ) -> bool:
        """kubectl wait for a condition or a jsonpath value.

        Args:
            resource: Resource (e.g. deployment/crossplane, nodes).
            condition: Condition name (--for=condition=...).
            jsonpath: JSONPath expression plus value (--for=jsonpath=...).
            namespace: Namespace of the resource.
            timeout_seconds: kubectl wait timeout.
            all_resources: Pass --all.
            strict: Raise on failure instead of returning False.

        Returns:
            True when the condition was met.
        """
        if condition:
            wait_for = f"--for=condition={condition}"
        elif jsonpath:
            wait_for = f"--for=jsonpath={jsonpath}"
        else:
            raise ValueError("wait needs a condition or a jsonpath")

        args = ["wait", wait_for, resource]
        if all_resources:
            args.append("--all")
        if namespace:
            args.extend(["-n", namespace])
        args.append(f"--timeout={timeout_seconds}s")

        result = self.run(*args, check=strict,
                          error_message=f"Timed out waiting for {resource}")
        if result.returncode != 0:
            logger.info("wait not satisfied", resource=resource, stderr=result.stderr.strip())
            return False
        return True

    def wait_nodes_ready(self, timeout_seconds: int = 60) -> None:
        self.wait("nodes", condition="Ready", all_resources=True, timeout_seconds=timeout_seconds)

    def wait_deployment_available(self, name: str, namespace: str, timeout_seconds: int = 300) -> None:
        self.wait(f"deployment/{name}", condition="Available", namespace=namespace,
                  timeout_seconds=timeout_seconds)

    # ── Port-forward ──

    def port_forward(
        self,
        namespace: str,
        service: str,
        local_port: int,
        remote_port: int,
        address: str | None = None,
    ) -> subprocess.Popen:
        """Start a background port-forward.

        Returns:
            Popen process for the port-forward.
        """
        args = self._kubectl_cmd() + [
            "port-forward",
            f"svc/{service}",
            "-n",
            namespace,
            f"{local_port}:{remote_port}",
        ]
        if address:
            args.append(f"--address={address}")
        logger.debug("starting port-forward", argv=args)
        try:
            return subprocess.Popen(
                args,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(message="kubectl not found", tool="kubectl") from e
