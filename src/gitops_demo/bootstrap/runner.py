"""External command execution for bootstrap modules.

Every kind/kubectl/helm/argocd/git/docker/sysctl call goes through
``run_command`` so that logging, timing and error mapping stay uniform.
"""

from __future__ import annotations

import subprocess
import time

from ..errors import CommandError, ToolNotFoundError
from ..shared.logging import get_logger

logger = get_logger(__name__)

SECRET_FLAGS = ("--from-literal=password=", "--password=", "--auth-token=")


def redact(argv: list[str]) -> list[str]:
    """Mask secret values in an argv before it is logged."""
    masked = []
    for arg in argv:
        for prefix in SECRET_FLAGS:
            if arg.startswith(prefix):
                arg = f"{prefix}****"
                break
        masked.append(arg)
    return masked


def run_command(
    argv: list[str],
    *,
    input: str | None = None,
    check: bool = True,
    timeout: float | None = None,
    cwd: str | None = None,
    error_message: str | None = None,
) -> subprocess.CompletedProcess:
    """Run an external command and capture its output.

    Args:
        argv: Command and arguments.
        input: Text piped to the command's stdin.
        check: Raise CommandError on a non-zero exit code.
        timeout: Seconds before the command is killed.
        cwd: Working directory.
        error_message: Message used for the CommandError.

    Returns:
        The completed process (stdout/stderr as text).

    Raises:
        ToolNotFoundError: If the binary is not installed.
        CommandError: If check is set and the command failed or timed out.
    """
    logger.debug("running command", argv=redact(argv))
    start = time.monotonic()
    try:
        result = subprocess.run(
            argv,
            input=input,
            capture_output=True,
            text=True,
            timeout=timeout,
            cwd=cwd,
        )
    except FileNotFoundError as e:
        raise ToolNotFoundError(message=f"{argv[0]} not found", tool=argv[0]) from e
    except subprocess.TimeoutExpired as e:
        raise CommandError(
            message=error_message or f"{argv[0]} timed out after {timeout}s",
            argv=redact(argv),
            returncode=-1,
        ) from e

    logger.debug(
        "command finished",
        command=argv[0],
        returncode=result.returncode,
        duration_seconds=round(time.monotonic() - start, 2),
    )

    if check and result.returncode != 0:
        raise CommandError(
            message=error_message or f"{' '.join(redact(argv[:3]))} failed",
            argv=redact(argv),
            returncode=result.returncode,
            stderr=result.stderr or "",
        )
    return result
