"""Git operations on the platform repository."""

from __future__ import annotations

from pathlib import Path

from .runner import run_command


class GitRepository:
    """Run git commands inside one working tree."""

    def __init__(self, path: Path):
        self.path = path

    def _git(self, *args: str, check: bool = True) -> str:
        result = run_command(
            ["git", "-C", str(self.path), *args],
            check=check,
            error_message=f"git {args[0]} failed",
        )
        return result.stdout

    def is_repository(self) -> bool:
        return (self.path / ".git").is_dir()

    def init(self) -> None:
        self.path.mkdir(parents=True, exist_ok=True)
        self._git("init")

    def configure_identity(self, email: str, name: str) -> None:
        self._git("config", "user.email", email)
        self._git("config", "user.name", name)

    def add(self, *paths: str) -> None:
        self._git("add", *(paths or (".",)))

    def commit(self, message: str) -> str:
        return self._git("commit", "-m", message)

    def revert_head(self) -> str:
        return self._git("revert", "HEAD", "--no-edit")

    def log_oneline(self, count: int | None = None) -> str:
        args = ["log", "--oneline"]
        if count is not None:
            args.extend(["-n", str(count)])
        return self._git(*args)

    def show_head(self, stat: bool = False) -> str:
        return self._git("show", "HEAD", *(["--stat"] if stat else []))

    def restore(self, *paths: str) -> None:
        """Discard uncommitted changes to paths (unstaging them first)."""
        self._git("reset", "-q", "HEAD", "--", *paths, check=False)
        self._git("checkout", "--", *paths)
