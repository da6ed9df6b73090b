"""Thin wrappers around git CLI commands."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Iterable

from .endpoints import transport_url
from .exceptions import GitCommandError, RepositoryAlreadyExists

logger = logging.getLogger(__name__)

# ls-remote answers that mean "no such repository (for you)" rather than a
# transport failure.
_MISSING_MARKERS = (
    "repository not found",
    "not found",
    "does not exist",
    "does not appear to be a git repository",
    "could not read username",
    "authentication failed",
    "terminal prompts disabled",
    "permission denied",
)


def run_git(
    args: Iterable[str],
    *,
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
    raise_on_error: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Execute a git command and optionally raise on failure."""

    cmd = ["git", *args]
    logger.debug("Running %s", " ".join(cmd))
    proc = subprocess.run(
        cmd,
        cwd=str(cwd) if cwd else None,
        env=env,
        capture_output=True,
        text=True,
        errors="replace",
        check=False,
    )
    if raise_on_error and proc.returncode != 0:
        raise GitCommandError(cmd, proc.returncode, stdout=proc.stdout, stderr=proc.stderr)
    return proc


def _non_interactive_env() -> dict[str, str]:
    env = dict(os.environ)
    env["GIT_TERMINAL_PROMPT"] = "0"
    env.setdefault("GIT_SSH_COMMAND", "ssh -o BatchMode=yes")
    return env


def remote_exists(url: str) -> bool:
    """Ask the remote whether ``url`` names a repository, without cloning it."""

    locator = transport_url(url)
    proc = run_git(["ls-remote", "--", locator, "HEAD"], env=_non_interactive_env(), raise_on_error=False)
    if proc.returncode == 0:
        return True
    stderr = proc.stderr.lower()
    if any(marker in stderr for marker in _MISSING_MARKERS):
        return False
    raise GitCommandError(["git", "ls-remote", "--", locator, "HEAD"], proc.returncode, stderr=proc.stderr)


def is_repository(path: Path) -> bool:
    return (path / ".git").exists()


def clone(url: str, destination: Path) -> None:
    if is_repository(destination):
        raise RepositoryAlreadyExists(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    run_git(["clone", "--", transport_url(url), str(destination)], cwd=destination.parent)


def remote_urls(path: Path) -> dict[str, str]:
    proc = run_git(
        ["config", "--get-regexp", r"^remote\..*\.url$"],
        cwd=path,
        raise_on_error=False,
    )
    # exit 1 means no remotes are configured
    if proc.returncode not in (0, 1):
        raise GitCommandError(
            ["git", "config", "--get-regexp", r"^remote\..*\.url$"],
            proc.returncode,
            stderr=proc.stderr,
        )
    remotes: dict[str, str] = {}
    for raw in proc.stdout.splitlines():
        key, _, url = raw.strip().partition(" ")
        if not key or not url:
            continue
        name = key[len("remote.") : -len(".url")]
        remotes[name] = url.strip()
    return remotes


__all__ = ["run_git", "remote_exists", "is_repository", "clone", "remote_urls"]
