"""Custom error hierarchy for gitgrove."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class GroveError(RuntimeError):
    """Base error for the CLI."""


class ConfigError(GroveError):
    """Raised when the configuration file or environment is invalid."""


class ValidationError(GroveError):
    """Raised when user input fails validation."""


class UserAbort(GroveError):
    """Raised when the user cancels an interactive flow."""


class MalformedEndpoint(GroveError):
    """Raised when a remote locator cannot be parsed."""

    def __init__(self, spec: str, reason: str | None = None):
        self.spec = spec
        message = f"Unable to parse remote locator: {spec!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ResolutionError(GroveError):
    """Raised when a slug or path cannot be resolved to a single candidate."""


class NotFound(ResolutionError):
    def __init__(self, what: str, query: str | None = None):
        self.what = what
        self.query = query
        if query:
            super().__init__(f"No {what} found for {query!r}.")
        else:
            super().__init__(f"No {what} found.")


class Ambiguous(ResolutionError):
    def __init__(self, what: str, names: Sequence[str]):
        self.what = what
        self.names = list(names)
        super().__init__(
            f"Multiple {what} candidates match ({', '.join(self.names)}). Pick one explicitly."
        )


class AlreadyIndexed(GroveError):
    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Directory is already indexed: {path}")


class NotIndexed(GroveError):
    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Directory is not indexed: {path}")


class IndexStoreError(GroveError):
    """Raised when the index file cannot be read or written."""


class IndexMismatchError(GroveError):
    """Raised when the filesystem changed but the index could not follow."""

    def __init__(self, path: Path, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(
            f"Filesystem updated at {path} but the index could not be updated: {cause}. "
            "Run `gitgrove track` or `gitgrove untrack` to reconcile."
        )


class FilesystemError(GroveError):
    """Raised when a directory could not be created, renamed or deleted."""


class DestinationExists(GroveError):
    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Destination already exists: {path}")


class RepositoryAlreadyExists(GroveError):
    """Raised by a clone provider when the destination is already a repository."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Repository already exists at {path}")


class GitCommandError(GroveError):
    """Raised when an underlying git command fails."""

    def __init__(
        self,
        command: list[str],
        returncode: int,
        *,
        stdout: str | None = None,
        stderr: str | None = None,
    ):
        self.command = command
        self.returncode = returncode
        self.stdout = stdout or ""
        self.stderr = stderr or ""
        message = f"git command failed (exit {returncode}): {' '.join(command)}"
        details = "\n".join(
            section
            for section in (self.stdout.strip(), self.stderr.strip())
            if section
        )
        if details:
            message = f"{message}\n{details}"
        super().__init__(message)


__all__ = [
    "GroveError",
    "ConfigError",
    "ValidationError",
    "UserAbort",
    "MalformedEndpoint",
    "ResolutionError",
    "NotFound",
    "Ambiguous",
    "AlreadyIndexed",
    "NotIndexed",
    "IndexStoreError",
    "IndexMismatchError",
    "FilesystemError",
    "DestinationExists",
    "RepositoryAlreadyExists",
    "GitCommandError",
]
