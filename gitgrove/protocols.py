"""Protocols for the collaborators the workspace service depends on."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, Sequence, TypeVar

from .models import IndexEntry

T = TypeVar("T")


class CloneProvider(Protocol):
    def __call__(self, url: str, destination: Path) -> None:
        """Populate ``destination`` with a working copy of ``url``.

        Raises:
            RepositoryAlreadyExists: If ``destination`` is already a repository.
        """
        ...


class ExistenceChecker(Protocol):
    def __call__(self, url: str) -> bool:
        """Report whether the remote repository at ``url`` exists."""
        ...


class RemoteLister(Protocol):
    def __call__(self, path: Path) -> dict[str, str]:
        """Return the remotes (name to URL) configured in the clone at ``path``."""
        ...


class Selector(Protocol):
    def __call__(self, options: Sequence[tuple[str, T]]) -> T | None:
        """Pick one of the (name, value) options, or return None to decline."""
        ...


class IndexStore(Protocol):
    def read_all(self) -> list[IndexEntry]:
        ...

    def write_all(self, entries: Sequence[IndexEntry]) -> None:
        ...


__all__ = ["CloneProvider", "ExistenceChecker", "RemoteLister", "Selector", "IndexStore"]
