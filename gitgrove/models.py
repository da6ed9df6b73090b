"""Shared dataclasses used throughout the CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class Endpoint:
    """Structured form of a remote locator.

    Two endpoints are equal when they name the same repository on the same
    host, however they were spelled: the scheme and user only describe how to
    reach it.
    """

    scheme: str = field(compare=False)
    host: str
    path: tuple[str, ...]
    user: str | None = field(default=None, compare=False)
    port: int | None = None

    @property
    def host_dir(self) -> str:
        # IPv6 literals keep their brackets so a port suffix stays unambiguous
        host = f"[{self.host}]" if ":" in self.host else self.host
        if self.port is None:
            return host
        return f"{host}:{self.port}"

    @property
    def slug(self) -> str:
        return "/".join(self.path)

    def __str__(self) -> str:
        return f"{self.host_dir}/{self.slug}"


@dataclass(frozen=True, slots=True)
class IndexEntry:
    path: Path
    added_at: str
    origin: str

    @property
    def name(self) -> str:
        return self.path.name

    def to_dict(self) -> dict[str, str]:
        return {"path": str(self.path), "added_at": self.added_at, "origin": self.origin}


@dataclass(slots=True)
class GroveConfig:
    root: Path
    sources: dict[str, str]
    index_path: Path
    gopath: Path


__all__ = ["Endpoint", "IndexEntry", "GroveConfig"]
