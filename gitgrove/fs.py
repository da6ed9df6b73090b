"""Filesystem helpers for gitgrove."""

from __future__ import annotations

import os
from pathlib import Path

from .exceptions import MalformedEndpoint
from .models import Endpoint


def endpoint_to_dir(root: Path, endpoint: Endpoint) -> Path:
    """Return the canonical clone directory for ``endpoint`` under ``root``."""

    return root.joinpath(_safe_segment(endpoint, endpoint.host_dir), *_safe_segments(endpoint))


def go_clone_dir(gopath: Path, endpoint: Endpoint) -> Path:
    """Return the GOPATH-style location (``$GOPATH/src/host/path``)."""

    return endpoint_to_dir(gopath / "src", endpoint)


def normalize_path(path: Path | str) -> Path:
    """Absolute, lexically normalized path; symlinks are left alone."""

    return Path(os.path.abspath(Path(path).expanduser()))


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def make_parents(path: Path) -> list[Path]:
    """Create the missing parents of ``path``; return them, deepest first."""

    missing = [parent for parent in path.parents if not parent.exists()]
    ensure_directory(path.parent)
    return missing


def remove_created(dirs: list[Path]) -> None:
    for directory in dirs:
        try:
            directory.rmdir()
        except OSError:
            break


def occupied(path: Path) -> bool:
    # exists() is False for dangling symlinks, which still block a rename
    return path.exists() or path.is_symlink()


def remove_empty_parents(path: Path, stop: Path) -> None:
    """Remove empty directories from ``path`` upwards, never touching ``stop``."""

    current = normalize_path(path)
    resolved_stop = normalize_path(stop)
    if resolved_stop not in current.parents:
        return
    while current != resolved_stop:
        if current.exists():
            try:
                current.rmdir()
            except OSError:
                break
        current = current.parent


def _safe_segments(endpoint: Endpoint) -> list[str]:
    return [_safe_segment(endpoint, segment) for segment in endpoint.path]


def _safe_segment(endpoint: Endpoint, segment: str) -> str:
    if not segment or segment in {".", ".."}:
        raise MalformedEndpoint(str(endpoint), f"unsafe path segment {segment!r}")
    if "/" in segment or "\\" in segment or "\0" in segment or os.sep in segment:
        raise MalformedEndpoint(str(endpoint), f"unsafe path segment {segment!r}")
    return segment


__all__ = [
    "endpoint_to_dir",
    "go_clone_dir",
    "normalize_path",
    "ensure_directory",
    "make_parents",
    "remove_created",
    "occupied",
    "remove_empty_parents",
]
