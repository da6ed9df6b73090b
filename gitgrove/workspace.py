"""High-level orchestration for clone, move and remove operations.

Every mutating operation changes the filesystem first and the index second.
If the process dies between the two steps the index may point at a path that
has moved or gone, but it never forgets a directory that exists on disk and
never hides an occupied destination.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path

from . import git
from .choose import choose
from .endpoints import is_url, parse, resolve_source_url
from .exceptions import (
    DestinationExists,
    FilesystemError,
    IndexMismatchError,
    IndexStoreError,
    NotFound,
    NotIndexed,
    RepositoryAlreadyExists,
    ValidationError,
)
from .fs import (
    endpoint_to_dir,
    go_clone_dir,
    make_parents,
    normalize_path,
    occupied,
    remove_created,
    remove_empty_parents,
)
from .index import DirectoryIndex
from .models import GroveConfig
from .probe import probe
from .protocols import CloneProvider, ExistenceChecker, RemoteLister, Selector

logger = logging.getLogger(__name__)


@dataclass
class WorkspaceService:
    config: GroveConfig
    index: DirectoryIndex
    exists: ExistenceChecker = git.remote_exists
    cloner: CloneProvider = git.clone
    remotes: RemoteLister = git.remote_urls
    select: Selector | None = None

    # Resolution

    def resolve_clone_url(self, slug_or_url: str, source: str | None = None) -> str:
        if is_url(slug_or_url):
            if source:
                raise ValidationError("Cannot combine --source with a URL.")
            return slug_or_url.strip()
        if source:
            template = self.config.sources.get(source)
            if template is None:
                known = ", ".join(sorted(self.config.sources)) or "none"
                raise ValidationError(f"Unknown source {source!r}. Configured sources: {known}.")
            return resolve_source_url(template, slug_or_url)
        found = probe(self.config.sources, slug_or_url, self.exists)
        return choose(found, self.select, what="source", query=slug_or_url)

    def clone_dir(self, url: str, *, target: Path | None = None, golang: bool = False) -> Path:
        if golang:
            if target:
                raise ValidationError("Cannot combine --target with --golang.")
            return go_clone_dir(self.config.gopath, parse(url))
        if target:
            return normalize_path(target)
        return endpoint_to_dir(self.config.root, parse(url))

    def destination_for_remote(self, source: Path, remote: str | None = None) -> Path:
        src = normalize_path(source)
        if not src.is_dir():
            raise ValidationError(f"Source is not a directory: {src}")
        remotes = self.remotes(src)
        if remote:
            if remote not in remotes:
                raise NotFound("remote", remote)
            url = remotes[remote]
        else:
            url = choose(remotes, self.select, what="remote", query=str(src))
        return endpoint_to_dir(self.config.root, parse(url))

    def find(self, slug: str) -> Path:
        candidates = {self._label(entry.path): entry.path for entry in self.index.match(slug)}
        return choose(candidates, self.select, what="clone", query=slug)

    # Mutations

    def clone(
        self,
        slug_or_url: str,
        *,
        source: str | None = None,
        target: Path | None = None,
        golang: bool = False,
    ) -> Path:
        url = self.resolve_clone_url(slug_or_url, source)
        destination = self.clone_dir(url, target=target, golang=golang)
        preexisting = occupied(destination)
        logger.info("Cloning %s into %s", url, destination)
        try:
            self.cloner(url, destination)
        except RepositoryAlreadyExists:
            logger.info("Repository already present at %s", destination)
        except Exception:
            if not preexisting:
                self._discard(destination)
            raise
        self._index_add(destination, origin="clone")
        return destination

    def move(self, source: Path, destination: Path) -> Path:
        src = normalize_path(source)
        dst = normalize_path(destination)
        if src == dst:
            logger.info("%s is already in place", src)
            return dst
        if not src.is_dir():
            raise ValidationError(f"Source is not a directory: {src}")
        if occupied(dst):
            raise DestinationExists(dst)
        if src in dst.parents:
            raise ValidationError(f"Cannot move {src} into itself.")

        try:
            created = make_parents(dst)
        except OSError as exc:
            raise FilesystemError(f"Unable to create parent directories for {dst}: {exc}") from exc
        try:
            os.rename(src, dst)
        except OSError as exc:
            remove_created(created)
            raise FilesystemError(f"Failed to move {src} to {dst}: {exc}") from exc
        logger.info("Moved %s to %s", src, dst)

        # destination first: a crash in between leaves both entries, not neither
        self._index_add(dst, origin="move")
        if src in self.index:
            try:
                self.index.remove(src)
            except IndexStoreError as exc:
                raise IndexMismatchError(src, exc) from exc
        else:
            logger.info("Adopted untracked directory %s", src)
        remove_empty_parents(src, self.config.root)
        return dst

    def remove(self, path: Path) -> Path:
        target = normalize_path(path)
        if target not in self.index:
            raise NotIndexed(target)
        if occupied(target):
            try:
                if target.is_dir() and not target.is_symlink():
                    shutil.rmtree(target)
                else:
                    target.unlink()
            except OSError as exc:
                raise FilesystemError(f"Failed to delete {target}: {exc}") from exc
            logger.info("Deleted %s", target)
        else:
            logger.warning("%s no longer exists; dropping it from the index", target)
        try:
            self.index.remove(target)
        except IndexStoreError as exc:
            raise IndexMismatchError(target, exc) from exc
        remove_empty_parents(target, self.config.root)
        return target

    def track(self, path: Path) -> Path:
        target = normalize_path(path)
        if not target.is_dir():
            raise ValidationError(f"Not a directory: {target}")
        self.index.add(target, origin="track")
        return target

    def untrack(self, path: Path) -> Path:
        target = normalize_path(path)
        self.index.remove(target)
        return target

    # Helpers

    def _index_add(self, path: Path, *, origin: str) -> None:
        try:
            self.index.add(path, origin=origin, exist_ok=True)
        except IndexStoreError as exc:
            raise IndexMismatchError(path, exc) from exc

    def _discard(self, destination: Path) -> None:
        if occupied(destination):
            try:
                shutil.rmtree(destination)
            except OSError as exc:
                logger.warning("Could not clean up %s after failed clone: %s", destination, exc)
                return
        remove_empty_parents(destination, self.config.root)

    def _label(self, path: Path) -> str:
        try:
            return str(path.relative_to(self.config.root))
        except ValueError:
            return str(path)


__all__ = ["WorkspaceService"]
