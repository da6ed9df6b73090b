"""Persistent registry of the clone directories gitgrove manages.

The index is a JSON document rewritten in full on every change. Writes go to
a temporary file in the same directory which is then renamed over the real
file, so an interrupted write leaves the previous index intact.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Sequence

from .exceptions import AlreadyIndexed, IndexStoreError, NotIndexed
from .fs import ensure_directory, normalize_path
from .models import IndexEntry
from .protocols import IndexStore

logger = logging.getLogger(__name__)

INDEX_VERSION = 1


class JsonIndexStore:
    def __init__(self, path: Path):
        self.path = path

    def read_all(self) -> list[IndexEntry]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, ValueError) as exc:
            raise IndexStoreError(f"Failed to read index {self.path}: {exc}") from exc
        return _entries_from_payload(self.path, payload)

    def write_all(self, entries: Sequence[IndexEntry]) -> None:
        payload = {
            "version": INDEX_VERSION,
            "entries": [entry.to_dict() for entry in entries],
        }
        try:
            ensure_directory(self.path.parent)
            tmp_fd, tmp_path = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
            )
        except OSError as exc:
            raise IndexStoreError(f"Failed to write index {self.path}: {exc}") from exc
        try:
            with os.fdopen(tmp_fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as exc:
            Path(tmp_path).unlink(missing_ok=True)
            raise IndexStoreError(f"Failed to write index {self.path}: {exc}") from exc
        logger.debug("Saved %d index entries to %s", len(entries), self.path)


class DirectoryIndex:
    """Registry of tracked clone directories, keyed by normalized path.

    ``add`` and ``remove`` persist immediately so that each call is durable
    before the caller moves on to its next step.
    """

    def __init__(self, store: IndexStore):
        self.store = store
        self._entries: dict[Path, IndexEntry] = {}

    def load(self) -> None:
        self._entries = {}
        for entry in self.store.read_all():
            self._entries[entry.path] = entry
        logger.debug("Loaded %d index entries", len(self._entries))

    def save(self) -> None:
        self.store.write_all(self.list())

    def add(self, path: Path, *, origin: str, exist_ok: bool = False) -> IndexEntry:
        key = normalize_path(path)
        existing = self._entries.get(key)
        if existing is not None:
            if exist_ok:
                return existing
            raise AlreadyIndexed(key)
        entry = IndexEntry(path=key, added_at=_now(), origin=origin)
        self._entries[key] = entry
        try:
            self.save()
        except IndexStoreError:
            del self._entries[key]
            raise
        logger.info("Indexed %s (%s)", key, origin)
        return entry

    def remove(self, path: Path, *, missing_ok: bool = False) -> None:
        key = normalize_path(path)
        entry = self._entries.pop(key, None)
        if entry is None:
            if missing_ok:
                return
            raise NotIndexed(key)
        try:
            self.save()
        except IndexStoreError:
            self._entries[key] = entry
            raise
        logger.info("Removed %s from index", key)

    def get(self, path: Path) -> IndexEntry | None:
        return self._entries.get(normalize_path(path))

    def list(self) -> list[IndexEntry]:
        return sorted(self._entries.values(), key=lambda entry: str(entry.path))

    def match(self, slug: str) -> list[IndexEntry]:
        """Entries whose trailing path segments equal the segments of ``slug``."""

        wanted = tuple(part for part in slug.strip().split("/") if part)
        if not wanted:
            return []
        return [entry for entry in self.list() if entry.path.parts[-len(wanted):] == wanted]

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        return normalize_path(path) in self._entries

    def __iter__(self) -> Iterator[IndexEntry]:
        return iter(self.list())

    def __len__(self) -> int:
        return len(self._entries)


def open_index(path: Path) -> DirectoryIndex:
    index = DirectoryIndex(JsonIndexStore(path))
    index.load()
    return index


def _entries_from_payload(source: Path, payload: object) -> list[IndexEntry]:
    if not isinstance(payload, dict) or not isinstance(payload.get("entries"), list):
        raise IndexStoreError(f"Index {source} is not a gitgrove index document.")
    version = payload.get("version")
    if version != INDEX_VERSION:
        raise IndexStoreError(f"Index {source} has unsupported version {version!r}.")
    entries: list[IndexEntry] = []
    seen: set[Path] = set()
    for raw in payload["entries"]:
        if not isinstance(raw, dict) or not isinstance(raw.get("path"), str):
            raise IndexStoreError(f"Index {source} contains a malformed entry: {raw!r}")
        path = normalize_path(raw["path"])
        if path in seen:
            logger.warning("Ignoring duplicate index entry for %s", path)
            continue
        seen.add(path)
        entries.append(
            IndexEntry(
                path=path,
                added_at=str(raw.get("added_at", "")),
                origin=str(raw.get("origin", "unknown")),
            )
        )
    return entries


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


__all__ = ["INDEX_VERSION", "JsonIndexStore", "DirectoryIndex", "open_index"]
