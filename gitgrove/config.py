"""Load the gitgrove configuration file and environment overrides."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from .exceptions import ConfigError
from .fs import normalize_path
from .models import GroveConfig

DEFAULT_CONFIG_PATH = Path("~/.config/gitgrove.toml")
DEFAULT_ROOT = Path("~/grove")
DEFAULT_INDEX_PATH = Path("~/.config/gitgrove/index.json")
DEFAULT_SOURCES = {"github": "git@github.com:*.git"}


def resolve_config_path(override: Path | None = None) -> Path:
    if override:
        return normalize_path(override)
    raw = os.environ.get("GITGROVE_CONFIG")
    if raw:
        return normalize_path(raw)
    return normalize_path(DEFAULT_CONFIG_PATH)


def load_config(path: Path | None = None) -> GroveConfig:
    config_path = resolve_config_path(path)
    data = _read_toml(config_path) if config_path.exists() else {}

    clone_section = _section(data, "clone", config_path)
    index_section = _section(data, "index", config_path)

    root = _env_path("GITGROVE_ROOT") or _path_value(clone_section, "root", config_path) or DEFAULT_ROOT
    index_path = (
        _env_path("GITGROVE_INDEX")
        or _path_value(index_section, "path", config_path)
        or DEFAULT_INDEX_PATH
    )
    gopath = _first_gopath() or Path("~/go")

    raw_sources = clone_section.get("sources", DEFAULT_SOURCES)
    if not isinstance(raw_sources, dict):
        raise ConfigError(f"[clone.sources] in {config_path} must be a table of name = template.")
    sources: dict[str, str] = {}
    for name, template in raw_sources.items():
        if not isinstance(template, str) or not template.strip():
            raise ConfigError(f"Source {name!r} in {config_path} must be a non-empty string.")
        sources[str(name)] = template.strip()

    return GroveConfig(
        root=normalize_path(root),
        sources=sources,
        index_path=normalize_path(index_path),
        gopath=normalize_path(gopath),
    )


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read config file {path}: {exc}") from exc


def _section(data: dict[str, Any], name: str, source: Path) -> dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] in {source} must be a table.")
    return section


def _path_value(section: dict[str, Any], key: str, source: Path) -> Path | None:
    value = section.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{key!r} in {source} must be a non-empty path string.")
    return Path(value)


def _env_path(var: str) -> Path | None:
    raw = os.environ.get(var)
    if not raw:
        return None
    return Path(raw)


def _first_gopath() -> Path | None:
    raw = os.environ.get("GOPATH", "")
    first = raw.split(os.pathsep)[0].strip()
    return Path(first) if first else None


__all__ = ["DEFAULT_SOURCES", "resolve_config_path", "load_config"]
