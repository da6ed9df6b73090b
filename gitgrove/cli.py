"""Typer CLI entrypoint for gitgrove."""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import load_config
from .exceptions import GroveError, ResolutionError, UserAbort, ValidationError
from .fs import normalize_path
from .index import open_index
from .interactive import confirm, is_interactive, select_candidate
from .models import GroveConfig
from .workspace import WorkspaceService

app = typer.Typer(
    help="Keep clones from many git hosts in one indexed directory tree.",
    add_completion=False,
    no_args_is_help=True,
)


@dataclass(slots=True)
class AppState:
    config: GroveConfig
    service: WorkspaceService
    console: Console
    verbose: bool = False


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", force=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"gitgrove {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to the configuration file (defaults to $GITGROVE_CONFIG or ~/.config/gitgrove.toml).",
        dir_okay=False,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the gitgrove version and exit.",
    ),
) -> None:
    _ = version  # handled via callback
    configure_logging(verbose)
    try:
        config = load_config(config_path)
        index = open_index(config.index_path)
    except GroveError as exc:
        _fail(str(exc))
    service = WorkspaceService(config=config, index=index, select=select_candidate)
    ctx.obj = AppState(config=config, service=service, console=Console(), verbose=verbose)


def _require_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if not isinstance(state, AppState):  # pragma: no cover
        raise typer.Exit(1)
    return state


@contextmanager
def _reporting_errors() -> Iterator[None]:
    try:
        yield
    except ResolutionError as exc:
        _fail(str(exc), code=2)
    except GroveError as exc:
        _fail(str(exc))


@app.command(help="Clone a repository by slug or URL into its canonical directory")
def clone(
    ctx: typer.Context,
    slug_or_url: str = typer.Argument(..., help="Repository slug (owner/name) or full remote URL."),
    source: Optional[str] = typer.Option(None, "--source", "-s", help="Only use this configured source."),
    target: Optional[Path] = typer.Option(
        None,
        "--target",
        "-t",
        help="Clone into this directory instead of the canonical location.",
        file_okay=False,
    ),
    golang: bool = typer.Option(False, "--golang", "-g", help="Clone into the GOPATH layout."),
) -> None:
    state = _require_state(ctx)
    with _reporting_errors():
        path = state.service.clone(slug_or_url, source=source, target=target, golang=golang)
    typer.echo(str(path))


@app.command(help="Move a clone to the canonical directory of one of its remotes")
def mv(
    ctx: typer.Context,
    source: Path = typer.Argument(..., help="Clone directory to move.", file_okay=False),
    target: Optional[Path] = typer.Option(
        None,
        "--target",
        "-t",
        help="Move to this directory instead of the remote's canonical location.",
        file_okay=False,
    ),
    remote: Optional[str] = typer.Option(None, "--remote", "-r", help="Remote whose URL decides the location."),
) -> None:
    state = _require_state(ctx)
    with _reporting_errors():
        if target and remote:
            raise ValidationError("Cannot combine --target with --remote.")
        destination = target or state.service.destination_for_remote(source, remote)
        path = state.service.move(source, destination)
    typer.echo(str(path))


@app.command(help="Delete an indexed clone and drop it from the index")
def rm(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Clone directory to delete."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    state = _require_state(ctx)
    target = normalize_path(path)
    with _reporting_errors():
        if not yes:
            if not is_interactive():
                raise ValidationError("Refusing to delete without --yes when not running interactively.")
            if not confirm(f"Delete {target} and everything in it?"):
                raise UserAbort("Removal cancelled.")
        state.service.remove(target)
    typer.echo(str(target))


@app.command(help="List indexed clones")
def ls(
    ctx: typer.Context,
    json_: bool = typer.Option(False, "--json", help="Output JSON instead of a table."),
) -> None:
    state = _require_state(ctx)
    entries = state.service.index.list()
    if json_:
        typer.echo(json.dumps([entry.to_dict() for entry in entries], indent=2))
        return
    if not entries:
        state.console.print("No clones indexed.")
        return
    table = Table(show_header=True, header_style="bold")
    table.add_column("Path")
    table.add_column("Origin", no_wrap=True)
    table.add_column("Added", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    for entry in entries:
        status = "present" if entry.path.is_dir() else "[yellow]missing[/yellow]"
        table.add_row(str(entry.path), entry.origin, entry.added_at, status)
    state.console.print(table)


@app.command(help="Print the directory of an indexed clone matching a slug")
def find(
    ctx: typer.Context,
    slug: str = typer.Argument(..., help="Trailing path of the clone, e.g. owner/name."),
) -> None:
    state = _require_state(ctx)
    with _reporting_errors():
        path = state.service.find(slug)
    typer.echo(str(path))


@app.command(help="Add an existing clone directory to the index")
def track(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Directory to index.", file_okay=False),
) -> None:
    state = _require_state(ctx)
    with _reporting_errors():
        target = state.service.track(path)
    typer.echo(str(target))


@app.command(help="Remove a directory from the index without touching it on disk")
def untrack(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Indexed directory."),
) -> None:
    state = _require_state(ctx)
    with _reporting_errors():
        target = state.service.untrack(path)
    typer.echo(str(target))


@app.command(help="Show the configured clone sources")
def sources(ctx: typer.Context) -> None:
    state = _require_state(ctx)
    if not state.config.sources:
        state.console.print("No sources configured.")
        return
    table = Table(show_header=True, header_style="bold")
    table.add_column("Name", no_wrap=True)
    table.add_column("Template")
    for name in sorted(state.config.sources):
        table.add_row(name, state.config.sources[name])
    state.console.print(table)
    state.console.print(f"Clone root: {state.config.root}")


def _fail(message: str, code: int = 1) -> None:
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(code)


__all__ = ["app", "configure_logging"]
