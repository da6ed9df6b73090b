"""Interactive prompt helpers built on InquirerPy."""

from __future__ import annotations

import sys
from typing import Sequence, TypeVar

from InquirerPy import inquirer
from InquirerPy.base.control import Choice

from .exceptions import UserAbort, ValidationError

T = TypeVar("T")


def is_interactive() -> bool:
    return sys.stdin.isatty()


def _ensure_tty() -> None:
    if not is_interactive():
        raise ValidationError(
            "Interactive mode requires a TTY. Provide the missing arguments to run non-interactively."
        )


def build_choices(options: Sequence[tuple[str, T]]) -> list[Choice]:
    """Return one Choice per option, labelled ``name  value``."""

    width = max((len(name) for name, _ in options), default=0)
    return [Choice(value=index, name=f"{name.ljust(width)}  {value}") for index, (name, value) in enumerate(options)]


def select_candidate(options: Sequence[tuple[str, T]]) -> T | None:
    """Let the user pick one candidate; None when there is no TTY or on cancel."""

    if not options or not is_interactive():
        return None
    try:
        selected = inquirer.select(
            message="Multiple matches, select one",
            choices=build_choices(options),
            qmark="›",
        ).execute()
    except KeyboardInterrupt:
        return None
    if selected is None:
        return None
    return options[selected][1]


def confirm(message: str, default: bool = False) -> bool:
    _ensure_tty()
    try:
        return bool(inquirer.confirm(message=message, default=default).execute())
    except KeyboardInterrupt as exc:  # pragma: no cover - user cancel
        raise UserAbort("User cancelled the prompt.") from exc


__all__ = ["is_interactive", "build_choices", "select_candidate", "confirm"]
