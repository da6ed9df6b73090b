"""Reduce a set of named candidates to a single choice."""

from __future__ import annotations

from typing import Mapping, TypeVar

from .exceptions import Ambiguous, NotFound
from .protocols import Selector

T = TypeVar("T")


def choose(
    candidates: Mapping[str, T],
    select: Selector | None = None,
    *,
    what: str = "repository",
    query: str | None = None,
) -> T:
    if not candidates:
        raise NotFound(what, query)
    options = sorted(candidates.items(), key=lambda item: item[0])
    if len(options) == 1:
        return options[0][1]
    if select is not None:
        selected = select(options)
        if selected is not None:
            return selected
    raise Ambiguous(what, [name for name, _ in options])


__all__ = ["choose"]
