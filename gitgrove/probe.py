"""Concurrently ask every configured source whether it hosts a slug."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Mapping

from .endpoints import resolve_source_url
from .protocols import ExistenceChecker

logger = logging.getLogger(__name__)


def probe(
    sources: Mapping[str, str],
    slug: str,
    exists: ExistenceChecker,
) -> dict[str, str]:
    """Return ``{source name: url}`` for every source where ``slug`` exists.

    Every check runs to completion even after a hit, since the caller needs
    the full set to detect ambiguity. A failing check is logged and leaves
    its source out of the result.
    """

    if not sources:
        return {}
    urls = {name: resolve_source_url(template, slug) for name, template in sources.items()}

    futures: dict[str, Future[bool]] = {}
    with ThreadPoolExecutor(max_workers=len(urls), thread_name_prefix="gitgrove-probe") as executor:
        for name, url in urls.items():
            logger.debug("Probing source %s at %s", name, url)
            futures[name] = executor.submit(exists, url)

    found: dict[str, str] = {}
    for name in sorted(futures):
        try:
            ok = futures[name].result()
        except Exception as exc:
            logger.warning("Could not check source %s (%s): %s", name, urls[name], exc)
            continue
        if ok:
            found[name] = urls[name]
        else:
            logger.debug("Source %s does not have %s", name, slug)
    return found


__all__ = ["probe"]
