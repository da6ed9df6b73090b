"""Parse remote locators and expand source templates into URLs."""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from .exceptions import MalformedEndpoint, ValidationError
from .models import Endpoint

URL_SCHEMES = frozenset({"ssh", "git", "http", "https", "git+ssh", "ssh+git"})

_SCHEME_RE = re.compile(r"^(?P<scheme>[A-Za-z][A-Za-z0-9+.-]*)://")
_SCP_RE = re.compile(r"^(?:(?P<user>[^@/:\s]+)@)?(?P<host>[^@/:\s]+):(?P<path>[^\s]+)$")
_BARE_RE = re.compile(
    r"^(?P<host>localhost|[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?(?:\.[A-Za-z0-9-]+)+)/(?P<path>[^\s]+)$"
)


def parse(spec: str) -> Endpoint:
    """Parse a URL, scp-style locator or bare ``host/path`` into an Endpoint."""

    value = spec.strip()
    if not value:
        raise MalformedEndpoint(spec, "empty")

    match = _SCHEME_RE.match(value)
    if match:
        return _parse_url(spec, value, match.group("scheme").lower())

    match = _SCP_RE.match(value)
    if match:
        return Endpoint(
            scheme="ssh",
            host=match.group("host").lower(),
            path=_split_path(spec, match.group("path")),
            user=match.group("user"),
        )

    match = _BARE_RE.match(value)
    if match:
        return Endpoint(
            scheme="https",
            host=match.group("host").lower(),
            path=_split_path(spec, match.group("path")),
        )

    raise MalformedEndpoint(spec, "expected scheme://host/path, user@host:path or host/path")


def is_url(value: str) -> bool:
    try:
        parse(value)
    except MalformedEndpoint:
        return False
    return True


def transport_url(url: str) -> str:
    """Return a locator git understands; bare ``host/path`` becomes https."""

    value = url.strip()
    if _SCHEME_RE.match(value) or _SCP_RE.match(value):
        return value
    endpoint = parse(value)
    return f"https://{endpoint.host_dir}/{endpoint.slug}"


def resolve_source_url(template: str, slug: str) -> str:
    """Expand a source template with a slug.

    ``*`` placeholders are substituted (``git@github.com:*.git``); other
    templates are treated as prefixes (``github.com/``).
    """

    cleaned = slug.strip().strip("/")
    if not cleaned:
        raise ValidationError("Repository slug cannot be empty.")
    if any(part in {".", ".."} for part in cleaned.split("/")):
        raise ValidationError(f"Repository slug cannot contain relative segments: {slug!r}")
    if "*" in template:
        return template.replace("*", cleaned)
    if template.endswith(("/", ":")):
        return f"{template}{cleaned}"
    return f"{template}/{cleaned}"


def _parse_url(spec: str, value: str, scheme: str) -> Endpoint:
    if scheme not in URL_SCHEMES:
        raise MalformedEndpoint(spec, f"unsupported scheme {scheme!r}")
    parsed = urlsplit(value)
    if not parsed.hostname:
        raise MalformedEndpoint(spec, "missing host")
    try:
        port = parsed.port
    except ValueError as exc:
        raise MalformedEndpoint(spec, "invalid port") from exc
    return Endpoint(
        scheme=scheme,
        host=parsed.hostname,
        path=_split_path(spec, parsed.path),
        user=parsed.username,
        port=port,
    )


def _split_path(spec: str, raw: str) -> tuple[str, ...]:
    if "\\" in raw or "\0" in raw:
        raise MalformedEndpoint(spec, "path contains illegal characters")
    segments = [segment for segment in raw.split("/") if segment]
    if any(segment in {".", ".."} for segment in segments):
        raise MalformedEndpoint(spec, "path contains relative segments")
    if segments and segments[-1].endswith(".git"):
        segments[-1] = segments[-1][: -len(".git")]
        if not segments[-1]:
            segments.pop()
    if not segments:
        raise MalformedEndpoint(spec, "missing repository path")
    return tuple(segments)


__all__ = ["URL_SCHEMES", "parse", "is_url", "transport_url", "resolve_source_url"]
