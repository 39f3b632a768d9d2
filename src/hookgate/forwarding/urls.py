"""Destination URL construction.

join_path and append_query operate on plain strings so they can be checked
in isolation; build_destination_url applies both to a parsed destination.
"""

from __future__ import annotations

__all__ = [
    "append_query",
    "build_destination_url",
    "join_path",
]

from collections.abc import Iterable
from urllib.parse import quote, urlencode, urlsplit, urlunsplit

# RFC 3986 pchar plus "/" (sub-delims, ":" and "@" stay literal in paths)
_PATH_SAFE = "/:@!$&'()*+,;="


def join_path(base: str, tail: str) -> str:
    """Append tail to base with exactly one "/" between them.

    An empty tail returns base unchanged.

    Example:
        >>> join_path("/hook/", "/extra")
        '/hook/extra'
    """
    if not tail:
        return base
    return f"{base.rstrip('/')}/{tail.lstrip('/')}"


def append_query(query: str, pairs: Iterable[tuple[str, str]]) -> str:
    """Append encoded pairs after an existing raw query string.

    The existing query is kept byte-for-byte. New pairs follow in input
    order, duplicates included.

    Example:
        >>> append_query("a=1", [("x", "1"), ("x", "2")])
        'a=1&x=1&x=2'
    """
    encoded = urlencode(list(pairs))
    if not encoded:
        return query
    existing = query.rstrip("&")
    return f"{existing}&{encoded}" if existing else encoded


def build_destination_url(
    destination: str,
    tail: str = "",
    query: Iterable[tuple[str, str]] = (),
) -> str:
    """Build the outbound URL for a forward.

    Args:
        destination: Route destination (absolute URL, may carry a path and query).
        tail: Decoded tail path from the inbound request; re-quoted here.
        query: Decoded inbound query pairs, in order.

    Returns:
        Absolute URL string.
    """
    parts = urlsplit(destination)
    path = join_path(parts.path, quote(tail, safe=_PATH_SAFE)) if tail else parts.path
    return urlunsplit((parts.scheme, parts.netloc, path, append_query(parts.query, query), parts.fragment))
