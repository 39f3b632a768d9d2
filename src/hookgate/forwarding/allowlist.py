"""Destination host allowlist."""

from __future__ import annotations

__all__ = ["Allowlist", "host_of"]

from collections.abc import Iterable

import httpx


class Allowlist:
    """Set of lowercase hostnames permitted as forwarding destinations.

    An empty allowlist permits every host (fail-open). An unparsable URL, or
    one without a host, is always rejected, even when the allowlist is empty.
    Matching is exact and case-insensitive: no wildcards, no subdomains.
    """

    __slots__ = ("_hosts",)

    def __init__(self, hosts: Iterable[str] = ()) -> None:
        self._hosts = frozenset(host.strip().lower() for host in hosts if host and host.strip())

    @classmethod
    def from_string(cls, value: str | None) -> "Allowlist":
        """Build from a comma-separated list ("a.example, B.example")."""
        return cls((value or "").split(","))

    @property
    def hosts(self) -> frozenset[str]:
        return self._hosts

    @property
    def is_empty(self) -> bool:
        return not self._hosts

    def __len__(self) -> int:
        return len(self._hosts)

    def __repr__(self) -> str:
        return f"Allowlist({sorted(self._hosts)!r})"

    def is_allowed(self, url: str) -> bool:
        """Check whether url's host may be used as a destination."""
        host = host_of(url)
        if host is None:
            return False
        if not self._hosts:
            return True
        return host in self._hosts


def host_of(url: str) -> str | None:
    """Return url's lowercased hostname, or None if it has none or won't parse."""
    try:
        host = httpx.URL(url).host
    except (httpx.InvalidURL, TypeError, ValueError):
        return None
    return host.lower() or None
