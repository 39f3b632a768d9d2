"""Header handling for forwarded requests and relayed responses."""

from __future__ import annotations

__all__ = [
    "HOP_BY_HOP_HEADERS",
    "build_outbound_headers",
    "encode_header_pairs",
    "filter_response_headers",
    "is_hop_by_hop",
]

from collections.abc import Iterable, Mapping

# Headers meaningful for a single connection only; never relayed in either direction
HOP_BY_HOP_HEADERS: frozenset[str] = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "trailers",
        "transfer-encoding",
        "upgrade",
        "content-length",
        "host",
        "expect",
    }
)


def is_hop_by_hop(name: str) -> bool:
    return name.lower() in HOP_BY_HOP_HEADERS


def build_outbound_headers(
    inbound: Iterable[tuple[str, str]],
    *,
    client_ip: str | None,
    inbound_host: str | None,
    inbound_proto: str = "http",
) -> dict[str, str]:
    """Copy inbound headers for the downstream request.

    Hop-by-hop headers are dropped. Names are lowercased and repeated
    headers are joined with ", ". X-Forwarded-For/Proto/Host describe the
    inbound hop and replace any caller-supplied values.

    Args:
        inbound: Raw inbound header pairs (any case, duplicates allowed).
        client_ip: Caller address.
        inbound_host: Host header the caller sent.
        inbound_proto: Scheme the caller used.

    Returns:
        Header mapping for httpx.
    """
    grouped: dict[str, list[str]] = {}
    for name, value in inbound:
        lowered = name.lower()
        if lowered in HOP_BY_HOP_HEADERS:
            continue
        grouped.setdefault(lowered, []).append(value)

    headers = {name: ", ".join(values) for name, values in grouped.items()}
    if client_ip:
        headers["x-forwarded-for"] = client_ip
    headers["x-forwarded-proto"] = inbound_proto
    if inbound_host:
        headers["x-forwarded-host"] = inbound_host
    return headers


def filter_response_headers(headers: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
    """Drop hop-by-hop headers from a downstream response.

    Repeated headers (e.g. set-cookie) stay as separate pairs, in order.
    """
    return [(name, value) for name, value in headers if name.lower() not in HOP_BY_HOP_HEADERS]


def _header_bytes(text: str) -> bytes:
    try:
        return text.encode("latin-1")
    except UnicodeEncodeError:
        return text.encode("utf-8")


def encode_header_pairs(headers: Mapping[str, str]) -> list[tuple[bytes, bytes]]:
    """Encode outbound headers to the bytes the caller sent.

    Starlette decodes header bytes as latin-1, so encoding back with latin-1
    restores them exactly, including obs-text (bytes >= 0x80) that httpx would
    otherwise reject as non-ASCII. Text outside latin-1 can only come from
    direct engine callers and is sent as UTF-8.
    """
    return [(_header_bytes(name), _header_bytes(value)) for name, value in headers.items()]
