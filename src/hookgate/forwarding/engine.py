"""Forwarding engine.

Relays one inbound request to its route's destination and the response back:

1. Resolve the key (UnknownKeyError, no downstream attempt)
2. Check the destination against the allowlist (DestinationNotAllowedError)
3. Build the destination URL (tail path + query appended)
4. Copy headers minus hop-by-hop, add X-Forwarded-*
5. Send the raw body unchanged (none for GET/HEAD), redirects disabled
6. Relay status, headers minus hop-by-hop, and body chunks as they arrive
7. Record exactly one history entry per downstream attempt

Transport failures before the response headers raise BadGatewayError after
recording a 502 entry. Once headers have been relayed, failures (downstream
or caller disconnect) are recorded on the entry; a downstream failure is then
re-raised so the caller's connection is dropped rather than the truncated
body looking complete. No retries are made.
"""

from __future__ import annotations

__all__ = [
    "ForwardRequest",
    "ForwardStream",
    "ForwardingEngine",
    "create_forwarding_client",
    "describe_error",
]

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from dataclasses import dataclass

import anyio
import httpx

from hookgate.constants import (
    BAD_GATEWAY_STATUS,
    BODYLESS_METHODS,
    CLIENT_CLOSED_REQUEST_STATUS,
)
from hookgate.exceptions import BadGatewayError, DestinationNotAllowedError, UnknownKeyError
from hookgate.forwarding.allowlist import Allowlist, host_of
from hookgate.forwarding.headers import (
    build_outbound_headers,
    encode_header_pairs,
    filter_response_headers,
    is_hop_by_hop,
)
from hookgate.forwarding.urls import build_destination_url
from hookgate.history import HistoryEntry, HistoryLedger, query_multimap
from hookgate.routing.route_table import RouteTable
from hookgate.telemetry.system_logger import get_system_logger

# httpx adds these to every request unless the client's defaults are removed
_CLIENT_DEFAULT_HEADERS = ("accept", "accept-encoding", "connection", "user-agent")


def create_forwarding_client(
    timeout_seconds: float | None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the shared client used for all downstream requests.

    Redirects are never followed (the caller decides), there is no
    connection cap, and httpx's default request headers are removed so only
    the caller's headers go downstream.

    Args:
        timeout_seconds: Per-phase timeout, or None for no timeout.
        transport: Custom transport (tests use httpx.MockTransport).
    """
    client = httpx.AsyncClient(
        follow_redirects=False,
        timeout=httpx.Timeout(timeout_seconds),
        limits=httpx.Limits(max_connections=None, max_keepalive_connections=20),
        transport=transport,
    )
    for name in _CLIENT_DEFAULT_HEADERS:
        client.headers.pop(name, None)
    return client


def describe_error(exc: BaseException) -> str:
    """Short error detail for history entries and 502 bodies."""
    message = str(exc).strip()
    name = type(exc).__name__
    detail = f"{name}: {message}" if message else name
    if isinstance(exc, httpx.TimeoutException):
        return f"timeout: {detail}"
    return detail


@dataclass(frozen=True, slots=True)
class ForwardRequest:
    """Inbound request as seen by the engine.

    Attributes:
        key: Route key from the path.
        method: HTTP method.
        tail: Decoded tail path ("" when absent).
        query: Decoded query pairs in original order.
        headers: Raw header pairs in original order.
        body: Raw body bytes (ignored for GET/HEAD).
        client_ip: Caller address.
        host: Host header the caller sent.
        scheme: Scheme the caller used.
    """

    key: str
    method: str
    tail: str = ""
    query: tuple[tuple[str, str], ...] = ()
    headers: tuple[tuple[str, str], ...] = ()
    body: bytes | None = None
    client_ip: str | None = None
    host: str | None = None
    scheme: str = "http"


class ForwardStream:
    """A downstream response being relayed to the caller.

    Iterate iter_body() to relay the body. finalize() records the history
    entry and closes the downstream response; it is idempotent, shielded
    from cancellation, and called automatically when iteration completes.
    Callers that stop early (disconnect, error) must call it themselves.
    """

    def __init__(
        self,
        engine: "ForwardingEngine",
        request: ForwardRequest,
        response: httpx.Response,
        *,
        started: float,
        request_bytes: int,
    ) -> None:
        self._engine = engine
        self._request = request
        self._response = response
        self._started = started
        self._request_bytes = request_bytes
        self._response_bytes = 0
        self._error: str | None = None
        self._complete = False
        self._entry: HistoryEntry | None = None

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> list[tuple[str, str]]:
        """Response headers to relay (hop-by-hop removed, duplicates kept)."""
        return filter_response_headers(self._response.headers.multi_items())

    @property
    def raw_headers(self) -> list[tuple[bytes, bytes]]:
        """Response header bytes to relay, exactly as the destination sent them."""
        return [
            (name, value)
            for name, value in self._response.headers.raw
            if not is_hop_by_hop(name.decode("latin-1"))
        ]

    @property
    def response_bytes(self) -> int:
        """Body bytes relayed so far."""
        return self._response_bytes

    @property
    def entry(self) -> HistoryEntry | None:
        """History entry, once finalized."""
        return self._entry

    def abort(self, detail: str) -> None:
        """Mark the relay as interrupted; the first reason wins."""
        if self._error is None:
            self._error = detail

    async def iter_body(self) -> AsyncIterator[bytes]:
        """Yield raw body chunks (still content-encoded) as they arrive.

        A downstream failure mid-body is recorded, then re-raised so the
        server drops the caller's connection instead of ending the response
        as if it were complete.
        """
        try:
            async for chunk in self._response.aiter_raw():
                self._response_bytes += len(chunk)
                yield chunk
            self._complete = True
        except httpx.HTTPError as e:
            self.abort(describe_error(e))
            self._engine._logger.warning(
                {
                    "event": "stream_interrupted",
                    "message": f"Downstream stream for '{self._request.key}' failed: {e}",
                    "key": self._request.key,
                    "status": self.status_code,
                    "response_bytes": self._response_bytes,
                    "error": self._error,
                }
            )
            await self.finalize()
            raise
        await self.finalize()

    async def finalize(self) -> HistoryEntry:
        """Record the history entry (once) and close the downstream response."""
        if self._entry is not None:
            return self._entry
        if not self._complete:
            self.abort("relay ended before the response body was complete")

        self._entry = self._engine._record(
            self._request,
            status=self.status_code,
            started=self._started,
            request_bytes=self._request_bytes,
            response_bytes=self._response_bytes,
            error=self._error,
        )
        with anyio.CancelScope(shield=True):
            await self._response.aclose()
        return self._entry


class ForwardingEngine:
    """Resolves routes and relays requests to their destinations."""

    def __init__(
        self,
        routes: RouteTable,
        allowlist: Allowlist,
        history: HistoryLedger,
        client: httpx.AsyncClient,
        system_logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            routes: Route table (read only).
            allowlist: Destination host allowlist.
            history: Ledger receiving one entry per downstream attempt.
            client: Shared HTTP client (see create_forwarding_client).
            system_logger: Logger for rejected and failed forwards.
        """
        self._routes = routes
        self._allowlist = allowlist
        self._history = history
        self._client = client
        self._logger = system_logger or get_system_logger()

    @property
    def allowlist(self) -> Allowlist:
        return self._allowlist

    def resolve(self, key: str) -> str:
        """Return the allowlisted destination for key.

        Raises:
            UnknownKeyError: If no route exists for key.
            DestinationNotAllowedError: If the destination host is not allowlisted.
        """
        destination = self._routes.get(key)
        if destination is None:
            self._log_rejected(key, "unknown_key")
            raise UnknownKeyError(f"No route registered for key '{key}'", key=key)

        if not self._allowlist.is_allowed(destination):
            self._log_rejected(key, "destination_not_allowed", destination=destination)
            raise DestinationNotAllowedError(
                f"Destination host '{host_of(destination) or destination}' is not allowlisted",
                key=key,
            )
        return destination

    async def forward(self, request: ForwardRequest) -> ForwardStream:
        """Send request downstream and return the response for relaying.

        Args:
            request: Inbound request.

        Returns:
            ForwardStream positioned at the start of the response body.

        Raises:
            UnknownKeyError: No route for the key (nothing recorded).
            DestinationNotAllowedError: Allowlist rejection (nothing recorded).
            BadGatewayError: Transport failure before response headers (recorded as 502).
        """
        destination = self.resolve(request.key)
        method = request.method.upper()

        content = None if method in BODYLESS_METHODS else (request.body or b"")
        request_bytes = len(content) if content else 0
        url = build_destination_url(destination, request.tail, request.query)
        headers = encode_header_pairs(
            build_outbound_headers(
                request.headers,
                client_ip=request.client_ip,
                inbound_host=request.host,
                inbound_proto=request.scheme,
            )
        )

        started = time.monotonic()
        try:
            outbound = self._client.build_request(method, url, headers=headers, content=content)
            response = await self._client.send(outbound, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            detail = describe_error(e)
            self._record(
                request,
                status=BAD_GATEWAY_STATUS,
                started=started,
                request_bytes=request_bytes,
                response_bytes=0,
                error=detail,
            )
            self._logger.warning(
                {
                    "event": "forward_failed",
                    "message": f"Forward for '{request.key}' failed: {detail}",
                    "key": request.key,
                    "url": url,
                    "error": detail,
                }
            )
            raise BadGatewayError(detail, key=request.key) from e
        except asyncio.CancelledError:
            self._record(
                request,
                status=CLIENT_CLOSED_REQUEST_STATUS,
                started=started,
                request_bytes=request_bytes,
                response_bytes=0,
                error="cancelled before downstream response",
            )
            raise

        return ForwardStream(self, request, response, started=started, request_bytes=request_bytes)

    def _record(
        self,
        request: ForwardRequest,
        *,
        status: int,
        started: float,
        request_bytes: int,
        response_bytes: int,
        error: str | None,
    ) -> HistoryEntry:
        entry = HistoryEntry(
            key=request.key,
            method=request.method.upper(),
            tail=request.tail,
            query=query_multimap(request.query),
            status=status,
            duration_ms=round((time.monotonic() - started) * 1000),
            request_bytes=request_bytes,
            response_bytes=response_bytes,
            client_ip=request.client_ip,
            error=error,
        )
        self._history.append(entry)
        return entry

    def _log_rejected(self, key: str, reason: str, **context: str) -> None:
        self._logger.warning(
            {
                "event": "forward_rejected",
                "message": f"Forward for '{key}' rejected: {reason}",
                "key": key,
                "reason": reason,
                **context,
            }
        )
