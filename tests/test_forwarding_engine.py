"""Unit tests for the forwarding engine.

Downstream servers are simulated with httpx.MockTransport.
Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

import asyncio
from collections.abc import AsyncIterator, Callable
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest

from hookgate.exceptions import BadGatewayError, DestinationNotAllowedError, UnknownKeyError
from hookgate.forwarding import (
    Allowlist,
    ForwardingEngine,
    ForwardRequest,
    ForwardStream,
    create_forwarding_client,
)
from hookgate.forwarding.engine import describe_error
from hookgate.history import HistoryLedger
from hookgate.routing import RouteTable

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def ledger():
    ledger = HistoryLedger(None, max_per_key=10)
    yield ledger
    ledger.close()


@pytest.fixture
def table(routes_path: Path) -> RouteTable:
    return RouteTable(
        routes_path,
        {
            "orders": "https://a.example/hook",
            "blocked": "https://evil.example/hook",
        },
    )


@pytest.fixture
def make_engine(table: RouteTable, ledger: HistoryLedger) -> Callable[..., ForwardingEngine]:
    def factory(handler: Handler, allowlist: Allowlist | None = None) -> ForwardingEngine:
        client = create_forwarding_client(5.0, transport=httpx.MockTransport(handler))
        return ForwardingEngine(table, allowlist or Allowlist(["a.example"]), ledger, client)

    return factory


async def _drain(engine: ForwardingEngine, request: ForwardRequest) -> tuple[int, bytes]:
    relay = await engine.forward(request)
    body = b"".join([chunk async for chunk in relay.iter_body()])
    return relay.status_code, body


async def _consume(relay: ForwardStream) -> None:
    async for _ in relay.iter_body():
        pass


class _ResetMidBody(httpx.AsyncByteStream):
    """Downstream body that sends one chunk, then loses the connection."""

    async def __aiter__(self) -> AsyncIterator[bytes]:
        yield b"first-half"
        raise httpx.ReadError("connection reset mid-body")


class TestCreateForwardingClient:
    def test_no_default_headers(self) -> None:
        """Given a new client, httpx's default request headers are removed."""
        client = create_forwarding_client(None)

        assert "user-agent" not in client.headers
        assert "accept-encoding" not in client.headers
        assert client.follow_redirects is False


class TestDescribeError:
    def test_timeout_prefixed(self) -> None:
        detail = describe_error(httpx.ReadTimeout("slow"))

        assert detail.startswith("timeout: ReadTimeout")

    def test_connect_error(self) -> None:
        assert describe_error(httpx.ConnectError("refused")) == "ConnectError: refused"


class TestForwardingEngine:
    """Tests for ForwardingEngine.forward."""

    @pytest.mark.asyncio
    async def test_relays_request_and_response(
        self, make_engine, ledger: HistoryLedger, downstream_response
    ) -> None:
        """Given a POST with tail and query, the destination gets it all."""
        # Arrange
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return downstream_response(201, b"ok", {"x-reply": "1"})

        engine = make_engine(handler)
        body = b'{"a":1}'

        # Act
        status, content = await _drain(
            engine,
            ForwardRequest(
                key="orders",
                method="POST",
                tail="extra",
                query=(("x", "1"), ("x", "2")),
                headers=(("content-type", "application/json"), ("connection", "close")),
                body=body,
                client_ip="10.0.0.5",
                host="gateway.local",
            ),
        )

        # Assert
        assert status == 201
        assert content == b"ok"
        outbound = seen[0]
        assert str(outbound.url) == "https://a.example/hook/extra?x=1&x=2"
        assert outbound.content == body
        assert outbound.headers["content-type"] == "application/json"
        assert outbound.headers["x-forwarded-for"] == "10.0.0.5"
        assert outbound.headers["x-forwarded-host"] == "gateway.local"
        assert outbound.headers["host"] == "a.example"
        assert "connection" not in outbound.headers

        entry = ledger.query("orders")[0]
        assert entry.status == 201
        assert entry.method == "POST"
        assert entry.tail == "extra"
        assert entry.query == {"x": ["1", "2"]}
        assert entry.request_bytes == len(body)
        assert entry.response_bytes == 2
        assert entry.client_ip == "10.0.0.5"
        assert entry.error is None

    @pytest.mark.asyncio
    async def test_get_sends_no_body(self, make_engine, downstream_response) -> None:
        """Given a GET carrying a body, nothing is sent downstream."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return downstream_response(200)

        engine = make_engine(handler)

        await _drain(engine, ForwardRequest(key="orders", method="GET", body=b"ignored"))

        assert seen[0].content == b""

    @pytest.mark.asyncio
    async def test_unknown_key_no_attempt(self, make_engine, ledger: HistoryLedger, downstream_response) -> None:
        """Given an unknown key, no request is made and nothing is recorded."""
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return downstream_response(200)

        engine = make_engine(handler)

        with pytest.raises(UnknownKeyError):
            await engine.forward(ForwardRequest(key="missing", method="POST"))

        assert calls == []
        assert ledger.keys() == []

    @pytest.mark.asyncio
    async def test_allowlist_rejection_no_attempt(
        self, make_engine, ledger: HistoryLedger, downstream_response
    ) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return downstream_response(200)

        engine = make_engine(handler)

        with pytest.raises(DestinationNotAllowedError, match="evil.example"):
            await engine.forward(ForwardRequest(key="blocked", method="POST"))

        assert calls == []
        assert ledger.query("blocked") == []

    @pytest.mark.asyncio
    async def test_allowlist_checked_at_forward_time(self, make_engine, downstream_response) -> None:
        """Given a stored route, the current allowlist still applies."""
        engine = make_engine(lambda r: downstream_response(200), Allowlist(["other.example"]))

        with pytest.raises(DestinationNotAllowedError):
            await engine.forward(ForwardRequest(key="orders", method="POST"))

    @pytest.mark.asyncio
    async def test_connect_error_is_bad_gateway(self, make_engine, ledger: HistoryLedger) -> None:
        """Given a transport failure, raises BadGatewayError and records a 502."""

        # Arrange
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        engine = make_engine(handler)

        # Act
        with pytest.raises(BadGatewayError) as exc_info:
            await engine.forward(ForwardRequest(key="orders", method="POST", body=b"abc"))

        # Assert
        assert exc_info.value.status_code == 502
        entry = ledger.query("orders")[0]
        assert entry.status == 502
        assert entry.request_bytes == 3
        assert entry.response_bytes == 0
        assert "ConnectError" in (entry.error or "")

    @pytest.mark.asyncio
    async def test_timeout_is_bad_gateway(self, make_engine, ledger: HistoryLedger) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        engine = make_engine(handler)

        with pytest.raises(BadGatewayError, match="timeout"):
            await engine.forward(ForwardRequest(key="orders", method="POST"))

        assert (ledger.query("orders")[0].error or "").startswith("timeout:")

    @pytest.mark.asyncio
    async def test_downstream_error_status_is_relayed(
        self, make_engine, ledger: HistoryLedger, downstream_response
    ) -> None:
        """Given a 500 from downstream, it is relayed, not turned into 502."""
        engine = make_engine(lambda r: downstream_response(500, b"nope"))

        status, content = await _drain(engine, ForwardRequest(key="orders", method="POST"))

        assert status == 500
        assert content == b"nope"
        assert ledger.query("orders")[0].error is None

    @pytest.mark.asyncio
    async def test_redirect_not_followed(self, make_engine, downstream_response) -> None:
        engine = make_engine(lambda r: downstream_response(302, headers={"location": "https://b.example/"}))

        relay = await engine.forward(ForwardRequest(key="orders", method="POST"))
        await _consume(relay)

        assert relay.status_code == 302
        assert ("location", "https://b.example/") in relay.headers

    @pytest.mark.asyncio
    async def test_response_hop_by_hop_removed(self, make_engine, downstream_response) -> None:
        engine = make_engine(
            lambda r: downstream_response(
                200,
                b"x",
                [("set-cookie", "a=1"), ("connection", "close"), ("set-cookie", "b=2")],
            )
        )

        relay = await engine.forward(ForwardRequest(key="orders", method="POST"))
        await _consume(relay)

        assert relay.headers == [("set-cookie", "a=1"), ("set-cookie", "b=2")]

    @pytest.mark.asyncio
    async def test_finalize_before_body_marks_error(
        self, make_engine, ledger: HistoryLedger, downstream_response
    ) -> None:
        """Given a relay stopped before the body ended, the entry carries an error."""
        engine = make_engine(lambda r: downstream_response(200, b"data"))
        relay = await engine.forward(ForwardRequest(key="orders", method="POST"))

        relay.abort("caller disconnected")
        entry = await relay.finalize()

        assert entry.status == 200
        assert entry.error == "caller disconnected"
        assert len(ledger.query("orders")) == 1

    @pytest.mark.asyncio
    async def test_finalize_without_reason_still_marks_incomplete(
        self, make_engine, ledger: HistoryLedger, downstream_response
    ) -> None:
        engine = make_engine(lambda r: downstream_response(200, b"data"))
        relay = await engine.forward(ForwardRequest(key="orders", method="POST"))

        entry = await relay.finalize()

        assert "before the response body was complete" in (entry.error or "")

    @pytest.mark.asyncio
    async def test_finalize_is_idempotent(self, make_engine, ledger: HistoryLedger, downstream_response) -> None:
        engine = make_engine(lambda r: downstream_response(200, b"data"))
        relay = await engine.forward(ForwardRequest(key="orders", method="POST"))

        await _consume(relay)
        await relay.finalize()

        assert len(ledger.query("orders")) == 1
        assert relay.entry is not None
        assert relay.entry.response_bytes == 4

    @pytest.mark.asyncio
    async def test_concurrent_forwards_each_recorded(
        self, make_engine, ledger: HistoryLedger, downstream_response
    ) -> None:
        """Given concurrent forwards, every attempt gets exactly one entry."""
        engine = make_engine(lambda r: downstream_response(200, b"x"))

        await asyncio.gather(*(_drain(engine, ForwardRequest(key="orders", method="POST")) for _ in range(8)))

        assert len(ledger.query("orders")) == 8

    @pytest.mark.asyncio
    async def test_downstream_failure_mid_body_is_reraised(
        self, table: RouteTable, ledger: HistoryLedger
    ) -> None:
        """Given a body that fails halfway, the error reaches the relay after being recorded."""
        # Arrange
        logger = MagicMock()
        client = create_forwarding_client(
            5.0, transport=httpx.MockTransport(lambda r: httpx.Response(200, stream=_ResetMidBody()))
        )
        engine = ForwardingEngine(table, Allowlist(["a.example"]), ledger, client, system_logger=logger)
        relay = await engine.forward(ForwardRequest(key="orders", method="GET"))
        received: list[bytes] = []

        # Act
        with pytest.raises(httpx.ReadError):
            async for chunk in relay.iter_body():
                received.append(chunk)

        # Assert
        assert received == [b"first-half"]
        entries = ledger.query("orders")
        assert len(entries) == 1
        assert entries[0].status == 200
        assert entries[0].response_bytes == len(b"first-half")
        assert entries[0].error == "ReadError: connection reset mid-body"
        logged = logger.warning.call_args[0][0]
        assert logged["event"] == "stream_interrupted"

    @pytest.mark.asyncio
    async def test_non_ascii_header_bytes_forwarded_unchanged(
        self, make_engine, ledger: HistoryLedger, downstream_response
    ) -> None:
        """Given a header value with bytes >= 0x80, the destination gets the same bytes."""
        # Arrange
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return downstream_response(200)

        engine = make_engine(handler)
        # Starlette hands header bytes over decoded as latin-1
        note = "café".encode().decode("latin-1")

        # Act
        await _drain(engine, ForwardRequest(key="orders", method="POST", headers=(("x-note", note),)))

        # Assert
        assert (b"x-note", "café".encode()) in seen[0].headers.raw
        assert len(ledger.query("orders")) == 1

    @pytest.mark.asyncio
    async def test_raw_response_headers_relayed_unchanged(self, make_engine, downstream_response) -> None:
        engine = make_engine(
            lambda r: downstream_response(200, b"", [("x-note", "café".encode()), ("connection", "close")])
        )

        relay = await engine.forward(ForwardRequest(key="orders", method="GET"))
        await _consume(relay)

        assert relay.raw_headers == [(b"x-note", "café".encode())]
