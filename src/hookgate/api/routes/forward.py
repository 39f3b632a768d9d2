"""Forwarding surface.

Provides:
- <METHOD> /forward/{key} - Relay to the route's destination
- <METHOD> /forward/{key}/{tail} - Same, with tail appended to the destination path

Any HTTP method is relayed, extension methods (PROPFIND, custom verbs)
included. Errors use the forwarding format {"error": ..., "detail": ...}
(see api.errors.forwarding_error_handler).
"""

__all__ = ["AnyMethodRoute", "RelayResponse", "router"]

import asyncio

from fastapi import APIRouter, Request
from fastapi.routing import APIRoute
from starlette.requests import ClientDisconnect
from starlette.responses import StreamingResponse
from starlette.routing import Match
from starlette.types import Receive, Scope, Send

from hookgate.api.deps import ConfigDep, EngineDep
from hookgate.config import AppConfig
from hookgate.constants import BODYLESS_METHODS, FORWARD_METHODS
from hookgate.forwarding import ForwardingEngine, ForwardRequest, ForwardStream
from hookgate.forwarding.body import read_raw_body
from hookgate.forwarding.engine import describe_error


class AnyMethodRoute(APIRoute):
    """APIRoute that dispatches every HTTP method to its endpoint.

    The declared methods only document the common ones; a path match is
    never turned into a 405.
    """

    def matches(self, scope: Scope) -> tuple[Match, Scope]:
        match, child_scope = super().matches(scope)
        if match is Match.PARTIAL:
            match = Match.FULL
        return match, child_scope

    async def handle(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.app(scope, receive, send)


router = APIRouter(route_class=AnyMethodRoute)


class RelayResponse(StreamingResponse):
    """Streams a ForwardStream to the caller.

    Whatever happens while sending (normal end, caller disconnect, task
    cancellation, downstream failure), the stream is finalized exactly once:
    the downstream response is closed and the history entry recorded.
    Header bytes are relayed exactly as the destination sent them.
    """

    def __init__(self, relay: ForwardStream) -> None:
        super().__init__(relay.iter_body(), status_code=relay.status_code)
        self.relay = relay
        for name, value in relay.raw_headers:
            self.raw_headers.append((name.lower(), value))

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        except asyncio.CancelledError:
            self.relay.abort("caller disconnected")
            raise
        except (OSError, ClientDisconnect) as e:
            self.relay.abort(f"caller disconnected: {type(e).__name__}")
            raise
        except Exception as e:
            self.relay.abort(f"relay failed: {describe_error(e)}")
            raise
        finally:
            await self.relay.finalize()


async def _relay(
    key: str,
    tail: str,
    request: Request,
    engine: ForwardingEngine,
    config: AppConfig,
) -> RelayResponse:
    method = request.method.upper()
    body = None
    if method not in BODYLESS_METHODS:
        body = await read_raw_body(request, config.forwarding.max_body_bytes, key=key)

    relay = await engine.forward(
        ForwardRequest(
            key=key,
            method=method,
            tail=tail,
            query=tuple(request.query_params.multi_items()),
            headers=tuple(request.headers.items()),
            body=body,
            client_ip=request.client.host if request.client else None,
            host=request.headers.get("host"),
            scheme=request.url.scheme,
        )
    )
    return RelayResponse(relay)


@router.api_route("/{key}", methods=list(FORWARD_METHODS), include_in_schema=False)
async def forward(key: str, request: Request, engine: EngineDep, config: ConfigDep) -> RelayResponse:
    """Relay the request to the destination registered for key.

    Raises:
        ForwardingError: unknown_key, destination_not_allowed, bad_gateway
            or invalid_body; rendered by the forwarding error handler.
    """
    return await _relay(key, "", request, engine, config)


@router.api_route("/{key}/{tail:path}", methods=list(FORWARD_METHODS), include_in_schema=False)
async def forward_with_tail(
    key: str,
    tail: str,
    request: Request,
    engine: EngineDep,
    config: ConfigDep,
) -> RelayResponse:
    """Relay the request with tail appended to the destination path."""
    return await _relay(key, tail, request, engine, config)
