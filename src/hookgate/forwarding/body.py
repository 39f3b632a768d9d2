"""Raw request body reading."""

from __future__ import annotations

__all__ = ["read_raw_body"]

from starlette.requests import ClientDisconnect, Request

from hookgate.exceptions import InvalidBodyError


async def read_raw_body(request: Request, max_bytes: int, *, key: str | None = None) -> bytes:
    """Read the inbound body exactly as received, up to max_bytes.

    The bytes are never decoded or re-serialized, so signatures computed
    over the raw payload still verify downstream.

    Args:
        request: Inbound Starlette request.
        max_bytes: Largest body accepted.
        key: Route key, for error context.

    Returns:
        The raw body bytes (empty when the caller sent none).

    Raises:
        InvalidBodyError: If the declared or actual size exceeds max_bytes,
            the content-length is malformed, or the caller disconnects.
    """
    declared = request.headers.get("content-length")
    if declared is not None:
        try:
            declared_length = int(declared)
        except ValueError as e:
            raise InvalidBodyError(f"Invalid body: malformed content-length {declared!r}", key=key) from e
        if declared_length > max_bytes:
            raise InvalidBodyError(f"Invalid body: {declared_length} bytes exceeds limit of {max_bytes}", key=key)

    body = bytearray()
    try:
        async for chunk in request.stream():
            body.extend(chunk)
            if len(body) > max_bytes:
                raise InvalidBodyError(f"Invalid body: exceeds limit of {max_bytes} bytes", key=key)
    except ClientDisconnect as e:
        raise InvalidBodyError("Invalid body: client disconnected while sending", key=key) from e

    return bytes(body)
