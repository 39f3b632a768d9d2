"""Admin API authentication.

The admin credential is a shared token from config (admin.token or
HOOKGATE_ADMIN_TOKEN). It is accepted in either form:
- Authorization: Bearer <token>
- X-Admin-Token: <token>

When no token is configured every admin request passes. The forwarding
endpoint and /healthz are never guarded.
"""

from __future__ import annotations

__all__ = [
    "ADMIN_TOKEN_HEADER",
    "extract_admin_token",
    "generate_token",
    "require_admin",
    "validate_token",
]

import hmac
import secrets

from fastapi import Request

from hookgate.api.errors import APIError, ErrorCode

ADMIN_TOKEN_HEADER = "x-admin-token"


def generate_token() -> str:
    """Generate a random admin token (32 bytes, hex encoded)."""
    return secrets.token_hex(32)


def validate_token(provided: str | None, expected: str) -> bool:
    """Compare tokens in constant time."""
    if not provided:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def extract_admin_token(request: Request) -> str | None:
    """Get the admin token from the Authorization or X-Admin-Token header."""
    auth_header = request.headers.get("authorization", "")
    scheme, _, credentials = auth_header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()

    header_token = request.headers.get(ADMIN_TOKEN_HEADER, "").strip()
    return header_token or None


async def require_admin(request: Request) -> None:
    """FastAPI dependency guarding admin routes.

    Raises:
        APIError: 401 AUTH_REQUIRED when a token is configured and the
            request doesn't carry a matching one.
    """
    config = getattr(request.app.state, "config", None)
    expected = config.admin.token if config is not None else None
    if not expected:
        return

    if not validate_token(extract_admin_token(request), expected):
        raise APIError(
            status_code=401,
            code=ErrorCode.AUTH_REQUIRED,
            message="Unauthorized",
        )
