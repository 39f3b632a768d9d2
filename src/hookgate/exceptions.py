"""Custom exceptions for hookgate.

Exceptions are organized into three categories:

Forwarding Errors (caller gets a JSON error body, gateway continues):
    - UnknownKeyError: No route registered for the key (404)
    - DestinationNotAllowedError: Destination host rejected by the allowlist (400)
    - BadGatewayError: Downstream transport failure (502)
    - InvalidBodyError: Request body could not be read within limits (400)

Route Storage Errors (admin caller gets a failed mutation):
    - RoutePersistenceError: Route file could not be written

Startup Failures (gateway refuses to start):
    - ConfigurationError: Config file or environment overrides are invalid

Usage:
    from hookgate.exceptions import UnknownKeyError, RoutePersistenceError
"""

from __future__ import annotations

__all__ = [
    "BadGatewayError",
    "ConfigurationError",
    "DestinationNotAllowedError",
    "ForwardingError",
    "HookgateError",
    "InvalidBodyError",
    "RoutePersistenceError",
    "UnknownKeyError",
]


class HookgateError(Exception):
    """Base class for all hookgate errors."""


# =============================================================================
# Forwarding Errors
# =============================================================================


class ForwardingError(HookgateError):
    """A forward could not be completed.

    Subclasses set ``code`` (machine-readable, used as the ``error`` field of
    the JSON response) and ``status_code`` (HTTP status sent to the caller).

    Attributes:
        detail: Human-readable description of the failure.
        key: Route key of the failed forward, if known.
    """

    code: str = "forwarding_error"
    status_code: int = 500

    def __init__(self, detail: str, *, key: str | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.key = key


class UnknownKeyError(ForwardingError):
    """No route is registered for the requested key.

    No downstream attempt is made.
    """

    code = "unknown_key"
    status_code = 404


class DestinationNotAllowedError(ForwardingError):
    """The route's destination host is not on the allowlist.

    No downstream attempt is made.
    """

    code = "destination_not_allowed"
    status_code = 400


class BadGatewayError(ForwardingError):
    """The downstream request failed before a response was received.

    Connection errors, DNS failures and timeouts all end up here.
    """

    code = "bad_gateway"
    status_code = 502


class InvalidBodyError(ForwardingError):
    """The inbound request body could not be read.

    Raised when the body exceeds the configured size limit or the caller
    disconnects while sending it.
    """

    code = "invalid_body"
    status_code = 400


# =============================================================================
# Route Storage Errors
# =============================================================================


class RoutePersistenceError(HookgateError):
    """The route table could not be written to disk.

    The in-memory table is left unchanged when this is raised, so memory
    and disk never diverge.
    """


# =============================================================================
# Startup Failures
# =============================================================================


class ConfigurationError(HookgateError):
    """Configuration is invalid or incomplete.

    Raised when:
    - Config file contains invalid JSON
    - Config file fails Pydantic validation
    - A HOOKGATE_* environment override has an invalid value

    Exit code 78 (EX_CONFIG) indicates configuration failure.
    """

    exit_code = 78
