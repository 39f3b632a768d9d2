"""API client helper for CLI commands that talk to a running gateway.

Runtime commands (routes, history, reload, status) call the gateway's admin
API over HTTP at the configured host/port. The admin token from config (or
HOOKGATE_ADMIN_TOKEN) is sent as a Bearer credential when set.

File-based commands (config show, config path) read files directly instead
of using this module.
"""

from __future__ import annotations

__all__ = [
    "GatewayAPIError",
    "GatewayNotRunningError",
    "api_request",
    "gateway_base_url",
]

import json
import time
from typing import Any

import click
import httpx

from hookgate.config import AppConfig, load_config
from hookgate.constants import CLI_HTTP_TIMEOUT_SECONDS
from hookgate.exceptions import ConfigurationError

# Wildcard bind addresses are reached through loopback
_WILDCARD_HOSTS = {"0.0.0.0": "127.0.0.1", "::": "::1", "": "127.0.0.1"}


class GatewayNotRunningError(click.ClickException):
    """Raised when no gateway answers at the configured address."""

    def __init__(self, base_url: str) -> None:
        super().__init__(f"Gateway is not running at {base_url}.\nStart it with: hookgate start")
        self.base_url = base_url


class GatewayAPIError(click.ClickException):
    """Raised when an admin API request fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        if status_code:
            super().__init__(f"API error ({status_code}): {message}")
        else:
            super().__init__(f"API error: {message}")
        self.status_code = status_code


def gateway_base_url(config: AppConfig) -> str:
    """Base URL of the gateway described by config."""
    host = _WILDCARD_HOSTS.get(config.server.host, config.server.host)
    if ":" in host:
        host = f"[{host}]"
    return f"http://{host}:{config.server.port}"


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except (json.JSONDecodeError, ValueError):
        return response.text or response.reason_phrase

    detail = body.get("detail", body) if isinstance(body, dict) else body
    if isinstance(detail, dict):
        return str(detail.get("message") or detail.get("code") or detail)
    return str(detail)


def api_request(
    method: str,
    endpoint: str,
    *,
    config: AppConfig | None = None,
    json_data: dict[str, Any] | None = None,
    params: dict[str, Any] | None = None,
    timeout: float = CLI_HTTP_TIMEOUT_SECONDS,
    max_retries: int = 3,
    backoff_ms: int = 100,
) -> dict[str, Any]:
    """Make an admin API request to the running gateway.

    Retries connection failures with exponential backoff (covers the race
    when a command runs right after 'hookgate start').

    Args:
        method: HTTP method (GET, PUT, DELETE, POST).
        endpoint: API path (e.g., "/routes/orders").
        config: Effective config. Loaded via load_config() if None.
        json_data: Optional JSON body.
        params: Optional query parameters.
        timeout: Request timeout in seconds.
        max_retries: Maximum connection attempts.
        backoff_ms: Initial backoff in milliseconds (doubles each retry).

    Returns:
        Parsed JSON object.

    Raises:
        GatewayNotRunningError: If the gateway can't be reached.
        GatewayAPIError: If the request fails or returns an error status.
    """
    if config is None:
        try:
            config = load_config()
        except ConfigurationError as e:
            raise click.ClickException(str(e)) from e

    base_url = gateway_base_url(config)
    headers = {}
    if config.admin.token:
        headers["Authorization"] = f"Bearer {config.admin.token}"

    last_error: Exception | None = None
    for attempt in range(max_retries):
        try:
            with httpx.Client(base_url=base_url, timeout=timeout, headers=headers) as client:
                response = client.request(method, endpoint, json=json_data, params=params)
        except httpx.ConnectError as e:
            last_error = e
            if attempt < max_retries - 1:
                time.sleep(backoff_ms / 1000 * (2**attempt))
            continue
        except httpx.HTTPError as e:
            raise GatewayAPIError(str(e)) from e

        if response.is_error:
            raise GatewayAPIError(_error_message(response), response.status_code)

        result = response.json()
        if isinstance(result, dict):
            return result
        return {"value": result}

    raise GatewayNotRunningError(base_url) from last_error
