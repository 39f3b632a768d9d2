"""Unit tests for the CLI's admin API client."""

from unittest.mock import MagicMock, patch

import click
import httpx
import pytest

from hookgate.cli.api_client import (
    GatewayAPIError,
    GatewayNotRunningError,
    api_request,
    gateway_base_url,
)
from hookgate.config import AdminConfig, AppConfig, ServerConfig


def _response(status_code: int, payload: object) -> httpx.Response:
    return httpx.Response(status_code, json=payload, request=httpx.Request("GET", "http://test"))


class TestErrors:
    def test_not_running_is_click_exception(self) -> None:
        error = GatewayNotRunningError("http://127.0.0.1:3030")

        assert isinstance(error, click.ClickException)
        assert "hookgate start" in str(error)

    def test_api_error_includes_status(self) -> None:
        error = GatewayAPIError("Not found", status_code=404)

        assert "404" in str(error)
        assert error.status_code == 404


class TestGatewayBaseUrl:
    @pytest.mark.parametrize(
        ("host", "expected"),
        [
            ("127.0.0.1", "http://127.0.0.1:3030"),
            ("0.0.0.0", "http://127.0.0.1:3030"),
            ("::", "http://[::1]:3030"),
            ("gateway.local", "http://gateway.local:3030"),
        ],
    )
    def test_wildcard_hosts_use_loopback(self, host: str, expected: str) -> None:
        config = AppConfig(server=ServerConfig(host=host, port=3030))

        assert gateway_base_url(config) == expected


class TestApiRequest:
    """Tests for api_request."""

    def test_sends_bearer_token(self) -> None:
        """Given a configured token, it is sent as a Bearer credential."""
        # Arrange
        config = AppConfig(admin=AdminConfig(token="tok"))
        with patch("hookgate.cli.api_client.httpx.Client") as mock_client_cls:
            client = mock_client_cls.return_value.__enter__.return_value
            client.request.return_value = _response(200, {"routes": {}, "count": 0})

            # Act
            result = api_request("GET", "/routes", config=config)

        # Assert
        assert result == {"routes": {}, "count": 0}
        assert mock_client_cls.call_args.kwargs["headers"] == {"Authorization": "Bearer tok"}

    def test_error_body_message_extracted(self) -> None:
        """Given a structured error body, its message is surfaced."""
        config = AppConfig()
        body = {"detail": {"code": "ROUTE_NOT_FOUND", "message": "Route 'x' not found"}}
        with patch("hookgate.cli.api_client.httpx.Client") as mock_client_cls:
            mock_client_cls.return_value.__enter__.return_value.request.return_value = _response(404, body)

            with pytest.raises(GatewayAPIError, match="Route 'x' not found") as exc_info:
                api_request("DELETE", "/routes/x", config=config)

        assert exc_info.value.status_code == 404

    def test_connection_refused_retries_then_fails(self) -> None:
        # Arrange
        config = AppConfig()
        client = MagicMock()
        client.request.side_effect = httpx.ConnectError("refused")
        with patch("hookgate.cli.api_client.httpx.Client") as mock_client_cls, patch(
            "hookgate.cli.api_client.time.sleep"
        ) as mock_sleep:
            mock_client_cls.return_value.__enter__.return_value = client

            # Act
            with pytest.raises(GatewayNotRunningError):
                api_request("GET", "/control/status", config=config, max_retries=3)

        # Assert
        assert client.request.call_count == 3
        assert mock_sleep.call_count == 2
