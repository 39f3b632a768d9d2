"""Forwarding core: allowlist, URL/header construction, body reading, engine."""

from hookgate.forwarding.allowlist import Allowlist
from hookgate.forwarding.engine import (
    ForwardingEngine,
    ForwardRequest,
    ForwardStream,
    create_forwarding_client,
)
from hookgate.forwarding.headers import HOP_BY_HOP_HEADERS

__all__ = [
    "HOP_BY_HOP_HEADERS",
    "Allowlist",
    "ForwardRequest",
    "ForwardStream",
    "ForwardingEngine",
    "create_forwarding_client",
]
