"""Forwarding history: durable JSONL log plus bounded per-key memory view."""

from hookgate.history.ledger import HistoryLedger
from hookgate.history.models import HistoryEntry, query_multimap

__all__ = [
    "HistoryEntry",
    "HistoryLedger",
    "query_multimap",
]
