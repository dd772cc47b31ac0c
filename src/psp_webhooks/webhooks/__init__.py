"""Ledger sync webhook handlers."""

from .sync_handlers import (
    TransactionActionRequestedEvent,
    TransactionActionResponse,
    failure_response,
    handle_cancelation_requested,
    handle_refund_requested,
)

__all__ = [
    "TransactionActionRequestedEvent",
    "TransactionActionResponse",
    "failure_response",
    "handle_cancelation_requested",
    "handle_refund_requested",
]
