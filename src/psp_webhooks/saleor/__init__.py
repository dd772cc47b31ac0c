"""Saleor ledger integration."""

from .models import HistoryEvent, TransactionDetails, TransactionEventReportResult
from .client import LedgerClient, SaleorClient

__all__ = [
    "HistoryEvent",
    "TransactionDetails",
    "TransactionEventReportResult",
    "LedgerClient",
    "SaleorClient",
]
