"""Models describing the outcome of one webhook invocation."""

import enum
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from ..events import CanonicalEvent


class OutcomeStatus(str, enum.Enum):
    """How a webhook invocation ended when it did not fail."""
    REPORTED = "reported"
    IGNORED = "ignored"
    PENDING = "pending"


class WebhookOutcome(BaseModel):
    """Result of processing one inbound provider webhook."""
    status: OutcomeStatus
    event_name: str
    transaction_id: Optional[str] = None
    event: Optional[CanonicalEvent] = None
    already_processed: bool = False


class ReportTarget(BaseModel):
    """Status, amount and reference chosen for reporting after reconciliation."""
    status: Optional[str] = None
    amount: Optional[Decimal] = None
    psp_reference: Optional[str] = None
