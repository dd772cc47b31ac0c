"""Normalized provider-side state returned by connectors."""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class RefundRecord(BaseModel):
    """One refund attempt known to the provider."""
    correlation_id: str = Field(..., description="Identifier shared with the ledger's refund request")
    status: str
    amount: Optional[Decimal] = None

    @property
    def is_pending(self) -> bool:
        return self.status.lower() == "pending"


class ReconciliationState(BaseModel):
    """Authoritative order snapshot fetched from the provider."""
    provider_order_id: str
    status: str
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    refunds: List[RefundRecord] = Field(default_factory=list)


class PaymentState(BaseModel):
    """Payment snapshot returned by a cancellation call."""
    payment_id: str
    status: str
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
