"""Ledger-side transaction data consumed by the webhook engine."""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..events import TransactionEventType


class HistoryEvent(BaseModel):
    """A previously reported event of a transaction."""
    type: str
    psp_reference: Optional[str] = None


class TransactionDetails(BaseModel):
    """Transaction as known to the ledger."""
    id: str
    psp_reference: Optional[str] = None
    channel_id: Optional[str] = Field(None, description="Channel of the checkout or order")
    events: List[HistoryEvent] = Field(default_factory=list)

    @property
    def is_charge_flow(self) -> bool:
        """True once the authorization step of the transaction succeeded."""
        return any(
            event.type == TransactionEventType.AUTHORIZATION_SUCCESS.value
            for event in self.events
        )


class TransactionEventReportResult(BaseModel):
    already_processed: bool = False
