"""Canonical transaction-event model shared by every provider integration."""

import enum
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, FrozenSet

from pydantic import BaseModel, Field


class TransactionEventType(str, enum.Enum):
    """Provider-neutral transaction event types, valued as the ledger expects them."""
    AUTHORIZATION_SUCCESS = "AUTHORIZATION_SUCCESS"
    AUTHORIZATION_FAILURE = "AUTHORIZATION_FAILURE"
    AUTHORIZATION_ACTION_REQUIRED = "AUTHORIZATION_ACTION_REQUIRED"
    CHARGE_SUCCESS = "CHARGE_SUCCESS"
    CHARGE_FAILURE = "CHARGE_FAILURE"
    CHARGE_ACTION_REQUIRED = "CHARGE_ACTION_REQUIRED"
    CANCEL_SUCCESS = "CANCEL_SUCCESS"
    CANCEL_FAILURE = "CANCEL_FAILURE"
    REFUND_SUCCESS = "REFUND_SUCCESS"
    REFUND_FAILURE = "REFUND_FAILURE"
    REFUND_REQUEST = "REFUND_REQUEST"


class TransactionAction(str, enum.Enum):
    """Follow-up actions the ledger may offer on a transaction."""
    CHARGE = "CHARGE"
    REFUND = "REFUND"
    CANCEL = "CANCEL"


class CaptureMode(str, enum.Enum):
    """Settlement configuration attached to the order by the storefront."""
    MANUAL = "manual"
    AUTOMATIC = "automatic"
    UNSET = "unset"

    @classmethod
    def parse(cls, value: Any) -> "CaptureMode":
        """Parse a raw capture method; anything unrecognised is UNSET."""
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.UNSET


_AVAILABLE_ACTIONS: Dict[TransactionEventType, FrozenSet[TransactionAction]] = {
    TransactionEventType.AUTHORIZATION_SUCCESS: frozenset(
        {TransactionAction.CANCEL, TransactionAction.CHARGE}
    ),
    TransactionEventType.CHARGE_SUCCESS: frozenset({TransactionAction.REFUND}),
}


def available_actions(event_type: TransactionEventType) -> FrozenSet[TransactionAction]:
    """Return the actions the ledger should offer after an event of this type."""
    return _AVAILABLE_ACTIONS.get(event_type, frozenset())


class CanonicalEvent(BaseModel):
    """The single event reported to the ledger for one processed webhook."""
    type: TransactionEventType
    psp_reference: str
    amount: Decimal
    message: str = ""
    available_actions: FrozenSet[TransactionAction] = Field(default_factory=frozenset)
    time: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_report_variables(self, transaction_id: str) -> Dict[str, Any]:
        """Build the variables of the ledger's transaction event report mutation."""
        return {
            "transactionId": transaction_id,
            "type": self.type.value,
            "pspReference": self.psp_reference,
            "amount": str(self.amount),
            "availableActions": sorted(action.value for action in self.available_actions),
            "message": self.message,
            "time": self.time.isoformat(),
            "externalUrl": "",
        }
