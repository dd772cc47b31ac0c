"""Construction of the canonical event reported to the ledger."""

from decimal import Decimal
from typing import Optional

from ..events import CanonicalEvent, TransactionEventType, available_actions


def build_canonical_event(
    event_type: TransactionEventType,
    psp_reference: str,
    amount: Decimal,
    event_name: str,
    provider_message: Optional[str] = None,
) -> CanonicalEvent:
    """Build the event for a resolved type.

    The provider's error detail is preferred as message; the webhook event
    name is used otherwise.
    """
    return CanonicalEvent(
        type=event_type,
        psp_reference=psp_reference,
        amount=amount,
        message=provider_message or event_name,
        available_actions=available_actions(event_type),
    )
