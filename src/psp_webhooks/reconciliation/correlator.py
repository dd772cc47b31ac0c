"""Matching of refund webhooks to the refund the ledger requested."""

from typing import Iterable, Optional, Sequence

from ..connectors.models import RefundRecord
from ..events import TransactionEventType
from ..saleor.models import HistoryEvent


def correlate_refund(
    history: Iterable[HistoryEvent],
    refunds: Sequence[RefundRecord],
) -> Optional[RefundRecord]:
    """Find the refund to report for a refund webhook.

    Refund request events are scanned in history order; for each, the
    provider's refunds are scanned in order for one with the same correlation
    id that is no longer pending. The first such refund wins.

    Args:
        history: Events previously reported on the transaction.
        refunds: Every refund the provider knows for the order.

    Returns:
        The matching refund, or None if no requested refund has settled yet.
    """
    return next(
        (
            refund
            for event in history
            if event.type == TransactionEventType.REFUND_REQUEST.value
            for refund in refunds
            if refund.correlation_id == event.psp_reference and not refund.is_pending
        ),
        None,
    )
