"""Webhook reconciliation and status mapping.

Inbound provider webhooks are never trusted as the source of truth: the
provider is re-queried for the order's current state, the state is mapped to
a canonical transaction event, refunds are correlated with the refund
requests recorded by the ledger, and one event is reported back.
"""

from .models import OutcomeStatus, ReportTarget, WebhookOutcome
from .status_mapping import (
    hyperswitch_cancel_status_to_event_type,
    juspay_status_to_event_type,
)
from .correlator import correlate_refund
from .reporter import build_canonical_event
from .service import (
    JuspayWebhookProcessor,
    auto_refund_status,
    decode_identifier,
    parse_event_name,
    resolve_report_target,
)

__all__ = [
    # Models
    "OutcomeStatus",
    "ReportTarget",
    "WebhookOutcome",
    # Status mapping
    "hyperswitch_cancel_status_to_event_type",
    "juspay_status_to_event_type",
    # Core components
    "correlate_refund",
    "build_canonical_event",
    "JuspayWebhookProcessor",
    "auto_refund_status",
    "decode_identifier",
    "parse_event_name",
    "resolve_report_target",
]
