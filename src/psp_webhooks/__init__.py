# psp_webhooks package
__version__ = "0.1.0"

from .events import (
    CanonicalEvent,
    CaptureMode,
    TransactionAction,
    TransactionEventType,
    available_actions,
)
from .errors import (
    AuthenticationMissing,
    LedgerClientError,
    MalformedPayload,
    MissingExpectedField,
    ProviderConfigurationMissing,
    SourceVerificationFailed,
    UnexpectedProviderStatus,
    UpstreamTransportError,
    WebhookProcessingError,
)
from .auth import verify_webhook_source

# Reconciliation exports
from .reconciliation import (
    JuspayWebhookProcessor,
    OutcomeStatus,
    WebhookOutcome,
    correlate_refund,
    hyperswitch_cancel_status_to_event_type,
    juspay_status_to_event_type,
)
