"""Payment provider connectors."""

from .base import ConnectorBase
from .models import PaymentState, ReconciliationState, RefundRecord
from .juspay import (
    JUSPAY_REFUND_EVENTS,
    JUSPAY_SUPPORTED_EVENTS,
    JuspayConnector,
    JuspayOrderStatusResponse,
    JuspayWebhook,
)
from .hyperswitch import HyperswitchConnector, HyperswitchPaymentResponse
from .currencies import amount_from_minor_units, get_currency_exponent

__all__ = [
    # Base classes and models
    "ConnectorBase",
    "PaymentState",
    "ReconciliationState",
    "RefundRecord",
    # Juspay
    "JUSPAY_REFUND_EVENTS",
    "JUSPAY_SUPPORTED_EVENTS",
    "JuspayConnector",
    "JuspayOrderStatusResponse",
    "JuspayWebhook",
    # Hyperswitch
    "HyperswitchConnector",
    "HyperswitchPaymentResponse",
    # Currencies
    "amount_from_minor_units",
    "get_currency_exponent",
]
