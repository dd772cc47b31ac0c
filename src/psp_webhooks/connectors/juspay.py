"""Juspay connector: order status reconciliation, refunds and webhook payloads."""

import base64
import logging
from decimal import Decimal
from typing import Dict, FrozenSet, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import MalformedPayload
from .base import ConnectorBase
from .models import ReconciliationState, RefundRecord

logger = logging.getLogger(__name__)

JUSPAY_SUPPORTED_EVENTS: FrozenSet[str] = frozenset([
    "ORDER_SUCCEEDED",
    "ORDER_FAILED",
    "ORDER_AUTHORIZED",
    "ORDER_VOIDED",
    "VOID_FAILED",
    "ORDER_CAPTURE_FAILED",
    "ORDER_AUTHENTICATION_FAILED",
    "ORDER_PARTIAL_CHARGED",
    "ORDER_REFUNDED",
    "ORDER_REFUND_FAILED",
    "REFUND_MANUAL_REVIEW_NEEDED",
    "AUTO_REFUND_INITIATED",
    "AUTO_REFUND_SUCCEEDED",
    "AUTO_REFUND_FAILED",
])

JUSPAY_REFUND_EVENTS: FrozenSet[str] = frozenset([
    "ORDER_REFUNDED",
    "ORDER_REFUND_FAILED",
    "REFUND_MANUAL_REVIEW_NEEDED",
    "AUTO_REFUND_INITIATED",
    "AUTO_REFUND_SUCCEEDED",
    "AUTO_REFUND_FAILED",
])


class JuspayTxnDetail(BaseModel):
    model_config = ConfigDict(extra="ignore")

    error_message: Optional[str] = None


class JuspayWebhookOrder(BaseModel):
    model_config = ConfigDict(extra="ignore")

    order_id: str
    udf1: Optional[str] = None  # base64 ledger transaction id
    udf2: Optional[str] = None  # base64 ledger API URL
    udf3: Optional[str] = None  # capture method
    txn_detail: Optional[JuspayTxnDetail] = None


class JuspayWebhookContent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    order: JuspayWebhookOrder


class JuspayWebhook(BaseModel):
    """Inbound Juspay order webhook."""
    model_config = ConfigDict(extra="ignore")

    event_name: str
    content: JuspayWebhookContent

    @property
    def is_refund(self) -> bool:
        return self.event_name in JUSPAY_REFUND_EVENTS

    @property
    def error_message(self) -> Optional[str]:
        txn_detail = self.content.order.txn_detail
        return txn_detail.error_message if txn_detail else None


class JuspayRefund(BaseModel):
    model_config = ConfigDict(extra="ignore")

    unique_request_id: str
    status: str
    amount: Optional[Decimal] = None


class JuspayOrderStatusResponse(BaseModel):
    """Subset of Juspay's ``GET /orders/{order_id}`` response."""
    model_config = ConfigDict(extra="ignore")

    order_id: str
    status: str
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    refunds: Optional[List[JuspayRefund]] = Field(default=None)

    def into_reconciliation_state(self) -> ReconciliationState:
        return ReconciliationState(
            provider_order_id=self.order_id,
            status=self.status,
            amount=self.amount,
            currency=self.currency,
            refunds=[
                RefundRecord(
                    correlation_id=refund.unique_request_id,
                    status=refund.status,
                    amount=refund.amount,
                )
                for refund in (self.refunds or [])
            ],
        )


def _parse_order_status(payload: Dict) -> ReconciliationState:
    try:
        response = JuspayOrderStatusResponse.model_validate(payload)
    except ValidationError as e:
        raise MalformedPayload(f"Unexpected Juspay order body: {e}") from e
    return response.into_reconciliation_state()


class JuspayConnector(ConnectorBase):
    """Juspay Express Checkout API client."""

    provider = "juspay"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        api_key: str,
        merchant_id: str,
        timeout: Optional[float] = None,
    ):
        super().__init__(http_client, base_url, timeout)
        self._api_key = api_key
        self._merchant_id = merchant_id

    def _auth_headers(self) -> Dict[str, str]:
        token = base64.b64encode(f"{self._api_key}:".encode()).decode()
        return {
            "Authorization": f"Basic {token}",
            "x-merchantid": self._merchant_id,
        }

    async def get_order_status(self, order_id: str) -> ReconciliationState:
        """Fetch the authoritative state of an order.

        Args:
            order_id: Juspay order identifier.

        Returns:
            ReconciliationState including every refund known to Juspay.

        Raises:
            UpstreamTransportError: If Juspay could not be reached or answered
                with an error.
            MalformedPayload: If the order body lacks required fields.
        """
        payload = await self._request("GET", f"/orders/{order_id}")
        state = _parse_order_status(payload)
        logger.info(f"Retrieved status {state.status} for Juspay order {order_id}")
        return state

    async def create_refund(
        self,
        order_id: str,
        unique_request_id: str,
        amount: Decimal,
    ) -> ReconciliationState:
        """Request a (partial) refund of an order.

        Args:
            order_id: Juspay order identifier.
            unique_request_id: Refund id, later echoed back in the order's refunds.
            amount: Amount to refund in major units.

        Returns:
            The order state returned by Juspay after the refund request.
        """
        payload = await self._request(
            "POST",
            f"/orders/{order_id}/refunds",
            form_body={"unique_request_id": unique_request_id, "amount": str(amount)},
        )
        return _parse_order_status(payload)

