"""Hyperswitch connector used by the cancellation flow."""

import logging
from decimal import Decimal
from typing import Dict, Optional

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from ..errors import MalformedPayload
from .base import ConnectorBase
from .currencies import amount_from_minor_units
from .models import PaymentState

logger = logging.getLogger(__name__)


class HyperswitchPaymentResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    payment_id: str
    status: str
    amount: Optional[Decimal] = None  # minor units
    currency: Optional[str] = None

    def into_payment_state(self) -> PaymentState:
        return PaymentState(
            payment_id=self.payment_id,
            status=self.status,
            amount=amount_from_minor_units(self.amount, self.currency),
            currency=self.currency,
        )


class HyperswitchConnector(ConnectorBase):
    """Hyperswitch payments API client."""

    provider = "hyperswitch"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        api_key: str,
        timeout: Optional[float] = None,
    ):
        super().__init__(http_client, base_url, timeout)
        self._api_key = api_key

    def _auth_headers(self) -> Dict[str, str]:
        return {"api-key": self._api_key}

    async def cancel_payment(
        self,
        payment_id: str,
        channel_id: str,
        transaction_id: str,
        saleor_api_url: str,
    ) -> PaymentState:
        """Cancel (void) a payment.

        Args:
            payment_id: Hyperswitch payment identifier.
            channel_id: Ledger channel the transaction belongs to.
            transaction_id: Ledger transaction identifier.
            saleor_api_url: Ledger API URL of the installation.

        Returns:
            PaymentState with the amount converted to major units.
        """
        payload = await self._request(
            "POST",
            f"/payments/{payment_id}/cancel",
            json_body={
                "metadata": {
                    "channel_id": channel_id,
                    "transaction_id": transaction_id,
                    "saleor_api_url": saleor_api_url,
                },
            },
        )
        try:
            response = HyperswitchPaymentResponse.model_validate(payload)
        except ValidationError as e:
            raise MalformedPayload(f"Unexpected Hyperswitch payment body: {e}") from e
        state = response.into_payment_state()
        logger.info(f"Hyperswitch payment {payment_id} cancel returned status {state.status}")
        return state
