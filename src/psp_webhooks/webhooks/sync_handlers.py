"""Handlers for the ledger's synchronous transaction action webhooks.

The ledger calls these when a staff user or the storefront requests an action
on a transaction; the HTTP response body carries the result back.
"""

import logging
import uuid
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_serializer

from ..config import get_provider_base_url, get_provider_http_timeout
from ..connectors.hyperswitch import HyperswitchConnector
from ..connectors.juspay import JuspayConnector
from ..database import Provider, ProviderConfiguration, ProviderConfigurationRepository
from ..errors import MissingExpectedField, ProviderConfigurationMissing, UnexpectedProviderStatus
from ..events import TransactionEventType
from ..reconciliation.status_mapping import hyperswitch_cancel_status_to_event_type

logger = logging.getLogger(__name__)


class SyncChannel(BaseModel):
    id: str


class SyncSourceObject(BaseModel):
    channel: SyncChannel


class SyncTransaction(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    psp_reference: Optional[str] = Field(None, alias="pspReference")
    source_object: Optional[SyncSourceObject] = Field(None, alias="sourceObject")


class SyncAction(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    amount: Decimal
    action_type: Optional[str] = Field(None, alias="actionType")


class TransactionActionRequestedEvent(BaseModel):
    """Payload of the cancelation-requested and refund-requested webhooks."""
    model_config = ConfigDict(extra="ignore")

    action: SyncAction
    transaction: SyncTransaction

    @property
    def channel_id(self) -> str:
        if self.transaction.source_object is None:
            raise MissingExpectedField("Missing sourceObject")
        return self.transaction.source_object.channel.id


class TransactionActionResponse(BaseModel):
    """Sync webhook response; without a result the ledger records a request."""
    model_config = ConfigDict(populate_by_name=True)

    psp_reference: Optional[str] = Field(None, alias="pspReference")
    result: Optional[TransactionEventType] = None
    amount: Optional[Decimal] = None
    message: Optional[str] = None

    @field_serializer("amount")
    def serialize_amount(self, amount: Optional[Decimal]) -> Optional[float]:
        return float(amount) if amount is not None else None

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


async def _get_configuration(
    configuration_store: ProviderConfigurationRepository,
    saleor_api_url: str,
    channel_id: str,
    provider: Provider,
) -> ProviderConfiguration:
    config = await configuration_store.get_for_channel(saleor_api_url, channel_id, provider.value)
    if config is None:
        raise ProviderConfigurationMissing(
            f"No {provider.value} configuration for channel {channel_id}"
        )
    return config


async def handle_cancelation_requested(
    event: TransactionActionRequestedEvent,
    saleor_api_url: str,
    configuration_store: ProviderConfigurationRepository,
    http_client: httpx.AsyncClient,
    timeout: Optional[float] = None,
) -> TransactionActionResponse:
    """Cancel a Hyperswitch payment and translate the outcome.

    A ``processing`` cancellation and an unknown Hyperswitch status both yield
    a response without result, so no success or failure is recorded.

    Raises:
        UpstreamTransportError: If the cancel call fails.
    """
    channel_id = event.channel_id
    payment_id = event.transaction.psp_reference
    if not payment_id:
        raise MissingExpectedField("Transaction has no pspReference to cancel")

    config = await _get_configuration(
        configuration_store, saleor_api_url, channel_id, Provider.HYPERSWITCH
    )
    connector = HyperswitchConnector(
        http_client,
        base_url=get_provider_base_url(Provider.HYPERSWITCH.value, config.environment),
        api_key=config.api_key,
        timeout=timeout if timeout is not None else get_provider_http_timeout(),
    )
    payment = await connector.cancel_payment(
        payment_id,
        channel_id=channel_id,
        transaction_id=event.transaction.id,
        saleor_api_url=saleor_api_url,
    )

    try:
        result = hyperswitch_cancel_status_to_event_type(payment.status)
    except UnexpectedProviderStatus as e:
        logger.warning(f"Cancellation of {payment.payment_id} returned {payment.status}: {e}")
        return TransactionActionResponse(
            psp_reference=payment.payment_id,
            message=f"Unexpected status: {e}",
        )
    if result is None:
        logger.info(f"Cancellation of {payment.payment_id} is still processing")
        return TransactionActionResponse(psp_reference=payment.payment_id, message="processing")

    return TransactionActionResponse(
        psp_reference=payment.payment_id,
        result=result,
        amount=payment.amount,
    )


async def handle_refund_requested(
    event: TransactionActionRequestedEvent,
    saleor_api_url: str,
    configuration_store: ProviderConfigurationRepository,
    http_client: httpx.AsyncClient,
    timeout: Optional[float] = None,
) -> TransactionActionResponse:
    """Request a Juspay refund for the transaction.

    The generated unique request id is returned as psp reference, so the
    ledger records a refund request that later refund webhooks correlate with.
    """
    channel_id = event.channel_id
    order_id = event.transaction.psp_reference
    if not order_id:
        raise MissingExpectedField("Transaction has no pspReference to refund")

    config = await _get_configuration(
        configuration_store, saleor_api_url, channel_id, Provider.JUSPAY
    )
    connector = JuspayConnector(
        http_client,
        base_url=get_provider_base_url(Provider.JUSPAY.value, config.environment),
        api_key=config.api_key,
        merchant_id=config.merchant_id or "",
        timeout=timeout if timeout is not None else get_provider_http_timeout(),
    )
    unique_request_id = uuid.uuid4().hex
    await connector.create_refund(order_id, unique_request_id, event.action.amount)
    logger.info(f"Requested Juspay refund {unique_request_id} for order {order_id}")
    return TransactionActionResponse(psp_reference=unique_request_id)


def failure_response(
    event: TransactionActionRequestedEvent,
    result: TransactionEventType,
    message: str,
) -> TransactionActionResponse:
    """Response reporting a failed action for the requested amount."""
    return TransactionActionResponse(
        psp_reference=event.transaction.psp_reference,
        result=result,
        amount=event.action.amount,
        message=message,
    )
