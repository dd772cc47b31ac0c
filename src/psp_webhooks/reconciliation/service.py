"""Processing of inbound Juspay webhooks."""

import base64
import binascii
import json
import logging
from typing import Callable, Mapping, Optional, Sequence, Tuple

import httpx
from pydantic import ValidationError

from ..auth import verify_webhook_source
from ..config import get_provider_base_url, get_provider_http_timeout
from ..connectors.juspay import JUSPAY_SUPPORTED_EVENTS, JuspayConnector, JuspayWebhook
from ..connectors.models import ReconciliationState
from ..database import InstallationAuthRepository, Provider, ProviderConfigurationRepository
from ..errors import (
    AuthenticationMissing,
    MalformedPayload,
    MissingExpectedField,
    ProviderConfigurationMissing,
    SourceVerificationFailed,
)
from ..events import CaptureMode
from ..saleor import HistoryEvent, LedgerClient, SaleorClient
from .correlator import correlate_refund
from .models import OutcomeStatus, ReportTarget, WebhookOutcome
from .reporter import build_canonical_event
from .status_mapping import juspay_status_to_event_type

logger = logging.getLogger(__name__)

LedgerClientFactory = Callable[[str, str], LedgerClient]

AUTO_REFUNDED = "AUTO_REFUNDED"
AUTO_REFUND_REQUEST_EVENTS = frozenset(["AUTO_REFUND_INITIATED", "REFUND_MANUAL_REVIEW_NEEDED"])


def parse_event_name(body: bytes) -> Tuple[str, dict]:
    """Decode the raw body and extract the webhook event name.

    Raises:
        MalformedPayload: If the body is not a JSON object with an event name.
    """
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedPayload("Webhook body is not valid JSON") from e
    if not isinstance(payload, dict) or not isinstance(payload.get("event_name"), str):
        raise MalformedPayload("Webhook body has no event name")
    return payload["event_name"], payload


def decode_identifier(value: Optional[str], name: str) -> str:
    """Decode a base64 identifier embedded in the webhook's order fields.

    Raises:
        MalformedPayload: If the identifier is missing or not valid base64 text.
    """
    if not value:
        raise MalformedPayload(f"User defined field {name} not found in webhook")
    try:
        decoded = base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise MalformedPayload(f"User defined field {name} is not valid base64") from e
    if not decoded:
        raise MalformedPayload(f"User defined field {name} is empty")
    return decoded


def auto_refund_status(event_name: str, order_status: str) -> str:
    """Status to map for a blanket (auto) refund, derived from the event name."""
    if event_name in AUTO_REFUND_REQUEST_EVENTS:
        return "AUTO_REFUND_REQUEST"
    if event_name == "AUTO_REFUND_FAILED":
        return "AUTO_REFUND_FAILED"
    return order_status


def resolve_report_target(
    webhook: JuspayWebhook,
    state: ReconciliationState,
    history: Sequence[HistoryEvent],
) -> Optional[ReportTarget]:
    """Choose the status, amount and reference to report.

    Returns:
        The report target, or None when a refund webhook cannot be matched to
        a settled refund yet and nothing must be reported.
    """
    if not webhook.is_refund:
        return ReportTarget(
            status=state.status,
            amount=state.amount,
            psp_reference=state.provider_order_id,
        )

    if state.status == AUTO_REFUNDED:
        return ReportTarget(
            status=auto_refund_status(webhook.event_name, state.status),
            amount=state.amount,
            psp_reference=state.provider_order_id,
        )

    refund = correlate_refund(history, state.refunds)
    if refund is None:
        return None
    return ReportTarget(
        status=refund.status,
        amount=refund.amount,
        psp_reference=refund.correlation_id,
    )


class JuspayWebhookProcessor:
    """Verifies, reconciles and reports one Juspay webhook per call."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        installation_store: InstallationAuthRepository,
        configuration_store: ProviderConfigurationRepository,
        ledger_client_factory: Optional[LedgerClientFactory] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize the processor.

        Args:
            http_client: Shared HTTP client for provider and ledger calls.
            installation_store: Lookup of stored installation auth data.
            configuration_store: Lookup of channel-scoped provider credentials.
            ledger_client_factory: Builds a ledger client from an API URL and
                token. Defaults to SaleorClient.
            timeout: Provider call timeout in seconds.
        """
        self.http_client = http_client
        self.installation_store = installation_store
        self.configuration_store = configuration_store
        self._ledger_client_factory = ledger_client_factory or self._default_ledger_client
        self.timeout = timeout if timeout is not None else get_provider_http_timeout()

    def _default_ledger_client(self, saleor_api_url: str, token: str) -> LedgerClient:
        return SaleorClient(self.http_client, saleor_api_url, token)

    async def process(self, body: bytes, headers: Mapping[str, str]) -> WebhookOutcome:
        """Process a raw Juspay webhook.

        Args:
            body: Raw request body.
            headers: Request headers, including the provider's Basic credentials.

        Returns:
            WebhookOutcome telling whether an event was reported, the webhook
            was ignored, or the refund is still pending.

        Raises:
            WebhookProcessingError: Subclasses for every terminal failure.
        """
        event_name, payload = parse_event_name(body)
        if event_name not in JUSPAY_SUPPORTED_EVENTS:
            logger.info(f"Ignoring unsupported Juspay event {event_name}")
            return WebhookOutcome(status=OutcomeStatus.IGNORED, event_name=event_name)

        try:
            webhook = JuspayWebhook.model_validate(payload)
        except ValidationError as e:
            raise MalformedPayload(f"Invalid Juspay webhook body: {e}") from e

        order = webhook.content.order
        transaction_id = decode_identifier(order.udf1, "udf1")
        saleor_api_url = decode_identifier(order.udf2, "udf2")

        auth = await self.installation_store.get(saleor_api_url)
        if auth is None:
            raise AuthenticationMissing(f"No auth data stored for {saleor_api_url}")

        ledger = self._ledger_client_factory(saleor_api_url, auth.token)
        transaction = await ledger.get_transaction(transaction_id)
        if transaction is None:
            raise MissingExpectedField(f"Transaction {transaction_id} not found")
        if not transaction.channel_id:
            raise MissingExpectedField("Missing source object")
        logger.info(f"Fetched transaction {transaction_id} from ledger")

        config = await self.configuration_store.get_for_channel(
            saleor_api_url, transaction.channel_id, Provider.JUSPAY.value
        )
        if config is None or config.username is None or config.password is None:
            raise ProviderConfigurationMissing(
                f"No Juspay webhook credentials configured for channel {transaction.channel_id}"
            )

        if not verify_webhook_source(headers, config.username, config.password):
            logger.info("Source verification failed")
            raise SourceVerificationFailed("Webhook credentials do not match configuration")
        logger.info("Source verification successful")

        connector = JuspayConnector(
            self.http_client,
            base_url=get_provider_base_url(Provider.JUSPAY.value, config.environment),
            api_key=config.api_key,
            merchant_id=config.merchant_id or "",
            timeout=self.timeout,
        )
        state = await connector.get_order_status(order.order_id)
        logger.info("Retrieved status from Juspay")

        target = resolve_report_target(webhook, state, transaction.events)
        if target is None:
            logger.info(
                f"No settled refund matches {event_name} for order {order.order_id}, awaiting redelivery"
            )
            return WebhookOutcome(
                status=OutcomeStatus.PENDING,
                event_name=event_name,
                transaction_id=transaction_id,
            )

        if target.amount is None:
            raise MissingExpectedField("No amount value found")
        if not target.psp_reference:
            raise MissingExpectedField("No value of pspReference found")
        if not target.status:
            raise MissingExpectedField("No value of status found")

        event_type = juspay_status_to_event_type(
            target.status,
            webhook.is_refund,
            CaptureMode.parse(order.udf3),
            transaction.is_charge_flow,
        )
        event = build_canonical_event(
            event_type,
            psp_reference=target.psp_reference,
            amount=target.amount,
            event_name=event_name,
            provider_message=webhook.error_message,
        )

        result = await ledger.report_transaction_event(transaction_id, event)
        logger.info(f"Reported {event_type.value} for transaction {transaction_id}")
        return WebhookOutcome(
            status=OutcomeStatus.REPORTED,
            event_name=event_name,
            transaction_id=transaction_id,
            event=event,
            already_processed=result.already_processed,
        )
