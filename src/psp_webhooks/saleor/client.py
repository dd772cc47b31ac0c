"""GraphQL client for the Saleor transaction ledger."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from ..errors import LedgerClientError
from ..events import CanonicalEvent
from .models import HistoryEvent, TransactionDetails, TransactionEventReportResult

logger = logging.getLogger(__name__)

GET_TRANSACTION_BY_ID = """
query GetTransactionById($transactionId: ID!) {
  transaction(id: $transactionId) {
    id
    pspReference
    events {
      type
      pspReference
    }
    checkout {
      channel {
        id
      }
    }
    order {
      channel {
        id
      }
    }
  }
}
"""

TRANSACTION_EVENT_REPORT = """
mutation TransactionEventReport(
  $transactionId: ID!
  $amount: PositiveDecimal!
  $availableActions: [TransactionActionEnum!]!
  $externalUrl: String!
  $message: String
  $pspReference: String!
  $time: DateTime!
  $type: TransactionEventTypeEnum!
) {
  transactionEventReport(
    id: $transactionId
    amount: $amount
    availableActions: $availableActions
    externalUrl: $externalUrl
    message: $message
    pspReference: $pspReference
    time: $time
    type: $type
  ) {
    alreadyProcessed
    errors {
      field
      message
      code
    }
  }
}
"""


class LedgerClient(ABC):
    """Operations the engine needs from the platform ledger."""

    @abstractmethod
    async def get_transaction(self, transaction_id: str) -> Optional[TransactionDetails]:
        raise NotImplementedError

    @abstractmethod
    async def report_transaction_event(
        self,
        transaction_id: str,
        event: CanonicalEvent,
    ) -> TransactionEventReportResult:
        raise NotImplementedError


class SaleorClient(LedgerClient):
    """Saleor GraphQL API client authenticated with the app token."""

    def __init__(self, http_client: httpx.AsyncClient, saleor_api_url: str, token: str):
        self.http_client = http_client
        self.saleor_api_url = saleor_api_url
        self._token = token

    async def _execute(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await self.http_client.post(
                self.saleor_api_url,
                json={"query": query, "variables": variables},
                headers={"Authorization": f"Bearer {self._token}"},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise LedgerClientError(f"Saleor request failed: {e}") from e
        except ValueError as e:
            raise LedgerClientError("Saleor returned a non-JSON body") from e

        if not isinstance(payload, dict):
            raise LedgerClientError("Saleor returned an unexpected body")
        if payload.get("errors"):
            messages = "; ".join(str(err.get("message")) for err in payload["errors"])
            raise LedgerClientError(f"Saleor GraphQL errors: {messages}")
        return payload.get("data") or {}

    async def get_transaction(self, transaction_id: str) -> Optional[TransactionDetails]:
        """Fetch a transaction with its event history and channel.

        Args:
            transaction_id: Ledger transaction identifier.

        Returns:
            TransactionDetails, or None if the ledger does not know the transaction.
        """
        data = await self._execute(GET_TRANSACTION_BY_ID, {"transactionId": transaction_id})
        transaction = data.get("transaction")
        if not transaction:
            return None

        source_object = transaction.get("checkout") or transaction.get("order") or {}
        channel = source_object.get("channel") or {}
        return TransactionDetails(
            id=transaction["id"],
            psp_reference=transaction.get("pspReference"),
            channel_id=channel.get("id"),
            events=[
                HistoryEvent(type=event["type"], psp_reference=event.get("pspReference"))
                for event in transaction.get("events") or []
            ],
        )

    async def report_transaction_event(
        self,
        transaction_id: str,
        event: CanonicalEvent,
    ) -> TransactionEventReportResult:
        """Report a canonical event on a transaction.

        Raises:
            LedgerClientError: If the mutation failed or returned errors.
        """
        data = await self._execute(TRANSACTION_EVENT_REPORT, event.to_report_variables(transaction_id))
        result = data.get("transactionEventReport") or {}
        errors = result.get("errors") or []
        if errors:
            messages = "; ".join(str(err.get("message")) for err in errors)
            raise LedgerClientError(f"Transaction event report rejected: {messages}")

        already_processed = bool(result.get("alreadyProcessed"))
        if already_processed:
            logger.info(
                f"Event {event.type.value} for {event.psp_reference} was already processed"
            )
        return TransactionEventReportResult(already_processed=already_processed)
